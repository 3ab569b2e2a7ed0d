"""Editor modes and the normal-mode command grammar."""

from .base_mode import (
    ActionRequest,
    KeyInput,
    Mode,
    ModeBus,
    ModeContext,
    ModeName,
    ModeResult,
)
from .operator_pipeline import MotionTarget, OperatorRange, PendingCommand
from .normal_mode import NormalMode
from .insert_mode import InsertMode
from .command_mode import CommandMode

__all__ = [
    "ActionRequest",
    "KeyInput",
    "Mode",
    "ModeBus",
    "ModeContext",
    "ModeName",
    "ModeResult",
    "MotionTarget",
    "OperatorRange",
    "PendingCommand",
    "NormalMode",
    "InsertMode",
    "CommandMode",
]
