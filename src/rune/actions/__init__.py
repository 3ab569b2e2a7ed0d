"""High-level editing verbs reused across modes."""

from . import command, core, motions, operators
from .command import submit_command_line
from .core import insert_text

__all__ = [
    "command",
    "core",
    "insert_text",
    "motions",
    "operators",
    "submit_command_line",
]
