"""Base classes and shared utilities for editor modes."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Optional, Tuple

from rune.buffer import Buffer, RegisterBank


class ModeName(str, Enum):
    NORMAL = "normal"
    INSERT = "insert"
    COMMAND = "command"

    @property
    def label(self) -> str:
        return self.value.upper()


@dataclass(slots=True)
class KeyInput:
    """Normalized key event passed to modes.

    ``key`` is the printable character for text keys and an upper-case name
    (``ESC``, ``ENTER``, ``BACKSPACE``, ``LEFT`` ...) for special keys.
    """

    key: str
    modifiers: Tuple[str, ...] = ()
    text: Optional[str] = None

    @classmethod
    def char(cls, value: str) -> "KeyInput":
        return cls(key=value, text=value)


@dataclass(slots=True)
class ModeResult:
    """Result returned from ``Mode.handle_key``.

    ``status`` is a machine-readable outcome; ``message`` is text for the
    status line and stays ``None`` unless the user should see something.
    """

    consumed: bool
    switch_to: Optional[str] = None
    status: str = "ok"
    message: Optional[str] = None
    timeout_ms: Optional[int] = None


@dataclass(frozen=True, slots=True)
class ActionRequest:
    """Arguments the interpreter hands to an action handler."""

    count: int = 1
    explicit_count: bool = False
    for_operator: bool = False
    # Insert mode lets the cursor rest after the last cluster.
    past_end: bool = False
    operator_id: Optional[str] = None
    key: Optional[KeyInput] = None


@dataclass(slots=True)
class ModeContext:
    """Shared services every mode can access."""

    buffer: Buffer
    registers: RegisterBank
    bus: "ModeBus"
    extras: Dict[str, object] = field(default_factory=dict)


class ModeBus:
    """Minimal event bus letting modes exchange structured signals."""

    def __init__(self) -> None:
        self._subscribers: Dict[str, list[Callable[[object], None]]] = {}

    def subscribe(self, event: str, callback: Callable[[object], None]) -> None:
        self._subscribers.setdefault(event, []).append(callback)

    def emit(self, event: str, payload: object | None = None) -> None:
        for callback in self._subscribers.get(event, []):
            callback(payload)


class Mode:
    """Base class all concrete editor modes inherit from."""

    name: str = "mode"

    def __init__(self, context: ModeContext) -> None:
        self.context = context

    def on_enter(self, previous: Optional[str]) -> None:  # pragma: no cover - default no-op
        del previous

    def on_exit(self, next_mode: Optional[str]) -> None:  # pragma: no cover - default no-op
        del next_mode

    def handle_key(self, key: KeyInput) -> ModeResult:  # pragma: no cover - abstract override
        raise NotImplementedError

    def handle_timeout(self) -> ModeResult:
        """Invoked by the manager when a pending key sequence expires."""

        return ModeResult(consumed=False, status="timeout")

    @property
    def pending_display(self) -> str:
        """Keys typed so far for an unfinished command, for the status line."""

        return ""
