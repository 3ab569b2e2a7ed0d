"""Exception taxonomy for the editor core.

Defects (``OutOfBounds``, ``NoOpenGroup``) propagate out of the session;
everything else is a user-facing condition that the caller turns into a
status-line message.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence


class RuneError(Exception):
    """Base class for every error raised by the editor core."""


class OutOfBounds(RuneError, IndexError):
    """A position or range does not address the current document."""

    def __init__(self, message: str, *, position: Optional[tuple] = None) -> None:
        super().__init__(message)
        self.position = position


class NoOpenGroup(RuneError, RuntimeError):
    """An edit was recorded (or a group closed) with no undo group open."""


class NothingToUndo(RuneError):
    """The undo history is empty."""


class NothingToRedo(RuneError):
    """Nothing has been undone since the last change."""


class InvalidKeySequence(RuneError):
    """Buffered keys that neither match nor prefix any binding."""

    def __init__(self, tokens: Sequence[str]) -> None:
        super().__init__(f"No binding for {' '.join(tokens)!r}")
        self.tokens = tuple(tokens)


class DecodeError(RuneError):
    """A file could not be decoded as UTF-8."""

    def __init__(self, path: Path | str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = Path(path)
        self.reason = reason


class SaveError(RuneError):
    """Writing the buffer to disk failed; the buffer is left untouched."""

    def __init__(self, path: Path | str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = Path(path)
        self.reason = reason


class UnrecognizedCommand(RuneError):
    """Text submitted at the ``:`` prompt that names no command."""

    def __init__(self, command: str) -> None:
        super().__init__(f"Not an editor command: {command}")
        self.command = command


class ConfigError(RuneError):
    """A configuration file entry could not be understood."""

    def __init__(self, message: str, *, source: Optional[str] = None) -> None:
        super().__init__(f"{source}: {message}" if source else message)
        self.source = source


__all__ = [
    "ConfigError",
    "DecodeError",
    "InvalidKeySequence",
    "NoOpenGroup",
    "NothingToRedo",
    "NothingToUndo",
    "OutOfBounds",
    "RuneError",
    "SaveError",
    "UnrecognizedCommand",
]
