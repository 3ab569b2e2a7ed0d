"""Count / operator / motion bookkeeping for the normal-mode grammar."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional, Tuple

from rune.buffer import Position, TextDocument

if TYPE_CHECKING:
    from rune.keymaps.models import ActionRef


@dataclass(frozen=True, slots=True)
class MotionTarget:
    """Where a motion lands and how an operator should treat the span."""

    position: Position
    inclusive: bool = False
    linewise: bool = False
    keep_column: bool = False


@dataclass(frozen=True, slots=True)
class OperatorRange:
    """Half-open span an operator acts on.

    For linewise ranges ``start`` is column 0 of the first line and ``end``
    the end of the last line.
    """

    start: Position
    end: Position
    linewise: bool = False

    @property
    def empty(self) -> bool:
        return not self.linewise and self.start == self.end

    @property
    def first_line(self) -> int:
        return self.start.line

    @property
    def last_line(self) -> int:
        return self.end.line


@dataclass(slots=True)
class PendingCommand:
    """Partially typed normal-mode command.

    Digits typed before an operator go to ``count_digits``; digits typed
    after it go to ``motion_digits``. ``keys`` buffers tokens of a sequence
    that is still a prefix of some binding (``g`` before ``gg``).
    """

    count_digits: str = ""
    operator: Optional[ActionRef] = None
    operator_tokens: Tuple[str, ...] = ()
    motion_digits: str = ""
    keys: List[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.count_digits or self.operator or self.motion_digits or self.keys)

    @property
    def count(self) -> int:
        return int(self.count_digits or 1) * int(self.motion_digits or 1)

    @property
    def explicit_count(self) -> bool:
        return bool(self.count_digits or self.motion_digits)

    def accepts_digit(self, token: str) -> bool:
        """A digit extends the count unless it is a leading ``0``."""

        if len(token) != 1 or not token.isdigit() or self.keys:
            return False
        digits = self.motion_digits if self.operator else self.count_digits
        return token != "0" or bool(digits)

    def push_digit(self, token: str) -> None:
        if self.operator:
            self.motion_digits += token
        else:
            self.count_digits += token

    def set_operator(self, operator: ActionRef, tokens: Tuple[str, ...]) -> None:
        self.operator = operator
        self.operator_tokens = tokens
        self.keys.clear()

    def clear(self) -> None:
        self.count_digits = ""
        self.operator = None
        self.operator_tokens = ()
        self.motion_digits = ""
        self.keys.clear()

    def tokens(self) -> Tuple[str, ...]:
        return (
            tuple(self.count_digits)
            + self.operator_tokens
            + tuple(self.motion_digits)
            + tuple(self.keys)
        )

    def describe(self) -> str:
        return "".join(self.tokens())


def motion_range(document: TextDocument, origin: Position, target: MotionTarget) -> OperatorRange:
    """Span between the cursor and a motion target, ordered."""

    start, end = sorted((Position(*origin), Position(*target.position)))
    if target.linewise:
        return line_range(document, start.line, end.line - start.line + 1)
    if target.inclusive:
        limit = document.grapheme_count(end.line)
        end = Position(end.line, min(end.col + 1, limit))
    return OperatorRange(start=start, end=end)


def line_range(document: TextDocument, first_line: int, count: int) -> OperatorRange:
    """``count`` whole lines starting at ``first_line``, clamped to the document."""

    last_line = min(first_line + max(count, 1) - 1, document.line_count() - 1)
    return OperatorRange(
        start=Position(first_line, 0),
        end=Position(last_line, document.grapheme_count(last_line)),
        linewise=True,
    )


__all__ = [
    "MotionTarget",
    "OperatorRange",
    "PendingCommand",
    "line_range",
    "motion_range",
]
