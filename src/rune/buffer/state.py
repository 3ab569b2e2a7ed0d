"""Cursor and change tracking state for buffers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple, Optional


class Position(NamedTuple):
    """Line index and grapheme offset; ordered lexicographically."""

    line: int
    col: int


Cursor = Position


@dataclass(slots=True)
class BufferState:
    """Cursor and the column vertical motions aim for."""

    cursor: Position = Position(0, 0)
    # Display column that vertical motions try to keep.
    preferred_column: Optional[int] = None

    def set_cursor(self, line: int, col: int, *, keep_column: bool = False) -> None:
        self.cursor = Position(line, col)
        if not keep_column:
            self.preferred_column = None
