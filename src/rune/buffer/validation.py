"""Validation helpers shared across buffer services."""

from __future__ import annotations

from rune.errors import OutOfBounds

from .document import TextDocument
from .state import Position


def ensure_position(document: TextDocument, position: Position) -> Position:
    line, col = position
    if line < 0 or line >= document.line_count():
        raise OutOfBounds("Line out of range", position=(line, col))
    if col < 0 or col > document.grapheme_count(line):
        raise OutOfBounds("Column out of range", position=(line, col))
    return Position(line, col)


def clamp_position(
    document: TextDocument, position: Position, *, past_end: bool = True
) -> Position:
    """Pull ``position`` back into the document.

    With ``past_end`` false the column stays on a cluster, as the cursor does
    in normal mode.
    """

    line = min(max(position[0], 0), document.line_count() - 1)
    count = document.grapheme_count(line)
    limit = count if past_end else max(count - 1, 0)
    col = min(max(position[1], 0), limit)
    return Position(line, col)


def first_non_blank(document: TextDocument, line: int) -> int:
    clusters = document.line(line)
    for offset, cluster in enumerate(clusters):
        if not cluster.isspace():
            return offset
    return max(len(clusters) - 1, 0) if clusters else 0
