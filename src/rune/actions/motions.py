"""Cursor motions shared by normal-mode navigation and operators.

Every motion takes the buffer and an :class:`ActionRequest` and returns a
:class:`MotionTarget`; it never moves the cursor itself. The interpreter
either moves the cursor to the target or hands the cursor..target span to
an operator.
"""

from __future__ import annotations

from rune.buffer import Buffer, Position, TextDocument, first_non_blank
from rune.buffer.text import cluster_class
from rune.modes.base_mode import ActionRequest
from rune.modes.operator_pipeline import MotionTarget


def _last_col(document: TextDocument, line: int, request: ActionRequest) -> int:
    count = document.grapheme_count(line)
    if request.for_operator or request.past_end:
        return count
    return max(count - 1, 0)


def move_left(buffer: Buffer, request: ActionRequest) -> MotionTarget:
    line, col = buffer.cursor
    return MotionTarget(Position(line, max(col - request.count, 0)))


def move_right(buffer: Buffer, request: ActionRequest) -> MotionTarget:
    line, col = buffer.cursor
    limit = _last_col(buffer.document, line, request)
    return MotionTarget(Position(line, min(col + request.count, limit)))


def _vertical(buffer: Buffer, request: ActionRequest, direction: int) -> MotionTarget:
    document = buffer.document
    line, col = buffer.cursor
    target = min(max(line + direction * request.count, 0), document.line_count() - 1)
    if buffer.state.preferred_column is None:
        buffer.state.preferred_column = document.offset_to_column(line, col)
    offset = document.column_to_offset(target, buffer.state.preferred_column)
    offset = min(offset, _last_col(document, target, request))
    return MotionTarget(Position(target, offset), linewise=True, keep_column=True)


def move_down(buffer: Buffer, request: ActionRequest) -> MotionTarget:
    return _vertical(buffer, request, 1)


def move_up(buffer: Buffer, request: ActionRequest) -> MotionTarget:
    return _vertical(buffer, request, -1)


def line_start(buffer: Buffer, request: ActionRequest) -> MotionTarget:
    del request
    return MotionTarget(Position(buffer.cursor.line, 0))


def line_end(buffer: Buffer, request: ActionRequest) -> MotionTarget:
    document = buffer.document
    line = min(buffer.cursor.line + request.count - 1, document.line_count() - 1)
    count = document.grapheme_count(line)
    if request.past_end:
        return MotionTarget(Position(line, count))
    return MotionTarget(Position(line, max(count - 1, 0)), inclusive=True)


def _goto_line(buffer: Buffer, line: int) -> MotionTarget:
    document = buffer.document
    line = min(max(line, 0), document.line_count() - 1)
    return MotionTarget(Position(line, first_non_blank(document, line)), linewise=True)


def goto_top(buffer: Buffer, request: ActionRequest) -> MotionTarget:
    return _goto_line(buffer, request.count - 1 if request.explicit_count else 0)


def goto_bottom(buffer: Buffer, request: ActionRequest) -> MotionTarget:
    if request.explicit_count:
        return _goto_line(buffer, request.count - 1)
    return _goto_line(buffer, buffer.document.line_count() - 1)


def next_word_start(document: TextDocument, position: Position) -> Position:
    line, col = position
    clusters = document.line(line)
    if col < len(clusters):
        kind = cluster_class(clusters[col])
        if kind:
            while col < len(clusters) and cluster_class(clusters[col]) == kind:
                col += 1
    while True:
        while col < len(clusters) and cluster_class(clusters[col]) == 0:
            col += 1
        if col < len(clusters):
            return Position(line, col)
        if line + 1 >= document.line_count():
            return Position(line, len(clusters))
        line += 1
        clusters = document.line(line)
        col = 0
        if not clusters:
            # An empty line counts as a word of its own.
            return Position(line, 0)


def previous_word_start(document: TextDocument, position: Position) -> Position:
    line, col = position
    clusters = document.line(line)
    col -= 1
    while True:
        while col >= 0 and cluster_class(clusters[col]) == 0:
            col -= 1
        if col >= 0:
            break
        if line == 0:
            return Position(0, 0)
        line -= 1
        clusters = document.line(line)
        col = len(clusters) - 1
        if not clusters:
            return Position(line, 0)
    kind = cluster_class(clusters[col])
    while col > 0 and cluster_class(clusters[col - 1]) == kind:
        col -= 1
    return Position(line, col)


def next_word_end(document: TextDocument, position: Position) -> Position:
    line, col = position
    clusters = document.line(line)
    col += 1
    while True:
        while col < len(clusters) and cluster_class(clusters[col]) == 0:
            col += 1
        if col < len(clusters):
            break
        if line + 1 >= document.line_count():
            return Position(line, max(len(clusters) - 1, 0))
        line += 1
        clusters = document.line(line)
        col = 0
    kind = cluster_class(clusters[col])
    while col + 1 < len(clusters) and cluster_class(clusters[col + 1]) == kind:
        col += 1
    return Position(line, col)


def word_forward(buffer: Buffer, request: ActionRequest) -> MotionTarget:
    document = buffer.document
    position = buffer.cursor
    for step in range(request.count):
        start = position
        position = next_word_start(document, position)
        if position == start:
            break
        if request.for_operator and position.line > start.line:
            line_end = document.grapheme_count(start.line)
            if step + 1 < request.count or start.col >= line_end:
                # A count still running at the line end takes the line break.
                return MotionTarget(Position(start.line + 1, 0))
            # The last word moved over ended its line: the operator stops there.
            return MotionTarget(Position(start.line, line_end))
    return MotionTarget(position)


def change_word(buffer: Buffer, request: ActionRequest) -> MotionTarget:
    """``cw`` on a non-blank stops at the end of the word, like ``ce``."""

    document = buffer.document
    position = buffer.cursor
    line, col = position
    clusters = document.line(line)
    if col >= len(clusters) or cluster_class(clusters[col]) == 0:
        return word_forward(buffer, request)
    steps = request.count
    kind = cluster_class(clusters[col])
    if col + 1 >= len(clusters) or cluster_class(clusters[col + 1]) != kind:
        # Already on the last cluster of a word.
        steps -= 1
    for _ in range(steps):
        position = next_word_end(document, position)
    return MotionTarget(position, inclusive=True)


def word_backward(buffer: Buffer, request: ActionRequest) -> MotionTarget:
    position = buffer.cursor
    for _ in range(request.count):
        position = previous_word_start(buffer.document, position)
    return MotionTarget(position)


def word_end(buffer: Buffer, request: ActionRequest) -> MotionTarget:
    position = buffer.cursor
    for _ in range(request.count):
        position = next_word_end(buffer.document, position)
    return MotionTarget(position, inclusive=True)


__all__ = [
    "MotionTarget",
    "change_word",
    "goto_bottom",
    "goto_top",
    "line_end",
    "line_start",
    "move_down",
    "move_left",
    "move_right",
    "move_up",
    "next_word_end",
    "next_word_start",
    "previous_word_start",
    "word_backward",
    "word_end",
    "word_forward",
]
