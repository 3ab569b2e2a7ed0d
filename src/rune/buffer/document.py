"""Core document data structures for rune buffers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Sequence, Tuple

from rune.errors import OutOfBounds
from rune.runtime import telemetry

from .state import Position
from .text import cluster_width, split_graphemes

logger = telemetry.get_logger("rune.buffer")

Line = Tuple[str, ...]


@dataclass(slots=True)
class TextDocument:
    """Grapheme-addressed text storage built on a list-of-lines model.

    Every line is stored as the tuple of grapheme clusters of its text, and
    that tuple is always exactly ``split_graphemes(line_text)``: mutations
    re-segment the lines they touch from their joined text, so a combining
    mark typed after a base character merges into its cluster. Only the
    touched lines are rebuilt.
    """

    _lines: List[Line] = field(default_factory=lambda: [()])
    version: int = 0

    @classmethod
    def from_text(cls, text: str) -> "TextDocument":
        text = text.replace("\r", "")
        return cls(_lines=[split_graphemes(part) for part in text.split("\n")])

    def snapshot(self) -> Sequence[str]:
        """Return the current line texts without exposing internal mutability."""

        return tuple("".join(line) for line in self._lines)

    def text(self) -> str:
        return "\n".join(self.snapshot())

    def line_count(self) -> int:
        return len(self._lines)

    def line(self, index: int) -> Line:
        self._check_line(index)
        return self._lines[index]

    def line_text(self, index: int) -> str:
        return "".join(self.line(index))

    def grapheme_count(self, index: int) -> int:
        return len(self.line(index))

    def display_width(self, index: int) -> int:
        column = 0
        for cluster in self.line(index):
            column += cluster_width(cluster, column)
        return column

    def offset_to_column(self, index: int, offset: int) -> int:
        """Display column at which the cluster at ``offset`` starts."""

        line = self.line(index)
        column = 0
        for cluster in line[: max(0, offset)]:
            column += cluster_width(cluster, column)
        return column

    def column_to_offset(self, index: int, column: int) -> int:
        """Offset of the cluster covering display ``column``.

        Columns past the end of the line map to the grapheme count.
        """

        line = self.line(index)
        current = 0
        for offset, cluster in enumerate(line):
            width = cluster_width(cluster, current)
            if column < current + width:
                return offset
            current += width
        return len(line)

    def is_valid(self, position: Position) -> bool:
        line, col = position
        if line < 0 or line >= len(self._lines):
            return False
        return 0 <= col <= len(self._lines[line])

    def text_range(self, start: Position, end: Position) -> str:
        start, end = self._check_range(start, end)
        if start.line == end.line:
            return "".join(self._lines[start.line][start.col : end.col])
        parts = ["".join(self._lines[start.line][start.col :])]
        parts.extend("".join(line) for line in self._lines[start.line + 1 : end.line])
        parts.append("".join(self._lines[end.line][: end.col]))
        return "\n".join(parts)

    def insert(self, position: Position, text: str) -> Position:
        """Insert ``text`` at ``position`` and return the position after it."""

        line_index, col = self._check_position(position)
        current = self._lines[line_index]
        head = "".join(current[:col])
        tail = "".join(current[col:])
        parts = text.split("\n")

        if len(parts) == 1:
            merged = split_graphemes(head + text + tail)
            end_col = len(split_graphemes(head + text))
            self._lines[line_index] = merged
            end = Position(line_index, min(end_col, len(merged)))
        else:
            new_lines = [split_graphemes(head + parts[0])]
            new_lines.extend(split_graphemes(part) for part in parts[1:-1])
            last = split_graphemes(parts[-1] + tail)
            new_lines.append(last)
            self._lines[line_index : line_index + 1] = new_lines
            end_col = len(split_graphemes(parts[-1]))
            end = Position(line_index + len(parts) - 1, min(end_col, len(last)))

        self._touch("insert", position, end)
        return end

    def delete(self, start: Position, end: Position) -> str:
        """Remove ``[start, end)`` and return the removed text."""

        start, end = self._check_range(start, end)
        removed = self.text_range(start, end)
        first = self._lines[start.line]
        last = self._lines[end.line]
        joined = "".join(first[: start.col]) + "".join(last[end.col :])
        self._lines[start.line : end.line + 1] = [split_graphemes(joined)]
        self._touch("delete", start, end)
        return removed

    def split_line(self, position: Position) -> Position:
        return self.insert(position, "\n")

    def merge_line(self, index: int) -> Position:
        """Join line ``index`` with the next one; returns the join point."""

        self._check_line(index)
        if index >= len(self._lines) - 1:
            raise OutOfBounds(f"Line {index} has no following line", position=(index, 0))
        join = Position(index, len(self._lines[index]))
        self.delete(join, Position(index + 1, 0))
        return join

    def replace_lines(self, start: int, end: int, texts: Iterable[str]) -> None:
        """Replace lines ``[start:end]`` with ``texts`` (used by undo)."""

        if start < 0 or end < start or end > len(self._lines):
            raise OutOfBounds(f"Line range {start}:{end} out of range")
        new_lines = [split_graphemes(text) for text in texts]
        self._lines[start:end] = new_lines
        if not self._lines:
            self._lines.append(())
        self.version += 1

    def _touch(self, kind: str, start: Position, end: Position) -> None:
        self.version += 1
        logger.debug("document %s %s..%s v%d", kind, tuple(start), tuple(end), self.version)

    def _check_line(self, index: int) -> None:
        if index < 0 or index >= len(self._lines):
            raise OutOfBounds(f"Line {index} out of range", position=(index, 0))

    def _check_position(self, position: Position) -> Position:
        position = Position(*position)
        if not self.is_valid(position):
            raise OutOfBounds(f"Position {tuple(position)} out of range", position=position)
        return position

    def _check_range(self, start: Position, end: Position) -> Tuple[Position, Position]:
        start = self._check_position(start)
        end = self._check_position(end)
        if end < start:
            raise OutOfBounds(
                f"Range end {tuple(end)} precedes start {tuple(start)}", position=end
            )
        return start, end
