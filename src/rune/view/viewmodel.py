"""Viewport bookkeeping and frame reconciliation."""

from __future__ import annotations

from typing import List, Optional, Tuple

from rune.buffer import Buffer, Position
from rune.buffer.text import cluster_width, text_width, split_graphemes
from rune.runtime import telemetry

from .frame import (
    FILLER,
    PROMPT,
    STATUS,
    TEXT,
    Frame,
    RenderDiff,
    TerminalSize,
    clip_clusters,
    diff_frames,
    fit_text,
)

EMPTY_ROW_MARKER = "~"


def _mode_label(mode: object) -> str:
    return str(getattr(mode, "value", mode)).upper()


class ViewModel:
    """Owns the viewport origin and the last frame sent to the terminal.

    :meth:`reconcile` renders the whole frame for the current state and
    returns only the rows that differ from what is already on screen.
    """

    def __init__(self) -> None:
        self.logger = telemetry.get_logger("rune.view")
        self.top = 0
        self.left = 0
        self._last: Optional[Frame] = None
        self.status_line = ""

    @property
    def cursor_screen(self) -> Tuple[int, int]:
        return self._last.cursor if self._last else (0, 0)

    def invalidate(self) -> None:
        """Forget the last frame; the next reconcile sends every row."""

        self._last = None

    def reconcile(
        self,
        buffer: Buffer,
        cursor: Position,
        mode: object,
        size: TerminalSize,
        *,
        message: Optional[str] = None,
        prompt: Optional[str] = None,
        pending: str = "",
    ) -> RenderDiff:
        document = buffer.document
        text_rows = size.text_rows
        cols = max(size.cols, 0)
        cursor_column = document.offset_to_column(cursor.line, cursor.col)
        self._scroll(buffer, cursor, cursor_column, text_rows, cols)

        rows: List[Tuple[str, str]] = []
        for row in range(text_rows):
            index = self.top + row
            if index < document.line_count():
                rows.append((clip_clusters(document.line(index), self.left, cols), TEXT))
            else:
                rows.append((fit_text(EMPTY_ROW_MARKER, cols), FILLER))

        # A zero-width screen still reports a drawable cell.
        screen_cursor = (max(cursor.line - self.top, 0), max(cursor_column - self.left, 0))
        if prompt is not None:
            line = ":" + prompt
            rows.append((fit_text(line, cols), PROMPT))
            prompt_column = min(text_width(split_graphemes(line)), max(cols - 1, 0))
            screen_cursor = (text_rows, prompt_column)
            self.status_line = line
        else:
            self.status_line = self._status(buffer, cursor, mode, cols, message, pending)
            rows.append((self.status_line, STATUS))
        rows = rows[: size.rows]

        frame = Frame(size=size, rows=tuple(rows), cursor=screen_cursor)
        diff = diff_frames(self._last, frame)
        self._last = frame
        self.logger.debug(
            "reconcile: top=%d left=%d updates=%d full=%s",
            self.top,
            self.left,
            len(diff.updates),
            diff.full,
        )
        return diff

    def _scroll(
        self,
        buffer: Buffer,
        cursor: Position,
        cursor_column: int,
        text_rows: int,
        cols: int,
    ) -> None:
        if cursor.line < self.top:
            self.top = cursor.line
        elif text_rows and cursor.line >= self.top + text_rows:
            self.top = cursor.line - text_rows + 1

        clusters = buffer.document.line(cursor.line)
        if cursor.col < len(clusters):
            width = cluster_width(clusters[cursor.col], cursor_column)
        else:
            width = 1
        if cursor_column < self.left:
            self.left = cursor_column
        elif cursor_column + width > self.left + cols:
            self.left = max(cursor_column + width - cols, 0)

    def _status(
        self,
        buffer: Buffer,
        cursor: Position,
        mode: object,
        cols: int,
        message: Optional[str],
        pending: str,
    ) -> str:
        if message:
            left = f" {message}"
        else:
            modified = " [+]" if buffer.dirty else ""
            count = buffer.document.line_count()
            noun = "line" if count == 1 else "lines"
            left = f" {buffer.name}{modified} - {count} {noun} [{_mode_label(mode)}]"
        right = f" {cursor.line + 1}:{cursor.col + 1} "
        if pending:
            right = f" {pending}  {right.lstrip()}"
        gap = cols - text_width(split_graphemes(left)) - text_width(split_graphemes(right))
        if gap < 1:
            return fit_text(left, cols)
        return fit_text(left + " " * gap + right, cols)


__all__ = ["EMPTY_ROW_MARKER", "ViewModel"]
