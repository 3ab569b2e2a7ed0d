"""High-level buffer façade combining document, state, registers, and undo."""

from __future__ import annotations

from contextlib import AbstractContextManager
from dataclasses import dataclass
from typing import ContextManager, Optional

from rune.runtime import telemetry

from .document import TextDocument
from .registers import RegisterBank
from .state import BufferState, Position
from .undo import DeleteEdit, InsertEdit, UndoEngine
from .validation import clamp_position, ensure_position

DEFAULT_NAME = "[No Name]"


@dataclass(slots=True)
class BufferView:
    version: int
    text: str
    cursor: Position
    dirty: bool


class Buffer:
    """One open document with its cursor, registers and undo history.

    Every mutation goes through :meth:`insert` or :meth:`delete`, which
    record line edits into the open undo group (opening a one-edit group of
    their own when none is open).
    """

    def __init__(
        self,
        *,
        name: str = DEFAULT_NAME,
        document: Optional[TextDocument] = None,
        state: Optional[BufferState] = None,
        registers: Optional[RegisterBank] = None,
        undo: Optional[UndoEngine] = None,
    ) -> None:
        self.name = name
        self.document = document or TextDocument()
        self.state = state or BufferState()
        self.registers = registers or RegisterBank()
        self.undo_engine = undo or UndoEngine()
        self.dirty = False

    @classmethod
    def from_text(cls, text: str, *, name: str = DEFAULT_NAME) -> "Buffer":
        return cls(name=name, document=TextDocument.from_text(text))

    @property
    def cursor(self) -> Position:
        return self.state.cursor

    def set_cursor(self, position: Position, *, keep_column: bool = False) -> Position:
        line, col = ensure_position(self.document, position)
        self.state.set_cursor(line, col, keep_column=keep_column)
        return self.state.cursor

    def clamp_cursor(self, *, past_end: bool = True) -> Position:
        line, col = clamp_position(self.document, self.state.cursor, past_end=past_end)
        if (line, col) != self.state.cursor:
            self.state.set_cursor(line, col, keep_column=True)
        return self.state.cursor

    def snapshot(self) -> BufferView:
        return BufferView(
            version=self.document.version,
            text=self.document.text(),
            cursor=self.state.cursor,
            dirty=self.dirty,
        )

    def mark_saved(self) -> None:
        self.dirty = False

    def transaction(self, label: str) -> "Transaction":
        return Transaction(self, label)

    def begin_group(self, label: str = "insert") -> bool:
        return self.undo_engine.begin_group(self.state.cursor, label=label)

    def commit_group(self) -> None:
        if self.undo_engine.is_open:
            self.undo_engine.commit_group(self.state.cursor)

    def break_undo_group(self) -> None:
        """Commit the open group and start a fresh one at the cursor."""

        if self.undo_engine.is_open:
            self.undo_engine.commit_group(self.state.cursor)
            self.undo_engine.begin_group(self.state.cursor, label="insert")

    def insert(self, position: Position, text: str) -> Position:
        start = ensure_position(self.document, position)
        if not text:
            return start
        with self.transaction("insert"):
            before = (self.document.line_text(start.line),)
            end = self.document.insert(start, text)
            after = tuple(
                self.document.line_text(index) for index in range(start.line, end.line + 1)
            )
            self.undo_engine.record(
                InsertEdit(position=start, text=text, before=before, after=after)
            )
            self._touch()
        return end

    def delete(self, start: Position, end: Position) -> str:
        start = ensure_position(self.document, start)
        end = ensure_position(self.document, end)
        if start == end:
            return ""
        with self.transaction("delete"):
            before = tuple(
                self.document.line_text(index) for index in range(start.line, end.line + 1)
            )
            removed = self.document.delete(start, end)
            after = (self.document.line_text(start.line),)
            self.undo_engine.record(
                DeleteEdit(position=start, text=removed, before=before, after=after)
            )
            self._touch()
        return removed

    def split_line(self, position: Position) -> Position:
        return self.insert(position, "\n")

    def merge_line(self, index: int) -> Position:
        join = Position(index, self.document.grapheme_count(index))
        if index >= self.document.line_count() - 1:
            # Let the document raise its own OutOfBounds.
            return self.document.merge_line(index)
        self.delete(join, Position(index + 1, 0))
        return join

    def text_range(self, start: Position, end: Position) -> str:
        return self.document.text_range(start, end)

    def undo(self) -> Position:
        self.commit_group()
        hint = self.undo_engine.undo(self.document)
        return self._land(hint)

    def redo(self) -> Position:
        self.commit_group()
        hint = self.undo_engine.redo(self.document)
        return self._land(hint)

    def _land(self, hint: Position) -> Position:
        self._touch()
        line, col = clamp_position(self.document, hint)
        self.state.set_cursor(line, col)
        return self.state.cursor

    def _touch(self) -> None:
        self.dirty = True


class Transaction(AbstractContextManager["Transaction"]):
    """One undo group around a block of buffer mutations.

    Nested transactions join the outer group. An exception escaping the
    block that opened the group reverts every edit made inside it.
    """

    def __init__(self, buffer: Buffer, label: str) -> None:
        self.buffer = buffer
        self.label = label
        self._span_cm: Optional[ContextManager[object]] = None
        self._opened = False
        self._keep_open = False

    @property
    def opened(self) -> bool:
        return self._opened

    def keep_open(self) -> None:
        """Leave the group open on exit so a following insert session joins it."""

        self._keep_open = True

    def __enter__(self) -> "Transaction":
        self._opened = self.buffer.undo_engine.begin_group(
            self.buffer.state.cursor, label=self.label
        )
        if self._opened:
            self._span_cm = telemetry.span(
                name=f"buffer::{self.label}",
                logger_name="rune.buffer",
                component="buffer",
                metadata={"buffer": self.buffer.name},
            )
            self._span_cm.__enter__()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        try:
            if self._opened:
                engine = self.buffer.undo_engine
                if exc_type is not None:
                    cursor = engine.discard_group(self.buffer.document)
                    if cursor is not None:
                        line, col = clamp_position(self.buffer.document, cursor)
                        self.buffer.state.set_cursor(line, col)
                elif not self._keep_open:
                    engine.commit_group(self.buffer.state.cursor)
        finally:
            if self._span_cm is not None:
                self._span_cm.__exit__(exc_type, exc, tb)
        return False
