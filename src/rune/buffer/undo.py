"""Grouped undo/redo history for buffer edits."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from rune.errors import NoOpenGroup, NothingToRedo, NothingToUndo
from rune.runtime import telemetry

from .document import TextDocument
from .state import Position

logger = telemetry.get_logger("rune.undo")


@dataclass(frozen=True, slots=True)
class LineEdit:
    """A primitive edit stored as the text of the lines it replaced.

    ``before`` holds the touched lines as they were and ``after`` the lines
    that took their place, starting at ``position.line``. Swapping one for
    the other is exact in both directions, whatever the segmentation did.
    """

    position: Position
    text: str
    before: Tuple[str, ...]
    after: Tuple[str, ...]

    kind = "edit"

    @property
    def start(self) -> Position:
        """Where the edit begins; a leading line break belongs to the next line."""

        if self.text.startswith("\n"):
            return Position(self.position.line + 1, 0)
        return self.position

    def apply(self, document: TextDocument) -> None:
        line = self.position.line
        document.replace_lines(line, line + len(self.before), self.after)

    def revert(self, document: TextDocument) -> None:
        line = self.position.line
        document.replace_lines(line, line + len(self.after), self.before)


class InsertEdit(LineEdit):
    """``text`` was inserted at ``position``."""

    __slots__ = ()
    kind = "insert"


class DeleteEdit(LineEdit):
    """``text`` was removed starting at ``position``."""

    __slots__ = ()
    kind = "delete"


@dataclass(slots=True)
class EditGroup:
    label: str
    cursor_before: Position
    cursor_after: Optional[Position] = None
    edits: List[LineEdit] = field(default_factory=list)


class UndoEngine:
    """Linear history of edit groups with at most one group open."""

    def __init__(self, *, max_groups: int = 1000) -> None:
        self.max_groups = max_groups
        self._done: List[EditGroup] = []
        self._undone: List[EditGroup] = []
        self._open: Optional[EditGroup] = None

    @property
    def is_open(self) -> bool:
        return self._open is not None

    @property
    def depth(self) -> int:
        return len(self._done)

    def can_undo(self) -> bool:
        return bool(self._done)

    def can_redo(self) -> bool:
        return bool(self._undone)

    def begin_group(self, cursor: Position, *, label: str = "edit") -> bool:
        """Open a group; returns ``False`` when one is already open."""

        if self._open is not None:
            return False
        self._open = EditGroup(label=label, cursor_before=Position(*cursor))
        return True

    def record(self, edit: LineEdit) -> None:
        if self._open is None:
            raise NoOpenGroup(f"Cannot record {edit.kind} without an open group")
        self._open.edits.append(edit)

    def commit_group(self, cursor: Position) -> Optional[EditGroup]:
        """Close the open group; empty groups are dropped."""

        group = self._open
        if group is None:
            raise NoOpenGroup("No undo group is open")
        self._open = None
        if not group.edits:
            return None
        group.cursor_after = Position(*cursor)
        self._done.append(group)
        self._undone.clear()
        if len(self._done) > self.max_groups:
            del self._done[0]
        logger.debug("undo group %r committed with %d edits", group.label, len(group.edits))
        return group

    def discard_group(self, document: TextDocument) -> Optional[Position]:
        """Revert and drop the open group; returns its starting cursor."""

        group = self._open
        if group is None:
            raise NoOpenGroup("No undo group is open")
        self._open = None
        for edit in reversed(group.edits):
            edit.revert(document)
        logger.debug("undo group %r discarded", group.label)
        return group.cursor_before

    def undo(self, document: TextDocument) -> Position:
        if not self._done:
            raise NothingToUndo("Already at oldest change")
        group = self._done.pop()
        for edit in reversed(group.edits):
            edit.revert(document)
        self._undone.append(group)
        return min([group.cursor_before, *(edit.start for edit in group.edits)])

    def redo(self, document: TextDocument) -> Position:
        if not self._undone:
            raise NothingToRedo("Already at newest change")
        group = self._undone.pop()
        for edit in group.edits:
            edit.apply(document)
        self._done.append(group)
        return group.cursor_after or group.cursor_before
