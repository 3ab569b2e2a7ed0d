"""Buffer abstractions and undo/redo data structures."""

from .buffer import Buffer, BufferView, Transaction
from .document import TextDocument
from .registers import RegisterBank, RegisterKind, RegisterValue
from .state import BufferState, Cursor, Position
from .text import TABSTOP, cluster_width, split_graphemes
from .undo import DeleteEdit, EditGroup, InsertEdit, LineEdit, UndoEngine
from .validation import clamp_position, ensure_position, first_non_blank

__all__ = [
    "TextDocument",
    "BufferState",
    "Cursor",
    "Position",
    "RegisterBank",
    "RegisterKind",
    "RegisterValue",
    "UndoEngine",
    "EditGroup",
    "LineEdit",
    "InsertEdit",
    "DeleteEdit",
    "Buffer",
    "BufferView",
    "Transaction",
    "TABSTOP",
    "cluster_width",
    "split_graphemes",
    "clamp_position",
    "ensure_position",
    "first_non_blank",
]
