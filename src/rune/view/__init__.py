"""Viewport, status line and row diffs for the terminal driver."""

from .frame import Frame, RenderDiff, RowUpdate, TerminalSize, diff_frames
from .viewmodel import EMPTY_ROW_MARKER, ViewModel

__all__ = [
    "EMPTY_ROW_MARKER",
    "Frame",
    "RenderDiff",
    "RowUpdate",
    "TerminalSize",
    "ViewModel",
    "diff_frames",
]
