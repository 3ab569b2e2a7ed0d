"""Screen frames and the row diff between two of them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from rune.buffer.text import cluster_width, split_graphemes

TEXT = "text"
FILLER = "filler"
STATUS = "status"
PROMPT = "prompt"


@dataclass(frozen=True, slots=True)
class TerminalSize:
    rows: int
    cols: int

    @property
    def text_rows(self) -> int:
        """Rows available to buffer text; the last row is the status line."""

        return max(self.rows - 1, 0)


@dataclass(frozen=True, slots=True)
class RowUpdate:
    row: int
    text: str
    style: str = TEXT


@dataclass(frozen=True, slots=True)
class Frame:
    """What is on screen: one ``(text, style)`` pair per row."""

    size: TerminalSize
    rows: Tuple[Tuple[str, str], ...]
    cursor: Tuple[int, int]


@dataclass(frozen=True, slots=True)
class RenderDiff:
    updates: Tuple[RowUpdate, ...]
    cursor: Tuple[int, int]
    full: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.updates


def clip_clusters(clusters: Iterable[str], left: int, cols: int) -> str:
    """Draw ``clusters`` into the columns ``[left, left + cols)``.

    Tabs expand to spaces. A wide cluster cut by either edge is drawn as
    spaces for the cells that are visible. The result is padded to ``cols``.
    """

    right = left + cols
    out: list[str] = []
    drawn = 0
    column = 0
    for cluster in clusters:
        width = cluster_width(cluster, column)
        start, end = column, column + width
        column = end
        if end <= left:
            continue
        if start >= right:
            break
        visible = min(end, right) - max(start, left)
        if cluster == "\t" or visible < width:
            out.append(" " * visible)
        else:
            out.append(cluster)
        drawn += visible
        if end >= right:
            break
    return "".join(out) + " " * max(cols - drawn, 0)


def fit_text(text: str, cols: int) -> str:
    return clip_clusters(split_graphemes(text), 0, cols)


def diff_frames(previous: Optional[Frame], current: Frame) -> RenderDiff:
    """Rows of ``current`` that differ from ``previous``.

    With no previous frame, or one of a different size, every row is sent.
    """

    if previous is None or previous.size != current.size:
        updates = tuple(
            RowUpdate(row=index, text=text, style=style)
            for index, (text, style) in enumerate(current.rows)
        )
        return RenderDiff(updates=updates, cursor=current.cursor, full=True)

    updates = tuple(
        RowUpdate(row=index, text=text, style=style)
        for index, ((text, style), old) in enumerate(zip(current.rows, previous.rows))
        if (text, style) != old
    )
    return RenderDiff(updates=updates, cursor=current.cursor, full=False)


__all__ = [
    "FILLER",
    "Frame",
    "PROMPT",
    "RenderDiff",
    "RowUpdate",
    "STATUS",
    "TEXT",
    "TerminalSize",
    "clip_clusters",
    "diff_frames",
    "fit_text",
]
