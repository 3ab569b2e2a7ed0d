"""Grapheme segmentation and terminal cell widths."""

from __future__ import annotations

from typing import Iterable, Tuple

import grapheme
from wcwidth import wcswidth

TABSTOP = 4


def split_graphemes(text: str) -> Tuple[str, ...]:
    """Split ``text`` into extended grapheme clusters."""

    if not text:
        return ()
    return tuple(grapheme.graphemes(text))


def cluster_width(cluster: str, column: int = 0) -> int:
    """Cells occupied by ``cluster`` when it starts at display ``column``.

    Every cluster takes one or two cells; a tab runs to the next tab stop.
    """

    if cluster == "\t":
        return TABSTOP - (column % TABSTOP)
    width = wcswidth(cluster)
    if width < 1:
        return 1
    return min(width, 2)


def text_width(clusters: Iterable[str], start_column: int = 0) -> int:
    column = start_column
    for cluster in clusters:
        column += cluster_width(cluster, column)
    return column - start_column


def is_blank(cluster: str) -> bool:
    return cluster.isspace()


def is_word_cluster(cluster: str) -> bool:
    # The base character decides; combining marks follow it.
    base = cluster[:1]
    return base.isalnum() or base == "_"


def cluster_class(cluster: str) -> int:
    """0 for whitespace, 1 for word characters, 2 for punctuation."""

    if is_blank(cluster):
        return 0
    if is_word_cluster(cluster):
        return 1
    return 2


__all__ = [
    "TABSTOP",
    "cluster_class",
    "cluster_width",
    "is_blank",
    "is_word_cluster",
    "split_graphemes",
    "text_width",
]
