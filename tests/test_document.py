from __future__ import annotations

import pytest

from rune.buffer import Position, TextDocument
from rune.buffer.text import cluster_width, split_graphemes
from rune.errors import OutOfBounds


def make_document(text: str = "hello\nworld") -> TextDocument:
    return TextDocument.from_text(text)


def test_from_text_strips_carriage_returns() -> None:
    document = make_document("line1\r\nline2")

    assert document.line_count() == 2
    assert document.line_text(0) == "line1"
    assert document.line_text(1) == "line2"


def test_empty_document_has_one_empty_line() -> None:
    document = TextDocument()

    assert document.line_count() == 1
    assert document.line(0) == ()
    assert document.text() == ""


def test_insert_then_delete_restores_text() -> None:
    document = make_document()
    original = document.text()

    end = document.insert(Position(0, 2), "XY\nZ")
    removed = document.delete(Position(0, 2), end)

    assert removed == "XY\nZ"
    assert document.text() == original


def test_insert_returns_position_after_text() -> None:
    document = make_document("ac")

    end = document.insert(Position(0, 1), "b")

    assert end == Position(0, 2)
    assert document.line_text(0) == "abc"


def test_combining_mark_joins_previous_cluster() -> None:
    document = make_document("e")

    end = document.insert(Position(0, 1), "\u0301")

    assert document.grapheme_count(0) == 1
    assert end == Position(0, 1)


def test_display_width_counts_wide_clusters_twice() -> None:
    document = make_document("世abc")

    assert document.grapheme_count(0) == 4
    assert document.display_width(0) == 5


def test_tab_expands_to_next_stop() -> None:
    document = make_document("a\tb")

    assert cluster_width("\t", 1) == 3
    assert document.display_width(0) == 5
    assert document.offset_to_column(0, 2) == 4
    assert document.column_to_offset(0, 2) == 1


def test_split_and_merge_lines() -> None:
    document = make_document("abcd")

    document.split_line(Position(0, 2))
    assert document.snapshot() == ("ab", "cd")

    join = document.merge_line(0)
    assert join == Position(0, 2)
    assert document.text() == "abcd"


def test_merge_last_line_is_out_of_bounds() -> None:
    document = make_document("only")

    with pytest.raises(OutOfBounds):
        document.merge_line(0)


@pytest.mark.parametrize(
    "position",
    [Position(2, 0), Position(0, 6), Position(-1, 0)],
)
def test_invalid_positions_raise(position: Position) -> None:
    document = make_document()

    with pytest.raises(OutOfBounds):
        document.insert(position, "x")


def test_delete_rejects_reversed_range() -> None:
    document = make_document()

    with pytest.raises(OutOfBounds):
        document.delete(Position(1, 0), Position(0, 0))


def test_out_of_bounds_is_an_index_error() -> None:
    document = make_document()

    with pytest.raises(IndexError):
        document.line(5)


def test_text_range_spans_lines() -> None:
    document = make_document("abc\ndef\nghi")

    assert document.text_range(Position(0, 1), Position(2, 1)) == "bc\ndef\ng"


def test_version_increments_on_mutation() -> None:
    document = make_document()
    before = document.version

    document.insert(Position(0, 0), "x")
    document.delete(Position(0, 0), Position(0, 1))

    assert document.version == before + 2


def test_split_graphemes_keeps_emoji_sequences_whole() -> None:
    family = "\U0001F468\u200d\U0001F469\u200d\U0001F467"

    assert split_graphemes(f"a{family}b") == ("a", family, "b")
