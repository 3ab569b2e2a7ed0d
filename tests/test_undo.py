from __future__ import annotations

import pytest

from rune.buffer import Buffer, Position, UndoEngine
from rune.errors import NoOpenGroup, NothingToRedo, NothingToUndo


def make_buffer(text: str = "") -> Buffer:
    return Buffer.from_text(text)


def test_each_edit_outside_a_group_is_its_own_group() -> None:
    buffer = make_buffer()
    states = [buffer.document.text()]

    for index in range(5):
        buffer.insert(Position(0, buffer.document.grapheme_count(0)), str(index))
        states.append(buffer.document.text())

    for expected in reversed(states[:-1]):
        buffer.undo()
        assert buffer.document.text() == expected
    for expected in states[1:]:
        buffer.redo()
        assert buffer.document.text() == expected


def test_undo_past_oldest_change_raises() -> None:
    buffer = make_buffer("abc")

    with pytest.raises(NothingToUndo, match="oldest"):
        buffer.undo()


def test_redo_past_newest_change_raises() -> None:
    buffer = make_buffer("abc")
    buffer.insert(Position(0, 0), "x")

    with pytest.raises(NothingToRedo, match="newest"):
        buffer.redo()


def test_transaction_makes_one_group() -> None:
    buffer = make_buffer("one\ntwo")

    with buffer.transaction("edit"):
        buffer.insert(Position(0, 0), "A")
        buffer.insert(Position(1, 0), "B")
        buffer.delete(Position(0, 1), Position(0, 2))

    assert buffer.undo_engine.depth == 1
    buffer.undo()
    assert buffer.document.text() == "one\ntwo"


def test_nested_transaction_joins_outer_group() -> None:
    buffer = make_buffer("abc")

    with buffer.transaction("outer"):
        buffer.insert(Position(0, 0), "1")
        with buffer.transaction("inner") as inner:
            buffer.insert(Position(0, 0), "2")
        assert inner.opened is False

    assert buffer.undo_engine.depth == 1


def test_failed_transaction_reverts_its_edits() -> None:
    buffer = make_buffer("abc")

    with pytest.raises(RuntimeError):
        with buffer.transaction("broken"):
            buffer.insert(Position(0, 0), "zzz")
            raise RuntimeError("boom")

    assert buffer.document.text() == "abc"
    assert not buffer.undo_engine.can_undo()
    assert not buffer.undo_engine.is_open


def test_empty_group_is_not_recorded() -> None:
    buffer = make_buffer("abc")

    with buffer.transaction("noop"):
        pass

    assert not buffer.undo_engine.can_undo()


def test_new_edit_clears_redo_history() -> None:
    buffer = make_buffer("abc")
    buffer.insert(Position(0, 0), "x")
    buffer.undo()

    buffer.insert(Position(0, 0), "y")

    assert not buffer.undo_engine.can_redo()


def test_undo_lands_cursor_where_the_group_started() -> None:
    buffer = make_buffer("hello world")
    buffer.set_cursor(Position(0, 6))

    with buffer.transaction("delete"):
        buffer.delete(Position(0, 6), Position(0, 11))
        buffer.set_cursor(Position(0, 5))

    assert buffer.undo() == Position(0, 6)
    assert buffer.redo() == Position(0, 5)


def test_undo_and_redo_mark_buffer_dirty() -> None:
    buffer = make_buffer("abc")
    buffer.insert(Position(0, 0), "x")
    buffer.mark_saved()

    buffer.undo()

    assert buffer.dirty is True


def test_commit_without_open_group_is_a_defect() -> None:
    engine = UndoEngine()

    with pytest.raises(NoOpenGroup):
        engine.commit_group(Position(0, 0))


def test_history_is_capped() -> None:
    buffer = Buffer(undo=UndoEngine(max_groups=3))

    for _ in range(5):
        buffer.insert(Position(0, 0), "x")

    assert buffer.undo_engine.depth == 3


def test_break_undo_group_splits_open_group() -> None:
    buffer = make_buffer()
    buffer.begin_group("insert")
    buffer.insert(Position(0, 0), "abc")
    buffer.break_undo_group()
    buffer.insert(Position(0, 3), "def")
    buffer.commit_group()

    buffer.undo()
    assert buffer.document.text() == "abc"
    buffer.undo()
    assert buffer.document.text() == ""
