from __future__ import annotations

from typing import Dict

import pytest

from rune.buffer import Buffer, Position
from rune.buffer.registers import UNNAMED
from rune.modes import KeyInput
from rune.session import EditorSession

SPECIAL_KEYS: Dict[str, KeyInput] = {
    "<Esc>": KeyInput(key="ESC"),
    "<CR>": KeyInput(key="ENTER"),
    "<BS>": KeyInput(key="BACKSPACE"),
    "<C-r>": KeyInput(key="r", modifiers=("ctrl",)),
}


def make_session(text: str, cursor: Position = Position(0, 0)) -> EditorSession:
    session = EditorSession(buffer=Buffer.from_text(text))
    session.buffer.set_cursor(cursor)
    return session


def press(session: EditorSession, *chunks: str) -> None:
    for chunk in chunks:
        if chunk in SPECIAL_KEYS:
            session.handle_key(SPECIAL_KEYS[chunk])
            continue
        for char in chunk:
            session.handle_key(KeyInput.char(char))


def text_of(session: EditorSession) -> str:
    return session.buffer.document.text()


def test_counted_dd_is_one_undo_group() -> None:
    session = make_session("a\nb\nc\nd\ne")

    press(session, "3dd")

    assert text_of(session) == "d\ne"
    assert session.buffer.undo_engine.depth == 1
    press(session, "u")
    assert text_of(session) == "a\nb\nc\nd\ne"
    assert session.buffer.cursor == Position(0, 0)


def test_count_before_delete_word() -> None:
    session = make_session("foo bar baz")

    press(session, "2dw")

    assert text_of(session) == "baz"
    assert session.buffer.cursor == Position(0, 0)


def test_counts_before_and_after_operator_multiply() -> None:
    session = make_session("a b c d e f g")

    press(session, "2d3w")

    assert text_of(session) == "g"


def test_dw_on_last_word_stops_at_line_end() -> None:
    session = make_session("foo bar\nbaz", Position(0, 4))

    press(session, "dw")

    assert text_of(session) == "foo \nbaz"
    assert session.buffer.cursor == Position(0, 3)


def test_counted_dw_running_past_line_end_takes_the_line_break() -> None:
    session = make_session("one two\nthree four")

    press(session, "3dw")

    assert text_of(session) == "three four"
    press(session, "u")
    assert text_of(session) == "one two\nthree four"


def test_counted_dw_ending_on_last_word_keeps_the_line_break() -> None:
    session = make_session("one two\nthree four")

    press(session, "2dw")

    assert text_of(session) == "\nthree four"


def test_dw_on_empty_line_joins_the_next_line() -> None:
    session = make_session("\nbar baz")

    press(session, "dw")

    assert text_of(session) == "bar baz"


def test_dd_on_last_line_moves_up() -> None:
    session = make_session("one\ntwo", Position(1, 0))

    press(session, "dd")

    assert text_of(session) == "one"
    assert session.buffer.cursor == Position(0, 0)
    assert session.buffer.registers.get(UNNAMED).linewise


def test_dd_on_only_line_leaves_empty_buffer() -> None:
    session = make_session("lonely")

    press(session, "dd")

    assert text_of(session) == ""
    assert session.buffer.document.line_count() == 1


def test_count_larger_than_buffer_is_clamped() -> None:
    session = make_session("a\nb\nc", Position(1, 0))

    press(session, "10dd")

    assert text_of(session) == "a"


def test_change_word_then_insert_is_one_group() -> None:
    session = make_session("foo bar")

    press(session, "cw", "baz", "<Esc>")

    assert text_of(session) == "baz bar"
    assert session.mode == "normal"
    assert session.buffer.cursor == Position(0, 2)
    press(session, "u")
    assert text_of(session) == "foo bar"


def test_cc_empties_the_line_and_enters_insert() -> None:
    session = make_session("one\ntwo\nthree", Position(1, 1))

    press(session, "cc")

    assert session.mode == "insert"
    assert text_of(session) == "one\n\nthree"
    press(session, "new", "<Esc>")
    assert text_of(session) == "one\nnew\nthree"


def test_yy_and_paste_after() -> None:
    session = make_session("one\ntwo")

    press(session, "yy", "p")

    assert text_of(session) == "one\none\ntwo"
    assert session.buffer.cursor == Position(1, 0)


def test_paste_before_with_count() -> None:
    session = make_session("ab")

    press(session, "x", "3P")

    assert text_of(session) == "aaab"


def test_yank_word_does_not_modify_buffer() -> None:
    session = make_session("hello world")

    press(session, "yw")

    assert text_of(session) == "hello world"
    assert session.buffer.registers.get(UNNAMED).text == "hello "
    assert session.buffer.dirty is False


def test_delete_to_line_end_is_inclusive() -> None:
    session = make_session("abcdef", Position(0, 2))

    press(session, "d$")

    assert text_of(session) == "ab"


def test_delete_down_is_linewise() -> None:
    session = make_session("1\n2\n3\n4")

    press(session, "dj")

    assert text_of(session) == "3\n4"


def test_d_gg_deletes_to_top() -> None:
    session = make_session("1\n2\n3\n4", Position(2, 0))

    press(session, "dgg")

    assert text_of(session) == "4"


def test_goto_top_and_bottom_with_counts() -> None:
    session = make_session("1\n2\n3\n4\n5")

    press(session, "G")
    assert session.buffer.cursor.line == 4
    press(session, "gg")
    assert session.buffer.cursor.line == 0
    press(session, "3G")
    assert session.buffer.cursor.line == 2
    press(session, "2gg")
    assert session.buffer.cursor.line == 1


def test_zero_is_line_start_not_a_count() -> None:
    session = make_session("abcdefghijklmnop", Position(0, 5))

    press(session, "0")
    assert session.buffer.cursor == Position(0, 0)

    press(session, "10l")
    assert session.buffer.cursor == Position(0, 10)


def test_zero_before_dd_moves_then_deletes() -> None:
    session = make_session("abc\ndef", Position(0, 2))

    press(session, "0dd")

    assert text_of(session) == "def"
    assert session.buffer.undo_engine.depth == 1


def test_mismatched_keys_are_dropped_silently() -> None:
    session = make_session("abc")

    press(session, "dx")
    assert text_of(session) == "abc"
    assert session.message is None

    press(session, "x")
    assert text_of(session) == "bc"


def test_unknown_key_is_ignored() -> None:
    session = make_session("abc")

    press(session, "Z", "l")

    assert text_of(session) == "abc"
    assert session.buffer.cursor == Position(0, 1)


def test_escape_cancels_pending_operator() -> None:
    session = make_session("abc")

    press(session, "2d", "<Esc>", "x")

    assert text_of(session) == "bc"


def test_delete_char_with_count_and_register() -> None:
    session = make_session("abcdef")

    press(session, "3x")

    assert text_of(session) == "def"
    assert session.buffer.registers.get(UNNAMED).text == "abc"


def test_x_at_end_of_line_pulls_cursor_back() -> None:
    session = make_session("abc", Position(0, 2))

    press(session, "x")

    assert text_of(session) == "ab"
    assert session.buffer.cursor == Position(0, 1)


def test_open_below_and_above() -> None:
    session = make_session("middle")

    press(session, "o", "below", "<Esc>")
    press(session, "gg", "O", "above", "<Esc>")

    assert text_of(session) == "above\nmiddle\nbelow"
    press(session, "u")
    assert text_of(session) == "middle\nbelow"


def test_undo_and_redo_keys() -> None:
    session = make_session("abc")

    press(session, "x", "u")
    assert text_of(session) == "abc"

    press(session, "<C-r>")
    assert text_of(session) == "bc"


def test_undo_with_empty_history_reports_message() -> None:
    session = make_session("abc")

    press(session, "u")

    assert session.message == "Already at oldest change"


def test_redo_with_empty_history_reports_message() -> None:
    session = make_session("abc")

    press(session, "<C-r>")

    assert session.message == "Already at newest change"


def test_word_motions() -> None:
    session = make_session("foo.bar baz\nqux")

    press(session, "w")
    assert session.buffer.cursor == Position(0, 3)
    press(session, "w")
    assert session.buffer.cursor == Position(0, 4)
    press(session, "2w")
    assert session.buffer.cursor == Position(1, 0)
    press(session, "b")
    assert session.buffer.cursor == Position(0, 8)
    press(session, "e")
    assert session.buffer.cursor == Position(0, 10)


def test_vertical_motion_keeps_preferred_column() -> None:
    session = make_session("abcdef\nab\nabcdef", Position(0, 4))

    press(session, "j")
    assert session.buffer.cursor == Position(1, 1)
    press(session, "j")
    assert session.buffer.cursor == Position(2, 4)


def test_horizontal_motion_does_not_wrap() -> None:
    session = make_session("ab\ncd", Position(0, 1))

    press(session, "5l")
    assert session.buffer.cursor == Position(0, 1)
    press(session, "5h")
    assert session.buffer.cursor == Position(0, 0)


@pytest.mark.parametrize(
    ("keys", "expected"),
    [
        ("i", Position(0, 2)),
        ("a", Position(0, 3)),
        ("A", Position(0, 6)),
        ("I", Position(0, 2)),
    ],
)
def test_insert_entry_points(keys: str, expected: Position) -> None:
    session = make_session("  abcd", Position(0, 2))

    press(session, keys)

    assert session.mode == "insert"
    assert session.buffer.cursor == expected


def test_pending_display_shows_partial_command() -> None:
    session = make_session("abc")

    press(session, "2d")

    active = session.manager.active_mode
    assert active is not None
    assert active.pending_display == "2d"


def test_g_prefix_times_out_and_is_dropped() -> None:
    now = [0.0]
    session = EditorSession(buffer=Buffer.from_text("a\nb\nc"), clock=lambda: now[0])
    session.buffer.set_cursor(Position(2, 0))

    press(session, "g")
    assert session.manager.pending_timeout is not None
    now[0] += 1.0
    session.process_timeouts()
    press(session, "k")

    assert session.buffer.cursor == Position(1, 0)


def test_undo_of_backward_delete_lands_at_change_start() -> None:
    session = make_session("foo bar baz", Position(0, 8))

    press(session, "db", "u")

    assert text_of(session) == "foo bar baz"
    assert session.buffer.cursor == Position(0, 4)


def test_undo_of_upward_line_delete_lands_on_first_line() -> None:
    session = make_session("a\nb\nc\nd", Position(3, 0))

    press(session, "2dk")
    assert text_of(session) == "a"
    press(session, "u")

    assert text_of(session) == "a\nb\nc\nd"
    assert session.buffer.cursor == Position(1, 0)
