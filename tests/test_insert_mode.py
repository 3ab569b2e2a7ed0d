from __future__ import annotations

from typing import Dict

from rune.buffer import Buffer, Position
from rune.config import EditorConfig
from rune.modes import KeyInput
from rune.session import EditorSession

SPECIAL_KEYS: Dict[str, KeyInput] = {
    "<Esc>": KeyInput(key="ESC"),
    "<CR>": KeyInput(key="ENTER"),
    "<BS>": KeyInput(key="BACKSPACE"),
    "<Left>": KeyInput(key="LEFT"),
    "<C-g>": KeyInput(key="g", modifiers=("ctrl",)),
    "<C-x>": KeyInput(key="x", modifiers=("ctrl",), text="\x18"),
}


def make_session(text: str = "", cursor: Position = Position(0, 0)) -> EditorSession:
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


def test_insert_session_is_one_undo_group() -> None:
    session = make_session()

    press(session, "i", "hello world", "<Esc>")

    assert text_of(session) == "hello world"
    assert session.buffer.undo_engine.depth == 1
    press(session, "u")
    assert text_of(session) == ""


def test_ctrl_g_u_splits_the_insert_group() -> None:
    session = make_session()

    press(session, "i", "abc", "<C-g>", "u", "def", "<Esc>")

    assert text_of(session) == "abcdef"
    press(session, "u")
    assert text_of(session) == "abc"
    press(session, "u")
    assert text_of(session) == ""


def test_escape_steps_cursor_left() -> None:
    session = make_session("abc")

    press(session, "A", "<Esc>")

    assert session.mode == "normal"
    assert session.buffer.cursor == Position(0, 2)


def test_escape_at_line_start_stays_put() -> None:
    session = make_session("abc")

    press(session, "i", "<Esc>")

    assert session.buffer.cursor == Position(0, 0)
    assert session.buffer.undo_engine.depth == 0


def test_enter_splits_line() -> None:
    session = make_session("ab")

    press(session, "A", "<CR>", "c", "<Esc>")

    assert text_of(session) == "ab\nc"
    assert session.buffer.cursor == Position(1, 0)


def test_backspace_removes_previous_cluster() -> None:
    session = make_session("abc")

    press(session, "A", "<BS>", "<Esc>")

    assert text_of(session) == "ab"


def test_backspace_at_line_start_joins_lines() -> None:
    session = make_session("ab\ncd")

    press(session, "j", "I", "<BS>")

    assert text_of(session) == "abcd"
    assert session.buffer.cursor == Position(0, 2)


def test_backspace_at_buffer_start_is_noop() -> None:
    session = make_session("ab")

    press(session, "i", "<BS>", "<Esc>")

    assert text_of(session) == "ab"


def test_arrow_keys_move_within_insert() -> None:
    session = make_session("ac")

    press(session, "A", "<Left>", "b", "<Esc>")

    assert text_of(session) == "abc"


def test_control_keys_do_not_insert_text() -> None:
    session = make_session("ab")

    press(session, "i", "<C-x>", "<Esc>")

    assert text_of(session) == "ab"


def test_unfinished_ctrl_g_is_abandoned_by_text() -> None:
    session = make_session()

    press(session, "i", "<C-g>", "z", "<Esc>")

    assert text_of(session) == "z"
    assert session.buffer.undo_engine.depth == 1


def test_grapheme_cluster_is_one_cursor_step() -> None:
    session = make_session()

    press(session, "i", "e\u0301x")
    assert session.buffer.cursor == Position(0, 2)

    press(session, "<Left>", "<BS>")

    assert text_of(session) == "x"
    assert session.buffer.cursor == Position(0, 0)


def test_start_in_insert_option() -> None:
    session = EditorSession(config=EditorConfig(start_in_insert=True))

    press(session, "hi", "<Esc>")

    assert session.mode == "normal"
    assert text_of(session) == "hi"
