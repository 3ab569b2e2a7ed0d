from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, List

import pytest

from rune.actions.command import MODIFIED_MESSAGE
from rune.buffer import Buffer, Position
from rune.modes import KeyInput
from rune.session import EditorSession

SPECIAL_KEYS: Dict[str, KeyInput] = {
    "<Esc>": KeyInput(key="ESC"),
    "<CR>": KeyInput(key="ENTER"),
    "<BS>": KeyInput(key="BACKSPACE"),
}


def make_session(tmp_path: Path, text: str | None = "one\ntwo\n") -> EditorSession:
    path = tmp_path / "note.txt"
    if text is not None:
        path.write_text(text, encoding="utf-8")
    return EditorSession.open(path)


def press(session: EditorSession, *chunks: str) -> None:
    for chunk in chunks:
        if chunk in SPECIAL_KEYS:
            session.handle_key(SPECIAL_KEYS[chunk])
            continue
        for char in chunk:
            session.handle_key(KeyInput.char(char))


def run_command(session: EditorSession, command: str) -> None:
    press(session, ":", command, "<CR>")


def test_colon_enters_command_mode_and_tracks_text() -> None:
    session = EditorSession()

    press(session, ":", "wq")

    assert session.mode == "command"
    assert session.context.extras["command_state"]["text"] == "wq"
    press(session, "<Esc>")
    assert session.mode == "normal"


def test_write_saves_and_clears_dirty(tmp_path: Path) -> None:
    session = make_session(tmp_path)

    press(session, "x")
    assert session.buffer.dirty is True
    run_command(session, "w")

    assert (tmp_path / "note.txt").read_text(encoding="utf-8") == "ne\ntwo\n"
    assert session.buffer.dirty is False
    assert session.message is not None and "written" in session.message
    assert session.mode == "normal"


def test_write_to_new_file(tmp_path: Path) -> None:
    session = make_session(tmp_path, text=None)
    assert session.message is not None and "[New]" in session.message

    press(session, "i", "fresh", "<Esc>")
    run_command(session, "w")

    assert (tmp_path / "note.txt").read_text(encoding="utf-8") == "fresh"


def test_write_with_file_name_names_unnamed_buffer(tmp_path: Path) -> None:
    session = EditorSession(buffer=Buffer.from_text("data"))
    target = tmp_path / "named.txt"

    run_command(session, f"w {target}")

    assert target.read_text(encoding="utf-8") == "data"
    assert session.path == target
    assert session.buffer.name == str(target)


def test_write_without_file_name_reports_error() -> None:
    session = EditorSession(buffer=Buffer.from_text("data"))

    run_command(session, "w")

    assert session.message is not None
    assert session.message.startswith("Write failed")


def test_quit_refused_when_modified(tmp_path: Path) -> None:
    session = make_session(tmp_path)
    press(session, "x")

    run_command(session, "q")

    assert session.should_quit is False
    assert session.message == MODIFIED_MESSAGE


def test_quit_clean_buffer(tmp_path: Path) -> None:
    session = make_session(tmp_path)

    run_command(session, "q")

    assert session.should_quit is True


def test_force_quit_discards_changes(tmp_path: Path) -> None:
    session = make_session(tmp_path)
    press(session, "x")

    run_command(session, "q!")

    assert session.should_quit is True
    assert (tmp_path / "note.txt").read_text(encoding="utf-8") == "one\ntwo\n"


def test_wq_writes_then_quits(tmp_path: Path) -> None:
    session = make_session(tmp_path)
    press(session, "dd")

    run_command(session, "wq")

    assert (tmp_path / "note.txt").read_text(encoding="utf-8") == "two\n"
    assert session.should_quit is True


def test_x_skips_write_when_clean(tmp_path: Path) -> None:
    session = make_session(tmp_path, text=None)

    run_command(session, "x")

    assert session.should_quit is True
    assert not (tmp_path / "note.txt").exists()


def test_x_writes_when_dirty(tmp_path: Path) -> None:
    session = make_session(tmp_path)
    press(session, "x")

    run_command(session, "x")

    assert (tmp_path / "note.txt").read_text(encoding="utf-8") == "ne\ntwo\n"
    assert session.should_quit is True


def test_unknown_command_is_reported_without_changes(tmp_path: Path) -> None:
    session = make_session(tmp_path)

    run_command(session, "frobnicate")

    assert session.message == "Not an editor command: frobnicate"
    assert session.mode == "normal"
    assert session.buffer.dirty is False
    assert session.should_quit is False


def test_failed_save_keeps_dirty_flag(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    session = make_session(tmp_path)
    press(session, "x")

    def refuse(src: str, dst: str) -> None:
        raise PermissionError(13, "Permission denied")

    monkeypatch.setattr(os, "replace", refuse)
    run_command(session, "wq")

    assert session.buffer.dirty is True
    assert session.should_quit is False
    assert session.message is not None and session.message.startswith("Write failed")
    assert (tmp_path / "note.txt").read_text(encoding="utf-8") == "one\ntwo\n"


@pytest.mark.parametrize(
    ("command", "line"),
    [("5", 4), ("0", 0), ("$", 9), ("99", 9), ("+2", 5), ("-3", 0)],
)
def test_line_jumps(command: str, line: int) -> None:
    text = "\n".join(f"line {index}" for index in range(10))
    session = EditorSession(buffer=Buffer.from_text(text))
    session.buffer.set_cursor(Position(3, 0))

    run_command(session, command)

    assert session.buffer.cursor.line == line


def test_backspace_edits_then_cancels_prompt() -> None:
    session = EditorSession()

    press(session, ":", "wx", "<BS>")
    assert session.context.extras["command_state"]["text"] == "w"

    press(session, "<BS>", "<BS>")
    assert session.mode == "normal"


def test_empty_command_returns_to_normal() -> None:
    session = EditorSession()

    run_command(session, "")

    assert session.mode == "normal"
    assert session.message is None


def test_command_events_reach_bus_subscribers() -> None:
    session = EditorSession()
    seen: List[str] = []
    session.bus.subscribe("command.submit", lambda payload: seen.append(str(payload)))
    session.bus.subscribe("command.error", lambda payload: seen.append(f"error:{payload}"))

    run_command(session, "nope")

    assert seen == ["nope", "error:nope"]


def test_history_keeps_submitted_commands() -> None:
    session = EditorSession()

    run_command(session, "1")
    run_command(session, "$")

    assert session.context.extras["command_state"]["history"] == ["1", "$"]
