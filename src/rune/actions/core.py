"""Core action implementations shared across modes."""

from __future__ import annotations

from rune.buffer import Position, RegisterKind, clamp_position, first_non_blank
from rune.buffer.registers import UNNAMED
from rune.errors import NothingToRedo, NothingToUndo
from rune.modes.base_mode import ActionRequest, ModeContext, ModeName, ModeResult
from rune.modes.operator_pipeline import line_range

from . import operators

_INSERT = ModeName.INSERT.value
_NORMAL = ModeName.NORMAL.value


def _enter_insert(context: ModeContext, position: Position) -> ModeResult:
    context.buffer.set_cursor(position)
    return ModeResult(consumed=True, switch_to=_INSERT, status="enter_insert")


def insert(context: ModeContext, request: ActionRequest) -> ModeResult:
    del request
    return _enter_insert(context, context.buffer.cursor)


def append(context: ModeContext, request: ActionRequest) -> ModeResult:
    del request
    buffer = context.buffer
    line, col = buffer.cursor
    if buffer.document.grapheme_count(line):
        col += 1
    return _enter_insert(context, clamp_position(buffer.document, Position(line, col)))


def append_line_end(context: ModeContext, request: ActionRequest) -> ModeResult:
    del request
    line = context.buffer.cursor.line
    return _enter_insert(context, Position(line, context.buffer.document.grapheme_count(line)))


def insert_line_start(context: ModeContext, request: ActionRequest) -> ModeResult:
    del request
    line = context.buffer.cursor.line
    return _enter_insert(context, Position(line, first_non_blank(context.buffer.document, line)))


def open_below(context: ModeContext, request: ActionRequest) -> ModeResult:
    del request
    buffer = context.buffer
    line = buffer.cursor.line
    end = buffer.split_line(Position(line, buffer.document.grapheme_count(line)))
    return _enter_insert(context, end)


def open_above(context: ModeContext, request: ActionRequest) -> ModeResult:
    del request
    buffer = context.buffer
    line = buffer.cursor.line
    buffer.split_line(Position(line, 0))
    return _enter_insert(context, Position(line, 0))


def enter_command_mode(context: ModeContext, request: ActionRequest) -> ModeResult:
    del context, request
    return ModeResult(consumed=True, switch_to=ModeName.COMMAND.value, status="enter_command")


def delete_char(context: ModeContext, request: ActionRequest) -> ModeResult:
    buffer = context.buffer
    line, col = buffer.cursor
    count = buffer.document.grapheme_count(line)
    if col >= count:
        return ModeResult(consumed=True, status="noop")
    removed = buffer.delete(Position(line, col), Position(line, min(col + request.count, count)))
    context.registers.yank_to(UNNAMED, removed, kind=RegisterKind.CHARWISE)
    buffer.set_cursor(clamp_position(buffer.document, Position(line, col), past_end=False))
    return ModeResult(consumed=True, status="delete")


def delete_line(context: ModeContext, request: ActionRequest) -> ModeResult:
    buffer = context.buffer
    span = line_range(buffer.document, buffer.cursor.line, request.count)
    return operators.delete(context, span)


def undo(context: ModeContext, request: ActionRequest) -> ModeResult:
    buffer = context.buffer
    for _ in range(request.count):
        try:
            buffer.undo()
        except NothingToUndo as exc:
            buffer.clamp_cursor(past_end=False)
            return ModeResult(consumed=True, status="undo_empty", message=str(exc))
    buffer.clamp_cursor(past_end=False)
    return ModeResult(consumed=True, status="undo")


def redo(context: ModeContext, request: ActionRequest) -> ModeResult:
    buffer = context.buffer
    for _ in range(request.count):
        try:
            buffer.redo()
        except NothingToRedo as exc:
            buffer.clamp_cursor(past_end=False)
            return ModeResult(consumed=True, status="redo_empty", message=str(exc))
    buffer.clamp_cursor(past_end=False)
    return ModeResult(consumed=True, status="redo")


def _paste(context: ModeContext, request: ActionRequest, *, after: bool) -> ModeResult:
    value = context.registers.get(UNNAMED)
    if not value.text:
        return ModeResult(consumed=True, status="noop")
    buffer = context.buffer
    document = buffer.document
    line, col = buffer.cursor

    if value.linewise:
        block = "\n".join([value.text] * request.count)
        if after:
            buffer.insert(Position(line, document.grapheme_count(line)), "\n" + block)
            target = line + 1
        else:
            buffer.insert(Position(line, 0), block + "\n")
            target = line
        buffer.set_cursor(Position(target, first_non_blank(document, target)))
        return ModeResult(consumed=True, status="paste")

    if after and document.grapheme_count(line):
        col += 1
    end = buffer.insert(Position(line, col), value.text * request.count)
    buffer.set_cursor(Position(end.line, max(end.col - 1, 0)))
    return ModeResult(consumed=True, status="paste")


def paste_after(context: ModeContext, request: ActionRequest) -> ModeResult:
    return _paste(context, request, after=True)


def paste_before(context: ModeContext, request: ActionRequest) -> ModeResult:
    return _paste(context, request, after=False)


# Insert-mode actions


def insert_text(context: ModeContext, text: str) -> ModeResult:
    buffer = context.buffer
    end = buffer.insert(buffer.cursor, text)
    buffer.set_cursor(end)
    return ModeResult(consumed=True, status="insert_text")


def exit_insert(context: ModeContext, request: ActionRequest) -> ModeResult:
    del request
    buffer = context.buffer
    line, col = buffer.cursor
    if col > 0:
        buffer.set_cursor(Position(line, col - 1))
    return ModeResult(consumed=True, switch_to=_NORMAL, status="exit_insert")


def break_undo(context: ModeContext, request: ActionRequest) -> ModeResult:
    del request
    context.buffer.break_undo_group()
    return ModeResult(consumed=True, status="break_undo")


def newline(context: ModeContext, request: ActionRequest) -> ModeResult:
    del request
    buffer = context.buffer
    buffer.set_cursor(buffer.split_line(buffer.cursor))
    return ModeResult(consumed=True, status="newline")


def backspace(context: ModeContext, request: ActionRequest) -> ModeResult:
    del request
    buffer = context.buffer
    line, col = buffer.cursor
    if col > 0:
        buffer.delete(Position(line, col - 1), Position(line, col))
        buffer.set_cursor(Position(line, col - 1))
    elif line > 0:
        buffer.set_cursor(buffer.merge_line(line - 1))
    else:
        return ModeResult(consumed=True, status="noop")
    return ModeResult(consumed=True, status="backspace")


__all__ = [
    "append",
    "append_line_end",
    "backspace",
    "break_undo",
    "delete_char",
    "delete_line",
    "enter_command_mode",
    "exit_insert",
    "insert",
    "insert_line_start",
    "insert_text",
    "newline",
    "open_above",
    "open_below",
    "paste_after",
    "paste_before",
    "redo",
    "undo",
]
