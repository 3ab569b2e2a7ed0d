"""Actions that evaluate Ex-style command lines."""

from __future__ import annotations

import re
from functools import partial
from typing import Callable, Dict, List, MutableMapping, cast

from rune.buffer import Position, first_non_blank
from rune.errors import SaveError, UnrecognizedCommand
from rune.modes.base_mode import ActionRequest, ModeContext, ModeName, ModeResult

CommandHandler = Callable[[ModeContext, List[str]], ModeResult]

MODIFIED_MESSAGE = "No write since last change (add ! to override)"

_NORMAL = ModeName.NORMAL.value
_LINE_JUMP = re.compile(r"\$|[+-]\d*|\d+")


def _command_state(context: ModeContext) -> MutableMapping[str, object]:
    state = cast(MutableMapping[str, object], context.extras.setdefault("command_state", {}))
    state.setdefault("text", "")
    state.setdefault("history", [])
    return state


def submit_command_line(context: ModeContext, request: ActionRequest) -> ModeResult:
    del request
    state = _command_state(context)
    text = str(state.get("text", "")).strip()
    context.bus.emit("command.submit", text)
    history = state.get("history")
    if isinstance(history, list) and text:
        history.append(text)
    state["text"] = ""
    if not text:
        return ModeResult(consumed=True, switch_to=_NORMAL, status="command_empty")
    try:
        return dispatch_command(context, text)
    except UnrecognizedCommand as exc:
        context.bus.emit("command.error", text)
        return ModeResult(
            consumed=True,
            switch_to=_NORMAL,
            status="command_error",
            message=str(exc),
        )


def cancel_command_line(context: ModeContext, request: ActionRequest) -> ModeResult:
    del request
    _command_state(context)["text"] = ""
    return ModeResult(consumed=True, switch_to=_NORMAL, status="command_cancel")


def dispatch_command(context: ModeContext, text: str) -> ModeResult:
    """Run one submitted command line; raises ``UnrecognizedCommand``."""

    parts = text.split()
    handler = _COMMAND_HANDLERS.get(parts[0])
    if handler is not None:
        return handler(context, parts[1:])
    if _LINE_JUMP.fullmatch(text):
        return _jump_to_line(context, text)
    raise UnrecognizedCommand(text)


def _jump_to_line(context: ModeContext, text: str) -> ModeResult:
    buffer = context.buffer
    document = buffer.document
    last = document.line_count() - 1
    if text == "$":
        line = last
    elif text[0] in "+-":
        step = int(text[1:] or "1")
        line = buffer.cursor.line + (step if text[0] == "+" else -step)
    else:
        # Lines are numbered from 1; 0 lands on the first line too.
        line = max(int(text), 1) - 1
    line = min(max(line, 0), last)
    buffer.set_cursor(Position(line, first_non_blank(document, line)))
    return ModeResult(consumed=True, switch_to=_NORMAL, status="command_jump")


def _write(context: ModeContext, args: List[str], *, force: bool) -> ModeResult | None:
    """Emit the write request; returns an error result if the save failed."""

    try:
        _emit_write(context, args, force=force)
    except SaveError as exc:
        return ModeResult(
            consumed=True,
            switch_to=_NORMAL,
            status="command_error",
            message=f"Write failed: {exc}",
        )
    return None


def _handle_write(context: ModeContext, args: List[str], *, force: bool = False) -> ModeResult:
    failed = _write(context, args, force=force)
    if failed is not None:
        return failed
    status = "command_write_force" if force else "command_write"
    return ModeResult(consumed=True, switch_to=_NORMAL, status=status)


def _handle_quit(context: ModeContext, args: List[str], *, force: bool = False) -> ModeResult:
    del args
    if context.buffer.dirty and not force:
        return ModeResult(
            consumed=True,
            switch_to=_NORMAL,
            status="command_error",
            message=MODIFIED_MESSAGE,
        )
    _emit_quit(context, force=force)
    status = "command_quit_force" if force else "command_quit"
    return ModeResult(consumed=True, switch_to=_NORMAL, status=status)


def _handle_wq(context: ModeContext, args: List[str], *, force: bool = False) -> ModeResult:
    failed = _write(context, args, force=force)
    if failed is not None:
        return failed
    _emit_quit(context, force=force)
    status = "command_wq_force" if force else "command_wq"
    return ModeResult(consumed=True, switch_to=_NORMAL, status=status)


def _handle_x(context: ModeContext, args: List[str], *, force: bool = False) -> ModeResult:
    if context.buffer.dirty or args:
        failed = _write(context, args, force=force)
        if failed is not None:
            return failed
    _emit_quit(context, force=force)
    status = "command_x_force" if force else "command_x"
    return ModeResult(consumed=True, switch_to=_NORMAL, status=status)


def _emit_write(context: ModeContext, args: List[str], *, force: bool) -> None:
    payload = {
        "force": force,
        "args": list(args),
        "snapshot": context.buffer.snapshot(),
    }
    context.bus.emit("command.write", payload)


def _emit_quit(context: ModeContext, *, force: bool) -> None:
    payload = {"force": force}
    context.bus.emit("command.quit", payload)


_COMMAND_HANDLERS: Dict[str, CommandHandler] = {
    "write": _handle_write,
    "w": _handle_write,
    "write!": partial(_handle_write, force=True),
    "w!": partial(_handle_write, force=True),
    "quit": _handle_quit,
    "q": _handle_quit,
    "quit!": partial(_handle_quit, force=True),
    "q!": partial(_handle_quit, force=True),
    "wq": _handle_wq,
    "wq!": partial(_handle_wq, force=True),
    "x": _handle_x,
    "x!": partial(_handle_x, force=True),
    "exit": _handle_x,
    "exit!": partial(_handle_x, force=True),
}


__all__ = [
    "MODIFIED_MESSAGE",
    "cancel_command_line",
    "dispatch_command",
    "submit_command_line",
]
