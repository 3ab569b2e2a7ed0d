"""Built-in keymaps that seed each mode with the standard Vim keys."""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, Sequence

from rune.actions import command as command_actions
from rune.actions import core as core_actions
from rune.actions import motions
from rune.actions import operators

from .models import Action, ActionKind, ActionRef, Binding, KeySequence
from .registry import KeymapRegistry

NORMAL = "normal"
INSERT = "insert"
COMMAND = "command"

# (mode, key notation, action); ``KeySequence.parse`` reads the notation.
DEFAULT_KEYS: tuple[tuple[str, str, Action], ...] = (
    (NORMAL, "h", Action.MOVE_LEFT),
    (NORMAL, "<Left>", Action.MOVE_LEFT),
    (NORMAL, "j", Action.MOVE_DOWN),
    (NORMAL, "<Down>", Action.MOVE_DOWN),
    (NORMAL, "k", Action.MOVE_UP),
    (NORMAL, "<Up>", Action.MOVE_UP),
    (NORMAL, "l", Action.MOVE_RIGHT),
    (NORMAL, "<Right>", Action.MOVE_RIGHT),
    (NORMAL, "0", Action.LINE_START),
    (NORMAL, "$", Action.LINE_END),
    (NORMAL, "gg", Action.GOTO_TOP),
    (NORMAL, "G", Action.GOTO_BOTTOM),
    (NORMAL, "w", Action.WORD_FORWARD),
    (NORMAL, "b", Action.WORD_BACKWARD),
    (NORMAL, "e", Action.WORD_END),
    (NORMAL, "d", Action.DELETE),
    (NORMAL, "c", Action.CHANGE),
    (NORMAL, "y", Action.YANK),
    (NORMAL, "dd", Action.DELETE_LINE),
    (NORMAL, "i", Action.INSERT),
    (NORMAL, "a", Action.APPEND),
    (NORMAL, "A", Action.APPEND_LINE_END),
    (NORMAL, "I", Action.INSERT_LINE_START),
    (NORMAL, "o", Action.OPEN_BELOW),
    (NORMAL, "O", Action.OPEN_ABOVE),
    (NORMAL, "x", Action.DELETE_CHAR),
    (NORMAL, "u", Action.UNDO),
    (NORMAL, "<C-r>", Action.REDO),
    (NORMAL, "p", Action.PASTE_AFTER),
    (NORMAL, "P", Action.PASTE_BEFORE),
    (NORMAL, ":", Action.COMMAND),
    (INSERT, "<Esc>", Action.EXIT_INSERT),
    (INSERT, "<C-g>u", Action.BREAK_UNDO),
    (INSERT, "<Enter>", Action.NEWLINE),
    (INSERT, "<BS>", Action.BACKSPACE),
    (INSERT, "<Left>", Action.MOVE_LEFT),
    (INSERT, "<Right>", Action.MOVE_RIGHT),
    (INSERT, "<Up>", Action.MOVE_UP),
    (INSERT, "<Down>", Action.MOVE_DOWN),
    (COMMAND, "<Esc>", Action.CANCEL_COMMAND),
    (COMMAND, "<Enter>", Action.SUBMIT_COMMAND),
)


def default_actions() -> tuple[ActionRef, ...]:
    """Every action in :class:`Action` paired with its handler."""

    motion = ActionKind.MOTION
    operator = ActionKind.OPERATOR
    return (
        ActionRef(Action.MOVE_LEFT.value, motions.move_left, motion, description="Cursor left"),
        ActionRef(Action.MOVE_DOWN.value, motions.move_down, motion, description="Cursor down"),
        ActionRef(Action.MOVE_UP.value, motions.move_up, motion, description="Cursor up"),
        ActionRef(Action.MOVE_RIGHT.value, motions.move_right, motion, description="Cursor right"),
        ActionRef(Action.LINE_START.value, motions.line_start, motion, description="Start of line"),
        ActionRef(Action.LINE_END.value, motions.line_end, motion, description="End of line"),
        ActionRef(Action.GOTO_TOP.value, motions.goto_top, motion, description="First line"),
        ActionRef(Action.GOTO_BOTTOM.value, motions.goto_bottom, motion, description="Last line"),
        ActionRef(Action.WORD_FORWARD.value, motions.word_forward, motion, description="Next word"),
        ActionRef(
            Action.WORD_BACKWARD.value, motions.word_backward, motion, description="Previous word"
        ),
        ActionRef(Action.WORD_END.value, motions.word_end, motion, description="End of word"),
        ActionRef(Action.DELETE.value, operators.delete, operator, True, description="Delete"),
        ActionRef(Action.CHANGE.value, operators.change, operator, True, description="Change"),
        ActionRef(Action.YANK.value, operators.yank, operator, description="Yank"),
        ActionRef(Action.INSERT.value, core_actions.insert, description="Insert before cursor"),
        ActionRef(Action.APPEND.value, core_actions.append, description="Append after cursor"),
        ActionRef(
            Action.APPEND_LINE_END.value,
            core_actions.append_line_end,
            description="Append at end of line",
        ),
        ActionRef(
            Action.INSERT_LINE_START.value,
            core_actions.insert_line_start,
            description="Insert at first non-blank",
        ),
        ActionRef(
            Action.OPEN_BELOW.value,
            core_actions.open_below,
            mutates=True,
            description="Open a line below",
        ),
        ActionRef(
            Action.OPEN_ABOVE.value,
            core_actions.open_above,
            mutates=True,
            description="Open a line above",
        ),
        ActionRef(
            Action.DELETE_CHAR.value,
            core_actions.delete_char,
            mutates=True,
            description="Delete character under cursor",
        ),
        ActionRef(
            Action.DELETE_LINE.value,
            core_actions.delete_line,
            mutates=True,
            description="Delete whole lines",
        ),
        ActionRef(Action.UNDO.value, core_actions.undo, description="Undo"),
        ActionRef(Action.REDO.value, core_actions.redo, description="Redo"),
        ActionRef(
            Action.PASTE_AFTER.value,
            core_actions.paste_after,
            mutates=True,
            description="Paste after cursor",
        ),
        ActionRef(
            Action.PASTE_BEFORE.value,
            core_actions.paste_before,
            mutates=True,
            description="Paste before cursor",
        ),
        ActionRef(
            Action.COMMAND.value,
            core_actions.enter_command_mode,
            description="Open the command line",
        ),
        ActionRef(Action.EXIT_INSERT.value, core_actions.exit_insert, description="Leave insert"),
        ActionRef(Action.BREAK_UNDO.value, core_actions.break_undo, description="Break undo group"),
        ActionRef(Action.NEWLINE.value, core_actions.newline, description="Split line"),
        ActionRef(Action.BACKSPACE.value, core_actions.backspace, description="Delete backwards"),
        ActionRef(
            Action.SUBMIT_COMMAND.value,
            command_actions.submit_command_line,
            description="Evaluate the command line",
        ),
        ActionRef(
            Action.CANCEL_COMMAND.value,
            command_actions.cancel_command_line,
            description="Abandon the command line",
        ),
    )


def make_binding(
    mode: str,
    notation: str,
    action: Action | str,
    *,
    source: str | None = None,
    timeout_ms: int | None = None,
) -> Binding:
    sequence = KeySequence.parse(notation)
    if timeout_ms is not None:
        sequence = KeySequence(sequence.strokes, timeout_ms=timeout_ms)
    action_id = Action.parse(str(getattr(action, "value", action))).value
    return Binding(
        id=f"{mode}.{'-'.join(sequence.tokens)}",
        mode=mode,
        sequence=sequence,
        action_id=action_id,
        source=source,
    )


def default_bindings() -> tuple[Binding, ...]:
    return tuple(
        make_binding(mode, notation, action, source="defaults")
        for mode, notation, action in DEFAULT_KEYS
    )


def load_default_keymaps(
    registry: KeymapRegistry,
    *,
    replace: bool = False,
    extra_bindings: Iterable[Binding] | None = None,
    default_sequence_timeout_ms: int | None = None,
    exclude_bindings: Sequence[str] | None = None,
) -> None:
    """Register built-in actions and bindings for every mode.

    ``extra_bindings`` (user configuration) always replace a default bound
    to the same keys.
    """

    for action in default_actions():
        registry.register_action(action, replace=replace)

    excluded = set(exclude_bindings or ())
    for binding in default_bindings():
        if binding.id in excluded:
            continue
        registry.register_binding(
            _binding_with_timeout(binding, default_sequence_timeout_ms),
            replace=replace,
        )

    for binding in extra_bindings or ():
        registry.register_binding(binding, replace=True)


def _binding_with_timeout(binding: Binding, timeout_ms: int | None) -> Binding:
    if timeout_ms is None:
        return binding
    sequence = KeySequence(binding.sequence.strokes, timeout_ms=timeout_ms)
    return replace(binding, sequence=sequence)


__all__ = [
    "DEFAULT_KEYS",
    "default_actions",
    "default_bindings",
    "load_default_keymaps",
    "make_binding",
]
