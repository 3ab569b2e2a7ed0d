"""Dataclasses describing keymap bindings and action metadata."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Callable, Iterable, Mapping

DEFAULT_SEQUENCE_TIMEOUT_MS = 1000


class ActionKind(str, Enum):
    """How the normal-mode grammar treats an action."""

    MOTION = "motion"
    OPERATOR = "operator"
    COMMAND = "command"


class Action(str, Enum):
    """The closed set of actions a key sequence may be bound to."""

    MOVE_LEFT = "move_left"
    MOVE_DOWN = "move_down"
    MOVE_UP = "move_up"
    MOVE_RIGHT = "move_right"
    LINE_START = "line_start"
    LINE_END = "line_end"
    GOTO_TOP = "goto_top"
    GOTO_BOTTOM = "goto_bottom"
    WORD_FORWARD = "word_forward"
    WORD_BACKWARD = "word_backward"
    WORD_END = "word_end"

    DELETE = "delete"
    CHANGE = "change"
    YANK = "yank"

    INSERT = "insert"
    APPEND = "append"
    APPEND_LINE_END = "append_line_end"
    INSERT_LINE_START = "insert_line_start"
    OPEN_BELOW = "open_below"
    OPEN_ABOVE = "open_above"
    DELETE_CHAR = "delete_char"
    DELETE_LINE = "delete_line"
    UNDO = "undo"
    REDO = "redo"
    PASTE_AFTER = "paste_after"
    PASTE_BEFORE = "paste_before"
    COMMAND = "command"

    EXIT_INSERT = "exit_insert"
    BREAK_UNDO = "break_undo"
    NEWLINE = "newline"
    BACKSPACE = "backspace"

    SUBMIT_COMMAND = "submit_command"
    CANCEL_COMMAND = "cancel_command"

    @classmethod
    def parse(cls, name: str) -> "Action":
        """Look up an action by name or by its legacy single-key alias."""

        cleaned = name.strip()
        try:
            return cls(cleaned.lower())
        except ValueError:
            pass
        alias = LEGACY_ALIASES.get(cleaned)
        if alias is None:
            raise ValueError(f"Unknown action '{name}'")
        return alias


LEGACY_ALIASES: Mapping[str, Action] = MappingProxyType(
    {
        "h": Action.MOVE_LEFT,
        "j": Action.MOVE_DOWN,
        "k": Action.MOVE_UP,
        "l": Action.MOVE_RIGHT,
        "0": Action.LINE_START,
        "$": Action.LINE_END,
        "gg": Action.GOTO_TOP,
        "G": Action.GOTO_BOTTOM,
        "w": Action.WORD_FORWARD,
        "b": Action.WORD_BACKWARD,
        "e": Action.WORD_END,
        "i": Action.INSERT,
        "a": Action.APPEND,
        "A": Action.APPEND_LINE_END,
        "I": Action.INSERT_LINE_START,
        "o": Action.OPEN_BELOW,
        "O": Action.OPEN_ABOVE,
        "x": Action.DELETE_CHAR,
        "dd": Action.DELETE_LINE,
        "d": Action.DELETE,
        "c": Action.CHANGE,
        "y": Action.YANK,
        "u": Action.UNDO,
        "p": Action.PASTE_AFTER,
        "P": Action.PASTE_BEFORE,
        ":": Action.COMMAND,
    }
)

_NAMED_KEYS: Mapping[str, str] = MappingProxyType(
    {
        "esc": "ESC",
        "escape": "ESC",
        "cr": "ENTER",
        "enter": "ENTER",
        "return": "ENTER",
        "bs": "BACKSPACE",
        "backspace": "BACKSPACE",
        "tab": "\t",
        "space": " ",
        "left": "LEFT",
        "right": "RIGHT",
        "up": "UP",
        "down": "DOWN",
        "lt": "<",
    }
)

_MODIFIER_PREFIXES: Mapping[str, str] = MappingProxyType(
    {"c": "ctrl", "ctrl": "ctrl", "a": "alt", "alt": "alt", "m": "alt", "s": "shift"}
)


def normalize_modifiers(modifiers: Iterable[str]) -> tuple[str, ...]:
    values = tuple(m.strip().lower() for m in modifiers if m.strip())
    return tuple(sorted(dict.fromkeys(values)))


@dataclass(frozen=True, slots=True)
class KeyStroke:
    """Single normalized key press used by key sequences."""

    key: str
    modifiers: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.key:
            raise ValueError("key cannot be empty")
        object.__setattr__(self, "modifiers", normalize_modifiers(self.modifiers))

    @property
    def token(self) -> str:
        if self.modifiers:
            modifier = "+".join(self.modifiers)
            return f"{modifier}+{self.key}"
        return self.key

    @classmethod
    def from_notation(cls, name: str) -> "KeyStroke":
        """Parse the inside of a ``<...>`` key name such as ``C-r`` or ``Esc``."""

        parts = name.split("-")
        key = parts[-1]
        modifiers = []
        for prefix in parts[:-1]:
            modifier = _MODIFIER_PREFIXES.get(prefix.lower())
            if modifier is None:
                raise ValueError(f"Unknown key modifier '{prefix}' in <{name}>")
            modifiers.append(modifier)
        named = _NAMED_KEYS.get(key.lower())
        if named is not None:
            key = named
        elif modifiers and len(key) == 1:
            key = key.lower()
        elif len(key) != 1:
            raise ValueError(f"Unknown key name <{name}>")
        return cls(key=key, modifiers=tuple(modifiers))


@dataclass(frozen=True, slots=True)
class KeySequence:
    """Immutable collection of keystrokes."""

    strokes: tuple[KeyStroke, ...]
    timeout_ms: int = DEFAULT_SEQUENCE_TIMEOUT_MS

    def __post_init__(self) -> None:
        if not self.strokes:
            raise ValueError("KeySequence requires at least one stroke")

    @property
    def tokens(self) -> tuple[str, ...]:
        return tuple(stroke.token for stroke in self.strokes)

    @classmethod
    def parse(
        cls, notation: str, *, timeout_ms: int = DEFAULT_SEQUENCE_TIMEOUT_MS
    ) -> "KeySequence":
        """Parse ``"gg"``, ``"<C-r>"`` or ``"<C-g>u"`` into a sequence."""

        strokes: list[KeyStroke] = []
        index = 0
        while index < len(notation):
            char = notation[index]
            if char == "<":
                close = notation.find(">", index + 1)
                if close > index + 1:
                    strokes.append(KeyStroke.from_notation(notation[index + 1 : close]))
                    index = close + 1
                    continue
            strokes.append(KeyStroke(key=char))
            index += 1
        return cls(strokes=tuple(strokes), timeout_ms=timeout_ms)


@dataclass(frozen=True, slots=True)
class ActionRef:
    """Callable metadata used during binding execution.

    ``mutates`` marks actions the interpreter wraps in an undo group.
    """

    id: str
    handler: Callable[..., object]
    kind: ActionKind = ActionKind.COMMAND
    mutates: bool = False
    description: str = ""

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("ActionRef id cannot be empty")
        if not callable(self.handler):
            raise TypeError("handler must be callable")

    def __call__(self, *args: object, **kwargs: object) -> object:
        return self.handler(*args, **kwargs)


@dataclass(frozen=True, slots=True)
class Binding:
    """Associates a key sequence in one mode with an action."""

    id: str
    mode: str
    sequence: KeySequence
    action_id: str
    source: str | None = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("binding id cannot be empty")
        if not self.mode:
            raise ValueError("binding mode cannot be empty")
        if not self.action_id:
            raise ValueError("binding action_id cannot be empty")
        object.__setattr__(self, "mode", str(getattr(self.mode, "value", self.mode)))
        object.__setattr__(
            self, "action_id", str(getattr(self.action_id, "value", self.action_id))
        )

    @property
    def key_signature(self) -> str:
        return " ".join(self.sequence.tokens)


__all__ = [
    "Action",
    "ActionKind",
    "ActionRef",
    "Binding",
    "DEFAULT_SEQUENCE_TIMEOUT_MS",
    "KeySequence",
    "KeyStroke",
    "LEGACY_ALIASES",
    "normalize_modifiers",
]
