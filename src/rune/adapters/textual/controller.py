"""Textual-agnostic controller that feeds keys to a session and forwards diffs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Optional

from rune.modes import KeyInput, ModeResult
from rune.runtime import telemetry
from rune.session import EditorSession
from rune.view import RenderDiff


def _noop(*_args, **_kwargs) -> None:  # pragma: no cover - default hook
    return None


# Textual key names that map onto editor key names.
SPECIAL_KEYS: Dict[str, str] = {
    "escape": "ESC",
    "enter": "ENTER",
    "return": "ENTER",
    "backspace": "BACKSPACE",
    "ctrl+h": "BACKSPACE",
    "left": "LEFT",
    "right": "RIGHT",
    "up": "UP",
    "down": "DOWN",
}


def normalize_key(key: str, character: Optional[str] = None) -> Optional[KeyInput]:
    """Translate a Textual key event into a :class:`KeyInput`.

    Returns ``None`` for keys the editor has no use for (function keys,
    bare modifiers).
    """

    special = SPECIAL_KEYS.get(key)
    if special is not None:
        return KeyInput(key=special)
    if key == "tab":
        return KeyInput.char("\t")

    parts = key.split("+")
    base = parts[-1]
    modifiers = tuple(part for part in parts[:-1] if part and part != "shift")
    if modifiers and len(base) == 1:
        return KeyInput(key=base.lower(), modifiers=modifiers)
    if character and character.isprintable():
        return KeyInput.char(character)
    return None


@dataclass(slots=True)
class TextualUIHooks:
    """Callbacks the controller uses to update Textual widgets."""

    draw: Callable[[RenderDiff], None]
    quit: Callable[[], None] = _noop
    handle_event: Callable[[str, object | None], None] = _noop


class TextualEditorController:
    """Bridges an :class:`EditorSession` and its bus events to the UI."""

    def __init__(self, session: EditorSession, hooks: TextualUIHooks) -> None:
        self.session = session
        self.hooks = hooks
        self.logger = telemetry.get_logger("rune.adapters.textual")
        self._subscribe_events()

    def handle_textual_key(
        self, key: str, *, character: Optional[str] = None
    ) -> Optional[ModeResult]:
        normalized = normalize_key(key, character)
        if normalized is None:
            self.logger.debug("ignored key %r", key)
            return None
        result = self.session.handle_key(normalized)
        self.logger.debug(
            "key %r -> status=%s switch_to=%s", key, result.status, result.switch_to
        )
        self._after_input()
        return result

    def process_timeouts(self) -> Dict[str, ModeResult]:
        results = self.session.process_timeouts()
        if results:
            self._after_input()
        return results

    def resize(self, rows: int, cols: int) -> None:
        self.session.resize(rows, cols)
        self.refresh()

    def refresh(self) -> RenderDiff:
        diff = self.session.render()
        self.hooks.draw(diff)
        return diff

    def _after_input(self) -> None:
        self.refresh()
        if self.session.should_quit:
            self.hooks.quit()

    def _subscribe_events(self) -> None:
        for event in (
            "command.start",
            "command.end",
            "command.submit",
            "command.error",
            "command.write",
            "command.quit",
        ):
            self.session.bus.subscribe(
                event, lambda payload, name=event: self.hooks.handle_event(name, payload)
            )


__all__ = [
    "SPECIAL_KEYS",
    "TextualEditorController",
    "TextualUIHooks",
    "normalize_key",
]
