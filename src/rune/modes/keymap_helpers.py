"""Helper utilities for keymap-driven modes."""

from __future__ import annotations

from rune.keymaps.models import normalize_modifiers
from rune.keymaps.resolver import KeymapResolver

from .base_mode import KeyInput, ModeContext

ESCAPE_TOKENS = frozenset({"ESC", "<Esc>"})


def key_to_token(key: KeyInput) -> str:
    modifiers = normalize_modifiers(key.modifiers)
    if modifiers:
        modifier = "+".join(modifiers)
        return f"{modifier}+{key.key}"
    return key.key


def require_keymap_resolver(context: ModeContext) -> KeymapResolver:
    resolver = context.extras.get("keymap_resolver")
    if not isinstance(resolver, KeymapResolver):
        raise RuntimeError("ModeContext.extras missing 'keymap_resolver'")
    return resolver


__all__ = [
    "ESCAPE_TOKENS",
    "key_to_token",
    "require_keymap_resolver",
]
