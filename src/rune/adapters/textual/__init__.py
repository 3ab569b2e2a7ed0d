"""Textual driver for the editor."""

from .controller import TextualEditorController, TextualUIHooks, normalize_key

__all__ = ["TextualEditorController", "TextualUIHooks", "normalize_key"]
