"""Modal terminal text editor with a Vim-style command grammar."""

__all__ = [
    "actions",
    "adapters",
    "buffer",
    "config",
    "errors",
    "files",
    "keymaps",
    "modes",
    "runtime",
    "session",
    "view",
]

__version__ = "0.1.0"
