"""Modal (Vim-style) keystroke matching and remapping engine."""

__all__ = [
    "adapters",
    "config",
    "errors",
    "hosts",
    "keymaps",
    "modes",
    "remapping",
    "runtime",
    "session",
]

__version__ = "0.1.0"
