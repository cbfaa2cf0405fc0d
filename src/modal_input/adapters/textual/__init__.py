"""Adapter for Textual key events."""

from .controller import TextualKeyAdapter, TextualUIHooks, key_to_token

__all__ = ["TextualKeyAdapter", "TextualUIHooks", "key_to_token"]
