"""Translate Textual key events into KeyTokens and dispatch them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Optional

from modal_input.modes import DispatchResult, KeypressDispatcher

SPECIAL_KEYS: Dict[str, str] = {
    "escape": "<Esc>",
    "backspace": "<BS>",
    "shift+backspace": "<Shift+BS>",
    "tab": "<Tab>",
    "enter": "<Enter>",
    "up": "<up>",
    "down": "<down>",
    "left": "<left>",
    "right": "<right>",
    "space": " ",
    "delete": "<Del>",
    "home": "<Home>",
    "end": "<End>",
    "pageup": "<PageUp>",
    "pagedown": "<PageDown>",
}

# Textual spells punctuation out in key names.
NAMED_CHARACTERS: Dict[str, str] = {
    "left_square_bracket": "[",
    "right_square_bracket": "]",
    "backslash": "\\",
    "circumflex_accent": "^",
    "underscore": "_",
}


def key_to_token(key: str, character: Optional[str] = None) -> str:
    """Map a Textual ``Key`` event (``key``, ``character``) to a KeyToken."""

    if key in SPECIAL_KEYS:
        return SPECIAL_KEYS[key]
    if key.startswith("ctrl+"):
        name = key[len("ctrl+") :]
        return f"<C-{NAMED_CHARACTERS.get(name, name)}>"
    if character is not None and len(character) == 1 and character.isprintable():
        return character
    if len(key) == 1:
        return key
    if key in NAMED_CHARACTERS:
        return NAMED_CHARACTERS[key]
    return f"<{key}>"


def _noop(*_args, **_kwargs) -> None:  # pragma: no cover - default hook
    return None


@dataclass(slots=True)
class TextualUIHooks:
    """Callbacks the adapter uses to update Textual widgets."""

    update_status: Callable[[str], None] = _noop
    show_pending: Callable[[str], None] = _noop
    log: Callable[[str], None] = _noop


class TextualKeyAdapter:
    """Bridges Textual ``Key`` events to a ``KeypressDispatcher``."""

    def __init__(self, dispatcher: KeypressDispatcher, hooks: TextualUIHooks) -> None:
        self.dispatcher = dispatcher
        self.hooks = hooks

    async def handle_textual_key(
        self, key: str, *, character: Optional[str] = None
    ) -> DispatchResult:
        token = key_to_token(key, character)
        self._log_state("key ->", key=key, token=token)
        result = await self.dispatcher.handle_key_event(token)
        self._after_result(result)
        self._log_state(
            "result <-",
            consumed=result.consumed,
            status=result.status,
            action=result.action.kind if result.action else None,
            switch_to=result.switch_to.value if result.switch_to else None,
        )
        return result

    def _after_result(self, result: DispatchResult) -> None:
        if result.switch_to is not None:
            self.hooks.update_status(result.switch_to.value)
        elif result.action is not None:
            self.hooks.update_status(result.action.kind)
        else:
            self.hooks.update_status(result.status)
        pending = self.dispatcher.state.recorded_state.command_list
        self.hooks.show_pending("".join(pending) if self.dispatcher.is_waiting else "")

    def _log_state(self, prefix: str, **fields: object) -> None:
        snapshot: Dict[str, object] = {
            "mode": self.dispatcher.mode.value,
            "cursor": self.dispatcher.state.cursor_position,
        }
        snapshot.update({k: v for k, v in fields.items() if v is not None})
        parts = [prefix] + [f"{key}={value!r}" for key, value in snapshot.items()]
        self.hooks.log(" ".join(parts))


__all__ = ["TextualKeyAdapter", "TextualUIHooks", "key_to_token"]
