"""Action resolution: exact match, potential match, or no match."""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence, Union

from modal_input.runtime.telemetry import span

from .matcher import KeypressMatcher
from .models import Action, ActionDescriptor, KeypressState
from .registry import ActionRegistry
from .tokens import DEFAULT_LEADER

if TYPE_CHECKING:
    from modal_input.session.state import SessionState

Resolution = Union[Action, KeypressState]


class ActionResolver:
    """Walks the registry in order and classifies the keys pressed so far."""

    def __init__(
        self,
        registry: ActionRegistry,
        *,
        leader: str = DEFAULT_LEADER,
        logger_name: str | None = None,
    ) -> None:
        self._registry = registry
        self._matcher = KeypressMatcher(leader)
        self._logger_name = logger_name

    @property
    def registry(self) -> ActionRegistry:
        return self._registry

    @property
    def leader(self) -> str:
        return self._matcher.leader

    def resolve(
        self,
        keys: Sequence[str],
        state: "SessionState",
        ignore_exact_match: bool = False,
    ) -> Resolution:
        pressed = tuple(keys)
        with span(
            "keymaps::resolve",
            logger_name=self._logger_name,
            component="keymaps",
            metadata={"mode": state.mode.value, "keys": pressed},
        ) as handle:
            potential = False
            for descriptor in self._registry:
                if descriptor.keys is None:
                    continue

                if not ignore_exact_match and self.applies(descriptor, pressed, state):
                    handle.add_metadata("status", "match")
                    handle.add_metadata("kind", descriptor.kind)
                    return descriptor.build(pressed)

                if not potential and self.could_apply(descriptor, pressed, state):
                    potential = True

            if potential:
                handle.add_metadata("status", "pending")
                return KeypressState.WAITING_ON_KEYS
            handle.add_metadata("status", "miss")
            return KeypressState.NO_POSSIBLE_MATCH

    def applies(
        self, descriptor: ActionDescriptor, keys: Sequence[str], state: "SessionState"
    ) -> bool:
        if state.mode not in descriptor.modes or descriptor.keys is None:
            return False
        if not self._matcher.matches(descriptor.keys, keys):
            return False
        return self._first_key_allowed(descriptor, keys, state)

    def could_apply(
        self, descriptor: ActionDescriptor, keys: Sequence[str], state: "SessionState"
    ) -> bool:
        if state.mode not in descriptor.modes or descriptor.keys is None:
            return False
        if not self._matcher.could_match(descriptor.keys, keys):
            return False
        return self._first_key_allowed(descriptor, keys, state)

    @staticmethod
    def _first_key_allowed(
        descriptor: ActionDescriptor, keys: Sequence[str], state: "SessionState"
    ) -> bool:
        if not descriptor.flags.must_be_first_key:
            return True
        pending = state.recorded_state.number_of_keys_in_command_without_count_prefix
        return pending - len(keys) <= 0


__all__ = ["ActionResolver", "Resolution"]
