"""Per-keystroke control flow: remapper chain first, then action resolution."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from modal_input.config import RemapConfiguration
from modal_input.hosts import ActionExecutor, CommandLine, HostCommands
from modal_input.keymaps import (
    Action,
    ActionRegistry,
    ActionResolver,
    KeypressState,
    Mode,
    default_registry,
)
from modal_input.remapping import RemapperChain
from modal_input.runtime import telemetry
from modal_input.session.state import SessionState

from .im_switch import CommandRunner, InputMethodSwitcher

LOGGER_NAME = "modal_input.modes"
NO_COUNT_MODES = frozenset({Mode.INSERT, Mode.COMMAND})


@dataclass(slots=True)
class DispatchResult:
    """Result returned from ``KeypressDispatcher.handle_key_event``."""

    consumed: bool
    status: str = "ok"
    action: Optional[Action] = None
    switch_to: Optional[Mode] = None


class KeypressDispatcher:
    """Routes host keystrokes through remapping and action resolution.

    Doubles as the mode handler remappers replay keys through, so replayed
    keys take exactly the same path as typed ones.
    """

    def __init__(
        self,
        state: SessionState,
        resolver: ActionResolver,
        remappers: RemapperChain,
        executor: ActionExecutor,
        *,
        timeout_ms: int = 1000,
        refresh: Optional[Callable[[SessionState], None]] = None,
        im_switcher: Optional[InputMethodSwitcher] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.state = state
        self.resolver = resolver
        self.remappers = remappers
        self.executor = executor
        self.timeout_ms = timeout_ms
        self._refresh = refresh
        self._im_switcher = im_switcher
        self._clock = clock
        self._last_key_at: Optional[float] = None

    @classmethod
    def from_configuration(
        cls,
        config: RemapConfiguration,
        executor: ActionExecutor,
        *,
        registry: Optional[ActionRegistry] = None,
        state: Optional[SessionState] = None,
        command_line: Optional[CommandLine] = None,
        host_commands: Optional[HostCommands] = None,
        refresh: Optional[Callable[[SessionState], None]] = None,
        im_runner: Optional[CommandRunner] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> "KeypressDispatcher":
        resolver = ActionResolver(
            registry if registry is not None else default_registry(),
            leader=config.leader,
            logger_name="modal_input.keymaps",
        )
        remappers = RemapperChain.from_configuration(
            config, command_line=command_line, host_commands=host_commands
        )
        return cls(
            state or SessionState(),
            resolver,
            remappers,
            executor,
            timeout_ms=config.timeout_ms,
            refresh=refresh,
            im_switcher=InputMethodSwitcher(config.input_method, im_runner),
            clock=clock,
        )

    @property
    def mode(self) -> Mode:
        return self.state.mode

    @property
    def is_waiting(self) -> bool:
        """Keys are pending, either as an action prefix or a potential remap."""

        return bool(self.state.recorded_state.action_keys) or (
            self.remappers.is_potential_remap
        )

    async def handle_key_event(self, key: str) -> DispatchResult:
        recorded = self.state.recorded_state
        recorded.command_list.append(key)
        keys = self._remap_candidates(key)

        with telemetry.span(
            f"dispatch::{self.state.mode.value}",
            logger_name=LOGGER_NAME,
            component=True,
            metadata={"key": key, "mode": self.state.mode.value},
        ) as handle:
            if not self.remappers.is_performing_remapping:
                remap = await self.remappers.send_key(keys, self, self.state)
                if remap.handled:
                    # the remapped command, replay included, has completed
                    recorded.reset_command_list()
                    recorded.number_of_remapped_keys = 0
                    handle.add_metadata("status", "remapped")
                    return DispatchResult(consumed=True, status="remapped")

            result = await self._handle_action_key(key)
            handle.add_metadata("status", result.status)
            return result

    async def handle_multiple_key_events(self, keys: Sequence[str]) -> None:
        """Replay ``keys`` one at a time as a fresh command.

        The keys that triggered a remap are consumed by it, so they must not
        prefix the replayed ones.
        """

        self.state.recorded_state.reset_command_list()
        for key in keys:
            await self.handle_key_event(key)

    async def update_view(self) -> None:
        if self._refresh is not None:
            self._refresh(self.state)

    def switch_mode(self, mode: Mode) -> None:
        previous = self.state.mode
        if previous is mode:
            return
        self.state.set_mode(mode)
        self._after_mode_change(previous, mode)

    def _remap_candidates(self, key: str) -> list[str]:
        now = self._clock()
        within_timeout = (
            self._last_key_at is not None
            and (now - self._last_key_at) * 1000 < self.timeout_ms
        )
        self._last_key_at = now
        if not within_timeout:
            # only the latest key may start a remap after a pause
            return [key]
        recorded = self.state.recorded_state
        if self.state.mode in NO_COUNT_MODES:
            return list(recorded.command_list)
        return recorded.command_without_count_prefix or [key]

    async def _handle_action_key(self, key: str) -> DispatchResult:
        state = self.state
        recorded = state.recorded_state
        state.key_history.append(key)

        if self._consume_count(key):
            return DispatchResult(consumed=True, status="count")

        recorded.action_keys.append(key)
        resolution = self.resolver.resolve(recorded.action_keys, state)

        if resolution is KeypressState.WAITING_ON_KEYS:
            return DispatchResult(consumed=True, status="pending")
        if resolution is KeypressState.NO_POSSIBLE_MATCH:
            if state.mode is not Mode.INSERT and self.remappers.is_potential_remap:
                # keep the command list so the next key can complete the remap
                recorded.action_keys.clear()
                return DispatchResult(consumed=True, status="pending_remap")
            recorded.reset()
            return DispatchResult(consumed=False, status="miss")

        action = resolution
        previous = state.mode
        telemetry.record_event(
            "action.matched",
            logger_name=LOGGER_NAME,
            level="debug",
            data={"kind": action.kind, "keys": action.keys_pressed},
        )
        await self.executor(action, state)
        recorded.action_keys.clear()

        if state.mode is not previous:
            state.previous_mode = previous
            self._after_mode_change(previous, state.mode)
            return DispatchResult(
                consumed=True, status="match", action=action, switch_to=state.mode
            )

        if state.mode is Mode.INSERT:
            window = self.remappers.longest_key_sequence()
            del recorded.command_list[:-window]
        elif not action.is_operator:
            recorded.reset()
        return DispatchResult(consumed=True, status="match", action=action)

    def _consume_count(self, key: str) -> bool:
        recorded = self.state.recorded_state
        if self.state.mode in NO_COUNT_MODES or recorded.action_keys:
            return False
        if len(key) != 1 or not key.isdigit():
            return False
        if key == "0" and recorded.count == 0:
            return False
        recorded.count = recorded.count * 10 + int(key)
        return True

    def _after_mode_change(self, previous: Mode, current: Mode) -> None:
        self.state.recorded_state.reset()
        telemetry.record_event(
            "mode.switch",
            logger_name=LOGGER_NAME,
            data={"from": previous.value, "mode": current.value},
        )
        if self._im_switcher is not None:
            self._im_switcher.mode_changed(previous, current)


__all__ = ["DispatchResult", "KeypressDispatcher"]
