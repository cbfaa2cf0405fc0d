"""Fixed-priority chain of the four configured remappers."""

from __future__ import annotations

from typing import Optional, Sequence

from modal_input.config import (
    INSERT_MODE_KEY_BINDINGS,
    INSERT_MODE_KEY_BINDINGS_NON_RECURSIVE,
    OTHER_MODES_KEY_BINDINGS,
    OTHER_MODES_KEY_BINDINGS_NON_RECURSIVE,
    RemapConfiguration,
)
from modal_input.hosts import CommandLine, HostCommands, ModeHandler
from modal_input.runtime import telemetry
from modal_input.session.state import SessionState

from .remapper import (
    LOGGER_NAME,
    InsertModeRemapper,
    OtherModesRemapper,
    RemapGuard,
    Remapper,
    RemapResult,
)


class RemapperChain:
    """Consults remappers in order and stops at the first that handles the keys.

    Order: insert/recursive, other modes/recursive, insert/non-recursive,
    other modes/non-recursive. All four share one ``RemapGuard``, set while a
    non-recursive remapping replays keys; callers check
    ``is_performing_remapping`` and skip the chain for those keys.
    """

    def __init__(self, remappers: Sequence[Remapper], *, guard: RemapGuard) -> None:
        self._remappers = tuple(remappers)
        self._guard = guard

    @classmethod
    def from_configuration(
        cls,
        config: RemapConfiguration,
        *,
        command_line: Optional[CommandLine] = None,
        host_commands: Optional[HostCommands] = None,
    ) -> "RemapperChain":
        guard = RemapGuard()
        shared = {
            "guard": guard,
            "command_line": command_line,
            "host_commands": host_commands,
        }
        remappers = (
            InsertModeRemapper(
                config.table(INSERT_MODE_KEY_BINDINGS), recursive=True, **shared
            ),
            OtherModesRemapper(
                config.table(OTHER_MODES_KEY_BINDINGS), recursive=True, **shared
            ),
            InsertModeRemapper(
                config.table(INSERT_MODE_KEY_BINDINGS_NON_RECURSIVE),
                recursive=False,
                **shared,
            ),
            OtherModesRemapper(
                config.table(OTHER_MODES_KEY_BINDINGS_NON_RECURSIVE),
                recursive=False,
                **shared,
            ),
        )
        return cls(remappers, guard=guard)

    @property
    def remappers(self) -> tuple[Remapper, ...]:
        return self._remappers

    @property
    def is_potential_remap(self) -> bool:
        return any(remapper.is_potential_remap for remapper in self._remappers)

    @property
    def is_performing_remapping(self) -> bool:
        return self._guard.active

    def longest_key_sequence(self) -> int:
        return max(remapper.longest_key_sequence() for remapper in self._remappers)

    async def send_key(
        self,
        keys: Sequence[str],
        mode_handler: ModeHandler,
        state: SessionState,
    ) -> RemapResult:
        found = False
        for remapper in self._remappers:
            result = await remapper.send_key(keys, mode_handler, state)
            if result.handled:
                telemetry.record_event(
                    "remap.handled",
                    logger_name=LOGGER_NAME,
                    level="debug",
                    data={"remapper": remapper.name, "keys": tuple(keys)},
                )
                return result
            found = found or result.found
        return RemapResult(found=found, handled=False)


__all__ = ["RemapperChain"]
