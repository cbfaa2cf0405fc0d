"""A single remapper: one remapping table scoped to a set of modes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from modal_input.config import KeyRemapping
from modal_input.hosts import CommandLine, HostCommands, ModeHandler
from modal_input.keymaps.models import Mode
from modal_input.runtime import telemetry
from modal_input.session.state import SessionState, trim_tail

LOGGER_NAME = "modal_input.remapping"


@dataclass(frozen=True, slots=True)
class RemapResult:
    """Outcome of ``send_key``.

    ``found`` means some remapping's ``before`` equals the keys (disabled ones
    included); ``handled`` means a remapping was applied. ``remapped_key_count``
    is the length of the applied ``before`` sequence, zero otherwise.
    """

    found: bool = False
    handled: bool = False
    remapped_key_count: int = 0


NOT_FOUND = RemapResult()


class RemapGuard:
    """Set while a non-recursive remapping replays its keys."""

    __slots__ = ("active",)

    def __init__(self) -> None:
        self.active = False


def _joined(keys: Iterable[str]) -> str:
    return "".join(keys)


class Remapper:
    """Matches pressed keys against one table and applies the remapping.

    Insert-mode remappers look at trailing windows of the keys so text typed
    before a trigger (``hello jj``) does not prevent a match; other remappers
    require the whole key sequence to match.
    """

    def __init__(
        self,
        remappings: Iterable[KeyRemapping],
        modes: Iterable[Mode],
        *,
        recursive: bool,
        name: str = "remapper",
        guard: Optional[RemapGuard] = None,
        command_line: Optional[CommandLine] = None,
        host_commands: Optional[HostCommands] = None,
    ) -> None:
        self.name = name
        self._remappings: tuple[KeyRemapping, ...] = tuple(remappings)
        self._modes: frozenset[Mode] = frozenset(modes)
        self._recursive = recursive
        self._guard = guard or RemapGuard()
        self._command_line = command_line
        self._host_commands = host_commands
        self._is_potential_remap = False

    @property
    def is_potential_remap(self) -> bool:
        """Whether the keys from the last ``send_key`` may still become a remap."""

        return self._is_potential_remap

    @property
    def recursive(self) -> bool:
        return self._recursive

    @property
    def modes(self) -> frozenset[Mode]:
        return self._modes

    @property
    def remappings(self) -> tuple[KeyRemapping, ...]:
        return self._remappings

    @property
    def guard(self) -> RemapGuard:
        return self._guard

    @property
    def covers_insert_mode(self) -> bool:
        return Mode.INSERT in self._modes

    def longest_key_sequence(self) -> int:
        if not self._remappings:
            return 1
        return max(len(remapping.before) for remapping in self._remappings)

    async def send_key(
        self,
        keys: Sequence[str],
        mode_handler: ModeHandler,
        state: SessionState,
    ) -> RemapResult:
        self._is_potential_remap = False

        if state.mode not in self._modes:
            return NOT_FOUND

        keys = tuple(keys)
        found, remapping = self._find_remapping(keys)

        if remapping is not None:
            assert found, "a selected remapping must have been found"
            with telemetry.span(
                "remap::apply",
                logger_name=LOGGER_NAME,
                component="remapping",
                metadata={"remapper": self.name, "before": remapping.before},
            ):
                await self._apply(remapping, mode_handler, state)
            return RemapResult(
                found=True, handled=True, remapped_key_count=len(remapping.before)
            )

        typed = _joined(keys)
        for candidate in self._remappings:
            if typed == _joined(candidate.before[: len(keys)]):
                self._is_potential_remap = True
                telemetry.record_event(
                    "remap.potential",
                    logger_name=LOGGER_NAME,
                    level="debug",
                    data={"remapper": self.name, "keys": keys},
                )
                break

        return RemapResult(found=found, handled=False)

    def _find_remapping(
        self, keys: tuple[str, ...]
    ) -> tuple[bool, Optional[KeyRemapping]]:
        if not self.covers_insert_mode:
            return self._match_window(keys)

        found = False
        for window in range(1, self.longest_key_sequence() + 1):
            window_found, remapping = self._match_window(keys[-window:])
            found = found or window_found
            if remapping is not None:
                return found, remapping
        return found, None

    def _match_window(
        self, keys: tuple[str, ...]
    ) -> tuple[bool, Optional[KeyRemapping]]:
        typed = _joined(keys)
        found = False
        for remapping in self._remappings:
            if remapping.signature != typed:
                continue
            found = True
            if not remapping.is_disabled:
                return found, remapping
        return found, None

    async def _apply(
        self,
        remapping: KeyRemapping,
        mode_handler: ModeHandler,
        state: SessionState,
    ) -> None:
        if not self._recursive:
            self._guard.active = True

        # Replayed keys run as part of the remapped command.
        state.recorded_state.number_of_remapped_keys += len(remapping.before)

        # The final key of ``before`` has not been committed by the caller yet.
        num_to_remove = len(remapping.before) - 1

        if self.covers_insert_mode:
            await state.history.undo_and_remove_changes(
                max(0, num_to_remove * state.cursor_count)
            )
            state.move_cursor_left(num_to_remove)

        trim_tail(state.recorded_state.action_keys, num_to_remove)
        trim_tail(state.key_history, num_to_remove)

        telemetry.record_event(
            "remap.applied",
            logger_name=LOGGER_NAME,
            data={
                "remapper": self.name,
                "before": remapping.before,
                "after": remapping.after or (),
                "commands": len(remapping.commands or ()),
            },
        )

        if remapping.after:
            count = state.recorded_state.count or 1
            state.recorded_state.count = 0
            for _ in range(count):
                await mode_handler.handle_multiple_key_events(remapping.after)

        for command in remapping.commands or ():
            if command.is_command_line:
                if self._command_line is None:
                    raise RuntimeError(
                        f"No command line configured for '{command.command}'"
                    )
                await self._command_line.run(command.command[1:], state)
                await mode_handler.update_view()
            else:
                if self._host_commands is None:
                    raise RuntimeError(
                        f"No host command surface configured for '{command.command}'"
                    )
                await self._host_commands.execute_command(command.command, *command.args)

        self._guard.active = False


class InsertModeRemapper(Remapper):
    def __init__(
        self, remappings: Iterable[KeyRemapping], *, recursive: bool, **kwargs
    ) -> None:
        kwargs.setdefault(
            "name", "insert" if recursive else "insert_non_recursive"
        )
        super().__init__(remappings, (Mode.INSERT,), recursive=recursive, **kwargs)


class OtherModesRemapper(Remapper):
    def __init__(
        self, remappings: Iterable[KeyRemapping], *, recursive: bool, **kwargs
    ) -> None:
        kwargs.setdefault("name", "other" if recursive else "other_non_recursive")
        super().__init__(
            remappings,
            (Mode.NORMAL, Mode.VISUAL, Mode.VISUAL_LINE, Mode.VISUAL_BLOCK),
            recursive=recursive,
            **kwargs,
        )


__all__ = [
    "InsertModeRemapper",
    "OtherModesRemapper",
    "RemapGuard",
    "RemapResult",
    "Remapper",
]
