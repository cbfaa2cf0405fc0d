from __future__ import annotations

import asyncio
from typing import Any, List, Sequence, Tuple

import pytest

from modal_input.config import KeyRemapping, RemapCommand
from modal_input.keymaps import Mode
from modal_input.remapping import (
    InsertModeRemapper,
    OtherModesRemapper,
    RemapGuard,
    Remapper,
)
from modal_input.session import ChangeHistory, SessionState


class RecordingModeHandler:
    def __init__(self, guard: RemapGuard | None = None) -> None:
        self.replayed: List[Tuple[str, ...]] = []
        self.guard_during_replay: List[bool] = []
        self.view_updates = 0
        self._guard = guard

    async def handle_multiple_key_events(self, keys: Sequence[str]) -> None:
        self.replayed.append(tuple(keys))
        if self._guard is not None:
            self.guard_during_replay.append(self._guard.active)

    async def update_view(self) -> None:
        self.view_updates += 1


class RecordingCommandLine:
    def __init__(self) -> None:
        self.commands: List[str] = []

    async def run(self, command: str, state: SessionState) -> None:
        self.commands.append(command)


class RecordingHostCommands:
    def __init__(self, calls: List[Tuple[str, Tuple[Any, ...]]] | None = None) -> None:
        self.calls = calls if calls is not None else []

    async def execute_command(self, command: str, *args: Any) -> None:
        self.calls.append((command, args))


class FailingModeHandler(RecordingModeHandler):
    async def handle_multiple_key_events(self, keys: Sequence[str]) -> None:
        raise RuntimeError("replay failed")


def make_remapping(
    before: Sequence[str],
    after: Sequence[str] | None = None,
    commands: Sequence[RemapCommand] | None = None,
) -> KeyRemapping:
    return KeyRemapping(
        before=tuple(before),
        after=tuple(after) if after is not None else None,
        commands=tuple(commands) if commands is not None else None,
    )


def make_insert_state(typed: str) -> SessionState:
    """Insert-mode session where every char of ``typed`` was already inserted."""

    state = SessionState(mode=Mode.INSERT, history=ChangeHistory())
    col = 0
    for char in typed:
        state.history.record_insert(char, (0, col))  # type: ignore[attr-defined]
        state.key_history.append(char)
        col += 1
    state.cursor_position = (0, col)
    return state


def send(remapper: Remapper, keys: Sequence[str], handler: Any, state: SessionState):
    return asyncio.run(remapper.send_key(list(keys), handler, state))


def test_mode_outside_remapper_scope_is_not_found() -> None:
    remapper = InsertModeRemapper([make_remapping("jj", ["<Esc>"])], recursive=True)
    state = SessionState(mode=Mode.NORMAL)

    result = send(remapper, ["j", "j"], RecordingModeHandler(), state)

    assert not result.found
    assert not result.handled
    assert not remapper.is_potential_remap


def test_insert_mode_sliding_window_reverts_only_trigger_prefix() -> None:
    remapper = InsertModeRemapper([make_remapping("jj", ["<Esc>"])], recursive=True)
    state = make_insert_state("hello j")
    handler = RecordingModeHandler()

    result = send(remapper, list("hello jj"), handler, state)

    assert result.found and result.handled
    assert result.remapped_key_count == 2
    assert handler.replayed == [("<Esc>",)]
    # only the first "j" is reverted, "hello " is untouched
    assert [entry.text for entry in state.history.entries] == list("hello ")  # type: ignore[attr-defined]
    assert state.cursor_position == (0, 6)
    assert state.key_history == list("hello ")


def test_insert_mode_reverts_once_per_cursor() -> None:
    remapper = InsertModeRemapper([make_remapping("jk", ["<Esc>"])], recursive=True)
    state = make_insert_state("abjj")
    state.cursors.append((1, 4))

    send(remapper, ["j", "k"], RecordingModeHandler(), state)

    assert len(state.history) == 2  # type: ignore[arg-type]


def test_shortest_window_wins_in_insert_mode() -> None:
    remapper = InsertModeRemapper(
        [make_remapping("abc", ["X"]), make_remapping("c", ["Y"])], recursive=True
    )
    state = make_insert_state("ab")
    handler = RecordingModeHandler()

    send(remapper, ["a", "b", "c"], handler, state)

    assert handler.replayed == [("Y",)]


def test_other_modes_require_whole_sequence() -> None:
    remapper = OtherModesRemapper([make_remapping("jj", [":"])], recursive=True)
    state = SessionState(mode=Mode.NORMAL)
    handler = RecordingModeHandler()

    miss = send(remapper, ["x", "j", "j"], handler, state)
    hit = send(remapper, ["j", "j"], handler, state)

    assert not miss.found and not miss.handled
    assert hit.handled
    assert handler.replayed == [(":",)]


def test_other_modes_trim_pending_keys_without_touching_history() -> None:
    remapper = OtherModesRemapper([make_remapping("gX", ["G"])], recursive=True)
    history = ChangeHistory()
    history.record_insert("a", (0, 0))
    state = SessionState(mode=Mode.NORMAL, history=history)
    state.recorded_state.action_keys.append("g")
    state.key_history.extend(["d", "g"])
    state.cursor_position = (0, 3)

    send(remapper, ["g", "X"], RecordingModeHandler(), state)

    assert state.recorded_state.action_keys == []
    assert state.key_history == ["d"]
    assert len(history) == 1
    assert state.cursor_position == (0, 3)


def test_disabled_remapping_is_found_but_not_handled() -> None:
    remapper = OtherModesRemapper([make_remapping("jk")], recursive=True)
    handler = RecordingModeHandler()

    result = send(remapper, ["j", "k"], handler, SessionState(mode=Mode.NORMAL))

    assert result.found
    assert not result.handled
    assert handler.replayed == []


def test_disabled_remapping_with_empty_lists_is_inert() -> None:
    remapping = make_remapping("jk", after=[], commands=[])
    remapper = OtherModesRemapper([remapping], recursive=True)

    result = send(remapper, ["j", "k"], RecordingModeHandler(), SessionState())

    assert remapping.is_disabled
    assert result.found and not result.handled


def test_potential_remap_for_prefix() -> None:
    remapper = OtherModesRemapper([make_remapping(["\\", "w"], ["Z"])], recursive=True)
    state = SessionState(mode=Mode.NORMAL)

    first = send(remapper, ["\\"], RecordingModeHandler(), state)
    assert not first.handled
    assert remapper.is_potential_remap

    send(remapper, ["x"], RecordingModeHandler(), state)
    assert not remapper.is_potential_remap


def test_count_prefix_replays_after_sequence_count_times() -> None:
    remapper = OtherModesRemapper([make_remapping("Q", ["j", "j"])], recursive=True)
    state = SessionState(mode=Mode.NORMAL)
    state.recorded_state.count = 3
    handler = RecordingModeHandler()

    send(remapper, ["Q"], handler, state)

    assert handler.replayed == [("j", "j")] * 3
    assert state.recorded_state.count == 0


def test_commands_run_in_order() -> None:
    calls: List[Tuple[str, Tuple[Any, ...]]] = []
    command_line = RecordingCommandLine()
    remapper = OtherModesRemapper(
        [
            make_remapping(
                ["\\", "w"],
                commands=[
                    RemapCommand(":w"),
                    RemapCommand("workbench.action.closeActiveEditor", ("now",)),
                ],
            )
        ],
        recursive=True,
        command_line=command_line,
        host_commands=RecordingHostCommands(calls),
    )
    handler = RecordingModeHandler()

    result = send(remapper, ["\\", "w"], handler, SessionState(mode=Mode.NORMAL))

    assert result.handled
    assert command_line.commands == ["w"]
    assert handler.view_updates == 1
    assert calls == [("workbench.action.closeActiveEditor", ("now",))]


def test_non_recursive_remapper_sets_guard_during_replay() -> None:
    guard = RemapGuard()
    remapper = OtherModesRemapper(
        [make_remapping("Q", ["j"])], recursive=False, guard=guard
    )
    handler = RecordingModeHandler(guard)

    send(remapper, ["Q"], handler, SessionState(mode=Mode.NORMAL))

    assert handler.guard_during_replay == [True]
    assert guard.active is False


def test_recursive_remapper_leaves_guard_clear() -> None:
    guard = RemapGuard()
    remapper = OtherModesRemapper([make_remapping("Q", ["j"])], recursive=True, guard=guard)
    handler = RecordingModeHandler(guard)

    send(remapper, ["Q"], handler, SessionState(mode=Mode.NORMAL))

    assert handler.guard_during_replay == [False]


def test_replay_failure_propagates_and_leaves_guard_set() -> None:
    guard = RemapGuard()
    remapper = OtherModesRemapper(
        [make_remapping("Q", ["j"])], recursive=False, guard=guard
    )

    with pytest.raises(RuntimeError, match="replay failed"):
        send(remapper, ["Q"], FailingModeHandler(), SessionState(mode=Mode.NORMAL))

    assert guard.active is True


def test_longest_key_sequence_defaults_to_one() -> None:
    assert InsertModeRemapper([], recursive=True).longest_key_sequence() == 1
