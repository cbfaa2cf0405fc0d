"""Per-session keystroke bookkeeping read and written by the engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional, Tuple

from modal_input.keymaps.models import Mode

from .history import ChangeHistory

if TYPE_CHECKING:
    from modal_input.hosts import ChangeTracker

Cursor = Tuple[int, int]  # (row, column)


def _strip_count_prefix(keys: List[str]) -> List[str]:
    index = 0
    if keys and len(keys[0]) == 1 and keys[0] in "123456789":
        while index < len(keys) and len(keys[index]) == 1 and keys[index].isdigit():
            index += 1
    return keys[index:]


@dataclass(slots=True)
class RecordedState:
    """Keys and counters for the command currently being typed."""

    action_keys: List[str] = field(default_factory=list)
    command_list: List[str] = field(default_factory=list)
    count: int = 0
    number_of_remapped_keys: int = 0

    @property
    def command_without_count_prefix(self) -> List[str]:
        return _strip_count_prefix(self.command_list)

    @property
    def number_of_keys_in_command_without_count_prefix(self) -> int:
        return len(self.command_without_count_prefix)

    def reset_command_list(self) -> None:
        self.command_list.clear()

    def reset(self) -> None:
        self.action_keys.clear()
        self.command_list.clear()
        self.count = 0
        self.number_of_remapped_keys = 0


@dataclass(slots=True)
class SessionState:
    """Editor facts the engine consumes: mode, cursors, key buffers, history."""

    mode: Mode = Mode.NORMAL
    cursors: List[Cursor] = field(default_factory=lambda: [(0, 0)])
    recorded_state: RecordedState = field(default_factory=RecordedState)
    key_history: List[str] = field(default_factory=list)
    history: "ChangeTracker" = field(default_factory=ChangeHistory)
    previous_mode: Optional[Mode] = None

    @property
    def cursor_position(self) -> Cursor:
        return self.cursors[0]

    @cursor_position.setter
    def cursor_position(self, cursor: Cursor) -> None:
        self.cursors[0] = cursor

    @property
    def cursor_count(self) -> int:
        return len(self.cursors)

    def move_cursor_left(self, columns: int) -> Cursor:
        row, col = self.cursor_position
        self.cursor_position = (row, max(0, col - columns))
        return self.cursor_position

    def set_mode(self, mode: Mode) -> None:
        if mode is self.mode:
            return
        self.previous_mode = self.mode
        self.mode = mode


def trim_tail(keys: List[str], count: int) -> None:
    """Drop ``count`` entries from the end of ``keys`` in place."""

    if count > 0:
        del keys[-count:]


__all__ = ["Cursor", "RecordedState", "SessionState", "trim_tail"]
