"""Change history with the undo-and-forget operation used by insert remaps."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

Position = Tuple[int, int]


@dataclass(slots=True)
class ChangeEntry:
    label: str
    text: str
    cursor_before: Position
    cursor_after: Position


class ChangeHistory:
    """Linear list of applied changes.

    The document itself is owned by the host; ``revert`` is called once per
    removed change, newest first, so the host can undo it.
    """

    def __init__(self, revert: Optional[Callable[[ChangeEntry], None]] = None) -> None:
        self._entries: List[ChangeEntry] = []
        self._revert = revert

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> Tuple[ChangeEntry, ...]:
        return tuple(self._entries)

    def push(self, entry: ChangeEntry) -> None:
        self._entries.append(entry)

    def record_insert(self, text: str, cursor: Position) -> ChangeEntry:
        row, col = cursor
        entry = ChangeEntry(
            label="insert_text",
            text=text,
            cursor_before=cursor,
            cursor_after=(row, col + len(text)),
        )
        self.push(entry)
        return entry

    async def undo_and_remove_changes(self, count: int) -> List[ChangeEntry]:
        removed: List[ChangeEntry] = []
        for _ in range(min(max(count, 0), len(self._entries))):
            entry = self._entries.pop()
            if self._revert is not None:
                self._revert(entry)
            removed.append(entry)
        return removed


__all__ = ["ChangeEntry", "ChangeHistory"]
