"""Session state consumed by the matcher and remappers."""

from .history import ChangeEntry, ChangeHistory
from .state import Cursor, RecordedState, SessionState, trim_tail

__all__ = [
    "ChangeEntry",
    "ChangeHistory",
    "Cursor",
    "RecordedState",
    "SessionState",
    "trim_tail",
]
