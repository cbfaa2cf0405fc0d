"""Protocols for the collaborators the engine drives but does not implement."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, Sequence

if TYPE_CHECKING:
    from modal_input.keymaps.models import Action
    from modal_input.session.state import SessionState


class ModeHandler(Protocol):
    """Replays synthetic keystrokes and refreshes the host view."""

    async def handle_multiple_key_events(self, keys: Sequence[str]) -> None:
        """Feed ``keys`` through normal key handling, one after another."""
        ...

    async def update_view(self) -> None:
        """Ask the host to redraw after out-of-band changes."""
        ...


class CommandLine(Protocol):
    """Ex-style command interpreter (``:w``, ``:nohl`` ...)."""

    async def run(self, command: str, state: "SessionState") -> None:
        ...


class HostCommands(Protocol):
    """The host editor's command-invocation surface."""

    async def execute_command(self, command: str, *args: Any) -> Any:
        ...


class ChangeTracker(Protocol):
    async def undo_and_remove_changes(self, count: int) -> Any:
        ...


class ActionExecutor(Protocol):
    """Carries out a matched action against the host document."""

    async def __call__(self, action: "Action", state: "SessionState") -> None:
        ...


__all__ = [
    "ActionExecutor",
    "ChangeTracker",
    "CommandLine",
    "HostCommands",
    "ModeHandler",
]
