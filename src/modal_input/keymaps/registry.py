"""Ordered, immutable registry of action descriptors."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Optional

from modal_input.errors import ActionRegistryFrozenError
from modal_input.runtime.telemetry import span

from .models import ActionDescriptor, Mode


@dataclass(slots=True)
class RegistryStats:
    """Lightweight snapshot describing registry contents."""

    action_count: int
    abstract_count: int
    modes: tuple[str, ...]


class ActionRegistry:
    """Read-only sequence of descriptors in registration order.

    Registration order is the tie-break between descriptors whose patterns
    match the same keys: the earliest one wins.
    """

    __slots__ = ("_descriptors",)

    def __init__(self, descriptors: Iterable[ActionDescriptor] = ()) -> None:
        self._descriptors: tuple[ActionDescriptor, ...] = tuple(descriptors)

    def __iter__(self) -> Iterator[ActionDescriptor]:
        return iter(self._descriptors)

    def __len__(self) -> int:
        return len(self._descriptors)

    def __getitem__(self, index: int) -> ActionDescriptor:
        return self._descriptors[index]

    def find(self, kind: str) -> Optional[ActionDescriptor]:
        for descriptor in self._descriptors:
            if descriptor.kind == kind:
                return descriptor
        return None

    def iter_descriptors(self, mode: Optional[Mode] = None) -> Iterator[ActionDescriptor]:
        if mode is None:
            yield from self._descriptors
            return
        for descriptor in self._descriptors:
            if mode in descriptor.modes:
                yield descriptor

    def stats(self) -> RegistryStats:
        modes = {mode.value for d in self._descriptors for mode in d.modes}
        return RegistryStats(
            action_count=len(self._descriptors),
            abstract_count=sum(1 for d in self._descriptors if d.is_abstract),
            modes=tuple(sorted(modes)),
        )


class ActionRegistryBuilder:
    """Collects descriptors during start-up and freezes them once."""

    def __init__(self, *, logger_name: str | None = None) -> None:
        self._descriptors: list[ActionDescriptor] = []
        self._logger_name = logger_name
        self._built = False

    def register(self, descriptor: ActionDescriptor) -> ActionDescriptor:
        with span(
            "keymaps::register_action",
            logger_name=self._logger_name,
            component="keymaps",
            metadata={"kind": descriptor.kind},
        ) as handle:
            if self._built:
                handle.add_metadata("frozen", True)
                raise ActionRegistryFrozenError(descriptor.kind)
            self._descriptors.append(descriptor)
            return descriptor

    def extend(self, descriptors: Iterable[ActionDescriptor]) -> None:
        for descriptor in descriptors:
            self.register(descriptor)

    def build(self) -> ActionRegistry:
        self._built = True
        return ActionRegistry(self._descriptors)


def build_action_registry(
    descriptors: Iterable[ActionDescriptor], *, logger_name: str | None = None
) -> ActionRegistry:
    """Register ``descriptors`` in order and return the frozen registry."""

    builder = ActionRegistryBuilder(logger_name=logger_name)
    builder.extend(descriptors)
    return builder.build()


__all__ = [
    "ActionRegistry",
    "ActionRegistryBuilder",
    "RegistryStats",
    "build_action_registry",
]
