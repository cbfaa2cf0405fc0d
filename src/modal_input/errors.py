"""Exception types raised by the engine."""

from __future__ import annotations


class ModalInputError(Exception):
    """Base class for engine errors."""


class ConfigurationError(ModalInputError, ValueError):
    """Raised when a remapping table or setting cannot be parsed."""

    def __init__(self, message: str, *, key: str | None = None) -> None:
        super().__init__(message)
        self.key = key


class ActionRegistryFrozenError(ModalInputError, RuntimeError):
    """Raised when registering into a builder that has already been built."""

    def __init__(self, kind: str) -> None:
        super().__init__(f"Cannot register '{kind}': registry already built")
        self.kind = kind


__all__ = [
    "ModalInputError",
    "ConfigurationError",
    "ActionRegistryFrozenError",
]
