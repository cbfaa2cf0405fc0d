"""Dataclasses describing actions, their triggers, and resolution outcomes."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional, Sequence, Union

from .matcher import KeypressPattern, is_alternatives

NormalizedPattern = Union[tuple[str, ...], tuple[tuple[str, ...], ...]]


class Mode(str, Enum):
    """Modal-editing states that gate actions and remappings."""

    NORMAL = "normal"
    INSERT = "insert"
    VISUAL = "visual"
    VISUAL_LINE = "visual_line"
    VISUAL_BLOCK = "visual_block"
    COMMAND = "command"


VISUAL_MODES: frozenset[Mode] = frozenset(
    {Mode.VISUAL, Mode.VISUAL_LINE, Mode.VISUAL_BLOCK}
)
OTHER_MODES: frozenset[Mode] = frozenset({Mode.NORMAL}) | VISUAL_MODES


class KeypressState(Enum):
    """Resolution outcomes that are not a concrete action."""

    WAITING_ON_KEYS = "waiting_on_keys"
    NO_POSSIBLE_MATCH = "no_possible_match"


def _normalize_modes(modes: Iterable[Union[Mode, str]]) -> frozenset[Mode]:
    return frozenset(Mode(mode) for mode in modes)


def _normalize_pattern(keys: Optional[KeypressPattern]) -> Optional[NormalizedPattern]:
    if keys is None:
        return None
    if isinstance(keys, str):
        raise TypeError("keys must be a sequence of tokens, not a string")
    if not keys:
        raise ValueError("keys cannot be empty")
    if is_alternatives(keys):
        options = tuple(tuple(option) for option in keys)  # type: ignore[arg-type]
        if any(not option for option in options):
            raise ValueError("alternative key sequences cannot be empty")
        return options
    return tuple(keys)  # type: ignore[arg-type]


@dataclass(frozen=True, slots=True)
class ActionFlags:
    """Capabilities copied onto every action built from a descriptor."""

    is_motion: bool = False
    can_be_repeated_with_dot: bool = False
    must_be_first_key: bool = False
    is_operator: bool = False


@dataclass(frozen=True, slots=True)
class ActionDescriptor:
    """Prototype used for matching; one per registered action kind.

    ``keys`` is either a single token sequence or a sequence of alternatives.
    A descriptor without ``keys`` is abstract and never triggered directly.
    """

    kind: str
    modes: frozenset[Mode]
    keys: Optional[NormalizedPattern] = None
    flags: ActionFlags = field(default_factory=ActionFlags)
    description: str = ""

    def __post_init__(self) -> None:
        if not self.kind:
            raise ValueError("action kind cannot be empty")
        object.__setattr__(self, "modes", _normalize_modes(self.modes))
        if self.keys is not None and not self.modes:
            raise ValueError(f"action '{self.kind}' must declare at least one mode")
        object.__setattr__(self, "keys", _normalize_pattern(self.keys))

    @classmethod
    def define(
        cls,
        kind: str,
        keys: Optional[Sequence[str] | Sequence[Sequence[str]]],
        modes: Iterable[Union[Mode, str]],
        *,
        description: str = "",
        **flags: bool,
    ) -> "ActionDescriptor":
        return cls(
            kind=kind,
            modes=frozenset(Mode(mode) for mode in modes),
            keys=keys,  # type: ignore[arg-type]
            flags=ActionFlags(**flags),
            description=description,
        )

    @property
    def is_abstract(self) -> bool:
        return self.keys is None

    def build(self, keys_pressed: Sequence[str]) -> "Action":
        return Action(
            kind=self.kind, flags=self.flags, keys_pressed=tuple(keys_pressed)
        )

    def __str__(self) -> str:
        if self.keys is None:
            return ""
        if is_alternatives(self.keys):
            return "|".join("".join(option) for option in self.keys)  # type: ignore[arg-type]
        return "".join(self.keys)  # type: ignore[arg-type]


@dataclass(frozen=True, slots=True)
class Action:
    """A matched action: the descriptor's kind and flags plus the keys that fired it."""

    kind: str
    flags: ActionFlags
    keys_pressed: tuple[str, ...] = ()

    @property
    def is_motion(self) -> bool:
        return self.flags.is_motion

    @property
    def is_operator(self) -> bool:
        return self.flags.is_operator

    @property
    def can_be_repeated_with_dot(self) -> bool:
        return self.flags.can_be_repeated_with_dot

    def __str__(self) -> str:
        return "".join(self.keys_pressed)


__all__ = [
    "Mode",
    "VISUAL_MODES",
    "OTHER_MODES",
    "KeypressState",
    "ActionFlags",
    "ActionDescriptor",
    "Action",
]
