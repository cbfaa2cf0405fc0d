"""Wildcard-aware comparison of keypress patterns against pressed keys."""

from __future__ import annotations

from typing import Sequence, Union

from .tokens import (
    ALPHA,
    ANY,
    CHARACTER,
    DEFAULT_LEADER,
    LEADER,
    NUMBER,
    is_control_key,
    is_single_alpha,
    is_single_number,
)

KeySequence = Sequence[str]
KeypressPattern = Union[Sequence[str], Sequence[Sequence[str]]]


def is_alternatives(pattern: KeypressPattern) -> bool:
    """A pattern is a set of alternatives when its first element is a sequence."""

    return bool(pattern) and not isinstance(pattern[0], str)


def alternatives(pattern: KeypressPattern) -> tuple[tuple[str, ...], ...]:
    if is_alternatives(pattern):
        return tuple(tuple(option) for option in pattern)  # type: ignore[arg-type]
    return (tuple(pattern),)  # type: ignore[arg-type]


def _token_matches(left: str, right: str, leader: str) -> bool:
    if left == ANY or right == ANY:
        return True

    if left == NUMBER and is_single_number(right):
        return True
    if right == NUMBER and is_single_number(left):
        return True

    if left == ALPHA and is_single_alpha(right):
        return True
    if right == ALPHA and is_single_alpha(left):
        return True

    if left == CHARACTER and not is_control_key(right):
        return True
    if right == CHARACTER and not is_control_key(left):
        return True

    if left == LEADER and right == leader:
        return True
    if right == LEADER and left == leader:
        return True

    return left == right


def compare_keypress_sequence(
    pattern: KeypressPattern,
    keys: KeySequence,
    *,
    leader: str = DEFAULT_LEADER,
) -> bool:
    """Return ``True`` when ``keys`` satisfies ``pattern``.

    ``pattern`` is either one sequence of tokens or a sequence of alternative
    sequences; any matching alternative is a match. Lengths must be equal:
    prefixes are never considered here.
    """

    if is_alternatives(pattern):
        return any(
            compare_keypress_sequence(option, keys, leader=leader)  # type: ignore[arg-type]
            for option in pattern
        )

    if len(pattern) != len(keys):
        return False

    for left, right in zip(pattern, keys):
        if not _token_matches(left, right, leader):  # type: ignore[arg-type]
            return False
    return True


class KeypressMatcher:
    """Binds ``compare_keypress_sequence`` to a configured leader token."""

    def __init__(self, leader: str = DEFAULT_LEADER) -> None:
        self.leader = leader

    def matches(self, pattern: KeypressPattern, keys: KeySequence) -> bool:
        return compare_keypress_sequence(pattern, keys, leader=self.leader)

    def could_match(self, pattern: KeypressPattern, keys: KeySequence) -> bool:
        """True when ``keys`` is a (possibly complete) prefix of ``pattern``."""

        truncated = tuple(option[: len(keys)] for option in alternatives(pattern))
        return self.matches(truncated, keys)


__all__ = [
    "KeySequence",
    "KeypressPattern",
    "KeypressMatcher",
    "alternatives",
    "compare_keypress_sequence",
    "is_alternatives",
]
