"""KeyToken vocabulary shared by actions and remappings."""

from __future__ import annotations

import re

ANY = "<any>"
NUMBER = "<number>"
ALPHA = "<alpha>"
CHARACTER = "<character>"
LEADER = "<leader>"

WILDCARDS: frozenset[str] = frozenset({ANY, NUMBER, ALPHA, CHARACTER, LEADER})

DEFAULT_LEADER = "\\"

# Bracketed keys that still count as plain characters.
_PLAIN_BRACKETED = frozenset({"<BS>", "<SHIFT+BS>", "<TAB>"})

_SINGLE_ALPHA = re.compile(r"^[a-zA-Z]$")
_DIGITS = "0123456789"


def is_single_number(token: str) -> bool:
    return len(token) == 1 and token in _DIGITS


def is_single_alpha(token: str) -> bool:
    return _SINGLE_ALPHA.match(token) is not None


def is_control_key(token: str) -> bool:
    """Return ``True`` for bracketed control sequences such as ``<C-u>``.

    ``<BS>``, ``<Shift+BS>`` and ``<Tab>`` are excluded (case-insensitively):
    they behave like ordinary typed characters.
    """

    if token.upper() in _PLAIN_BRACKETED:
        return False
    return token.startswith("<") and len(token) > 1


def is_wildcard(token: str) -> bool:
    return token in WILDCARDS


def substitute_leader(keys: tuple[str, ...], leader: str) -> tuple[str, ...]:
    return tuple(leader if key == LEADER else key for key in keys)


__all__ = [
    "ANY",
    "NUMBER",
    "ALPHA",
    "CHARACTER",
    "LEADER",
    "WILDCARDS",
    "DEFAULT_LEADER",
    "is_single_number",
    "is_single_alpha",
    "is_control_key",
    "is_wildcard",
    "substitute_leader",
]
