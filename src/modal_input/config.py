"""Remapping tables and engine settings.

Tables are read with the same keys editors use in their settings files
(``insertModeKeyBindings``, ``otherModesKeyBindingsNonRecursive`` ...). Each
entry is a mapping with ``before`` and optional ``after`` / ``commands``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional, Sequence

from .errors import ConfigurationError
from .keymaps.tokens import DEFAULT_LEADER, substitute_leader

ENV_PREFIX = "MODAL_INPUT_"
DEFAULT_TIMEOUT_MS = 1000

INSERT_MODE_KEY_BINDINGS = "insertModeKeyBindings"
INSERT_MODE_KEY_BINDINGS_NON_RECURSIVE = "insertModeKeyBindingsNonRecursive"
OTHER_MODES_KEY_BINDINGS = "otherModesKeyBindings"
OTHER_MODES_KEY_BINDINGS_NON_RECURSIVE = "otherModesKeyBindingsNonRecursive"

TABLE_KEYS: tuple[str, ...] = (
    INSERT_MODE_KEY_BINDINGS,
    OTHER_MODES_KEY_BINDINGS,
    INSERT_MODE_KEY_BINDINGS_NON_RECURSIVE,
    OTHER_MODES_KEY_BINDINGS_NON_RECURSIVE,
)


def _token_list(raw: Any, *, key: str) -> tuple[str, ...]:
    if isinstance(raw, str) or not isinstance(raw, Sequence):
        raise ConfigurationError(f"'{key}' must be a list of keys", key=key)
    tokens = tuple(raw)
    if not all(isinstance(token, str) and token for token in tokens):
        raise ConfigurationError(f"'{key}' must only contain non-empty strings", key=key)
    return tokens


@dataclass(frozen=True, slots=True)
class RemapCommand:
    """Host command (or ``:``-prefixed command line) run by a remapping."""

    command: str
    args: tuple[Any, ...] = ()

    @property
    def is_command_line(self) -> bool:
        return self.command.startswith(":")

    @classmethod
    def from_value(cls, raw: Any) -> "RemapCommand":
        if isinstance(raw, str):
            return cls(command=raw)
        if isinstance(raw, Mapping) and isinstance(raw.get("command"), str):
            args = raw.get("args") or ()
            if isinstance(args, (str, Mapping)) or not isinstance(args, Sequence):
                args = (args,)
            return cls(command=raw["command"], args=tuple(args))
        raise ConfigurationError(f"Invalid remap command: {raw!r}", key="commands")


@dataclass(frozen=True, slots=True)
class KeyRemapping:
    """``before`` keys replaced by ``after`` keys and/or ``commands``."""

    before: tuple[str, ...]
    after: Optional[tuple[str, ...]] = None
    commands: Optional[tuple[RemapCommand, ...]] = None

    def __post_init__(self) -> None:
        if not self.before:
            raise ConfigurationError("remapping 'before' cannot be empty", key="before")
        object.__setattr__(self, "before", tuple(self.before))
        if self.after is not None:
            object.__setattr__(self, "after", tuple(self.after))
        if self.commands is not None:
            object.__setattr__(self, "commands", tuple(self.commands))

    @property
    def is_disabled(self) -> bool:
        """Recognized but inert: nothing to replay and nothing to run."""

        return not self.after and not self.commands

    @property
    def signature(self) -> str:
        return "".join(self.before)

    @classmethod
    def from_mapping(
        cls, raw: Mapping[str, Any], *, leader: str = DEFAULT_LEADER
    ) -> "KeyRemapping":
        if not isinstance(raw, Mapping):
            raise ConfigurationError(f"Remapping must be a mapping, got {raw!r}")
        if "before" not in raw:
            raise ConfigurationError("remapping is missing 'before'", key="before")

        before = substitute_leader(_token_list(raw["before"], key="before"), leader)
        after = None
        if raw.get("after") is not None:
            after = substitute_leader(_token_list(raw["after"], key="after"), leader)
        commands = None
        if raw.get("commands") is not None:
            values = raw["commands"]
            if isinstance(values, (str, Mapping)) or not isinstance(values, Sequence):
                raise ConfigurationError("'commands' must be a list", key="commands")
            commands = tuple(RemapCommand.from_value(value) for value in values)
        return cls(before=before, after=after, commands=commands)


@dataclass(frozen=True, slots=True)
class InputMethodSettings:
    """Shell commands used to toggle the OS input method around insert mode."""

    enable: bool = False
    obtain_command: str = "setime get"
    on_command: str = "setime on"
    off_command: str = "setime off"

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any] | None) -> "InputMethodSettings":
        if not raw:
            return cls()
        defaults = cls()
        return cls(
            enable=bool(raw.get("enable", defaults.enable)),
            obtain_command=str(raw.get("obtainIMCmd", defaults.obtain_command)),
            on_command=str(raw.get("switchOnIMCmd", defaults.on_command)),
            off_command=str(raw.get("switchOffIMCmd", defaults.off_command)),
        )


@dataclass(frozen=True, slots=True)
class RemapConfiguration:
    """Leader token, remap timeout and the four remapping tables."""

    leader: str = DEFAULT_LEADER
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    insert_mode_key_bindings: tuple[KeyRemapping, ...] = ()
    insert_mode_key_bindings_non_recursive: tuple[KeyRemapping, ...] = ()
    other_modes_key_bindings: tuple[KeyRemapping, ...] = ()
    other_modes_key_bindings_non_recursive: tuple[KeyRemapping, ...] = ()
    input_method: InputMethodSettings = field(default_factory=InputMethodSettings)

    def __post_init__(self) -> None:
        if not self.leader:
            raise ConfigurationError("leader cannot be empty", key="leader")
        if self.timeout_ms <= 0:
            raise ConfigurationError("timeout must be positive", key="timeout")

    def table(self, name: str) -> tuple[KeyRemapping, ...]:
        tables = {
            INSERT_MODE_KEY_BINDINGS: self.insert_mode_key_bindings,
            INSERT_MODE_KEY_BINDINGS_NON_RECURSIVE: self.insert_mode_key_bindings_non_recursive,
            OTHER_MODES_KEY_BINDINGS: self.other_modes_key_bindings,
            OTHER_MODES_KEY_BINDINGS_NON_RECURSIVE: self.other_modes_key_bindings_non_recursive,
        }
        try:
            return tables[name]
        except KeyError as exc:
            raise ConfigurationError(f"Unknown remapping table '{name}'", key=name) from exc

    @classmethod
    def from_mapping(
        cls,
        raw: Mapping[str, Any] | None = None,
        *,
        env: Mapping[str, str] | None = None,
    ) -> "RemapConfiguration":
        data = dict(raw or {})
        environ = os.environ if env is None else env

        leader = data.get("leader", environ.get(f"{ENV_PREFIX}LEADER", DEFAULT_LEADER))
        if not isinstance(leader, str):
            raise ConfigurationError("leader must be a string", key="leader")

        timeout = data.get("timeout", environ.get(f"{ENV_PREFIX}TIMEOUT_MS"))
        try:
            timeout_ms = int(timeout) if timeout is not None else DEFAULT_TIMEOUT_MS
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Invalid timeout {timeout!r}", key="timeout") from exc

        tables = {
            name: _parse_table(data.get(name), leader=leader, key=name)
            for name in TABLE_KEYS
        }
        return cls(
            leader=leader,
            timeout_ms=timeout_ms,
            insert_mode_key_bindings=tables[INSERT_MODE_KEY_BINDINGS],
            insert_mode_key_bindings_non_recursive=tables[
                INSERT_MODE_KEY_BINDINGS_NON_RECURSIVE
            ],
            other_modes_key_bindings=tables[OTHER_MODES_KEY_BINDINGS],
            other_modes_key_bindings_non_recursive=tables[
                OTHER_MODES_KEY_BINDINGS_NON_RECURSIVE
            ],
            input_method=InputMethodSettings.from_mapping(data.get("autoSwitchInputMethod")),
        )


def _parse_table(
    raw: Optional[Iterable[Any]], *, leader: str, key: str
) -> tuple[KeyRemapping, ...]:
    if raw is None:
        return ()
    if isinstance(raw, (str, Mapping)):
        raise ConfigurationError(f"'{key}' must be a list of remappings", key=key)
    return tuple(KeyRemapping.from_mapping(entry, leader=leader) for entry in raw)


__all__ = [
    "DEFAULT_TIMEOUT_MS",
    "INSERT_MODE_KEY_BINDINGS",
    "INSERT_MODE_KEY_BINDINGS_NON_RECURSIVE",
    "OTHER_MODES_KEY_BINDINGS",
    "OTHER_MODES_KEY_BINDINGS_NON_RECURSIVE",
    "TABLE_KEYS",
    "InputMethodSettings",
    "KeyRemapping",
    "RemapCommand",
    "RemapConfiguration",
]
