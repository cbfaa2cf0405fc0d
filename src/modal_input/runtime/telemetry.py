"""Structured logging and spans for the engine, backed by telelog.

Everything outside this module goes through four calls:

``configure(...)`` -- adopt settings, a named preset, or a raw ``tl.Config``
``get_logger(name)`` -- cached telelog logger for a component
``record_event(name, ...)`` -- one ``event::<name>`` line with key/value data
``span(name, ...)`` -- profiled block, optionally tracked as a component

Settings come from ``MODAL_INPUT_*`` environment variables unless given.
"""

from __future__ import annotations

import os
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterator, Mapping, MutableMapping, Optional, cast

import telelog  # type: ignore[import]

tl = cast(Any, telelog)

ENV_PREFIX = "MODAL_INPUT_"
ROOT_LOGGER = "modal_input"

_TRUTHY = frozenset({"1", "true", "yes", "on"})

_loggers: MutableMapping[str, Any] = {}
_active: Optional[Any] = None


@dataclass(frozen=True, slots=True)
class TelemetrySettings:
    """Knobs translated onto a ``tl.Config``; profiling is always on."""

    level: str = "INFO"
    console: bool = True
    colored: bool = True
    json: bool = False
    log_file: Optional[str] = None
    buffer_size: Optional[int] = None

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "TelemetrySettings":
        environ = os.environ if env is None else env

        def flag(name: str) -> bool:
            return environ.get(f"{ENV_PREFIX}{name}", "").strip().lower() in _TRUTHY

        buffer_size = None
        if flag("LOG_BUFFERED"):
            buffer_size = int(environ.get(f"{ENV_PREFIX}LOG_BUFFER_SIZE") or "2048")
        return cls(
            level=(environ.get(f"{ENV_PREFIX}LOG_LEVEL") or "INFO").upper(),
            console=not flag("DISABLE_CONSOLE"),
            colored=not flag("NO_COLOR"),
            json=flag("LOG_JSON"),
            log_file=environ.get(f"{ENV_PREFIX}LOG_FILE") or None,
            buffer_size=buffer_size,
        )

    def to_config(self) -> Any:
        config = tl.Config()
        config.with_min_level(self.level)
        config.with_console_output(self.console)
        if self.console:
            config.with_colored_output(self.colored)
        config.with_json_format(self.json)
        if self.log_file:
            config.with_file_output(self.log_file)
        if self.buffer_size:
            config.with_buffering(True)
            config.with_buffer_size(self.buffer_size)
        config.with_profiling(True)
        return config


def _preset(name: str) -> TelemetrySettings:
    log_file = os.getenv(f"{ENV_PREFIX}LOG_FILE")
    key = name.lower()
    if key == "development":
        return TelemetrySettings(level="DEBUG")
    if key == "production":
        return TelemetrySettings(
            console=False, log_file=log_file or "modal_input.log", buffer_size=2048
        )
    if key in {"performance", "performance_analysis"}:
        return TelemetrySettings(
            level="DEBUG",
            console=False,
            json=True,
            log_file=log_file or "modal_input-performance.log",
            buffer_size=2048,
        )
    raise ValueError(f"Unknown preset '{name}'.")


def configure(
    settings: Optional[TelemetrySettings] = None,
    *,
    preset: Optional[str] = None,
    config: Optional[Any] = None,
    level: Optional[str] = None,
) -> None:
    """Swap the active configuration and drop cached loggers.

    At most one of ``settings``, ``preset`` and ``config`` may be given; with
    none of them the environment is read. ``level`` overrides the minimum
    level of ``settings``/``preset``/environment settings.
    """

    global _active
    if sum(option is not None for option in (settings, preset, config)) > 1:
        raise ValueError("Provide only one of `settings`, `preset` or `config`.")

    if config is not None:
        config.with_profiling(True)
        _active = config
    else:
        chosen = settings or (_preset(preset) if preset else TelemetrySettings.from_env())
        if level:
            chosen = replace(chosen, level=level.upper())
        _active = chosen.to_config()
    _loggers.clear()


def get_logger(name: Optional[str] = None) -> Any:
    """Return the cached ``telelog.Logger`` for ``name`` (default: root)."""

    global _active
    key = name or os.getenv(f"{ENV_PREFIX}LOGGER", ROOT_LOGGER)
    logger = _loggers.get(key)
    if logger is None:
        if _active is None:
            _active = TelemetrySettings.from_env().to_config()
        logger = _loggers[key] = tl.Logger.with_config(key, _active)
    return logger


def _text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple)) and all(isinstance(item, str) for item in value):
        # key sequences
        return "".join(value)
    if isinstance(value, (dict, set, list, tuple)):
        return repr(value)
    return str(value)


def _write(logger: Any, level: str, message: str, fields: Dict[str, Any]) -> None:
    level = level.lower()
    structured = getattr(logger, f"{level}_with", None)
    if structured is not None:
        structured(message, [(str(key), _text(value)) for key, value in fields.items()])
        return
    plain = getattr(logger, level, None)
    if plain is None:
        raise ValueError(f"Unsupported log level '{level}'.")
    plain(f"{message} {fields}")


def record_event(
    name: str,
    *,
    level: str = "info",
    data: Optional[Dict[str, Any]] = None,
    logger_name: Optional[str] = None,
) -> None:
    """Emit ``event::<name>`` carrying ``data`` as key/value pairs."""

    _write(get_logger(logger_name), level, f"event::{name}", {"event": name, **(data or {})})


@dataclass
class SpanHandle:
    """Yielded by ``span``; metadata added here is reported on failure."""

    logger: Any
    name: str
    component: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)

    def add_metadata(self, key: str, value: Any) -> None:
        self.metadata[key] = _text(value)

    def fail(self, reason: str) -> None:
        fields: Dict[str, Any] = {"span": self.name, **self.metadata, "reason": reason}
        if self.component:
            fields["component"] = self.component
        _write(self.logger, "error", "span::fail", fields)


@contextmanager
def span(
    name: str,
    *,
    logger_name: Optional[str] = None,
    component: Optional[str | bool] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Iterator[SpanHandle]:
    """Profile the enclosed block under ``name``.

    ``metadata`` is pushed as logger context for the duration of the block.
    ``component=True`` tracks the block as component ``name``; a string names
    the component. Exceptions are logged via ``SpanHandle.fail`` and re-raised.
    """

    log = get_logger(logger_name)
    component_name = name if component is True else (component or None)
    context = {key: _text(value) for key, value in (metadata or {}).items()}
    handle = SpanHandle(
        logger=log, name=name, component=component_name, metadata=dict(context)
    )

    for key, value in context.items():
        log.add_context(key, value)
    try:
        with ExitStack() as stack:
            if component_name:
                stack.enter_context(log.track_component(component_name))
            stack.enter_context(log.profile(name))
            yield handle
    except Exception as exc:
        handle.fail(str(exc) or type(exc).__name__)
        raise
    finally:
        for key in context:
            log.remove_context(key)


__all__ = [
    "ENV_PREFIX",
    "SpanHandle",
    "TelemetrySettings",
    "configure",
    "get_logger",
    "record_event",
    "span",
]
