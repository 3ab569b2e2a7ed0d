"""Telemetry services built on the standard ``logging`` package.

This module exposes a narrow surface area for the rest of the editor:

``configure(...)`` -- override or preset the logging configuration
``get_logger(name)`` -- fetch (and cache) a logger under the ``rune`` tree
``record_event(name, ...)`` -- emit structured events at a chosen level
``span(name, ...)`` -- context manager timing a block and logging failures

Nothing is written to the terminal unless a console handler is requested:
the editor owns the screen while it runs, so the default sink is either a
log file (``RUNE_LOG_FILE``) or nothing at all.
"""

from __future__ import annotations

import json
import logging
import os
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, MutableMapping, Optional

from rich.console import Console
from rich.logging import RichHandler

ENV_PREFIX = "RUNE_"
DEFAULT_LOGGER_NAME = os.getenv(f"{ENV_PREFIX}LOGGER", "rune")
DEFAULT_LOG_FILE = os.getenv(f"{ENV_PREFIX}LOG_FILE", "")

_LOGGER_CACHE: MutableMapping[str, logging.Logger] = {}
_ACTIVE_CONFIG: Optional["TelemetryConfig"] = None
_INSTALLED_HANDLERS: List[logging.Handler] = []


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    return os.getenv(f"{ENV_PREFIX}{name}", default)


def _env_flag(name: str, default: bool) -> bool:
    raw = _env(name)
    if raw is None:
        return default
    return raw.lower() in {"1", "true", "yes", "on"}


def _stringify(value: Any) -> str:
    if isinstance(value, str):
        return value
    return repr(value) if isinstance(value, (dict, list, tuple, set)) else str(value)


@dataclass
class TelemetryConfig:
    """Resolved logging settings applied by :func:`configure`."""

    level: str = "WARNING"
    log_file: str = ""
    json_format: bool = False
    console: bool = False


class JsonFormatter(logging.Formatter):
    """One JSON object per record, carrying the structured payload if any."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "time": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        data = getattr(record, "rune_data", None)
        if data:
            payload["data"] = data
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def _resolve_level() -> str:
    return (_env("LOG_LEVEL") or "WARNING").upper()


def _build_preset_config(preset: str) -> TelemetryConfig:
    key = preset.lower()
    if key == "development":
        return TelemetryConfig(
            level="DEBUG",
            log_file=_env("LOG_FILE", DEFAULT_LOG_FILE) or "rune-debug.log",
        )
    if key == "production":
        return TelemetryConfig(
            level="WARNING",
            log_file=_env("LOG_FILE", DEFAULT_LOG_FILE) or "",
            json_format=True,
        )
    raise ValueError(f"Unknown preset '{preset}'.")


def _build_default_config() -> TelemetryConfig:
    return TelemetryConfig(
        level=_resolve_level(),
        log_file=_env("LOG_FILE") or DEFAULT_LOG_FILE,
        json_format=_env_flag("LOG_JSON", False),
        console=_env_flag("LOG_CONSOLE", False),
    )


def _make_formatter(config: TelemetryConfig) -> logging.Formatter:
    if config.json_format:
        return JsonFormatter()
    return logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")


def _console_handler() -> logging.Handler:
    # stdout belongs to the editor screen.
    handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        show_path=False,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    return handler


def configure(
    *, config: Optional[TelemetryConfig] = None, preset: Optional[str] = None
) -> TelemetryConfig:
    """Override the active logging configuration.

    Parameters
    ----------
    config:
        Explicit :class:`TelemetryConfig` to adopt.
    preset:
        Named preset (``"development"`` or ``"production"``). ``config`` and
        ``preset`` are mutually exclusive.
    """

    global _ACTIVE_CONFIG
    if config and preset:
        raise ValueError("Provide either `config` or `preset`, not both.")

    if preset:
        config = _build_preset_config(preset)
    elif config is None:
        config = _build_default_config()

    root = logging.getLogger(DEFAULT_LOGGER_NAME)
    for handler in _INSTALLED_HANDLERS:
        root.removeHandler(handler)
        handler.close()
    _INSTALLED_HANDLERS.clear()

    handlers: List[logging.Handler] = []
    if config.log_file:
        file_handler = logging.FileHandler(config.log_file, encoding="utf-8")
        file_handler.setFormatter(_make_formatter(config))
        handlers.append(file_handler)
    if config.console:
        handlers.append(_console_handler())
    if not handlers:
        handlers.append(logging.NullHandler())

    for handler in handlers:
        root.addHandler(handler)
        _INSTALLED_HANDLERS.append(handler)

    root.setLevel(config.level.upper())
    _ACTIVE_CONFIG = config
    _LOGGER_CACHE.clear()
    return config


def active_config() -> TelemetryConfig:
    if _ACTIVE_CONFIG is None:
        return configure()
    return _ACTIVE_CONFIG


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a cached logger that lives under the ``rune`` logger tree."""

    logger_name = name or DEFAULT_LOGGER_NAME
    if logger_name != DEFAULT_LOGGER_NAME and not logger_name.startswith(
        f"{DEFAULT_LOGGER_NAME}."
    ):
        logger_name = f"{DEFAULT_LOGGER_NAME}.{logger_name}"
    if logger_name not in _LOGGER_CACHE:
        _LOGGER_CACHE[logger_name] = logging.getLogger(logger_name)
    return _LOGGER_CACHE[logger_name]


def _resolve_level_number(level: str | int) -> int:
    if isinstance(level, int):
        return level
    number = logging.getLevelName(str(level).upper())
    if not isinstance(number, int):
        raise ValueError(f"Unsupported log level '{level}'.")
    return number


def record_event(
    name: str,
    *,
    level: str | int = "info",
    data: Optional[Dict[str, Any]] = None,
    logger_name: Optional[str] = None,
) -> None:
    """Emit a structured ``event::<name>`` record."""

    log = get_logger(logger_name)
    levelno = _resolve_level_number(level)
    if not log.isEnabledFor(levelno):
        return
    payload = {key: _stringify(value) for key, value in (data or {}).items()}
    log.log(levelno, "event::%s %s", name, payload, extra={"rune_data": payload})


@dataclass
class SpanHandle:
    """Handle returned from ``span`` for optional metadata updates."""

    logger: logging.Logger
    span_name: str
    component_name: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    started: float = field(default_factory=time.perf_counter)
    outcome: str = "ok"

    def add_metadata(self, key: str, value: Any) -> None:
        self.metadata[key] = _stringify(value)

    def elapsed_ms(self) -> float:
        return (time.perf_counter() - self.started) * 1000.0

    def _emit(
        self, level: int, message: str, extra: Optional[Dict[str, Any]] = None
    ) -> None:
        if not self.logger.isEnabledFor(level):
            return
        payload = {"span": self.span_name, **self.metadata}
        if self.component_name:
            payload["component"] = self.component_name
        if extra:
            payload.update({key: _stringify(val) for key, val in extra.items()})
        self.logger.log(level, "%s %s", message, payload, extra={"rune_data": payload})

    def fail(self, reason: str) -> None:
        self.outcome = "failed"
        self._emit(logging.ERROR, "span::fail", {"reason": reason})


@contextmanager
def span(
    name: str,
    *,
    logger_name: Optional[str] = None,
    component: Optional[str | bool] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Iterator[SpanHandle]:
    """Time a code block and log its outcome.

    Parameters
    ----------
    name:
        Operation name written on the start and finish records.
    logger_name:
        Target logger; defaults to the editor logger.
    component:
        If ``True`` use the same name as the span; if a string, use it as the
        component identifier.
    metadata:
        Optional metadata copied onto every record of the span.
    """

    log = get_logger(logger_name)
    component_name = None
    if component is True:
        component_name = name
    elif isinstance(component, str):
        component_name = component

    handle = SpanHandle(
        logger=log,
        span_name=name,
        component_name=component_name,
        metadata={key: _stringify(value) for key, value in (metadata or {}).items()},
    )
    handle._emit(logging.DEBUG, "span::start")
    try:
        yield handle
    except Exception as exc:
        handle.fail(str(exc) or type(exc).__name__)
        raise
    finally:
        handle._emit(
            logging.DEBUG,
            "span::end",
            {"elapsed_ms": f"{handle.elapsed_ms():.3f}", "outcome": handle.outcome},
        )


# Initialize the module-level logger once the config is ready.
configure()
logger = get_logger()

__all__ = [
    "JsonFormatter",
    "SpanHandle",
    "TelemetryConfig",
    "active_config",
    "configure",
    "get_logger",
    "record_event",
    "span",
    "logger",
]
