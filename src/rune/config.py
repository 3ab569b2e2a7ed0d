"""User configuration: key bindings and start-up options from INI files.

Example ``rune.conf``::

    [general]
    start_in_insert = false

    [normal]
    "H" = line_start
    "L" = line_end
    "<C-r>" = redo
"""

from __future__ import annotations

import configparser
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from rune.errors import ConfigError
from rune.keymaps.defaults import make_binding
from rune.keymaps.models import Action, Binding
from rune.runtime import telemetry

logger = telemetry.get_logger("rune.config")

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}
_BINDING_SECTIONS = ("normal",)


@dataclass
class EditorConfig:
    bindings: Tuple[Binding, ...] = ()
    start_in_insert: bool = False
    sources: Tuple[str, ...] = ()


@dataclass
class _Collected:
    keys: Dict[Tuple[str, str], Tuple[Action, str]] = field(default_factory=dict)
    start_in_insert: bool = False
    sources: List[str] = field(default_factory=list)


def config_search_paths(cwd: Optional[Path] = None) -> Tuple[Path, ...]:
    """Files read by :func:`load_config`, lowest precedence first."""

    xdg = os.environ.get("XDG_CONFIG_HOME")
    base = Path(xdg) if xdg else Path.home() / ".config"
    return (
        (cwd or Path.cwd()) / "rune.conf",
        base / "rune" / "config.conf",
    )


def _new_parser() -> configparser.ConfigParser:
    parser = configparser.ConfigParser(
        delimiters=("=",),
        interpolation=None,
        comment_prefixes=("#",),
        inline_comment_prefixes=None,
    )
    # Key sequences are case sensitive.
    parser.optionxform = str  # type: ignore[assignment,method-assign]
    return parser


def _unquote(raw: str) -> str:
    text = raw.strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in {'"', "'"}:
        return text[1:-1]
    return text


def _parse_bool(value: str, source: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ConfigError(f"start_in_insert expects a boolean, got {value!r}", source=source)


def _collect(text: str, source: str, collected: _Collected) -> None:
    parser = _new_parser()
    try:
        parser.read_string(text, source=source)
    except configparser.Error as exc:
        raise ConfigError(f"could not parse config: {exc}", source=source) from exc

    if parser.has_section("general"):
        general = parser["general"]
        if "start_in_insert" in general:
            collected.start_in_insert = _parse_bool(general["start_in_insert"], source)

    for section in _BINDING_SECTIONS:
        if not parser.has_section(section):
            continue
        for raw_keys, raw_action in parser.items(section):
            keys = _unquote(raw_keys)
            if not keys:
                raise ConfigError(f"empty key sequence in [{section}]", source=source)
            try:
                action = Action.parse(_unquote(raw_action))
            except ValueError as exc:
                raise ConfigError(str(exc), source=source) from exc
            collected.keys[(section, keys)] = (action, source)
    collected.sources.append(source)


def parse_config(text: str, *, source: str = "<string>") -> EditorConfig:
    collected = _Collected()
    _collect(text, source, collected)
    return _build(collected)


def load_config(paths: Optional[Iterable[Path | str]] = None) -> EditorConfig:
    """Read every existing config file; later files override earlier ones."""

    collected = _Collected()
    for path in (Path(p) for p in (paths if paths is not None else config_search_paths())):
        if not path.is_file():
            continue
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigError(f"could not read config: {exc}", source=str(path)) from exc
        _collect(text, str(path), collected)
    config = _build(collected)
    if config.sources:
        logger.info("loaded config from %s", ", ".join(config.sources))
    return config


def _build(collected: _Collected) -> EditorConfig:
    bindings = []
    for (mode, keys), (action, source) in collected.keys.items():
        try:
            binding = make_binding(mode, keys, action, source=source)
        except ValueError as exc:
            raise ConfigError(str(exc), source=source) from exc
        bindings.append(binding)
    return EditorConfig(
        bindings=tuple(bindings),
        start_in_insert=collected.start_in_insert,
        sources=tuple(collected.sources),
    )


__all__ = [
    "EditorConfig",
    "config_search_paths",
    "load_config",
    "parse_config",
]
