"""Command-line entry point: ``rune [FILE] [--config PATH] [--log-level LEVEL]``."""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional, Sequence

from rune import __version__
from rune.config import EditorConfig, load_config
from rune.errors import ConfigError
from rune.runtime import telemetry
from rune.session import EditorSession


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="rune", description="Modal terminal text editor.")
    parser.add_argument("file", nargs="?", help="File to edit (created on first write)")
    parser.add_argument(
        "--config",
        action="append",
        type=Path,
        help="Config file to read instead of the default search path (repeatable)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level for RUNE_LOG_FILE output (default: RUNE_LOG_LEVEL or WARNING)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def build_session(args: argparse.Namespace) -> EditorSession:
    config: EditorConfig = load_config(args.config)
    if args.file:
        return EditorSession.open(args.file, config=config)
    return EditorSession(config=config)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    if args.log_level:
        current = telemetry.active_config()
        telemetry.configure(config=replace(current, level=args.log_level.upper()))
    try:
        session = build_session(args)
    except ConfigError as exc:
        print(f"rune: {exc}", file=sys.stderr)
        return 2

    from rune.adapters.textual.app import RuneApp

    RuneApp(session).run()
    return 0


if __name__ == "__main__":  # pragma: no cover - manual launch
    sys.exit(main())
