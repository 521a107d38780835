"""polyshell CLI entry point."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List

from .config import load_config
from .errors import ConfigError
from .output import emit, emit_error
from .runtime import RuntimeSession

LOG = logging.getLogger("polyshell.cli")


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Interactive shell for brokers, stores and other data backends")
    parser.add_argument("--config", help="Path to the JSON configuration file")
    parser.add_argument("--json", action="store_true", help="Emit JSON output")
    parser.add_argument(
        "--log-level",
        default=os.environ.get("POLYSHELL_LOG", "WARNING"),
        help="Logging level (default WARNING)",
    )
    parser.add_argument(
        "--auto-switch",
        action="store_true",
        help="Switch the active module to the module of each executed command",
    )
    parser.add_argument(
        "-c",
        "--command",
        help="Execute a single command non-interactively (quote the command string)",
    )
    parser.add_argument("--script", type=Path, help="Execute commands from a file, one per line")
    parser.add_argument("--history", type=Path, help="Path to the command history file")
    return parser


def main(argv: List[str] | None = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.log_level)
    try:
        config = load_config(args.config)
    except ConfigError as exc:
        emit_error(str(exc), json_output=args.json)
        return 2
    if args.json:
        config.json_output = True
    if args.auto_switch:
        config.auto_switching = True
    if args.history:
        config.history_file = args.history

    runtime = RuntimeSession(config)
    try:
        if args.command:
            return emit(runtime.interpret(args.command), json_output=config.json_output)
        if args.script:
            return _run_script(runtime, args.script)
        from .repl import ShellREPL

        return ShellREPL(runtime, history_path=config.history_file).run()
    except SystemExit as exc:
        return int(exc.code or 0)
    except KeyboardInterrupt:
        print()
        return 0
    finally:
        runtime.shutdown()


def _run_script(runtime: RuntimeSession, path: Path) -> int:
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except OSError as exc:
        emit_error(f"unable to read script {path}: {exc}", json_output=runtime.config.json_output)
        return 1
    for number, line in enumerate(lines, start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        rc = emit(runtime.interpret(stripped), json_output=runtime.config.json_output)
        if rc != 0:
            LOG.error("script %s stopped at line %d: %s", path, number, stripped)
            return rc
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
