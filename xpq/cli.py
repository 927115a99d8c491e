from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from xpq import __version__
from xpq._lib.config import load_settings
from xpq._lib.io_utils import ensure_dir
from xpq.commands import COMMANDS
from xpq.errors import XpqError

LOGGER = logging.getLogger(__name__)

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="xpq", description="Inspect parquet files from the command line")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", action="append", default=[], help="YAML config file, repeatable")
    parser.add_argument("--log_level", default=None, type=str.upper, choices=LOG_LEVELS)
    parser.add_argument("--log_path", default=None)

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True
    for module in COMMANDS.values():
        module.add_parser(subparsers)
    return parser


def _configure_logging(level: str, log_path: Optional[str]) -> None:
    log_handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_path:
        ensure_dir(Path(log_path).parent)
        log_handlers.append(logging.FileHandler(log_path))
    logging.basicConfig(
        level=getattr(logging, level),
        handlers=log_handlers,
        format="%(asctime)s %(levelname)s %(message)s",
    )


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings(args.config)
    except XpqError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    _configure_logging(args.log_level or settings.log_level, args.log_path)
    LOGGER.debug("Running %s with settings %s", args.command, settings.model_dump())

    try:
        return COMMANDS[args.command].run(args, settings, sys.stdout)
    except XpqError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
