from __future__ import annotations

import argparse
from typing import IO

from xpq._lib.config import Settings
from xpq.commands import args as cli_args
from xpq.output import OutputWriter
from xpq.reader import ParquetSource


def add_parser(subparsers) -> argparse.ArgumentParser:
    parser = subparsers.add_parser("count", help="Show num of rows")
    cli_args.add_format_argument(parser)
    cli_args.add_path_argument(parser)
    return parser


def run(args: argparse.Namespace, settings: Settings, out: IO[str]) -> int:
    total = ParquetSource(args.path).num_rows()
    writer = OutputWriter(
        ["count"],
        [[str(total)]],
        format=cli_args.resolve_format(args, settings),
        min_width=settings.output.min_width,
    )
    writer.write(out)
    return 0
