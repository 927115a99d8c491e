from __future__ import annotations

import argparse
from typing import IO

from xpq._lib.config import Settings
from xpq.commands import args as cli_args
from xpq.reader import ParquetSource
from xpq.schema.printer import render


def add_parser(subparsers) -> argparse.ArgumentParser:
    parser = subparsers.add_parser("schema", help="Show parquet schema")
    cli_args.add_path_argument(parser)
    return parser


def run(args: argparse.Namespace, settings: Settings, out: IO[str]) -> int:
    text = render(ParquetSource(args.path).schema())
    out.write(text)
    return 0
