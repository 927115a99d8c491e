from __future__ import annotations

import argparse
import itertools
from typing import IO, List, Optional, Sequence

from xpq._lib.config import Settings
from xpq.commands import args as cli_args
from xpq.errors import InvalidColumnError
from xpq.output import OutputWriter
from xpq.reader import ParquetSource
from xpq.record.formatter import format_value


def add_parser(subparsers) -> argparse.ArgumentParser:
    parser = subparsers.add_parser("read", help="Read rows from parquet")
    parser.add_argument(
        "-c",
        "--columns",
        action="append",
        default=None,
        help="Top-level fields to show, repeatable or comma separated (default: all)",
    )
    parser.add_argument(
        "-l",
        "--limit",
        type=cli_args.non_negative_int,
        default=None,
        help="Max number of rows (default from config: 300)",
    )
    cli_args.add_format_argument(parser)
    cli_args.add_path_argument(parser)
    return parser


def select_fields(field_names: Sequence[str], requested: Optional[Sequence[str]]) -> List[str]:
    """
    Map requested names onto top-level fields, keeping the requested order.

    An exact name wins; otherwise a unique case-insensitive match is used.
    """
    if not requested:
        return list(field_names)
    selected: List[str] = []
    for name in requested:
        if name in field_names:
            field = name
        else:
            matches = [f for f in field_names if f.lower() == name.lower()]
            if len(matches) != 1:
                raise InvalidColumnError(f"Column '{name}' does not exist")
            field = matches[0]
        if field not in selected:
            selected.append(field)
    return selected


def run(args: argparse.Namespace, settings: Settings, out: IO[str]) -> int:
    limit = args.limit if args.limit is not None else settings.read.limit
    source = ParquetSource(args.path)
    headers = select_fields(source.field_names(), cli_args.split_columns(args.columns))
    rows = (
        [format_value(row.get(name)) for name in headers]
        for row in itertools.islice(source.iter_rows(headers), limit)
    )
    writer = OutputWriter(
        headers,
        rows,
        format=cli_args.resolve_format(args, settings),
        batch_size=settings.output.batch_size,
        min_width=settings.output.min_width,
    )
    writer.write(out)
    return 0
