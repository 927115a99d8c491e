from __future__ import annotations

import argparse
import itertools
from typing import IO, Dict, Iterator, List, Tuple

from xpq._lib.config import Settings
from xpq.aggregate.frequency import FrequencyCounter, resolve_columns
from xpq.commands import args as cli_args
from xpq.output import OutputWriter
from xpq.reader import ParquetSource

HEADERS = ["FIELD", "VALUE", "COUNT"]


def add_parser(subparsers) -> argparse.ArgumentParser:
    parser = subparsers.add_parser("frequency", help="Show frequency counts for each column/value")
    parser.add_argument(
        "-c",
        "--columns",
        action="append",
        default=None,
        help="Leaf columns to count, dotted paths, repeatable or comma separated (default: all)",
    )
    parser.add_argument(
        "-l",
        "--limit",
        type=cli_args.non_negative_int,
        default=None,
        help="Max number of rows to scan (default: all)",
    )
    cli_args.add_format_argument(parser)
    cli_args.add_path_argument(parser)
    return parser


def _rows(results: Dict[str, List[Tuple[str, int]]]) -> Iterator[List[str]]:
    for path, counts in results.items():
        for value, count in counts:
            yield [path, value, str(count)]


def run(args: argparse.Namespace, settings: Settings, out: IO[str]) -> int:
    limit = args.limit if args.limit is not None else settings.frequency.limit
    source = ParquetSource(args.path)
    schema = source.schema()
    columns = resolve_columns(schema, cli_args.split_columns(args.columns))
    fields = list(dict.fromkeys(column.path[0] for column in columns))

    rows = source.iter_rows(fields)
    if limit is not None:
        rows = itertools.islice(rows, limit)
    results = FrequencyCounter(columns).extend(rows).results()

    writer = OutputWriter(
        HEADERS,
        _rows(results),
        format=cli_args.resolve_format(args, settings),
        batch_size=settings.output.batch_size,
        min_width=settings.output.min_width,
    )
    writer.write(out)
    return 0
