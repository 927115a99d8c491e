from __future__ import annotations

import argparse
import logging
from typing import IO

from xpq._lib.config import Settings
from xpq.aggregate.sampler import ReservoirSampler
from xpq.commands import args as cli_args
from xpq.output import OutputWriter
from xpq.reader import ParquetSource
from xpq.record.formatter import format_row

LOGGER = logging.getLogger(__name__)


def add_parser(subparsers) -> argparse.ArgumentParser:
    parser = subparsers.add_parser("sample", help="Sample parquet data")
    parser.add_argument(
        "-l",
        "--limit",
        type=int,
        default=None,
        help="Sample size (default from config: 100)",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for a reproducible sample")
    cli_args.add_format_argument(parser)
    cli_args.add_path_argument(parser)
    return parser


def run(args: argparse.Namespace, settings: Settings, out: IO[str]) -> int:
    size = args.limit if args.limit is not None else settings.sample.limit
    seed = args.seed if args.seed is not None else settings.sample.seed
    sampler = ReservoirSampler(size, seed)

    source = ParquetSource(args.path)
    headers = source.field_names()
    sampler.extend(source.iter_rows())
    LOGGER.info("Sampled %s of %s rows", len(sampler.result()), sampler.seen)

    # reservoir slot order
    rows = [format_row(row) for row in sampler.result()]
    writer = OutputWriter(
        headers,
        rows,
        format=cli_args.resolve_format(args, settings),
        batch_size=settings.output.batch_size,
        min_width=settings.output.min_width,
    )
    writer.write(out)
    return 0
