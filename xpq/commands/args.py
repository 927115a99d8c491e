from __future__ import annotations

import argparse
from pathlib import Path
from typing import Iterable, List, Optional

from xpq._lib.config import OUTPUT_FORMATS, Settings, normalize_format


def existing_path(value: str) -> Path:
    path = Path(value)
    if not path.exists():
        raise argparse.ArgumentTypeError(f"Path '{value}' does not exist")
    return path


def non_negative_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid number: {value!r}") from exc
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {number}")
    return number


def output_format(value: str) -> str:
    fmt = normalize_format(value)
    if fmt not in OUTPUT_FORMATS:
        raise argparse.ArgumentTypeError(f"invalid format {value!r} (choose from {', '.join(OUTPUT_FORMATS)})")
    return fmt


def split_columns(values: Optional[Iterable[str]]) -> Optional[List[str]]:
    if not values:
        return None
    columns = []
    for value in values:
        columns.extend(c.strip() for c in value.split(",") if c.strip())
    return columns or None


def add_path_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("path", type=existing_path, help="Path to parquet file or directory")


def add_format_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-f",
        "--format",
        type=output_format,
        default=None,
        help="Output format: table, vertical (v) or csv (default from config: table)",
    )


def resolve_format(args: argparse.Namespace, settings: Settings) -> str:
    return args.format or settings.output.format
