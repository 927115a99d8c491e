from __future__ import annotations

import unicodedata
from typing import IO, Iterable, Iterator, List, Sequence

import pandas as pd

from xpq._lib.config import OUTPUT_FORMATS, normalize_format

COLUMN_GAP = "  "


def display_width(text: str) -> int:
    width = 0
    for ch in text:
        if unicodedata.combining(ch):
            continue
        width += 2 if unicodedata.east_asian_width(ch) in ("W", "F") else 1
    return width


def format_cell(value: str, width: int) -> str:
    """
    Pad ``value`` to ``width`` columns, or cut it with ``...``.

    A quoted value keeps its closing quote when cut.
    """
    length = display_width(value)
    if length == width:
        return value
    if length < width:
        return value + " " * (width - length)

    quoted = value.startswith('"')
    suffix = '..."' if quoted else "..."
    room = max(width - len(suffix), 0)
    kept = []
    used = 0
    for ch in value:
        w = display_width(ch)
        if used + w > room:
            break
        kept.append(ch)
        used += w
    return "".join(kept) + suffix


def _join(cells: Sequence[str], widths: Sequence[int]) -> str:
    last = len(cells) - 1
    parts = []
    for i, cell in enumerate(cells):
        if i == last:
            parts.append(cell if display_width(cell) <= widths[i] else format_cell(cell, widths[i]))
        else:
            parts.append(format_cell(cell, widths[i]))
    return COLUMN_GAP.join(parts).rstrip(" ") if cells else ""


def _batches(rows: Iterable[List[str]], size: int) -> Iterator[List[List[str]]]:
    batch: List[List[str]] = []
    for row in rows:
        batch.append(row)
        if len(batch) >= size:
            yield batch
            batch = []
    if batch:
        yield batch


class OutputWriter:
    """
    Lay out a header and string rows as a table, a vertical listing or CSV.

    Rows are consumed lazily in batches of ``batch_size``; table column widths
    are fixed by the header and the first batch.
    """

    def __init__(
        self,
        headers: Sequence[str],
        rows: Iterable[List[str]],
        format: str = "table",
        batch_size: int = 500,
        min_width: int = 0,
    ):
        format = normalize_format(format)
        if format not in OUTPUT_FORMATS:
            raise ValueError(f"Unknown output format: {format}")
        self.headers = list(headers)
        self.rows = rows
        self.format = format
        self.batch_size = max(int(batch_size), 1)
        self.min_width = max(int(min_width), 0)

    def write(self, out: IO[str]) -> None:
        if self.format == "vertical":
            self._write_vertical(out)
        elif self.format == "csv":
            self._write_csv(out)
        else:
            self._write_table(out)

    def _write_table(self, out: IO[str]) -> None:
        widths = [max(self.min_width, display_width(h)) for h in self.headers]
        header_written = False
        for batch in _batches(self.rows, self.batch_size):
            if not header_written:
                for row in batch:
                    for i, cell in enumerate(row[: len(widths)]):
                        widths[i] = max(widths[i], display_width(cell))
                out.write(_join(self.headers, widths) + "\n")
                header_written = True
            for row in batch:
                out.write(_join(row, widths) + "\n")
            out.flush()
        if not header_written:
            out.write(_join(self.headers, widths) + "\n")
            out.flush()

    def _write_vertical(self, out: IO[str]) -> None:
        label_width = max((display_width(h) + 1 for h in self.headers), default=0)
        for batch in _batches(self.rows, self.batch_size):
            for row in batch:
                out.write("\n")
                for header, cell in zip(self.headers, row):
                    out.write(format_cell(header + ":", label_width) + COLUMN_GAP + cell + "\n")
            out.flush()

    def _write_csv(self, out: IO[str]) -> None:
        header = True
        for batch in _batches(self.rows, self.batch_size):
            frame = pd.DataFrame(batch, columns=self.headers)
            frame.to_csv(out, index=False, header=header, lineterminator="\n")
            header = False
        if header:
            pd.DataFrame(columns=self.headers).to_csv(out, index=False, lineterminator="\n")
        out.flush()
