from __future__ import annotations

from typing import Iterable

import pyarrow.parquet as pq


def count_rows(metadata: pq.FileMetaData) -> int:
    """
    Total rows recorded in the row group metadata; no column data is read.
    """
    return sum(int(metadata.row_group(i).num_rows) for i in range(metadata.num_row_groups))


def count_rows_many(metadatas: Iterable[pq.FileMetaData]) -> int:
    return sum(count_rows(metadata) for metadata in metadatas)
