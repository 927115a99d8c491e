from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator, List, Optional, Sequence

import pyarrow as pa
import pyarrow.parquet as pq

from xpq._lib.io_utils import list_parquet_files
from xpq.aggregate.count import count_rows
from xpq.errors import AssemblyError, MetadataError
from xpq.record.assembler import RowAssembler
from xpq.record.striping import stripe
from xpq.record.value import GroupValue
from xpq.schema.model import Group, column_signature, project_fields
from xpq.schema.parser import parse_schema

LOGGER = logging.getLogger(__name__)


def open_parquet(path: Path) -> pq.ParquetFile:
    try:
        return pq.ParquetFile(str(path))
    except (pa.ArrowException, OSError) as exc:
        raise MetadataError(f"{path} >>> {exc}") from exc


def file_schema(parquet: pq.ParquetFile) -> Group:
    """
    Schema tree of an opened file, built from the schema text pyarrow prints.

    The top-level field names must match the file's arrow schema; a mismatch
    means the printed text could not be read back unambiguously.
    """
    root = parse_schema(str(parquet.schema))
    try:
        arrow_names = list(parquet.schema_arrow.names)
    except pa.ArrowException as exc:
        raise MetadataError(f"Unreadable arrow schema: {exc}") from exc
    if root.field_names != arrow_names:
        raise MetadataError(f"Schema text yields fields {root.field_names}, file declares {arrow_names}")
    return root


class ParquetSource:
    """
    A parquet file, or a directory of parquet part files read in path order.

    The first file's schema is the source schema; every other file must have
    the same leaf columns.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def files(self) -> List[Path]:
        return list_parquet_files(self.path)

    def _first_file(self) -> Path:
        files = self.files()
        if not files:
            raise MetadataError(f"Invalid parquet: {self.path}")
        return files[0]

    def metadata(self) -> pq.FileMetaData:
        return open_parquet(self._first_file()).metadata

    def schema(self) -> Group:
        return file_schema(open_parquet(self._first_file()))

    def num_rows(self) -> int:
        total = 0
        for path in self.files():
            total += count_rows(open_parquet(path).metadata)
        return total

    def field_names(self) -> List[str]:
        return self.schema().field_names

    def iter_rows(self, fields: Optional[Sequence[str]] = None) -> Iterator[GroupValue]:
        """
        Stream rows lazily, one row group at a time.

        ``fields`` restricts decoding to the named top-level fields.
        """
        files = self.files()
        if not files:
            raise MetadataError(f"Invalid parquet: {self.path}")

        expected = None
        for path in files:
            parquet = open_parquet(path)
            root = file_schema(parquet)
            signature = column_signature(root)
            if expected is None:
                expected = signature
            elif signature != expected:
                raise MetadataError(f"{path} >>> schema differs from {files[0]}")

            if fields is not None:
                root = project_fields(root, fields)
            yield from self._file_rows(path, parquet, root)

    def _file_rows(self, path: Path, parquet: pq.ParquetFile, root: Group) -> Iterator[GroupValue]:
        assembler = RowAssembler(root)
        names = root.field_names
        metadata = parquet.metadata
        LOGGER.info("Reading %s (%s row groups)", path, metadata.num_row_groups)

        for index in range(metadata.num_row_groups):
            num_rows = metadata.row_group(index).num_rows
            try:
                table = parquet.read_row_group(index, columns=names, use_threads=False)
            except (pa.ArrowException, OSError) as exc:
                raise AssemblyError(f"{path}: failed to decode row group: {exc}", index) from exc

            try:
                decoded = {name: table.column(name).to_pylist() for name in names}
            except KeyError as exc:
                raise AssemblyError(f"{path}: column missing from decoded row group: {exc}", index) from exc
            try:
                streams = {
                    column.path: stripe(column, decoded[column.path[0]])
                    for column in assembler.columns
                }
            except AssemblyError as exc:
                raise exc.at_row_group(index)
            LOGGER.debug("Row group %s of %s: %s rows", index, path, num_rows)
            yield from assembler.assemble(streams, row_group=index, num_rows=num_rows)
