from __future__ import annotations

import datetime as dt
from decimal import Decimal
from pathlib import Path

import pyarrow as pa
import pyarrow.parquet as pq
import pytest

from xpq.aggregate import count_rows, count_rows_many
from xpq.errors import MetadataError
from xpq.reader import ParquetSource
from xpq.record import format_row
from xpq.schema import render


def test_favorites_schema_and_rows(favorites_path: Path) -> None:
    source = ParquetSource(favorites_path)

    assert render(source.schema()).splitlines() == [
        "message schema {",
        "  REQUIRED BYTE_ARRAY name (UTF8);",
        "  OPTIONAL BYTE_ARRAY favorite_color (UTF8);",
        "  REQUIRED group favorite_numbers (LIST) {",
        "    REPEATED group list {",
        "      REQUIRED INT32 element;",
        "    }",
        "  }",
        "}",
    ]
    assert source.field_names() == ["name", "favorite_color", "favorite_numbers"]
    assert [format_row(row) for row in source.iter_rows()] == [
        ['"Alyssa"', "null", "[3, 9, 15, 20]"],
        ['"Ben"', '"red"', "[]"],
    ]


def test_row_count_matches_assembled_rows(multi_row_group_path: Path) -> None:
    source = ParquetSource(multi_row_group_path)
    metadata = pq.ParquetFile(multi_row_group_path).metadata

    assert metadata.num_row_groups == 4
    assert count_rows(metadata) == 10
    assert source.num_rows() == 10
    assert [row.get("id").to_py() for row in source.iter_rows()] == list(range(10))


def test_directory_source_reads_parts_in_path_order(dataset_dir: Path) -> None:
    source = ParquetSource(dataset_dir)
    metadatas = [pq.ParquetFile(p).metadata for p in source.files()]

    assert source.num_rows() == 12
    assert count_rows_many(metadatas) == 12
    assert [row.get("id").to_py() for row in source.iter_rows()] == list(range(12))


def test_iter_rows_projects_top_level_fields(multi_row_group_path: Path) -> None:
    rows = list(ParquetSource(multi_row_group_path).iter_rows(["score", "id"]))

    assert rows[0].names == ["id", "score"]
    assert rows[0].to_py() == {"id": 0, "score": None}
    assert rows[3].to_py() == {"id": 3, "score": 1.5}


def test_nested_values_round_trip(tmp_path: Path) -> None:
    table = pa.table(
        {
            "point": pa.array(
                [{"x": 1, "y": None}, None, {"x": 3, "y": "c"}],
                type=pa.struct([("x", pa.int64()), ("y", pa.string())]),
            ),
            "matrix": pa.array([[[1, 2], [], None], None, [[3]]], type=pa.list_(pa.list_(pa.int64()))),
            "items": pa.array(
                [[{"sku": "a", "qty": 1}], [], [{"sku": "b", "qty": None}, None]],
                type=pa.list_(pa.struct([("sku", pa.string()), ("qty", pa.int32())])),
            ),
        }
    )
    path = tmp_path / "nested.parquet"
    pq.write_table(table, path)

    rows = [row.to_py() for row in ParquetSource(path).iter_rows()]

    assert rows == table.to_pylist()


def test_map_entries_become_key_value_groups(tmp_path: Path) -> None:
    table = pa.table({"attrs": pa.array([[("a", 1), ("b", None)], None, []], type=pa.map_(pa.string(), pa.int64()))})
    path = tmp_path / "map.parquet"
    pq.write_table(table, path)

    rows = [format_row(row) for row in ParquetSource(path).iter_rows()]

    assert rows == [['[{key: "a", value: 1}, {key: "b", value: null}]'], ["null"], ["[]"]]


def test_logical_types_are_formatted(tmp_path: Path) -> None:
    table = pa.table(
        {
            "day": pa.array([dt.date(2024, 3, 1)], type=pa.date32()),
            "at": pa.array([dt.datetime(2024, 3, 1, 12, 30)], type=pa.timestamp("ms")),
            "price": pa.array([Decimal("12.50")], type=pa.decimal128(9, 2)),
            "ratio": pa.array([3.3], type=pa.float32()),
            "small": pa.array([-3], type=pa.int8()),
            "flag": pa.array([True]),
            "blob": pa.array([b"raw"], type=pa.binary()),
        }
    )
    path = tmp_path / "types.parquet"
    pq.write_table(table, path)

    (row,) = ParquetSource(path).iter_rows()

    assert format_row(row) == ["2024-03-01", "2024-03-01 12:30:00", "12.50", "3.3", "-3", "true", '"raw"']


def test_empty_table_has_no_rows(tmp_path: Path) -> None:
    path = tmp_path / "empty.parquet"
    pq.write_table(pa.table({"a": pa.array([], type=pa.int64())}), path)
    source = ParquetSource(path)

    assert source.num_rows() == 0
    assert list(source.iter_rows()) == []


def test_invalid_file_raises_metadata_error(tmp_path: Path) -> None:
    path = tmp_path / "broken.parquet"
    path.write_text("not parquet", encoding="utf-8")

    with pytest.raises(MetadataError, match="broken.parquet"):
        ParquetSource(path).schema()


def test_directory_without_parquet_files(tmp_path: Path) -> None:
    (tmp_path / "_SUCCESS").write_text("", encoding="utf-8")

    with pytest.raises(MetadataError, match="Invalid parquet"):
        list(ParquetSource(tmp_path).iter_rows())


def test_part_files_with_different_schemas(tmp_path: Path) -> None:
    pq.write_table(pa.table({"a": [1]}), tmp_path / "part-0.parquet")
    pq.write_table(pa.table({"b": ["x"]}), tmp_path / "part-1.parquet")

    with pytest.raises(MetadataError, match="schema differs"):
        list(ParquetSource(tmp_path).iter_rows())


def test_field_names_with_spaces_and_parentheses(tmp_path: Path) -> None:
    path = tmp_path / "named.parquet"
    pq.write_table(
        pa.table(
            {
                "price (usd)": [1.5, 2.0],
                "first name": ["Ann", "Bo"],
                "note (String)": ["x", None],
            }
        ),
        path,
    )
    source = ParquetSource(path)

    assert source.field_names() == ["price (usd)", "first name", "note (String)"]
    assert source.schema().child("price (usd)").logical_type is None
    assert [format_row(row) for row in source.iter_rows()] == [
        ["1.5", '"Ann"', '"x"'],
        ["2", '"Bo"', "null"],
    ]
    assert [row.to_py() for row in source.iter_rows(["price (usd)"])] == [{"price (usd)": 1.5}, {"price (usd)": 2.0}]


def test_ambiguous_schema_text_is_a_metadata_error(tmp_path: Path) -> None:
    path = tmp_path / "ambiguous.parquet"
    pq.write_table(pa.table({"ratio (String)": [0.5]}), path)

    with pytest.raises(MetadataError, match="file declares"):
        ParquetSource(path).schema()
