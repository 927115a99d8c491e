from __future__ import annotations

from pathlib import Path

import pyarrow as pa
import pyarrow.parquet as pq
import pytest

from xpq.schema import parse_schema

DOCUMENT_SCHEMA = """
message Document {
  REQUIRED INT64 DocId;
  OPTIONAL group Links {
    REPEATED INT64 Backward;
    REPEATED INT64 Forward;
  }
  REPEATED group Name {
    REPEATED group Language {
      REQUIRED BYTE_ARRAY Code (UTF8);
      OPTIONAL BYTE_ARRAY Country (UTF8);
    }
    OPTIONAL BYTE_ARRAY Url (UTF8);
  }
}
"""

DOCUMENT_RECORDS = [
    {
        "DocId": 10,
        "Links": {"Backward": [], "Forward": [20, 40, 60]},
        "Name": [
            {
                "Language": [{"Code": "en-us", "Country": "us"}, {"Code": "en", "Country": None}],
                "Url": "http://A",
            },
            {"Language": [], "Url": "http://B"},
            {"Language": [{"Code": "en-gb", "Country": "gb"}], "Url": None},
        ],
    },
    {
        "DocId": 20,
        "Links": {"Backward": [10, 30], "Forward": [80]},
        "Name": [{"Language": [], "Url": "http://C"}],
    },
]

DOCUMENT_LEVELS = {
    ("DocId",): [(10, 0, 0), (20, 0, 0)],
    ("Links", "Backward"): [(None, 0, 1), (10, 0, 2), (30, 1, 2)],
    ("Links", "Forward"): [(20, 0, 2), (40, 1, 2), (60, 1, 2), (80, 0, 2)],
    ("Name", "Language", "Code"): [("en-us", 0, 2), ("en", 2, 2), (None, 1, 1), ("en-gb", 1, 2), (None, 0, 1)],
    ("Name", "Language", "Country"): [("us", 0, 3), (None, 2, 2), (None, 1, 1), ("gb", 1, 3), (None, 0, 1)],
    ("Name", "Url"): [("http://A", 0, 2), ("http://B", 1, 2), (None, 1, 1), ("http://C", 0, 2)],
}


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("XPQ_CONFIG", raising=False)


@pytest.fixture
def document_schema():
    return parse_schema(DOCUMENT_SCHEMA)


def favorites_table() -> pa.Table:
    schema = pa.schema(
        [
            pa.field("name", pa.string(), nullable=False),
            pa.field("favorite_color", pa.string(), nullable=True),
            pa.field(
                "favorite_numbers",
                pa.list_(pa.field("element", pa.int32(), nullable=False)),
                nullable=False,
            ),
        ]
    )
    return pa.table(
        {
            "name": ["Alyssa", "Ben"],
            "favorite_color": [None, "red"],
            "favorite_numbers": [[3, 9, 15, 20], []],
        },
        schema=schema,
    )


@pytest.fixture
def favorites_path(tmp_path: Path) -> Path:
    path = tmp_path / "favorites.parquet"
    pq.write_table(favorites_table(), path)
    return path


def events_table(start: int, count: int) -> pa.Table:
    ids = list(range(start, start + count))
    return pa.table(
        {
            "id": pa.array(ids, type=pa.int64()),
            "kind": pa.array(["click" if i % 3 else "view" for i in ids], type=pa.string()),
            "score": pa.array([None if i % 4 == 0 else i / 2 for i in ids], type=pa.float64()),
        }
    )


@pytest.fixture
def multi_row_group_path(tmp_path: Path) -> Path:
    path = tmp_path / "events.parquet"
    pq.write_table(events_table(0, 10), path, row_group_size=3)
    return path


@pytest.fixture
def dataset_dir(tmp_path: Path) -> Path:
    base = tmp_path / "dataset"
    (base / "year=2024").mkdir(parents=True, exist_ok=True)
    pq.write_table(events_table(0, 4), base / "part-0.parquet")
    pq.write_table(events_table(4, 3), base / "part-1.parquet", row_group_size=2)
    pq.write_table(events_table(7, 5), base / "year=2024" / "part-2.parquet")
    (base / "_SUCCESS").write_text("", encoding="utf-8")
    (base / "part-0.parquet.crc").write_text("crc", encoding="utf-8")
    return base


@pytest.fixture
def document_records():
    return DOCUMENT_RECORDS


@pytest.fixture
def document_levels():
    return DOCUMENT_LEVELS
