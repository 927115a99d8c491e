from __future__ import annotations

import pytest

from xpq.errors import AssemblyError
from xpq.record import NULL, GroupValue, ListValue, RowAssembler, Scalar, ScalarKind
from xpq.schema import parse_schema


def test_document_levels_assemble_to_records(document_schema, document_records, document_levels) -> None:
    rows = list(RowAssembler(document_schema).assemble(document_levels, row_group=0, num_rows=2))

    assert [row.to_py() for row in rows] == document_records
    assert rows[0].get("Links").get("Backward") == ListValue(())
    assert rows[0].get("Name").items[2].get("Url") is NULL


def test_legacy_repeated_primitive_list() -> None:
    root = parse_schema(
        """
        message m {
          REQUIRED group nums (LIST) {
            REPEATED INT32 array;
          }
        }
        """
    )
    streams = {("nums", "array"): [(1, 0, 1), (2, 1, 1), (None, 0, 0)]}

    rows = list(RowAssembler(root).assemble(streams))

    assert rows[0] == GroupValue(
        (("nums", ListValue((Scalar(ScalarKind.INT32, 1), Scalar(ScalarKind.INT32, 2)))),)
    )
    assert rows[1].to_py() == {"nums": []}


def test_legacy_array_group_keeps_element_group() -> None:
    root = parse_schema(
        """
        message m {
          OPTIONAL group pts (LIST) {
            REPEATED group array {
              REQUIRED INT32 x;
            }
          }
        }
        """
    )
    streams = {("pts", "array", "x"): [(5, 0, 2), (6, 1, 2), (None, 0, 0)]}

    rows = list(RowAssembler(root).assemble(streams, num_rows=2))

    assert [row.to_py() for row in rows] == [{"pts": [{"x": 5}, {"x": 6}]}, {"pts": None}]


def test_three_level_list_unwraps_element() -> None:
    root = parse_schema(
        """
        message m {
          OPTIONAL group tags (LIST) {
            REPEATED group list {
              OPTIONAL BYTE_ARRAY element (UTF8);
            }
          }
        }
        """
    )
    streams = {("tags", "list", "element"): [("a", 0, 3), (None, 1, 2), (None, 0, 1), (None, 0, 0)]}

    rows = list(RowAssembler(root).assemble(streams))

    assert [row.to_py() for row in rows] == [{"tags": ["a", None]}, {"tags": []}, {"tags": None}]


def test_map_materializes_key_value_groups() -> None:
    root = parse_schema(
        """
        message m {
          OPTIONAL group attrs (MAP) {
            REPEATED group key_value {
              REQUIRED BYTE_ARRAY key (UTF8);
              OPTIONAL INT64 value;
            }
          }
        }
        """
    )
    streams = {
        ("attrs", "key_value", "key"): [("a", 0, 2), ("b", 1, 2)],
        ("attrs", "key_value", "value"): [(1, 0, 3), (None, 1, 2)],
    }

    (row,) = RowAssembler(root).assemble(streams)

    assert row.to_py() == {"attrs": [{"key": "a", "value": 1}, {"key": "b", "value": None}]}


def test_schema_without_leaves_yields_declared_rows() -> None:
    root = parse_schema("message m {\n  OPTIONAL group empty {\n  }\n}\n")

    rows = list(RowAssembler(root).assemble({}, num_rows=3))

    assert [row.to_py() for row in rows] == [{"empty": None}] * 3


def test_definition_level_above_max_is_rejected() -> None:
    root = parse_schema("message m {\n  REQUIRED INT32 a;\n}\n")

    with pytest.raises(AssemblyError, match="definition level 1 exceeds max 0"):
        list(RowAssembler(root).assemble({("a",): [(1, 0, 1)]}))


def test_record_must_start_at_repetition_zero() -> None:
    root = parse_schema("message m {\n  REPEATED INT32 a;\n}\n")

    with pytest.raises(AssemblyError, match="record starts at repetition level 1"):
        list(RowAssembler(root).assemble({("a",): [(1, 1, 1)]}))


def test_unconsumed_repetition_level_is_rejected() -> None:
    root = parse_schema("message m {\n  REPEATED INT32 a;\n}\n")

    with pytest.raises(AssemblyError, match="repetition level 2 under .a. was not consumed"):
        list(RowAssembler(root).assemble({("a",): [(1, 0, 1), (2, 2, 1)]}))


def test_sibling_columns_must_agree() -> None:
    root = parse_schema(
        """
        message m {
          REPEATED group g {
            REQUIRED INT32 a;
            REQUIRED INT32 b;
          }
        }
        """
    )
    streams = {
        ("g", "a"): [(1, 0, 1), (2, 1, 1)],
        ("g", "b"): [(1, 0, 1), (2, 0, 1)],
    }

    with pytest.raises(AssemblyError, match="disagree"):
        list(RowAssembler(root).assemble(streams))


def test_defined_slot_without_value_is_rejected() -> None:
    root = parse_schema("message m {\n  REQUIRED INT32 a;\n}\n")

    with pytest.raises(AssemblyError, match="defined slot carries no value"):
        list(RowAssembler(root).assemble({("a",): [(None, 0, 0)]}))


def test_row_count_mismatch_reports_row_group() -> None:
    root = parse_schema("message m {\n  REQUIRED INT32 a;\n}\n")

    with pytest.raises(AssemblyError) as excinfo:
        list(RowAssembler(root).assemble({("a",): [(1, 0, 0)]}, row_group=3, num_rows=2))

    assert excinfo.value.row_group == 3
    assert str(excinfo.value) == "row group 3: assembled 1 rows, metadata declares 2"


def test_missing_stream_is_rejected() -> None:
    root = parse_schema("message m {\n  REQUIRED INT32 a;\n  REQUIRED INT32 b;\n}\n")

    with pytest.raises(AssemblyError, match="no level stream"):
        list(RowAssembler(root).assemble({("a",): [(1, 0, 0)]}))
