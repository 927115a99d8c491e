from xpq.record.assembler import ColumnCursor, RowAssembler
from xpq.record.formatter import format_row, format_value
from xpq.record.striping import stripe
from xpq.record.value import NULL, GroupValue, ListValue, Null, Row, Scalar, ScalarKind, Value, scalar_kind

__all__ = [
    "NULL",
    "ColumnCursor",
    "GroupValue",
    "ListValue",
    "Null",
    "Row",
    "RowAssembler",
    "Scalar",
    "ScalarKind",
    "Value",
    "format_row",
    "format_value",
    "scalar_kind",
    "stripe",
]
