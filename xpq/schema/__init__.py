from xpq.schema.model import (
    ColumnDescriptor,
    Group,
    Leaf,
    Repetition,
    SchemaNode,
    find_node,
    leaf_columns,
    project_fields,
)
from xpq.schema.parser import normalize_logical_type, parse_schema
from xpq.schema.printer import render

__all__ = [
    "ColumnDescriptor",
    "Group",
    "Leaf",
    "Repetition",
    "SchemaNode",
    "find_node",
    "leaf_columns",
    "normalize_logical_type",
    "parse_schema",
    "project_fields",
    "render",
]
