"""Turn decoded column values into Dremel level triples.

pyarrow decodes a row group into nested python objects and keeps the
repetition/definition levels to itself. The assembler consumes levels, so
this adapter re-derives them from the decoded objects of one top-level field:

* a group is a ``dict`` keyed by child name,
* a repeated node, or a LIST/MAP annotated group, is a ``list``,
* MAP entries are ``(key, value)`` tuples,
* three-level LIST elements are the element value itself.
"""

from __future__ import annotations

from typing import Any, List, Sequence, Tuple

from xpq.errors import AssemblyError
from xpq.schema.model import ColumnDescriptor, Group, Repetition, SchemaNode

Triple = Tuple[Any, int, int]


def _child_value(column: ColumnDescriptor, depth: int, value: Any) -> Any:
    node = column.nodes[depth]
    child = column.nodes[depth + 1]

    if isinstance(node, Group) and node.repeated_child is not None:
        return value

    parent = column.nodes[depth - 1] if depth > 0 else None
    if isinstance(parent, Group) and parent.repeated_child is node:
        if parent.unwraps_element:
            return value
        if isinstance(value, tuple) and isinstance(node, Group):
            return value[node.children.index(child)]

    if not isinstance(value, dict):
        raise AssemblyError(
            f"column {column.dotted_path}: expected a mapping at '{node.name}', got {type(value).__name__}"
        )
    return value.get(child.name)


def _present(column: ColumnDescriptor, depth: int, value: Any, r: int, out: List[Triple]) -> None:
    d = column.def_levels[depth]
    if depth == len(column.nodes) - 1:
        out.append((value, r, d))
        return
    _stripe(column, depth + 1, _child_value(column, depth, value), r, d, out)


def _stripe(column: ColumnDescriptor, depth: int, value: Any, r: int, d: int, out: List[Triple]) -> None:
    node: SchemaNode = column.nodes[depth]

    if node.repetition is Repetition.REPEATED:
        items = list(value) if value is not None else []
        if not items:
            out.append((None, r, d))
            return
        for i, item in enumerate(items):
            _present(column, depth, item, r if i == 0 else column.rep_levels[depth], out)
        return

    if value is None:
        if node.repetition is Repetition.REQUIRED:
            raise AssemblyError(f"column {column.dotted_path}: required field '{node.name}' is null")
        out.append((None, r, d))
        return
    _present(column, depth, value, r, out)


def stripe(column: ColumnDescriptor, values: Sequence[Any]) -> List[Triple]:
    """
    Level triples of one leaf column for the given top-level field values.

    ``values`` holds one decoded object per row for ``column.nodes[0]``.
    """
    out: List[Triple] = []
    for value in values:
        _stripe(column, 0, value, 0, 0, out)
    return out
