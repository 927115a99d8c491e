from __future__ import annotations

from collections import Counter
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from xpq.errors import AssemblyError, InvalidColumnError
from xpq.record.formatter import format_value
from xpq.record.value import NULL, GroupValue, ListValue, Null, Value
from xpq.schema.model import ColumnDescriptor, Group, Repetition, find_node, leaf_columns


def resolve_columns(root: Group, paths: Optional[Sequence[str]]) -> List[ColumnDescriptor]:
    """
    Map dotted column paths onto leaf columns.

    An exact path wins; otherwise a unique case-insensitive match is used.
    With no paths, every leaf column is returned.
    """
    columns = leaf_columns(root)
    if not paths:
        return columns
    by_path = {col.dotted_path: col for col in columns}
    resolved: List[ColumnDescriptor] = []
    for path in paths:
        column = by_path.get(path)
        if column is None:
            matches = [col for col in columns if col.dotted_path.lower() == path.lower()]
            if len(matches) == 1:
                column = matches[0]
        if column is None:
            node = find_node(root, path.split("."))
            if node is not None and isinstance(node, Group):
                raise InvalidColumnError(f"Column '{path}' is a group, not a leaf column")
            raise InvalidColumnError(f"Column '{path}' does not exist")
        if column not in resolved:
            resolved.append(column)
    return resolved


def extract(row: GroupValue, column: ColumnDescriptor) -> Value:
    """
    The value of a leaf column within one assembled row.

    Repeated ancestors turn the result into a list of the leaf's values; a
    null ancestor makes it null.
    """
    return _walk(row, column, 0)


def _shape_error(column: ColumnDescriptor, node, value: Value, expected: str) -> AssemblyError:
    return AssemblyError(
        f"column {column.dotted_path}: expected {expected} at '{node.name}', got {type(value).__name__}"
    )


def _walk(value: Value, column: ColumnDescriptor, depth: int) -> Value:
    # ``value`` is one occurrence of the parent of nodes[depth]
    if depth == len(column.nodes):
        return value
    if isinstance(value, Null):
        return NULL

    parent = column.nodes[depth - 1] if depth > 0 else None
    node = column.nodes[depth]

    if isinstance(parent, Group) and parent.repeated_child is node:
        if not isinstance(value, ListValue):
            raise _shape_error(column, parent, value, "a list")
        step = 2 if parent.unwraps_element else 1
        return ListValue(tuple(_walk(item, column, depth + step) for item in value.items))

    if not isinstance(value, GroupValue):
        raise _shape_error(column, node, value, "a group")
    child = value.get(node.name)
    if child is None:
        return NULL
    if node.repetition is Repetition.REPEATED:
        if not isinstance(child, ListValue):
            raise _shape_error(column, node, child, "a list")
        return ListValue(tuple(_walk(item, column, depth + 1) for item in child.items))
    return _walk(child, column, depth + 1)


class FrequencyCounter:
    """
    Distinct-value counts for a set of leaf columns over a row stream.
    """

    def __init__(self, columns: Sequence[ColumnDescriptor]):
        self.columns = list(columns)
        self._counts: Dict[str, Counter] = {col.dotted_path: Counter() for col in self.columns}
        self._sort_text: Dict[str, Dict[str, str]] = {col.dotted_path: {} for col in self.columns}

    def add(self, row: GroupValue) -> None:
        for column in self.columns:
            value = extract(row, column)
            key = format_value(value)
            path = column.dotted_path
            self._counts[path][key] += 1
            if key not in self._sort_text[path]:
                self._sort_text[path][key] = format_value(value, quote=False)

    def extend(self, rows: Iterable[GroupValue]) -> "FrequencyCounter":
        for row in rows:
            self.add(row)
        return self

    def results(self) -> Dict[str, List[Tuple[str, int]]]:
        """
        Per column, ``(formatted value, count)`` pairs by descending count.

        Ties are ordered by the unquoted rendering, then by the formatted key.
        """
        out: Dict[str, List[Tuple[str, int]]] = {}
        for path, counts in self._counts.items():
            sort_text = self._sort_text[path]
            out[path] = sorted(counts.items(), key=lambda kv: (-kv[1], sort_text[kv[0]], kv[0]))
        return out


def count_frequencies(
    rows: Iterable[GroupValue],
    root: Group,
    column_paths: Optional[Sequence[str]] = None,
) -> Dict[str, List[Tuple[str, int]]]:
    columns = resolve_columns(root, column_paths)
    return FrequencyCounter(columns).extend(rows).results()
