"""Dremel record assembly.

One cursor walks each leaf column's ``(value, repetition, definition)``
triples. Records are rebuilt by recursive descent over the schema: the next
definition level of a node's first descendant leaf says whether the node is
present, and repeated nodes keep reading elements while the next repetition
level of all their descendant leaves equals the node's repetition depth.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, List, Mapping, Optional, Sequence, Tuple

from xpq.errors import AssemblyError
from xpq.record.value import NULL, GroupValue, ListValue, Scalar, ScalarKind, Value, scalar_kind
from xpq.schema.model import ColumnDescriptor, Group, Leaf, Repetition, SchemaNode, leaf_columns, node_levels

LOGGER = logging.getLogger(__name__)

Triple = Tuple[Any, int, int]


class ColumnCursor:
    def __init__(self, column: ColumnDescriptor, triples: Sequence[Triple], row_group: Optional[int] = None):
        self.column = column
        self._triples = triples
        self._pos = 0
        self._row_group = row_group

    @property
    def exhausted(self) -> bool:
        return self._pos >= len(self._triples)

    def peek(self) -> Optional[Triple]:
        if self.exhausted:
            return None
        return self._triples[self._pos]

    def peek_def(self) -> int:
        triple = self.peek()
        if triple is None:
            raise AssemblyError(f"column {self.column.dotted_path} ended in the middle of a record", self._row_group)
        return triple[2]

    def next(self) -> Triple:
        triple = self.peek()
        if triple is None:
            raise AssemblyError(f"column {self.column.dotted_path} ended in the middle of a record", self._row_group)
        _, r, d = triple
        if r < 0 or r > self.column.max_repetition_level:
            raise AssemblyError(
                f"column {self.column.dotted_path}: repetition level {r} exceeds max "
                f"{self.column.max_repetition_level}",
                self._row_group,
            )
        if d < 0 or d > self.column.max_definition_level:
            raise AssemblyError(
                f"column {self.column.dotted_path}: definition level {d} exceeds max "
                f"{self.column.max_definition_level}",
                self._row_group,
            )
        self._pos += 1
        return triple


@dataclass
class _NodeState:
    node: SchemaNode
    def_level: int
    rep_level: int
    kind: Optional[ScalarKind] = None
    cursors: List[ColumnCursor] = field(default_factory=list)
    children: List["_NodeState"] = field(default_factory=list)


class RowAssembler:
    """
    Rebuild rows of ``root`` from per-leaf level streams, one row group at a time.
    """

    def __init__(self, root: Group):
        self.root = root
        self.columns: List[ColumnDescriptor] = leaf_columns(root)
        self._row_group: Optional[int] = None

    def _fail(self, message: str) -> AssemblyError:
        return AssemblyError(message, self._row_group)

    def _build(self, node: SchemaNode, parent_def: int, parent_rep: int, cursors: Mapping[Tuple[str, ...], ColumnCursor], path: Tuple[str, ...]) -> _NodeState:
        d, r = node_levels(node, parent_def, parent_rep)
        path = path + (node.name,)
        state = _NodeState(node=node, def_level=d, rep_level=r)
        if isinstance(node, Leaf):
            state.kind = scalar_kind(node)
            state.cursors = [cursors[path]]
            return state
        assert isinstance(node, Group)
        for child in node.children:
            child_state = self._build(child, d, r, cursors, path)
            state.children.append(child_state)
            state.cursors.extend(child_state.cursors)
        return state

    # -- traversal -------------------------------------------------------

    def _skip(self, state: _NodeState) -> None:
        # An absent node still owns exactly one slot in every descendant column.
        for cursor in state.cursors:
            _, _, d = cursor.next()
            if d >= state.def_level:
                raise self._fail(
                    f"column {cursor.column.dotted_path}: definition level {d} marks '{state.node.name}' "
                    f"present while a sibling column marks it absent"
                )

    def _next_rep(self, state: _NodeState) -> Optional[int]:
        reps = set()
        for cursor in state.cursors:
            triple = cursor.peek()
            reps.add(None if triple is None else triple[1])
        if len(reps) > 1:
            raise self._fail(
                f"columns under '{state.node.name}' disagree on the next repetition level: "
                f"{sorted(reps, key=lambda x: -1 if x is None else x)}"
            )
        return reps.pop() if reps else None

    def _read_field(self, state: _NodeState) -> Value:
        if state.node.repetition is Repetition.REPEATED:
            return self._read_repeated(state, lambda: self._read_present(state))
        if not state.cursors:
            return NULL
        if state.cursors[0].peek_def() < state.def_level:
            if state.node.repetition is Repetition.REQUIRED:
                raise self._fail(f"required field '{state.node.name}' is missing")
            self._skip(state)
            return NULL
        return self._read_present(state)

    def _read_present(self, state: _NodeState) -> Value:
        if isinstance(state.node, Leaf):
            payload, _, d = state.cursors[0].next()
            if d < state.def_level:
                raise self._fail(f"column {state.cursors[0].column.dotted_path}: value expected at level {state.def_level}, got {d}")
            if payload is None:
                raise self._fail(f"column {state.cursors[0].column.dotted_path}: defined slot carries no value")
            return Scalar(state.kind, payload)

        group = state.node
        assert isinstance(group, Group)
        if group.repeated_child is not None:
            repeated = state.children[0]
            if group.unwraps_element:
                element = repeated.children[0]
                return self._read_repeated(repeated, lambda: self._read_field(element))
            return self._read_repeated(repeated, lambda: self._read_present(repeated))
        return GroupValue(tuple((child.node.name, self._read_field(child)) for child in state.children))

    def _read_repeated(self, state: _NodeState, read_element: Callable[[], Value]) -> ListValue:
        if not state.cursors:
            return ListValue(())
        if state.cursors[0].peek_def() < state.def_level:
            self._skip(state)
            return ListValue(())
        items: List[Value] = []
        while True:
            items.append(read_element())
            r = self._next_rep(state)
            if r is None or r < state.rep_level:
                break
            if r > state.rep_level:
                raise self._fail(
                    f"repetition level {r} under '{state.node.name}' was not consumed by a deeper repeated field"
                )
        return ListValue(tuple(items))

    def _read_record(self, root: _NodeState) -> GroupValue:
        for cursor in root.cursors:
            triple = cursor.peek()
            if triple is None:
                raise self._fail(f"column {cursor.column.dotted_path} has fewer records than its siblings")
            if triple[1] != 0:
                raise self._fail(
                    f"column {cursor.column.dotted_path}: record starts at repetition level {triple[1]}"
                )
        return GroupValue(tuple((child.node.name, self._read_field(child)) for child in root.children))

    # -- public API ------------------------------------------------------

    def assemble(
        self,
        streams: Mapping[Tuple[str, ...], Sequence[Triple]],
        row_group: Optional[int] = None,
        num_rows: Optional[int] = None,
    ) -> Iterator[GroupValue]:
        """
        Yield the rows of one row group.

        ``streams`` maps every leaf column path to its triples. When
        ``num_rows`` is given the produced row count is checked against it.
        A row that fails half way through is never yielded.
        """
        self._row_group = row_group
        missing = [col.dotted_path for col in self.columns if col.path not in streams]
        if missing:
            raise self._fail(f"no level stream for columns {missing}")

        cursors = {col.path: ColumnCursor(col, streams[col.path], row_group) for col in self.columns}
        root = _NodeState(node=self.root, def_level=0, rep_level=0)
        for child in self.root.children:
            child_state = self._build(child, 0, 0, cursors, ())
            root.children.append(child_state)
            root.cursors.extend(child_state.cursors)

        if not root.cursors:
            for _ in range(num_rows or 0):
                yield GroupValue(tuple((child.node.name, NULL) for child in root.children))
            return

        produced = 0
        while not all(cursor.exhausted for cursor in root.cursors):
            row = self._read_record(root)
            produced += 1
            yield row

        if num_rows is not None and produced != num_rows:
            raise self._fail(f"assembled {produced} rows, metadata declares {num_rows}")
        LOGGER.debug("Assembled %s rows from row group %s", produced, row_group)
