from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from xpq.errors import MetadataError

PHYSICAL_TYPES = (
    "BOOLEAN",
    "INT32",
    "INT64",
    "INT96",
    "FLOAT",
    "DOUBLE",
    "BYTE_ARRAY",
    "FIXED_LEN_BYTE_ARRAY",
)

LIST_LIKE_TYPES = {"LIST", "MAP", "MAP_KEY_VALUE"}


class Repetition(str, enum.Enum):
    REQUIRED = "REQUIRED"
    OPTIONAL = "OPTIONAL"
    REPEATED = "REPEATED"


@dataclass(frozen=True)
class SchemaNode:
    name: str
    repetition: Repetition

    @property
    def is_leaf(self) -> bool:
        return False


@dataclass(frozen=True)
class Leaf(SchemaNode):
    physical_type: str
    logical_type: Optional[str] = None
    type_length: Optional[int] = None

    @property
    def is_leaf(self) -> bool:
        return True


@dataclass(frozen=True)
class Group(SchemaNode):
    children: Tuple[SchemaNode, ...] = ()
    logical_type: Optional[str] = None

    def __post_init__(self) -> None:
        seen = set()
        for child in self.children:
            if child.name in seen:
                raise MetadataError(f"Duplicate field '{child.name}' in group '{self.name}'")
            seen.add(child.name)

    def child(self, name: str) -> Optional[SchemaNode]:
        for node in self.children:
            if node.name == name:
                return node
        return None

    @property
    def field_names(self) -> List[str]:
        return [node.name for node in self.children]

    @property
    def repeated_child(self) -> Optional[SchemaNode]:
        """
        The repeated child of a LIST/MAP annotated group.

        Such a group materializes as the list of its repeated child's
        elements rather than as a one-field group.
        """
        if self.logical_type not in LIST_LIKE_TYPES or len(self.children) != 1:
            return None
        child = self.children[0]
        if child.repetition is not Repetition.REPEATED:
            return None
        return child

    @property
    def unwraps_element(self) -> bool:
        """
        True when list elements are the single child of the repeated group.

        Legacy two-level lists (repeated primitive, a repeated group named
        ``array`` or ``<name>_tuple``, or a repeated group with several
        fields) keep the repeated node itself as the element.
        """
        child = self.repeated_child
        if child is None or self.logical_type != "LIST":
            return False
        if not isinstance(child, Group) or len(child.children) != 1:
            return False
        return child.name not in ("array", f"{self.name}_tuple")


@dataclass(frozen=True)
class ColumnDescriptor:
    path: Tuple[str, ...]
    nodes: Tuple[SchemaNode, ...]
    def_levels: Tuple[int, ...]
    rep_levels: Tuple[int, ...]

    @property
    def leaf(self) -> Leaf:
        return self.nodes[-1]  # type: ignore[return-value]

    @property
    def dotted_path(self) -> str:
        return ".".join(self.path)

    @property
    def max_definition_level(self) -> int:
        return self.def_levels[-1]

    @property
    def max_repetition_level(self) -> int:
        return self.rep_levels[-1]


def node_levels(node: SchemaNode, parent_def: int, parent_rep: int) -> Tuple[int, int]:
    if node.repetition is Repetition.REQUIRED:
        return parent_def, parent_rep
    if node.repetition is Repetition.OPTIONAL:
        return parent_def + 1, parent_rep
    return parent_def + 1, parent_rep + 1


def leaf_columns(root: Group) -> List[ColumnDescriptor]:
    """
    Enumerate leaf columns depth-first in schema declaration order.
    """
    columns: List[ColumnDescriptor] = []

    def visit(node: SchemaNode, chain: Tuple[SchemaNode, ...], defs: Tuple[int, ...], reps: Tuple[int, ...]) -> None:
        d, r = node_levels(node, defs[-1] if defs else 0, reps[-1] if reps else 0)
        chain = chain + (node,)
        defs = defs + (d,)
        reps = reps + (r,)
        if isinstance(node, Group):
            for child in node.children:
                visit(child, chain, defs, reps)
            return
        columns.append(
            ColumnDescriptor(
                path=tuple(n.name for n in chain),
                nodes=chain,
                def_levels=defs,
                rep_levels=reps,
            )
        )

    for child in root.children:
        visit(child, (), (), ())
    return columns


def find_node(root: Group, path: Sequence[str]) -> Optional[SchemaNode]:
    node: SchemaNode = root
    for name in path:
        if not isinstance(node, Group):
            return None
        found = node.child(name)
        if found is None:
            return None
        node = found
    return node


def project_fields(root: Group, names: Sequence[str]) -> Group:
    """
    Keep only the named top-level fields, in schema order.
    """
    wanted = set(names)
    missing = sorted(wanted - set(root.field_names))
    if missing:
        raise MetadataError(f"Unknown fields: {missing}")
    return Group(
        name=root.name,
        repetition=root.repetition,
        children=tuple(c for c in root.children if c.name in wanted),
        logical_type=root.logical_type,
    )


def column_signature(root: Group) -> Dict[str, Tuple[str, int, int]]:
    return {
        col.dotted_path: (col.leaf.physical_type, col.max_definition_level, col.max_repetition_level)
        for col in leaf_columns(root)
    }
