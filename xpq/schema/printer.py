from __future__ import annotations

from typing import List

from xpq.schema.model import Group, Leaf, SchemaNode

INDENT = "  "


def _annotation(logical_type: str | None) -> str:
    return f" ({logical_type})" if logical_type else ""


def _leaf_line(node: Leaf) -> str:
    physical = node.physical_type
    if node.type_length is not None:
        physical = f"{physical} ({node.type_length})"
    return f"{node.repetition.value} {physical} {node.name}{_annotation(node.logical_type)};"


def _render(node: SchemaNode, depth: int, lines: List[str], is_root: bool) -> None:
    pad = INDENT * depth
    if isinstance(node, Leaf):
        lines.append(pad + _leaf_line(node))
        return
    assert isinstance(node, Group)
    if is_root:
        lines.append(f"{pad}message {node.name} {{")
    else:
        lines.append(f"{pad}{node.repetition.value} group {node.name}{_annotation(node.logical_type)} {{")
    for child in node.children:
        _render(child, depth + 1, lines, is_root=False)
    lines.append(pad + "}")


def render(node: SchemaNode) -> str:
    """
    Render a schema tree as canonical message-definition text.

    The node passed in is rendered as the ``message`` root when it is a group.
    """
    lines: List[str] = []
    _render(node, 0, lines, is_root=True)
    return "\n".join(lines) + "\n"
