"""Parse message-definition text into a schema tree.

Two dialects are accepted: the canonical text produced by
``xpq.schema.printer.render`` and the schema text pyarrow prints for a file's
``ParquetSchema`` (lower-case keywords, ``field_id=`` tokens, logical types
spelled like ``String`` or ``Decimal(precision=10, scale=2)``).
"""

from __future__ import annotations

import re
from typing import Dict, List, Optional, Tuple

from xpq.errors import MetadataError
from xpq.schema.model import PHYSICAL_TYPES, Group, Leaf, Repetition, SchemaNode

_FIELD_ID = r"(?:field_id=-?\d+\s+)?"

_MESSAGE_RE = re.compile(r"^message\s+(?P<name>.+?)\s*\{$", re.IGNORECASE)
_GROUP_RE = re.compile(
    r"^(?P<rep>required|optional|repeated)\s+group\s+" + _FIELD_ID + r"(?P<rest>.+?)\s*\{$",
    re.IGNORECASE,
)
_LEAF_RE = re.compile(
    r"^(?P<rep>required|optional|repeated)\s+(?P<ptype>\w+)(?:\s*\((?P<len>\d+)\))?\s+"
    + _FIELD_ID
    + r"(?P<rest>.+?)\s*;$",
    re.IGNORECASE,
)

_PHYSICAL_ALIASES = {"BINARY": "BYTE_ARRAY"}

_KNOWN_LOGICAL_RE = re.compile(
    r"^(?:UTF8|ENUM|JSON|BSON|UUID|LIST|MAP|MAP_KEY_VALUE|DATE|INTERVAL|FLOAT16|NULL"
    r"|DECIMAL(?:\(\d+,\d+\))?|(?:TIME|TIMESTAMP)_(?:MILLIS|MICROS|NANOS)|U?INT_(?:8|16|32|64))$"
)

_SIMPLE_LOGICAL = {
    "string": "UTF8",
    "utf8": "UTF8",
    "enum": "ENUM",
    "json": "JSON",
    "bson": "BSON",
    "uuid": "UUID",
    "list": "LIST",
    "map": "MAP",
    "map_key_value": "MAP_KEY_VALUE",
    "date": "DATE",
    "interval": "INTERVAL",
    "float16": "FLOAT16",
    "null": "NULL",
    "unknown": "NULL",
}

_TIME_UNITS = {
    "milliseconds": "MILLIS",
    "microseconds": "MICROS",
    "nanoseconds": "NANOS",
}


def _split_params(raw: str) -> Tuple[List[str], Dict[str, str]]:
    positional: List[str] = []
    named: Dict[str, str] = {}
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        if "=" in part:
            key, value = part.split("=", 1)
            named[key.strip()] = value.strip()
        else:
            positional.append(part)
    return positional, named


def normalize_logical_type(text: Optional[str]) -> Optional[str]:
    """
    Map a logical or converted type annotation onto its canonical name.

    >>> normalize_logical_type("Int(bitWidth=16, isSigned=false)")
    'UINT_16'
    """
    if text is None:
        return None
    text = text.strip()
    if not text:
        return None
    match = re.match(r"^(\w+)\s*(?:\((.*)\))?$", text)
    if match is None:
        return text.upper()
    name = match.group(1).lower()
    positional, named = _split_params(match.group(2) or "")

    if name in _SIMPLE_LOGICAL:
        return _SIMPLE_LOGICAL[name]
    if name == "decimal":
        precision = named.get("precision", positional[0] if positional else None)
        scale = named.get("scale", positional[1] if len(positional) > 1 else None)
        if precision is None:
            return "DECIMAL"
        return f"DECIMAL({precision},{scale or 0})"
    if name in ("time", "timestamp") and "timeUnit" in named:
        unit = _TIME_UNITS.get(named["timeUnit"].lower(), named["timeUnit"].upper())
        return f"{name.upper()}_{unit}"
    if name == "int" and "bitWidth" in named:
        signed = named.get("isSigned", "true").lower() == "true"
        return f"{'INT' if signed else 'UINT'}_{named['bitWidth']}"
    return text.upper()


def split_annotation(rest: str) -> Tuple[str, Optional[str]]:
    """
    Split ``name (annotation)`` into the field name and its normalized logical type.

    A parenthesised suffix only counts as an annotation when it names a known
    logical or converted type; otherwise it is part of the field name, so a
    column called ``price (usd)`` keeps its full name.
    """
    rest = rest.strip()
    if rest.endswith(")"):
        start = rest.find(" (")
        while start > 0:
            logical = normalize_logical_type(rest[start + 2 : -1])
            if logical is not None and _KNOWN_LOGICAL_RE.match(logical):
                return rest[:start].rstrip(), logical
            start = rest.find(" (", start + 1)
    return rest, None


def _normalize_physical(raw: str, line_no: int) -> str:
    physical = raw.upper()
    physical = _PHYSICAL_ALIASES.get(physical, physical)
    if physical not in PHYSICAL_TYPES:
        raise MetadataError(f"Unknown physical type '{raw}' on schema line {line_no}")
    return physical


class _PendingGroup:
    def __init__(self, name: str, repetition: Repetition, logical_type: Optional[str]):
        self.name = name
        self.repetition = repetition
        self.logical_type = logical_type
        self.children: List[SchemaNode] = []

    def build(self) -> Group:
        return Group(
            name=self.name,
            repetition=self.repetition,
            children=tuple(self.children),
            logical_type=self.logical_type,
        )


def parse_schema(text: str) -> Group:
    """
    Parse message-definition text into the root schema group.
    """
    stack: List[_PendingGroup] = []
    root: Optional[Group] = None

    for line_no, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()
        if not line:
            continue
        if root is not None:
            raise MetadataError(f"Unexpected content after schema root on line {line_no}: {line!r}")

        if not stack:
            message = _MESSAGE_RE.match(line)
            group = _GROUP_RE.match(line)
            if message is not None:
                stack.append(_PendingGroup(message.group("name"), Repetition.REQUIRED, None))
            elif group is not None:
                name, logical = split_annotation(group.group("rest"))
                stack.append(_PendingGroup(name, Repetition.REQUIRED, logical))
            # anything before the root opener (e.g. an object header) is ignored
            continue

        if line == "}":
            built = stack.pop().build()
            if stack:
                stack[-1].children.append(built)
            else:
                root = built
            continue

        group = _GROUP_RE.match(line)
        if group is not None:
            name, logical = split_annotation(group.group("rest"))
            stack.append(_PendingGroup(name, Repetition(group.group("rep").upper()), logical))
            continue

        leaf = _LEAF_RE.match(line)
        if leaf is not None:
            physical = _normalize_physical(leaf.group("ptype"), line_no)
            length = leaf.group("len")
            name, logical = split_annotation(leaf.group("rest"))
            stack[-1].children.append(
                Leaf(
                    name=name,
                    repetition=Repetition(leaf.group("rep").upper()),
                    physical_type=physical,
                    logical_type=logical,
                    type_length=int(length) if length is not None else None,
                )
            )
            continue

        raise MetadataError(f"Unparseable schema line {line_no}: {line!r}")

    if stack:
        raise MetadataError(f"Unbalanced braces: group '{stack[-1].name}' is never closed")
    if root is None:
        raise MetadataError("Schema text has no root group")
    return root
