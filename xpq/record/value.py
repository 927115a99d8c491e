"""Materialized values.

A value is exactly one of ``Null``, ``Scalar``, ``ListValue`` or
``GroupValue``. Consumers dispatch with ``isinstance`` over these four
classes; nothing else is ever produced by the assembler.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Iterator, List, Optional, Tuple

from xpq.schema.model import Leaf


class ScalarKind(str, enum.Enum):
    BOOLEAN = "BOOLEAN"
    INT32 = "INT32"
    INT64 = "INT64"
    INT96 = "INT96"
    FLOAT = "FLOAT"
    DOUBLE = "DOUBLE"
    BYTE_ARRAY = "BYTE_ARRAY"
    FIXED_LEN_BYTE_ARRAY = "FIXED_LEN_BYTE_ARRAY"
    STRING = "STRING"
    DECIMAL = "DECIMAL"
    DATE = "DATE"
    TIME = "TIME"
    TIMESTAMP = "TIMESTAMP"
    UUID = "UUID"


_LOGICAL_KINDS = {
    "UTF8": ScalarKind.STRING,
    "ENUM": ScalarKind.STRING,
    "JSON": ScalarKind.STRING,
    "DECIMAL": ScalarKind.DECIMAL,
    "DATE": ScalarKind.DATE,
    "TIME": ScalarKind.TIME,
    "TIMESTAMP": ScalarKind.TIMESTAMP,
    "UUID": ScalarKind.UUID,
    "FLOAT16": ScalarKind.FLOAT,
}


def scalar_kind(leaf: Leaf) -> ScalarKind:
    """Derive the scalar kind of a leaf from its physical and logical type."""
    if leaf.logical_type:
        base = leaf.logical_type.split("(", 1)[0]
        if base.startswith(("TIME_", "TIMESTAMP_")):
            base = base.rsplit("_", 1)[0]
        kind = _LOGICAL_KINDS.get(base)
        if kind is not None:
            return kind
    return ScalarKind(leaf.physical_type)


class Value:
    __slots__ = ()

    def to_py(self) -> Any:
        raise NotImplementedError


@dataclass(frozen=True)
class Null(Value):
    def to_py(self) -> Any:
        return None


NULL = Null()


@dataclass(frozen=True)
class Scalar(Value):
    kind: ScalarKind
    payload: Any

    def to_py(self) -> Any:
        return self.payload


@dataclass(frozen=True)
class ListValue(Value):
    items: Tuple[Value, ...] = ()

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[Value]:
        return iter(self.items)

    def to_py(self) -> List[Any]:
        return [item.to_py() for item in self.items]


@dataclass(frozen=True)
class GroupValue(Value):
    fields: Tuple[Tuple[str, Value], ...] = ()

    @property
    def names(self) -> List[str]:
        return [name for name, _ in self.fields]

    @property
    def values(self) -> List[Value]:
        return [value for _, value in self.fields]

    def get(self, name: str) -> Optional[Value]:
        for key, value in self.fields:
            if key == name:
                return value
        return None

    def __len__(self) -> int:
        return len(self.fields)

    def to_py(self) -> dict:
        return {name: value.to_py() for name, value in self.fields}


# One assembled record.
Row = GroupValue
