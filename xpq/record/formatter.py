from __future__ import annotations

import datetime as dt
import uuid
from decimal import Decimal
from typing import Any, List

import numpy as np

from xpq.errors import FormatError
from xpq.record.value import GroupValue, ListValue, Null, Scalar, ScalarKind, Value

_TEXT_KINDS = {
    ScalarKind.STRING,
    ScalarKind.BYTE_ARRAY,
    ScalarKind.FIXED_LEN_BYTE_ARRAY,
}


def _mismatch(kind: ScalarKind, payload: Any) -> FormatError:
    return FormatError(f"{kind.value} scalar carries a {type(payload).__name__} payload: {payload!r}")


def _is_int(payload: Any) -> bool:
    return isinstance(payload, (int, np.integer)) and not isinstance(payload, (bool, np.bool_))


def _quote(text: str) -> str:
    return '"' + text.replace('"', '\\"') + '"'


def _text(payload: Any) -> str:
    if isinstance(payload, (bytes, bytearray)):
        return bytes(payload).decode("utf-8", errors="backslashreplace")
    return payload


def format_float(payload: Any, single: bool = False) -> str:
    """
    Shortest decimal text that reads back to the same float.

    Trailing zeros and a trailing decimal point are dropped (``4.0`` -> ``4``).
    """
    value = np.float32(payload) if single else np.float64(payload)
    if not np.isfinite(value):
        return str(float(value))
    magnitude = abs(float(value))
    if magnitude == 0.0 or 1e-5 <= magnitude < 1e16:
        return np.format_float_positional(value, trim="-")
    return np.format_float_scientific(value, trim="-")


def _format_scalar(value: Scalar, quote: bool) -> str:
    kind, payload = value.kind, value.payload

    if kind is ScalarKind.BOOLEAN:
        if not isinstance(payload, (bool, np.bool_)):
            raise _mismatch(kind, payload)
        return "true" if payload else "false"

    if kind in (ScalarKind.INT32, ScalarKind.INT64):
        if not _is_int(payload):
            raise _mismatch(kind, payload)
        return str(int(payload))

    if kind in (ScalarKind.FLOAT, ScalarKind.DOUBLE):
        if not isinstance(payload, (float, np.floating)):
            raise _mismatch(kind, payload)
        return format_float(payload, single=kind is ScalarKind.FLOAT)

    if kind in _TEXT_KINDS:
        if not isinstance(payload, (str, bytes, bytearray)):
            raise _mismatch(kind, payload)
        text = _text(payload)
        return _quote(text) if quote else text

    if kind is ScalarKind.DECIMAL:
        if not isinstance(payload, Decimal):
            raise _mismatch(kind, payload)
        return format(payload, "f")

    if kind is ScalarKind.DATE:
        if not isinstance(payload, dt.date):
            raise _mismatch(kind, payload)
        return payload.isoformat()

    if kind in (ScalarKind.TIMESTAMP, ScalarKind.INT96):
        if isinstance(payload, dt.datetime):
            return payload.isoformat(sep=" ")
        if _is_int(payload):
            return str(int(payload))
        raise _mismatch(kind, payload)

    if kind is ScalarKind.TIME:
        if isinstance(payload, dt.time):
            return payload.isoformat()
        if _is_int(payload):
            return str(int(payload))
        raise _mismatch(kind, payload)

    if kind is ScalarKind.UUID:
        if isinstance(payload, uuid.UUID):
            text = str(payload)
        elif isinstance(payload, (bytes, bytearray)) and len(payload) == 16:
            text = str(uuid.UUID(bytes=bytes(payload)))
        elif isinstance(payload, str):
            text = payload
        else:
            raise _mismatch(kind, payload)
        return _quote(text) if quote else text

    raise _mismatch(kind, payload)


def format_value(value: Value, quote: bool = True) -> str:
    """
    Canonical display text of a value.

    ``quote=False`` leaves text scalars bare; it is only used for ordering.
    """
    if isinstance(value, Null):
        return "null"
    if isinstance(value, Scalar):
        return _format_scalar(value, quote)
    if isinstance(value, ListValue):
        return "[" + ", ".join(format_value(item, quote) for item in value.items) + "]"
    if isinstance(value, GroupValue):
        return "{" + ", ".join(f"{name}: {format_value(item, quote)}" for name, item in value.fields) + "}"
    raise FormatError(f"Not a value: {value!r}")


def format_row(row: GroupValue) -> List[str]:
    """Format each top-level field of a row, in schema order."""
    return [format_value(value) for value in row.values]
