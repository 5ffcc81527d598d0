"""
Coercion of JSON scalars to primitive targets.

Numeric targets accept any JSON number and apply the usual narrowing or
widening, truncation included. Strings are never parsed into numbers.
"""

import json
import logging
import math
import struct
from typing import Any

from ..models.outcome import ExtractionOutcome, TypeMismatch, Value
from .shapes import PrimitiveKind

logger = logging.getLogger("multibody.coercion")

_INT_BITS = {
    PrimitiveKind.INT8: 8,
    PrimitiveKind.INT16: 16,
    PrimitiveKind.INT32: 32,
    PrimitiveKind.INT64: 64,
}


class CoercionError(ValueError):
    pass


def _is_number(value: Any) -> bool:
    # bool is an int subclass but is not a JSON number.
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _wrap(value: int, bits: int) -> int:
    """Two's complement wrap-around to a signed integer of the given width."""
    mask = (1 << bits) - 1
    value &= mask
    if value >> (bits - 1):
        value -= 1 << bits
    return value


def _to_integer(value: Any, bits: int) -> int:
    if isinstance(value, float):
        if math.isnan(value):
            return 0
        low, high = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
        if value <= low:
            return low
        if value >= high:
            return high
        return int(value)
    return _wrap(int(value), bits)


def _to_float32(value: Any) -> float:
    number = float(value)
    try:
        return struct.unpack("f", struct.pack("f", number))[0]
    except OverflowError:
        return math.copysign(math.inf, number)


def stringify(value: Any) -> str:
    """Render a JSON value as text: strings as-is, everything else as JSON."""
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


def _convert(value: Any, kind: PrimitiveKind) -> Any:
    if kind.is_numeric:
        if not _is_number(value):
            raise CoercionError(f"{type(value).__name__} is not a number")
        if kind in _INT_BITS:
            return _to_integer(value, _INT_BITS[kind])
        if kind is PrimitiveKind.FLOAT32:
            return _to_float32(value)
        return float(value)

    if kind is PrimitiveKind.STRING:
        return value

    if kind is PrimitiveKind.BOOLEAN:
        # Kept as text; callers rely on receiving "true"/"false".
        return stringify(value)

    if kind is PrimitiveKind.CHAR:
        text = stringify(value)
        if not text:
            raise CoercionError("empty string has no first character")
        return text[0]

    raise CoercionError(f"unsupported primitive kind {kind!r}")


def coerce(value: Any, kind: PrimitiveKind) -> ExtractionOutcome:
    """
    Convert an extracted JSON value to a primitive kind.

    Returns:
        Value with the converted result, or TypeMismatch naming the value and kind
    """
    try:
        return Value(_convert(value, kind))
    except (CoercionError, TypeError, ValueError, OverflowError) as exc:
        logger.debug(
            "Coercion to %s failed",
            kind.value,
            extra={"target": kind.value, "error_detail": str(exc)},
        )
        return TypeMismatch(
            reason=f"{value!r} is not a valid {kind.value}", value=value, target=kind.value
        )
