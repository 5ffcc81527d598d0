"""
Core logic package.

Provides body buffering, decoding, shape classification and coercion.
"""

from .body_buffer import RawBody, ReplayableBody, should_buffer
from .body_decoder import charset_from_content_type, decode_body_map
from .coercion import coerce
from .shapes import (
    Char,
    Float32,
    Float64,
    Int8,
    Int16,
    Int32,
    Int64,
    PrimitiveKind,
    ShapeKind,
    TargetShape,
)

__all__ = [
    "RawBody",
    "ReplayableBody",
    "should_buffer",
    "charset_from_content_type",
    "decode_body_map",
    "coerce",
    "Char",
    "Float32",
    "Float64",
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "PrimitiveKind",
    "ShapeKind",
    "TargetShape",
]
