"""
Target shape descriptors.

A handler annotation is classified once, when the binding is declared, into
one of four shapes: primitive, structured, array or opaque.
"""

import collections.abc
import enum
import types
from dataclasses import dataclass, field
from typing import Annotated, Any, Optional, Tuple, Union, get_args, get_origin

from pydantic import TypeAdapter


class ShapeKind(str, enum.Enum):
    PRIMITIVE = "primitive"
    STRUCTURED = "structured"
    ARRAY = "array"
    OPAQUE = "opaque"


class PrimitiveKind(str, enum.Enum):
    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    STRING = "string"
    BOOLEAN = "boolean"
    CHAR = "char"

    @property
    def is_numeric(self) -> bool:
        return self in _NUMERIC_KINDS


_NUMERIC_KINDS = {
    PrimitiveKind.INT8,
    PrimitiveKind.INT16,
    PrimitiveKind.INT32,
    PrimitiveKind.INT64,
    PrimitiveKind.FLOAT32,
    PrimitiveKind.FLOAT64,
}

# Annotations for the narrower numeric kinds and single characters.
Int8 = Annotated[int, PrimitiveKind.INT8]
Int16 = Annotated[int, PrimitiveKind.INT16]
Int32 = Annotated[int, PrimitiveKind.INT32]
Int64 = Annotated[int, PrimitiveKind.INT64]
Float32 = Annotated[float, PrimitiveKind.FLOAT32]
Float64 = Annotated[float, PrimitiveKind.FLOAT64]
Char = Annotated[str, PrimitiveKind.CHAR]

_BUILTIN_PRIMITIVES = {
    int: PrimitiveKind.INT64,
    float: PrimitiveKind.FLOAT64,
    str: PrimitiveKind.STRING,
    bool: PrimitiveKind.BOOLEAN,
}

_ARRAY_ORIGINS = {
    list,
    tuple,
    set,
    frozenset,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Set,
    collections.abc.Iterable,
}

_OPAQUE_TYPES = {Any, object}


@dataclass(frozen=True)
class TargetShape:
    """Classified target of a multi-body parameter."""

    kind: ShapeKind
    annotation: Any
    primitive: Optional[PrimitiveKind] = None
    adapter: Optional[TypeAdapter] = field(default=None, compare=False, repr=False)

    @property
    def is_primitive(self) -> bool:
        return self.kind is ShapeKind.PRIMITIVE

    def matches_exactly(self, value: Any) -> bool:
        """True when the annotation is a plain class and the value's type is that class."""
        return isinstance(self.annotation, type) and type(value) is self.annotation

    def describe(self) -> str:
        if self.primitive is not None:
            return self.primitive.value
        return getattr(self.annotation, "__name__", None) or repr(self.annotation)


def _is_union(tp: Any) -> bool:
    return get_origin(tp) in (Union, types.UnionType)


def unwrap_annotation(annotation: Any) -> Tuple[Any, Tuple[Any, ...]]:
    """
    Strip ``Annotated`` layers and ``Optional`` wrappers from an annotation.

    Returns:
        The bare type and the collected ``Annotated`` metadata, outermost first.
    """
    metadata = []
    tp = annotation
    while True:
        if get_origin(tp) is Annotated:
            args = get_args(tp)
            tp = args[0]
            metadata.extend(args[1:])
            continue
        if _is_union(tp):
            members = [a for a in get_args(tp) if a is not type(None)]
            if len(members) < len(get_args(tp)):
                tp = members[0] if len(members) == 1 else Union[tuple(members)]
                continue
        break
    return tp, tuple(metadata)


def classify_shape(base: Any, metadata: Tuple[Any, ...] = ()) -> TargetShape:
    """Build the shape descriptor for an unwrapped annotation."""
    explicit = next((m for m in metadata if isinstance(m, PrimitiveKind)), None)
    if explicit is not None:
        return TargetShape(ShapeKind.PRIMITIVE, base, primitive=explicit)

    if base in _OPAQUE_TYPES:
        return TargetShape(ShapeKind.OPAQUE, base)

    if base in _BUILTIN_PRIMITIVES:
        return TargetShape(ShapeKind.PRIMITIVE, base, primitive=_BUILTIN_PRIMITIVES[base])

    origin = get_origin(base)
    if base in _ARRAY_ORIGINS or origin in _ARRAY_ORIGINS:
        return TargetShape(ShapeKind.ARRAY, base, adapter=TypeAdapter(base))

    return TargetShape(ShapeKind.STRUCTURED, base, adapter=TypeAdapter(base))
