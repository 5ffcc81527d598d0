"""
Per-parameter extraction from the shared body map.
"""

import copy
import json
import logging
from typing import Any, List

from pydantic import BaseModel, ValidationError

from ..models.outcome import (
    ExtractionOutcome,
    MissingRequired,
    TypeMismatch,
    ValidationFailed,
    Value,
)
from .binding import ParameterBinding
from .body_decoder import BodyMap
from .coercion import coerce
from .shapes import ShapeKind, TargetShape
from .validation import field_errors, is_shape_error

logger = logging.getLogger("multibody.extractor")


def is_compatible(value: Any, shape: TargetShape) -> bool:
    """Checks run before any conversion is attempted."""
    if shape.kind is ShapeKind.OPAQUE:
        return True
    if shape.matches_exactly(value):
        return True
    if shape.is_primitive:
        return True
    if isinstance(value, list) and shape.kind is ShapeKind.ARRAY:
        return True
    if isinstance(value, dict):
        return True
    return False


def _unvalidated(value: Any, shape: TargetShape) -> Any:
    """Build the target without running its rules; used once the shape is known to fit."""
    annotation = shape.annotation
    if isinstance(value, dict) and isinstance(annotation, type) and issubclass(annotation, BaseModel):
        return annotation.model_construct(**copy.deepcopy(value))
    return copy.deepcopy(value)


def _decode_structure(value: Any, binding: ParameterBinding) -> ExtractionOutcome:
    shape = binding.shape
    try:
        return Value(shape.adapter.validate_json(json.dumps(value)))
    except ValidationError as exc:
        errors: List[dict] = exc.errors()

    shape_errors = [err for err in errors if is_shape_error(err["type"])]
    if shape_errors:
        first = field_errors(shape_errors[:1])[0]
        reason = f"{first.field}: {first.message}" if first.field else first.message
        return TypeMismatch(reason=reason)

    # Well-shaped value that breaks declared rules.
    unvalidated = _unvalidated(value, shape)
    if not binding.validates:
        return Value(unvalidated)
    return ValidationFailed(errors=tuple(field_errors(errors, binding.key)), value=unvalidated)


def extract(body_map: BodyMap, binding: ParameterBinding) -> ExtractionOutcome:
    """
    Resolve one binding against the body map.

    Returns:
        Value, MissingRequired, TypeMismatch, or ValidationFailed when a
        validated structure breaks its own rules
    """
    value = body_map.get(binding.key)
    if value is None:
        if binding.required:
            return MissingRequired()
        return Value(binding.default)

    shape = binding.shape
    if not is_compatible(value, shape):
        logger.debug(
            "Incompatible value for %s",
            binding.key,
            extra={"key": binding.key, "value_type": type(value).__name__, "target": shape.describe()},
        )
        return TypeMismatch(reason=f"{type(value).__name__} cannot be bound to {shape.describe()}")

    if shape.is_primitive:
        return coerce(value, shape.primitive)

    if shape.matches_exactly(value):
        # The body map is shared by every binding of the request.
        return Value(copy.deepcopy(value))

    if isinstance(value, (dict, list)) and shape.kind in (ShapeKind.STRUCTURED, ShapeKind.ARRAY):
        return _decode_structure(value, binding)

    return Value(copy.deepcopy(value))
