"""
Data model definitions package.

Aggregates declaration markers and extraction outcomes for use in other modules.
"""

from .outcome import (
    BindingErrors,
    ExtractionOutcome,
    FieldError,
    MissingRequired,
    StructuralDecodeFailure,
    TypeMismatch,
    ValidationFailed,
    Value,
)
from .params import MultiBody, Valid, Validated

__all__ = [
    "BindingErrors",
    "ExtractionOutcome",
    "FieldError",
    "MissingRequired",
    "StructuralDecodeFailure",
    "TypeMismatch",
    "ValidationFailed",
    "Value",
    "MultiBody",
    "Valid",
    "Validated",
]
