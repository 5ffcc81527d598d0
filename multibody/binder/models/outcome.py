"""
Extraction outcome models.

Exactly one outcome is produced per parameter binding per request.
"""

from dataclasses import dataclass, field
from typing import Any, List, Tuple, Union

from pydantic import BaseModel, Field

# Sentinel for "no attempted value recorded".
NO_VALUE: Any = object()


class FieldError(BaseModel):
    """A single violated rule reported by the validator."""

    field: str
    message: str
    type: str = "value_error"


class BindingErrors(BaseModel):
    """
    Validation errors of the multi-body parameter declared just before.

    Declaring a parameter of this type right after a validated multi-body
    parameter turns validation failures into data instead of an error response.
    """

    key: str = ""
    errors: List[FieldError] = Field(default_factory=list)

    def has_errors(self) -> bool:
        return bool(self.errors)

    def first_message(self) -> str:
        return self.errors[0].message if self.errors else ""


@dataclass(frozen=True)
class Value:
    value: Any


@dataclass(frozen=True)
class MissingRequired:
    pass


@dataclass(frozen=True)
class TypeMismatch:
    reason: str
    value: Any = NO_VALUE
    target: str = ""

    @property
    def coerced(self) -> bool:
        return self.value is not NO_VALUE


@dataclass(frozen=True)
class StructuralDecodeFailure:
    cause: Exception


@dataclass(frozen=True)
class ValidationFailed:
    errors: Tuple[FieldError, ...] = field(default_factory=tuple)
    # The extracted value that failed validation.
    value: Any = None

    @property
    def message(self) -> str:
        return self.errors[0].message if self.errors else "validation failed"


ExtractionOutcome = Union[
    Value, MissingRequired, TypeMismatch, StructuralDecodeFailure, ValidationFailed
]
