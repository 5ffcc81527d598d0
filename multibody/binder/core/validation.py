"""
Validation bridge.

Runs an extracted value through the configured validator when the parameter
carries a recognized validation marker, and turns reported field errors into
an extraction outcome.
"""

import logging
from typing import Any, Iterable, List, Mapping, Protocol, Sequence

from pydantic import ValidationError

from ..models.outcome import ExtractionOutcome, FieldError, ValidationFailed, Value
from .binding import ParameterBinding, ValidationTarget

logger = logging.getLogger("multibody.validation")

# Pydantic error types meaning the value has the wrong shape for the target,
# as opposed to a well-shaped value breaking a declared rule.
_SHAPE_ERROR_SUFFIXES = ("_type", "_parsing")
_SHAPE_ERROR_TYPES = {
    "missing",
    "extra_forbidden",
    "json_invalid",
    "literal_error",
    "enum",
    "int_from_float",
    "is_instance_of",
    "is_subclass_of",
    "union_tag_invalid",
    "union_tag_not_found",
    "missing_argument",
    "unexpected_keyword_argument",
    "unexpected_positional_argument",
}


def is_shape_error(error_type: str) -> bool:
    return error_type in _SHAPE_ERROR_TYPES or error_type.endswith(_SHAPE_ERROR_SUFFIXES)


def field_errors(errors: Iterable[Mapping[str, Any]], key: str = "") -> List[FieldError]:
    """
    Convert pydantic error dicts to FieldErrors.

    Errors without a location refer to the parameter itself and are named
    after its key.
    """
    return [
        FieldError(
            field=".".join(str(part) for part in err["loc"]) or key,
            message=err["msg"],
            type=err["type"],
        )
        for err in errors
    ]


class Validator(Protocol):
    """External validator contract: value, validation target and group hints in, field errors out."""

    def validate(
        self, value: Any, target: ValidationTarget, groups: Sequence[Any]
    ) -> List[FieldError]:
        ...


class PydanticValidator:
    """
    Validator backed by pydantic.

    The value is dumped by alias and validated again against the target, so
    parameter-level constraints (``Field(ge=1)``) and model validators run.
    Group hints are visible to validators as ``info.context["groups"]``.
    """

    def validate(
        self, value: Any, target: ValidationTarget, groups: Sequence[Any]
    ) -> List[FieldError]:
        adapter = target.adapter
        try:
            adapter.validate_python(
                adapter.dump_python(value, by_alias=True), context={"groups": tuple(groups)}
            )
        except ValidationError as exc:
            return field_errors(exc.errors())
        return []


class ValidationBridge:
    def __init__(self, validator: Validator):
        self.validator = validator

    def validate(self, value: Any, binding: ParameterBinding) -> ExtractionOutcome:
        errors = self.validator.validate(
            value, binding.validation_target, binding.validation_groups
        )
        if not errors:
            return Value(value)

        errors = [
            error if error.field else error.model_copy(update={"field": binding.key})
            for error in errors
        ]
        logger.debug(
            "Validation failed for %s",
            binding.key,
            extra={"key": binding.key, "error_count": len(errors)},
        )
        return ValidationFailed(errors=tuple(errors), value=value)
