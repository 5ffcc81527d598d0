"""
Parameter binding declarations.

Handler signatures are inspected once, when the handler is decorated, and
turned into immutable ParameterBinding records.
"""

import dataclasses
import inspect
import typing
from dataclasses import dataclass, field
from typing import Annotated, Any, List, Optional, Tuple

from pydantic import TypeAdapter
from pydantic.errors import PydanticSchemaGenerationError

from ..models.outcome import BindingErrors
from ..models.params import MultiBody
from .exceptions import BindingDeclarationError
from .shapes import PrimitiveKind, TargetShape, classify_shape, unwrap_annotation


@dataclass(frozen=True)
class ValidationTarget:
    """Annotation a validator checks, with its pydantic adapter built once."""

    annotation: Any
    adapter: Optional[TypeAdapter] = field(default=None, compare=False, repr=False)

    @classmethod
    def of(cls, annotation: Any) -> "ValidationTarget":
        return cls(annotation, TypeAdapter(annotation))


@dataclass(frozen=True)
class ParameterBinding:
    """Canonical declaration of one multi-body parameter."""

    name: str
    key: str
    shape: TargetShape
    required: bool = True
    default: Any = None
    # Recognized validation marker, if any.
    validation: Any = None
    validation_target: Optional[ValidationTarget] = None
    # Name of the BindingErrors parameter that follows this one.
    errors_param: Optional[str] = None

    @property
    def validates(self) -> bool:
        return self.validation is not None

    @property
    def validation_groups(self) -> Tuple[Any, ...]:
        return tuple(getattr(self.validation, "groups", ()) or ())


def describe_handler(handler: Any) -> str:
    """Human-readable handler signature used in error messages."""
    try:
        signature = str(inspect.signature(handler))
    except (TypeError, ValueError):
        signature = "(...)"
    return f"{handler.__module__}.{handler.__qualname__}{signature}"


def _find_marker(metadata: Tuple[Any, ...]) -> Optional[MultiBody]:
    for item in metadata:
        if isinstance(item, MultiBody):
            return item
        if item is MultiBody:
            return MultiBody()
    return None


def _find_validation(metadata: Tuple[Any, ...], markers: Tuple[type, ...]) -> Any:
    for item in metadata:
        if isinstance(item, markers):
            return item
        if isinstance(item, type) and issubclass(item, markers):
            return item()
    return None


def _is_own_metadata(item: Any, markers: Tuple[type, ...]) -> bool:
    if isinstance(item, (MultiBody, PrimitiveKind) + markers):
        return True
    return isinstance(item, type) and issubclass(item, (MultiBody,) + markers)


def build_binding(
    name: str,
    annotation: Any,
    marker: MultiBody,
    validation_markers: Tuple[type, ...],
    default: Any = None,
) -> ParameterBinding:
    """Normalize one annotated parameter into a ParameterBinding."""
    base, metadata = unwrap_annotation(annotation)
    shape = classify_shape(base, metadata)

    validation = _find_validation(metadata, validation_markers)
    constraints = tuple(m for m in metadata if not _is_own_metadata(m, validation_markers))
    validation_annotation = Annotated[(base, *constraints)] if constraints else base
    validation_target = (
        ValidationTarget.of(validation_annotation) if validation is not None else None
    )

    return ParameterBinding(
        name=name,
        key=marker.name or name,
        shape=shape,
        required=marker.required,
        default=default,
        validation=validation,
        validation_target=validation_target,
    )


def inspect_bindings(handler: Any, validation_markers: Tuple[type, ...]) -> List[ParameterBinding]:
    """
    Collect the multi-body bindings declared on a handler.

    Raises:
        BindingDeclarationError: a BindingErrors parameter does not directly
            follow a multi-body parameter, or a target type has no schema
    """
    signature_text = describe_handler(handler)
    hints = typing.get_type_hints(handler, include_extras=True)
    bindings: List[ParameterBinding] = []
    previous: Optional[ParameterBinding] = None

    for name, param in inspect.signature(handler).parameters.items():
        hint = hints.get(name, param.annotation)
        base, metadata = unwrap_annotation(hint)

        if base is BindingErrors:
            if previous is None or previous.errors_param is not None:
                raise BindingDeclarationError(
                    signature_text,
                    f"'{name}' must directly follow a multi-body parameter",
                )
            bindings[-1] = dataclasses.replace(previous, errors_param=name)
            previous = None
            continue

        marker = _find_marker(metadata)
        if marker is None:
            previous = None
            continue

        default = None if param.default is inspect.Parameter.empty else param.default
        try:
            binding = build_binding(name, hint, marker, validation_markers, default=default)
        except PydanticSchemaGenerationError as exc:
            raise BindingDeclarationError(signature_text, f"'{name}': {exc}") from exc
        bindings.append(binding)
        previous = binding

    return bindings
