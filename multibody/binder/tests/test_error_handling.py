"""
Where: multibody/binder/tests/test_error_handling.py
What: Unit tests for outcome-to-error mapping and exception handlers.
Why: Each failure kind must surface with a stable message and status.
"""

import json

import pytest

from multibody.binder.core.exceptions import (
    ArgumentInvalidError,
    BindingValidationError,
    BodyCaptureError,
    MissingRequiredError,
    StructuralError,
    TypeMismatchError,
    argument_invalid_handler,
    body_capture_error_handler,
    error_for_outcome,
    structural_error_handler,
)
from multibody.binder.models.outcome import (
    FieldError,
    MissingRequired,
    StructuralDecodeFailure,
    TypeMismatch,
    ValidationFailed,
    Value,
)

SIGNATURE = "orders.create(order, count)"


def test_success_maps_to_no_error():
    assert error_for_outcome(Value(1), "count", SIGNATURE) is None


def test_missing_required_message():
    error = error_for_outcome(MissingRequired(), "order", SIGNATURE)

    assert isinstance(error, MissingRequiredError)
    assert isinstance(error, ArgumentInvalidError)
    assert str(error) == f"Validation failed for argument 'order' in {SIGNATURE}, order is null"


def test_type_mismatch_keeps_value_and_reason():
    outcome = TypeMismatch(reason="'x' is not a valid int32", value="x", target="int32")

    error = error_for_outcome(outcome, "count", SIGNATURE)

    assert isinstance(error, TypeMismatchError)
    assert error.error_msg == "count argument type mismatch: 'x' is not a valid int32"
    assert error.has_value
    assert error.value == "x"


def test_type_mismatch_without_coercion_has_no_value():
    error = error_for_outcome(TypeMismatch(reason="str cannot be bound to Order"), "order", SIGNATURE)

    assert not error.has_value


def test_validation_failure_uses_first_message():
    outcome = ValidationFailed(
        errors=(FieldError(field="order.item", message="too short"), FieldError(field="x", message="y")),
        value={"item": ""},
    )

    error = error_for_outcome(outcome, "order", SIGNATURE)

    assert isinstance(error, BindingValidationError)
    assert error.error_msg == "too short"
    assert len(error.errors) == 2


def test_structural_failure_names_signature_and_cause():
    cause = ValueError("Expecting value")

    error = error_for_outcome(StructuralDecodeFailure(cause), "order", SIGNATURE)

    assert isinstance(error, StructuralError)
    assert error.cause is cause
    assert SIGNATURE in str(error)
    assert "Content-Type" in str(error)


@pytest.mark.asyncio
async def test_argument_invalid_handler_renders_422(make_request):
    error = TypeMismatchError("count", SIGNATURE, reason="bad", value=[1], target="int32")

    response = await argument_invalid_handler(make_request(b""), error)

    assert response.status_code == 422
    assert json.loads(response.body) == {
        "message": "Argument Invalid",
        "detail": "count argument type mismatch: bad",
        "key": "count",
        "value": [1],
        "target": "int32",
    }


@pytest.mark.asyncio
async def test_validation_errors_are_listed(make_request):
    error = BindingValidationError("order", SIGNATURE, [FieldError(field="order", message="no")])

    response = await argument_invalid_handler(make_request(b""), error)

    assert json.loads(response.body)["errors"] == [
        {"field": "order", "message": "no", "type": "value_error"}
    ]


@pytest.mark.asyncio
async def test_structural_error_handler_renders_400(make_request):
    response = await structural_error_handler(
        make_request(b"["), StructuralError(SIGNATURE, ValueError("not an object"))
    )

    assert response.status_code == 400
    assert json.loads(response.body) == {
        "message": "Malformed Request Body",
        "detail": "not an object",
    }


@pytest.mark.asyncio
async def test_body_capture_error_handler_renders_400(make_request):
    response = await body_capture_error_handler(
        make_request(b""), BodyCaptureError(ConnectionError("client disconnected"))
    )

    assert response.status_code == 400
    assert json.loads(response.body)["message"] == "Request Body Unavailable"
