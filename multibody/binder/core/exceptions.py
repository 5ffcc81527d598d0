"""
Custom exception classes.

Represent errors related to multi-body parameter binding, the mapping from
extraction outcomes to those errors, and their HTTP exception handlers.
"""

import logging
from typing import Any, Optional, Sequence

from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..config import config
from ..models.outcome import (
    NO_VALUE,
    ExtractionOutcome,
    FieldError,
    MissingRequired,
    StructuralDecodeFailure,
    TypeMismatch,
    ValidationFailed,
)

logger = logging.getLogger("multibody.exceptions")


class MultiBodyError(Exception):
    """Base exception class for multi-body binding."""

    pass


class BindingDeclarationError(TypeError):
    """Raised at decoration time when a handler declares its bindings incorrectly."""

    def __init__(self, signature: str, detail: str):
        self.signature = signature
        self.detail = detail
        super().__init__(f"Invalid multi-body declaration on {signature}: {detail}")


class BodyCaptureError(MultiBodyError):
    """Raised when the request body cannot be read from the transport."""

    def __init__(self, cause: Exception):
        self.cause = cause
        super().__init__(f"Failed to read request body: {cause}")


class BodyDecodeError(MultiBodyError):
    """Raised by the decoder when the body is not a JSON object."""

    def __init__(self, cause: Exception):
        self.cause = cause
        super().__init__(f"{type(cause).__name__}: {cause}")


class StructuralError(MultiBodyError):
    """The request body could not be decoded; every multi-body parameter fails."""

    def __init__(self, signature: str, cause: Exception):
        self.signature = signature
        self.cause = cause
        super().__init__(
            f"Request body error for {signature}: check the request Content-Type "
            f"and HTTP method. {type(cause).__name__}: {cause}"
        )


class ArgumentInvalidError(MultiBodyError):
    """A single multi-body parameter could not be bound."""

    def __init__(self, key: str, signature: str, error_msg: str):
        self.key = key
        self.signature = signature
        self.error_msg = error_msg
        super().__init__(f"Validation failed for argument '{key}' in {signature}, {error_msg}")


class MissingRequiredError(ArgumentInvalidError):
    def __init__(self, key: str, signature: str):
        super().__init__(key, signature, f"{key} is null")


class TypeMismatchError(ArgumentInvalidError):
    def __init__(
        self, key: str, signature: str, reason: str = "", value: Any = NO_VALUE, target: str = ""
    ):
        self.value = value
        self.target = target
        error_msg = f"{key} argument type mismatch"
        if reason:
            error_msg = f"{error_msg}: {reason}"
        super().__init__(key, signature, error_msg)

    @property
    def has_value(self) -> bool:
        return self.value is not NO_VALUE


class BindingValidationError(ArgumentInvalidError):
    def __init__(self, key: str, signature: str, errors: Sequence[FieldError]):
        self.errors = list(errors)
        message = self.errors[0].message if self.errors else "validation failed"
        super().__init__(key, signature, message)


def error_for_outcome(
    outcome: ExtractionOutcome, key: str, signature: str
) -> Optional[MultiBodyError]:
    """
    Map a failed extraction outcome to the error raised to the host.

    Returns None for successful outcomes.
    """
    if isinstance(outcome, StructuralDecodeFailure):
        return StructuralError(signature, outcome.cause)
    if isinstance(outcome, MissingRequired):
        return MissingRequiredError(key, signature)
    if isinstance(outcome, TypeMismatch):
        return TypeMismatchError(
            key, signature, reason=outcome.reason, value=outcome.value, target=outcome.target
        )
    if isinstance(outcome, ValidationFailed):
        return BindingValidationError(key, signature, outcome.errors)
    return None


# ===========================================
# Exception Handlers
# ===========================================


async def global_exception_handler(request: Request, exc: Exception):
    """
    Catch-all handler for unhandled exceptions.
    """
    error_detail = str(exc)
    logger.error(
        f"Global exception handler caught: {exc}",
        exc_info=True,
        extra={
            "path": request.url.path,
            "method": request.method,
        },
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Internal Server Error", "detail": error_detail},
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """
    Handler for HTTPException.
    """
    return JSONResponse(status_code=exc.status_code, content={"message": exc.detail})


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Handler for FastAPI's own validation errors.
    """
    return JSONResponse(
        status_code=422,
        content={"message": "Validation Error", "detail": str(exc.errors())},
    )


async def argument_invalid_handler(request: Request, exc: ArgumentInvalidError):
    """
    Handler for a multi-body parameter that could not be bound.
    """
    content = {"message": "Argument Invalid", "detail": exc.error_msg, "key": exc.key}
    if isinstance(exc, TypeMismatchError) and exc.has_value and config.ERROR_DETAIL_INCLUDE_VALUE:
        content["value"] = exc.value
        content["target"] = exc.target
    if isinstance(exc, BindingValidationError):
        content["errors"] = [error.model_dump() for error in exc.errors]

    logger.info(
        "Multi-body argument rejected",
        extra={
            "key": exc.key,
            "signature": exc.signature,
            "error_type": type(exc).__name__,
            "path": request.url.path,
        },
    )
    return JSONResponse(status_code=422, content=content)


async def structural_error_handler(request: Request, exc: StructuralError):
    """
    Handler for request bodies that are not a JSON object.
    """
    logger.warning(
        "Malformed multi-body request",
        extra={
            "signature": exc.signature,
            "error_type": type(exc.cause).__name__,
            "error_detail": str(exc.cause),
            "path": request.url.path,
            "method": request.method,
        },
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": "Malformed Request Body", "detail": str(exc.cause)},
    )


def body_capture_error_response(exc: BodyCaptureError, path: Optional[str] = None) -> JSONResponse:
    """
    400 response for a request body that could not be read.

    Also used by the buffering middleware, which runs outside the app's
    exception handlers.
    """
    logger.warning(
        "Request body capture failed",
        extra={"error_detail": str(exc.cause), "path": path},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": "Request Body Unavailable", "detail": str(exc.cause)},
    )


async def body_capture_error_handler(request: Request, exc: BodyCaptureError):
    """
    Handler for request bodies that could not be read.
    """
    return body_capture_error_response(exc, request.url.path)
