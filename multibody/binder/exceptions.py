"""
Where: multibody/binder/exceptions.py
What: Exception handler registration for multi-body binding errors.
Why: Keep error handling setup isolated from handler resolution.
"""

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.exceptions import (
    ArgumentInvalidError,
    BodyCaptureError,
    StructuralError,
    argument_invalid_handler,
    body_capture_error_handler,
    global_exception_handler,
    http_exception_handler,
    structural_error_handler,
    validation_exception_handler,
)


def register_exception_handlers(app: FastAPI, include_defaults: bool = True) -> None:
    """
    Register the multi-body error handlers.

    With include_defaults, the catch-all, HTTPException and request
    validation handlers are registered as well.
    """
    if include_defaults:
        app.add_exception_handler(Exception, global_exception_handler)
        app.add_exception_handler(StarletteHTTPException, http_exception_handler)
        app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ArgumentInvalidError, argument_invalid_handler)
    app.add_exception_handler(StructuralError, structural_error_handler)
    app.add_exception_handler(BodyCaptureError, body_capture_error_handler)
