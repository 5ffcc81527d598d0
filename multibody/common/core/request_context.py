"""
Request-scoped identifiers.

The request ID lives in a ContextVar so log records emitted anywhere while a
request is handled, threadpool work included, carry the same ID.
"""

import re
import uuid
from contextvars import ContextVar
from typing import Optional

# Visible ASCII only, bounded, so the value is safe to echo in a header.
_REQUEST_ID_PATTERN = re.compile(r"^[\x21-\x7e]{1,128}$")

_request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def get_request_id() -> Optional[str]:
    return _request_id_var.get()


def generate_request_id() -> str:
    """Create a UUID4 request ID and make it current."""
    request_id = str(uuid.uuid4())
    _request_id_var.set(request_id)
    return request_id


def set_request_id(request_id: str) -> str:
    """
    Make a caller-supplied request ID current.

    Raises:
        ValueError: the value is blank, too long or contains non-printable characters
    """
    value = request_id.strip()
    if not _REQUEST_ID_PATTERN.match(value):
        raise ValueError(f"Invalid request ID: {request_id!r}")
    _request_id_var.set(value)
    return value


def accept_request_id(header_value: Optional[str]) -> str:
    """Use the incoming header value when it is valid, otherwise generate one."""
    if header_value and _REQUEST_ID_PATTERN.match(header_value.strip()):
        return set_request_id(header_value)
    return generate_request_id()


def clear_request_id() -> None:
    _request_id_var.set(None)
