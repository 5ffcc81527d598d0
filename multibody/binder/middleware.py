"""
Where: multibody/binder/middleware.py
What: HTTP middleware for body buffering and access logging.
Why: Isolate cross-cutting request concerns from handler resolution.
"""

import logging
import time
from typing import Iterable, Optional

from fastapi import Request
from starlette.datastructures import Headers
from starlette.types import ASGIApp, Receive, Scope, Send

from multibody.common.core.request_context import accept_request_id, clear_request_id

from .config import config
from .core.body_buffer import STATE_KEY, ReplayableBody, should_buffer
from .core.exceptions import BodyCaptureError, body_capture_error_response

logger = logging.getLogger("multibody.middleware")


class ReplayableBodyMiddleware:
    """
    Buffers JSON request bodies so they can be read more than once.

    The captured body is stored in the ASGI scope state and replayed to the
    downstream application from memory.
    """

    def __init__(
        self,
        app: ASGIApp,
        methods: Optional[Iterable[str]] = None,
        json_marker: Optional[str] = None,
    ):
        self.app = app
        self.methods = tuple(methods if methods is not None else config.BUFFERED_METHODS)
        self.json_marker = json_marker or config.JSON_CONTENT_MARKER

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        content_type = Headers(scope=scope).get("content-type")
        if not should_buffer(scope["method"], content_type, self.methods, self.json_marker):
            await self.app(scope, receive, send)
            return

        try:
            body = await ReplayableBody.capture_asgi(receive)
        except BodyCaptureError as exc:
            response = body_capture_error_response(exc, scope.get("path"))
            await response(scope, receive, send)
            return

        scope.setdefault("state", {})[STATE_KEY] = body
        logger.debug(
            "Buffered request body",
            extra={"method": scope["method"], "path": scope.get("path"), "bytes": len(body.raw)},
        )
        await self.app(scope, body.replay_receive(receive), send)


async def access_log_middleware(request: Request, call_next):
    """Propagate X-Request-Id and write one structured line per request."""
    started = time.perf_counter()
    incoming = request.headers.get("X-Request-Id")
    request_id = accept_request_id(incoming)
    if incoming and request_id != incoming.strip():
        logger.warning("Replaced invalid X-Request-Id", extra={"rejected_request_id": incoming[:64]})

    try:
        response = await call_next(request)
        response.headers["X-Request-Id"] = request_id
        logger.info(
            "%s %s %s",
            request.method,
            request.url.path,
            response.status_code,
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code,
                "latency_ms": round((time.perf_counter() - started) * 1000, 2),
                "body_buffered": STATE_KEY in request.scope.get("state", {}),
                "client_ip": request.client.host if request.client else None,
            },
        )
        return response
    finally:
        clear_request_id()
