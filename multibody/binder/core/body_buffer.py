"""
Replayable request body.

Captures the raw request bytes exactly once and hands out independent
readable views, so the resolver, FastAPI's own body handling and any other
instrumentation can each read the full body.
"""

import io
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, BinaryIO, Callable, Dict, Iterable, Optional

from .exceptions import BodyCaptureError

logger = logging.getLogger("multibody.body_buffer")

Message = Dict[str, Any]
Receive = Callable[[], Awaitable[Message]]

# Key of the buffered body inside the ASGI scope state.
STATE_KEY = "multibody_body"

_READ_CHUNK_BYTES = 64 * 1024


@dataclass(frozen=True)
class RawBody:
    """Bytes of one request body, captured once."""

    data: bytes = b""

    def __len__(self) -> int:
        return len(self.data)


class ReplayableBody:
    """Re-readable view over a captured request body."""

    def __init__(self, raw: RawBody):
        self.raw = raw

    @classmethod
    def from_bytes(cls, data: bytes) -> "ReplayableBody":
        return cls(RawBody(bytes(data)))

    @classmethod
    def capture(cls, stream: BinaryIO) -> "ReplayableBody":
        """Drain a binary stream into memory."""
        chunks = []
        try:
            while True:
                chunk = stream.read(_READ_CHUNK_BYTES)
                if not chunk:
                    break
                chunks.append(chunk)
        except OSError as exc:
            raise BodyCaptureError(exc) from exc
        return cls(RawBody(b"".join(chunks)))

    @classmethod
    async def capture_asgi(cls, receive: Receive) -> "ReplayableBody":
        """
        Drain the ASGI receive channel until the last body chunk.

        Raises:
            BodyCaptureError: the client disconnected before the body was complete
        """
        chunks = []
        while True:
            message = await receive()
            if message["type"] == "http.disconnect":
                raise BodyCaptureError(ConnectionError("client disconnected during body read"))
            if message["type"] != "http.request":
                continue
            chunks.append(message.get("body", b""))
            if not message.get("more_body", False):
                break
        return cls(RawBody(b"".join(chunks)))

    @property
    def data(self) -> bytes:
        return self.raw.data

    def open(self) -> io.BytesIO:
        """Return a new stream positioned at the start of the body."""
        return io.BytesIO(self.raw.data)

    def text(self, charset: str = "utf-8") -> str:
        return self.raw.data.decode(charset)

    def replay_receive(self, receive: Receive) -> Receive:
        """
        Build an ASGI receive callable for one downstream consumer.

        The body is served from memory in a single message; later calls go to
        the transport so disconnect notifications still arrive.
        """
        return _iterable_as_receive(
            [{"type": "http.request", "body": self.raw.data, "more_body": False}], receive
        )


def should_buffer(
    method: str, content_type: Optional[str], methods: Iterable[str], json_marker: str
) -> bool:
    """Only body-bearing methods with a JSON or missing Content-Type are buffered."""
    if method.upper() not in {m.upper() for m in methods}:
        return False
    if not content_type:
        return True
    return json_marker.lower() in content_type.lower()


def _iterable_as_receive(messages: Iterable[Message], fallback: Receive) -> Receive:
    pending = iter(messages)

    async def receive() -> Message:
        message = next(pending, None)
        if message is not None:
            return message
        return await fallback()

    return receive
