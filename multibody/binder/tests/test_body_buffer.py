"""
Where: multibody/binder/tests/test_body_buffer.py
What: Unit tests for the replayable body buffer.
Why: The body must stay readable for every consumer after a single capture.
"""

import io

import pytest

from multibody.binder.core.body_buffer import ReplayableBody, should_buffer
from multibody.binder.core.exceptions import BodyCaptureError


class _BrokenStream(io.RawIOBase):
    def readable(self):
        return True

    def read(self, size=-1):
        raise OSError("connection reset")


def test_open_returns_independent_streams():
    body = ReplayableBody.capture(io.BytesIO(b'{"a": 1}'))

    first = body.open()
    second = body.open()

    assert first.read(3) == b'{"a'
    assert second.read() == b'{"a": 1}'
    # The partially read stream keeps its own position.
    assert first.read() == b'": 1}'


def test_open_many_times_yields_full_body_each_time():
    payload = b'{"key": "value"}'
    body = ReplayableBody.capture(io.BytesIO(payload))

    for stream in [body.open() for _ in range(5)]:
        assert stream.read() == payload


def test_capture_drains_source_stream():
    source = io.BytesIO(b"x" * 200_000)

    body = ReplayableBody.capture(source)

    assert source.read() == b""
    assert len(body.raw) == 200_000
    assert body.open().read() == b"x" * 200_000


def test_capture_io_failure_is_fatal():
    with pytest.raises(BodyCaptureError) as exc_info:
        ReplayableBody.capture(_BrokenStream())

    assert isinstance(exc_info.value.cause, OSError)


def test_text_decodes_with_charset():
    body = ReplayableBody.from_bytes("café".encode("latin-1"))

    assert body.text("latin-1") == "café"


@pytest.mark.asyncio
async def test_capture_asgi_joins_chunks():
    messages = [
        {"type": "http.request", "body": b'{"a":', "more_body": True},
        {"type": "http.request", "body": b"1}", "more_body": False},
    ]

    async def receive():
        return messages.pop(0)

    body = await ReplayableBody.capture_asgi(receive)

    assert body.data == b'{"a":1}'
    assert messages == []


@pytest.mark.asyncio
async def test_capture_asgi_disconnect_is_fatal():
    messages = [
        {"type": "http.request", "body": b'{"a":', "more_body": True},
        {"type": "http.disconnect"},
    ]

    async def receive():
        return messages.pop(0)

    with pytest.raises(BodyCaptureError):
        await ReplayableBody.capture_asgi(receive)


@pytest.mark.asyncio
async def test_replay_receive_serves_body_then_delegates_to_transport():
    body = ReplayableBody.from_bytes(b"abc")

    async def transport():
        return {"type": "http.disconnect"}

    receive = body.replay_receive(transport)
    assert await receive() == {"type": "http.request", "body": b"abc", "more_body": False}
    assert (await receive())["type"] == "http.disconnect"

    # Every replay starts from the beginning again.
    again = body.replay_receive(transport)
    assert (await again())["body"] == b"abc"


@pytest.mark.parametrize(
    "method, content_type, expected",
    [
        ("POST", "application/json", True),
        ("POST", None, True),
        ("PUT", "", True),
        ("patch", "application/vnd.api+json; charset=utf-8", True),
        ("POST", "text/plain", False),
        ("POST", "multipart/form-data; boundary=x", False),
        ("GET", "application/json", False),
        ("DELETE", None, False),
    ],
)
def test_should_buffer_policy(method, content_type, expected):
    assert should_buffer(method, content_type, ["POST", "PUT", "PATCH"], "json") is expected
