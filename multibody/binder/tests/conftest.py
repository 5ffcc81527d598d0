import pytest
from starlette.requests import Request


@pytest.fixture
def make_request():
    """Build a Starlette Request whose transport delivers the given body once."""

    def _make(body: bytes, content_type: str = "application/json", method: str = "POST"):
        headers = []
        if content_type is not None:
            headers.append((b"content-type", content_type.encode("latin-1")))
        scope = {
            "type": "http",
            "method": method,
            "path": "/",
            "query_string": b"",
            "headers": headers,
        }
        messages = [{"type": "http.request", "body": body, "more_body": False}]

        async def receive():
            if messages:
                return messages.pop(0)
            return {"type": "http.disconnect"}

        return Request(scope, receive)

    return _make
