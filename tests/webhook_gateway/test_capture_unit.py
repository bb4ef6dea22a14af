"""Unit tests for single-read body capture."""

import asyncio
from typing import List, Optional

import pytest
from starlette.requests import ClientDisconnect

from src.webhook_gateway.auth.capture import capture_payload
from src.webhook_gateway.auth.errors import BodyReadError
from src.webhook_gateway.auth.models import NO_BODY, WebhookRequest


def run_async(coro):
    return asyncio.run(coro)


class FakeBody:
    """Single-read chunk stream that records how it was consumed."""

    def __init__(
        self,
        chunks: List[bytes],
        error: Optional[BaseException] = None,
        delay: float = 0.0,
    ):
        self.chunks = chunks
        self.error = error
        self.delay = delay
        self.reads = 0
        self.closed = False

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        self.reads += 1
        for chunk in self.chunks:
            if self.delay:
                await asyncio.sleep(self.delay)
            yield chunk
        if self.error is not None:
            raise self.error

    async def aclose(self) -> None:
        self.closed = True


def _request(body) -> WebhookRequest:
    return WebhookRequest.build("POST", {"Content-Type": "application/json"}, body)


class TestCapturePayload:

    def test_absent_body_is_empty(self):
        assert run_async(capture_payload(_request(None))) == b""

    def test_drained_body_is_empty(self):
        assert run_async(capture_payload(_request(NO_BODY))) == b""

    def test_chunks_are_concatenated(self):
        body = FakeBody([b'{"a"', b":", b"1}"])
        assert run_async(capture_payload(_request(body))) == b'{"a":1}'

    def test_bytes_are_not_altered(self):
        raw = b'  {"a": "\xc3\xa9"}\r\n\x00'
        body = FakeBody([raw])
        assert run_async(capture_payload(_request(body))) == raw

    def test_empty_chunks_ignored(self):
        body = FakeBody([b"", b"{}", b""])
        assert run_async(capture_payload(_request(body))) == b"{}"

    def test_stream_read_once_and_closed(self):
        body = FakeBody([b"{}"])
        run_async(capture_payload(_request(body)))

        assert body.reads == 1
        assert body.closed is True

    def test_stream_closed_on_io_error(self):
        body = FakeBody([b"{"], error=ConnectionResetError("reset by peer"))

        with pytest.raises(BodyReadError) as exc_info:
            run_async(capture_payload(_request(body)))

        assert body.closed is True
        assert exc_info.value.status_code == 400
        assert isinstance(exc_info.value.__cause__, ConnectionResetError)

    def test_client_disconnect_is_body_read_error(self):
        body = FakeBody([], error=ClientDisconnect())

        with pytest.raises(BodyReadError):
            run_async(capture_payload(_request(body)))

        assert body.closed is True

    def test_timeout_is_body_read_error(self):
        body = FakeBody([b"{", b"}"], delay=0.5)

        with pytest.raises(BodyReadError) as exc_info:
            run_async(capture_payload(_request(body), timeout=0.01))

        assert body.closed is True
        assert exc_info.value.message == (
            "400 Bad Request: Failed to read request body"
        )

    def test_within_timeout_succeeds(self):
        body = FakeBody([b"{", b"}"], delay=0.001)
        assert run_async(capture_payload(_request(body), timeout=5.0)) == b"{}"

    def test_unexpected_errors_propagate(self):
        body = FakeBody([], error=ValueError("bug"))

        with pytest.raises(ValueError):
            run_async(capture_payload(_request(body)))

        assert body.closed is True
