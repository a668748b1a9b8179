"""Unit tests for BodyParseMiddleware at the ASGI level."""

from typing import Any

import pytest
import structlog

from bodyparse.api.middleware.body import BodyParseMiddleware
from bodyparse.api.schemas import Foo
from bodyparse.decoding.target import DecoderConfig
from bodyparse.shared.context import get_optional_parsed_body


class RecordingApp:
    """Downstream ASGI app remembering what it saw."""

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []

    async def __call__(self, scope, receive, send) -> None:
        self.calls.append(
            {
                "scope": scope,
                "body": get_optional_parsed_body(),
                "log_context": structlog.contextvars.get_contextvars(),
            }
        )


def make_scope(method: str = "POST", content_type: bytes | None = b"application/json") -> dict:
    headers = []
    if content_type is not None:
        headers.append((b"content-type", content_type))
    return {
        "type": "http",
        "method": method,
        "path": "/foo",
        "raw_path": b"/foo",
        "query_string": b"",
        "headers": headers,
        "scheme": "http",
        "server": ("test", 80),
    }


def make_receive(*messages: dict):
    queue = list(messages)

    async def receive() -> dict:
        return queue.pop(0)

    return receive


def collect_send(sent: list[dict]):
    async def send(message: dict) -> None:
        sent.append(message)

    return send


@pytest.fixture
def downstream() -> RecordingApp:
    return RecordingApp()


@pytest.fixture
def middleware(downstream: RecordingApp) -> BodyParseMiddleware:
    return BodyParseMiddleware(
        downstream, config=DecoderConfig(), request_type=Foo, methods=["POST"]
    )


class TestPassThrough:
    """Test scopes the middleware does not touch."""

    @pytest.mark.asyncio
    async def test_lifespan_scope_passes_through(self, middleware, downstream):
        scope = {"type": "lifespan"}

        await middleware(scope, make_receive(), collect_send([]))

        assert downstream.calls[0]["scope"] is scope
        assert downstream.calls[0]["body"] is None

    @pytest.mark.asyncio
    async def test_get_passes_through_without_body(self, middleware, downstream):
        await middleware(make_scope("GET"), make_receive(), collect_send([]))

        assert len(downstream.calls) == 1
        assert downstream.calls[0]["body"] is None


class TestDecoding:
    """Test decode outcomes at the ASGI level."""

    @pytest.mark.asyncio
    async def test_chunked_body_is_assembled(self, middleware, downstream):
        receive = make_receive(
            {"type": "http.request", "body": b'{"Name":"wid', "more_body": True},
            {"type": "http.request", "body": b'get","ID":7}', "more_body": False},
        )

        await middleware(make_scope(), receive, collect_send([]))

        body = downstream.calls[0]["body"]
        assert isinstance(body, Foo)
        assert (body.name, body.id) == ("widget", 7)

    @pytest.mark.asyncio
    async def test_context_is_reset_after_downstream(self, middleware):
        receive = make_receive({"type": "http.request", "body": b"{}", "more_body": False})

        await middleware(make_scope(), receive, collect_send([]))

        assert get_optional_parsed_body() is None

    @pytest.mark.asyncio
    async def test_failure_sends_plain_text_400(self, middleware, downstream):
        sent: list[dict] = []
        receive = make_receive({"type": "http.request", "body": b"Name=x", "more_body": False})

        await middleware(make_scope(content_type=b"text/plain"), receive, collect_send(sent))

        assert downstream.calls == []
        assert sent[0]["type"] == "http.response.start"
        assert sent[0]["status"] == 400
        assert (b"content-type", b"text/plain; charset=utf-8") in sent[0]["headers"]
        assert sent[1]["body"] == b"unsupported content-type"

    @pytest.mark.asyncio
    async def test_client_disconnect_aborts_silently(self, middleware, downstream):
        sent: list[dict] = []
        receive = make_receive({"type": "http.disconnect"})

        await middleware(make_scope(), receive, collect_send(sent))

        assert downstream.calls == []
        assert sent == []


class TestLogContext:
    """Test request fields bound for structured logging."""

    @pytest.mark.asyncio
    async def test_request_fields_are_bound_for_downstream(self, middleware, downstream):
        receive = make_receive({"type": "http.request", "body": b"{}", "more_body": False})

        await middleware(make_scope(), receive, collect_send([]))

        assert downstream.calls[0]["log_context"] == {
            "path": "/foo",
            "method": "POST",
            "media_type": "application/json",
        }

    @pytest.mark.asyncio
    async def test_request_fields_are_cleared_afterwards(self, middleware):
        receive = make_receive({"type": "http.request", "body": b"{", "more_body": False})

        await middleware(make_scope(), receive, collect_send([]))

        assert structlog.contextvars.get_contextvars() == {}

    @pytest.mark.asyncio
    async def test_unrelated_bindings_survive(self, middleware):
        structlog.contextvars.bind_contextvars(request_id="abc")
        receive = make_receive({"type": "http.request", "body": b"{}", "more_body": False})
        try:
            await middleware(make_scope(), receive, collect_send([]))

            assert structlog.contextvars.get_contextvars() == {"request_id": "abc"}
        finally:
            structlog.contextvars.clear_contextvars()
