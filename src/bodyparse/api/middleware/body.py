"""Request body decoding middleware.

Decodes the body of body-bearing requests into a declared ``RequestBody``
shape and attaches the result to the request context, where route handlers
pick it up with ``get_parsed_body``.
"""

from collections.abc import Iterable

import structlog
from starlette.requests import ClientDisconnect, Request
from starlette.responses import PlainTextResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from bodyparse.config import get_settings
from bodyparse.decoding.forms import parse_form
from bodyparse.decoding.media import FORM_URLENCODED, JSON_ENCODED, resolve_media_type
from bodyparse.decoding.target import DecoderConfig, RequestType
from bodyparse.observability.metrics import record_body_decode
from bodyparse.shared.context import reset_parsed_body, set_parsed_body
from bodyparse.shared.exceptions import ClientError, UnsupportedContentTypeError
from bodyparse.shared.logging import get_logger

logger = get_logger(__name__)

_BOUND_KEYS = ("path", "method", "media_type")


def _replay(body: bytes, receive: Receive) -> Receive:
    """Serve an already consumed body to downstream, then defer to ``receive``."""
    sent = False

    async def replay_receive() -> Message:
        nonlocal sent
        if not sent:
            sent = True
            return {"type": "http.request", "body": body, "more_body": False}
        return await receive()

    return replay_receive


class BodyParseMiddleware:
    """Decode request bodies into ``request_type`` before routing.

    Usage:
        app.add_middleware(
            BodyParseMiddleware,
            config=DecoderConfig(),
            request_type=Foo,
        )

    Requests whose method is not in ``methods`` pass through untouched and
    carry no decoded body. Decode failures are answered here with a
    ``400`` plain-text diagnostic; downstream is not invoked.
    """

    def __init__(
        self,
        app: ASGIApp,
        *,
        config: DecoderConfig,
        request_type: RequestType,
        methods: Iterable[str] | None = None,
    ) -> None:
        self.app = app
        self.config = config
        self.request_type = request_type
        if methods is None:
            methods = get_settings().body_methods
        self.methods = frozenset(m.upper() for m in methods)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope["method"] not in self.methods:
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive)
        structlog.contextvars.bind_contextvars(path=request.url.path, method=request.method)
        try:
            await self._handle(request, scope, receive, send)
        finally:
            structlog.contextvars.unbind_contextvars(*_BOUND_KEYS)

    async def _handle(self, request: Request, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            body, raw = await self._decode(request)
        except ClientDisconnect:
            logger.info("client_disconnected")
            return
        except ClientError as exc:
            logger.info("body_decode_failed", error=exc.message, details=exc.details)
            response = PlainTextResponse(exc.message, status_code=exc.status_code)
            await response(scope, receive, send)
            return

        token = set_parsed_body(body)
        try:
            await self.app(scope, _replay(raw, receive), send)
        finally:
            reset_parsed_body(token)

    async def _decode(self, request: Request) -> tuple[object, bytes]:
        try:
            media_type = resolve_media_type(request.headers)
        except ClientError:
            record_body_decode("", "media_type_error")
            raise
        structlog.contextvars.bind_contextvars(media_type=media_type)
        target = self.request_type.allocate(self.config)

        if media_type == JSON_ENCODED:
            raw = await request.body()
            try:
                target.decode_json(raw)
            except ClientError:
                record_body_decode(media_type, "json_error")
                raise
        elif media_type == FORM_URLENCODED:
            raw = await request.body()
            try:
                form = parse_form(raw)
                self.config.form.decode(target, form)
            except ClientError:
                record_body_decode(media_type, "form_error")
                raise
        else:
            record_body_decode(media_type, "unsupported")
            raise UnsupportedContentTypeError(media_type)

        record_body_decode(media_type, "ok")
        logger.debug(
            "body_decoded",
            request_type=type(target).__name__,
        )
        return target, raw
