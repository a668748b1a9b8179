"""FastAPI application entry point."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from bodyparse import __version__
from bodyparse.api.middleware.body import BodyParseMiddleware
from bodyparse.api.router import api_router
from bodyparse.api.schemas import Foo
from bodyparse.config import get_settings
from bodyparse.decoding.target import DecoderConfig
from bodyparse.observability.metrics import setup_metrics
from bodyparse.shared.exceptions import BodyParseError, ParsedBodyMissingError
from bodyparse.shared.logging import get_logger, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan - startup and shutdown events."""
    setup_logging()
    logger.info("bodyparse_starting", version=__version__)

    yield

    logger.info("bodyparse_stopping")


def create_app(config: DecoderConfig | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    ``config`` is the shared decoding configuration; when omitted it is
    built from settings.
    """
    settings = get_settings()
    if config is None:
        config = DecoderConfig.from_settings(settings)

    app = FastAPI(
        title="bodyparse",
        description="Request body decoding middleware",
        version=__version__,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        BodyParseMiddleware,
        config=config,
        request_type=Foo,
        methods=settings.body_methods,
    )

    # Exception handlers
    register_exception_handlers(app)

    app.include_router(api_router)

    # Observability
    setup_metrics(app)

    return app


def register_exception_handlers(app: FastAPI) -> None:
    """Register custom exception handlers."""

    @app.exception_handler(ParsedBodyMissingError)
    async def parsed_body_missing_handler(
        request: Request, exc: ParsedBodyMissingError
    ) -> PlainTextResponse:
        logger.error(
            "parsed_body_missing",
            path=request.url.path,
            method=request.method,
            details=exc.details,
        )
        return PlainTextResponse(exc.message, status_code=exc.status_code)

    @app.exception_handler(BodyParseError)
    async def body_parse_error_handler(request: Request, exc: BodyParseError) -> PlainTextResponse:
        if exc.status_code >= 500:
            logger.error("unhandled_error", error=exc.message, details=exc.details)
        else:
            logger.info("request_rejected", path=request.url.path, error=exc.message)
        return PlainTextResponse(exc.message, status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception) -> PlainTextResponse:
        _ = request
        logger.exception("unexpected_error", error=str(exc))
        return PlainTextResponse("internal server error", status_code=500)


# Create app instance
app = create_app()
