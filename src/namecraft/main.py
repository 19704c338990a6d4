"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from namecraft import __version__
from namecraft.api.routes import api_router
from namecraft.config import Settings, get_settings
from namecraft.core.gateway import UpstreamGateway
from namecraft.core.history import InMemoryHistoryStore
from namecraft.middleware.logging import LoggingMiddleware, configure_logging
from namecraft.middleware.request_id import RequestIdMiddleware
from namecraft.utils.errors import (
    ErrorCode,
    GenerationError,
    classify_exception,
    create_error_response,
    log_error,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan - startup and shutdown events."""
    settings: Settings = app.state.settings

    configure_logging(
        level=settings.logging.level,
        format=settings.logging.format,
    )

    logger.info(
        "Starting namecraft-server",
        extra={
            "version": __version__,
            "host": settings.server.host,
            "port": settings.server.port,
            "upstream_url": settings.upstream.base_url,
            "log_level": settings.logging.level,
        },
    )

    try:
        settings.validate_required()
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        raise

    logger.info("namecraft-server started successfully")

    yield

    logger.info("Shutting down namecraft-server")


def create_app(
    settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings override for testing.
        transport: Optional httpx transport for the upstream gateway, used to
            stub the name generation service in tests.

    Returns:
        Configured FastAPI application.
    """
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title="namecraft-server",
        description="FastAPI proxy for an external name and username generation API",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.gateway = UpstreamGateway.from_settings(settings, transport=transport)
    app.state.history = (
        InMemoryHistoryStore(capacity=settings.history.capacity)
        if settings.history.enabled
        else None
    )

    # Configure middleware (order matters - last added = first executed)
    # Logging middleware - logs requests with timing, inside the request ID scope
    app.add_middleware(LoggingMiddleware)

    # Request ID middleware - adds X-Request-ID to all requests/responses
    app.add_middleware(RequestIdMiddleware)

    # CORS is added last so it is outermost and answers preflight requests
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors.allowed_origins,
        allow_credentials=True,
        allow_methods=settings.server.cors.allowed_methods,
        allow_headers=settings.server.cors.allowed_headers,
    )

    # Register exception handlers
    app.add_exception_handler(GenerationError, generation_error_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(Exception, generic_error_handler)

    # Register routes
    app.include_router(api_router)

    return app


async def generation_error_handler(request: Request, exc: GenerationError) -> JSONResponse:
    """Render a generation failure as {error, code, request_id}."""
    request_id = getattr(request.state, "request_id", None)

    if exc.code == ErrorCode.VALIDATION_ERROR:
        logger.info(f"Invalid generation request: {exc.message}")
    else:
        log_error(exc, code=exc.code, request_id=request_id, path=request.url.path)

    body = create_error_response(exc.code, exc.message, request_id)
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(mode="json"),
    )


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Handle Pydantic validation errors."""
    request_id = getattr(request.state, "request_id", None)
    body = create_error_response(ErrorCode.VALIDATION_ERROR, request_id=request_id)
    return JSONResponse(
        status_code=400,
        content=body.model_dump(mode="json"),
    )


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected errors."""
    request_id = getattr(request.state, "request_id", None)

    code = classify_exception(exc)
    log_error(exc, code=code, request_id=request_id, path=request.url.path, method=request.method)

    body = create_error_response(code, request_id=request_id)
    return JSONResponse(
        status_code=500,
        content=body.model_dump(mode="json"),
    )


def run() -> None:
    """Run the server with uvicorn using configured host and port."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "namecraft.main:app",
        host=settings.server.host,
        port=settings.server.port,
        workers=settings.server.workers,
    )


# Create the default app instance
app = create_app()
