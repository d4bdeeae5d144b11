"""FastAPI application factory and lifespan management."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from searchable.config import Settings, set_default_index
from searchable.engine.client import EngineError
from searchable.index.registry import SearchableRegistry
from searchable.logging import configure_logging
from searchable.middleware.auth import APIKeyMiddleware
from searchable.middleware.cors import configure_cors
from searchable.middleware.logging import RequestLoggingMiddleware
from searchable.routes import admin, health, search

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Apply the configured default index on startup.

    Args:
        app: FastAPI application instance.

    Yields:
        None during application runtime.
    """
    settings: Settings = app.state.settings
    registry: SearchableRegistry = app.state.registry
    set_default_index(settings.default_index)
    logger.info(
        "api_startup",
        host=settings.host,
        port=settings.port,
        default_index=settings.default_index,
        types=registry.type_names,
    )
    try:
        yield
    finally:
        logger.info("api_shutdown")


async def engine_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Report engine failures as 502 Bad Gateway.

    Args:
        request: Request that failed.
        exc: The EngineError raised while serving it.

    Returns:
        JSON error response carrying the engine message.
    """
    logger.warning("engine_error", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=502, content={"error": str(exc)})


def create_app(
    registry: SearchableRegistry, settings: Settings | None = None
) -> FastAPI:
    """Factory function to create the search API.

    Args:
        registry: Searchable record types exposed by the API.
        settings: Configuration instance. Creates default if None.

    Returns:
        Configured FastAPI application.
    """
    if settings is None:
        settings = Settings()
    configure_logging(settings.debug)

    app = FastAPI(
        title="Searchable API",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/api/v1/docs" if settings.debug else None,
        redoc_url=None,
        openapi_url="/api/v1/openapi.json" if settings.debug else None,
    )
    app.state.settings = settings
    app.state.registry = registry

    configure_cors(app, settings.cors_origins)
    app.add_middleware(RequestLoggingMiddleware)
    if settings.key:
        app.add_middleware(APIKeyMiddleware, api_key=settings.key)
    app.add_exception_handler(EngineError, engine_error_handler)

    app.include_router(health.router, prefix="/api/v1")
    app.include_router(search.router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/v1")

    return app
