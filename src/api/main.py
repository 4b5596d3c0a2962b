"""FastAPI application factory and lifecycle.

Middleware run in the reverse order of registration: security headers wrap
the request context, which wraps request logging. Exception handlers are
registered first so every error leaves through them.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Annotated, Any, cast

from fastapi import Depends, FastAPI
from loguru import logger

from src.api.middleware.error_handler import register_exception_handlers
from src.api.middleware.request_context import RequestContextMiddleware
from src.api.middleware.request_logging import RequestLoggingMiddleware
from src.api.middleware.security_headers import SecurityHeadersMiddleware
from src.api.routers import api_router
from src.api.utils.responses import ORJSONResponse
from src.core.config import Settings, get_settings
from src.core.logging import setup_logging
from src.core.observability import instrument_app, setup_tracing
from src.infrastructure.database.session import (
    check_database_connection,
    close_database,
    get_engine,
)


@asynccontextmanager
async def lifespan(app_instance: FastAPI) -> AsyncGenerator[None]:
    """Check the database at startup and dispose of the engine at shutdown.

    Raises:
        RuntimeError: If the database can't be reached during startup.
    """
    is_healthy, error_msg = await check_database_connection()
    if not is_healthy:
        logger.error("Database connection failed during startup: {}", error_msg)
        raise RuntimeError(f"Database connection failed: {error_msg}")

    logger.info(
        "Application startup complete - {} v{}", app_instance.title, app_instance.version
    )
    yield

    await close_database()
    logger.info("Application shutdown complete")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings instance. If not provided, will use get_settings().

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    if settings is None:
        settings = get_settings()

    setup_logging(settings)
    setup_tracing(settings)

    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        docs_url=settings.docs_url,
        redoc_url=settings.redoc_url,
        openapi_url=settings.openapi_url,
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )

    register_exception_handlers(application)

    application.add_middleware(RequestLoggingMiddleware, log_config=settings.log_config)
    application.add_middleware(RequestContextMiddleware)
    application.add_middleware(
        SecurityHeadersMiddleware, hsts_enabled=settings.environment != "development"
    )

    application.include_router(api_router, prefix=settings.api_prefix)

    @application.get("/")
    async def root() -> dict[str, str]:
        return {"message": f"{settings.app_name} is running"}

    @application.get("/health")
    async def health() -> dict[str, object]:
        """Liveness and readiness probe; degraded when the database is down."""
        is_healthy, error_msg = await check_database_connection()

        if is_healthy:
            pool = cast("Any", get_engine().pool)
            logger.bind(
                metric_type="db.pool.health",
                checked_out=pool.checkedout(),
                size=pool.size(),
                overflow=pool.overflow(),
            ).debug("Database pool health check")
        else:
            logger.warning("Database health check failed: {}", error_msg)

        return {"status": "healthy" if is_healthy else "degraded", "database": is_healthy}

    @application.get("/info")
    async def info(
        app_settings: Annotated[Settings, Depends(get_settings)],
    ) -> dict[str, Any]:
        """Name, version, environment and currency of the running service."""
        return {
            "app_name": app_settings.app_name,
            "version": app_settings.app_version,
            "environment": app_settings.environment,
            "currency": app_settings.savings_config.currency,
            "allocation_mode": app_settings.savings_config.allocation_mode,
        }

    instrument_app(application, settings)

    return application


app = create_app()
