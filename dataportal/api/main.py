"""
FastAPI Main Application
Entry point for the data portal front-end.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.gzip import GZipMiddleware

from .config import get_settings
from .errors import setup_error_handlers
from .middleware import RequestLoggingMiddleware, RequestTimingMiddleware
from .routers import health_router, portal_router, search_router


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


configure_logging(get_settings().log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    The WSDL and the stylesheet are loaded lazily on the first request, so
    the portal starts even while the search service is down.
    """
    settings = get_settings()
    logger.info(
        f"Starting {settings.app_name} (search service: {settings.wsdl_url}, "
        f"index: {settings.index_name})"
    )

    yield

    logger.info(f"Shutting down {settings.app_name}...")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description=settings.description,
        version=settings.version,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    app.add_middleware(GZipMiddleware, minimum_size=1000)

    # Custom middleware (logging outermost so timing sees the request ID)
    app.add_middleware(RequestTimingMiddleware, slow_request_ms=settings.slow_request_ms)
    app.add_middleware(RequestLoggingMiddleware)

    setup_error_handlers(app)

    app.include_router(health_router)
    app.include_router(search_router)
    app.include_router(portal_router)

    return app


app = create_app()


def main() -> None:
    """Run the portal with uvicorn."""
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "dataportal.api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
