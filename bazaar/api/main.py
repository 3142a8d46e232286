"""
FastAPI Main Application
Entry point for the Bazaar marketplace API.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from ..auth.session import SessionProvider, log_session_event
from .config import get_settings
from .errors import setup_error_handlers
from .middleware import RequestLoggingMiddleware, RequestTimingMiddleware
from .routers import admin, auth, carousel, health, products, seller

# Configure logging
logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Creates the session provider on startup and closes it on shutdown.
    """
    settings = get_settings()
    logger.info(f"Starting {settings.app_name} ({settings.environment})...")

    provider = SessionProvider()
    provider.subscribe(log_session_event)
    app.state.session_provider = provider

    logger.info(f"{settings.app_name} started")

    yield

    logger.info(f"Shutting down {settings.app_name}...")
    provider.close()


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

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(RequestTimingMiddleware, slow_threshold_ms=settings.target_p95_latency_ms * 2)
    app.add_middleware(RequestLoggingMiddleware)

    setup_error_handlers(app)

    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(products.router)
    app.include_router(carousel.router)
    app.include_router(seller.router)
    app.include_router(admin.router)

    @app.get("/")
    async def root():
        """API information."""
        return {
            "name": settings.app_name,
            "version": settings.version,
            "description": settings.description,
            "endpoints": {
                "health": "/health",
                "status": "/status",
                "products": "/api/v1/products",
                "docs": "/docs",
                "redoc": "/redoc",
            },
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "bazaar.api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level.lower(),
    )
