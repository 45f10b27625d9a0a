"""
FastAPI application entry point for the asset proxy.

create_app() wires the proxy router, CORS for browser GETs and the
catch-all 500 handler. Tests build their own app from it and swap the
bucket dependency.

No docs, redoc or openapi routes are mounted: every path below '/' is an
object key, and a route like /docs would shadow the asset of that name.

For local development:
    uvicorn asset_gateway.main:app --reload

For production:
    gunicorn asset_gateway.main:app -w 4 -k uvicorn.workers.UvicornWorker
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from .api.routes import proxy
from .config.settings import get_settings

# Configure logging
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=get_settings().log_level.upper(),
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log startup/shutdown and report missing bucket configuration."""
    settings = get_settings()

    logger.info(
        "Asset proxy starting",
        extra={
            "version": settings.api_version,
            "mock_mode": settings.r2_mock_mode,
        }
    )

    # The hosting environment supplies the bucket binding, so a missing
    # value is logged rather than fatal; lookups will fail with a 500.
    missing_fields = settings.validate_required_fields()
    if missing_fields:
        logger.error(
            "Missing required configuration",
            extra={"missing_fields": missing_fields}
        )

    yield

    logger.info("Asset proxy shutting down")


def create_app() -> FastAPI:
    """
    Application factory.

    Creates and configures the FastAPI application.
    Called once at import time for uvicorn, and again by tests that need
    a fresh app with their own dependency overrides.
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        description="Serves bucket objects by key over HTTP.",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )

    # Assets are read-only, so browsers only ever need GET
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["GET"],
        allow_headers=["*"],
        expose_headers=["etag"],
    )

    app.include_router(proxy.router, tags=["Assets"])

    @app.exception_handler(Exception)
    async def global_exception_handler(request, exc):
        """
        Catch-all exception handler.

        Prevents stack traces from leaking to clients. We log the full
        error server-side but return a generic message.
        """
        logger.error(
            "Unhandled exception",
            extra={
                "path": request.url.path,
                "method": request.method,
                "error": str(exc),
            },
            exc_info=exc,
        )

        return PlainTextResponse(
            proxy.FETCH_ERROR_MESSAGE,
            status_code=500,
        )

    logger.info(
        "FastAPI application created",
        extra={
            "title": settings.api_title,
            "version": settings.api_version,
        }
    )

    return app


# Create the application instance
# This is what uvicorn/gunicorn will import
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "asset_gateway.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=settings.log_level.lower(),
    )
