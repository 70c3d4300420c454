"""
FastAPI application entry point.

This module creates and configures the FastAPI application.
Using an application factory pattern (create_app function) because tests
build apps with their own Settings and an in-memory store.

For local development:
    uvicorn blob_gateway.main:app --reload

For production:
    blob-gateway
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .api.dependencies import build_gateway
from .api.routes import files, health
from .config.settings import Settings, get_settings
from .core.errors import ConfigurationError
from .core.gateway import BlobGateway, ObjectStore

# Configure logging
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)

logger = logging.getLogger(__name__)


def check_configuration(settings: Settings) -> None:
    """Raise ConfigurationError if any required setting is missing."""
    missing_fields = settings.validate_required_fields()
    if missing_fields:
        raise ConfigurationError(missing_fields)


def create_app(
    settings: Optional[Settings] = None,
    storage: Optional[ObjectStore] = None,
) -> FastAPI:
    """
    Application factory.

    Args:
        settings: Configuration to serve with. Defaults to the cached
            environment settings.
        storage: Object store to use instead of building one from
            settings. Tests pass a MockStorageClient here.
    """
    settings = settings or get_settings()
    logging.getLogger().setLevel(settings.log_level.upper())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Validate configuration and create the shared store on startup,
        close it on shutdown.

        Missing credentials raise ConfigurationError here, which aborts
        server startup before any request is accepted.
        """
        logger.info(
            "Blob Gateway starting",
            extra={
                "version": __version__,
                "container": settings.azure_container_name,
                "mock_mode": settings.storage_mock_mode,
            }
        )

        try:
            check_configuration(settings)
        except ConfigurationError as e:
            logger.critical(
                "Missing required configuration",
                extra={"missing_fields": e.missing_fields}
            )
            raise

        if storage is not None:
            gateway = BlobGateway(storage)
        else:
            gateway = build_gateway(settings)

        app.state.gateway = gateway

        yield

        logger.info("Blob Gateway shutting down")
        await gateway.store.close()
        app.state.gateway = None

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        description="""
        Upload, list, download and delete files in an Azure Blob Storage container.

        - `POST /upload` with multipart field `file`
        - `GET /files`
        - `GET /download/{name}`
        - `DELETE /delete/{name}`
        """,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.gateway = None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=settings.cors_origins_list != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(
        health.router,
        prefix="/health",
        tags=["Health"],
    )

    app.include_router(
        files.router,
        tags=["Files"],
    )

    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "message": settings.api_title,
            "version": settings.api_version,
            "docs": "/docs",
            "health": "/health",
        }

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request, exc):
        """
        Catch-all exception handler.

        Backend failures are handled inside each route; anything reaching
        here is a bug. Log it with the traceback and return a generic error.
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

        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error"},
        )

    logger.info(
        "FastAPI application created",
        extra={
            "title": settings.api_title,
            "version": settings.api_version,
        }
    )

    return app


def run() -> None:
    """
    Console entry point.

    Validates configuration before binding the port so a missing
    credential halts the process with a fatal diagnostic.
    """
    import uvicorn

    settings = get_settings()

    try:
        check_configuration(settings)
    except ConfigurationError as e:
        logger.critical(str(e))
        sys.exit(1)

    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


# Create the application instance
# This is what uvicorn imports
app = create_app()


if __name__ == "__main__":
    run()
