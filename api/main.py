"""
FastAPI application for the Books API.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api import __version__
from api.exceptions import StoreError
from api.models import HealthResponse
from api.routes import get_book_store, router as books_router
from api.secrets import ConfigProvider, build_config_provider
from api.store import BookStore, MongoBookStore
from utilities.config import AppConfig, config as default_config

logger = structlog.get_logger(__name__)

WELCOME_MESSAGE = "Welcome to the Books API!"


def format_validation_error(exc: RequestValidationError) -> str:
    """Describe the first violated constraint, e.g. ``title: Field required``."""
    errors = exc.errors()
    if not errors:
        return "Invalid request body"

    error = errors[0]
    if error.get("type") == "json_invalid":
        field = "body"
    else:
        parts = [str(part) for part in error.get("loc", ()) if part != "body"]
        field = ".".join(parts) or "body"
    return f"{field}: {error.get('msg', 'invalid value')}"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Starting Books API")

    app_config: AppConfig = app.state.app_config
    owns_store = app.state.book_store is None

    if owns_store:
        provider = app.state.config_provider or build_config_provider(app_config)
        settings = await provider.resolve()
        store = MongoBookStore.from_settings(settings, username=app_config.store_username)
        try:
            await store.ping()
        except StoreError:
            await store.close()
            raise
        logger.info("Database connection established")
        app.state.book_store = store

    yield

    logger.info("Shutting down Books API")
    if owns_store:
        await app.state.book_store.close()
        app.state.book_store = None


def create_app(
    store: Optional[BookStore] = None,
    config_provider: Optional[ConfigProvider] = None,
    app_config: Optional[AppConfig] = None
) -> FastAPI:
    """
    Build the application.

    Args:
        store: Ready-made book store. When omitted, one is built at startup
            from the settings the config provider resolves.
        config_provider: Source of store settings. Defaults to the provider
            selected by ``app_config.config_source``.
        app_config: Application settings; the process-wide config by default.
    """
    app_config = app_config or default_config

    app = FastAPI(
        title="Books API",
        description="CRUD REST API for books kept in a document database.",
        version=__version__,
        lifespan=lifespan
    )
    app.state.app_config = app_config
    app.state.config_provider = config_provider
    app.state.book_store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_config.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle HTTP exceptions."""
        return PlainTextResponse(
            str(exc.detail),
            status_code=exc.status_code,
            headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Reject malformed bodies with the first violated constraint."""
        message = format_validation_error(exc)
        logger.info("Rejected invalid request", path=request.url.path, error=message)
        return PlainTextResponse(message, status_code=status.HTTP_400_BAD_REQUEST)

    @app.exception_handler(StoreError)
    async def store_exception_handler(request: Request, exc: StoreError):
        """Surface store failures with the underlying message."""
        logger.error("Store operation failed", error=str(exc), path=request.url.path)
        return PlainTextResponse(str(exc), status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle general exceptions."""
        logger.error("Unhandled exception", error=str(exc), path=request.url.path)
        return PlainTextResponse(str(exc), status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    @app.get("/", response_class=PlainTextResponse, tags=["Health"])
    async def welcome():
        """Liveness check."""
        return WELCOME_MESSAGE

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check(request: Request):
        """Health check endpoint."""
        db_status = "healthy"
        try:
            await get_book_store(request).ping()
        except Exception as e:
            logger.error("Health check failed", error=str(e))
            db_status = "unhealthy"

        return HealthResponse(
            status="healthy" if db_status == "healthy" else "degraded",
            timestamp=datetime.now(timezone.utc),
            version=__version__,
            database_status=db_status
        )

    app.include_router(books_router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "api.main:app",
        host=default_config.host,
        port=default_config.port,
        reload=default_config.debug,
        log_level=default_config.log_level.lower()
    )
