"""
FastAPI application for the email masking service.

Wires the health, version and session routes together with logging and
error-handling middleware.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import structlog

from ..version import API_VERSION, get_current_masking_version
from ..config import settings
from ..logging_config import setup_logging
from .routes import health, version, sessions
from .session_registry import registry
from .middleware import setup_logging_middleware, setup_error_handling_middleware

# Setup logging on module import
setup_logging()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown events.
    """
    logger.info(
        "api_starting",
        version=API_VERSION,
        masking_version=get_current_masking_version().to_repr(),
        log_level=settings.log_level,
        max_sessions=settings.max_sessions,
    )
    yield
    dropped = len(registry)
    registry.clear()
    logger.info("api_shutting_down", dropped_sessions=dropped)


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application.

    Returns:
        Configured FastAPI app instance
    """
    app = FastAPI(
        title="Email Masking Service",
        description="Selective disclosure masks over DKIM-canonicalized email headers and body",
        version=API_VERSION,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # First added = outermost
    setup_error_handling_middleware(app)
    setup_logging_middleware(app)

    app.include_router(health.router, tags=["Health"])
    app.include_router(version.router, prefix="/api/v1", tags=["Version"])
    app.include_router(sessions.router, prefix="/api/v1/sessions", tags=["Sessions"])

    return app


# Create app instance
app = create_app()


def main() -> None:
    """
    Entry point for running the API server directly.

    For development use. In production, use uvicorn directly.
    """
    import uvicorn

    uvicorn.run(
        "eml_masker.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
