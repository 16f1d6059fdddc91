"""FastAPI application factory.

Usage:
    # Development
    uv run fastapi dev src/shuttlehub/api/app.py

    # Production
    uv run fastapi run src/shuttlehub/api/app.py
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from shuttlehub import __version__, configure_logging, get_logger
from shuttlehub.api.routes import (
    advice_router,
    analytics_router,
    backup_router,
    health_router,
    locations_router,
    sessions_router,
)
from shuttlehub.config import get_settings
from shuttlehub.dao import SessionStore, create_store

logger = get_logger(__name__)


def create_app(store: SessionStore | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        store: Store to serve. If not provided, the configured backend is
            built at startup.
    """
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan - open the store on startup, close on shutdown."""
        configure_logging(settings)
        app.state.store = store or create_store(get_settings())
        logger.info(
            "app_starting",
            environment=settings.environment.value,
            storage=app.state.store.backend,
        )
        app.state.store.open()
        yield
        app.state.store.close()
        logger.info("app_shutdown")

    app = FastAPI(
        title="Shuttlehub API",
        description="Badminton club sessions, sign-ups and cost splitting",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
    )

    # Register routes
    app.include_router(health_router)
    app.include_router(sessions_router, prefix="/api/v1")
    app.include_router(locations_router, prefix="/api/v1")
    app.include_router(analytics_router, prefix="/api/v1")
    app.include_router(backup_router, prefix="/api/v1")
    app.include_router(advice_router, prefix="/api/v1")

    return app


# Application instance for uvicorn
app = create_app()
