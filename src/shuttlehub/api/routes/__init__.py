"""API route modules."""

from shuttlehub.api.routes.advice import router as advice_router
from shuttlehub.api.routes.analytics import router as analytics_router
from shuttlehub.api.routes.backup import router as backup_router
from shuttlehub.api.routes.health import router as health_router
from shuttlehub.api.routes.locations import router as locations_router
from shuttlehub.api.routes.sessions import router as sessions_router

__all__ = [
    "advice_router",
    "analytics_router",
    "backup_router",
    "health_router",
    "locations_router",
    "sessions_router",
]
