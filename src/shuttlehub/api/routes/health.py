"""Health check endpoints."""

from fastapi import APIRouter, HTTPException, status

from shuttlehub.api.dependencies import SettingsDep, StoreDep
from shuttlehub.errors import PersistenceError

router = APIRouter(tags=["health"])


@router.get("/health")
def health_check() -> dict:
    """Basic health check."""
    return {"status": "healthy"}


@router.get("/health/ready")
def readiness_check(settings: SettingsDep, store: StoreDep) -> dict:
    """Readiness check - verifies the store can be read."""
    try:
        store.list_locations()
    except PersistenceError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Store unavailable: {e}",
        ) from e

    return {
        "status": "ready",
        "environment": settings.environment.value,
        "storage": store.backend,
        "sync": store.status.model_dump(mode="json"),
    }
