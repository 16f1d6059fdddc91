"""FastAPI dependencies for dependency injection.

Usage in routes:
    from shuttlehub.api.dependencies import ServiceDep

    @router.get("/sessions")
    def list_sessions(service: ServiceDep):
        return service.list_sessions()
"""

from collections.abc import Callable
from datetime import datetime
from typing import Annotated

from fastapi import Depends, Request

from shuttlehub.config import Settings, get_settings
from shuttlehub.dao.base import SessionStore
from shuttlehub.services.advisor import SessionAdvisor
from shuttlehub.services.session_service import SessionService


def get_settings_dep() -> Settings:
    """Get application settings (dependency wrapper)."""
    return get_settings()


SettingsDep = Annotated[Settings, Depends(get_settings_dep)]


def get_store(request: Request) -> SessionStore:
    """Get the store opened by the application lifespan."""
    return request.app.state.store


StoreDep = Annotated[SessionStore, Depends(get_store)]


def get_clock() -> Callable[[], datetime]:
    """Source of the current time, replaced in tests."""
    return datetime.now


ClockDep = Annotated[Callable[[], datetime], Depends(get_clock)]


def get_session_service(
    store: StoreDep, settings: SettingsDep, clock: ClockDep
) -> SessionService:
    """Get SessionService instance."""
    return SessionService.from_settings(store, settings, clock=clock)


def get_advisor(settings: SettingsDep) -> SessionAdvisor:
    """Get SessionAdvisor instance."""
    api_key = settings.anthropic_api_key
    return SessionAdvisor(
        api_key=api_key.get_secret_value() if api_key else None,
        model=settings.advisor_model,
    )


ServiceDep = Annotated[SessionService, Depends(get_session_service)]
AdvisorDep = Annotated[SessionAdvisor, Depends(get_advisor)]
