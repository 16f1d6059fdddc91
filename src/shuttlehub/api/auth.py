"""HTTP Basic authentication against the club's static credentials.

Usage:
    from shuttlehub.api.auth import AdminUser, CurrentUser

    @router.post("/sessions/{session_id}/leave")
    def leave(session_id: str, user: CurrentUser):
        ...

    @router.delete("/sessions/{session_id}")
    def delete(session_id: str, user: AdminUser):
        ...
"""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from shuttlehub import get_logger
from shuttlehub.api.dependencies import SettingsDep
from shuttlehub.credentials import authenticate
from shuttlehub.models import ClubUser

logger = get_logger(__name__)

security = HTTPBasic(auto_error=False)


def get_current_user(
    credentials: Annotated[HTTPBasicCredentials | None, Depends(security)],
    settings: SettingsDep,
) -> ClubUser:
    """Check the Basic credentials and return the user behind them.

    Raises:
        HTTPException 401: Missing or wrong credentials
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing credentials",
            headers={"WWW-Authenticate": "Basic"},
        )

    user = authenticate(settings, credentials.username, credentials.password)
    if user is not None:
        return user

    logger.warning("auth_failed", username=credentials.username)
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid username or password",
        headers={"WWW-Authenticate": "Basic"},
    )


# Type alias for dependency injection
CurrentUser = Annotated[ClubUser, Depends(get_current_user)]


def require_admin(user: CurrentUser) -> ClubUser:
    """Shorthand dependency for admin-only routes."""
    if not user.is_admin:
        logger.warning("role_denied", username=user.username, user_role=user.role.value)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return user


AdminUser = Annotated[ClubUser, Depends(require_admin)]
