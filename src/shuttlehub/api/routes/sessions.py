"""Session API endpoints.

All endpoints require authentication. Publishing, editing, completing and
deleting sessions require the admin role; members can join, request to
leave and take themselves off a waiting list.
"""

import datetime as dt
from decimal import Decimal

from fastapi import APIRouter, Query, status
from pydantic import BaseModel, Field, field_validator

from shuttlehub import get_logger
from shuttlehub.api.auth import AdminUser, CurrentUser
from shuttlehub.api.dependencies import ServiceDep
from shuttlehub.api.errors import http_error
from shuttlehub.errors import ShuttlehubError
from shuttlehub.models import (
    Session,
    SessionDraft,
    SessionPatch,
    format_time_range,
    parse_time_range,
)
from shuttlehub.services.analytics import SessionCostRow
from shuttlehub.services.roster import JoinResult
from shuttlehub.services.session_service import SessionView

logger = get_logger(__name__)

router = APIRouter(prefix="/sessions", tags=["sessions"])


# =============================================================================
# REQUEST/RESPONSE SCHEMAS
# =============================================================================


class SessionUpdate(BaseModel):
    """Request body for editing session details (partial)."""

    date: dt.date | None = None
    time: str | None = None
    location: str | None = None
    court_count: int | None = Field(default=None, ge=1)
    court_fee: Decimal | None = Field(default=None, ge=0)
    shuttle_qty: int | None = Field(default=None, ge=0)
    shuttle_price: Decimal | None = Field(default=None, ge=0)
    max_participants: int | None = Field(default=None, ge=1)

    @field_validator("time")
    @classmethod
    def validate_time(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return format_time_range(*parse_time_range(v))


class NameRequest(BaseModel):
    """Request body naming a club member."""

    name: str


# =============================================================================
# READ (Authenticated users)
# =============================================================================


@router.get("", response_model=list[Session])
def list_sessions(
    user: CurrentUser,
    service: ServiceDep,
    view: SessionView = Query(SessionView.ACTIVE, description="active, history or all"),
) -> list[Session]:
    """List sessions, most recent first."""
    try:
        return service.list_sessions(view)
    except ShuttlehubError as e:
        raise http_error(e) from e


@router.get("/{session_id}", response_model=Session)
def get_session(session_id: str, user: CurrentUser, service: ServiceDep) -> Session:
    """Get a session by id."""
    try:
        return service.get_session(session_id)
    except ShuttlehubError as e:
        raise http_error(e) from e


@router.get("/{session_id}/costs", response_model=SessionCostRow)
def get_session_costs(session_id: str, user: CurrentUser, service: ServiceDep) -> SessionCostRow:
    """Total cost and per-person share of a session."""
    try:
        return service.session_costs(session_id)
    except ShuttlehubError as e:
        raise http_error(e) from e


# =============================================================================
# CREATE / UPDATE / DELETE (Admin only)
# =============================================================================


@router.post("", response_model=Session, status_code=status.HTTP_201_CREATED)
def create_session(data: SessionDraft, user: AdminUser, service: ServiceDep) -> Session:
    """Publish a new session (admin only).

    The court fee is computed from the venue's rate when left out.
    """
    try:
        return service.create_session(data, is_admin=user.is_admin)
    except ShuttlehubError as e:
        logger.warning("session_create_rejected", error=str(e))
        raise http_error(e) from e


@router.patch("/{session_id}", response_model=Session)
def update_session(
    session_id: str, data: SessionUpdate, user: AdminUser, service: ServiceDep
) -> Session:
    """Edit session details (admin only)."""
    patch = SessionPatch(**data.model_dump(exclude_unset=True))
    try:
        return service.update_details(session_id, patch, is_admin=user.is_admin)
    except ShuttlehubError as e:
        raise http_error(e) from e


@router.post("/{session_id}/complete", response_model=Session)
def complete_session(session_id: str, user: AdminUser, service: ServiceDep) -> Session:
    """Mark a session completed (admin only). Completing twice is a no-op."""
    try:
        return service.complete_session(session_id, is_admin=user.is_admin)
    except ShuttlehubError as e:
        raise http_error(e) from e


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_session(session_id: str, user: AdminUser, service: ServiceDep) -> None:
    """Delete a session permanently (admin only)."""
    try:
        service.delete_session(session_id, is_admin=user.is_admin)
    except ShuttlehubError as e:
        raise http_error(e) from e


# =============================================================================
# ROSTER
# =============================================================================


@router.post("/{session_id}/participants", response_model=JoinResult)
def join_session(
    session_id: str, data: NameRequest, user: CurrentUser, service: ServiceDep
) -> JoinResult:
    """Sign a name up. Full sessions put it on the waiting list.

    Joining a completed session is ignored and returns no placement.
    """
    try:
        return service.join(session_id, data.name)
    except ShuttlehubError as e:
        raise http_error(e) from e


@router.post("/{session_id}/leave", response_model=Session)
def leave_session(
    session_id: str, data: NameRequest, user: CurrentUser, service: ServiceDep
) -> Session:
    """Leave a session.

    Admins remove the name at once. Members file a deletion request that an
    admin approves or rejects.
    """
    try:
        service.request_leave(session_id, data.name, is_admin=user.is_admin)
        return service.get_session(session_id)
    except ShuttlehubError as e:
        raise http_error(e) from e


@router.delete("/{session_id}/participants/{name}", response_model=Session)
def remove_participant(
    session_id: str, name: str, user: AdminUser, service: ServiceDep
) -> Session:
    """Remove a participant directly (admin only)."""
    try:
        service.remove_participant(session_id, name, is_admin=user.is_admin)
        return service.get_session(session_id)
    except ShuttlehubError as e:
        raise http_error(e) from e


@router.post("/{session_id}/deletion-requests/{name}/approve", response_model=Session)
def approve_deletion(
    session_id: str, name: str, user: AdminUser, service: ServiceDep
) -> Session:
    """Approve a member's request to leave (admin only)."""
    try:
        service.approve_deletion(session_id, name, is_admin=user.is_admin)
        return service.get_session(session_id)
    except ShuttlehubError as e:
        raise http_error(e) from e


@router.delete("/{session_id}/deletion-requests/{name}", response_model=Session)
def reject_deletion(
    session_id: str, name: str, user: AdminUser, service: ServiceDep
) -> Session:
    """Reject a member's request to leave (admin only)."""
    try:
        service.reject_deletion(session_id, name, is_admin=user.is_admin)
        return service.get_session(session_id)
    except ShuttlehubError as e:
        raise http_error(e) from e


@router.delete("/{session_id}/waiting-list/{name}", response_model=Session)
def remove_from_waiting_list(
    session_id: str, name: str, user: CurrentUser, service: ServiceDep
) -> Session:
    """Take a name off the waiting list."""
    try:
        service.remove_from_waiting_list(session_id, name)
        return service.get_session(session_id)
    except ShuttlehubError as e:
        raise http_error(e) from e
