"""Pydantic models for badminton sessions and venues."""

from shuttlehub.models.backup import BACKUP_VERSION, BackupDocument
from shuttlehub.models.location import LocationConfig, LocationRef, default_locations
from shuttlehub.models.session import (
    DEFAULT_MAX_PARTICIPANTS,
    Session,
    SessionDraft,
    SessionPatch,
    SessionStatus,
    format_time_range,
    new_id,
    parse_clock,
    parse_time_range,
)
from shuttlehub.models.user import ClubUser, UserRole

__all__ = [
    # Backup
    "BACKUP_VERSION",
    "BackupDocument",
    # Location
    "LocationConfig",
    "LocationRef",
    "default_locations",
    # Session
    "DEFAULT_MAX_PARTICIPANTS",
    "Session",
    "SessionDraft",
    "SessionPatch",
    "SessionStatus",
    "format_time_range",
    "new_id",
    "parse_clock",
    "parse_time_range",
    # User
    "ClubUser",
    "UserRole",
]
