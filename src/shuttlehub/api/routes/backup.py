"""Backup export and import endpoints (admin only)."""

from typing import Any

from fastapi import APIRouter, Body, Query

from shuttlehub import get_logger
from shuttlehub.api.auth import AdminUser
from shuttlehub.api.dependencies import ClockDep, StoreDep
from shuttlehub.api.errors import http_error
from shuttlehub.errors import ShuttlehubError
from shuttlehub.services.backup import (
    backup_from_dict,
    backup_to_dict,
    export_backup,
    restore_backup,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/backup", tags=["backup"])


@router.get("")
def download_backup(user: AdminUser, store: StoreDep, clock: ClockDep) -> dict[str, Any]:
    """Export all sessions and locations as a backup document."""
    try:
        backup = export_backup(store, now=clock())
    except ShuttlehubError as e:
        raise http_error(e) from e

    logger.info("backup_exported", sessions=len(backup.sessions), locations=len(backup.locations))
    return backup_to_dict(backup)


@router.post("")
def upload_backup(
    user: AdminUser,
    store: StoreDep,
    document: dict[str, Any] = Body(...),
    confirm: bool = Query(False, description="Must be true; the import overwrites everything"),
) -> dict[str, Any]:
    """Replace all sessions and locations with a backup document.

    The document is fully validated before anything is written.
    """
    try:
        backup = backup_from_dict(document)
        restore_backup(store, backup, is_admin=user.is_admin, confirmed=confirm)
    except ShuttlehubError as e:
        raise http_error(e) from e

    return {
        "status": "restored",
        "sessions": len(backup.sessions),
        "locations": len(backup.locations),
        "export_date": backup.export_date.isoformat(),
    }
