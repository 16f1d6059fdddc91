"""Export and import of the club's full data set.

The backup file is a JSON object::

    {"version": "1.0", "exportDate": "...", "locations": [...], "sessions": [...]}

Sessions and locations use the same camelCase documents as the local data
file. An import is parsed and validated completely before anything is
written, and replaces both collections in one store call.
"""

import json
from datetime import datetime
from decimal import Decimal
from typing import Any

from shuttlehub import get_logger
from shuttlehub.dao.base import SessionStore
from shuttlehub.dao.documents import (
    location_from_document,
    location_to_document,
    session_from_document,
    session_to_document,
)
from shuttlehub.errors import BackupFormatError, ConfirmationRequiredError, PermissionDeniedError
from shuttlehub.models.backup import BACKUP_VERSION, BackupDocument

logger = get_logger(__name__)


def export_backup(store: SessionStore, now: datetime | None = None) -> BackupDocument:
    """Snapshot the store as a backup document."""
    snapshot = store.snapshot()
    return BackupDocument(
        version=BACKUP_VERSION,
        export_date=now or datetime.now(),
        locations=snapshot.locations,
        sessions=snapshot.sessions,
    )


def backup_to_dict(backup: BackupDocument) -> dict[str, Any]:
    return {
        "version": backup.version,
        "exportDate": backup.export_date.isoformat(),
        "locations": [location_to_document(loc) for loc in backup.locations],
        "sessions": [session_to_document(s) for s in backup.sessions],
    }


def dump_backup(backup: BackupDocument) -> str:
    """Serialize a backup to JSON text."""
    return json.dumps(backup_to_dict(backup), indent=2, ensure_ascii=False)


def parse_backup(text: str | bytes) -> BackupDocument:
    """Parse and validate backup JSON.

    Files without a version or export date (older exports) are accepted;
    the arrays are required.

    Raises:
        BackupFormatError: If the text is not a valid backup
    """
    try:
        raw = json.loads(text, parse_float=Decimal)
    except json.JSONDecodeError as e:
        raise BackupFormatError(f"Backup is not valid JSON: {e}") from e
    return backup_from_dict(raw)


def backup_from_dict(raw: Any) -> BackupDocument:
    """Validate an already-decoded backup document.

    Raises:
        BackupFormatError: If the document is not a valid backup
    """
    if not isinstance(raw, dict):
        raise BackupFormatError("Backup must be a JSON object")
    for key in ("sessions", "locations"):
        if not isinstance(raw.get(key), list):
            raise BackupFormatError(f"Backup is missing the '{key}' array")

    try:
        sessions = [session_from_document(doc) for doc in raw["sessions"]]
        locations = [location_from_document(doc) for doc in raw["locations"]]
        export_date = (
            datetime.fromisoformat(str(raw["exportDate"]).replace("Z", "+00:00"))
            if raw.get("exportDate")
            else datetime.now()
        )
    except (ValueError, TypeError, AttributeError) as e:
        raise BackupFormatError(f"Backup contains an invalid record: {e}") from e

    session_ids = [s.id for s in sessions]
    if len(set(session_ids)) != len(session_ids):
        raise BackupFormatError("Backup contains duplicate session ids")

    return BackupDocument(
        version=str(raw.get("version") or BACKUP_VERSION),
        export_date=export_date,
        locations=locations,
        sessions=sessions,
    )


def restore_backup(
    store: SessionStore, backup: BackupDocument, *, is_admin: bool, confirmed: bool
) -> None:
    """Replace all sessions and locations with the backup's contents.

    Raises:
        PermissionDeniedError: If the caller is not an admin
        ConfirmationRequiredError: If the caller has not confirmed the overwrite
    """
    if not is_admin:
        raise PermissionDeniedError("import backups")
    if not confirmed:
        raise ConfirmationRequiredError(
            "Importing a backup overwrites all sessions and locations; confirm to continue"
        )

    store.replace_all(backup.sessions, backup.locations)
    logger.info(
        "backup_restored",
        version=backup.version,
        sessions=len(backup.sessions),
        locations=len(backup.locations),
    )
