"""Backup document model for export and import."""

from datetime import datetime

from pydantic import BaseModel

from shuttlehub.models.location import LocationConfig
from shuttlehub.models.session import Session

BACKUP_VERSION = "1.0"


class BackupDocument(BaseModel):
    """A full snapshot of the club's data.

    Serialized as ``{version, exportDate, locations, sessions}`` with the
    camelCase document keys, see shuttlehub.dao.documents.
    """

    version: str = BACKUP_VERSION
    export_date: datetime
    locations: list[LocationConfig]
    sessions: list[Session]
