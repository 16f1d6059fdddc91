"""Store backed by a single JSON document file on disk."""

import json
import os
from decimal import Decimal
from pathlib import Path

from shuttlehub import get_logger
from shuttlehub.dao.documents import (
    location_from_document,
    location_to_document,
    session_from_document,
    session_to_document,
)
from shuttlehub.dao.memory_store import MemoryStore
from shuttlehub.models.location import default_locations

logger = get_logger(__name__)


class LocalFileStore(MemoryStore):
    """Keeps the working set in memory and rewrites the file after every write.

    File layout::

        {"sessions": [...], "locations": [...]}

    A missing file starts a fresh store with the default venues. A file that
    cannot be parsed fails ``open()`` and is never overwritten.
    """

    backend = "local"
    backend_errors = (OSError, ValueError)

    def __init__(self, path: Path | str):
        super().__init__(sessions=[], locations=[])
        self.path = Path(path).expanduser()

    def _open(self) -> None:
        if not self.path.exists():
            logger.info("local_store_initialized", path=str(self.path))
            self._load([], default_locations())
            self._persist()
            return

        raw = json.loads(self.path.read_text(encoding="utf-8"), parse_float=Decimal)
        if not isinstance(raw, dict):
            raise ValueError(f"Unexpected data file layout in {self.path}")

        sessions = [session_from_document(doc) for doc in raw.get("sessions", [])]
        locations = [location_from_document(doc) for doc in raw.get("locations", [])]
        self._load(sessions, locations)
        logger.debug(
            "local_store_loaded",
            path=str(self.path),
            sessions=len(sessions),
            locations=len(locations),
        )

    def _persist(self) -> None:
        data = {
            "sessions": [session_to_document(s) for s in self._sessions.values()],
            "locations": [location_to_document(loc) for loc in self._locations.values()],
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)

        # Write a sibling file, then swap it in
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        os.replace(tmp_path, self.path)
