"""In-process store. Used directly in tests and as the base of the file store."""

from collections.abc import Iterator
from contextlib import contextmanager
from threading import RLock

from shuttlehub.dao.base import SessionStore
from shuttlehub.models.location import LocationConfig, default_locations
from shuttlehub.models.session import Session, SessionPatch


class MemoryStore(SessionStore):
    """Keeps sessions and locations in dictionaries, in insertion order.

    Writes are applied under a lock and rolled back if ``_persist`` fails, so
    a failed write leaves the store as it was.
    """

    backend = "memory"

    def __init__(
        self,
        sessions: list[Session] | None = None,
        locations: list[LocationConfig] | None = None,
    ):
        """Initialize the store.

        Args:
            sessions: Initial sessions
            locations: Initial registry. Defaults to the built-in venues.
        """
        super().__init__()
        self._lock = RLock()
        self._sessions: dict[str, Session] = {}
        self._locations: dict[str, LocationConfig] = {}
        self._load(sessions or [], default_locations() if locations is None else locations)

    def _load(self, sessions: list[Session], locations: list[LocationConfig]) -> None:
        with self._lock:
            self._sessions = {s.id: s.model_copy(deep=True) for s in sessions}
            self._locations = {loc.id: loc.model_copy() for loc in locations}

    @contextmanager
    def _write(self) -> Iterator[None]:
        with self._lock:
            sessions, locations = dict(self._sessions), dict(self._locations)
            try:
                yield
                self._persist()
            except Exception:
                self._sessions, self._locations = sessions, locations
                raise

    def _list_sessions(self) -> list[Session]:
        with self._lock:
            return [s.model_copy(deep=True) for s in self._sessions.values()]

    def _get_session(self, session_id: str) -> Session | None:
        with self._lock:
            session = self._sessions.get(session_id)
            return session.model_copy(deep=True) if session else None

    def _create_session(self, session: Session) -> Session:
        with self._write():
            if session.id in self._sessions:
                raise ValueError(f"Session already exists: {session.id}")
            self._sessions[session.id] = session.model_copy(deep=True)
        return session.model_copy(deep=True)

    def _patch_session(self, session_id: str, patch: SessionPatch) -> Session | None:
        with self._write():
            existing = self._sessions.get(session_id)
            if existing is None:
                return None
            updated = patch.apply_to(existing)
            self._sessions[session_id] = updated
        return updated.model_copy(deep=True)

    def _delete_session(self, session_id: str) -> bool:
        with self._write():
            deleted = self._sessions.pop(session_id, None) is not None
        return deleted

    def _list_locations(self) -> list[LocationConfig]:
        with self._lock:
            return [loc.model_copy() for loc in self._locations.values()]

    def _save_locations(self, locations: list[LocationConfig]) -> None:
        with self._write():
            for location in locations:
                self._locations[location.id] = location.model_copy()

    def _delete_location(self, location_id: str) -> bool:
        with self._write():
            deleted = self._locations.pop(location_id, None) is not None
        return deleted

    def _replace_all(self, sessions: list[Session], locations: list[LocationConfig]) -> None:
        with self._write():
            self._load(sessions, locations)

    def _persist(self) -> None:
        """Hook called under the lock after every write."""
