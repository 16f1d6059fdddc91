"""Base store for sessions and locations.

A store is constructed explicitly, opened before use and closed afterwards:

    with LocalFileStore(path) as store:
        sessions = store.list_sessions()

Every public operation runs inside ``_guard``, which turns the backend's
own exceptions into PersistenceError, logs the failure once and records it
on ``status``. After each successful write all subscribers receive a fresh
snapshot. A subscriber that raises is logged and handed the exception
through its own error callback; the write itself still succeeds.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime
from itertools import count
from typing import Any

from pydantic import BaseModel

from shuttlehub import get_logger
from shuttlehub.errors import PersistenceError
from shuttlehub.models.location import LocationConfig
from shuttlehub.models.session import Session, SessionPatch

logger = get_logger(__name__)


class StoreSnapshot(BaseModel):
    """Full current contents of a store, as delivered to subscribers."""

    sessions: list[Session]
    locations: list[LocationConfig]


class SyncStatus(BaseModel):
    """Connection state surfaced to users as a banner."""

    online: bool = False
    last_error: str | None = None
    last_synced_at: datetime | None = None


ChangeListener = Callable[[StoreSnapshot], None]
ErrorListener = Callable[[Exception], None]
Unsubscribe = Callable[[], None]


class SessionStore(ABC):
    """Persistence boundary for sessions and the location registry."""

    backend: str = "base"

    # Exceptions raised by the backend that mean "the store failed"
    backend_errors: tuple[type[Exception], ...] = ()

    def __init__(self) -> None:
        self.status = SyncStatus()
        self._listeners: dict[int, tuple[ChangeListener, ErrorListener | None]] = {}
        self._listener_ids = count()
        self._is_open = False

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def open(self) -> None:
        """Connect to the backend. Idempotent."""
        if self._is_open:
            return
        with self._guard("open"):
            self._open()
        self._is_open = True
        self.status.online = True
        logger.info("store_opened", backend=self.backend)

    def close(self) -> None:
        """Release the backend and drop all subscribers."""
        if not self._is_open:
            return
        self._close()
        self._listeners.clear()
        self._is_open = False
        self.status.online = False
        logger.info("store_closed", backend=self.backend)

    @property
    def is_open(self) -> bool:
        return self._is_open

    def __enter__(self) -> "SessionStore":
        self.open()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # =========================================================================
    # Sessions
    # =========================================================================

    def list_sessions(self) -> list[Session]:
        with self._guard("list_sessions"):
            return self._list_sessions()

    def get_session(self, session_id: str) -> Session | None:
        with self._guard("get_session", session_id=session_id):
            return self._get_session(session_id)

    def create_session(self, session: Session) -> Session:
        with self._guard("create_session", session_id=session.id):
            created = self._create_session(session)
        self._notify()
        return created

    def patch_session(self, session_id: str, patch: SessionPatch) -> Session | None:
        """Write only the fields set on ``patch``. Returns None if the session is gone."""
        with self._guard("patch_session", session_id=session_id):
            updated = self._patch_session(session_id, patch)
        if updated is not None:
            self._notify()
        return updated

    def delete_session(self, session_id: str) -> bool:
        with self._guard("delete_session", session_id=session_id):
            deleted = self._delete_session(session_id)
        if deleted:
            self._notify()
        return deleted

    # =========================================================================
    # Locations
    # =========================================================================

    def list_locations(self) -> list[LocationConfig]:
        with self._guard("list_locations"):
            return self._list_locations()

    def save_locations(self, locations: list[LocationConfig]) -> list[LocationConfig]:
        """Bulk upsert by id. Locations not in the list are left alone."""
        with self._guard("save_locations", count=len(locations)):
            self._save_locations(locations)
        self._notify()
        return self.list_locations()

    def delete_location(self, location_id: str) -> bool:
        with self._guard("delete_location", location_id=location_id):
            deleted = self._delete_location(location_id)
        if deleted:
            self._notify()
        return deleted

    # =========================================================================
    # Bulk
    # =========================================================================

    def replace_all(self, sessions: list[Session], locations: list[LocationConfig]) -> None:
        """Replace both collections (backup restore)."""
        with self._guard("replace_all", sessions=len(sessions), locations=len(locations)):
            self._replace_all(sessions, locations)
        self._notify()

    def snapshot(self) -> StoreSnapshot:
        return StoreSnapshot(sessions=self.list_sessions(), locations=self.list_locations())

    # =========================================================================
    # Subscriptions
    # =========================================================================

    def subscribe(
        self, on_change: ChangeListener, on_error: ErrorListener | None = None
    ) -> Unsubscribe:
        """Register for snapshots after every write and refresh.

        Returns:
            A callable that removes the subscription
        """
        listener_id = next(self._listener_ids)
        self._listeners[listener_id] = (on_change, on_error)

        def unsubscribe() -> None:
            self._listeners.pop(listener_id, None)

        return unsubscribe

    def refresh(self) -> StoreSnapshot | None:
        """Re-read the store and push the snapshot to subscribers.

        Failures go to the subscribers' error callbacks instead of raising.
        """
        try:
            snapshot = self.snapshot()
        except PersistenceError as e:
            self._notify_error(e)
            return None
        self._deliver(snapshot)
        return snapshot

    def _notify(self) -> None:
        if not self._listeners:
            return
        self.refresh()

    def _deliver(self, snapshot: StoreSnapshot) -> None:
        # A listener failure never reaches the write that triggered it
        for listener_id, (on_change, on_error) in list(self._listeners.items()):
            try:
                on_change(snapshot)
            except Exception as e:
                logger.error("subscriber_failed", listener_id=listener_id, error=str(e))
                self._call_error_listener(listener_id, on_error, e)

    def _notify_error(self, error: PersistenceError) -> None:
        for listener_id, (_, on_error) in list(self._listeners.items()):
            self._call_error_listener(listener_id, on_error, error)

    @staticmethod
    def _call_error_listener(
        listener_id: int, on_error: ErrorListener | None, error: Exception
    ) -> None:
        if on_error is None:
            return
        try:
            on_error(error)
        except Exception as e:
            logger.error("subscriber_error_handler_failed", listener_id=listener_id, error=str(e))

    # =========================================================================
    # Error handling
    # =========================================================================

    @contextmanager
    def _guard(self, operation: str, **context: Any) -> Iterator[None]:
        try:
            yield
        except PersistenceError as e:
            self._record_failure(operation, e, context)
            raise
        except self.backend_errors as e:
            self._record_failure(operation, e, context)
            raise PersistenceError(f"{operation} failed: {e}") from e
        else:
            self.status.online = True
            self.status.last_error = None
            self.status.last_synced_at = datetime.now()

    def _record_failure(self, operation: str, error: Exception, context: dict[str, Any]) -> None:
        logger.error(
            "store_operation_failed",
            backend=self.backend,
            operation=operation,
            error=str(error),
            **context,
        )
        self.status.last_error = str(error)

    # =========================================================================
    # Backend hooks
    # =========================================================================

    def _open(self) -> None:
        """Connect to the backend. Override if there is anything to set up."""

    def _close(self) -> None:
        """Release backend resources. Override if there is anything to release."""

    @abstractmethod
    def _list_sessions(self) -> list[Session]: ...

    @abstractmethod
    def _get_session(self, session_id: str) -> Session | None: ...

    @abstractmethod
    def _create_session(self, session: Session) -> Session: ...

    @abstractmethod
    def _patch_session(self, session_id: str, patch: SessionPatch) -> Session | None: ...

    @abstractmethod
    def _delete_session(self, session_id: str) -> bool: ...

    @abstractmethod
    def _list_locations(self) -> list[LocationConfig]: ...

    @abstractmethod
    def _save_locations(self, locations: list[LocationConfig]) -> None: ...

    @abstractmethod
    def _delete_location(self, location_id: str) -> bool: ...

    @abstractmethod
    def _replace_all(self, sessions: list[Session], locations: list[LocationConfig]) -> None: ...
