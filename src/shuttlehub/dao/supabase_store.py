"""Store backed by two Supabase tables."""

from typing import Any

import httpx
from postgrest.exceptions import APIError

from shuttlehub import get_logger
from shuttlehub.dao.base import SessionStore
from shuttlehub.errors import PersistenceError
from shuttlehub.models.location import LocationConfig
from shuttlehub.models.session import Session, SessionPatch
from supabase import Client, create_client

logger = get_logger(__name__)

# Computed fields that have no column
_COMPUTED = {"participant_count", "is_full"}


class SupabaseStore(SessionStore):
    """Sessions and locations as rows, one column per model field."""

    backend = "supabase"
    backend_errors = (APIError, httpx.HTTPError, ValueError)

    def __init__(
        self,
        client: Client | None = None,
        *,
        url: str | None = None,
        key: str | None = None,
        sessions_table: str = "sessions",
        locations_table: str = "locations",
    ):
        """Initialize the store.

        Args:
            client: Supabase client. If not provided, one is created on open()
                from ``url`` and ``key``.
            url: Supabase project URL
            key: Supabase API key
            sessions_table: Name of the sessions table
            locations_table: Name of the locations table
        """
        super().__init__()
        self.client = client
        self._url = url
        self._key = key
        self.sessions_table = sessions_table
        self.locations_table = locations_table

    def _open(self) -> None:
        if self.client is not None:
            return
        if not self._url or not self._key:
            raise PersistenceError("SUPABASE_URL and SUPABASE_KEY must be set for the supabase backend")
        self.client = create_client(self._url, self._key)
        logger.debug("supabase_client_created", url=self._url)

    def _close(self) -> None:
        self.client = None

    @property
    def sessions(self):
        """Sessions table reference."""
        return self._client().table(self.sessions_table)

    @property
    def locations(self):
        """Locations table reference."""
        return self._client().table(self.locations_table)

    def _client(self) -> Client:
        if self.client is None:
            raise PersistenceError("Store is not open")
        return self.client

    # =========================================================================
    # Row mapping
    # =========================================================================

    @staticmethod
    def _session_to_db(session: Session) -> dict[str, Any]:
        return session.model_dump(mode="json", exclude=_COMPUTED)

    @staticmethod
    def _session_to_model(row: dict[str, Any]) -> Session:
        data = {k: v for k, v in row.items() if k in Session.model_fields}
        if not data.get("max_participants"):
            data.pop("max_participants", None)
        return Session.model_validate(data)

    @staticmethod
    def _location_to_db(location: LocationConfig) -> dict[str, Any]:
        return location.model_dump(mode="json")

    @staticmethod
    def _location_to_model(row: dict[str, Any]) -> LocationConfig:
        return LocationConfig.model_validate(
            {k: v for k, v in row.items() if k in LocationConfig.model_fields}
        )

    # =========================================================================
    # Sessions
    # =========================================================================

    def _list_sessions(self) -> list[Session]:
        result = self.sessions.select("*").order("date", desc=True).execute()
        return [self._session_to_model(row) for row in result.data]

    def _get_session(self, session_id: str) -> Session | None:
        result = self.sessions.select("*").eq("id", session_id).execute()
        if not result.data:
            return None
        return self._session_to_model(result.data[0])

    def _create_session(self, session: Session) -> Session:
        result = self.sessions.insert(self._session_to_db(session)).execute()
        return self._session_to_model(result.data[0])

    def _patch_session(self, session_id: str, patch: SessionPatch) -> Session | None:
        data = patch.model_dump(mode="json", exclude_unset=True)
        if not data:
            return self._get_session(session_id)
        result = self.sessions.update(data).eq("id", session_id).execute()
        if not result.data:
            return None
        return self._session_to_model(result.data[0])

    def _delete_session(self, session_id: str) -> bool:
        result = self.sessions.delete().eq("id", session_id).execute()
        return len(result.data) > 0

    # =========================================================================
    # Locations
    # =========================================================================

    def _list_locations(self) -> list[LocationConfig]:
        result = self.locations.select("*").order("name").execute()
        return [self._location_to_model(row) for row in result.data]

    def _save_locations(self, locations: list[LocationConfig]) -> None:
        if not locations:
            return
        self.locations.upsert([self._location_to_db(loc) for loc in locations]).execute()

    def _delete_location(self, location_id: str) -> bool:
        result = self.locations.delete().eq("id", location_id).execute()
        return len(result.data) > 0

    def _replace_all(self, sessions: list[Session], locations: list[LocationConfig]) -> None:
        session_rows = [self._session_to_db(s) for s in sessions]
        location_rows = [self._location_to_db(loc) for loc in locations]
        stale_sessions = self._stale_ids(self.sessions, session_rows)
        stale_locations = self._stale_ids(self.locations, location_rows)

        # Nothing is deleted until both tables hold the incoming rows
        if session_rows:
            self.sessions.upsert(session_rows).execute()
        if location_rows:
            self.locations.upsert(location_rows).execute()
        if stale_sessions:
            self.sessions.delete().in_("id", stale_sessions).execute()
        if stale_locations:
            self.locations.delete().in_("id", stale_locations).execute()
        logger.info(
            "supabase_replaced",
            sessions=len(sessions),
            locations=len(locations),
            removed_sessions=len(stale_sessions),
            removed_locations=len(stale_locations),
        )

    @staticmethod
    def _stale_ids(table: Any, rows: list[dict[str, Any]]) -> list[str]:
        """Ids currently in ``table`` that are absent from ``rows``."""
        keep = {row["id"] for row in rows}
        response = table.select("id").execute()
        return sorted(row["id"] for row in response.data if row["id"] not in keep)
