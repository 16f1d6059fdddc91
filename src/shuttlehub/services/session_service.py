"""Session service: the single mutation path for sessions and locations.

Every write goes through the same steps: permission check, validation
before anything is touched, the roster or cost engine on a copy of the
session, then one store write. Store failures are logged here and re-raised
as PersistenceError for the caller to show.

Usage:
    with create_store(settings) as store:
        service = SessionService.from_settings(store, settings)
        session = service.create_session(draft, is_admin=True)
        service.join(session.id, "Alice")
"""

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime, timedelta
from decimal import Decimal
from enum import StrEnum
from typing import Any, TypeVar

from shuttlehub import get_logger, session_context
from shuttlehub.config import Settings
from shuttlehub.dao.base import SessionStore
from shuttlehub.errors import (
    InvalidTimeRangeError,
    MissingLocationError,
    PermissionDeniedError,
    PersistenceError,
    SessionCompletedError,
    SessionNotFoundError,
    ValidationError,
)
from shuttlehub.models.location import LocationConfig
from shuttlehub.models.session import (
    DEFAULT_MAX_PARTICIPANTS,
    Session,
    SessionDraft,
    SessionPatch,
    parse_time_range,
)
from shuttlehub.services import analytics, locations
from shuttlehub.services.costs import duration_hours, session_duration, total_court_fee
from shuttlehub.services.lifecycle import (
    DEFAULT_GRACE_PERIOD,
    completion_patch,
    grace_period,
    partition_sessions,
    sort_by_date_desc,
)
from shuttlehub.services.roster import JoinResult, RosterManager

logger = get_logger(__name__)

T = TypeVar("T")

# Fields an admin may change through update_details
DETAIL_FIELDS = frozenset(
    {
        "date",
        "time",
        "location",
        "court_count",
        "court_fee",
        "shuttle_qty",
        "shuttle_price",
        "max_participants",
    }
)

# Changing any of these re-prices the court fee for a registered venue
_PRICING_FIELDS = frozenset({"time", "location", "court_count"})


class SessionView(StrEnum):
    """Which sessions a listing returns."""

    ACTIVE = "active"
    HISTORY = "history"
    ALL = "all"


class SessionService:
    """Session lifecycle, roster and location operations over a store."""

    def __init__(
        self,
        store: SessionStore,
        *,
        grace: timedelta = DEFAULT_GRACE_PERIOD,
        default_max_participants: int = DEFAULT_MAX_PARTICIPANTS,
        default_shuttle_price: Decimal = Decimal(0),
        clock: Callable[[], datetime] = datetime.now,
    ):
        """Initialize the service.

        Args:
            store: An opened store
            grace: How long a finished session stays in the active view
            default_max_participants: Capacity when a draft gives none
            default_shuttle_price: Shuttle price when a draft gives none
            clock: Source of the current local time
        """
        self.store = store
        self.grace = grace
        self.default_max_participants = default_max_participants
        self.default_shuttle_price = default_shuttle_price
        self.clock = clock

    @classmethod
    def from_settings(
        cls,
        store: SessionStore,
        settings: Settings,
        clock: Callable[[], datetime] = datetime.now,
    ) -> "SessionService":
        return cls(
            store,
            grace=grace_period(settings.grace_period_hours),
            default_max_participants=settings.default_max_participants,
            default_shuttle_price=settings.default_shuttle_price,
            clock=clock,
        )

    # =========================================================================
    # Reads
    # =========================================================================

    def list_sessions(self, view: SessionView = SessionView.ALL) -> list[Session]:
        """Sessions for a view, most recent first."""
        sessions = self.store.list_sessions()
        if view == SessionView.ALL:
            return sort_by_date_desc(sessions)

        active, history = partition_sessions(sessions, self.clock(), self.grace)
        return active if view == SessionView.ACTIVE else history

    def get_session(self, session_id: str) -> Session:
        """Get a session by id.

        Raises:
            SessionNotFoundError: If no session has that id
        """
        session = self.store.get_session(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def session_costs(self, session_id: str) -> analytics.SessionCostRow:
        return analytics.session_rows([self.get_session(session_id)])[0]

    def frequent_participants(self) -> list[str]:
        return analytics.frequent_participants(self.store.list_sessions())

    def summary(self) -> analytics.AnalyticsSummary:
        return analytics.summarize(self.store.list_sessions())

    def cost_rows(self) -> list[analytics.SessionCostRow]:
        return analytics.session_rows(self.store.list_sessions())

    def period_summaries(self, period: analytics.Period) -> list[analytics.PeriodSummary]:
        return analytics.group_by_period(self.store.list_sessions(), period)

    def list_locations(self) -> list[LocationConfig]:
        return self.store.list_locations()

    # =========================================================================
    # Session lifecycle (admin)
    # =========================================================================

    def create_session(self, draft: SessionDraft, is_admin: bool) -> Session:
        """Publish a new session.

        Raises:
            PermissionDeniedError: If the caller is not an admin
            MissingLocationError: If the venue is blank, or unregistered
                and no court fee was given
            InvalidTimeRangeError: If the time range has no duration
        """
        self._require_admin(is_admin, "create sessions")

        ref = locations.resolve_location(draft.location, self.store.list_locations())
        duration = self._duration(draft.time)

        court_fee = draft.court_fee
        if court_fee is None:
            if not ref.registered:
                raise MissingLocationError(
                    f"'{ref.name}' is not a registered location; a court fee is required"
                )
            court_fee = total_court_fee(ref.rate, draft.court_count, duration)

        session = Session(
            date=draft.date,
            time=draft.time,
            location=ref.name,
            court_count=draft.court_count,
            court_fee=court_fee,
            shuttle_qty=draft.shuttle_qty,
            shuttle_price=(
                draft.shuttle_price
                if draft.shuttle_price is not None
                else self.default_shuttle_price
            ),
            max_participants=draft.max_participants or self.default_max_participants,
        )

        with self._write("create_session", session_id=session.id):
            created = self.store.create_session(session)

        logger.info(
            "session_created",
            session_id=created.id,
            date=created.date.isoformat(),
            location=created.location,
            court_fee=str(created.court_fee),
        )
        return created

    def update_details(self, session_id: str, patch: SessionPatch, is_admin: bool) -> Session:
        """Edit a session's details, re-pricing the court fee when needed.

        When the time, court count or venue changes and no court fee is
        given, a registered venue's rate is applied again. Unregistered
        venues keep their fee. Raising the capacity promotes from the
        waiting list.

        Raises:
            PermissionDeniedError: If the caller is not an admin
            SessionNotFoundError: If no session has that id
            SessionCompletedError: If the session is completed
            ValidationError: If the patch touches roster or status fields
        """
        self._require_admin(is_admin, "edit sessions")
        session = self.get_session(session_id)
        if session.is_completed:
            raise SessionCompletedError(session_id)

        # Explicit None means "leave unchanged"
        changes: dict[str, Any] = {k: v for k, v in patch.changes().items() if v is not None}
        extra = set(changes) - DETAIL_FIELDS
        if extra:
            raise ValidationError(f"Cannot edit {', '.join(sorted(extra))} as session details")
        if not changes:
            return session

        if "location" in changes and not changes["location"].strip():
            raise MissingLocationError("Location must not be empty")

        merged = SessionPatch(**changes).apply_to(session)
        if "time" in changes:
            self._duration(merged.time)

        if "court_fee" not in changes and _PRICING_FIELDS & set(changes):
            ref = locations.resolve_location(merged.location, self.store.list_locations())
            if ref.registered:
                changes["court_fee"] = total_court_fee(
                    ref.rate, merged.court_count, session_duration(merged)
                )

        if "max_participants" in changes:
            roster = RosterManager(merged)
            roster.set_capacity(merged.max_participants)
            if roster.changed:
                changes.update(roster.patch().changes())
                logger.info("roster_promoted", session_id=session_id, names=roster.promoted)

        updated = self._patch(session_id, SessionPatch(**changes), "update_details")
        logger.info("session_updated", session_id=session_id, fields=sorted(changes))
        return updated

    def complete_session(self, session_id: str, is_admin: bool) -> Session:
        """Mark a session completed. Completing twice is a no-op."""
        self._require_admin(is_admin, "complete sessions")
        session = self.get_session(session_id)

        patch = completion_patch(session)
        if patch is None:
            return session

        updated = self._patch(session_id, patch, "complete_session")
        logger.info("session_completed", session_id=session_id)
        return updated

    def delete_session(self, session_id: str, is_admin: bool) -> None:
        """Hard delete a session.

        Raises:
            PermissionDeniedError: If the caller is not an admin
            SessionNotFoundError: If no session has that id
        """
        self._require_admin(is_admin, "delete sessions")
        with self._write("delete_session", session_id=session_id):
            deleted = self.store.delete_session(session_id)
        if not deleted:
            raise SessionNotFoundError(session_id)
        logger.info("session_deleted", session_id=session_id)

    # =========================================================================
    # Roster
    # =========================================================================

    def join(self, session_id: str, name: str) -> JoinResult:
        """Sign up for a session. Full sessions put the name on the waiting list."""
        result = self._apply_roster(session_id, "join", lambda roster: roster.join(name))
        if result.accepted:
            logger.info(
                "roster_join",
                session_id=session_id,
                name=result.name,
                placement=result.placement.value,
                position=result.position,
            )
        return result

    def request_leave(self, session_id: str, name: str, is_admin: bool) -> None:
        """Admins remove immediately; members file a deletion request."""
        self._apply_roster(
            session_id, "request_leave", lambda roster: roster.request_leave(name, is_admin)
        )
        logger.info("roster_leave", session_id=session_id, name=name.strip(), is_admin=is_admin)

    def approve_deletion(self, session_id: str, name: str, is_admin: bool) -> None:
        self._require_admin(is_admin, "approve deletion requests")
        self._apply_roster(session_id, "approve_deletion", lambda r: r.approve_deletion(name))
        logger.info("deletion_approved", session_id=session_id, name=name.strip())

    def reject_deletion(self, session_id: str, name: str, is_admin: bool) -> None:
        self._require_admin(is_admin, "reject deletion requests")
        self._apply_roster(session_id, "reject_deletion", lambda r: r.reject_deletion(name))
        logger.info("deletion_rejected", session_id=session_id, name=name.strip())

    def remove_participant(self, session_id: str, name: str, is_admin: bool) -> None:
        """Remove a participant directly, promoting the head of the waiting list."""
        self._require_admin(is_admin, "remove participants")
        self._apply_roster(session_id, "remove_participant", lambda r: r.remove(name))
        logger.info("roster_removed", session_id=session_id, name=name.strip())

    def remove_from_waiting_list(self, session_id: str, name: str) -> None:
        self._apply_roster(
            session_id, "remove_from_waiting_list", lambda r: r.remove_from_waiting_list(name)
        )
        logger.info("waiting_list_removed", session_id=session_id, name=name.strip())

    # =========================================================================
    # Locations (admin)
    # =========================================================================

    def save_locations(
        self, registry: list[LocationConfig], is_admin: bool
    ) -> list[LocationConfig]:
        """Bulk upsert of registry entries."""
        self._require_admin(is_admin, "manage locations")
        with self._write("save_locations", count=len(registry)):
            return self.store.save_locations(registry)

    def add_location(self, name: str, rate: Decimal, is_admin: bool) -> LocationConfig:
        self._require_admin(is_admin, "manage locations")
        with self._write("add_location", name=name):
            return locations.add_location(self.store, name, rate)

    def update_location(
        self,
        location_id: str,
        is_admin: bool,
        name: str | None = None,
        rate: Decimal | None = None,
    ) -> LocationConfig | None:
        self._require_admin(is_admin, "manage locations")
        with self._write("update_location", location_id=location_id):
            return locations.update_location(self.store, location_id, name=name, rate=rate)

    def remove_location(self, location_id: str, is_admin: bool) -> bool:
        self._require_admin(is_admin, "manage locations")
        with self._write("remove_location", location_id=location_id):
            return locations.remove_location(self.store, location_id)

    def reset_locations(self, is_admin: bool) -> list[LocationConfig]:
        self._require_admin(is_admin, "manage locations")
        with self._write("reset_locations"):
            return locations.reset_locations(self.store)

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    def _require_admin(is_admin: bool, action: str) -> None:
        if not is_admin:
            logger.warning("permission_denied", action=action)
            raise PermissionDeniedError(action)

    @staticmethod
    def _duration(time_range: str) -> Decimal:
        start, end = parse_time_range(time_range)
        duration = duration_hours(start, end)
        if duration <= 0:
            raise InvalidTimeRangeError(f"End time must be after start time: '{time_range}'")
        return duration

    def _apply_roster(
        self, session_id: str, operation: str, action: Callable[[RosterManager], T]
    ) -> T:
        """Run a roster operation and write the result as one patch."""
        with session_context(session_id, operation=operation):
            roster = RosterManager(self.get_session(session_id))
            result = action(roster)
            if roster.changed:
                self._patch(session_id, roster.patch(), operation)
                if roster.promoted:
                    logger.info("roster_promoted", names=roster.promoted)
        return result

    def _patch(self, session_id: str, patch: SessionPatch, operation: str) -> Session:
        with self._write(operation, session_id=session_id):
            updated = self.store.patch_session(session_id, patch)
        if updated is None:
            raise SessionNotFoundError(session_id)
        return updated

    @contextmanager
    def _write(self, operation: str, **context: Any) -> Iterator[None]:
        try:
            yield
        except PersistenceError as e:
            logger.error("session_write_failed", operation=operation, error=str(e), **context)
            raise
