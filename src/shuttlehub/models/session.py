"""Session model: one court booking with its roster and costs."""

import datetime as dt
import re
from decimal import Decimal
from enum import StrEnum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator

DEFAULT_MAX_PARTICIPANTS = 8

TIME_RANGE_SEPARATOR = " - "

_CLOCK_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")


class SessionStatus(StrEnum):
    """Lifecycle status of a session. Transitions only active -> completed."""

    ACTIVE = "active"
    COMPLETED = "completed"


def new_id() -> str:
    """Generate an opaque record identifier."""
    return uuid4().hex


def parse_clock(value: str) -> int:
    """Parse a 24-hour "HH:MM" string to minutes after midnight.

    Examples:
        "19:00" -> 1140
        "7:30" -> 450

    Raises:
        ValueError: If the string is not a valid clock time
    """
    match = _CLOCK_PATTERN.match(value.strip())
    if not match:
        raise ValueError(f"Invalid time format: '{value}'. Expected HH:MM")

    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 24 or minutes > 59 or (hours == 24 and minutes != 0):
        raise ValueError(f"Invalid time of day: '{value}'")
    return hours * 60 + minutes


def parse_time_range(value: str) -> tuple[str, str]:
    """Split a stored "HH:MM - HH:MM" range into its start and end.

    Raises:
        ValueError: If the range is malformed
    """
    parts = value.split("-")
    if len(parts) != 2:
        raise ValueError(f"Invalid time range: '{value}'. Expected 'HH:MM - HH:MM'")

    start, end = parts[0].strip(), parts[1].strip()
    parse_clock(start)
    parse_clock(end)
    return start, end


def format_time_range(start: str, end: str) -> str:
    """Format a start and end clock time as the stored range string."""
    return f"{start.strip()}{TIME_RANGE_SEPARATOR}{end.strip()}"


def _unique(names: list[str]) -> list[str]:
    seen: set[str] = set()
    result = []
    for name in names:
        if name not in seen:
            seen.add(name)
            result.append(name)
    return result


class Session(BaseModel):
    """A scheduled court booking.

    ``court_fee`` is a snapshot taken when the session is created or its
    details are edited; changing a location's rate later does not touch it.
    """

    id: str = Field(default_factory=new_id)
    date: dt.date
    time: str  # "HH:MM - HH:MM"
    location: str

    court_count: int = Field(default=1, ge=1)
    court_fee: Decimal = Field(default=Decimal("0"), ge=0)
    shuttle_qty: int = Field(default=0, ge=0)
    shuttle_price: Decimal = Field(default=Decimal("0"), ge=0)

    participants: list[str] = []
    waiting_list: list[str] = []
    deletion_requests: list[str] = []
    max_participants: int = Field(default=DEFAULT_MAX_PARTICIPANTS, ge=1)

    status: SessionStatus = SessionStatus.ACTIVE

    @field_validator("time")
    @classmethod
    def validate_time(cls, v: str) -> str:
        start, end = parse_time_range(v)
        return format_time_range(start, end)

    @field_validator("location")
    @classmethod
    def strip_location(cls, v: str) -> str:
        return v.strip()

    @model_validator(mode="after")
    def repair_roster(self) -> "Session":
        """Collapse duplicates and drop entries that break roster exclusivity.

        Stored or imported data may violate these rules; it is repaired on
        load instead of being rejected. Over-capacity rosters are kept as is.
        """
        participants = _unique(self.participants)
        waiting = [n for n in _unique(self.waiting_list) if n not in participants]
        requests = [n for n in _unique(self.deletion_requests) if n in participants]

        self.participants = participants
        self.waiting_list = waiting
        self.deletion_requests = requests
        return self

    @property
    def start_time(self) -> str:
        return parse_time_range(self.time)[0]

    @property
    def end_time(self) -> str:
        return parse_time_range(self.time)[1]

    @property
    def is_completed(self) -> bool:
        return self.status == SessionStatus.COMPLETED

    @computed_field
    @property
    def participant_count(self) -> int:
        return len(self.participants)

    @computed_field
    @property
    def is_full(self) -> bool:
        """True once the roster has reached capacity; new joins go to the waiting list."""
        return len(self.participants) >= self.max_participants

    @property
    def is_over_capacity(self) -> bool:
        """True for stored data whose roster exceeds max_participants."""
        return len(self.participants) > self.max_participants

    def __str__(self) -> str:
        return f"{self.date.isoformat()} {self.time} @ {self.location}"


class SessionPatch(BaseModel):
    """Partial update of a stored session.

    The set of patchable fields is closed. Only fields that were explicitly
    set are written, so concurrent patches of different fields do not
    overwrite each other.
    """

    model_config = ConfigDict(extra="forbid")

    date: dt.date | None = None
    time: str | None = None
    location: str | None = None
    court_count: int | None = Field(default=None, ge=1)
    court_fee: Decimal | None = Field(default=None, ge=0)
    shuttle_qty: int | None = Field(default=None, ge=0)
    shuttle_price: Decimal | None = Field(default=None, ge=0)
    max_participants: int | None = Field(default=None, ge=1)

    participants: list[str] | None = None
    waiting_list: list[str] | None = None
    deletion_requests: list[str] | None = None

    status: SessionStatus | None = None

    @field_validator("time")
    @classmethod
    def validate_time(cls, v: str | None) -> str | None:
        if v is None:
            return v
        start, end = parse_time_range(v)
        return format_time_range(start, end)

    def changes(self) -> dict:
        """Return only the explicitly set fields."""
        return self.model_dump(exclude_unset=True)

    def apply_to(self, session: Session) -> Session:
        """Return a copy of ``session`` with this patch merged in."""
        data = session.model_dump(exclude={"participant_count", "is_full"})
        data.update(self.changes())
        return Session.model_validate(data)


class SessionDraft(BaseModel):
    """Admin input for a new session.

    ``court_fee`` may be left out for a registered venue, in which case it is
    computed from the venue's hourly rate. ``shuttle_price`` and
    ``max_participants`` fall back to the configured defaults.
    """

    model_config = ConfigDict(extra="forbid")

    date: dt.date
    time: str
    location: str
    court_count: int = Field(default=1, ge=1)
    court_fee: Decimal | None = Field(default=None, ge=0)
    shuttle_qty: int = Field(default=0, ge=0)
    shuttle_price: Decimal | None = Field(default=None, ge=0)
    max_participants: int | None = Field(default=None, ge=1)

    @field_validator("time")
    @classmethod
    def validate_time(cls, v: str) -> str:
        start, end = parse_time_range(v)
        return format_time_range(start, end)
