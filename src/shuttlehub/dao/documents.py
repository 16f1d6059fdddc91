"""Conversion between models and stored JSON documents.

Documents use the camelCase keys of the club's existing data files and
backups (``courtFee``, ``waitingList``, ``maxParticipants`` ...), so old
exports load unchanged. Missing optional keys take their defaults and a
maxParticipants of 0 or null means the default capacity.
"""

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any

from shuttlehub.models.location import LocationConfig
from shuttlehub.models.session import DEFAULT_MAX_PARTICIPANTS, Session, SessionStatus

# Model field -> document key
SESSION_KEYS: dict[str, str] = {
    "id": "id",
    "date": "date",
    "time": "time",
    "location": "location",
    "court_count": "courtCount",
    "court_fee": "courtFee",
    "shuttle_qty": "shuttleQty",
    "shuttle_price": "shuttlePrice",
    "participants": "participants",
    "waiting_list": "waitingList",
    "deletion_requests": "deletionRequests",
    "max_participants": "maxParticipants",
    "status": "status",
}


def _amount(value: Decimal) -> int | float | str:
    """Render a Decimal for JSON without losing digits.

    Whole amounts become ints and amounts that survive a float round trip
    become floats. Anything longer (a 1h40m court fee of 33.33...) is written as
    a decimal string, which ``_decimal`` reads back unchanged.
    """
    if value == value.to_integral_value():
        return int(value)
    as_float = float(value)
    if Decimal(repr(as_float)) == value:
        return as_float
    return str(value)


def _decimal(value: Any) -> Decimal:
    if value is None or value == "":
        return Decimal(0)
    try:
        return Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"Invalid amount: {value!r}") from e


def _to_json_value(value: Any) -> Any:
    if isinstance(value, Decimal):
        return _amount(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, SessionStatus):
        return value.value
    if isinstance(value, list):
        return list(value)
    return value


def session_to_document(session: Session) -> dict[str, Any]:
    """Convert a Session to its stored document."""
    data = session.model_dump(exclude={"participant_count", "is_full"})
    return {SESSION_KEYS[field]: _to_json_value(value) for field, value in data.items()}


def session_from_document(doc: dict[str, Any]) -> Session:
    """Convert a stored document to a Session, repairing roster inconsistencies.

    Raises:
        ValueError: If required keys are missing or values are invalid
    """
    for key in ("id", "date", "time", "location"):
        if key not in doc:
            raise ValueError(f"Session document missing '{key}'")

    return Session(
        id=str(doc["id"]),
        date=date.fromisoformat(str(doc["date"])[:10]),
        time=doc["time"],
        location=doc["location"],
        court_count=doc.get("courtCount") or 1,
        court_fee=_decimal(doc.get("courtFee")),
        shuttle_qty=doc.get("shuttleQty") or 0,
        shuttle_price=_decimal(doc.get("shuttlePrice")),
        participants=doc.get("participants") or [],
        waiting_list=doc.get("waitingList") or [],
        deletion_requests=doc.get("deletionRequests") or [],
        max_participants=doc.get("maxParticipants") or DEFAULT_MAX_PARTICIPANTS,
        status=SessionStatus(doc.get("status") or SessionStatus.ACTIVE),
    )


def location_to_document(location: LocationConfig) -> dict[str, Any]:
    return {
        "id": location.id,
        "name": location.name,
        "defaultCourtFee": _amount(location.default_court_fee),
    }


def location_from_document(doc: dict[str, Any]) -> LocationConfig:
    """Convert a stored document to a LocationConfig.

    Raises:
        ValueError: If the name is missing or the rate is invalid
    """
    if "name" not in doc:
        raise ValueError("Location document missing 'name'")
    data: dict[str, Any] = {
        "name": doc["name"],
        "default_court_fee": _decimal(doc.get("defaultCourtFee")),
    }
    if doc.get("id"):
        data["id"] = str(doc["id"])
    return LocationConfig(**data)
