"""Location registry operations.

Sessions reference venues by name only. Resolution happens at read time, so
renaming or deleting a location leaves existing sessions pointing at a
free-text venue that no longer has a registry rate.
"""

from collections.abc import Iterable
from decimal import Decimal

from shuttlehub import get_logger
from shuttlehub.dao.base import SessionStore
from shuttlehub.errors import MissingLocationError
from shuttlehub.models.location import LocationConfig, LocationRef, default_locations

logger = get_logger(__name__)


def find_location(name: str, locations: Iterable[LocationConfig]) -> LocationConfig | None:
    """Find a registry entry by name, ignoring case and surrounding spaces."""
    key = name.strip().casefold()
    for location in locations:
        if location.name.casefold() == key:
            return location
    return None


def resolve_location(name: str, locations: Iterable[LocationConfig]) -> LocationRef:
    """Resolve a session's venue name against the registry.

    Raises:
        MissingLocationError: If the name is blank
    """
    name = name.strip()
    if not name:
        raise MissingLocationError("Location must not be empty")

    location = find_location(name, locations)
    if location is None:
        return LocationRef(name=name, registered=False)
    return LocationRef(
        name=location.name,
        registered=True,
        location_id=location.id,
        rate=location.default_court_fee,
    )


def add_location(store: SessionStore, name: str, rate: Decimal) -> LocationConfig:
    """Register a venue, or update the rate of an existing one with that name."""
    existing = find_location(name, store.list_locations())
    if existing is not None:
        location = existing.model_copy(update={"default_court_fee": Decimal(rate)})
    else:
        location = LocationConfig(name=name, default_court_fee=rate)

    store.save_locations([location])
    logger.info("location_saved", location_id=location.id, name=location.name, rate=str(rate))
    return location


def update_location(
    store: SessionStore,
    location_id: str,
    name: str | None = None,
    rate: Decimal | None = None,
) -> LocationConfig | None:
    """Rename a venue or change its rate. Returns None if the id is unknown.

    Existing sessions keep their court fee snapshot and their venue name.
    """
    existing = next((loc for loc in store.list_locations() if loc.id == location_id), None)
    if existing is None:
        return None

    data = existing.model_dump()
    if name is not None:
        data["name"] = name
    if rate is not None:
        data["default_court_fee"] = rate
    location = LocationConfig.model_validate(data)

    store.save_locations([location])
    logger.info("location_updated", location_id=location_id, name=location.name)
    return location


def remove_location(store: SessionStore, location_id: str) -> bool:
    """Delete a registry entry. Sessions at that venue are not touched."""
    deleted = store.delete_location(location_id)
    if deleted:
        logger.info("location_deleted", location_id=location_id)
    return deleted


def reset_locations(store: SessionStore) -> list[LocationConfig]:
    """Replace the registry with the built-in defaults."""
    for location in store.list_locations():
        store.delete_location(location.id)
    saved = store.save_locations(default_locations())
    logger.info("locations_reset", count=len(saved))
    return saved
