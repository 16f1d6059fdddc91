"""Shared fixtures: an in-memory store, a fixed clock and a service over both."""

from collections.abc import Callable, Iterator
from datetime import date, datetime
from decimal import Decimal

import pytest

from shuttlehub.dao import MemoryStore
from shuttlehub.models import Session
from shuttlehub.services.session_service import SessionService

# Friday afternoon; sessions that evening are still ahead
NOW = datetime(2025, 3, 14, 15, 0)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def make_session() -> Callable[..., Session]:
    """Build a session with sensible defaults; override any field by keyword."""

    def _make(**overrides) -> Session:
        data = {
            "date": date(2025, 3, 14),
            "time": "19:00 - 21:00",
            "location": "SRC",
            "court_count": 2,
            "court_fee": Decimal("80"),
            "shuttle_qty": 3,
            "shuttle_price": Decimal("10"),
        }
        data.update(overrides)
        return Session(**data)

    return _make


@pytest.fixture
def store() -> Iterator[MemoryStore]:
    """Provide an opened in-memory store with the default venues."""
    with MemoryStore() as memory_store:
        yield memory_store


@pytest.fixture
def service(store: MemoryStore, now: datetime) -> SessionService:
    """Provide a SessionService on the in-memory store with a fixed clock."""
    return SessionService(store, default_shuttle_price=Decimal("10.58"), clock=lambda: now)
