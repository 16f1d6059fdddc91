"""Location model for the venue registry."""

from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from shuttlehub.models.session import new_id


class LocationConfig(BaseModel):
    """A named venue and its reference hourly rate per court."""

    id: str = Field(default_factory=new_id)
    name: str
    default_court_fee: Decimal = Field(ge=0)  # Hourly rate per court

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Location name must not be empty")
        return v

    def __str__(self) -> str:
        return self.name


class LocationRef(BaseModel):
    """A session's location resolved against the registry at read time.

    Unregistered venues (deleted or free-text) resolve with ``registered``
    False and no rate; callers must not price them from the registry.
    """

    name: str
    registered: bool
    location_id: str | None = None
    rate: Decimal | None = None


def default_locations() -> list[LocationConfig]:
    """The registry a fresh store starts with."""
    return [
        LocationConfig(id="1", name="SRC", default_court_fee=Decimal("20")),
        LocationConfig(id="2", name="Perfect Win", default_court_fee=Decimal("30")),
    ]
