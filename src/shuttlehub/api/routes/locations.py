"""Location registry endpoints.

Reading the registry requires authentication; changing it requires admin.
"""

from decimal import Decimal

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, Field

from shuttlehub.api.auth import AdminUser, CurrentUser
from shuttlehub.api.dependencies import ServiceDep
from shuttlehub.api.errors import http_error
from shuttlehub.errors import ShuttlehubError
from shuttlehub.models import LocationConfig

router = APIRouter(prefix="/locations", tags=["locations"])


class LocationUpdate(BaseModel):
    """Request body for renaming a venue or changing its rate (partial)."""

    name: str | None = None
    default_court_fee: Decimal | None = Field(default=None, ge=0)


@router.get("", response_model=list[LocationConfig])
def list_locations(user: CurrentUser, service: ServiceDep) -> list[LocationConfig]:
    """List all registered venues."""
    try:
        return service.list_locations()
    except ShuttlehubError as e:
        raise http_error(e) from e


@router.put("", response_model=list[LocationConfig])
def save_locations(
    data: list[LocationConfig], user: AdminUser, service: ServiceDep
) -> list[LocationConfig]:
    """Save venues in bulk, inserting or replacing by id (admin only).

    Existing sessions keep their court fee.
    """
    try:
        return service.save_locations(data, is_admin=user.is_admin)
    except ShuttlehubError as e:
        raise http_error(e) from e


@router.patch("/{location_id}", response_model=LocationConfig)
def update_location(
    location_id: str, data: LocationUpdate, user: AdminUser, service: ServiceDep
) -> LocationConfig:
    """Rename a venue or change its rate (admin only)."""
    try:
        location = service.update_location(
            location_id,
            is_admin=user.is_admin,
            name=data.name,
            rate=data.default_court_fee,
        )
    except ShuttlehubError as e:
        raise http_error(e) from e
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    if location is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Location not found: {location_id}",
        )
    return location


@router.delete("/{location_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_location(location_id: str, user: AdminUser, service: ServiceDep) -> None:
    """Delete a venue (admin only). Sessions at that venue are not touched."""
    try:
        deleted = service.remove_location(location_id, is_admin=user.is_admin)
    except ShuttlehubError as e:
        raise http_error(e) from e

    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Location not found: {location_id}",
        )


@router.post("/reset", response_model=list[LocationConfig])
def reset_locations(user: AdminUser, service: ServiceDep) -> list[LocationConfig]:
    """Restore the default venues (admin only)."""
    try:
        return service.reset_locations(is_admin=user.is_admin)
    except ShuttlehubError as e:
        raise http_error(e) from e
