"""Availability endpoints: host calendar overrides."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Path
from pydantic import BaseModel, ConfigDict, Field, StrictBool

from rentaly.api.auth import CurrentUser, get_current_user
from rentaly.domain import availability

router = APIRouter(prefix="/availability", tags=["availability"])


class AvailabilityUpdateRequest(BaseModel):
    """Request body for POST /availability/update."""

    model_config = ConfigDict(populate_by_name=True)

    listing_id: str | None = Field(None, alias="listingId")
    dates: list[str] | None = None
    is_available: StrictBool | None = Field(None, alias="isAvailable")


@router.post("/update")
def update_availability(
    body: AvailabilityUpdateRequest,
    user: CurrentUser = Depends(get_current_user),
) -> dict:
    """Block or free days on one of the caller's listings."""
    result = availability.set_availability(
        body.listing_id,
        actor_id=user.id,
        dates=body.dates,
        is_available=body.is_available,
    )
    return {"success": result["success"]}


@router.get("/{listing_id}")
def get_availability(
    listing_id: UUID = Path(..., description="Listing UUID"),
) -> list[dict]:
    """Days explicitly blocked by the host."""
    return availability.get_blocked_dates(str(listing_id))


@router.get("/{listing_id}/unavailable")
def get_unavailable(
    listing_id: UUID = Path(..., description="Listing UUID"),
) -> list[dict]:
    """Days that cannot be booked: active reservations plus blocked days."""
    return availability.get_unavailable_dates(str(listing_id))
