"""Booked-dates endpoint used by listing calendars."""

from uuid import UUID

from fastapi import APIRouter, Path

from rentaly.domain.availability import get_booked_dates

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.get("/{listing_id}")
def booked_dates(listing_id: UUID = Path(..., description="Listing UUID")) -> list[dict]:
    """Every day covered by a reservation of the listing, cancelled ones included."""
    return get_booked_dates(str(listing_id))
