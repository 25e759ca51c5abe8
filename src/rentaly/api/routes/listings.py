"""Listing endpoints.

POST   /listings                → create (authenticated caller becomes owner)
GET    /listings/{listing_id}   → read (public)
PUT    /listings/{listing_id}   → partial update (owner only)
DELETE /listings/{listing_id}   → soft delete (owner only)
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, Path
from pydantic import BaseModel, ConfigDict

from rentaly.api.auth import CurrentUser, get_current_user
from rentaly.domain import listings

router = APIRouter(prefix="/listings", tags=["listings"])


# ── Schemas ───────────────────────────────────────────────────────────────────


class ListingRequest(BaseModel):
    """Body for POST and PUT; the domain validates values and required fields."""

    model_config = ConfigDict(extra="forbid")

    title: str | None = None
    rental_type: str | None = None
    price: int | float | str | None = None
    price_per_month: int | float | str | None = None
    visit_price: int | float | str | None = None
    amenities: dict[str, Any] | None = None
    images: list[str] | None = None


# ── Routes ────────────────────────────────────────────────────────────────────


@router.post("", status_code=201)
def create_listing(
    body: ListingRequest,
    user: CurrentUser = Depends(get_current_user),
) -> dict:
    return listings.create_listing(
        user.id,
        title=body.title,
        rental_type=body.rental_type,
        price=body.price,
        price_per_month=body.price_per_month,
        visit_price=body.visit_price,
        amenities=body.amenities,
        images=body.images,
    )


@router.get("/{listing_id}")
def get_listing(listing_id: UUID = Path(..., description="Listing UUID")) -> dict:
    return listings.get_listing_view(str(listing_id))


@router.put("/{listing_id}")
def update_listing(
    body: ListingRequest,
    listing_id: UUID = Path(..., description="Listing UUID"),
    user: CurrentUser = Depends(get_current_user),
) -> dict:
    """Update only the fields present in the body."""
    return listings.update_listing(
        str(listing_id),
        actor_id=user.id,
        changes=body.model_dump(exclude_unset=True),
    )


@router.delete("/{listing_id}")
def delete_listing(
    listing_id: UUID = Path(..., description="Listing UUID"),
    user: CurrentUser = Depends(get_current_user),
) -> dict:
    """Hide the listing; its reservations are kept."""
    return listings.delete_listing(str(listing_id), actor_id=user.id)
