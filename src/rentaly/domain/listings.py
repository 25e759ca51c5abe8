"""Listing lifecycle: host creation, host-only update and soft delete.

Deleting a listing stamps ``deleted_at``. The listing then disappears from
reads, bookings and reservation lists, but its reservations and
transactions stay in the store.
"""

from __future__ import annotations

from typing import Any

from psycopg2.extensions import cursor as PgCursor

from rentaly.domain.errors import AuthorizationError, ListingNotFoundError, ValidationError
from rentaly.domain.statuses import RentalType, parse_enum
from rentaly.domain.validation import parse_price, parse_uuid, require_text
from rentaly.infra.db import txn
from rentaly.infra.repositories.listings_repository import (
    get_listing,
    insert_listing,
    list_images,
    replace_images,
    soft_delete_listing,
    update_listing_fields,
)
from rentaly.infra.repositories.users_repository import get_public_users
from rentaly.observability.logging import get_logger
from rentaly.observability.redaction import safe_log_context

logger = get_logger(__name__)

_PRICE_FIELDS = ("price", "price_per_month", "visit_price")


def _parse_amenities(value: object) -> dict[str, bool]:
    if not isinstance(value, dict):
        raise ValidationError("amenities must be an object")
    return {str(key): bool(flag) for key, flag in value.items()}


def _parse_images(value: object) -> list[str]:
    if not isinstance(value, list):
        raise ValidationError("images must be a list")
    return [require_text(url, "images") for url in value]


def _view(cur: PgCursor, listing: dict[str, Any]) -> dict[str, Any]:
    view = dict(listing)
    view["images"] = list_images(cur, [listing["id"]]).get(listing["id"], [])
    view["user"] = get_public_users(cur, [listing["user_id"]]).get(listing["user_id"])
    return view


def _load_owned(cur: PgCursor, listing_id: str, actor_id: str) -> dict[str, Any]:
    listing = get_listing(cur, listing_id, lock=True)
    if listing is None:
        raise ListingNotFoundError("Annonce non trouvée")
    if listing["user_id"] != actor_id:
        raise AuthorizationError("Accès interdit")
    return listing


def create_listing(
    owner_id: str,
    *,
    title: object,
    rental_type: object = None,
    price: object = None,
    price_per_month: object = None,
    visit_price: object = None,
    amenities: object = None,
    images: object = None,
) -> dict[str, Any]:
    """Create a listing owned by the caller.

    A short-term listing needs a nightly ``price``, a monthly one a
    ``price_per_month``. Negative prices are stored as 0.

    Raises:
        ValidationError: Missing title or required price, unknown rental
            type, or malformed amenities/images.
    """
    title = require_text(title, "title")
    kind = parse_enum(RentalType, rental_type or RentalType.SHORT_TERM.value, "rental_type")
    prices = {
        "price": parse_price(price, "price"),
        "price_per_month": parse_price(price_per_month, "price_per_month"),
        "visit_price": parse_price(visit_price, "visit_price"),
    }
    if kind is RentalType.SHORT_TERM and prices["price"] is None:
        raise ValidationError("Missing required field: price")
    if kind is RentalType.MONTHLY and prices["price_per_month"] is None:
        raise ValidationError("Missing required field: price_per_month")
    amenity_flags = _parse_amenities(amenities) if amenities is not None else {}
    urls = _parse_images(images) if images is not None else []

    with txn() as cur:
        listing = insert_listing(
            cur,
            user_id=owner_id,
            title=title,
            rental_type=kind.value,
            amenities=amenity_flags,
            **prices,
        )
        if urls:
            replace_images(cur, listing["id"], urls)
        view = _view(cur, listing)

    logger.info(
        "listing created",
        extra={
            "extra_fields": safe_log_context(
                listing_id_prefix=listing["id"][:8],
                owner_id_prefix=owner_id[:8],
                rental_type=kind.value,
            )
        },
    )
    return view


def get_listing_view(listing_id: object) -> dict[str, Any]:
    """A live listing with its images and its owner's public profile."""
    listing_id = parse_uuid(listing_id, "listingId")
    with txn() as cur:
        listing = get_listing(cur, listing_id)
        if listing is None:
            raise ListingNotFoundError("Annonce non trouvée")
        return _view(cur, listing)


def update_listing(
    listing_id: object, *, actor_id: str, changes: dict[str, Any]
) -> dict[str, Any]:
    """Apply the provided fields to a listing the caller owns.

    Absent or null fields are left alone. Amenities are merged into the
    stored ones; an images list replaces the stored images.

    Raises:
        ValidationError: Nothing to update, or a malformed field.
        ListingNotFoundError: Unknown or deleted listing.
        AuthorizationError: Caller does not own the listing.
    """
    listing_id = parse_uuid(listing_id, "listingId")
    changes = {key: value for key, value in changes.items() if value is not None}
    if not changes:
        raise ValidationError("Aucune donnée fournie pour la mise à jour")

    fields: dict[str, Any] = {}
    if "title" in changes:
        fields["title"] = require_text(changes["title"], "title")
    if "rental_type" in changes:
        fields["rental_type"] = parse_enum(RentalType, changes["rental_type"], "rental_type").value
    for field in _PRICE_FIELDS:
        if field in changes:
            fields[field] = parse_price(changes[field], field)
    amenity_flags = _parse_amenities(changes["amenities"]) if "amenities" in changes else None
    urls = _parse_images(changes["images"]) if "images" in changes else None

    with txn() as cur:
        listing = _load_owned(cur, listing_id, actor_id)
        if amenity_flags is not None:
            fields["amenities"] = {**listing["amenities"], **amenity_flags}
        if fields:
            listing = update_listing_fields(cur, listing_id, fields)
        if urls is not None:
            replace_images(cur, listing_id, urls)
        view = _view(cur, listing)

    logger.info(
        "listing updated",
        extra={
            "extra_fields": safe_log_context(
                listing_id_prefix=listing_id[:8],
                fields=",".join(sorted(changes)),
            )
        },
    )
    return view


def delete_listing(listing_id: object, *, actor_id: str) -> dict[str, str]:
    """Soft-delete a listing the caller owns.

    Raises:
        ListingNotFoundError: Unknown or already deleted listing.
        AuthorizationError: Caller does not own the listing.
    """
    listing_id = parse_uuid(listing_id, "listingId")
    with txn() as cur:
        _load_owned(cur, listing_id, actor_id)
        soft_delete_listing(cur, listing_id)

    logger.info(
        "listing deleted",
        extra={"extra_fields": safe_log_context(listing_id_prefix=listing_id[:8])},
    )
    return {"message": "Listing supprimé avec succès"}
