"""Availability ledger: host overrides plus dates derived from reservations.

Three read views of a listing calendar:
- blocked dates: explicit ``is_available = false`` overrides only;
- booked dates: every day covered by a reservation, duplicates kept;
- unavailable dates: what a booking actually cannot use, i.e. days of
  non-cancelled reservations plus blocked overrides.
"""

from __future__ import annotations

from datetime import date
from typing import Any

from rentaly.domain.dates import expand_date_range, parse_calendar_date
from rentaly.domain.errors import AuthorizationError, ListingNotFoundError, ValidationError
from rentaly.domain.validation import parse_uuid
from rentaly.infra.db import txn
from rentaly.infra.repositories.availability_repository import (
    list_blocked_dates,
    upsert_availability,
)
from rentaly.infra.repositories.listings_repository import get_listing
from rentaly.infra.repositories.reservations_repository import list_date_ranges
from rentaly.infra.settings import Settings, load_settings
from rentaly.observability.logging import get_logger
from rentaly.observability.redaction import safe_log_context

logger = get_logger(__name__)


def get_blocked_dates(listing_id: str) -> list[dict[str, str]]:
    with txn() as cur:
        blocked = list_blocked_dates(cur, listing_id)
    return [{"date": day.isoformat()} for day in blocked]


def get_booked_dates(listing_id: str, *, include_cancelled: bool = True) -> list[dict[str, str]]:
    """Expand every dated reservation of the listing into calendar days.

    Overlapping reservations yield the same day more than once. Cancelled
    reservations are included unless ``include_cancelled`` is False.
    """
    with txn() as cur:
        ranges = list_date_ranges(cur, listing_id, include_cancelled=include_cancelled)

    booked: list[dict[str, str]] = []
    for start, end in ranges:
        booked.extend({"date": day} for day in expand_date_range(start, end))
    return booked


def get_unavailable_dates(listing_id: str) -> list[dict[str, str]]:
    """Sorted, unique union of active reservation days and blocked days."""
    with txn() as cur:
        ranges = list_date_ranges(cur, listing_id, include_cancelled=False)
        blocked = list_blocked_dates(cur, listing_id)

    days = {day.isoformat() for day in blocked}
    for start, end in ranges:
        days.update(expand_date_range(start, end))
    return [{"date": day} for day in sorted(days)]


def set_availability(
    listing_id: object,
    *,
    actor_id: str,
    dates: object,
    is_available: object,
    settings: Settings | None = None,
) -> dict[str, Any]:
    """Upsert host overrides for a list of days.

    The whole list is parsed before anything is written. Each day is then
    written in its own txn(), so a failure part-way leaves the earlier days
    stored.

    Raises:
        ValidationError: Bad listing id, dates not a list, is_available not
            a boolean, or a malformed date.
        ListingNotFoundError: Unknown listing.
        AuthorizationError: Caller does not own the listing.
    """
    settings = settings or load_settings()

    listing_id = parse_uuid(listing_id, "listingId")
    if not isinstance(dates, list):
        raise ValidationError("dates must be a list")
    if not isinstance(is_available, bool):
        raise ValidationError("isAvailable must be a boolean")

    days: list[date] = [
        parse_calendar_date(value, "dates", settings.local_timezone) for value in dates
    ]

    with txn() as cur:
        listing = get_listing(cur, listing_id)
    if listing is None:
        raise ListingNotFoundError("Annonce non trouvée")
    if listing["user_id"] != actor_id:
        raise AuthorizationError("Accès interdit")

    for day in days:
        with txn() as cur:
            upsert_availability(cur, listing_id=listing_id, day=day, is_available=is_available)

    logger.info(
        "availability updated",
        extra={
            "extra_fields": safe_log_context(
                listing_id_prefix=listing_id[:8],
                days=len(days),
                is_available=is_available,
            )
        },
    )
    return {"success": True, "updated": len(days)}
