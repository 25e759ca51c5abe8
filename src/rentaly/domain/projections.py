"""Read-only reservation views for guests, hosts and admins.

A view is the reservation row plus its listing (with ordered images), the
guest's public profile and its transactions, with every date rendered as
ISO 8601. Mobile-money numbers are masked unless the viewer is the guest
who entered them or an admin.

Lists are paged newest first and return ``{"reservations": [...], "total": n}``.
Reservations of a soft-deleted listing drop out of every list but stay
reachable by id.
"""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Any

from psycopg2.extensions import cursor as PgCursor

from rentaly.domain.errors import AuthorizationError, ReservationNotFoundError
from rentaly.infra.db import txn
from rentaly.infra.repositories.listings_repository import get_listings_by_ids, list_images
from rentaly.infra.repositories.reservations_repository import (
    count_reservations,
    get_reservation,
    list_reservations,
)
from rentaly.infra.repositories.transactions_repository import list_for_reservations
from rentaly.infra.repositories.users_repository import get_public_users
from rentaly.observability.redaction import mask_account_number

DEFAULT_PAGE_SIZE = 50


def _iso(value: Any) -> Any:
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return value


def _serialize(row: dict[str, Any]) -> dict[str, Any]:
    return {key: _iso(value) for key, value in row.items()}


def _mask_numbers(row: dict[str, Any]) -> dict[str, Any]:
    if row.get("numero_mobile_money"):
        row["numero_mobile_money"] = mask_account_number(row["numero_mobile_money"])
    return row


def _build_views(
    cur: PgCursor,
    reservations: list[dict[str, Any]],
    *,
    viewer_id: str,
    is_admin: bool,
) -> list[dict[str, Any]]:
    """Attach listing, guest and transactions to each reservation."""
    reservation_ids = [r["id"] for r in reservations]
    listing_ids = sorted({r["listing_id"] for r in reservations})
    user_ids = sorted({r["user_id"] for r in reservations})

    listings = get_listings_by_ids(cur, listing_ids)
    images = list_images(cur, listing_ids)
    users = get_public_users(cur, user_ids)
    transactions = list_for_reservations(cur, reservation_ids)

    views = []
    for reservation in reservations:
        reveal = is_admin or reservation["user_id"] == viewer_id

        view = _serialize(reservation)
        view.pop("host_id", None)

        listing = listings.get(reservation["listing_id"])
        if listing is not None:
            listing = _serialize(listing)
            listing["images"] = images.get(reservation["listing_id"], [])
        view["listing"] = listing
        view["user"] = users.get(reservation["user_id"])
        view["transactions"] = [_serialize(t) for t in transactions.get(reservation["id"], [])]

        if not reveal:
            _mask_numbers(view)
            for transaction in view["transactions"]:
                _mask_numbers(transaction)

        views.append(view)
    return views


def _page(
    cur: PgCursor,
    *,
    viewer_id: str,
    is_admin: bool,
    limit: int,
    offset: int,
    **filters: Any,
) -> dict[str, Any]:
    reservations = list_reservations(cur, limit=limit, offset=offset, **filters)
    return {
        "reservations": _build_views(cur, reservations, viewer_id=viewer_id, is_admin=is_admin),
        "total": count_reservations(cur, **filters),
    }


def list_guest_reservations(
    viewer_id: str,
    *,
    include_archived: bool = False,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
) -> dict[str, Any]:
    """Trips booked by the viewer, one page plus the total count."""
    with txn() as cur:
        return _page(
            cur,
            viewer_id=viewer_id,
            is_admin=False,
            limit=limit,
            offset=offset,
            user_id=viewer_id,
            include_archived=include_archived,
        )


def list_host_reservations(
    viewer_id: str,
    *,
    listing_id: str | None = None,
    include_archived: bool = False,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
) -> dict[str, Any]:
    """Reservations on the viewer's listings, optionally one listing only."""
    with txn() as cur:
        return _page(
            cur,
            viewer_id=viewer_id,
            is_admin=False,
            limit=limit,
            offset=offset,
            host_id=viewer_id,
            listing_id=listing_id,
            include_archived=include_archived,
        )


def list_all_reservations(
    viewer_id: str,
    *,
    is_admin: bool,
    include_archived: bool = False,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
) -> dict[str, Any]:
    """Admin-wide listing.

    Raises:
        AuthorizationError: Viewer is not an admin.
    """
    if not is_admin:
        raise AuthorizationError("Accès réservé aux administrateurs")
    with txn() as cur:
        return _page(
            cur,
            viewer_id=viewer_id,
            is_admin=True,
            limit=limit,
            offset=offset,
            include_archived=include_archived,
        )


def get_reservation_view(
    reservation_id: str, *, viewer_id: str, is_admin: bool = False
) -> dict[str, Any]:
    """One reservation, visible to its guest, its host or an admin.

    Archived reservations stay reachable by id.

    Raises:
        ReservationNotFoundError: Unknown reservation.
        AuthorizationError: Viewer is not a party to it.
    """
    with txn() as cur:
        reservation = get_reservation(cur, reservation_id)
        if reservation is None:
            raise ReservationNotFoundError("Réservation non trouvée")
        if not (
            is_admin
            or reservation["user_id"] == viewer_id
            or reservation["host_id"] == viewer_id
        ):
            raise AuthorizationError("Vous n'êtes pas autorisé à consulter cette réservation")
        return _build_views(cur, [reservation], viewer_id=viewer_id, is_admin=is_admin)[0]
