"""Listings repository - persistence for listings and their images.

Deletion is soft: `deleted_at` is stamped and the row stays as the FK target
of its reservations. get_listing() ignores deleted listings, so booking,
calendar and host actions on them see "not found"; get_listings_by_ids()
does not, so a reservation view keeps showing what was booked.
"""

from __future__ import annotations

from typing import Any

from psycopg2.extensions import cursor as PgCursor
from psycopg2.extras import Json

LISTING_COLUMNS = (
    "id",
    "user_id",
    "title",
    "rental_type",
    "price",
    "price_per_month",
    "visit_price",
    "amenities",
)

_COLS = ", ".join(LISTING_COLUMNS)

UPDATABLE_COLUMNS = frozenset(
    {"title", "rental_type", "price", "price_per_month", "visit_price", "amenities"}
)


def _row_to_listing(row: tuple[Any, ...]) -> dict[str, Any]:
    listing = dict(zip(LISTING_COLUMNS, row))
    listing["id"] = str(listing["id"])
    listing["user_id"] = str(listing["user_id"])
    listing["amenities"] = listing["amenities"] or {}
    return listing


def get_listing(
    cur: PgCursor, listing_id: str, *, lock: bool = False
) -> dict[str, Any] | None:
    """Fetch one listing.

    Args:
        cur: Database cursor.
        listing_id: Listing UUID.
        lock: Hold a row lock until commit; reservation creation uses it to
            serialize bookings of the same listing.
    """
    query = f"SELECT {_COLS} FROM listings WHERE id = %s AND deleted_at IS NULL"
    if lock:
        query += " FOR UPDATE"
    cur.execute(query, (listing_id,))
    row = cur.fetchone()
    return _row_to_listing(row) if row else None


def get_listings_by_ids(cur: PgCursor, listing_ids: list[str]) -> dict[str, dict[str, Any]]:
    if not listing_ids:
        return {}
    cur.execute(
        f"SELECT {_COLS} FROM listings WHERE id = ANY(%s::uuid[])",
        (listing_ids,),
    )
    listings = (_row_to_listing(row) for row in cur.fetchall())
    return {listing["id"]: listing for listing in listings}


def list_images(cur: PgCursor, listing_ids: list[str]) -> dict[str, list[dict[str, Any]]]:
    """Images per listing, in display order."""
    images: dict[str, list[dict[str, Any]]] = {lid: [] for lid in listing_ids}
    if not listing_ids:
        return images

    cur.execute(
        """
        SELECT id, listing_id, url
        FROM listing_images
        WHERE listing_id = ANY(%s::uuid[])
        ORDER BY listing_id, position, id
        """,
        (listing_ids,),
    )
    for image_id, listing_id, url in cur.fetchall():
        images.setdefault(str(listing_id), []).append({"id": str(image_id), "url": url})
    return images


def insert_listing(
    cur: PgCursor,
    *,
    user_id: str,
    title: str,
    rental_type: str,
    price: int | None,
    price_per_month: int | None,
    visit_price: int | None,
    amenities: dict[str, bool],
) -> dict[str, Any]:
    cur.execute(
        f"""
        INSERT INTO listings (
            user_id, title, rental_type, price, price_per_month, visit_price, amenities
        )
        VALUES (%s, %s, %s, %s, %s, %s, %s)
        RETURNING {_COLS}
        """,
        (user_id, title, rental_type, price, price_per_month, visit_price, Json(amenities)),
    )
    return _row_to_listing(cur.fetchone())


def update_listing_fields(
    cur: PgCursor, listing_id: str, fields: dict[str, Any]
) -> dict[str, Any] | None:
    """Set the given columns on a live listing.

    Returns:
        The updated listing, or None if it does not exist or was deleted.

    Raises:
        ValueError: A key is not an updatable column.
    """
    unknown = set(fields) - UPDATABLE_COLUMNS
    if unknown:
        raise ValueError(f"Not updatable: {sorted(unknown)}")

    columns = sorted(fields)
    assignments = ", ".join(f"{column} = %s" for column in columns)
    params: list[Any] = [
        Json(fields[column]) if column == "amenities" else fields[column] for column in columns
    ]
    params.append(listing_id)

    cur.execute(
        f"""
        UPDATE listings
        SET {assignments}, updated_at = now()
        WHERE id = %s AND deleted_at IS NULL
        RETURNING {_COLS}
        """,
        params,
    )
    row = cur.fetchone()
    return _row_to_listing(row) if row else None


def soft_delete_listing(cur: PgCursor, listing_id: str) -> bool:
    """Stamp deleted_at; False if the listing was already gone."""
    cur.execute(
        """
        UPDATE listings
        SET deleted_at = now(), updated_at = now()
        WHERE id = %s AND deleted_at IS NULL
        RETURNING id
        """,
        (listing_id,),
    )
    return cur.fetchone() is not None


def replace_images(cur: PgCursor, listing_id: str, urls: list[str]) -> None:
    """Replace the listing's images; list order becomes display order."""
    cur.execute("DELETE FROM listing_images WHERE listing_id = %s", (listing_id,))
    for position, url in enumerate(urls):
        cur.execute(
            """
            INSERT INTO listing_images (listing_id, url, position)
            VALUES (%s, %s, %s)
            """,
            (listing_id, url, position),
        )
