"""Reservations repository - persistence for reservation records.

Uses raw SQL with psycopg2 (no ORM). State transitions are conditional
updates: the WHERE clause repeats the precondition, and an empty RETURNING
tells the caller the precondition no longer held at write time.
"""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Any

from psycopg2.extensions import cursor as PgCursor

from rentaly.domain.statuses import (
    PartyConfirmation,
    PaymentState,
    ReservationStatus,
    TransactionStatus,
)

RESERVATION_COLUMNS = (
    "id",
    "user_id",
    "listing_id",
    "start_date",
    "end_date",
    "total_price",
    "message",
    "type_transaction",
    "status",
    "status_client",
    "status_hote",
    "etat",
    "rental_type",
    "motif",
    "code_reservation",
    "check_in_hours",
    "date_visite",
    "heure_visite",
    "nom_mobile_money",
    "numero_mobile_money",
    "archived_at",
    "created_at",
    "updated_at",
)

_COLS = ", ".join(f"r.{c}" for c in RESERVATION_COLUMNS)
_RETURNING = ", ".join(RESERVATION_COLUMNS)

_CANCELLED = ReservationStatus.CANCELLED.value
_CONFIRMED = ReservationStatus.CONFIRMED.value


def _row_to_reservation(row: tuple[Any, ...]) -> dict[str, Any]:
    """Map a RESERVATION_COLUMNS row (optionally followed by host_id)."""
    reservation = dict(zip(RESERVATION_COLUMNS, row))
    for key in ("id", "user_id", "listing_id"):
        reservation[key] = str(reservation[key])
    if len(row) > len(RESERVATION_COLUMNS):
        reservation["host_id"] = str(row[len(RESERVATION_COLUMNS)])
    return reservation


def insert_reservation(
    cur: PgCursor,
    *,
    user_id: str,
    listing_id: str,
    start_date: date | None,
    end_date: date | None,
    total_price: int,
    message: str | None,
    type_transaction: str,
    rental_type: str,
    code_reservation: str,
    check_in_hours: datetime | None = None,
    date_visite: date | None = None,
    heure_visite: time | None = None,
    nom_mobile_money: str | None = None,
    numero_mobile_money: str | None = None,
) -> dict[str, Any]:
    """Insert a pending, unpaid reservation and return the stored row."""
    cur.execute(
        f"""
        INSERT INTO reservations (
            user_id, listing_id, start_date, end_date, total_price,
            message, type_transaction, status, etat, rental_type,
            code_reservation, check_in_hours, date_visite, heure_visite,
            nom_mobile_money, numero_mobile_money
        )
        VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
        RETURNING {_RETURNING}
        """,
        (
            user_id,
            listing_id,
            start_date,
            end_date,
            total_price,
            message,
            type_transaction,
            ReservationStatus.PENDING.value,
            PaymentState.UNPAID.value,
            rental_type,
            code_reservation,
            check_in_hours,
            date_visite,
            heure_visite,
            nom_mobile_money,
            numero_mobile_money,
        ),
    )
    return _row_to_reservation(cur.fetchone())


def get_reservation(
    cur: PgCursor, reservation_id: str, *, lock: bool = False
) -> dict[str, Any] | None:
    """Fetch a reservation with its listing owner as ``host_id``.

    Args:
        cur: Database cursor.
        reservation_id: Reservation UUID.
        lock: Lock the reservation row (not the listing) until commit.
    """
    query = f"""
        SELECT {_COLS}, l.user_id
        FROM reservations r
        JOIN listings l ON l.id = r.listing_id
        WHERE r.id = %s
    """
    if lock:
        query += " FOR UPDATE OF r"
    cur.execute(query, (reservation_id,))
    row = cur.fetchone()
    if row is None:
        return None
    return _row_to_reservation(row)


def find_overlapping_reservation(
    cur: PgCursor,
    *,
    listing_id: str,
    start_date: date,
    end_date: date,
) -> str | None:
    """Return the id of an active reservation intersecting the inclusive range.

    Overlap formula: existing.start <= new.end AND existing.end >= new.start.
    Both bounds are occupied days, so a stay ending on day D blocks D.
    """
    cur.execute(
        """
        SELECT id FROM reservations
        WHERE listing_id = %s
          AND status <> %s
          AND start_date IS NOT NULL AND end_date IS NOT NULL
          AND start_date <= %s
          AND end_date >= %s
        ORDER BY start_date
        LIMIT 1
        """,
        (listing_id, _CANCELLED, end_date, start_date),
    )
    row = cur.fetchone()
    return str(row[0]) if row else None


def mark_cancelled(
    cur: PgCursor, reservation_id: str, *, motif: str
) -> dict[str, Any] | None:
    """pending/confirmed -> cancelled. None if already cancelled or missing."""
    cur.execute(
        f"""
        UPDATE reservations
        SET status = %s, motif = %s, updated_at = now()
        WHERE id = %s AND status <> %s
        RETURNING {_RETURNING}
        """,
        (_CANCELLED, motif, reservation_id, _CANCELLED),
    )
    row = cur.fetchone()
    return _row_to_reservation(row) if row else None


def mark_host_payment_confirmed(cur: PgCursor, reservation_id: str) -> dict[str, Any] | None:
    """Set status_hote, only if unset, not cancelled, and a payment succeeded."""
    cur.execute(
        f"""
        UPDATE reservations
        SET status_hote = %s, updated_at = now()
        WHERE id = %s
          AND status <> %s
          AND status_hote IS NULL
          AND EXISTS (
              SELECT 1 FROM transactions t
              WHERE t.reservation_id = reservations.id AND t.statut = %s
          )
        RETURNING {_RETURNING}
        """,
        (
            PartyConfirmation.CONFIRMED.value,
            reservation_id,
            _CANCELLED,
            TransactionStatus.SUCCEEDED.value,
        ),
    )
    row = cur.fetchone()
    return _row_to_reservation(row) if row else None


def mark_arrival_validated(cur: PgCursor, reservation_id: str) -> dict[str, Any] | None:
    """Set status_client, only if confirmed, unset, and a paid transaction exists."""
    cur.execute(
        f"""
        UPDATE reservations
        SET status_client = %s, updated_at = now()
        WHERE id = %s
          AND status = %s
          AND status_client IS NULL
          AND EXISTS (
              SELECT 1 FROM transactions t
              WHERE t.reservation_id = reservations.id
                AND t.statut = %s AND t.etat = %s
          )
        RETURNING {_RETURNING}
        """,
        (
            PartyConfirmation.CONFIRMED.value,
            reservation_id,
            _CONFIRMED,
            TransactionStatus.SUCCEEDED.value,
            PaymentState.PAID.value,
        ),
    )
    row = cur.fetchone()
    return _row_to_reservation(row) if row else None


def confirm_for_host(cur: PgCursor, reservation_id: str, host_id: str) -> int:
    """Scoped confirm: only rows on the host's listings, never cancelled ones.

    Returns:
        Number of updated rows (0 or 1).
    """
    cur.execute(
        """
        UPDATE reservations r
        SET status = %s, updated_at = now()
        FROM listings l
        WHERE r.id = %s
          AND l.id = r.listing_id
          AND l.user_id = %s
          AND r.status <> %s
        """,
        (_CONFIRMED, reservation_id, host_id, _CANCELLED),
    )
    return cur.rowcount


def mark_confirmed_paid(cur: PgCursor, reservation_id: str) -> dict[str, Any] | None:
    """status=confirmed and etat=payer in one write, never from cancelled."""
    cur.execute(
        f"""
        UPDATE reservations
        SET status = %s, etat = %s, updated_at = now()
        WHERE id = %s AND status <> %s
        RETURNING {_RETURNING}
        """,
        (_CONFIRMED, PaymentState.PAID.value, reservation_id, _CANCELLED),
    )
    row = cur.fetchone()
    return _row_to_reservation(row) if row else None


def mark_archived(
    cur: PgCursor,
    reservation_id: str,
    *,
    motif: str,
    archived_at: datetime,
) -> dict[str, Any] | None:
    """Archive a cancelled reservation once. None if not cancelled or archived."""
    cur.execute(
        f"""
        UPDATE reservations
        SET motif = %s, archived_at = %s, updated_at = now()
        WHERE id = %s AND status = %s AND archived_at IS NULL
        RETURNING {_RETURNING}
        """,
        (motif, archived_at, reservation_id, _CANCELLED),
    )
    row = cur.fetchone()
    return _row_to_reservation(row) if row else None


def set_payment_state(cur: PgCursor, reservation_id: str, etat: PaymentState) -> None:
    cur.execute(
        "UPDATE reservations SET etat = %s, updated_at = now() WHERE id = %s",
        (etat.value, reservation_id),
    )


def delete_for_party(cur: PgCursor, reservation_id: str, user_id: str) -> int:
    """Delete a reservation if the user is its guest or the listing owner.

    Transactions go with it (ON DELETE CASCADE).

    Returns:
        Number of deleted rows; 0 covers both "not found" and "not allowed".
    """
    cur.execute(
        """
        DELETE FROM reservations r
        USING listings l
        WHERE r.id = %s
          AND l.id = r.listing_id
          AND (r.user_id = %s OR l.user_id = %s)
        """,
        (reservation_id, user_id, user_id),
    )
    return cur.rowcount


def list_date_ranges(
    cur: PgCursor, listing_id: str, *, include_cancelled: bool = True
) -> list[tuple[date, date]]:
    """Return (start_date, end_date) of every dated reservation on a listing."""
    conditions = ["listing_id = %s", "start_date IS NOT NULL", "end_date IS NOT NULL"]
    params: list[Any] = [listing_id]
    if not include_cancelled:
        conditions.append("status <> %s")
        params.append(_CANCELLED)

    cur.execute(
        f"""
        SELECT start_date, end_date
        FROM reservations
        WHERE {" AND ".join(conditions)}
        ORDER BY start_date
        """,
        params,
    )
    return [(row[0], row[1]) for row in cur.fetchall()]


def list_confirmed_for_host(
    cur: PgCursor, host_id: str, window_start: date, window_end: date
) -> list[dict[str, Any]]:
    """Confirmed reservations on the host's listings overlapping the window."""
    cur.execute(
        """
        SELECT r.id, r.start_date, r.end_date, l.price
        FROM reservations r
        JOIN listings l ON l.id = r.listing_id
        WHERE r.status = %s
          AND l.user_id = %s
          AND r.start_date IS NOT NULL AND r.end_date IS NOT NULL
          AND r.start_date <= %s
          AND r.end_date >= %s
        ORDER BY r.start_date
        """,
        (_CONFIRMED, host_id, window_end, window_start),
    )
    return [
        {
            "id": str(row[0]),
            "start_date": row[1],
            "end_date": row[2],
            "price": row[3],
        }
        for row in cur.fetchall()
    ]


def _reservation_filters(
    *,
    user_id: str | None,
    listing_id: str | None,
    host_id: str | None,
    include_archived: bool,
) -> tuple[str, list[Any]]:
    # Reservations of soft-deleted listings stay in the table but drop out of lists
    conditions: list[str] = ["l.deleted_at IS NULL"]
    params: list[Any] = []

    if user_id:
        conditions.append("r.user_id = %s")
        params.append(user_id)
    if listing_id:
        conditions.append("r.listing_id = %s")
        params.append(listing_id)
    if host_id:
        conditions.append("l.user_id = %s")
        params.append(host_id)
    if not include_archived:
        conditions.append("r.archived_at IS NULL")

    return f"WHERE {' AND '.join(conditions)}", params


def list_reservations(
    cur: PgCursor,
    *,
    user_id: str | None = None,
    listing_id: str | None = None,
    host_id: str | None = None,
    include_archived: bool = False,
    limit: int = 50,
    offset: int = 0,
) -> list[dict[str, Any]]:
    """List reservations, newest first, one page at a time."""
    where_clause, params = _reservation_filters(
        user_id=user_id,
        listing_id=listing_id,
        host_id=host_id,
        include_archived=include_archived,
    )
    params.extend([limit, offset])

    cur.execute(
        f"""
        SELECT {_COLS}, l.user_id
        FROM reservations r
        JOIN listings l ON l.id = r.listing_id
        {where_clause}
        ORDER BY r.created_at DESC, r.id
        LIMIT %s OFFSET %s
        """,
        params,
    )
    return [_row_to_reservation(row) for row in cur.fetchall()]


def count_reservations(
    cur: PgCursor,
    *,
    user_id: str | None = None,
    listing_id: str | None = None,
    host_id: str | None = None,
    include_archived: bool = False,
) -> int:
    """Number of reservations list_reservations pages through."""
    where_clause, params = _reservation_filters(
        user_id=user_id,
        listing_id=listing_id,
        host_id=host_id,
        include_archived=include_archived,
    )
    cur.execute(
        f"""
        SELECT COUNT(*)
        FROM reservations r
        JOIN listings l ON l.id = r.listing_id
        {where_clause}
        """,
        params,
    )
    return cur.fetchone()[0]
