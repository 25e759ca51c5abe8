"""Availability repository - explicit per-day host overrides.

Uses raw SQL with psycopg2 (no ORM). One row per (listing_id, date); a
missing row means the host has not overridden that day.
"""

from datetime import date

from psycopg2.extensions import cursor as PgCursor


def list_blocked_dates(cur: PgCursor, listing_id: str) -> list[date]:
    """Days the host marked unavailable, ascending."""
    cur.execute(
        """
        SELECT date FROM availability
        WHERE listing_id = %s AND is_available = false
        ORDER BY date
        """,
        (listing_id,),
    )
    return [row[0] for row in cur.fetchall()]


def find_blocked_in_range(
    cur: PgCursor, listing_id: str, start_date: date, end_date: date
) -> date | None:
    """First blocked day inside the inclusive range, if any."""
    cur.execute(
        """
        SELECT date FROM availability
        WHERE listing_id = %s
          AND is_available = false
          AND date BETWEEN %s AND %s
        ORDER BY date
        LIMIT 1
        """,
        (listing_id, start_date, end_date),
    )
    row = cur.fetchone()
    return row[0] if row else None


def upsert_availability(
    cur: PgCursor, *, listing_id: str, day: date, is_available: bool
) -> None:
    """Create or overwrite the override for one day."""
    cur.execute(
        """
        INSERT INTO availability (listing_id, date, is_available)
        VALUES (%s, %s, %s)
        ON CONFLICT (listing_id, date)
        DO UPDATE SET is_available = EXCLUDED.is_available, updated_at = now()
        """,
        (listing_id, day, is_available),
    )
