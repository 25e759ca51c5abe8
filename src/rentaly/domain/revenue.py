"""Host revenue aggregation over confirmed reservations.

For each confirmed reservation overlapping the window:

    clamped = [max(start, window_start), min(end, window_end)]
    nights  = days(clamped_end - clamped_start)        (end exclusive)
    gross   = price * nights                           (paid by clients)
    net     = (price - commission_per_night) * nights  (paid to host)

``monthlyRevenue`` adds the nightly price to the month of every clamped
night. Reservations contributing zero nights are skipped entirely.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any, Iterable

from rentaly.domain.dates import clamp_range, iter_days, month_key, nights_between
from rentaly.domain.errors import ValidationError
from rentaly.infra.db import txn
from rentaly.infra.repositories.reservations_repository import list_confirmed_for_host
from rentaly.infra.settings import Settings, load_settings
from rentaly.infra.time import today as utc_today


def resolve_revenue_window(
    start: date | None,
    end: date | None,
    day: date | None,
    today: date,
) -> tuple[date, date]:
    """Pick the reporting window from query parameters.

    - ``day`` alone: that single night, ``[day, day + 1]``;
    - ``start`` and ``end``: as given;
    - nothing: January 1 to December 31 of ``today``'s year.

    Raises:
        ValidationError: Only one of start/end, or start after end.
    """
    if day is not None:
        return day, day + timedelta(days=1)
    if start is not None and end is not None:
        if start > end:
            raise ValidationError("start must be on or before end")
        return start, end
    if start is not None or end is not None:
        raise ValidationError("start and end must be provided together")
    return date(today.year, 1, 1), date(today.year, 12, 31)


def summarize_revenue(
    reservations: Iterable[dict[str, Any]],
    window_start: date,
    window_end: date,
    commission_per_night: int,
) -> dict[str, Any]:
    """Aggregate rows carrying start_date, end_date and the nightly price."""
    total_reservations = 0
    total_nights = 0
    total_paid_by_clients = 0
    total_to_host = 0
    monthly: dict[str, int] = {}

    for reservation in reservations:
        start, end = clamp_range(
            reservation["start_date"], reservation["end_date"], window_start, window_end
        )
        nights = nights_between(start, end)
        if nights == 0:
            continue

        price = reservation["price"] or 0
        total_reservations += 1
        total_nights += nights
        total_paid_by_clients += price * nights
        total_to_host += (price - commission_per_night) * nights

        for night in iter_days(start, end - timedelta(days=1)):
            key = month_key(night)
            monthly[key] = monthly.get(key, 0) + price

    return {
        "totalReservations": total_reservations,
        "totalNights": total_nights,
        "totalPaidByClients": total_paid_by_clients,
        "totalToHost": total_to_host,
        "totalCommission": total_paid_by_clients - total_to_host,
        "monthlyRevenue": dict(sorted(monthly.items())),
    }


def compute_revenue(
    host_id: str,
    *,
    start: date | None = None,
    end: date | None = None,
    day: date | None = None,
    settings: Settings | None = None,
) -> dict[str, Any]:
    """Revenue summary for the host's confirmed reservations in the window."""
    settings = settings or load_settings()
    window_start, window_end = resolve_revenue_window(start, end, day, utc_today())

    with txn() as cur:
        rows = list_confirmed_for_host(cur, host_id, window_start, window_end)

    return summarize_revenue(rows, window_start, window_end, settings.commission_per_night)
