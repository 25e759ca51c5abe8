"""Host dashboard endpoints."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query

from rentaly.api.auth import CurrentUser, get_current_user
from rentaly.domain.revenue import compute_revenue

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/revenue")
def revenue(
    start: date | None = Query(None, description="Window start (with end)"),
    end: date | None = Query(None, description="Window end (with start)"),
    day: date | None = Query(None, alias="date", description="Single night"),
    user: CurrentUser = Depends(get_current_user),
) -> dict:
    """Revenue of the caller's confirmed reservations.

    Without parameters the window is the current calendar year.
    """
    return compute_revenue(user.id, start=start, end=end, day=day)
