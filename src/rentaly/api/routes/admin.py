"""Admin oversight endpoints."""

from fastapi import APIRouter, Depends, Query

from rentaly.api.access import require_admin
from rentaly.api.auth import CurrentUser
from rentaly.domain.projections import list_all_reservations

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/reservations")
def all_reservations(
    include_archived: bool = Query(False, description="Include archived reservations"),
    limit: int = Query(50, ge=1, le=200, description="Page size"),
    offset: int = Query(0, ge=0, description="Rows to skip"),
    admin: CurrentUser = Depends(require_admin),
) -> dict:
    """Every reservation on the marketplace, newest first."""
    return list_all_reservations(
        admin.id,
        is_admin=admin.is_admin,
        include_archived=include_archived,
        limit=limit,
        offset=offset,
    )
