"""Reservation endpoints for guests and hosts.

Ownership checks live in rentaly.domain.reservations; routes only resolve
the caller and shape the response.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query
from pydantic import BaseModel, ConfigDict, Field

from rentaly.api.auth import CurrentUser, get_current_user
from rentaly.domain import projections, reservations

router = APIRouter(prefix="/reservations", tags=["reservations"])


class CreateReservationRequest(BaseModel):
    """Request body for POST /reservations.

    Fields are optional at this layer; the domain reports which required
    field is missing for the listing's rental type.
    """

    model_config = ConfigDict(populate_by_name=True)

    listing_id: str | None = Field(None, alias="listingId")
    start_date: str | None = Field(None, alias="startDate")
    end_date: str | None = Field(None, alias="endDate")
    total_price: int | float | str | None = Field(None, alias="totalPrice")
    message: str | None = None
    type_transaction: str | None = None
    nom_mobile_money: str | None = None
    numero_mobile_money: str | None = None
    check_in_hours: str | None = None
    date_visite: str | None = None
    heure_visite: str | None = None


@router.get("")
def list_my_reservations(
    include_archived: bool = Query(False, description="Include archived reservations"),
    limit: int = Query(50, ge=1, le=200, description="Page size"),
    offset: int = Query(0, ge=0, description="Rows to skip"),
    user: CurrentUser = Depends(get_current_user),
) -> dict:
    """Trips booked by the caller, newest first, with the total count."""
    return projections.list_guest_reservations(
        user.id, include_archived=include_archived, limit=limit, offset=offset
    )


@router.get("/hosting")
def list_hosting_reservations(
    listing_id: UUID | None = Query(None, alias="listingId", description="Only this listing"),
    include_archived: bool = Query(False, description="Include archived reservations"),
    limit: int = Query(50, ge=1, le=200, description="Page size"),
    offset: int = Query(0, ge=0, description="Rows to skip"),
    user: CurrentUser = Depends(get_current_user),
) -> dict:
    """Reservations on the caller's listings."""
    return projections.list_host_reservations(
        user.id,
        listing_id=str(listing_id) if listing_id else None,
        include_archived=include_archived,
        limit=limit,
        offset=offset,
    )


@router.get("/{reservation_id}")
def get_reservation(
    reservation_id: UUID = Path(..., description="Reservation UUID"),
    user: CurrentUser = Depends(get_current_user),
) -> dict:
    return projections.get_reservation_view(
        str(reservation_id), viewer_id=user.id, is_admin=user.is_admin
    )


@router.post("")
def create_reservation(
    body: CreateReservationRequest,
    user: CurrentUser = Depends(get_current_user),
) -> dict:
    """Book a stay (short-term listing) or a visit (monthly listing)."""
    return reservations.create_reservation(
        guest_id=user.id,
        listing_id=body.listing_id,
        type_transaction=body.type_transaction,
        start_date=body.start_date,
        end_date=body.end_date,
        total_price=body.total_price,
        message=body.message,
        nom_mobile_money=body.nom_mobile_money,
        numero_mobile_money=body.numero_mobile_money,
        check_in_hours=body.check_in_hours,
        date_visite=body.date_visite,
        heure_visite=body.heure_visite,
    )


@router.delete("/{reservation_id}")
def delete_reservation(
    reservation_id: UUID = Path(..., description="Reservation UUID"),
    user: CurrentUser = Depends(get_current_user),
) -> dict:
    return reservations.delete_reservation(str(reservation_id), actor_id=user.id)


@router.patch("/{reservation_id}")
def host_confirm(
    reservation_id: UUID = Path(..., description="Reservation UUID"),
    user: CurrentUser = Depends(get_current_user),
) -> dict:
    """Host confirms a reservation on one of their listings."""
    return reservations.host_confirm_reservation(str(reservation_id), actor_id=user.id)


@router.patch("/{reservation_id}/confirm")
def admin_confirm(
    reservation_id: UUID = Path(..., description="Reservation UUID"),
    user: CurrentUser = Depends(get_current_user),
) -> dict:
    """Admin marks the reservation confirmed and paid."""
    return reservations.confirm_reservation_payment(str(reservation_id), is_admin=user.is_admin)


@router.patch("/{reservation_id}/cancel")
def cancel(
    reservation_id: UUID = Path(..., description="Reservation UUID"),
    user: CurrentUser = Depends(get_current_user),
) -> dict:
    result = reservations.cancel_reservation(
        str(reservation_id), actor_id=user.id, is_admin=user.is_admin
    )
    return {"success": result["success"], "message": result["message"]}


@router.patch("/{reservation_id}/archive")
def archive(
    reservation_id: UUID = Path(..., description="Reservation UUID"),
    user: CurrentUser = Depends(get_current_user),
) -> dict:
    result = reservations.archive_reservation(
        str(reservation_id), actor_id=user.id, is_admin=user.is_admin
    )
    return {"success": result["success"], "message": result["message"]}


@router.patch("/{reservation_id}/confirm-payment")
def confirm_payment(
    reservation_id: UUID = Path(..., description="Reservation UUID"),
    user: CurrentUser = Depends(get_current_user),
) -> dict:
    return reservations.confirm_payment_by_host(str(reservation_id), actor_id=user.id)


@router.patch("/{reservation_id}/validate-arrival")
def validate_arrival(
    reservation_id: UUID = Path(..., description="Reservation UUID"),
    user: CurrentUser = Depends(get_current_user),
) -> dict:
    return reservations.validate_arrival(str(reservation_id), actor_id=user.id)
