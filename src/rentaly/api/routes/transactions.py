"""Transaction endpoints (admin)."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Path
from pydantic import BaseModel

from rentaly.api.auth import CurrentUser, get_current_user
from rentaly.domain.transactions import update_transaction

router = APIRouter(prefix="/transactions", tags=["transactions"])


class UpdateTransactionRequest(BaseModel):
    statut: str | None = None
    etat: str | None = None


@router.patch("/{transaction_id}")
def patch_transaction(
    body: UpdateTransactionRequest,
    transaction_id: UUID = Path(..., description="Transaction UUID"),
    user: CurrentUser = Depends(get_current_user),
) -> dict:
    """Set statut and/or etat; a (réussi, payer) result marks the reservation paid."""
    return update_transaction(
        str(transaction_id),
        is_admin=user.is_admin,
        statut=body.statut,
        etat=body.etat,
    )
