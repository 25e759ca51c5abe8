"""Transaction ledger - payment attempts attached to reservations.

A transaction that ends up (réussi, payer) marks its reservation paid in
the same database transaction.
"""

from __future__ import annotations

from typing import Any

from psycopg2.extensions import cursor as PgCursor

from rentaly.domain.errors import AuthorizationError, TransactionNotFoundError
from rentaly.domain.statuses import PaymentState, TransactionStatus, parse_enum
from rentaly.infra.db import txn
from rentaly.infra.repositories.reservations_repository import set_payment_state
from rentaly.infra.repositories.transactions_repository import (
    get_transaction,
    set_status_for_reservation,
    update_fields,
)
from rentaly.observability.logging import get_logger
from rentaly.observability.redaction import safe_log_context

logger = get_logger(__name__)


def is_settled(transaction: dict[str, Any]) -> bool:
    """True when the transaction both succeeded and is fully paid."""
    return (
        transaction["statut"] == TransactionStatus.SUCCEEDED.value
        and transaction["etat"] == PaymentState.PAID.value
    )


def mark_reservation_transactions(
    cur: PgCursor,
    reservation_id: str,
    statut: TransactionStatus,
    etat: PaymentState | None = None,
) -> int:
    """Force every transaction of a reservation to one outcome.

    Runs on the caller's cursor so it commits (or not) with the reservation
    transition that triggered it.
    """
    return set_status_for_reservation(cur, reservation_id, statut, etat)


def update_transaction(
    transaction_id: str,
    *,
    is_admin: bool,
    statut: object = None,
    etat: object = None,
) -> dict[str, Any]:
    """Admin edit of a transaction's statut and/or etat.

    Omitted fields are left as stored. The cascade decision uses the merged
    result, so setting only ``etat=payer`` on an already ``réussi``
    transaction still marks the reservation paid.

    Raises:
        AuthorizationError: Caller is not an admin.
        ValidationError: Value outside the enumerated sets.
        TransactionNotFoundError: No such transaction.
    """
    if not is_admin:
        raise AuthorizationError("Accès réservé aux administrateurs")

    new_statut = parse_enum(TransactionStatus, statut, "statut") if statut is not None else None
    new_etat = parse_enum(PaymentState, etat, "etat") if etat is not None else None

    with txn() as cur:
        if get_transaction(cur, transaction_id, lock=True) is None:
            raise TransactionNotFoundError("Transaction non trouvée")

        transaction = update_fields(cur, transaction_id, statut=new_statut, etat=new_etat)

        cascaded = is_settled(transaction)
        if cascaded:
            set_payment_state(cur, transaction["reservation_id"], PaymentState.PAID)

    logger.info(
        "transaction updated",
        extra={
            "extra_fields": safe_log_context(
                transaction_id_prefix=transaction_id[:8],
                statut=transaction["statut"],
                etat=transaction["etat"],
                reservation_marked_paid=cascaded,
            )
        },
    )
    return {"success": True, "transaction": transaction}
