"""Transactions repository - payment records attached to reservations.

Uses raw SQL with psycopg2 (no ORM).
"""

from __future__ import annotations

from typing import Any

from psycopg2.extensions import cursor as PgCursor

from rentaly.domain.statuses import PaymentState, TransactionStatus

TRANSACTION_COLUMNS = (
    "id",
    "reservation_id",
    "type_transaction",
    "nom_mobile_money",
    "numero_mobile_money",
    "reference_transaction",
    "montant",
    "devise",
    "statut",
    "etat",
    "date_transaction",
)

_RETURNING = ", ".join(TRANSACTION_COLUMNS)


def _row_to_transaction(row: tuple[Any, ...]) -> dict[str, Any]:
    transaction = dict(zip(TRANSACTION_COLUMNS, row))
    transaction["id"] = str(transaction["id"])
    transaction["reservation_id"] = str(transaction["reservation_id"])
    return transaction


def insert_transaction(
    cur: PgCursor,
    *,
    reservation_id: str,
    type_transaction: str,
    reference_transaction: str,
    montant: int,
    devise: str,
    nom_mobile_money: str | None = None,
    numero_mobile_money: str | None = None,
) -> dict[str, Any]:
    """Insert a pending, unpaid payment attempt for a reservation."""
    cur.execute(
        f"""
        INSERT INTO transactions (
            reservation_id, type_transaction, nom_mobile_money,
            numero_mobile_money, reference_transaction, montant, devise,
            statut, etat, date_transaction
        )
        VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, now())
        RETURNING {_RETURNING}
        """,
        (
            reservation_id,
            type_transaction,
            nom_mobile_money,
            numero_mobile_money,
            reference_transaction,
            montant,
            devise,
            TransactionStatus.PENDING.value,
            PaymentState.UNPAID.value,
        ),
    )
    return _row_to_transaction(cur.fetchone())


def get_transaction(
    cur: PgCursor, transaction_id: str, *, lock: bool = False
) -> dict[str, Any] | None:
    query = f"SELECT {_RETURNING} FROM transactions WHERE id = %s"
    if lock:
        query += " FOR UPDATE"
    cur.execute(query, (transaction_id,))
    row = cur.fetchone()
    return _row_to_transaction(row) if row else None


def list_for_reservation(cur: PgCursor, reservation_id: str) -> list[dict[str, Any]]:
    cur.execute(
        f"""
        SELECT {_RETURNING} FROM transactions
        WHERE reservation_id = %s
        ORDER BY date_transaction
        """,
        (reservation_id,),
    )
    return [_row_to_transaction(row) for row in cur.fetchall()]


def list_for_reservations(
    cur: PgCursor, reservation_ids: list[str]
) -> dict[str, list[dict[str, Any]]]:
    """Group transactions by reservation id (one query for a page of views)."""
    grouped: dict[str, list[dict[str, Any]]] = {rid: [] for rid in reservation_ids}
    if not reservation_ids:
        return grouped

    cur.execute(
        f"""
        SELECT {_RETURNING} FROM transactions
        WHERE reservation_id = ANY(%s::uuid[])
        ORDER BY date_transaction
        """,
        (reservation_ids,),
    )
    for row in cur.fetchall():
        transaction = _row_to_transaction(row)
        grouped.setdefault(transaction["reservation_id"], []).append(transaction)
    return grouped


def update_fields(
    cur: PgCursor,
    transaction_id: str,
    *,
    statut: TransactionStatus | None = None,
    etat: PaymentState | None = None,
) -> dict[str, Any] | None:
    """Update statut and/or etat; omitted fields keep their stored value."""
    cur.execute(
        f"""
        UPDATE transactions
        SET statut = COALESCE(%s, statut),
            etat = COALESCE(%s, etat)
        WHERE id = %s
        RETURNING {_RETURNING}
        """,
        (
            statut.value if statut else None,
            etat.value if etat else None,
            transaction_id,
        ),
    )
    row = cur.fetchone()
    return _row_to_transaction(row) if row else None


def set_status_for_reservation(
    cur: PgCursor,
    reservation_id: str,
    statut: TransactionStatus,
    etat: PaymentState | None = None,
) -> int:
    """Bulk-update every transaction of a reservation. Returns the row count."""
    cur.execute(
        """
        UPDATE transactions
        SET statut = %s, etat = COALESCE(%s, etat)
        WHERE reservation_id = %s
        """,
        (statut.value, etat.value if etat else None, reservation_id),
    )
    return cur.rowcount
