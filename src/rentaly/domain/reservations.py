"""Reservation state machine.

Status moves pending -> confirmed -> cancelled and never back. Two side
flags, status_client (guest validated arrival) and status_hote (host saw
the payment), go from NULL to confirmed once.

Every transition runs inside one txn():
lock reservation -> check caller -> check state -> conditional write.
The conditional write repeats the state check in SQL; an empty result means
a concurrent request won and is reported as a ConflictError.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from psycopg2.extensions import cursor as PgCursor

from rentaly.domain.codes import reservation_code, transaction_reference
from rentaly.domain.dates import (
    parse_calendar_date,
    parse_optional_datetime,
    parse_time_of_day,
)
from rentaly.domain.errors import (
    AuthorizationError,
    ConflictError,
    DatesUnavailableError,
    ListingNotFoundError,
    ReservationNotFoundError,
    ValidationError,
)
from rentaly.domain.statuses import (
    PartyConfirmation,
    PaymentState,
    RentalType,
    ReservationStatus,
    TransactionStatus,
    parse_enum,
)
from rentaly.domain.transactions import is_settled, mark_reservation_transactions
from rentaly.domain.validation import optional_text, parse_amount, parse_uuid, require_text
from rentaly.infra.db import txn
from rentaly.infra.repositories.availability_repository import find_blocked_in_range
from rentaly.infra.repositories.listings_repository import get_listing
from rentaly.infra.repositories.reservations_repository import (
    confirm_for_host,
    delete_for_party,
    find_overlapping_reservation,
    get_reservation,
    insert_reservation,
    mark_archived,
    mark_arrival_validated,
    mark_cancelled,
    mark_confirmed_paid,
    mark_host_payment_confirmed,
)
from rentaly.infra.repositories.transactions_repository import (
    insert_transaction,
    list_for_reservation,
)
from rentaly.infra.settings import Settings, load_settings
from rentaly.infra.time import utc_now
from rentaly.observability.logging import get_logger
from rentaly.observability.redaction import safe_log_context

logger = get_logger(__name__)

MOTIF_CANCELLED_BY_GUEST = "Annulé par le client"
MOTIF_CANCELLED_BY_ADMIN = "Annulé par l'administrateur"
MOTIF_DEFAULT = "Annulé"


def _log_transition(event: str, reservation_id: str, **fields: Any) -> None:
    logger.info(
        event,
        extra={
            "extra_fields": safe_log_context(
                reservation_id_prefix=reservation_id[:8],
                **fields,
            )
        },
    )


def _lock_reservation(cur: PgCursor, reservation_id: str) -> dict[str, Any]:
    reservation = get_reservation(cur, reservation_id, lock=True)
    if reservation is None:
        raise ReservationNotFoundError("Réservation non trouvée")
    return reservation


def _ensure_dates_free(
    cur: PgCursor, listing_id: str, start_date: date, end_date: date
) -> None:
    """Reject a stay touching an active reservation or a blocked day."""
    if find_overlapping_reservation(
        cur, listing_id=listing_id, start_date=start_date, end_date=end_date
    ):
        raise DatesUnavailableError("Ces dates sont déjà réservées")
    blocked = find_blocked_in_range(cur, listing_id, start_date, end_date)
    if blocked is not None:
        raise DatesUnavailableError(f"Date indisponible: {blocked.isoformat()}")


def _archive_motif(motif: str | None, archived_at: datetime) -> str:
    return f"{motif or MOTIF_DEFAULT} - Archivé le {archived_at.isoformat()}"


# ── Creation ────────────────────────────────────────────


def create_reservation(
    *,
    guest_id: str,
    listing_id: object,
    type_transaction: object,
    start_date: object = None,
    end_date: object = None,
    total_price: object = None,
    message: object = None,
    nom_mobile_money: object = None,
    numero_mobile_money: object = None,
    check_in_hours: object = None,
    date_visite: object = None,
    heure_visite: object = None,
    settings: Settings | None = None,
) -> dict[str, Any]:
    """Book a listing: one pending reservation plus one pending transaction.

    Short-term listings need a stay (start_date..end_date, both inclusive)
    and a total price. Monthly listings book a visit instead (date_visite
    and heure_visite) charged at the listing's visit price.

    Both rows are written in one txn(); the listing row stays locked until
    commit so two bookings of the same listing are checked one after the
    other.

    Returns:
        {"success", "code_reservation", "reference_transaction",
         "reservation", "transaction"}

    Raises:
        ValidationError: Missing or malformed field.
        ListingNotFoundError: Unknown listing.
        DatesUnavailableError: Stay overlaps an active reservation or a
            blocked day (unless overbooking is allowed by settings).
    """
    settings = settings or load_settings()
    tz = settings.local_timezone

    listing_id = parse_uuid(listing_id, "listingId")
    type_transaction = require_text(type_transaction, "type_transaction")
    message = optional_text(message, "message")
    nom_mobile_money = optional_text(nom_mobile_money, "nom_mobile_money")
    numero_mobile_money = optional_text(numero_mobile_money, "numero_mobile_money")
    check_in = parse_optional_datetime(check_in_hours, "check_in_hours", tz)

    code = reservation_code()
    reference = transaction_reference()

    with txn() as cur:
        listing = get_listing(cur, listing_id, lock=True)
        if listing is None:
            raise ListingNotFoundError("Annonce non trouvée")

        rental_type = parse_enum(RentalType, listing["rental_type"], "rental_type")
        stay_start = stay_end = visit_day = visit_time = None

        if rental_type is RentalType.SHORT_TERM:
            stay_start = parse_calendar_date(start_date, "startDate", tz)
            stay_end = parse_calendar_date(end_date, "endDate", tz)
            if stay_start > stay_end:
                raise ValidationError("startDate must be on or before endDate")
            amount = parse_amount(total_price, "totalPrice")
            if not settings.allow_overbooking:
                _ensure_dates_free(cur, listing_id, stay_start, stay_end)
        else:
            visit_day = parse_calendar_date(date_visite, "date_visite", tz)
            visit_time = parse_time_of_day(heure_visite, "heure_visite")
            if not listing["visit_price"] or listing["visit_price"] <= 0:
                raise ValidationError("Cette annonce n'a pas de prix de visite")
            amount = int(listing["visit_price"])

        reservation = insert_reservation(
            cur,
            user_id=guest_id,
            listing_id=listing_id,
            start_date=stay_start,
            end_date=stay_end,
            total_price=amount,
            message=message,
            type_transaction=type_transaction,
            rental_type=rental_type.value,
            code_reservation=code,
            check_in_hours=check_in,
            date_visite=visit_day,
            heure_visite=visit_time,
            nom_mobile_money=nom_mobile_money,
            numero_mobile_money=numero_mobile_money,
        )
        transaction = insert_transaction(
            cur,
            reservation_id=reservation["id"],
            type_transaction=type_transaction,
            reference_transaction=reference,
            montant=amount,
            devise=settings.currency,
            nom_mobile_money=nom_mobile_money,
            numero_mobile_money=numero_mobile_money,
        )

    _log_transition(
        "reservation created",
        reservation["id"],
        rental_type=rental_type.value,
        code_reservation=code,
        amount=amount,
    )
    return {
        "success": True,
        "code_reservation": code,
        "reference_transaction": reference,
        "reservation": reservation,
        "transaction": transaction,
    }


# ── Transitions ─────────────────────────────────────────


def cancel_reservation(
    reservation_id: str, *, actor_id: str, is_admin: bool = False
) -> dict[str, Any]:
    """Cancel a reservation (guest owner or admin).

    Every transaction of the reservation becomes échoué. Cancelling an
    already-cancelled reservation only re-applies that cascade; its motif
    (and any archival annotation) is kept.

    Raises:
        ReservationNotFoundError: Unknown reservation.
        AuthorizationError: Caller is neither the guest nor an admin.
    """
    with txn() as cur:
        reservation = _lock_reservation(cur, reservation_id)

        is_guest = reservation["user_id"] == actor_id
        if not (is_guest or is_admin):
            raise AuthorizationError("Vous n'êtes pas autorisé à annuler cette réservation")

        already_cancelled = reservation["status"] == ReservationStatus.CANCELLED.value
        if not already_cancelled:
            motif = MOTIF_CANCELLED_BY_GUEST if is_guest else MOTIF_CANCELLED_BY_ADMIN
            reservation = mark_cancelled(cur, reservation_id, motif=motif)
            if reservation is None:
                raise ConflictError("La réservation a déjà été annulée")

        failed = mark_reservation_transactions(cur, reservation_id, TransactionStatus.FAILED)

    _log_transition(
        "reservation cancelled",
        reservation_id,
        by_admin=not is_guest,
        already_cancelled=already_cancelled,
        transactions_failed=failed,
    )
    return {
        "success": True,
        "message": "Réservation annulée avec succès",
        "reservation": reservation,
    }


def confirm_payment_by_host(reservation_id: str, *, actor_id: str) -> dict[str, Any]:
    """Host acknowledges a successful payment (sets status_hote).

    Raises:
        ReservationNotFoundError: Unknown reservation.
        AuthorizationError: Caller does not own the listing.
        ConflictError: Reservation cancelled, no successful transaction, or
            payment already confirmed.
    """
    with txn() as cur:
        reservation = _lock_reservation(cur, reservation_id)

        if reservation["host_id"] != actor_id:
            raise AuthorizationError("Vous n'êtes pas autorisé à confirmer cette réservation")
        if reservation["status"] == ReservationStatus.CANCELLED.value:
            raise ConflictError("Impossible de confirmer le paiement d'une réservation annulée")

        transactions = list_for_reservation(cur, reservation_id)
        if not any(t["statut"] == TransactionStatus.SUCCEEDED.value for t in transactions):
            raise ConflictError("Aucune transaction réussie trouvée pour cette réservation")
        if reservation["status_hote"] == PartyConfirmation.CONFIRMED.value:
            raise ConflictError("Le paiement a déjà été confirmé")

        updated = mark_host_payment_confirmed(cur, reservation_id)
        if updated is None:
            raise ConflictError("Le paiement a déjà été confirmé")

    _log_transition("host confirmed payment", reservation_id)
    return {"message": "Paiement confirmé avec succès", "reservation": updated}


def validate_arrival(reservation_id: str, *, actor_id: str) -> dict[str, Any]:
    """Guest confirms arrival (sets status_client).

    Raises:
        ReservationNotFoundError: Unknown reservation.
        AuthorizationError: Caller is not the guest.
        ConflictError: Not confirmed by the host, payment not settled, or
            arrival already validated.
    """
    with txn() as cur:
        reservation = _lock_reservation(cur, reservation_id)

        if reservation["user_id"] != actor_id:
            raise AuthorizationError("Vous n'êtes pas autorisé à valider cette réservation")
        if reservation["status"] != ReservationStatus.CONFIRMED.value:
            raise ConflictError(
                "La réservation doit être confirmée par l'hôte avant validation d'arrivée"
            )

        transactions = list_for_reservation(cur, reservation_id)
        if not any(is_settled(t) for t in transactions):
            raise ConflictError("Le paiement doit être validé avant de confirmer l'arrivée")
        if reservation["status_client"] == PartyConfirmation.CONFIRMED.value:
            raise ConflictError("L'arrivée a déjà été validée")

        updated = mark_arrival_validated(cur, reservation_id)
        if updated is None:
            raise ConflictError("L'arrivée a déjà été validée")

    _log_transition("guest validated arrival", reservation_id)
    return {"message": "Arrivée validée avec succès", "reservation": updated}


def host_confirm_reservation(reservation_id: str, *, actor_id: str) -> dict[str, int]:
    """Scoped confirm by the listing owner.

    The update itself carries the ownership and not-cancelled filters, so a
    count of 0 covers unknown ids, foreign listings and cancelled rows alike.
    """
    with txn() as cur:
        count = confirm_for_host(cur, reservation_id, actor_id)

    _log_transition("host confirmed reservation", reservation_id, count=count)
    return {"count": count}


def confirm_reservation_payment(reservation_id: str, *, is_admin: bool) -> dict[str, Any]:
    """Admin marks a reservation confirmed and fully paid.

    Every transaction of the reservation becomes (réussi, payer).

    Raises:
        AuthorizationError: Caller is not an admin.
        ReservationNotFoundError: Unknown reservation.
        ConflictError: Reservation is cancelled.
    """
    if not is_admin:
        raise AuthorizationError("Accès réservé aux administrateurs")

    with txn() as cur:
        reservation = _lock_reservation(cur, reservation_id)
        if reservation["status"] == ReservationStatus.CANCELLED.value:
            raise ConflictError("Impossible de confirmer une réservation annulée")

        updated = mark_confirmed_paid(cur, reservation_id)
        if updated is None:
            raise ConflictError("Impossible de confirmer une réservation annulée")
        settled = mark_reservation_transactions(
            cur, reservation_id, TransactionStatus.SUCCEEDED, PaymentState.PAID
        )

    _log_transition("admin confirmed reservation", reservation_id, transactions_settled=settled)
    return {
        "success": True,
        "message": "Réservation confirmée avec succès",
        "reservation": updated,
    }


def archive_reservation(
    reservation_id: str, *, actor_id: str, is_admin: bool = False
) -> dict[str, Any]:
    """Archive a cancelled reservation (listing owner or admin).

    The row is kept: ``archived_at`` is set and the motif gets an
    ``" - Archivé le <timestamp>"`` annotation. A reservation is archived at
    most once.

    Raises:
        ReservationNotFoundError: Unknown reservation.
        AuthorizationError: Caller is neither the host nor an admin.
        ConflictError: Reservation not cancelled, or already archived.
    """
    with txn() as cur:
        reservation = _lock_reservation(cur, reservation_id)

        if not (is_admin or reservation["host_id"] == actor_id):
            raise AuthorizationError("Vous n'êtes pas autorisé à archiver cette réservation")
        if reservation["status"] != ReservationStatus.CANCELLED.value:
            raise ConflictError("Seules les réservations annulées peuvent être archivées")
        if reservation["archived_at"] is not None:
            raise ConflictError("La réservation est déjà archivée")

        archived_at = utc_now()
        updated = mark_archived(
            cur,
            reservation_id,
            motif=_archive_motif(reservation["motif"], archived_at),
            archived_at=archived_at,
        )
        if updated is None:
            raise ConflictError("La réservation est déjà archivée")

    _log_transition("reservation archived", reservation_id, by_admin=is_admin)
    return {
        "success": True,
        "message": "Réservation archivée avec succès",
        "reservation": updated,
    }


def delete_reservation(reservation_id: str, *, actor_id: str) -> dict[str, int]:
    """Hard-delete a reservation the caller is party to (guest or host).

    Transactions are removed by the foreign key cascade.
    """
    with txn() as cur:
        count = delete_for_party(cur, reservation_id, actor_id)

    _log_transition("reservation deleted", reservation_id, count=count)
    return {"count": count}
