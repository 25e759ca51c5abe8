"""Closed value sets for reservation, transaction and listing state.

Values match what is persisted (and what clients send), hence the French
payment vocabulary.
"""

from __future__ import annotations

import unicodedata
from enum import Enum
from typing import TypeVar

from .errors import ValidationError


class ReservationStatus(str, Enum):
    """Lifecycle of a reservation: pending -> confirmed -> cancelled."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class PartyConfirmation(str, Enum):
    """Value of status_client / status_hote once set (NULL before)."""

    CONFIRMED = "confirmed"


class PaymentState(str, Enum):
    """Payment completeness (``etat``) of a reservation or transaction."""

    PAID = "payer"
    UNPAID = "non_payer"
    PARTIAL = "partiel"


class TransactionStatus(str, Enum):
    """Outcome (``statut``) of a payment attempt."""

    PENDING = "en_attente"
    SUCCEEDED = "réussi"
    FAILED = "échoué"


class RentalType(str, Enum):
    SHORT_TERM = "short-term"
    MONTHLY = "monthly"


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


E = TypeVar("E", bound=Enum)


def parse_enum(enum_cls: type[E], value: object, field: str) -> E:
    """Coerce a raw value into ``enum_cls``.

    Raises:
        ValidationError: naming the field and the rejected value.
    """
    if isinstance(value, str):
        # "réussi" may arrive decomposed (e + combining accent)
        value = unicodedata.normalize("NFC", value)
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(f"Invalid {field} '{value}' (expected one of: {allowed})")
