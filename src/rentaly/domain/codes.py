"""Human-readable booking codes.

Format: ``<PREFIX>-<6 chars from A-Z0-9>``. Collisions are left to the
UNIQUE constraints in the store; they are not retried.
"""

import secrets
import string

CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_LENGTH = 6

RESERVATION_PREFIX = "RSV"
TRANSACTION_PREFIX = "TX"


def generate_code(prefix: str, length: int = CODE_LENGTH) -> str:
    """Return ``prefix`` followed by ``length`` random uppercase-alphanumerics."""
    suffix = "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))
    return f"{prefix}-{suffix}"


def reservation_code() -> str:
    return generate_code(RESERVATION_PREFIX)


def transaction_reference() -> str:
    return generate_code(TRANSACTION_PREFIX)
