"""Input coercion for domain entry points.

Every helper raises ValidationError naming the offending field, so callers
can validate a whole payload before touching the store.
"""

from __future__ import annotations

import math
import uuid

from .errors import ValidationError


def require_text(value: object, field: str) -> str:
    if value is None or not isinstance(value, str) or not value.strip():
        raise ValidationError(f"Missing required field: {field}")
    return value.strip()


def optional_text(value: object, field: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"Invalid value for {field}: expected a string")
    return value.strip() or None


def parse_uuid(value: object, field: str) -> str:
    """Return the canonical string form of a UUID."""
    if value is None or value == "":
        raise ValidationError(f"Missing required field: {field}")
    try:
        return str(uuid.UUID(str(value)))
    except ValueError:
        raise ValidationError(f"Invalid {field}: {value!r}")


def parse_amount(value: object, field: str) -> int:
    """Parse a strictly positive whole amount (FCFA has no minor unit).

    Accepts ints, integral floats and numeric strings.
    """
    if value is None or value == "":
        raise ValidationError(f"Missing required field: {field}")
    if isinstance(value, bool):
        raise ValidationError(f"Invalid amount for {field}: {value!r}")
    try:
        number = float(value) if isinstance(value, str) else value
    except ValueError:
        raise ValidationError(f"Invalid amount for {field}: {value!r}")
    if not isinstance(number, (int, float)) or not math.isfinite(number):
        raise ValidationError(f"Invalid amount for {field}: {value!r}")
    if number <= 0:
        raise ValidationError(f"{field} must be greater than 0")
    if number != int(number):
        raise ValidationError(f"{field} must be a whole amount")
    return int(number)


def parse_price(value: object, field: str) -> int | None:
    """Parse an optional listing price; negative prices are clamped to 0."""
    if value is None:
        return None
    if isinstance(value, bool) or value == "":
        raise ValidationError(f"Invalid amount for {field}: {value!r}")
    try:
        number = float(value) if isinstance(value, str) else value
    except ValueError:
        raise ValidationError(f"Invalid amount for {field}: {value!r}")
    if not isinstance(number, (int, float)) or not math.isfinite(number):
        raise ValidationError(f"Invalid amount for {field}: {value!r}")
    if number != int(number):
        raise ValidationError(f"{field} must be a whole amount")
    return max(0, int(number))
