"""Marketplace settings loaded from environment variables.

Settings are re-read on every call so tests can patch os.environ without
resetting any cache.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    """Business settings for the reservation core.

    Attributes:
        currency: Currency code stored on every new transaction.
        commission_per_night: Flat platform commission deducted per night
            from host revenue.
        allow_overbooking: When True, reservation creation skips the
            date-overlap check.
        local_timezone: Timezone used to turn datetimes into calendar days.
    """

    currency: str = "FCFA"
    commission_per_night: int = 5000
    allow_overbooking: bool = False
    local_timezone: ZoneInfo = ZoneInfo("Africa/Brazzaville")


def _read_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}")


def _read_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in _TRUTHY


def _read_timezone(name: str, default: str) -> ZoneInfo:
    raw = os.environ.get(name) or default
    try:
        return ZoneInfo(raw)
    except (ZoneInfoNotFoundError, ValueError):
        raise RuntimeError(f"{name} is not a known timezone: {raw!r}")


def load_settings() -> Settings:
    """Build Settings from the environment.

    Raises:
        RuntimeError: If a numeric or timezone variable is malformed.
    """
    return Settings(
        currency=os.environ.get("RENTALY_CURRENCY", "FCFA"),
        commission_per_night=_read_int("RENTALY_COMMISSION_PER_NIGHT", 5000),
        allow_overbooking=_read_bool("RENTALY_ALLOW_OVERBOOKING", False),
        local_timezone=_read_timezone("RENTALY_LOCAL_TZ", "Africa/Brazzaville"),
    )
