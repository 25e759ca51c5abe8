"""Tests for time utilities."""

from datetime import datetime, timezone
from unittest.mock import patch

from rentaly.infra.time import today, utc_now


class TestUtcNow:
    def test_returns_utc_datetime(self):
        assert utc_now().tzinfo == timezone.utc

    def test_returns_current_time(self):
        before = datetime.now(timezone.utc)
        now = utc_now()
        after = datetime.now(timezone.utc)

        assert before <= now <= after


class TestToday:
    def test_is_utc_calendar_day(self):
        late_evening = datetime(2024, 12, 31, 23, 30, tzinfo=timezone.utc)
        with patch("rentaly.infra.time.utc_now", return_value=late_evening):
            assert today().isoformat() == "2024-12-31"
