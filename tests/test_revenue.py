"""Tests for host revenue windows and aggregation."""

from __future__ import annotations

from datetime import date
from unittest.mock import patch

import pytest

from rentaly.domain.errors import ValidationError
from rentaly.domain.revenue import compute_revenue, resolve_revenue_window, summarize_revenue
from rentaly.infra.settings import Settings
from tests.helpers import cursor_for

MODULE = "rentaly.domain.revenue"


def _row(start: date, end: date, price: int = 20000) -> dict:
    return {"id": "r", "start_date": start, "end_date": end, "price": price}


class TestSummarizeRevenue:
    def test_clamped_to_window(self):
        rows = [_row(date(2023, 12, 28), date(2024, 1, 3))]

        result = summarize_revenue(rows, date(2024, 1, 1), date(2024, 12, 31), 5000)

        assert result["totalReservations"] == 1
        assert result["totalNights"] == 2
        assert result["totalPaidByClients"] == 40000
        assert result["totalToHost"] == 30000
        assert result["totalCommission"] == 10000
        assert result["monthlyRevenue"] == {"2024-01": 40000}

    def test_stay_starting_before_window_counts_only_window_nights(self):
        rows = [_row(date(2024, 1, 28), date(2024, 2, 3))]

        result = summarize_revenue(rows, date(2024, 2, 1), date(2024, 2, 29), 5000)

        assert result["totalNights"] == 2
        assert result["monthlyRevenue"] == {"2024-02": 40000}

    def test_nights_split_across_months(self):
        rows = [_row(date(2024, 1, 30), date(2024, 2, 2), price=10000)]

        result = summarize_revenue(rows, date(2024, 1, 1), date(2024, 12, 31), 5000)

        assert result["totalNights"] == 3
        assert result["monthlyRevenue"] == {"2024-01": 20000, "2024-02": 10000}

    def test_zero_night_reservations_skipped(self):
        rows = [
            _row(date(2024, 3, 10), date(2024, 3, 10)),
            _row(date(2024, 12, 31), date(2025, 1, 2)),
        ]

        result = summarize_revenue(rows, date(2024, 1, 1), date(2024, 12, 31), 5000)

        assert result["totalReservations"] == 0
        assert result["monthlyRevenue"] == {}

    def test_empty(self):
        result = summarize_revenue([], date(2024, 1, 1), date(2024, 12, 31), 5000)
        assert result == {
            "totalReservations": 0,
            "totalNights": 0,
            "totalPaidByClients": 0,
            "totalToHost": 0,
            "totalCommission": 0,
            "monthlyRevenue": {},
        }

    def test_months_sorted(self):
        rows = [
            _row(date(2024, 5, 1), date(2024, 5, 2)),
            _row(date(2024, 2, 1), date(2024, 2, 2)),
        ]
        result = summarize_revenue(rows, date(2024, 1, 1), date(2024, 12, 31), 5000)
        assert list(result["monthlyRevenue"]) == ["2024-02", "2024-05"]


class TestResolveRevenueWindow:
    TODAY = date(2024, 6, 15)

    def test_default_is_current_year(self):
        assert resolve_revenue_window(None, None, None, self.TODAY) == (date(2024, 1, 1), date(2024, 12, 31))

    def test_single_day(self):
        assert resolve_revenue_window(None, None, date(2024, 3, 10), self.TODAY) == (
            date(2024, 3, 10),
            date(2024, 3, 11),
        )

    def test_explicit_range(self):
        window = resolve_revenue_window(date(2024, 2, 1), date(2024, 2, 29), None, self.TODAY)
        assert window == (date(2024, 2, 1), date(2024, 2, 29))

    def test_half_range_rejected(self):
        with pytest.raises(ValidationError, match="provided together"):
            resolve_revenue_window(date(2024, 2, 1), None, None, self.TODAY)

    def test_reversed_range_rejected(self):
        with pytest.raises(ValidationError):
            resolve_revenue_window(date(2024, 3, 1), date(2024, 2, 1), None, self.TODAY)


class TestComputeRevenue:
    def test_uses_settings_commission_and_host_rows(self):
        rows = [_row(date(2024, 3, 10), date(2024, 3, 12), price=25000)]
        with patch(f"{MODULE}.txn") as mock_txn, \
             patch(f"{MODULE}.list_confirmed_for_host", return_value=rows) as mock_list, \
             patch(f"{MODULE}.utc_today", return_value=date(2024, 6, 15)):
            cur = cursor_for(mock_txn)

            result = compute_revenue("host-1", settings=Settings(commission_per_night=2000))

        mock_list.assert_called_once_with(cur, "host-1", date(2024, 1, 1), date(2024, 12, 31))
        assert result["totalPaidByClients"] == 50000
        assert result["totalToHost"] == 46000
