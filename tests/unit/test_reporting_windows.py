"""Tests for dashboard revenue windows (commerce_kernel/domain/reporting.py)."""

from datetime import datetime, timezone

import pytest

from commerce_kernel.domain.reporting import RevenueWindows, compute_revenue_windows

UTC = timezone.utc


class TestComputeRevenueWindows:

    def test_utc_windows(self):
        now = datetime(2024, 6, 15, 15, 0, tzinfo=UTC)
        windows = compute_revenue_windows(now, "UTC")

        assert windows.today_start == datetime(2024, 6, 15, tzinfo=UTC)
        assert windows.week_start == datetime(2024, 6, 9, tzinfo=UTC)
        assert windows.month_start == datetime(2024, 5, 17, tzinfo=UTC)
        assert windows.end == now

    def test_windows_are_nested(self):
        now = datetime(2024, 1, 1, 0, 0, tzinfo=UTC)
        w = compute_revenue_windows(now, "UTC")
        assert w.month_start <= w.week_start <= w.today_start <= w.end

    def test_today_starts_at_local_midnight(self):
        # 15:00Z is 11:00 EDT; local midnight is 04:00Z
        now = datetime(2024, 6, 15, 15, 0, tzinfo=UTC)
        windows = compute_revenue_windows(now, "America/New_York")
        assert windows.today_start == datetime(2024, 6, 15, 4, 0, tzinfo=UTC)

    def test_local_date_can_differ_from_utc_date(self):
        # 02:00Z on the 15th is still the 14th in New York
        now = datetime(2024, 6, 15, 2, 0, tzinfo=UTC)
        windows = compute_revenue_windows(now, "America/New_York")
        assert windows.today_start == datetime(2024, 6, 14, 4, 0, tzinfo=UTC)

    def test_week_start_keeps_local_midnight_across_dst(self):
        # DST began 2024-03-10; six days earlier midnight is EST (UTC-5)
        now = datetime(2024, 3, 12, 12, 0, tzinfo=UTC)
        windows = compute_revenue_windows(now, "America/New_York")
        assert windows.today_start == datetime(2024, 3, 12, 4, 0, tzinfo=UTC)
        assert windows.week_start == datetime(2024, 3, 6, 5, 0, tzinfo=UTC)

    def test_custom_window_lengths(self):
        now = datetime(2024, 6, 15, 15, 0, tzinfo=UTC)
        windows = compute_revenue_windows(now, "UTC", week_days=1, month_days=1)
        assert windows.week_start == windows.today_start == windows.month_start

    def test_naive_now_rejected(self):
        with pytest.raises(ValueError, match="timezone-aware"):
            compute_revenue_windows(datetime(2024, 6, 15, 15, 0), "UTC")

    def test_week_longer_than_month_rejected(self):
        now = datetime(2024, 6, 15, 15, 0, tzinfo=UTC)
        with pytest.raises(ValueError):
            compute_revenue_windows(now, "UTC", week_days=31, month_days=30)


class TestRevenueWindows:

    def test_out_of_order_bounds_rejected(self):
        start = datetime(2024, 6, 15, tzinfo=UTC)
        earlier = datetime(2024, 6, 1, tzinfo=UTC)
        with pytest.raises(ValueError, match="nested"):
            RevenueWindows(
                today_start=earlier,
                week_start=start,
                month_start=earlier,
                end=start,
            )
