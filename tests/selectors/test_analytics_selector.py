"""Tests for dashboard analytics (commerce_kernel/selectors/analytics_selector.py)."""

from datetime import datetime, timedelta, timezone

import pytest

from commerce_kernel.domain.order_lifecycle import OrderStatus
from commerce_kernel.exceptions import InvalidArgumentError
from commerce_kernel.selectors.analytics_selector import AnalyticsSelector

UTC = timezone.utc


@pytest.fixture
def analytics(session, deterministic_clock) -> AnalyticsSelector:
    return AnalyticsSelector(session, deterministic_clock)


class TestRevenueStats:

    @pytest.fixture
    def priced(self, strain_factory):
        # 1 cent per gram so an order's total equals its grams
        return strain_factory(name="Penny", price_per_gram_cents=1, available_grams=100_000)

    def test_windows_sum_revenue_statuses_only(
        self, analytics, order_factory, priced, deterministic_clock
    ):
        now = deterministic_clock.now()
        order_factory([(priced, 100)], status=OrderStatus.FULFILLED,
                      created_at=now - timedelta(hours=5))
        order_factory([(priced, 20)], status=OrderStatus.PAID,
                      created_at=now - timedelta(days=3))
        order_factory([(priced, 3)], status=OrderStatus.PAID,
                      created_at=now - timedelta(days=20))
        order_factory([(priced, 7000)], status=OrderStatus.PAID,
                      created_at=now - timedelta(days=40))
        order_factory([(priced, 500)], status=OrderStatus.PENDING, created_at=now)
        order_factory([(priced, 900)], status=OrderStatus.CANCELLED, created_at=now)

        stats = analytics.revenue_stats(now)

        assert stats.today_revenue_cents == 100
        assert stats.week_revenue_cents == 120
        assert stats.month_revenue_cents == 123

    def test_status_counts_cover_all_orders(
        self, analytics, order_factory, priced, deterministic_clock
    ):
        now = deterministic_clock.now()
        order_factory([(priced, 1)], status=OrderStatus.PAID)
        order_factory([(priced, 1)], status=OrderStatus.PAID,
                      created_at=now - timedelta(days=90))
        order_factory([(priced, 1)], status=OrderStatus.CANCELLED)

        counts = analytics.revenue_stats(now).status_counts

        assert counts[OrderStatus.PAID] == 2
        assert counts[OrderStatus.CANCELLED] == 1
        assert counts[OrderStatus.PENDING] == 0
        assert counts[OrderStatus.FULFILLED] == 0

    def test_today_boundary_is_midnight(
        self, analytics, order_factory, priced, deterministic_clock
    ):
        now = deterministic_clock.now()
        midnight = datetime(now.year, now.month, now.day, tzinfo=UTC)
        order_factory([(priced, 10)], status=OrderStatus.PAID, created_at=midnight)
        order_factory([(priced, 1)], status=OrderStatus.PAID,
                      created_at=midnight - timedelta(microseconds=1))

        stats = analytics.revenue_stats(now)

        assert stats.today_revenue_cents == 10
        assert stats.week_revenue_cents == 11

    def test_orders_after_now_not_counted(
        self, analytics, order_factory, priced, deterministic_clock
    ):
        now = deterministic_clock.now()
        order_factory([(priced, 10)], status=OrderStatus.PAID,
                      created_at=now + timedelta(minutes=1))
        assert analytics.revenue_stats(now).today_revenue_cents == 0

    def test_empty_store(self, analytics, deterministic_clock):
        stats = analytics.revenue_stats(deterministic_clock.now())
        assert (stats.today_revenue_cents, stats.week_revenue_cents,
                stats.month_revenue_cents) == (0, 0, 0)
        assert sum(stats.status_counts.values()) == 0

    def test_reporting_timezone_moves_today(
        self, session, order_factory, priced, deterministic_clock
    ):
        # 02:00Z on the 15th is still the 14th in New York
        now = datetime(2024, 6, 15, 2, 0, tzinfo=UTC)
        deterministic_clock.set_time(now)
        order_factory([(priced, 10)], status=OrderStatus.PAID,
                      created_at=datetime(2024, 6, 14, 12, 0, tzinfo=UTC))

        utc = AnalyticsSelector(session, deterministic_clock).revenue_stats(now)
        ny = AnalyticsSelector(
            session, deterministic_clock, reporting_timezone="America/New_York"
        ).revenue_stats(now)

        assert utc.today_revenue_cents == 0
        assert ny.today_revenue_cents == 10

    def test_defaults_to_clock_now(self, analytics, order_factory, priced):
        order_factory([(priced, 4)], status=OrderStatus.PAID)
        assert analytics.revenue_stats().today_revenue_cents == 4


class TestTopSellers:

    def test_ranked_by_revenue_then_grams(self, analytics, strain_factory, order_factory):
        a = strain_factory(name="Alpha", price_per_gram_cents=1000, available_grams=100)
        b = strain_factory(name="Beta", price_per_gram_cents=500, available_grams=100)
        c = strain_factory(name="Gamma", price_per_gram_cents=2000, available_grams=100)

        order_factory([(a, 3)], status=OrderStatus.PAID)
        order_factory([(a, 2), (c, 1)], status=OrderStatus.FULFILLED)
        order_factory([(b, 10)], status=OrderStatus.PAID)

        rows = analytics.top_sellers(10)

        assert [r.strain.name for r in rows] == ["Beta", "Alpha", "Gamma"]
        beta, alpha, gamma = rows
        assert (beta.total_grams, beta.total_revenue_cents, beta.order_count) == (10, 5000, 1)
        assert (alpha.total_grams, alpha.total_revenue_cents, alpha.order_count) == (5, 5000, 2)
        assert (gamma.total_grams, gamma.total_revenue_cents, gamma.order_count) == (1, 2000, 1)
        assert alpha.strain.strain_id == a.id

    def test_full_tie_broken_by_strain_id(self, analytics, strain_factory, order_factory):
        x = strain_factory(name="X", price_per_gram_cents=100)
        y = strain_factory(name="Y", price_per_gram_cents=100)
        order_factory([(x, 5), (y, 5)], status=OrderStatus.PAID)

        rows = analytics.top_sellers(10)

        assert [r.strain.strain_id for r in rows] == sorted([x.id, y.id], key=str)

    def test_only_completed_sales_count(self, analytics, strain_factory, order_factory):
        sold = strain_factory(name="Sold")
        pending = strain_factory(name="Pending Only")
        cancelled = strain_factory(name="Cancelled Only")
        strain_factory(name="Never Ordered")

        order_factory([(sold, 1)], status=OrderStatus.PAID)
        order_factory([(pending, 50)])
        order_factory([(cancelled, 50)], status=OrderStatus.CANCELLED)

        assert [r.strain.name for r in analytics.top_sellers(10)] == ["Sold"]

    def test_deleted_strain_excluded(self, session, analytics, strain_factory, order_factory):
        kept = strain_factory(name="Kept")
        gone = strain_factory(name="Gone")
        order_factory([(kept, 1), (gone, 5)], status=OrderStatus.PAID)
        session.delete(gone)
        session.flush()

        assert [r.strain.name for r in analytics.top_sellers(10)] == ["Kept"]

    def test_limit_applied(self, analytics, strain_factory, order_factory):
        strains = [strain_factory(name=f"S{i}", price_per_gram_cents=100 + i) for i in range(5)]
        order_factory([(s, 1) for s in strains], status=OrderStatus.PAID)

        rows = analytics.top_sellers(2)

        assert [r.strain.name for r in rows] == ["S4", "S3"]

    @pytest.mark.parametrize("limit", [0, 51, -1])
    def test_limit_validated(self, analytics, limit):
        with pytest.raises(InvalidArgumentError):
            analytics.top_sellers(limit)


class TestRecentOrders:

    def test_newest_first_with_item_counts(
        self, analytics, strain_factory, order_factory, deterministic_clock
    ):
        strain = strain_factory()
        now = deterministic_clock.now()
        old = order_factory([(strain, 1)], created_at=now - timedelta(days=2))
        new = order_factory([(strain, 1), (strain, 2), (strain, 3)],
                            status=OrderStatus.CANCELLED, created_at=now)

        rows = analytics.recent_orders(10)

        assert [r.id for r in rows] == [new.id, old.id]
        assert rows[0].item_count == 3
        assert rows[0].status == OrderStatus.CANCELLED
        assert rows[0].total_cents == 6000
        assert rows[1].email == "buyer@example.com"

    def test_same_timestamp_broken_by_id_desc(self, analytics, strain_factory, order_factory):
        strain = strain_factory()
        ids = [order_factory([(strain, 1)]).id for _ in range(3)]

        rows = analytics.recent_orders(10)

        assert [r.id for r in rows] == sorted(ids, key=str, reverse=True)

    def test_limit(self, analytics, strain_factory, order_factory):
        strain = strain_factory()
        for _ in range(4):
            order_factory([(strain, 1)])
        assert len(analytics.recent_orders(2)) == 2

    def test_limit_validated(self, analytics):
        with pytest.raises(InvalidArgumentError):
            analytics.recent_orders(0)


class TestDashboardStats:

    def test_totals(self, analytics, strain_factory, order_factory):
        a = strain_factory(name="Alpha", price_per_gram_cents=1000, available_grams=50)
        b = strain_factory(name="Beta", price_per_gram_cents=100, available_grams=5)
        strain_factory(name="Empty", available_grams=0)

        order_factory([(a, 2)], status=OrderStatus.FULFILLED)
        order_factory([(b, 1)], status=OrderStatus.PAID)
        order_factory([(a, 9)])

        stats = analytics.dashboard_stats()

        assert stats.total_strains == 3
        assert stats.total_inventory_grams == 48 + 5 + 0
        assert stats.total_orders == 3
        assert stats.total_revenue_cents == 2000 + 100
        assert stats.low_stock_count == 2

    def test_empty_store(self, analytics):
        stats = analytics.dashboard_stats()
        assert stats.total_strains == 0
        assert stats.total_revenue_cents == 0
