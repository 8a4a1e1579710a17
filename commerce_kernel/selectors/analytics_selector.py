"""
Module: commerce_kernel.selectors.analytics_selector
Responsibility: Dashboard aggregates computed on demand from orders, order
    items and strains: windowed revenue, per-status counts, top sellers,
    recent orders and the headline totals.
Architecture position: Kernel > Selectors.  Read-only.

Invariants enforced:
    - Only PAID and FULFILLED orders count as revenue or sales.
    - Revenue windows are nested (see domain.reporting) and every window sum
      comes from one SELECT, so today <= week <= month within a result.
    - Top sellers are ordered by (revenue DESC, grams DESC, strain id ASC);
      items whose strain was deleted are excluded.
    - Limits are validated before any query runs.

Failure modes:
    - InvalidArgumentError for a limit outside [1, max_limit].
"""

from datetime import datetime

from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from commerce_kernel.domain.clock import Clock
from commerce_kernel.domain.dtos import (
    DashboardStats,
    RecentOrderRow,
    RevenueStats,
    StrainSnapshot,
    TopSellerRow,
)
from commerce_kernel.domain.order_lifecycle import REVENUE_STATUSES, OrderStatus
from commerce_kernel.domain.reporting import compute_revenue_windows
from commerce_kernel.domain.validation import validate_limit
from commerce_kernel.models.order import Order, OrderItem
from commerce_kernel.models.strain import Strain
from commerce_kernel.selectors.base import DEFAULT_MAX_LIMIT, BaseSelector
from commerce_kernel.selectors.order_selector import order_summary_query, to_summary_row

_REVENUE_VALUES = sorted(s.value for s in REVENUE_STATUSES)


class AnalyticsSelector(BaseSelector):
    """
    Admin dashboard analytics.

    Contract:
        Every method is side-effect free and reads the caller's session
        snapshot; nothing is cached between calls.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        reporting_timezone: str = "UTC",
        week_window_days: int = 7,
        month_window_days: int = 30,
        low_stock_threshold: int = 10,
        max_limit: int = DEFAULT_MAX_LIMIT,
    ):
        super().__init__(session, clock, max_limit)
        self.reporting_timezone = reporting_timezone
        self.week_window_days = week_window_days
        self.month_window_days = month_window_days
        self.low_stock_threshold = low_stock_threshold

    def revenue_stats(self, now: datetime | None = None) -> RevenueStats:
        """
        Revenue for today, the week and the month, plus order counts by status.

        Windows end at ``now`` (default: the clock's now); orders created
        after ``now`` are not counted.
        """
        windows = compute_revenue_windows(
            now or self.clock.now(),
            self.reporting_timezone,
            self.week_window_days,
            self.month_window_days,
        )

        def window_sum(start: datetime):
            return func.coalesce(
                func.sum(case((Order.created_at >= start, Order.total_cents), else_=0)),
                0,
            )

        today, week, month = self.session.execute(
            select(
                window_sum(windows.today_start),
                window_sum(windows.week_start),
                window_sum(windows.month_start),
            ).where(
                Order.status.in_(_REVENUE_VALUES),
                Order.created_at >= windows.month_start,
                Order.created_at <= windows.end,
            )
        ).one()

        counts = {
            OrderStatus(status): int(count)
            for status, count in self.session.execute(
                select(Order.status, func.count(Order.id)).group_by(Order.status)
            )
        }

        return RevenueStats(
            today_revenue_cents=int(today),
            week_revenue_cents=int(week),
            month_revenue_cents=int(month),
            status_counts=counts,
        )

    def top_sellers(self, limit: int = 10) -> list[TopSellerRow]:
        """Best-selling strains over all completed orders."""
        validate_limit(limit, self.max_limit)

        total_grams = func.sum(OrderItem.grams).label("total_grams")
        total_revenue = func.sum(OrderItem.price_cents).label("total_revenue_cents")
        order_count = func.count(func.distinct(OrderItem.order_id)).label("order_count")

        rows = self.session.execute(
            select(
                OrderItem.strain_id,
                Strain.name,
                Strain.image_url,
                total_grams,
                total_revenue,
                order_count,
            )
            .join(Order, Order.id == OrderItem.order_id)
            .join(Strain, Strain.id == OrderItem.strain_id)
            .where(Order.status.in_(_REVENUE_VALUES))
            .group_by(OrderItem.strain_id, Strain.name, Strain.image_url)
            .order_by(total_revenue.desc(), total_grams.desc(), OrderItem.strain_id.asc())
            .limit(limit)
        ).all()

        return [
            TopSellerRow(
                strain=StrainSnapshot(
                    strain_id=row.strain_id,
                    name=row.name,
                    image_url=row.image_url,
                ),
                total_grams=int(row.total_grams),
                total_revenue_cents=int(row.total_revenue_cents),
                order_count=int(row.order_count),
            )
            for row in rows
        ]

    def recent_orders(self, limit: int = 10) -> list[RecentOrderRow]:
        """The ``limit`` most recently created orders, any status."""
        validate_limit(limit, self.max_limit)
        rows = self.session.execute(order_summary_query().limit(limit)).all()
        return [to_summary_row(row) for row in rows]

    def dashboard_stats(self) -> DashboardStats:
        """Catalog, stock and sales totals for the dashboard header."""
        total_strains, total_grams, low_stock = self.session.execute(
            select(
                func.count(Strain.id),
                func.coalesce(func.sum(Strain.available_grams), 0),
                func.coalesce(
                    func.sum(
                        case((Strain.available_grams < self.low_stock_threshold, 1), else_=0)
                    ),
                    0,
                ),
            )
        ).one()

        total_orders = self.session.execute(select(func.count(Order.id))).scalar_one()
        total_revenue = self.session.execute(
            select(func.coalesce(func.sum(Order.total_cents), 0)).where(
                Order.status.in_(_REVENUE_VALUES)
            )
        ).scalar_one()

        return DashboardStats(
            total_strains=int(total_strains),
            total_inventory_grams=int(total_grams),
            total_orders=int(total_orders),
            total_revenue_cents=int(total_revenue),
            low_stock_count=int(low_stock),
        )
