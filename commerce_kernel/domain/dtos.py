"""
DTOs -- Pure domain data transfer objects.

Responsibility:
    Defines the immutable data structures returned by services and
    selectors: order views with their line items and status history,
    strain snapshots, and the dashboard analytics rows.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    from_model() class methods exist as boundary converters but are only
    invoked from the service and selector layers (never from domain logic).

Invariants enforced:
    - OrderItemView: price_cents == grams * price_per_gram_cents (frozen at
      purchase, never recomputed from the catalog).
    - OrderView: total_cents == sum of item price_cents.
    - Money is integer cents, quantities integer grams.

Failure modes:
    - OrderTotalMismatchError when an order view is built from rows whose
      totals disagree.
    - ValueError on a line item whose price is inconsistent with its grams.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import TYPE_CHECKING, Mapping
from uuid import UUID

from commerce_kernel.domain.order_lifecycle import OrderStatus, TransitionTrigger
from commerce_kernel.exceptions import OrderTotalMismatchError

if TYPE_CHECKING:
    from commerce_kernel.models.order import Order as OrderModel
    from commerce_kernel.models.order import OrderItem as OrderItemModel
    from commerce_kernel.models.order import OrderStatusChange as OrderStatusChangeModel
    from commerce_kernel.models.strain import Strain as StrainModel


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StrainInfo:
    """Current catalog and stock state of a strain."""

    id: UUID
    name: str
    slug: str
    strain_type: str
    image_url: str | None
    price_per_gram_cents: int
    available_grams: int
    is_low_stock: bool = False

    @classmethod
    def from_model(cls, strain: StrainModel, low_stock_threshold: int) -> StrainInfo:
        return cls(
            id=strain.id,
            name=strain.name,
            slug=strain.slug,
            strain_type=strain.strain_type,
            image_url=strain.image_url,
            price_per_gram_cents=strain.price_per_gram_cents,
            available_grams=strain.available_grams,
            is_low_stock=strain.available_grams < low_stock_threshold,
        )


@dataclass(frozen=True)
class StrainSnapshot:
    """Display data for a strain as referenced by order history.

    strain_id is None when the catalog entry has been deleted since purchase.
    """

    strain_id: UUID | None
    name: str
    image_url: str | None = None


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OrderLineRequest:
    """A line requested at checkout: a strain and a gram quantity."""

    strain_id: UUID | str
    grams: int


@dataclass(frozen=True)
class OrderItemView:
    """An immutable purchased line with its frozen price."""

    id: UUID
    strain: StrainSnapshot
    grams: int
    price_per_gram_cents: int
    price_cents: int

    def __post_init__(self) -> None:
        if self.price_cents != self.grams * self.price_per_gram_cents:
            raise ValueError(
                f"Line {self.id}: price_cents {self.price_cents} != "
                f"{self.grams}g x {self.price_per_gram_cents}c"
            )

    @classmethod
    def from_model(cls, item: OrderItemModel) -> OrderItemView:
        strain = item.strain
        return cls(
            id=item.id,
            strain=StrainSnapshot(
                strain_id=item.strain_id,
                name=item.strain_name,
                image_url=strain.image_url if strain is not None else None,
            ),
            grams=item.grams,
            price_per_gram_cents=item.price_per_gram_cents,
            price_cents=item.price_cents,
        )


@dataclass(frozen=True)
class StatusChangeView:
    """One applied status transition."""

    from_status: OrderStatus
    to_status: OrderStatus
    trigger: TransitionTrigger
    actor_id: UUID | None
    occurred_at: datetime

    @classmethod
    def from_model(cls, change: OrderStatusChangeModel) -> StatusChangeView:
        return cls(
            from_status=OrderStatus(change.from_status),
            to_status=OrderStatus(change.to_status),
            trigger=TransitionTrigger(change.trigger),
            actor_id=change.actor_id,
            occurred_at=change.occurred_at,
        )


@dataclass(frozen=True)
class OrderView:
    """An order with its line items and status history."""

    id: UUID
    status: OrderStatus
    email: str | None
    total_cents: int
    payment_session_ref: str | None
    created_at: datetime
    updated_at: datetime
    items: tuple[OrderItemView, ...] = ()
    history: tuple[StatusChangeView, ...] = ()

    def __post_init__(self) -> None:
        line_sum = sum(item.price_cents for item in self.items)
        if line_sum != self.total_cents:
            raise OrderTotalMismatchError(str(self.id), self.total_cents, line_sum)

    @property
    def item_count(self) -> int:
        return len(self.items)

    @classmethod
    def from_model(cls, order: OrderModel) -> OrderView:
        return cls(
            id=order.id,
            status=OrderStatus(order.status),
            email=order.email,
            total_cents=order.total_cents,
            payment_session_ref=order.payment_session_ref,
            created_at=order.created_at,
            updated_at=order.updated_at,
            items=tuple(OrderItemView.from_model(i) for i in order.items),
            history=tuple(StatusChangeView.from_model(c) for c in order.status_changes),
        )


# ---------------------------------------------------------------------------
# Analytics
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RevenueStats:
    """Windowed revenue plus a count of orders per status."""

    today_revenue_cents: int
    week_revenue_cents: int
    month_revenue_cents: int
    status_counts: Mapping[OrderStatus, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        counts = {status: int(self.status_counts.get(status, 0)) for status in OrderStatus}
        object.__setattr__(self, "status_counts", MappingProxyType(counts))


@dataclass(frozen=True)
class TopSellerRow:
    """Aggregated completed sales of one strain."""

    strain: StrainSnapshot
    total_grams: int
    total_revenue_cents: int
    order_count: int


@dataclass(frozen=True)
class RecentOrderRow:
    """Summary line for the recent-orders and order-list tables."""

    id: UUID
    status: OrderStatus
    email: str | None
    total_cents: int
    item_count: int
    created_at: datetime


@dataclass(frozen=True)
class OrderPage:
    """One page of the admin order list."""

    rows: tuple[RecentOrderRow, ...]
    total: int
    page: int
    per_page: int

    @property
    def pages(self) -> int:
        return -(-self.total // self.per_page) if self.total else 0


@dataclass(frozen=True)
class DashboardStats:
    """Headline numbers for the admin dashboard."""

    total_strains: int
    total_inventory_grams: int
    total_orders: int
    total_revenue_cents: int
    low_stock_count: int
