"""
Module: commerce_kernel.selectors.order_selector
Responsibility: Read access to single orders and the admin order list.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - Stable ordering: lists are ordered by (created_at DESC, id DESC) so
      pagination is deterministic even when timestamps collide.
    - Search matches an order-id prefix or an email substring,
      case-insensitively, with LIKE wildcards in the term escaped.

Failure modes:
    - OrderNotFoundError from get_order.
    - InvalidArgumentError for a bad page, per_page or status filter.
"""

from uuid import UUID

from sqlalchemy import Select, String, cast, func, or_, select
from sqlalchemy.orm import Session, selectinload

from commerce_kernel.domain.clock import Clock
from commerce_kernel.domain.dtos import OrderPage, OrderView, RecentOrderRow
from commerce_kernel.domain.order_lifecycle import OrderStatus, parse_status
from commerce_kernel.domain.validation import validate_limit
from commerce_kernel.exceptions import InvalidArgumentError, OrderNotFoundError
from commerce_kernel.models.order import Order, OrderItem
from commerce_kernel.selectors.base import BaseSelector

MAX_PER_PAGE = 100


def order_summary_query() -> Select:
    """SELECT of RecentOrderRow columns, newest first."""
    item_counts = (
        select(
            OrderItem.order_id.label("order_id"),
            func.count(OrderItem.id).label("item_count"),
        )
        .group_by(OrderItem.order_id)
        .subquery()
    )
    return (
        select(
            Order.id,
            Order.status,
            Order.email,
            Order.total_cents,
            func.coalesce(item_counts.c.item_count, 0).label("item_count"),
            Order.created_at,
        )
        .outerjoin(item_counts, item_counts.c.order_id == Order.id)
        .order_by(Order.created_at.desc(), Order.id.desc())
    )


def to_summary_row(row) -> RecentOrderRow:
    return RecentOrderRow(
        id=row.id,
        status=OrderStatus(row.status),
        email=row.email,
        total_cents=int(row.total_cents),
        item_count=int(row.item_count),
        created_at=row.created_at,
    )


class OrderSelector(BaseSelector):
    """Order reads for the admin order pages."""

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        max_per_page: int = MAX_PER_PAGE,
    ):
        super().__init__(session, clock)
        self.max_per_page = max_per_page

    def get_order(self, order_id: UUID) -> OrderView:
        """The order with its items, strain snapshots and status history."""
        order = self.session.execute(
            select(Order)
            .where(Order.id == order_id)
            .options(selectinload(Order.items), selectinload(Order.status_changes))
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if order is None:
            raise OrderNotFoundError(str(order_id))
        return OrderView.from_model(order)

    def find_by_payment_session(self, payment_session_ref: str) -> OrderView | None:
        """The order created for a checkout session, if any."""
        order_id = self.session.execute(
            select(Order.id).where(Order.payment_session_ref == payment_session_ref)
        ).scalar_one_or_none()
        if order_id is None:
            return None
        return self.get_order(order_id)

    def list_orders(
        self,
        page: int = 1,
        per_page: int = 20,
        search: str | None = None,
        status: OrderStatus | str | None = None,
    ) -> OrderPage:
        """One page of orders matching the optional search term and status."""
        if isinstance(page, bool) or not isinstance(page, int) or page < 1:
            raise InvalidArgumentError("page", f"must be an integer >= 1, got {page!r}")
        validate_limit(per_page, self.max_per_page, "per_page")

        conditions = []
        if status is not None:
            conditions.append(Order.status == parse_status(status).value)
        term = (search or "").strip().lower()
        if term:
            conditions.append(
                or_(
                    cast(Order.id, String).startswith(term, autoescape=True),
                    func.lower(Order.email).contains(term, autoescape=True),
                )
            )

        total = self.session.execute(
            select(func.count()).select_from(Order).where(*conditions)
        ).scalar_one()

        rows = self.session.execute(
            order_summary_query()
            .where(*conditions)
            .limit(per_page)
            .offset((page - 1) * per_page)
        ).all()

        return OrderPage(
            rows=tuple(to_summary_row(r) for r in rows),
            total=int(total),
            page=page,
            per_page=per_page,
        )
