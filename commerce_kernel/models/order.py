"""
Module: commerce_kernel.models.order
Responsibility: ORM persistence for orders, their immutable line items, and
    the append-only status-change trail.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/.  MUST NOT import from services/, selectors/, or outer layers.

Invariants enforced:
    - total_cents == sum(OrderItem.price_cents), set once at creation by
      OrderService and re-checked whenever an OrderView is built.
    - OrderItem.price_cents == grams * price_per_gram_cents (CHECK).
    - OrderItem.strain_id is a WEAK reference: ON DELETE SET NULL plus a
      strain_name snapshot, so deleting a catalog entry never breaks history.
    - payment_session_ref is unique: one order per checkout session.
    - OrderStatusChange (order_id, seq) is unique: two writers racing to
      append the same step of an order's history cannot both commit.

Failure modes:
    - IntegrityError on duplicate payment_session_ref or (order_id, seq).

Audit relevance:
    Orders are never deleted; CANCELLED is the soft-terminal state.  Every
    applied transition leaves one OrderStatusChange row.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import CheckConstraint, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from commerce_kernel.db.base import Base, TrackedBase, UTCDateTime, UUIDString
from commerce_kernel.domain.order_lifecycle import OrderStatus
from commerce_kernel.models.strain import Strain


class Order(TrackedBase):
    """
    A customer order.

    Contract:
        Created PENDING by checkout; status then changes only through
        TransitionService.  total_cents is derived from the line items at
        creation and never recomputed from catalog prices.
    """

    __tablename__ = "orders"

    __table_args__ = (
        UniqueConstraint("payment_session_ref", name="uq_order_payment_session"),
        CheckConstraint("total_cents >= 0", name="ck_order_total_non_negative"),
        Index("idx_order_status", "status"),
        Index("idx_order_created", "created_at", "id"),
        Index("idx_order_email", "email"),
    )

    email: Mapped[str | None] = mapped_column(String(320), nullable=True)

    status: Mapped[OrderStatus] = mapped_column(
        String(20),
        nullable=False,
        default=OrderStatus.PENDING.value,
    )

    total_cents: Mapped[int] = mapped_column(nullable=False)

    # External checkout session (e.g. Stripe cs_...)
    payment_session_ref: Mapped[str | None] = mapped_column(String(255), nullable=True)

    items: Mapped[list["OrderItem"]] = relationship(
        back_populates="order",
        order_by="OrderItem.position",
        cascade="all, delete-orphan",
    )

    status_changes: Mapped[list["OrderStatusChange"]] = relationship(
        back_populates="order",
        order_by="OrderStatusChange.seq",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Order {self.id} {self.status} {self.total_cents}c>"


class OrderItem(Base):
    """
    One purchased line.  Immutable after creation.

    Guarantees:
        - price_per_gram_cents is the catalog price AT PURCHASE TIME.
        - strain_name survives deletion of the strain.
    """

    __tablename__ = "order_items"

    __table_args__ = (
        CheckConstraint("grams > 0", name="ck_order_item_grams_positive"),
        CheckConstraint(
            "price_cents = grams * price_per_gram_cents",
            name="ck_order_item_price_consistent",
        ),
        Index("idx_order_item_order", "order_id"),
        Index("idx_order_item_strain", "strain_id"),
    )

    order_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
    )

    # Position within the order, keeps display order stable
    position: Mapped[int] = mapped_column(nullable=False, default=0)

    strain_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("strains.id", ondelete="SET NULL"),
        nullable=True,
    )

    strain_name: Mapped[str] = mapped_column(String(255), nullable=False)

    grams: Mapped[int] = mapped_column(nullable=False)

    price_per_gram_cents: Mapped[int] = mapped_column(nullable=False)

    price_cents: Mapped[int] = mapped_column(nullable=False)

    order: Mapped[Order] = relationship(back_populates="items")

    strain: Mapped[Strain | None] = relationship(lazy="joined")


class OrderStatusChange(Base):
    """Append-only record of one applied status transition."""

    __tablename__ = "order_status_changes"

    __table_args__ = (
        UniqueConstraint("order_id", "seq", name="uq_status_change_order_seq"),
        Index("idx_status_change_order", "order_id"),
    )

    order_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
    )

    # 1-based step number within the order's history
    seq: Mapped[int] = mapped_column(nullable=False)

    from_status: Mapped[str] = mapped_column(String(20), nullable=False)

    to_status: Mapped[str] = mapped_column(String(20), nullable=False)

    # admin | payment_webhook | timeout
    trigger: Mapped[str] = mapped_column(String(30), nullable=False)

    actor_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)

    occurred_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)

    order: Mapped[Order] = relationship(back_populates="status_changes")
