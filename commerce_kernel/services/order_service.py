"""
OrderService -- creation of PENDING orders with frozen prices.

Responsibility:
    Implements the contract the checkout collaborator uses to record an
    order: snapshot each strain's name and current price-per-gram onto the
    line items, derive the total from those lines, and persist the order as
    PENDING.  Inventory is NOT touched; stock is only committed at
    fulfillment.

Invariants enforced:
    - total_cents == sum(line price_cents), computed once here.
    - line price_cents == grams * price_per_gram_cents at purchase time.
    - One order per payment session reference.

Failure modes:
    - InvalidArgumentError: no lines, grams <= 0, or a malformed strain id.
    - StrainNotFoundError: a line references an unknown strain.
    - DuplicatePaymentSessionError: session already has an order, including
      when a concurrent checkout inserts it first.
    - OrderNotFoundError: set_customer_email on an unknown order.
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from commerce_kernel.domain.dtos import OrderLineRequest, OrderView
from commerce_kernel.domain.order_lifecycle import OrderStatus
from commerce_kernel.domain.validation import parse_uuid, validate_positive_grams
from commerce_kernel.exceptions import (
    DuplicatePaymentSessionError,
    InvalidArgumentError,
    OrderNotFoundError,
    StrainNotFoundError,
)
from commerce_kernel.logging_config import get_logger
from commerce_kernel.models.order import Order, OrderItem
from commerce_kernel.models.strain import Strain
from commerce_kernel.services.base import BaseService

logger = get_logger("services.order")


class OrderService(BaseService):
    """Creates orders and edits the few mutable order attributes."""

    def create_pending_order(
        self,
        lines: list[OrderLineRequest],
        payment_session_ref: str | None = None,
        email: str | None = None,
    ) -> OrderView:
        """
        Record a new PENDING order.

        Preconditions:
            - ``lines`` is non-empty and every line has grams > 0.

        Postconditions:
            - The order and all its items are flushed in the caller's
              transaction.
            - Strain stock is unchanged.

        Returns:
            OrderView of the created order.
        """
        if not lines:
            raise InvalidArgumentError("lines", "an order needs at least one line")
        for index, line in enumerate(lines):
            validate_positive_grams(line.grams, f"lines[{index}].grams")

        strain_ids = [
            parse_uuid(line.strain_id, f"lines[{index}].strain_id")
            for index, line in enumerate(lines)
        ]

        if payment_session_ref is not None:
            existing = self._existing_order_for(payment_session_ref)
            if existing is not None:
                raise DuplicatePaymentSessionError(payment_session_ref, str(existing))

        strains = {
            s.id: s
            for s in self.session.execute(
                select(Strain).where(Strain.id.in_(set(strain_ids)))
            ).scalars()
        }

        items: list[OrderItem] = []
        for position, (strain_id, line) in enumerate(zip(strain_ids, lines)):
            strain = strains.get(strain_id)
            if strain is None:
                raise StrainNotFoundError(str(strain_id))
            items.append(
                OrderItem(
                    position=position,
                    strain_id=strain.id,
                    strain_name=strain.name,
                    grams=line.grams,
                    price_per_gram_cents=strain.price_per_gram_cents,
                    price_cents=line.grams * strain.price_per_gram_cents,
                )
            )

        now = self.clock.now()
        order = Order(
            email=email,
            status=OrderStatus.PENDING.value,
            total_cents=sum(item.price_cents for item in items),
            payment_session_ref=payment_session_ref,
            created_at=now,
            updated_at=now,
            items=items,
        )
        # A concurrent checkout can claim the session between the check above and this insert
        savepoint = self.session.begin_nested()
        try:
            self.session.add(order)
            self.session.flush()
            savepoint.commit()
        except IntegrityError as exc:
            savepoint.rollback()
            existing = (
                self._existing_order_for(payment_session_ref)
                if payment_session_ref is not None
                else None
            )
            if existing is None:
                raise
            raise DuplicatePaymentSessionError(payment_session_ref, str(existing)) from exc

        logger.info(
            "order_created",
            extra={
                "order_id": str(order.id),
                "total_cents": order.total_cents,
                "item_count": len(items),
                "payment_session_ref": payment_session_ref,
            },
        )
        return OrderView.from_model(order)

    def _existing_order_for(self, payment_session_ref: str) -> UUID | None:
        return self.session.execute(
            select(Order.id).where(Order.payment_session_ref == payment_session_ref)
        ).scalar_one_or_none()

    def set_customer_email(self, order_id: UUID, email: str | None) -> None:
        """Record the customer email reported by the payment provider."""
        order = self.session.get(Order, order_id)
        if order is None:
            raise OrderNotFoundError(str(order_id))
        if email and order.email != email:
            order.email = email
            order.updated_at = self.clock.now()
            self.session.flush()
