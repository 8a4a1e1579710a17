"""
TransitionService -- validates and applies order status transitions.

Responsibility:
    Moves an order along ORDER_WORKFLOW.  For PAID -> FULFILLED it commits
    inventory: every line item's strain is decremented by the ordered grams
    as part of the same unit of work as the status change.

Architecture position:
    Kernel > Services -- imperative shell.  Called by the admin facade
    (admin actions) and PaymentEventHandler (webhook-driven PAID and
    session-expiry CANCELLED).

Invariants enforced:
    - Status moves only along ORDER_WORKFLOW and only for a trigger the
      move declares; anything else raises InvalidTransitionError and
      leaves the order untouched.
    - Fulfillment is all-or-nothing: line grams are summed per strain, every
      strain row is locked and checked BEFORE the first decrement, so a
      missing strain or short stock raises FulfillmentBlockedError with no
      stock changed and the order still PAID.
    - Exactly one decrement batch per fulfilled order: the order row is
      re-read under ``SELECT ... FOR UPDATE`` with ``populate_existing``,
      so a concurrent or retried fulfillment observes FULFILLED and raises
      InvalidTransitionError.  The (order_id, seq) unique constraint on the
      status trail rejects a racing writer even without row locks.
    - Flush-only: the caller's transaction makes status + stock atomic.

Failure modes:
    - OrderNotFoundError, InvalidTransitionError, FulfillmentBlockedError,
      InvalidArgumentError (unknown target status).

Audit relevance:
    Each applied transition appends an OrderStatusChange row and logs
    ``order_transition_applied``; rejections log at WARNING.
"""

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from commerce_kernel.domain.clock import Clock
from commerce_kernel.domain.dtos import OrderView
from commerce_kernel.domain.order_lifecycle import (
    STOCK_AVAILABLE,
    OrderStatus,
    TransitionTrigger,
    parse_status,
    resolve_transition,
)
from commerce_kernel.exceptions import (
    FulfillmentBlockedError,
    InsufficientStockError,
    InvalidTransitionError,
    OrderNotFoundError,
    StrainNotFoundError,
)
from commerce_kernel.logging_config import LogContext, get_logger
from commerce_kernel.models.order import Order, OrderItem, OrderStatusChange
from commerce_kernel.services.base import BaseService
from commerce_kernel.services.inventory_ledger import InventoryLedger

logger = get_logger("services.transition")

REASON_INSUFFICIENT_STOCK = "insufficient stock"
REASON_STRAIN_MISSING = "strain no longer in catalog"


class TransitionService(BaseService):
    """
    Order state machine executor.

    Contract:
        ``transition`` either applies the full effect of the requested move
        (status, updated_at, status trail, and for fulfillment every stock
        decrement) or raises having applied nothing.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        ledger: InventoryLedger | None = None,
    ):
        super().__init__(session, clock)
        self._ledger = ledger or InventoryLedger(session, self.clock)

    def transition(
        self,
        order_id: UUID,
        target_status: OrderStatus | str,
        trigger: TransitionTrigger = TransitionTrigger.ADMIN,
        actor_id: UUID | None = None,
    ) -> OrderView:
        """
        Move ``order_id`` to ``target_status``.

        Postconditions:
            - status == target, updated_at == clock.now(), one new
              OrderStatusChange row.
            - For PAID -> FULFILLED, each referenced strain's stock dropped by
              exactly the grams ordered for it.

        Returns:
            The updated OrderView.
        """
        target = parse_status(target_status)
        with LogContext.bind(
            order_id=str(order_id),
            trigger=trigger.value,
            actor_id=str(actor_id) if actor_id else None,
        ):
            order = self._lock_order(order_id)
            current = OrderStatus(order.status)

            try:
                transition = resolve_transition(current, target, str(order_id), trigger)
            except InvalidTransitionError as exc:
                logger.warning(
                    "order_transition_rejected",
                    extra={
                        "from_status": current.value,
                        "to_status": target.value,
                        "reason": "trigger not permitted" if exc.trigger else "unreachable",
                    },
                )
                raise

            if transition.guard is STOCK_AVAILABLE or transition.decrements_inventory:
                required, names = self._required_grams(order)
                if transition.guard is STOCK_AVAILABLE:
                    self._check_stock(order, required, names)
                if transition.decrements_inventory:
                    # Lock in id order so concurrent fulfillments cannot deadlock
                    for strain_id in sorted(required, key=str):
                        self._ledger.decrement(strain_id, required[strain_id])

            now = self.clock.now()
            order.status = target.value
            order.updated_at = now
            self.session.add(
                OrderStatusChange(
                    order_id=order.id,
                    seq=self._next_seq(order.id),
                    from_status=current.value,
                    to_status=target.value,
                    trigger=trigger.value,
                    actor_id=actor_id,
                    occurred_at=now,
                )
            )
            self.session.flush()
            self.session.expire(order, ["status_changes"])

            logger.info(
                "order_transition_applied",
                extra={
                    "from_status": current.value,
                    "to_status": target.value,
                    "action": transition.action,
                    "decrements_inventory": transition.decrements_inventory,
                },
            )
            return OrderView.from_model(order)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _lock_order(self, order_id: UUID) -> Order:
        order = self.session.execute(
            select(Order)
            .where(Order.id == order_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if order is None:
            raise OrderNotFoundError(str(order_id))
        return order

    def _next_seq(self, order_id: UUID) -> int:
        last = self.session.execute(
            select(func.coalesce(func.max(OrderStatusChange.seq), 0)).where(
                OrderStatusChange.order_id == order_id
            )
        ).scalar_one()
        return last + 1

    def _required_grams(self, order: Order) -> tuple[dict[UUID, int], dict[UUID, str]]:
        """Grams ordered per strain, with the snapshot name for each."""
        required: dict[UUID, int] = {}
        names: dict[UUID, str] = {}
        items = self.session.execute(
            select(OrderItem)
            .where(OrderItem.order_id == order.id)
            .order_by(OrderItem.position)
            .execution_options(populate_existing=True)
        ).scalars()
        for item in items:
            if item.strain_id is None:
                self._blocked(order, None, item.strain_name, REASON_STRAIN_MISSING, item.grams)
            required[item.strain_id] = required.get(item.strain_id, 0) + item.grams
            names.setdefault(item.strain_id, item.strain_name)
        return required, names

    def _check_stock(
        self, order: Order, required: dict[UUID, int], names: dict[UUID, str]
    ) -> None:
        """Lock and check every strain before any stock moves."""
        for strain_id in sorted(required, key=str):
            try:
                self._ledger.ensure_available(strain_id, required[strain_id])
            except InsufficientStockError as exc:
                self._blocked(
                    order,
                    strain_id,
                    names[strain_id],
                    REASON_INSUFFICIENT_STOCK,
                    exc.requested_grams,
                    exc.available_grams,
                    cause=exc,
                )
            except StrainNotFoundError as exc:
                self._blocked(
                    order,
                    strain_id,
                    names[strain_id],
                    REASON_STRAIN_MISSING,
                    required[strain_id],
                    cause=exc,
                )

    def _blocked(
        self,
        order: Order,
        strain_id: UUID | None,
        strain_name: str,
        reason: str,
        requested: int | None = None,
        available: int | None = None,
        cause: Exception | None = None,
    ) -> None:
        error = FulfillmentBlockedError(
            order_id=str(order.id),
            strain_id=str(strain_id) if strain_id else None,
            strain_name=strain_name,
            reason=reason,
            requested_grams=requested,
            available_grams=available,
        )
        logger.warning(
            "order_fulfillment_blocked",
            extra={
                "strain_id": error.strain_id,
                "strain_name": strain_name,
                "reason": reason,
                "requested_grams": requested,
                "available_grams": available,
            },
        )
        raise error from cause
