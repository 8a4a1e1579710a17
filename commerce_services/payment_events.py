"""
PaymentEventHandler -- applies payment-provider webhook events to orders.

Responsibility:
    Maps checkout-session events onto order transitions:

    ==================================  =====================================
    Event                               Effect
    ==================================  =====================================
    checkout.session.completed          PENDING -> PAID, customer email saved
    checkout.session.expired            PENDING -> CANCELLED
    payment_intent.payment_failed       logged only
    anything else                       UNHANDLED
    ==================================  =====================================

    Signature verification and payload decoding belong to the HTTP layer;
    this handler receives the already-verified event type and payload.

Invariants enforced:
    - Idempotent: a completed event for an order that is no longer PENDING
      reports ALREADY_PROCESSED and changes nothing.
    - The customer email is written only once the order has moved to PAID.
    - Session expiry cancels only PENDING orders; one paid in the meantime
      reports IGNORED.
    - Inventory is never touched; stock moves only at fulfillment.
    - Each event is one transaction (``session_scope``).

Failure modes:
    - InvalidArgumentError when the payload carries no session id.
    - An unknown session id is reported as ORDER_NOT_FOUND, not raised, so
      the provider does not retry an event that can never apply.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session, sessionmaker

from commerce_kernel.db.engine import session_scope
from commerce_kernel.domain.clock import Clock, SystemClock
from commerce_kernel.domain.order_lifecycle import OrderStatus, TransitionTrigger
from commerce_kernel.exceptions import InvalidArgumentError, InvalidTransitionError
from commerce_kernel.logging_config import LogContext, get_logger
from commerce_kernel.selectors.order_selector import OrderSelector
from commerce_kernel.services.order_service import OrderService
from commerce_kernel.services.transition_service import TransitionService

logger = get_logger("services.payment_events")

CHECKOUT_COMPLETED = "checkout.session.completed"
CHECKOUT_EXPIRED = "checkout.session.expired"
PAYMENT_FAILED = "payment_intent.payment_failed"


class PaymentOutcome(str, Enum):
    PAID = "paid"
    CANCELLED = "cancelled"
    ALREADY_PROCESSED = "already_processed"
    ORDER_NOT_FOUND = "order_not_found"
    IGNORED = "ignored"
    UNHANDLED = "unhandled"


@dataclass(frozen=True)
class PaymentEventResult:
    outcome: PaymentOutcome
    order_id: UUID | None = None
    status: OrderStatus | None = None


class PaymentEventHandler:
    """Webhook event dispatcher for checkout sessions."""

    def __init__(
        self,
        session_factory: sessionmaker[Session] | None = None,
        clock: Clock | None = None,
    ):
        self._session_factory = session_factory
        self._clock = clock or SystemClock()
        self._handlers = {
            CHECKOUT_COMPLETED: self._on_completed,
            CHECKOUT_EXPIRED: self._on_expired,
            PAYMENT_FAILED: self._on_payment_failed,
        }

    def handle(self, event_type: str, payload: Mapping[str, Any]) -> PaymentEventResult:
        """
        Apply one verified provider event.

        Args:
            event_type: Provider event name.
            payload: Event object; ``session_id`` identifies the checkout
                session, ``customer_email`` is optional.
        """
        handler = self._handlers.get(event_type)
        if handler is None:
            logger.info("payment_event_unhandled", extra={"event_type": event_type})
            return PaymentEventResult(PaymentOutcome.UNHANDLED)

        with LogContext.bind(
            correlation_id=payload.get("event_id"),
            trigger=TransitionTrigger.PAYMENT_WEBHOOK.value,
        ):
            result = handler(payload)
        logger.info(
            "payment_event_handled",
            extra={
                "event_type": event_type,
                "outcome": result.outcome.value,
                "order_id": str(result.order_id) if result.order_id else None,
            },
        )
        return result

    def _on_completed(self, payload: Mapping[str, Any]) -> PaymentEventResult:
        session_ref = _session_ref(payload)
        with session_scope(self._session_factory) as session:
            order = OrderSelector(session, self._clock).find_by_payment_session(session_ref)
            if order is None:
                return _not_found(session_ref)
            if order.status != OrderStatus.PENDING:
                return PaymentEventResult(
                    PaymentOutcome.ALREADY_PROCESSED, order.id, order.status
                )

            try:
                view = TransitionService(session, self._clock).transition(
                    order.id,
                    OrderStatus.PAID,
                    trigger=TransitionTrigger.PAYMENT_WEBHOOK,
                )
            except InvalidTransitionError as exc:
                # Another delivery of this event won the row lock
                return PaymentEventResult(
                    PaymentOutcome.ALREADY_PROCESSED, order.id, OrderStatus(exc.from_status)
                )
            OrderService(session, self._clock).set_customer_email(
                order.id, payload.get("customer_email")
            )
            return PaymentEventResult(PaymentOutcome.PAID, view.id, view.status)

    def _on_expired(self, payload: Mapping[str, Any]) -> PaymentEventResult:
        session_ref = _session_ref(payload)
        with session_scope(self._session_factory) as session:
            order = OrderSelector(session, self._clock).find_by_payment_session(session_ref)
            if order is None:
                return _not_found(session_ref)
            if order.status != OrderStatus.PENDING:
                return PaymentEventResult(PaymentOutcome.IGNORED, order.id, order.status)

            try:
                view = TransitionService(session, self._clock).transition(
                    order.id,
                    OrderStatus.CANCELLED,
                    trigger=TransitionTrigger.TIMEOUT,
                )
            except InvalidTransitionError as exc:
                # Paid (or cancelled) after the status check; a timeout only cancels PENDING
                return PaymentEventResult(
                    PaymentOutcome.IGNORED, order.id, OrderStatus(exc.from_status)
                )
            return PaymentEventResult(PaymentOutcome.CANCELLED, view.id, view.status)

    def _on_payment_failed(self, payload: Mapping[str, Any]) -> PaymentEventResult:
        logger.warning(
            "payment_failed",
            extra={
                "payment_intent": payload.get("payment_intent_id"),
                "failure_message": payload.get("failure_message"),
            },
        )
        return PaymentEventResult(PaymentOutcome.IGNORED)


def _session_ref(payload: Mapping[str, Any]) -> str:
    ref = payload.get("session_id")
    if not isinstance(ref, str) or not ref:
        raise InvalidArgumentError("session_id", "payload must carry the checkout session id")
    return ref


def _not_found(session_ref: str) -> PaymentEventResult:
    logger.warning("payment_event_order_not_found", extra={"payment_session_ref": session_ref})
    return PaymentEventResult(PaymentOutcome.ORDER_NOT_FOUND)
