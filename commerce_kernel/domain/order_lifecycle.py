"""
Order lifecycle (``commerce_kernel.domain.order_lifecycle``).

Responsibility
--------------
Declares the order state machine as data and resolves requested status
changes against it.

    PENDING --pay--> PAID --fulfill--> FULFILLED
       |               |
       +--cancel--+----+--cancel--> CANCELLED

FULFILLED and CANCELLED are terminal.

Architecture position
---------------------
**Kernel domain layer** -- pure, ZERO I/O.

Invariants enforced
-------------------
* Status only moves forward along ``ORDER_WORKFLOW``; self-transitions and
  moves out of terminal states are rejected with InvalidTransitionError.
* A move fires only for one of its declared triggers: the payment webhook
  can pay an order but never fulfil it, and a timeout only cancels PENDING.
* Only PAID -> FULFILLED decrements inventory.
"""

from __future__ import annotations

from enum import Enum

from commerce_kernel.domain.workflow import Guard, Transition, Workflow
from commerce_kernel.exceptions import InvalidArgumentError, InvalidTransitionError


class OrderStatus(str, Enum):
    """Order lifecycle status."""

    PENDING = "PENDING"
    PAID = "PAID"
    FULFILLED = "FULFILLED"
    CANCELLED = "CANCELLED"


class TransitionTrigger(str, Enum):
    """Who asked for a status change."""

    ADMIN = "admin"
    PAYMENT_WEBHOOK = "payment_webhook"
    TIMEOUT = "timeout"


# Statuses whose totals count as revenue
REVENUE_STATUSES: frozenset[OrderStatus] = frozenset(
    {OrderStatus.PAID, OrderStatus.FULFILLED}
)

STOCK_AVAILABLE = Guard(
    name="stock_available",
    description="Every line item's strain exists and has enough grams",
)

ORDER_WORKFLOW = Workflow(
    name="order",
    description="Storefront order lifecycle",
    initial_state=OrderStatus.PENDING.value,
    states=tuple(s.value for s in OrderStatus),
    transitions=(
        Transition(
            from_state=OrderStatus.PENDING.value,
            to_state=OrderStatus.PAID.value,
            action="pay",
            triggers=(TransitionTrigger.PAYMENT_WEBHOOK.value, TransitionTrigger.ADMIN.value),
        ),
        Transition(
            from_state=OrderStatus.PENDING.value,
            to_state=OrderStatus.CANCELLED.value,
            action="cancel",
            triggers=(TransitionTrigger.ADMIN.value, TransitionTrigger.TIMEOUT.value),
        ),
        Transition(
            from_state=OrderStatus.PAID.value,
            to_state=OrderStatus.FULFILLED.value,
            action="fulfill",
            triggers=(TransitionTrigger.ADMIN.value,),
            guard=STOCK_AVAILABLE,
            decrements_inventory=True,
        ),
        Transition(
            from_state=OrderStatus.PAID.value,
            to_state=OrderStatus.CANCELLED.value,
            action="cancel",
            triggers=(TransitionTrigger.ADMIN.value,),
        ),
    ),
    terminal_states=(OrderStatus.FULFILLED.value, OrderStatus.CANCELLED.value),
)


def parse_status(value: OrderStatus | str) -> OrderStatus:
    """Coerce a boundary value into an OrderStatus.

    Raises:
        InvalidArgumentError: if ``value`` names no status.
    """
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus(str(value).upper())
    except ValueError:
        raise InvalidArgumentError(
            "status", f"{value!r} is not one of {[s.value for s in OrderStatus]}"
        ) from None


def resolve_transition(
    current: OrderStatus,
    target: OrderStatus,
    order_id: str | None = None,
    trigger: TransitionTrigger | None = None,
) -> Transition:
    """Return the declared transition from ``current`` to ``target``.

    When ``trigger`` is given it must be one of the transition's declared
    triggers.

    Raises:
        InvalidTransitionError: if the move is not in ORDER_WORKFLOW, or
            ``trigger`` may not fire it.
    """
    transition = ORDER_WORKFLOW.find_transition(current.value, target.value)
    if transition is None:
        raise InvalidTransitionError(order_id, current.value, target.value)
    if trigger is not None and trigger.value not in transition.triggers:
        raise InvalidTransitionError(order_id, current.value, target.value, trigger.value)
    return transition


def is_terminal(status: OrderStatus) -> bool:
    return status.value in ORDER_WORKFLOW.terminal_states


def allowed_targets(status: OrderStatus) -> tuple[OrderStatus, ...]:
    """Statuses an order in ``status`` may move to (used by the admin status picker)."""
    return tuple(OrderStatus(s) for s in ORDER_WORKFLOW.targets_from(status.value))
