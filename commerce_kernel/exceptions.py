"""
Typed Exception Hierarchy for the Commerce Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

The admin UI must show the specific reason an action failed ("cannot
fulfill: insufficient stock for Blue Dream"), not a generic error. Callers
therefore catch by TYPE and read structured ATTRIBUTES; they never parse
message strings.

  1. Every error has a typed exception class (catch by type, not message)
  2. Every exception has a CODE class attribute (machine-readable, API-safe)
  3. Exceptions carry structured DATA (ids, statuses, quantities)

Example:
    try:
        transitions.transition(order_id, OrderStatus.FULFILLED)
    except FulfillmentBlockedError as e:
        api_error(code=e.code, strain=e.strain_name, reason=e.reason)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    CommerceKernelError (base)
    |
    +-- NotFoundError
    |   +-- OrderNotFoundError
    |   +-- StrainNotFoundError
    |
    +-- OrderError
    |   +-- InvalidTransitionError
    |   +-- FulfillmentBlockedError
    |   +-- OrderTotalMismatchError
    |   +-- DuplicatePaymentSessionError
    |
    +-- InventoryError
    |   +-- InsufficientStockError
    |
    +-- InvalidArgumentError
    |
    +-- ConfigurationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category   | Code                       | When Raised
-----------|----------------------------|------------------------------------------
NotFound   | ORDER_NOT_FOUND            | Order ID doesn't exist
           | STRAIN_NOT_FOUND           | Strain ID doesn't exist
-----------|----------------------------|------------------------------------------
Order      | INVALID_TRANSITION         | Target status not reachable from current
           | FULFILLMENT_BLOCKED        | Missing strain / short stock at fulfillment
           | ORDER_TOTAL_MISMATCH       | total_cents != sum of line prices
           | DUPLICATE_PAYMENT_SESSION  | Payment session already has an order
-----------|----------------------------|------------------------------------------
Inventory  | INSUFFICIENT_STOCK         | Decrement would drive stock negative
-----------|----------------------------|------------------------------------------
Argument   | INVALID_ARGUMENT           | Malformed limit, grams, page, status ...
-----------|----------------------------|------------------------------------------
Config     | CONFIGURATION_ERROR        | Invalid configuration value

===============================================================================
HANDLING PATTERNS
===============================================================================

1. InsufficientStockError is raised by the inventory ledger and WRAPPED into
   FulfillmentBlockedError by the transition service.  Admin callers only
   ever see FulfillmentBlockedError for fulfillment failures.

2. InvalidTransitionError on a re-submitted fulfillment is the expected
   outcome of a double click or a retry after commit; the inventory was
   decremented exactly once by the first attempt.
"""


class CommerceKernelError(Exception):
    """
    Base exception for all commerce kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "COMMERCE_KERNEL_ERROR"

    def details(self) -> dict:
        """Structured, JSON-ready attributes of this error."""
        return {
            k: (str(v) if v is not None and not isinstance(v, (int, str, bool)) else v)
            for k, v in vars(self).items()
            if not k.startswith("_")
        }


# Lookup errors


class NotFoundError(CommerceKernelError):
    """Base exception for missing entities."""

    code: str = "NOT_FOUND"


class OrderNotFoundError(NotFoundError):
    """Order with given ID was not found."""

    code: str = "ORDER_NOT_FOUND"

    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"Order not found: {order_id}")


class StrainNotFoundError(NotFoundError):
    """Strain with given ID was not found."""

    code: str = "STRAIN_NOT_FOUND"

    def __init__(self, strain_id: str):
        self.strain_id = strain_id
        super().__init__(f"Strain not found: {strain_id}")


# Order lifecycle errors


class OrderError(CommerceKernelError):
    """Base exception for order lifecycle errors."""

    code: str = "ORDER_ERROR"


class InvalidTransitionError(OrderError):
    """Target status is not reachable from the order's current status.

    ``trigger`` is set when the move exists but may not be fired by the
    requesting trigger (e.g. a payment webhook asking for FULFILLED).
    """

    code: str = "INVALID_TRANSITION"

    def __init__(
        self,
        order_id: str | None,
        from_status: str,
        to_status: str,
        trigger: str | None = None,
    ):
        self.order_id = order_id
        self.from_status = from_status
        self.to_status = to_status
        self.trigger = trigger
        subject = f"order {order_id}" if order_id else "order"
        message = f"Cannot move {subject} from {from_status} to {to_status}"
        if trigger is not None:
            message += f" by trigger {trigger}"
        super().__init__(message)


class FulfillmentBlockedError(OrderError):
    """
    Fulfillment cannot be committed for a line item.

    Raised before any stock is touched; the order stays PAID.
    """

    code: str = "FULFILLMENT_BLOCKED"

    def __init__(
        self,
        order_id: str,
        strain_id: str | None,
        strain_name: str,
        reason: str,
        requested_grams: int | None = None,
        available_grams: int | None = None,
    ):
        self.order_id = order_id
        self.strain_id = strain_id
        self.strain_name = strain_name
        self.reason = reason
        self.requested_grams = requested_grams
        self.available_grams = available_grams
        super().__init__(f"cannot fulfill: {reason} for {strain_name}")


class OrderTotalMismatchError(OrderError):
    """Order total does not equal the sum of its line prices."""

    code: str = "ORDER_TOTAL_MISMATCH"

    def __init__(self, order_id: str | None, total_cents: int, line_sum_cents: int):
        self.order_id = order_id
        self.total_cents = total_cents
        self.line_sum_cents = line_sum_cents
        super().__init__(
            f"Order {order_id} total {total_cents} != line sum {line_sum_cents}"
        )


class DuplicatePaymentSessionError(OrderError):
    """An order already exists for the payment session."""

    code: str = "DUPLICATE_PAYMENT_SESSION"

    def __init__(self, payment_session_ref: str, existing_order_id: str):
        self.payment_session_ref = payment_session_ref
        self.existing_order_id = existing_order_id
        super().__init__(
            f"Payment session {payment_session_ref} already has order {existing_order_id}"
        )


# Inventory errors


class InventoryError(CommerceKernelError):
    """Base exception for inventory ledger errors."""

    code: str = "INVENTORY_ERROR"


class InsufficientStockError(InventoryError):
    """Decrement would drive available grams negative."""

    code: str = "INSUFFICIENT_STOCK"

    def __init__(self, strain_id: str, requested_grams: int, available_grams: int):
        self.strain_id = strain_id
        self.requested_grams = requested_grams
        self.available_grams = available_grams
        super().__init__(
            f"Insufficient stock for strain {strain_id}: "
            f"requested {requested_grams}g, available {available_grams}g"
        )


# Boundary validation


class InvalidArgumentError(CommerceKernelError):
    """Caller supplied a malformed argument."""

    code: str = "INVALID_ARGUMENT"

    def __init__(self, argument: str, reason: str):
        self.argument = argument
        self.reason = reason
        super().__init__(f"Invalid {argument}: {reason}")


class ConfigurationError(CommerceKernelError):
    """Configuration value is missing or invalid."""

    code: str = "CONFIGURATION_ERROR"

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Invalid configuration '{key}': {reason}")
