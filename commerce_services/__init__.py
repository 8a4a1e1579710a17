"""
commerce_services -- Package init and public API.

Responsibility:
    Request-level entrypoints that own the unit of work: the admin
    dashboard facade and the payment webhook handler.  Each call opens one
    ``session_scope`` and wires kernel services and selectors with
    settings from ``commerce_config``.

Architecture position:
    Services -- outermost layer.

    Dependency direction:
        commerce_services/ -> commerce_kernel/  (allowed)
        commerce_services/ -> commerce_config/  (allowed)
        commerce_kernel/   -> commerce_services/ (FORBIDDEN)
"""

from commerce_services.admin_api import AdminApi, ApiResult
from commerce_services.bootstrap import init_from_config
from commerce_services.payment_events import (
    PaymentEventHandler,
    PaymentEventResult,
    PaymentOutcome,
)

__all__ = [
    "AdminApi",
    "ApiResult",
    "PaymentEventHandler",
    "PaymentEventResult",
    "PaymentOutcome",
    "init_from_config",
]
