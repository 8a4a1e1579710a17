"""
Pure domain layer.

This module contains pure data transfer objects and domain logic
with NO dependencies on:
- ORM (SQLAlchemy)
- Database
- I/O (time is injected through Clock)

All domain objects are immutable and deterministic.
"""

from commerce_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from commerce_kernel.domain.dtos import (
    DashboardStats,
    OrderItemView,
    OrderLineRequest,
    OrderPage,
    OrderView,
    RecentOrderRow,
    RevenueStats,
    StatusChangeView,
    StrainInfo,
    StrainSnapshot,
    TopSellerRow,
)
from commerce_kernel.domain.order_lifecycle import (
    ORDER_WORKFLOW,
    REVENUE_STATUSES,
    OrderStatus,
    TransitionTrigger,
    allowed_targets,
    is_terminal,
    parse_status,
    resolve_transition,
)
from commerce_kernel.domain.reporting import RevenueWindows, compute_revenue_windows
from commerce_kernel.domain.workflow import Guard, Transition, Workflow

__all__ = [
    # Clock
    "Clock",
    "DeterministicClock",
    "SystemClock",
    # Workflow
    "Guard",
    "Transition",
    "Workflow",
    "ORDER_WORKFLOW",
    "REVENUE_STATUSES",
    "OrderStatus",
    "TransitionTrigger",
    "allowed_targets",
    "is_terminal",
    "parse_status",
    "resolve_transition",
    # Reporting
    "RevenueWindows",
    "compute_revenue_windows",
    # DTOs
    "DashboardStats",
    "OrderItemView",
    "OrderLineRequest",
    "OrderPage",
    "OrderView",
    "RecentOrderRow",
    "RevenueStats",
    "StatusChangeView",
    "StrainInfo",
    "StrainSnapshot",
    "TopSellerRow",
]
