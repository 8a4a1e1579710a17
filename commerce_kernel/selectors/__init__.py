"""
Read-only query selectors.

Selectors take a caller-owned Session and return frozen DTOs from
commerce_kernel.domain.dtos.  They never add, flush or commit.
"""

from commerce_kernel.selectors.analytics_selector import AnalyticsSelector
from commerce_kernel.selectors.base import DEFAULT_MAX_LIMIT, BaseSelector
from commerce_kernel.selectors.inventory_selector import InventorySelector
from commerce_kernel.selectors.order_selector import MAX_PER_PAGE, OrderSelector

__all__ = [
    "AnalyticsSelector",
    "BaseSelector",
    "DEFAULT_MAX_LIMIT",
    "InventorySelector",
    "MAX_PER_PAGE",
    "OrderSelector",
]
