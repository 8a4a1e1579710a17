"""Services for the commerce kernel (write side)."""

from commerce_kernel.services.inventory_ledger import (
    DEFAULT_LOW_STOCK_THRESHOLD_GRAMS,
    InventoryLedger,
    StockUpdate,
)
from commerce_kernel.services.order_service import OrderService
from commerce_kernel.services.transition_service import TransitionService

__all__ = [
    "DEFAULT_LOW_STOCK_THRESHOLD_GRAMS",
    "InventoryLedger",
    "OrderService",
    "StockUpdate",
    "TransitionService",
]
