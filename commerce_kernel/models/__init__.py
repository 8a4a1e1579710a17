"""Persistence models for the commerce kernel."""

from commerce_kernel.models.order import Order, OrderItem, OrderStatusChange
from commerce_kernel.models.strain import Strain, StrainType

__all__ = [
    "Order",
    "OrderItem",
    "OrderStatusChange",
    "Strain",
    "StrainType",
]
