"""
Commerce Kernel - order lifecycle and storefront analytics core.

A small transactional core for a gram-priced retail storefront with:
- Inventory ledger with all-or-nothing fulfillment decrements
- Order state machine (PENDING -> PAID -> FULFILLED, or -> CANCELLED)
- Price snapshots frozen at purchase time
- Read-only dashboard analytics
"""

__version__ = "0.1.0"
