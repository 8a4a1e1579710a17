"""
JSON-ready views of kernel DTOs for the admin UI.

Keys are camelCase, ids are strings, timestamps are ISO-8601 UTC and money
stays integer cents.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from commerce_kernel.domain.dtos import (
    DashboardStats,
    OrderItemView,
    OrderPage,
    OrderView,
    RecentOrderRow,
    RevenueStats,
    StatusChangeView,
    StrainInfo,
    StrainSnapshot,
    TopSellerRow,
)


def _id(value: UUID | None) -> str | None:
    return str(value) if value is not None else None


def _ts(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def dashboard_stats_to_dict(stats: DashboardStats) -> dict[str, Any]:
    return {
        "totalStrains": stats.total_strains,
        "totalInventoryGrams": stats.total_inventory_grams,
        "totalOrders": stats.total_orders,
        "totalRevenueCents": stats.total_revenue_cents,
        "lowStockCount": stats.low_stock_count,
    }


def revenue_stats_to_dict(stats: RevenueStats) -> dict[str, Any]:
    return {
        "todayRevenueCents": stats.today_revenue_cents,
        "weekRevenueCents": stats.week_revenue_cents,
        "monthRevenueCents": stats.month_revenue_cents,
        "statusCounts": {status.value: count for status, count in stats.status_counts.items()},
    }


def strain_snapshot_to_dict(strain: StrainSnapshot) -> dict[str, Any]:
    return {
        "id": _id(strain.strain_id),
        "name": strain.name,
        "imageUrl": strain.image_url,
    }


def top_seller_to_dict(row: TopSellerRow) -> dict[str, Any]:
    return {
        "strain": strain_snapshot_to_dict(row.strain),
        "totalGrams": row.total_grams,
        "totalRevenueCents": row.total_revenue_cents,
        "orderCount": row.order_count,
    }


def order_row_to_dict(row: RecentOrderRow) -> dict[str, Any]:
    return {
        "id": str(row.id),
        "status": row.status.value,
        "email": row.email,
        "totalCents": row.total_cents,
        "itemCount": row.item_count,
        "createdAt": _ts(row.created_at),
    }


def order_page_to_dict(page: OrderPage) -> dict[str, Any]:
    return {
        "orders": [order_row_to_dict(row) for row in page.rows],
        "total": page.total,
        "page": page.page,
        "perPage": page.per_page,
        "pages": page.pages,
    }


def order_item_to_dict(item: OrderItemView) -> dict[str, Any]:
    return {
        "id": str(item.id),
        "strain": strain_snapshot_to_dict(item.strain),
        "grams": item.grams,
        "pricePerGramCents": item.price_per_gram_cents,
        "priceCents": item.price_cents,
    }


def status_change_to_dict(change: StatusChangeView) -> dict[str, Any]:
    return {
        "fromStatus": change.from_status.value,
        "toStatus": change.to_status.value,
        "trigger": change.trigger.value,
        "actorId": _id(change.actor_id),
        "occurredAt": _ts(change.occurred_at),
    }


def order_to_dict(order: OrderView) -> dict[str, Any]:
    return {
        "id": str(order.id),
        "status": order.status.value,
        "email": order.email,
        "totalCents": order.total_cents,
        "paymentSessionRef": order.payment_session_ref,
        "itemCount": order.item_count,
        "createdAt": _ts(order.created_at),
        "updatedAt": _ts(order.updated_at),
        "items": [order_item_to_dict(item) for item in order.items],
        "history": [status_change_to_dict(change) for change in order.history],
    }


def strain_info_to_dict(strain: StrainInfo) -> dict[str, Any]:
    return {
        "id": str(strain.id),
        "name": strain.name,
        "slug": strain.slug,
        "type": strain.strain_type,
        "imageUrl": strain.image_url,
        "pricePerGramCents": strain.price_per_gram_cents,
        "availableGrams": strain.available_grams,
        "isLowStock": strain.is_low_stock,
    }
