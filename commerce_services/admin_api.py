"""
AdminApi -- the admin dashboard's entrypoint into the commerce kernel.

Responsibility:
    Owns the unit of work for every admin request: opens a session through
    ``session_scope`` (commit on success, rollback on error), wires the
    kernel services and selectors with configured thresholds and limits,
    and converts kernel DTOs into camelCase, JSON-ready dicts.

Architecture position:
    Services -- outermost layer.  May import commerce_kernel and
    commerce_config.

Invariants enforced:
    - One transaction per call.  A status update and its stock decrements
      commit together or not at all.
    - Reads raise CommerceKernelError subclasses to the caller.  Commands
      (status and inventory updates) return an ApiResult carrying either
      data or the error's code, message and details.
    - Limits default to and are bounded by the configured query settings.

Failure modes:
    - Unexpected (non-kernel) exceptions propagate after rollback.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Callable
from uuid import UUID

from sqlalchemy.orm import Session, sessionmaker

from commerce_config import CommerceConfig, get_active_config
from commerce_kernel.db.engine import session_scope
from commerce_kernel.domain.clock import Clock, SystemClock
from commerce_kernel.domain.order_lifecycle import OrderStatus, TransitionTrigger
from commerce_kernel.domain.validation import parse_uuid
from commerce_kernel.exceptions import CommerceKernelError
from commerce_kernel.logging_config import LogContext, get_logger
from commerce_kernel.selectors.analytics_selector import AnalyticsSelector
from commerce_kernel.selectors.inventory_selector import InventorySelector
from commerce_kernel.selectors.order_selector import OrderSelector
from commerce_kernel.services.inventory_ledger import InventoryLedger, StockUpdate
from commerce_kernel.services.transition_service import TransitionService
from commerce_services.serializers import (
    dashboard_stats_to_dict,
    order_page_to_dict,
    order_row_to_dict,
    order_to_dict,
    revenue_stats_to_dict,
    strain_info_to_dict,
    top_seller_to_dict,
)

logger = get_logger("services.admin_api")


@dataclass(frozen=True)
class ApiResult:
    """Outcome of an admin command.

    ``error`` is None when ``ok``; otherwise a dict with ``code``,
    ``message`` and ``details``.
    """

    ok: bool
    data: Any = None
    error: dict[str, Any] | None = None

    @classmethod
    def success(cls, data: Any = None) -> ApiResult:
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, exc: CommerceKernelError) -> ApiResult:
        return cls(
            ok=False,
            error={"code": exc.code, "message": str(exc), "details": exc.details()},
        )

    def to_dict(self) -> dict[str, Any]:
        if self.ok:
            return {"ok": True, "data": self.data}
        return {"ok": False, "error": self.error}


class AdminApi:
    """
    Admin dashboard facade.

    Args:
        session_factory: sessionmaker for the unit of work; the module-level
            engine's factory when omitted.
        clock: Time source for timestamps and revenue windows.
        config: Settings; ``get_active_config()`` when omitted.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session] | None = None,
        clock: Clock | None = None,
        config: CommerceConfig | None = None,
    ):
        self._session_factory = session_factory
        self._clock = clock or SystemClock()
        self._config = config or get_active_config()

    # ------------------------------------------------------------------
    # Dashboard
    # ------------------------------------------------------------------

    def get_stats(self) -> dict[str, Any]:
        with session_scope(self._session_factory) as session:
            return dashboard_stats_to_dict(self._analytics(session).dashboard_stats())

    def get_order_stats(self) -> dict[str, Any]:
        with session_scope(self._session_factory) as session:
            stats = self._analytics(session).revenue_stats(self._clock.now())
            return revenue_stats_to_dict(stats)

    def get_top_sellers(self, limit: int | None = None) -> list[dict[str, Any]]:
        limit = self._config.queries.default_limit if limit is None else limit
        with session_scope(self._session_factory) as session:
            rows = self._analytics(session).top_sellers(limit)
            return [top_seller_to_dict(row) for row in rows]

    def get_recent_orders(self, limit: int | None = None) -> list[dict[str, Any]]:
        limit = self._config.queries.default_limit if limit is None else limit
        with session_scope(self._session_factory) as session:
            rows = self._analytics(session).recent_orders(limit)
            return [order_row_to_dict(row) for row in rows]

    # ------------------------------------------------------------------
    # Orders
    # ------------------------------------------------------------------

    def get_order(self, order_id: UUID | str) -> dict[str, Any]:
        order_id = parse_uuid(order_id, "order_id")
        with session_scope(self._session_factory) as session:
            return order_to_dict(OrderSelector(session, self._clock).get_order(order_id))

    def list_orders(
        self,
        page: int = 1,
        per_page: int | None = None,
        search: str | None = None,
        status: OrderStatus | str | None = None,
    ) -> dict[str, Any]:
        queries = self._config.queries
        per_page = queries.default_page_size if per_page is None else per_page
        with session_scope(self._session_factory) as session:
            selector = OrderSelector(session, self._clock, max_per_page=queries.max_page_size)
            result = selector.list_orders(
                page=page,
                per_page=per_page,
                search=search,
                status=status or None,
            )
            return order_page_to_dict(result)

    def update_order_status(
        self,
        order_id: UUID | str,
        status: OrderStatus | str,
        actor_id: UUID | None = None,
    ) -> ApiResult:
        """Move an order to ``status``; fulfillment also commits its stock."""

        def apply(session: Session) -> dict[str, Any]:
            service = TransitionService(session, self._clock, self._ledger(session))
            view = service.transition(
                parse_uuid(order_id, "order_id"),
                status,
                trigger=TransitionTrigger.ADMIN,
                actor_id=actor_id,
            )
            return order_to_dict(view)

        with LogContext.bind(actor_id=str(actor_id) if actor_id else None):
            return self._command("update_order_status", apply)

    # ------------------------------------------------------------------
    # Inventory
    # ------------------------------------------------------------------

    def list_inventory(self, low_stock_only: bool = False) -> list[dict[str, Any]]:
        with session_scope(self._session_factory) as session:
            selector = InventorySelector(
                session,
                self._clock,
                low_stock_threshold=self._config.inventory.low_stock_threshold_grams,
            )
            return [strain_info_to_dict(s) for s in selector.list_inventory(low_stock_only)]

    def update_inventory(
        self,
        strain_id: UUID | str,
        grams: int | None = None,
        price_per_gram_cents: int | None = None,
    ) -> ApiResult:
        """Overwrite one strain's stock and/or price."""

        def apply(session: Session) -> dict[str, Any]:
            info = self._ledger(session).set_stock(
                parse_uuid(strain_id, "strain_id"),
                grams=grams,
                price_per_gram_cents=price_per_gram_cents,
            )
            return strain_info_to_dict(info)

        return self._command("update_inventory", apply)

    def bulk_update_inventory(self, updates: Iterable[Mapping[str, Any]]) -> ApiResult:
        """Apply several edits, each ``{"id", "grams"?, "pricePerGramCents"?}``, atomically."""

        def apply(session: Session) -> dict[str, Any]:
            parsed = [
                StockUpdate(
                    strain_id=parse_uuid(u.get("id"), f"updates[{i}].id"),
                    grams=u.get("grams"),
                    price_per_gram_cents=u.get("pricePerGramCents"),
                )
                for i, u in enumerate(updates)
            ]
            return {"updated": self._ledger(session).bulk_set_stock(parsed)}

        return self._command("bulk_update_inventory", apply)

    # ------------------------------------------------------------------
    # Wiring
    # ------------------------------------------------------------------

    def _analytics(self, session: Session) -> AnalyticsSelector:
        reporting = self._config.reporting
        return AnalyticsSelector(
            session,
            self._clock,
            reporting_timezone=reporting.timezone,
            week_window_days=reporting.week_window_days,
            month_window_days=reporting.month_window_days,
            low_stock_threshold=self._config.inventory.low_stock_threshold_grams,
            max_limit=self._config.queries.max_limit,
        )

    def _ledger(self, session: Session) -> InventoryLedger:
        return InventoryLedger(
            session,
            self._clock,
            low_stock_threshold=self._config.inventory.low_stock_threshold_grams,
        )

    def _command(self, name: str, apply: Callable[[Session], Any]) -> ApiResult:
        try:
            with session_scope(self._session_factory) as session:
                data = apply(session)
        except CommerceKernelError as exc:
            logger.info(
                "admin_command_failed",
                extra={"command": name, "error_code": exc.code, "error": str(exc)},
            )
            return ApiResult.failure(exc)
        return ApiResult.success(data)
