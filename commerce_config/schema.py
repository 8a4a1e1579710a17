"""
CommerceConfig schema.

Frozen settings objects produced by the loader.  Sections mirror the
top-level keys of ``defaults.yaml``; ``checksum`` identifies the merged
source so log traces can be tied to the exact settings in force.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class InventorySettings:
    low_stock_threshold_grams: int = 10


@dataclass(frozen=True)
class ReportingSettings:
    """Revenue window parameters."""

    timezone: str = "UTC"
    week_window_days: int = 7
    month_window_days: int = 30


@dataclass(frozen=True)
class QuerySettings:
    """Bounds on dashboard limits and order-list pages."""

    default_limit: int = 10
    max_limit: int = 50
    default_page_size: int = 20
    max_page_size: int = 100


@dataclass(frozen=True)
class DatabaseSettings:
    url: str | None = None
    echo: bool = False
    pool_size: int = 5
    max_overflow: int = 10


@dataclass(frozen=True)
class LoggingSettings:
    level: str = "INFO"


@dataclass(frozen=True)
class CommerceConfig:
    """The validated runtime configuration."""

    inventory: InventorySettings = field(default_factory=InventorySettings)
    reporting: ReportingSettings = field(default_factory=ReportingSettings)
    queries: QuerySettings = field(default_factory=QuerySettings)
    database: DatabaseSettings = field(default_factory=DatabaseSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    checksum: str = ""
    sources: tuple[str, ...] = ()
