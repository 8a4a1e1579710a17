"""
Reporting windows (``commerce_kernel.domain.reporting``).

Responsibility
--------------
Computes the revenue windows shown on the admin dashboard from a query
instant and a fixed reference timezone.

Windows are anchored to local midnight in the reference timezone and all
end at the query instant:

    today  = [midnight today, now]
    week   = [midnight (week_days - 1) days ago, now]
    month  = [midnight (month_days - 1) days ago, now]

Because ``week_days <= month_days`` the windows are nested, so
``today <= week <= month`` holds for any consistent snapshot.

Architecture position
---------------------
**Kernel domain layer** -- pure, ZERO I/O.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo


@dataclass(frozen=True)
class RevenueWindows:
    """UTC bounds of the dashboard revenue windows."""

    today_start: datetime
    week_start: datetime
    month_start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if not (self.month_start <= self.week_start <= self.today_start <= self.end):
            raise ValueError(
                "Revenue windows must be nested: "
                f"{self.month_start} <= {self.week_start} <= {self.today_start} <= {self.end}"
            )


def compute_revenue_windows(
    now: datetime,
    tz_name: str,
    week_days: int = 7,
    month_days: int = 30,
) -> RevenueWindows:
    """
    Build nested revenue windows anchored at ``now``.

    Preconditions:
        - ``now`` is timezone-aware.
        - ``1 <= week_days <= month_days``.

    Returns:
        RevenueWindows with UTC bounds.
    """
    if now.tzinfo is None:
        raise ValueError("now must be timezone-aware")
    if not 1 <= week_days <= month_days:
        raise ValueError(
            f"week_days ({week_days}) must be between 1 and month_days ({month_days})"
        )

    local_now = now.astimezone(ZoneInfo(tz_name))
    midnight = local_now.replace(hour=0, minute=0, second=0, microsecond=0)

    # Wall-clock arithmetic keeps local midnight across DST changes
    week_start = midnight - timedelta(days=week_days - 1)
    month_start = midnight - timedelta(days=month_days - 1)

    return RevenueWindows(
        today_start=midnight.astimezone(timezone.utc),
        week_start=week_start.astimezone(timezone.utc),
        month_start=month_start.astimezone(timezone.utc),
        end=now.astimezone(timezone.utc),
    )
