"""Time-window filtering of trades.

Filtering looks only at when a trade was opened. A retained trade keeps
its whole sell history, including sells made outside the window, so its
per-trade figures stay self-consistent.
"""

from __future__ import annotations

import logging
from datetime import datetime, time, timedelta
from enum import StrEnum

from pydantic import BaseModel

from tradebook.analytics.base import ensure_aware, resolve_now
from tradebook.ledger.models import Trade

logger = logging.getLogger(__name__)


class TimeFilter(StrEnum):
    TODAY = "today"
    SEVEN_DAYS = "7d"
    THIRTY_DAYS = "30d"
    CUSTOM = "custom"
    LIFETIME = "lifetime"


class DateRange(BaseModel):
    """Inclusive ``[start, end]`` window for the custom filter."""

    start: datetime
    end: datetime

    model_config = {"frozen": True}


def _start_of_today(now: datetime | None) -> datetime:
    """Midnight of the local day, with the UTC offset in force at midnight.

    Without an explicit ``now`` the system zone resolves midnight itself, so
    a DST switch later that day does not shift the start by an hour.
    """
    if now is None:
        return datetime.combine(datetime.now().date(), time.min).astimezone()
    return resolve_now(now).replace(hour=0, minute=0, second=0, microsecond=0)


def get_filtered_trades(
    trades: list[Trade],
    time_filter: TimeFilter | str,
    custom_range: DateRange | None = None,
    now: datetime | None = None,
) -> list[Trade]:
    """Trades opened within the window selected by ``time_filter``.

    ``today`` starts at midnight of ``now``'s own timezone (the system
    zone by default); ``7d`` and ``30d`` are rolling windows ending at ``now``;
    ``custom`` is inclusive at both ends. ``lifetime``, and any value not
    listed above, returns every trade in its original order.

    Raises:
        ValueError: If ``custom`` is requested without a range.
    """
    if time_filter == TimeFilter.TODAY:
        start = _start_of_today(now)
    elif time_filter == TimeFilter.SEVEN_DAYS:
        start = resolve_now(now) - timedelta(days=7)
    elif time_filter == TimeFilter.THIRTY_DAYS:
        start = resolve_now(now) - timedelta(days=30)
    elif time_filter == TimeFilter.CUSTOM:
        if custom_range is None:
            raise ValueError("The custom filter requires a date range")
        range_start = ensure_aware(custom_range.start)
        range_end = ensure_aware(custom_range.end)
        return [t for t in trades if range_start <= t.timestamp <= range_end]
    else:
        if time_filter != TimeFilter.LIFETIME:
            logger.debug("Unknown time filter %r, treating as lifetime", time_filter)
        return list(trades)

    return [t for t in trades if t.timestamp >= start]
