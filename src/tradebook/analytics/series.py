"""Time series over trade activity: daily buckets, running total, months.

Days are UTC calendar dates. A sell's contribution is its own share of
the trade's realized result::

    cost = sold_amount / trade.amount * trade.usdt_used
    pnl  = usdt_received - cost
"""

from __future__ import annotations

from datetime import UTC, date

from tradebook.analytics.base import (
    CumulativeSeries,
    DailyData,
    MonthlyPnL,
    ieee_div,
    utc_day,
)
from tradebook.ledger.models import SellRecord, Trade

_MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


class _DayAccumulator:
    """Running totals for one calendar date while scanning trades."""

    __slots__ = ("date", "pnl", "roi", "trades", "sells")

    def __init__(self, day: str) -> None:
        self.date = day
        self.pnl = 0.0
        self.roi = 0.0
        self.trades = 0
        self.sells = 0

    def to_daily(self) -> DailyData:
        return DailyData(
            date=self.date,
            pnl=self.pnl,
            roi=self.roi,
            trades=self.trades,
            sells=self.sells,
        )


def _sell_result(trade: Trade, sell: SellRecord) -> tuple[float, float]:
    """(realized pnl, cost basis) of a single sell."""
    cost = ieee_div(sell.sold_amount, trade.amount) * trade.usdt_used
    return sell.usdt_received - cost, cost


def get_daily_data(trades: list[Trade]) -> list[DailyData]:
    """One entry per date on which a trade was opened or a sell was made.

    ``roi`` adds up the ROI percentages of every sell on that date; it is
    a sum, not an average. Sells with a non-positive cost basis add to
    ``pnl`` but not to ``roi``. Entries are sorted by date.
    """
    days: dict[str, _DayAccumulator] = {}

    def bucket(day: str) -> _DayAccumulator:
        if day not in days:
            days[day] = _DayAccumulator(day)
        return days[day]

    for trade in trades:
        bucket(utc_day(trade.timestamp)).trades += 1

        for sell in trade.sells:
            acc = bucket(utc_day(sell.timestamp))
            acc.sells += 1
            pnl, cost = _sell_result(trade, sell)
            acc.pnl += pnl
            if cost > 0:
                acc.roi += pnl / cost * 100

    return [days[day].to_daily() for day in sorted(days)]


def _chart_label(day: str) -> str:
    """'2025-01-05' -> 'Jan 5'."""
    d = date.fromisoformat(day)
    return f"{_MONTH_NAMES[d.month - 1][:3]} {d.day}"


def get_cumulative_data(trades: list[Trade]) -> CumulativeSeries:
    """Running total of daily realized PNL, one point per active date."""
    labels: list[str] = []
    data: list[float] = []
    cumulative = 0.0
    for day in get_daily_data(trades):
        cumulative += day.pnl
        labels.append(_chart_label(day.date))
        data.append(cumulative)
    return CumulativeSeries(labels=labels, data=data)


def get_monthly_pnl(trades: list[Trade]) -> list[MonthlyPnL]:
    """Realized PNL grouped by the UTC month each sell happened in.

    Months without any sell are omitted. Ordered chronologically.
    """
    months: dict[tuple[int, int], float] = {}
    for trade in trades:
        for sell in trade.sells:
            ts = sell.timestamp.astimezone(UTC)
            key = (ts.year, ts.month)
            pnl, _ = _sell_result(trade, sell)
            months[key] = months.get(key, 0.0) + pnl

    return [
        MonthlyPnL(month=f"{_MONTH_NAMES[month - 1]} {year}", pnl=months[(year, month)])
        for year, month in sorted(months)
    ]
