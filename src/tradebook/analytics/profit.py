"""Per-trade and whole-list profitability.

Realized results only: the cost basis of whatever fraction has been sold
is ``sold_amount / amount * usdt_used`` (average cost), and the unsold
remainder contributes nothing.
"""

from __future__ import annotations

import math
from datetime import datetime

from tradebook.analytics.base import SECONDS_PER_DAY, TradeAnalytics, ieee_div, resolve_now
from tradebook.ledger.models import Trade


def sold_cost_basis(trade: Trade) -> float:
    """Cost of the sold fraction. Unguarded: ``amount == 0`` gives nan/inf."""
    return ieee_div(trade.sold_amount, trade.amount) * trade.usdt_used


def calculate_pnl(trade: Trade) -> float:
    """Realized profit or loss of one trade in quote currency."""
    return trade.total_sell_value - sold_cost_basis(trade)


def calculate_roi(trade: Trade) -> float:
    """Realized return in percent of the sold cost basis.

    Exactly 0 when the sold cost basis is 0 (nothing sold yet).
    """
    cost = sold_cost_basis(trade)
    if cost == 0:
        return 0.0
    return ieee_div(trade.total_sell_value - cost, cost) * 100


def calculate_total_pnl(trades: list[Trade]) -> float:
    return sum(calculate_pnl(trade) for trade in trades)


def calculate_total_roi(trades: list[Trade]) -> float:
    """Total realized PNL as a percentage of everything invested."""
    total_invested = sum(trade.usdt_used for trade in trades)
    if total_invested == 0:
        return 0.0
    return calculate_total_pnl(trades) / total_invested * 100


def calculate_net_cash_flow(trades: list[Trade]) -> float:
    """All sell proceeds minus all purchase costs.

    This is the portfolio "net PNL" shown by deep analytics. Unlike
    calculate_total_pnl it charges the full purchase cost of open
    positions, so the two differ whenever anything is partially sold.
    """
    total_sold = sum(trade.total_sell_value for trade in trades)
    total_invested = sum(trade.usdt_used for trade in trades)
    return total_sold - total_invested


def get_trade_analytics(trade: Trade, now: datetime | None = None) -> TradeAnalytics:
    """Detailed figures for one trade.

    ``days_held`` is measured up to ``now`` (default: current time), so it
    changes between calls made on different days.
    """
    now = resolve_now(now)
    total_sell_value = trade.total_sell_value
    sold_amount = trade.sold_amount
    cost = sold_cost_basis(trade)

    # max/min return the first extreme element, so ties keep the earlier sell
    best_sell = max(trade.sells, key=lambda s: s.sell_price, default=None)
    worst_sell = min(trade.sells, key=lambda s: s.sell_price, default=None)

    held_seconds = (now - trade.timestamp).total_seconds()

    return TradeAnalytics(
        total_invested=trade.usdt_used,
        total_received=total_sell_value,
        net_pnl=total_sell_value - cost,
        roi=(total_sell_value - cost) / cost * 100 if cost > 0 else 0.0,
        average_buy_price=trade.price,
        average_sell_price=total_sell_value / sold_amount if sold_amount > 0 else 0.0,
        sold_amount=sold_amount,
        sold_percentage=ieee_div(sold_amount, trade.amount) * 100,
        best_sell=best_sell,
        worst_sell=worst_sell,
        days_held=math.floor(held_seconds / SECONDS_PER_DAY),
        number_of_sells=len(trade.sells),
        remaining_amount=trade.remaining_amount,
        remaining_cost_basis=ieee_div(trade.remaining_amount, trade.amount) * trade.usdt_used,
        status="Completed" if trade.is_completed else "Active",
    )
