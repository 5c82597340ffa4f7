"""Portfolio-wide "deep" analytics.

Two different PNL notions appear here on purpose: ``net_pnl`` is the
cash-flow view (everything received minus everything invested), while
win rate, best/worst trade, profit factor and drawdown use each trade's
realized PNL from calculate_pnl.
"""

from __future__ import annotations

import math

from tradebook.analytics.base import SECONDS_PER_DAY, DeepAnalytics
from tradebook.analytics.profit import (
    calculate_net_cash_flow,
    calculate_pnl,
    calculate_roi,
)
from tradebook.analytics.series import get_daily_data, get_monthly_pnl
from tradebook.ledger.models import Trade


def _mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _hold_days(trade: Trade) -> float:
    """Days from opening to the first recorded sell; 0 when never sold."""
    if not trade.sells:
        return 0.0
    return (trade.sells[0].timestamp - trade.timestamp).total_seconds() / SECONDS_PER_DAY


def sharpe_ratio(returns: list[float]) -> float:
    """Mean return over population standard deviation; 0 if it cannot be formed."""
    if not returns:
        return 0.0
    mean = _mean(returns)
    variance = sum((r - mean) * (r - mean) for r in returns) / len(returns)
    std = math.sqrt(variance)
    return mean / std if std != 0 else 0.0


def profit_factor(pnls: list[float]) -> float:
    """Gross profit over gross loss; 0 when there is no loss at all."""
    gross_profit = sum(p for p in pnls if p > 0)
    gross_loss = abs(sum(p for p in pnls if p < 0))
    return gross_profit / gross_loss if gross_loss != 0 else 0.0


def max_drawdown(pnls: list[float]) -> float:
    """Largest percentage fall from the running peak of cumulative PNL.

    PNLs are accumulated in the order given; the caller decides whether
    that order is chronological. Drawdown is only measured once the
    running peak is positive.
    """
    worst = 0.0
    peak = 0.0
    current = 0.0
    for pnl in pnls:
        current += pnl
        if current > peak:
            peak = current
        if peak > 0:
            drawdown = (peak - current) / peak * 100
            if drawdown > worst:
                worst = drawdown
    return worst


def get_deep_analytics(trades: list[Trade]) -> DeepAnalytics:
    """Whole-portfolio rollup of the given trades."""
    total_trades = len(trades)
    total_invested = sum(trade.usdt_used for trade in trades)
    total_sold = sum(trade.total_sell_value for trade in trades)
    pnls = [calculate_pnl(trade) for trade in trades]
    rois = [calculate_roi(trade) for trade in trades]

    winning = sum(1 for pnl in pnls if pnl > 0)
    win_rate = winning / total_trades * 100 if total_trades else 0.0
    best_trade = max(pnls, default=None)
    worst_trade = min(pnls, default=None)

    # Trades never sold count as zero days, pulling the average down.
    average_hold_time = _round_half_up(_mean([_hold_days(t) for t in trades]))

    coin_trades: dict[str, int] = {}
    coin_pnl: dict[str, float] = {}
    for trade, pnl in zip(trades, pnls):
        coin_trades[trade.currency_name] = coin_trades.get(trade.currency_name, 0) + 1
        coin_pnl[trade.currency_name] = coin_pnl.get(trade.currency_name, 0.0) + pnl
    # sorted() is stable, so ties go to the coin seen first
    most_traded = sorted(coin_trades, key=lambda c: coin_trades[c], reverse=True)
    most_profitable = sorted(coin_pnl, key=lambda c: coin_pnl[c], reverse=True)

    day_pnls = [day.pnl for day in get_daily_data(trades)]

    monthly = get_monthly_pnl(trades)
    month_pnls = [m.pnl for m in monthly]
    profitable_months = sum(1 for p in month_pnls if p > 0)

    if worst_trade is None or worst_trade == 0:
        risk_reward = None
    else:
        risk_reward = abs(best_trade / worst_trade)

    return DeepAnalytics(
        total_trades=total_trades,
        total_invested=total_invested,
        total_sold=total_sold,
        net_pnl=calculate_net_cash_flow(trades),
        win_rate=win_rate,
        average_roi=_mean(rois),
        best_trade=best_trade,
        worst_trade=worst_trade,
        average_hold_time=average_hold_time,
        most_traded_coin=most_traded[0] if most_traded else None,
        most_profitable_coin=most_profitable[0] if most_profitable else None,
        best_day_pnl=max(day_pnls, default=None),
        worst_day_pnl=min(day_pnls, default=None),
        sharpe_ratio=sharpe_ratio(rois),
        profit_factor=profit_factor(pnls),
        max_drawdown=max_drawdown(pnls),
        risk_reward_ratio=risk_reward,
        monthly_performance=monthly,
        best_month_pnl=max(month_pnls, default=None),
        worst_month_pnl=min(month_pnls, default=None),
        average_monthly_pnl=_mean(month_pnls),
        trading_consistency=profitable_months / len(month_pnls) * 100 if month_pnls else 0.0,
    )
