"""Per-asset aggregation."""

from __future__ import annotations

from tradebook.analytics.base import CoinAnalytics
from tradebook.analytics.profit import calculate_pnl, calculate_roi
from tradebook.ledger.models import Trade


def get_coin_analytics(symbol: str, trades: list[Trade]) -> CoinAnalytics:
    """Aggregate every trade whose ``currency_name`` is exactly ``symbol``.

    Open positions are valued at their original buy price, not a market
    price. With no matching trades every field is zero.
    """
    coin_trades = [trade for trade in trades if trade.currency_name == symbol]
    if not coin_trades:
        return CoinAnalytics()

    total_invested = sum(trade.usdt_used for trade in coin_trades)
    total_sold = sum(trade.total_sell_value for trade in coin_trades)
    current_holdings = sum(trade.remaining_amount * trade.price for trade in coin_trades)
    rois = [calculate_roi(trade) for trade in coin_trades]
    profits = [calculate_pnl(trade) for trade in coin_trades]

    return CoinAnalytics(
        total_trades=len(coin_trades),
        total_invested=total_invested,
        total_sold=total_sold,
        current_holdings=current_holdings,
        total_profit=total_sold + current_holdings - total_invested,
        average_roi=sum(rois) / len(rois),
        best_trade=max(profits),
        worst_trade=min(profits),
    )
