"""Analytics engine — pure aggregation over lists of trades."""

from tradebook.analytics.base import (
    CoinAnalytics,
    CumulativeSeries,
    DailyData,
    DeepAnalytics,
    MonthlyPnL,
    TradeAnalytics,
    ieee_div,
)
from tradebook.analytics.coins import get_coin_analytics
from tradebook.analytics.deep import get_deep_analytics, max_drawdown, profit_factor, sharpe_ratio
from tradebook.analytics.filters import DateRange, TimeFilter, get_filtered_trades
from tradebook.analytics.profit import (
    calculate_net_cash_flow,
    calculate_pnl,
    calculate_roi,
    calculate_total_pnl,
    calculate_total_roi,
    get_trade_analytics,
)
from tradebook.analytics.series import get_cumulative_data, get_daily_data, get_monthly_pnl

__all__ = [
    # Result models
    "CoinAnalytics",
    "CumulativeSeries",
    "DailyData",
    "DeepAnalytics",
    "MonthlyPnL",
    "TradeAnalytics",
    # Per-trade
    "calculate_pnl",
    "calculate_roi",
    "get_trade_analytics",
    # Whole list
    "calculate_net_cash_flow",
    "calculate_total_pnl",
    "calculate_total_roi",
    # Per-asset
    "get_coin_analytics",
    # Time filtering
    "DateRange",
    "TimeFilter",
    "get_filtered_trades",
    # Series
    "get_cumulative_data",
    "get_daily_data",
    "get_monthly_pnl",
    # Portfolio-wide
    "get_deep_analytics",
    "max_drawdown",
    "profit_factor",
    "sharpe_ratio",
    # Utilities
    "ieee_div",
]
