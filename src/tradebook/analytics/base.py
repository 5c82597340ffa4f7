"""Analytics result models and shared arithmetic.

Every analytics function is a pure read over a list of trades and returns
one of the frozen models below. Nothing here is stored; results are
recomputed on each query.
"""

import math
from datetime import UTC, datetime

from pydantic import BaseModel, Field

from tradebook.ledger.models import SellRecord

SECONDS_PER_DAY = 24 * 60 * 60


def ieee_div(numerator: float, denominator: float) -> float:
    """Float division that never raises.

    Follows IEEE-754: ``x / 0`` is ``±inf`` (sign from both operands) and
    ``0 / 0`` or ``nan / 0`` is ``nan``. Used wherever a zero denominator
    is deliberately left unguarded.
    """
    if denominator == 0:
        if numerator == 0 or math.isnan(numerator):
            return math.nan
        return math.copysign(math.inf, numerator) * math.copysign(1.0, denominator)
    return numerator / denominator


def ensure_aware(ts: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    return ts if ts.tzinfo is not None else ts.replace(tzinfo=UTC)


def resolve_now(now: datetime | None = None) -> datetime:
    """Evaluation instant: the given one or the current time."""
    return datetime.now(UTC) if now is None else ensure_aware(now)


def utc_day(ts: datetime) -> str:
    """ISO calendar date (``YYYY-MM-DD``) of a timestamp, in UTC."""
    return ts.astimezone(UTC).date().isoformat()


class TradeAnalytics(BaseModel):
    """Detailed view of a single trade."""

    total_invested: float
    total_received: float
    net_pnl: float
    roi: float = Field(description="Realized ROI in percent")
    average_buy_price: float
    average_sell_price: float
    sold_amount: float
    sold_percentage: float
    best_sell: SellRecord | None = Field(description="Sell with the highest price")
    worst_sell: SellRecord | None = Field(description="Sell with the lowest price")
    days_held: int
    number_of_sells: int
    remaining_amount: float
    remaining_cost_basis: float
    status: str = Field(description="'Completed' or 'Active'")

    model_config = {"frozen": True}


class CoinAnalytics(BaseModel):
    """Aggregate figures for all trades of one asset symbol."""

    total_trades: int = 0
    total_invested: float = 0.0
    total_sold: float = 0.0
    current_holdings: float = Field(0.0, description="Unsold quantity valued at buy price")
    total_profit: float = 0.0
    average_roi: float = 0.0
    best_trade: float = 0.0
    worst_trade: float = 0.0

    model_config = {"frozen": True}


class DailyData(BaseModel):
    """Activity and realized result for one calendar date."""

    date: str = Field(description="ISO date, YYYY-MM-DD")
    pnl: float = 0.0
    roi: float = Field(0.0, description="Sum of per-sell ROI percentages, not a mean")
    trades: int = 0
    sells: int = 0

    model_config = {"frozen": True}


class CumulativeSeries(BaseModel):
    """Running total of daily realized PNL, with chart labels."""

    labels: list[str] = Field(default_factory=list)
    data: list[float] = Field(default_factory=list)

    model_config = {"frozen": True}


class MonthlyPnL(BaseModel):
    month: str = Field(description="Label such as 'January 2025'")
    pnl: float

    model_config = {"frozen": True}


class DeepAnalytics(BaseModel):
    """Portfolio-wide statistics.

    Best/worst style fields are None when there is nothing to take a
    maximum or minimum over.
    """

    total_trades: int
    total_invested: float
    total_sold: float
    net_pnl: float = Field(description="Total sold minus total invested")
    win_rate: float
    average_roi: float
    best_trade: float | None
    worst_trade: float | None
    average_hold_time: int = Field(description="Days from open to first sell, rounded")
    most_traded_coin: str | None
    most_profitable_coin: str | None
    best_day_pnl: float | None
    worst_day_pnl: float | None
    sharpe_ratio: float
    profit_factor: float
    max_drawdown: float
    risk_reward_ratio: float | None
    monthly_performance: list[MonthlyPnL]
    best_month_pnl: float | None
    worst_month_pnl: float | None
    average_monthly_pnl: float
    trading_consistency: float

    model_config = {"frozen": True}
