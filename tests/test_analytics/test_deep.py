"""Tests for portfolio-wide analytics."""

from datetime import UTC, datetime, timedelta

import pytest

from tradebook.analytics.deep import (
    get_deep_analytics,
    max_drawdown,
    profit_factor,
    sharpe_ratio,
)
from tradebook.ledger.models import SellRecord, Trade


def _trade(
    trade_id: str,
    currency: str,
    amount: float,
    usdt_used: float,
    opened: datetime,
    sells: list[tuple[float, float, datetime]] | None = None,
) -> Trade:
    records = [
        SellRecord(
            id=f"{trade_id}-s{i}",
            sell_price=received / sold,
            sold_amount=sold,
            usdt_received=received,
            timestamp=at,
        )
        for i, (sold, received, at) in enumerate(sells or [])
    ]
    return Trade(
        id=trade_id,
        name=trade_id,
        currency_name=currency,
        price=usdt_used / amount,
        amount=amount,
        usdt_used=usdt_used,
        timestamp=opened,
        sells=records,
        remaining_amount=amount - sum(r.sold_amount for r in records),
    )


@pytest.fixture
def portfolio() -> list[Trade]:
    return [
        # pnl 10, roi 20, first sell after 2 days
        _trade(
            "A", "BTC", 10, 100,
            opened=datetime(2026, 1, 5, 10, 0, tzinfo=UTC),
            sells=[(5, 60, datetime(2026, 1, 7, 10, 0, tzinfo=UTC))],
        ),
        # pnl -5 (75 cost, 70 received), first sell after 25 days
        _trade(
            "B", "ETH", 4, 100,
            opened=datetime(2026, 1, 7, 8, 0, tzinfo=UTC),
            sells=[
                (2, 40, datetime(2026, 2, 1, 8, 0, tzinfo=UTC)),
                (1, 30, datetime(2026, 2, 1, 9, 0, tzinfo=UTC)),
            ],
        ),
        # never sold
        _trade("C", "BTC", 1, 50, opened=datetime(2026, 2, 2, tzinfo=UTC)),
    ]


class TestDeepAnalytics:
    def test_totals(self, portfolio):
        a = get_deep_analytics(portfolio)
        assert a.total_trades == 3
        assert a.total_invested == pytest.approx(250.0)
        assert a.total_sold == pytest.approx(130.0)
        assert a.net_pnl == pytest.approx(-120.0)

    def test_trade_outcomes(self, portfolio):
        a = get_deep_analytics(portfolio)
        assert a.win_rate == pytest.approx(100 / 3)
        assert a.best_trade == pytest.approx(10.0)
        assert a.worst_trade == pytest.approx(-5.0)
        assert a.risk_reward_ratio == pytest.approx(2.0)
        assert a.profit_factor == pytest.approx(2.0)
        assert a.max_drawdown == pytest.approx(50.0)
        assert a.average_roi == pytest.approx((20.0 - 20.0 / 3) / 3)

    def test_unsold_trades_count_as_zero_hold_days(self, portfolio):
        assert get_deep_analytics(portfolio).average_hold_time == 9

    def test_coins(self, portfolio):
        a = get_deep_analytics(portfolio)
        assert a.most_traded_coin == "BTC"
        assert a.most_profitable_coin == "BTC"

    def test_days_and_months(self, portfolio):
        a = get_deep_analytics(portfolio)
        assert a.best_day_pnl == pytest.approx(10.0)
        assert a.worst_day_pnl == pytest.approx(-5.0)
        assert [m.month for m in a.monthly_performance] == ["January 2026", "February 2026"]
        assert a.best_month_pnl == pytest.approx(10.0)
        assert a.worst_month_pnl == pytest.approx(-5.0)
        assert a.average_monthly_pnl == pytest.approx(2.5)
        assert a.trading_consistency == pytest.approx(50.0)

    def test_empty(self):
        a = get_deep_analytics([])
        assert a.total_trades == 0
        assert a.win_rate == 0
        assert a.average_roi == 0
        assert a.best_trade is None
        assert a.worst_trade is None
        assert a.average_hold_time == 0
        assert a.most_traded_coin is None
        assert a.most_profitable_coin is None
        assert a.best_day_pnl is None
        assert a.sharpe_ratio == 0
        assert a.profit_factor == 0
        assert a.max_drawdown == 0
        assert a.risk_reward_ratio is None
        assert a.monthly_performance == []
        assert a.best_month_pnl is None
        assert a.average_monthly_pnl == 0
        assert a.trading_consistency == 0

    def test_no_losing_trade_has_no_risk_reward(self):
        t = _trade("open", "BTC", 1, 10, opened=datetime(2026, 1, 1, tzinfo=UTC))
        assert get_deep_analytics([t]).risk_reward_ratio is None

    def test_coin_ties_go_to_first_seen(self):
        opened = datetime(2026, 1, 1, tzinfo=UTC)
        trades = [
            _trade("x", "SOL", 1, 10, opened=opened),
            _trade("y", "ADA", 1, 10, opened=opened),
        ]
        a = get_deep_analytics(trades)
        assert a.most_traded_coin == "SOL"
        assert a.most_profitable_coin == "SOL"

    def test_hold_time_rounds_half_up(self):
        opened = datetime(2026, 1, 1, tzinfo=UTC)
        trades = [
            _trade("sold", "BTC", 2, 20, opened, sells=[(1, 10, opened + timedelta(days=3))]),
            _trade("held", "BTC", 1, 10, opened),
        ]
        assert get_deep_analytics(trades).average_hold_time == 2

    def test_hold_time_uses_first_recorded_sell(self):
        opened = datetime(2026, 1, 1, tzinfo=UTC)
        t = _trade(
            "t", "BTC", 2, 20, opened,
            sells=[
                (1, 10, opened + timedelta(days=6)),
                (1, 10, opened + timedelta(days=2)),
            ],
        )
        assert get_deep_analytics([t]).average_hold_time == 6


class TestSharpeRatio:
    def test_mean_over_population_std(self):
        assert sharpe_ratio([10.0, 30.0]) == pytest.approx(2.0)

    def test_zero_std(self):
        assert sharpe_ratio([5.0, 5.0]) == 0

    def test_empty(self):
        assert sharpe_ratio([]) == 0


class TestProfitFactor:
    def test_ratio(self):
        assert profit_factor([10.0, -5.0, 5.0]) == pytest.approx(3.0)

    def test_no_losses(self):
        assert profit_factor([10.0, 0.0]) == 0


class TestMaxDrawdown:
    def test_fall_from_peak(self):
        assert max_drawdown([10.0, -5.0]) == pytest.approx(50.0)

    def test_depends_on_order(self):
        assert max_drawdown([-5.0, 10.0]) == 0

    def test_no_positive_peak(self):
        assert max_drawdown([-10.0, 5.0, -20.0]) == 0

    def test_largest_of_several(self):
        # peaks 10 then 20; falls to 8 (20%) and to 5 (75%)
        assert max_drawdown([10.0, -2.0, 12.0, -15.0]) == pytest.approx(75.0)
