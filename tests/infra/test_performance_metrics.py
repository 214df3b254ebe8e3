"""Tests for performance metrics"""

import numpy as np
import pytest

from lob_alpha.infra.performance_metrics import (
    ANNUALIZATION_FACTOR,
    compute_performance_metrics,
    drawdown_from_peak,
    equity_returns,
    format_metrics_report,
    max_drawdown,
    sharpe_ratio,
    sortino_ratio,
    average_holding_period,
)
from lob_alpha.infra.portfolio import EquityPoint, Side, Trade


def curve(*equities):
    return [EquityPoint(timestamp=float(i), equity=e, drawdown=0.0) for i, e in enumerate(equities)]


def trade(timestamp, side, quantity, pnl=0.0, symbol="TEST"):
    return Trade(
        timestamp=timestamp,
        symbol=symbol,
        side=side,
        quantity=quantity,
        price=100.0,
        pnl=pnl,
        transaction_cost=0.0,
        slippage=0.0,
    )


class TestReturns:
    """Test per-step returns"""

    def test_simple_returns(self):
        np.testing.assert_allclose(equity_returns(curve(100.0, 110.0, 99.0)), [0.1, -0.1])

    def test_too_short(self):
        assert len(equity_returns(curve(100.0))) == 0

    def test_zero_equity_step(self):
        np.testing.assert_allclose(equity_returns(curve(0.0, 10.0)), [0.0])


class TestRiskAdjusted:
    """Test Sharpe and Sortino"""

    def test_sharpe(self):
        returns = np.array([0.01, -0.01, 0.02])
        expected = np.mean(returns) / np.std(returns) * np.sqrt(252)
        assert sharpe_ratio(returns) == pytest.approx(expected)

    def test_sharpe_degenerate(self):
        assert sharpe_ratio(np.array([])) == 0.0
        assert sharpe_ratio(np.zeros(5)) == 0.0

    def test_sortino_uses_full_count(self):
        """Test downside deviation divides by all returns, not just losses"""
        returns = np.array([0.02, -0.01, 0.03, -0.02])
        downside = np.sqrt((0.01 ** 2 + 0.02 ** 2) / 4)
        assert sortino_ratio(returns) == pytest.approx(np.mean(returns) / downside * ANNUALIZATION_FACTOR)

    def test_sortino_no_losses(self):
        assert sortino_ratio(np.array([0.01, 0.02])) == 0.0
        assert sortino_ratio(np.array([])) == 0.0


class TestDrawdown:
    """Test drawdown accounting"""

    def test_monotonic_curve_has_no_drawdown(self):
        assert max_drawdown(curve(100_000.0, 100_100.0, 100_500.0, 101_000.0), 100_000.0) == 0.0

    def test_peak_starts_at_initial_capital(self):
        assert max_drawdown(curve(90_000.0), 100_000.0) == pytest.approx(0.1)

    def test_peak_to_trough(self):
        assert max_drawdown(curve(110.0, 99.0, 120.0, 108.0), 100.0) == pytest.approx(0.1)

    def test_clamped(self):
        assert drawdown_from_peak(100.0, -50.0) == 1.0
        assert drawdown_from_peak(100.0, 150.0) == 0.0
        assert drawdown_from_peak(0.0, -10.0) == 0.0


class TestTradeStatistics:
    """Test trade-based statistics"""

    def test_win_rate_profit_factor_average(self):
        trades = [
            trade(0, Side.BUY, 1, pnl=10.0),
            trade(1, Side.SELL, 1, pnl=-5.0),
            trade(2, Side.BUY, 1, pnl=0.0),
            trade(3, Side.SELL, 1, pnl=20.0),
        ]
        metrics = compute_performance_metrics([], trades, 100.0)

        assert metrics.win_rate == pytest.approx(0.5)
        assert metrics.profit_factor == pytest.approx(6.0)
        assert metrics.avg_trade == pytest.approx(6.25)
        assert metrics.total_trades == 4

    def test_no_losing_trades(self):
        metrics = compute_performance_metrics([], [trade(0, Side.BUY, 1, pnl=10.0)], 100.0)
        assert metrics.profit_factor == 0.0

    def test_no_trades(self):
        metrics = compute_performance_metrics([], [], 100_000.0)
        assert metrics.win_rate == 0.0
        assert metrics.avg_trade == 0.0
        assert metrics.total_return == 0.0
        assert metrics.calmar_ratio == 0.0

    def test_holding_period(self):
        trades = [
            trade(0, Side.BUY, 10),
            trade(1000, Side.SELL, 10),
            trade(2000, Side.SELL, 5),
            trade(2500, Side.BUY, 10),
            trade(4500, Side.SELL, 5),
        ]
        # 0 -> 1000 flat, 2000 -> 2500 flip, 2500 -> 4500 flat
        assert average_holding_period(trades) == pytest.approx((1000 + 500 + 2000) / 3)

    def test_holding_period_per_symbol(self):
        trades = [
            trade(0, Side.BUY, 1, symbol="AAA"),
            trade(100, Side.BUY, 1, symbol="BBB"),
            trade(300, Side.SELL, 1, symbol="AAA"),
            trade(400, Side.SELL, 1, symbol="BBB"),
        ]
        assert average_holding_period(trades) == pytest.approx(300.0)


class TestAggregate:
    """Test compute_performance_metrics end to end"""

    def test_total_return_and_calmar(self):
        metrics = compute_performance_metrics(curve(110.0, 99.0, 120.0), [], 100.0)
        assert metrics.total_return == pytest.approx(0.2)
        assert metrics.max_drawdown == pytest.approx(0.1)
        assert metrics.calmar_ratio == pytest.approx(2.0)

    def test_explicit_final_equity(self):
        metrics = compute_performance_metrics(curve(110.0), [], 100.0, final_equity=105.0)
        assert metrics.total_return == pytest.approx(0.05)

    def test_information_ratio_needs_benchmark(self):
        equity = curve(100.0, 101.0, 100.5, 102.0)
        assert compute_performance_metrics(equity, [], 100.0).information_ratio is None

        metrics = compute_performance_metrics(equity, [], 100.0, benchmark_returns=[0.0, 0.0, 0.0])
        assert metrics.information_ratio == pytest.approx(metrics.sharpe_ratio)

    def test_report(self):
        report = format_metrics_report(compute_performance_metrics(curve(100.0, 101.0), [], 100.0))
        assert "BACKTEST PERFORMANCE REPORT" in report
        assert "n/a" in report
