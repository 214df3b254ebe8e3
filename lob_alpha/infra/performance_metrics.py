"""
Performance Metrics for LOB Alpha Research System
=================================================

Derives risk/return statistics from a completed backtest:
- Risk-adjusted returns (Sharpe, Sortino, Calmar, information ratio)
- Drawdown
- Trade statistics (win rate, profit factor, average trade, holding period)

CONVENTIONS:
============

1. RETURNS:
   Per-step returns between consecutive equity-curve points. The curve has
   one point per position change, so "per step" means per rebalance.

2. ANNUALIZATION:
   √252, i.e. as if each step were one trading day.

3. SORTINO:
   Downside deviation squares only negative returns but divides by the FULL
   return count, which keeps |Sortino| comparable to |Sharpe|.

4. DRAWDOWN:
   Peak starts at the initial capital. Values are clamped to [0, 1] so the
   metric equals the max of the curve's own per-point drawdowns.

5. INFORMATION RATIO:
   Only defined against an explicit benchmark return series; None otherwise.

All functions are pure: same curve and trades in, same numbers out.
"""

from dataclasses import asdict, dataclass
from typing import Dict, List, Optional, Sequence

import numpy as np

from .portfolio import EquityPoint, Trade


ANNUALIZATION_FACTOR = np.sqrt(252)


@dataclass(frozen=True)
class PerformanceMetrics:
    """Aggregate statistics of one backtest run."""
    total_return: float
    sharpe_ratio: float
    sortino_ratio: float
    max_drawdown: float
    win_rate: float
    profit_factor: float
    avg_trade: float
    total_trades: int
    avg_holding_period: float
    calmar_ratio: float
    information_ratio: Optional[float] = None

    def to_dict(self) -> Dict[str, Optional[float]]:
        return asdict(self)


def drawdown_from_peak(peak: float, equity: float) -> float:
    """Fractional decline from ``peak``, clamped to [0, 1]; 0 for a non-positive peak."""
    if peak <= 0:
        return 0.0
    return float(min(max((peak - equity) / peak, 0.0), 1.0))


def equity_returns(equity_curve: Sequence[EquityPoint]) -> np.ndarray:
    """Simple returns between consecutive equity points (0 after a zero-equity point)."""
    equities = np.array([point.equity for point in equity_curve], dtype=float)
    if len(equities) < 2:
        return np.array([], dtype=float)

    previous = equities[:-1]
    changes = np.diff(equities)
    safe_previous = np.where(previous == 0, 1.0, previous)
    return np.where(previous == 0, 0.0, changes / safe_previous)


def sharpe_ratio(returns: np.ndarray) -> float:
    """
    Sharpe = mean(R) / std(R) * √252 (zero risk-free rate).

    0 when there are no returns or no variance.
    """
    if len(returns) == 0:
        return 0.0
    std = np.std(returns)
    if std == 0:
        return 0.0
    return float(np.mean(returns) / std * ANNUALIZATION_FACTOR)


def sortino_ratio(returns: np.ndarray) -> float:
    """
    Sortino = mean(R) / downside_dev(R) * √252.

    downside_dev = sqrt(Σ_{r<0} r² / N) with N the full return count.
    """
    if len(returns) == 0:
        return 0.0
    downside = returns[returns < 0]
    downside_dev = np.sqrt(np.sum(downside ** 2) / len(returns))
    if downside_dev == 0:
        return 0.0
    return float(np.mean(returns) / downside_dev * ANNUALIZATION_FACTOR)


def max_drawdown(equity_curve: Sequence[EquityPoint], initial_capital: float) -> float:
    """Largest peak-to-trough decline walking the curve in order."""
    peak = initial_capital
    worst = 0.0
    for point in equity_curve:
        peak = max(peak, point.equity)
        worst = max(worst, drawdown_from_peak(peak, point.equity))
    return worst


def information_ratio(returns: np.ndarray, benchmark_returns: Sequence[float]) -> float:
    """
    Mean active return over tracking error, annualized.

    Active returns use the common prefix of both series.
    """
    n = min(len(returns), len(benchmark_returns))
    if n == 0:
        return 0.0
    active = returns[:n] - np.asarray(benchmark_returns[:n], dtype=float)
    tracking_error = np.std(active)
    if tracking_error == 0:
        return 0.0
    return float(np.mean(active) / tracking_error * ANNUALIZATION_FACTOR)


def average_holding_period(trades: Sequence[Trade]) -> float:
    """
    Mean time (in timestamp units) from a position opening out of flat to
    its return to flat. A flip closes one holding period and opens another.
    """
    positions: Dict[str, float] = {}
    opened_at: Dict[str, float] = {}
    periods: List[float] = []

    for trade in trades:
        before = positions.get(trade.symbol, 0.0)
        after = before + trade.signed_quantity
        positions[trade.symbol] = after

        if before == 0 and after != 0:
            opened_at[trade.symbol] = trade.timestamp
        elif before != 0 and (after == 0 or (after > 0) != (before > 0)):
            periods.append(trade.timestamp - opened_at.pop(trade.symbol, trade.timestamp))
            if after != 0:
                opened_at[trade.symbol] = trade.timestamp

    if not periods:
        return 0.0
    return float(np.mean(periods))


def compute_performance_metrics(
    equity_curve: Sequence[EquityPoint],
    trades: Sequence[Trade],
    initial_capital: float,
    final_equity: Optional[float] = None,
    benchmark_returns: Optional[Sequence[float]] = None,
) -> PerformanceMetrics:
    """
    Calculate comprehensive performance metrics.

    Args:
        equity_curve: Equity points in run order
        trades: Full trade log
        initial_capital: Starting equity
        final_equity: Ending equity (defaults to the last curve point)
        benchmark_returns: Optional per-step benchmark returns for the
            information ratio
    """
    if final_equity is None:
        final_equity = equity_curve[-1].equity if equity_curve else initial_capital

    returns = equity_returns(equity_curve)
    total_return = (final_equity - initial_capital) / initial_capital
    drawdown = max_drawdown(equity_curve, initial_capital)

    pnls = np.array([trade.pnl for trade in trades], dtype=float)
    num_trades = len(trades)
    if num_trades > 0:
        win_rate = float(np.count_nonzero(pnls > 0) / num_trades)
        avg_trade = float(np.mean(pnls))
    else:
        win_rate = 0.0
        avg_trade = 0.0

    gross_profit = float(np.sum(pnls[pnls > 0]))
    gross_loss = abs(float(np.sum(pnls[pnls < 0])))
    profit_factor = gross_profit / gross_loss if gross_loss > 0 else 0.0

    calmar = total_return / abs(drawdown) if drawdown != 0 else 0.0

    info_ratio = None
    if benchmark_returns is not None:
        info_ratio = information_ratio(returns, benchmark_returns)

    return PerformanceMetrics(
        total_return=float(total_return),
        sharpe_ratio=sharpe_ratio(returns),
        sortino_ratio=sortino_ratio(returns),
        max_drawdown=drawdown,
        win_rate=win_rate,
        profit_factor=profit_factor,
        avg_trade=avg_trade,
        total_trades=num_trades,
        avg_holding_period=average_holding_period(trades),
        calmar_ratio=float(calmar),
        information_ratio=info_ratio,
    )


def format_metrics_report(metrics: PerformanceMetrics) -> str:
    """
    Format metrics as a readable report.
    """
    values = metrics.to_dict()
    ir = values.pop("information_ratio")
    values["information_ratio"] = "n/a" if ir is None else f"{ir:.2f}"

    report = """
╔════════════════════════════════════════════════════════════╗
║                  BACKTEST PERFORMANCE REPORT               ║
╠════════════════════════════════════════════════════════════╣
║ RETURN                                                     ║
║   Total Return:     {total_return:>12.2%}                           ║
║   Max Drawdown:     {max_drawdown:>12.2%}                           ║
╠════════════════════════════════════════════════════════════╣
║ RISK-ADJUSTED                                              ║
║   Sharpe Ratio:     {sharpe_ratio:>12.2f}                           ║
║   Sortino Ratio:    {sortino_ratio:>12.2f}                           ║
║   Calmar Ratio:     {calmar_ratio:>12.2f}                           ║
║   Info Ratio:       {information_ratio:>12}                           ║
╠════════════════════════════════════════════════════════════╣
║ TRADE STATISTICS                                           ║
║   Number of Trades: {total_trades:>12,}                           ║
║   Win Rate:         {win_rate:>12.1%}                           ║
║   Profit Factor:    {profit_factor:>12.2f}                           ║
║   Avg Trade PnL:    {avg_trade:>12,.2f}                           ║
║   Avg Holding (ms): {avg_holding_period:>12,.0f}                           ║
╚════════════════════════════════════════════════════════════╝
""".format(**values)
    return report
