"""
Cost-Aware Backtest Engine for LOB Alpha Research System
========================================================

Replays a time-ordered signal stream against a simulated portfolio.

PER SIGNAL:
===========

1. SIZING (replaceable policy):
   strength = signal_value * confidence
   target   = 0                                  if |strength| < 0.1
            = sign(strength) * min(|strength| * max_position, max_position)

2. ORDER:
   If target != current position, trade |target - current| in the
   direction of the change.

3. EXECUTION (replaceable policy):
   Price = mid ± effective_spread / 2 (buyers pay up, sellers give up).
   Costs on traded notional:
     transaction_cost = qty * price * transaction_cost_bps / 10000
     slippage         = qty * price * slippage_bps / 10000

4. ACCOUNTING:
   Realized PnL (FIFO entry vs exit) on the closed part of the fill, net of
   this fill's costs. The position is then set to exactly the target.
   Equity moves by realized PnL minus costs, and an equity point with
   drawdown from the running peak is appended.

AFTER THE LAST SIGNAL:
   Every open position is closed at its symbol's last execution price.
   Liquidation books realized PnL but charges no costs.

ISOLATION:
   The engine object holds configuration and policies only. Each
   run_backtest call builds a private _BacktestRun holding all mutable
   state of that run.

IMPORTANT CAVEATS:
- No market impact beyond the half-spread and slippage bps
- Fills are immediate and complete
- Backtests are ALWAYS optimistic
"""

import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np

from ..errors import InsufficientDataError
from ..infra.config import BacktestConfig
from ..infra.logging import get_logger, LogCategory
from ..infra.performance_metrics import (
    PerformanceMetrics,
    compute_performance_metrics,
    drawdown_from_peak,
)
from ..infra.portfolio import EquityPoint, Position, Side, Trade
from ..signals.signal_generator import Signal


logger = get_logger()

DEAD_ZONE = 0.1

SizingPolicy = Callable[[Signal, float], float]
ExecutionPolicy = Callable[[Signal, Side], float]


def default_position_sizing(signal: Signal, max_position_size: float) -> float:
    """Confidence-scaled target position with a 0.1 dead-zone."""
    strength = signal.signal_value * signal.confidence
    if abs(strength) < DEAD_ZONE:
        return 0.0
    return float(np.sign(strength)) * min(abs(strength) * max_position_size, max_position_size)


def half_spread_execution(signal: Signal, side: Side) -> float:
    """Cross half the effective spread from the signal's mid price."""
    half_spread = signal.features.effective_spread / 2
    if side is Side.BUY:
        return signal.mid_price + half_spread
    return signal.mid_price - half_spread


@dataclass(frozen=True)
class BacktestResult:
    """Results from a backtest run."""
    id: str
    config: BacktestConfig
    metrics: PerformanceMetrics
    trades: Tuple[Trade, ...]
    equity_curve: Tuple[EquityPoint, ...]
    final_equity: float
    num_signals: int
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "created_at": self.created_at.isoformat(),
            "final_equity": self.final_equity,
            "num_signals": self.num_signals,
            "metrics": self.metrics.to_dict(),
            "trades": [trade.to_dict() for trade in self.trades],
            "equity_curve": [
                {"timestamp": p.timestamp, "equity": p.equity, "drawdown": p.drawdown}
                for p in self.equity_curve
            ],
        }


class _BacktestRun:
    """Mutable state of exactly one backtest run."""

    def __init__(self, config: BacktestConfig, sizing: SizingPolicy, execution: ExecutionPolicy):
        self._config = config
        self._sizing = sizing
        self._execution = execution

        self.equity: float = config.initial_capital
        self.peak: float = config.initial_capital
        self.positions: Dict[str, Position] = {}
        self.trades: List[Trade] = []
        self.equity_curve: List[EquityPoint] = []

        self._last_signal: Dict[str, Signal] = {}
        self._last_rebalance: Dict[str, float] = {}

    def process_signal(self, signal: Signal) -> None:
        self._last_signal[signal.symbol] = signal

        interval = self._config.rebalance_frequency.interval_ms
        last = self._last_rebalance.get(signal.symbol)
        if interval > 0 and last is not None and signal.timestamp - last < interval:
            return

        position = self.positions.setdefault(signal.symbol, Position(symbol=signal.symbol))
        target = self._sizing(signal, self._config.max_position_size)
        if target == position.quantity:
            return

        side = Side.BUY if target > position.quantity else Side.SELL
        quantity = abs(target - position.quantity)
        price = self._execution(signal, side)

        transaction_cost = quantity * price * self._config.transaction_cost_bps / 10000
        slippage = quantity * price * self._config.slippage_bps / 10000

        self._fill(signal.timestamp, signal.symbol, side, quantity, price, transaction_cost, slippage, target)
        self._last_rebalance[signal.symbol] = signal.timestamp

    def liquidate(self, timestamp: float) -> None:
        for symbol in sorted(self.positions):
            position = self.positions[symbol]
            if position.is_flat:
                continue

            side = Side.SELL if position.quantity > 0 else Side.BUY
            price = self._execution(self._last_signal[symbol], side)
            self._fill(timestamp, symbol, side, abs(position.quantity), price, 0.0, 0.0, 0.0)

    def _fill(
        self,
        timestamp: float,
        symbol: str,
        side: Side,
        quantity: float,
        price: float,
        transaction_cost: float,
        slippage: float,
        target: float,
    ) -> None:
        position = self.positions[symbol]
        closes_exposure = not position.is_flat and (position.quantity > 0) != (side is Side.BUY)

        realized = position.apply_fill(side.sign * quantity, price)
        position.snap_to(target)
        costs = transaction_cost + slippage
        pnl = realized - costs if closes_exposure else 0.0

        trade = Trade(
            timestamp=timestamp,
            symbol=symbol,
            side=side,
            quantity=quantity,
            price=price,
            pnl=pnl,
            transaction_cost=transaction_cost,
            slippage=slippage,
        )
        self.trades.append(trade)

        self.equity += realized - costs
        self.peak = max(self.peak, self.equity)
        self.equity_curve.append(EquityPoint(
            timestamp=timestamp,
            equity=self.equity,
            drawdown=drawdown_from_peak(self.peak, self.equity),
        ))

        logger.log_trade(
            symbol=symbol,
            side=side.value,
            quantity=quantity,
            price=price,
            pnl=pnl,
            costs=costs,
        )


class BacktestEngine:
    """
    Cost-aware backtesting engine.

    Sizing and execution price are policies so strategies can be swapped
    without touching the accounting.
    """

    def __init__(
        self,
        config: Optional[BacktestConfig] = None,
        sizing_policy: SizingPolicy = default_position_sizing,
        execution_policy: ExecutionPolicy = half_spread_execution,
    ):
        """
        Args:
            config: Backtest configuration (defaults if None)
            sizing_policy: (signal, max_position_size) -> target position
            execution_policy: (signal, side) -> execution price
        """
        self._config = config or BacktestConfig()
        self._sizing_policy = sizing_policy
        self._execution_policy = execution_policy

    @property
    def config(self) -> BacktestConfig:
        return self._config

    def run_backtest(
        self,
        signals: Sequence[Signal],
        benchmark_returns: Optional[Sequence[float]] = None,
    ) -> BacktestResult:
        """
        Run a full backtest over ``signals``.

        Signals are stably sorted by timestamp first. When config.symbols is
        non-empty only those symbols are traded.

        Raises:
            InsufficientDataError: no signals to backtest
        """
        selected = list(signals)
        if self._config.symbols:
            allowed = set(self._config.symbols)
            selected = [s for s in selected if s.symbol in allowed]

        if not selected:
            raise InsufficientDataError(
                "No signals to backtest",
                required_count=1,
                available_count=0,
            )

        ordered = sorted(selected, key=lambda s: s.timestamp)

        logger.info(
            f"Starting backtest over {len(ordered)} signals",
            category=LogCategory.BACKTEST,
            initial_capital=self._config.initial_capital,
        )
        wall_start = time.perf_counter()

        run = _BacktestRun(self._config, self._sizing_policy, self._execution_policy)
        for signal in ordered:
            run.process_signal(signal)
        run.liquidate(ordered[-1].timestamp)

        metrics = compute_performance_metrics(
            run.equity_curve,
            run.trades,
            self._config.initial_capital,
            final_equity=run.equity,
            benchmark_returns=benchmark_returns,
        )

        result = BacktestResult(
            id=uuid.uuid4().hex,
            config=self._config,
            metrics=metrics,
            trades=tuple(run.trades),
            equity_curve=tuple(run.equity_curve),
            final_equity=run.equity,
            num_signals=len(ordered),
        )

        logger.info(
            f"Backtest complete: {metrics.total_trades} trades, "
            f"return={metrics.total_return:.4%}, Sharpe={metrics.sharpe_ratio:.2f}",
            category=LogCategory.BACKTEST,
            elapsed_s=time.perf_counter() - wall_start,
        )
        return result


def run(config: BacktestConfig, signals: Sequence[Signal]) -> BacktestResult:
    """
    Synchronous backtest entry point.

    Deterministic for identical (config, signals) apart from the result id
    and creation time.
    """
    return BacktestEngine(config).run_backtest(signals)
