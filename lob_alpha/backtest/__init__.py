"""
Backtesting module for LOB Alpha Research System.

Provides:
- Cost-aware signal replay with replaceable sizing and execution policies
- Walk-forward validation
"""

from .engine import (
    BacktestEngine,
    BacktestResult,
    default_position_sizing,
    half_spread_execution,
    run,
)

from .walk_forward import (
    WalkForwardFold,
    WalkForwardResult,
    WalkForwardValidator,
)

__all__ = [
    "BacktestEngine",
    "BacktestResult",
    "default_position_sizing",
    "half_spread_execution",
    "run",
    "WalkForwardFold",
    "WalkForwardResult",
    "WalkForwardValidator",
]
