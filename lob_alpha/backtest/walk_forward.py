"""
Walk-Forward Validation
=======================

Rolls a fixed training window forward through a time-ordered signal stream
and evaluates on the window that immediately follows it:

    |---- train (W) ----|-- validate (V) --|
              |---- train (W) ----|-- validate (V) --|
                        ...

Each fold:
1. Ranks features on the training window against realized forward returns
   (advisory; weights are fixed priors and are not refit).
2. Backtests ONLY the validation window with a fresh engine run.

Validation windows never overlap, so every signal is evaluated at most
once and never with information from its own future.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import numpy as np

from .engine import BacktestEngine, BacktestResult
from ..errors import InsufficientDataError
from ..infra.config import BacktestConfig, RegularizationConfig
from ..infra.logging import get_logger, LogCategory
from ..signals.signal_generator import Signal, forward_returns, select_features


logger = get_logger()


@dataclass(frozen=True)
class WalkForwardFold:
    index: int
    train_start: float
    train_end: float
    validation_start: float
    validation_end: float
    selected_features: List[str]
    result: BacktestResult


@dataclass(frozen=True)
class WalkForwardResult:
    folds: List[WalkForwardFold]
    mean_sharpe: float
    mean_total_return: float
    mean_max_drawdown: float

    @property
    def num_folds(self) -> int:
        return len(self.folds)

    def to_dict(self) -> Dict:
        return {
            "num_folds": self.num_folds,
            "mean_sharpe": self.mean_sharpe,
            "mean_total_return": self.mean_total_return,
            "mean_max_drawdown": self.mean_max_drawdown,
            "folds": [
                {
                    "index": fold.index,
                    "train_start": fold.train_start,
                    "train_end": fold.train_end,
                    "validation_start": fold.validation_start,
                    "validation_end": fold.validation_end,
                    "selected_features": fold.selected_features,
                    "metrics": fold.result.metrics.to_dict(),
                }
                for fold in self.folds
            ],
        }


class WalkForwardValidator:
    """Rolling train/validate evaluation of a signal stream."""

    def __init__(
        self,
        config: Optional[BacktestConfig] = None,
        regularization: Optional[RegularizationConfig] = None,
    ):
        self._config = config or BacktestConfig()
        self._regularization = regularization or RegularizationConfig()
        self._engine = BacktestEngine(self._config)

    def fold_bounds(self, num_signals: int) -> List[tuple]:
        """(train_start, validation_start, validation_end) index triples."""
        train = self._config.walk_forward_window
        validation = self._config.validation_window

        bounds = []
        start = 0
        while start + train + validation <= num_signals:
            bounds.append((start, start + train, start + train + validation))
            start += validation
        return bounds

    def validate(self, signals: Sequence[Signal]) -> WalkForwardResult:
        """
        Run every fold over ``signals``.

        Raises:
            InsufficientDataError: fewer signals than one train plus one
                validation window
        """
        ordered = sorted(signals, key=lambda s: s.timestamp)
        bounds = self.fold_bounds(len(ordered))
        if not bounds:
            required = self._config.walk_forward_window + self._config.validation_window
            raise InsufficientDataError(
                f"Walk-forward needs at least {required} signals, got {len(ordered)}",
                required_count=required,
                available_count=len(ordered),
            )

        folds = []
        with logger.measure_latency("walk_forward", category=LogCategory.BACKTEST):
            for index, (train_start, validation_start, validation_end) in enumerate(bounds):
                train = ordered[train_start:validation_start]
                validation = ordered[validation_start:validation_end]

                selected = select_features(
                    [s.features for s in train[:-1]],
                    forward_returns(train),
                    self._regularization.max_features,
                )
                result = self._engine.run_backtest(validation)

                folds.append(WalkForwardFold(
                    index=index,
                    train_start=train[0].timestamp,
                    train_end=train[-1].timestamp,
                    validation_start=validation[0].timestamp,
                    validation_end=validation[-1].timestamp,
                    selected_features=selected,
                    result=result,
                ))

        walk_forward = WalkForwardResult(
            folds=folds,
            mean_sharpe=float(np.mean([f.result.metrics.sharpe_ratio for f in folds])),
            mean_total_return=float(np.mean([f.result.metrics.total_return for f in folds])),
            mean_max_drawdown=float(np.mean([f.result.metrics.max_drawdown for f in folds])),
        )

        logger.info(
            f"Walk-forward complete: {walk_forward.num_folds} folds, "
            f"mean Sharpe={walk_forward.mean_sharpe:.2f}",
            category=LogCategory.BACKTEST,
        )
        return walk_forward
