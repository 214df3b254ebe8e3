"""
Research Pipeline
=================

Service layer tying the core together:

    CSV / simulator ─► Repository ─► SignalGenerator ─► BacktestEngine ─► Repository
                                          │
                                          └────────► WalkForwardValidator

Every operation validates its inputs and computes its full result BEFORE
writing to the repository, so a rejected or failed call leaves storage
untouched.
"""

from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

from .backtest.engine import BacktestEngine, BacktestResult, run
from .backtest.walk_forward import WalkForwardResult, WalkForwardValidator
from .data.csv_loader import group_by_symbol, load_csv
from .data.orderbook import LOBSnapshot
from .errors import DataValidationError, MissingSelectionError
from .features.extractor import FeatureExtractor
from .infra.config import BacktestConfig, RegularizationConfig, SystemConfig, get_default_config
from .infra.logging import get_logger, LogCategory
from .signals.signal_generator import Signal, SignalGenerator
from .storage.repository import Repository


logger = get_logger()


def default_model_tag(regularization: RegularizationConfig) -> str:
    """Human-readable tag identifying the model configuration, e.g. ``lasso-a0.1``."""
    return f"{regularization.method.value}-a{regularization.alpha:g}"


class ResearchPipeline:
    """
    Ingest, generate, evaluate.

    Args:
        repository: Storage backend (injected, never global)
        config: System configuration (defaults if None)
    """

    def __init__(self, repository: Repository, config: Optional[SystemConfig] = None):
        self._repository = repository
        self._config = config or get_default_config()
        self._extractor = FeatureExtractor(self._config.features)

    @property
    def repository(self) -> Repository:
        return self._repository

    @property
    def config(self) -> SystemConfig:
        return self._config

    def ingest_snapshots(self, snapshots: Sequence[LOBSnapshot], source: str = "memory") -> Dict[str, int]:
        """
        Store snapshots grouped by symbol.

        Returns:
            Snapshot count per symbol

        Raises:
            DataValidationError: no snapshots to ingest
        """
        if not snapshots:
            raise DataValidationError(f"No valid snapshots in {source}", source=source)

        grouped = group_by_symbol(snapshots)
        for symbol, group in grouped.items():
            self._repository.add_snapshots(symbol, group)

        counts = {symbol: len(group) for symbol, group in grouped.items()}
        logger.info(
            f"Ingested {len(snapshots)} snapshots for {len(counts)} symbols",
            category=LogCategory.DATA,
            source=source,
        )
        return counts

    def ingest_csv(self, path: Union[str, Path]) -> Dict[str, int]:
        """Load a CSV file; files yielding zero valid snapshots are rejected."""
        snapshots = load_csv(path)
        return self.ingest_snapshots(snapshots, source=str(path))

    def generate_signals(
        self,
        symbol: str,
        regularization: Optional[RegularizationConfig] = None,
        model_tag: Optional[str] = None,
    ) -> List[Signal]:
        """
        Generate and store signals for ``symbol``.

        Raises:
            MissingSelectionError: empty symbol or no snapshots stored for it
            InsufficientDataError: not enough snapshots to pass warm-up
        """
        snapshots = self._require_snapshots(symbol)
        regularization = regularization or self._config.regularization
        generator = SignalGenerator(regularization, self._extractor)

        signals = generator.generate_signals(
            snapshots,
            model_tag=model_tag or default_model_tag(regularization),
        )
        self._repository.add_signals(symbol, signals)
        return signals

    def run_backtest(
        self,
        symbol: str,
        config: Optional[BacktestConfig] = None,
        model_tag: Optional[str] = None,
    ) -> BacktestResult:
        """
        Backtest the stored signals of ``symbol`` and store the result.

        Signals accumulate across generate_signals calls. Pass ``model_tag``
        to replay only one model's batch; otherwise every stored signal of
        the symbol is replayed.

        Raises:
            MissingSelectionError: empty symbol or no matching signals stored
        """
        signals = self._require_signals(symbol, model_tag)
        result = BacktestEngine(config or self._config.backtest).run_backtest(signals)
        self._repository.add_result(result)
        return result

    def walk_forward(
        self,
        symbol: str,
        config: Optional[BacktestConfig] = None,
        model_tag: Optional[str] = None,
    ) -> WalkForwardResult:
        """
        Walk-forward validation over the stored signals of ``symbol``.

        Fold results are reported, not stored.
        """
        signals = self._require_signals(symbol, model_tag)
        validator = WalkForwardValidator(config or self._config.backtest, self._config.regularization)
        return validator.validate(signals)

    def _require_symbol(self, symbol: str) -> str:
        if not symbol or not symbol.strip():
            raise MissingSelectionError("No symbol selected")
        return symbol

    def _require_snapshots(self, symbol: str) -> List[LOBSnapshot]:
        self._require_symbol(symbol)
        snapshots = self._repository.get_snapshots(symbol)
        if not snapshots:
            raise MissingSelectionError(f"No snapshots stored for {symbol}", symbol=symbol)
        return snapshots

    def _require_signals(self, symbol: str, model_tag: Optional[str] = None) -> List[Signal]:
        self._require_symbol(symbol)
        signals = self._repository.get_signals(symbol)
        if model_tag is not None:
            signals = [s for s in signals if s.model_tag == model_tag]
        if not signals:
            label = symbol if model_tag is None else f"{symbol} ({model_tag})"
            raise MissingSelectionError(f"No signals stored for {label}", symbol=symbol)
        return signals


__all__ = [
    "ResearchPipeline",
    "default_model_tag",
    "run",
]
