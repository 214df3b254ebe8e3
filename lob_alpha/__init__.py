"""
LOB Alpha Research System
=========================

Limit-order-book alpha research: feature extraction from order book
snapshots, regularized signal generation, and cost-aware backtesting.

This system demonstrates:
- Market microstructure features (imbalance, microprice, VPIN)
- Fixed-prior signal models with Lasso / Ridge / Elastic Net shrinkage
- Backtests that charge spread, fees and slippage on every trade
- Walk-forward evaluation

MODULES:
- data: Snapshot model, CSV ingestion, snapshot simulator
- features: Feature extraction
- signals: Weight regularization and signal generation
- backtest: Backtest engine and walk-forward validation
- storage: Injected repository for snapshots, signals and results
- infra: Configuration, logging, portfolio records and metrics

NOTE: Signal weights are domain priors, not fitted parameters, and
backtests fill immediately at mid ± half-spread. Results are a research
aid, not a forecast of live performance.
"""

__version__ = "1.0.0"
__author__ = "LOB Alpha Research Team"

from .errors import (
    LOBAlphaError,
    ConfigurationError,
    InsufficientDataError,
    MissingSelectionError,
    DataValidationError,
)

from .infra import (
    SystemConfig,
    BacktestConfig,
    RegularizationConfig,
    get_default_config,
    get_backtest_config,
    logger,
    PerformanceMetrics,
)

from .data import (
    LOBSnapshot,
    SnapshotSimulator,
    load_csv,
)

from .features import (
    FeatureExtractor,
    FeatureVector,
)

from .signals import (
    Signal,
    SignalGenerator,
)

from .backtest import (
    BacktestEngine,
    BacktestResult,
    WalkForwardValidator,
    run,
)

from .storage import (
    Repository,
    InMemoryRepository,
)

from .pipeline import ResearchPipeline

__all__ = [
    # Errors
    "LOBAlphaError",
    "ConfigurationError",
    "InsufficientDataError",
    "MissingSelectionError",
    "DataValidationError",
    # Config
    "SystemConfig",
    "BacktestConfig",
    "RegularizationConfig",
    "get_default_config",
    "get_backtest_config",
    # Logging
    "logger",
    # Data
    "LOBSnapshot",
    "SnapshotSimulator",
    "load_csv",
    # Features
    "FeatureExtractor",
    "FeatureVector",
    # Signals
    "Signal",
    "SignalGenerator",
    # Backtest
    "BacktestEngine",
    "BacktestResult",
    "WalkForwardValidator",
    "run",
    # Storage
    "Repository",
    "InMemoryRepository",
    # Pipeline
    "ResearchPipeline",
    # Metrics
    "PerformanceMetrics",
]
