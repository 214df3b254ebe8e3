"""
Infrastructure module for LOB Alpha Research System.

Provides core infrastructure components:
- Configuration management
- Logging and latency tracking
- Portfolio records and metrics computation
"""

from .config import (
    SystemConfig,
    FeatureConfig,
    RegularizationConfig,
    BacktestConfig,
    Environment,
    RegularizationMethod,
    RebalanceFrequency,
    get_default_config,
    get_backtest_config,
)

from .logging import (
    AlphaLogger,
    LogCategory,
    LatencyMeasurement,
    LatencyTracker,
    configure_logging,
    get_logger,
    get_latency_stats,
    logger,
)

from .portfolio import (
    Trade,
    Position,
    Side,
    EquityPoint,
)

from .performance_metrics import (
    PerformanceMetrics,
    compute_performance_metrics,
    format_metrics_report,
)

__all__ = [
    # Config
    "SystemConfig",
    "FeatureConfig",
    "RegularizationConfig",
    "BacktestConfig",
    "Environment",
    "RegularizationMethod",
    "RebalanceFrequency",
    "get_default_config",
    "get_backtest_config",
    # Logging
    "AlphaLogger",
    "LogCategory",
    "LatencyMeasurement",
    "LatencyTracker",
    "configure_logging",
    "get_logger",
    "get_latency_stats",
    "logger",
    # Portfolio
    "Trade",
    "Position",
    "Side",
    "EquityPoint",
    # Metrics
    "PerformanceMetrics",
    "compute_performance_metrics",
    "format_metrics_report",
]
