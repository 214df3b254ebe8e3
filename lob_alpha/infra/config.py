"""
Configuration Management for LOB Alpha Research System
=======================================================

This module provides centralized configuration with:
- Type-safe configuration dataclasses
- Validation at construction (bad values never reach a run)
- Environment variable overrides for logging

Configuration objects are supplied once per run and never mutated by the
pipeline. Each section validates itself in ``__post_init__`` and raises
``ConfigurationError`` on the first invalid field.
"""

import math
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from ..errors import ConfigurationError


class Environment(Enum):
    """Deployment environment - affects logging defaults."""
    RESEARCH = "research"
    BACKTEST = "backtest"


class RegularizationMethod(Enum):
    """Weight regularization schemes supported by the signal model."""
    LASSO = "lasso"
    RIDGE = "ridge"
    ELASTIC_NET = "elastic-net"


class RebalanceFrequency(Enum):
    """
    How often a symbol may be rebalanced, measured in signal time.

    Signal timestamps are epoch milliseconds, as found in the CSV feed.
    """
    TICK = "tick"
    SECOND = "second"
    MINUTE = "minute"

    @property
    def interval_ms(self) -> float:
        return {
            RebalanceFrequency.TICK: 0.0,
            RebalanceFrequency.SECOND: 1_000.0,
            RebalanceFrequency.MINUTE: 60_000.0,
        }[self]


def _coerce_enum(enum_cls, value, field_name: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ConfigurationError(
            f"{field_name} must be one of: {allowed} (got {value!r})",
            field_name=field_name,
            value=value,
        ) from None


def _require_finite(value: float, field_name: str) -> None:
    if not isinstance(value, (int, float)) or not math.isfinite(value):
        raise ConfigurationError(
            f"{field_name} must be a finite number (got {value!r})",
            field_name=field_name,
            value=value,
        )


@dataclass
class FeatureConfig:
    """
    Feature extraction windows.

    volatility_window: trailing snapshots for microprice/spread volatility
    vpin_window: trailing snapshots for VPIN (0 until this many exist)
    """
    levels: int = 5
    volatility_window: int = 20
    vpin_window: int = 50

    def __post_init__(self):
        for name in ("levels", "volatility_window", "vpin_window"):
            value = getattr(self, name)
            if not isinstance(value, int) or value < 1:
                raise ConfigurationError(
                    f"{name} must be a positive integer (got {value!r})",
                    field_name=name,
                    value=value,
                )

    @property
    def history_window(self) -> int:
        """Number of trailing snapshots the extractor ever reads."""
        return max(self.volatility_window, self.vpin_window)


@dataclass
class RegularizationConfig:
    """
    Regularization applied to the fixed base weight vector.

    l1_ratio only matters for elastic-net; it defaults to 0.5 there.
    max_features bounds the advisory feature-selection output.
    """
    method: RegularizationMethod = RegularizationMethod.ELASTIC_NET
    alpha: float = 0.1
    l1_ratio: Optional[float] = None
    max_features: int = 5

    def __post_init__(self):
        self.method = _coerce_enum(RegularizationMethod, self.method, "method")

        _require_finite(self.alpha, "alpha")
        if self.alpha < 0:
            raise ConfigurationError(
                f"alpha must be >= 0 (got {self.alpha})", field_name="alpha", value=self.alpha
            )

        if self.l1_ratio is not None:
            _require_finite(self.l1_ratio, "l1_ratio")
            if not 0.0 <= self.l1_ratio <= 1.0:
                raise ConfigurationError(
                    f"l1_ratio must lie in [0, 1] (got {self.l1_ratio})",
                    field_name="l1_ratio",
                    value=self.l1_ratio,
                )

        if not isinstance(self.max_features, int) or self.max_features < 1:
            raise ConfigurationError(
                f"max_features must be >= 1 (got {self.max_features!r})",
                field_name="max_features",
                value=self.max_features,
            )

    @property
    def effective_l1_ratio(self) -> float:
        return 0.5 if self.l1_ratio is None else self.l1_ratio


@dataclass
class BacktestConfig:
    """
    Backtesting engine configuration.

    Costs are charged on traded notional:
    - transaction_cost_bps: commissions and fees
    - slippage_bps: price concession beyond the half-spread
    """
    symbols: List[str] = field(default_factory=list)
    initial_capital: float = 100_000.0
    transaction_cost_bps: float = 5.0
    slippage_bps: float = 2.0
    max_position_size: float = 1_000.0
    rebalance_frequency: RebalanceFrequency = RebalanceFrequency.TICK

    # Walk-forward split (in signals)
    walk_forward_window: int = 1_000
    validation_window: int = 200

    def __post_init__(self):
        self.rebalance_frequency = _coerce_enum(
            RebalanceFrequency, self.rebalance_frequency, "rebalance_frequency"
        )

        for name in ("initial_capital", "max_position_size"):
            value = getattr(self, name)
            _require_finite(value, name)
            if value <= 0:
                raise ConfigurationError(
                    f"{name} must be > 0 (got {value})", field_name=name, value=value
                )

        for name in ("transaction_cost_bps", "slippage_bps"):
            value = getattr(self, name)
            _require_finite(value, name)
            if value < 0:
                raise ConfigurationError(
                    f"{name} must be >= 0 (got {value})", field_name=name, value=value
                )

        for name in ("walk_forward_window", "validation_window"):
            value = getattr(self, name)
            if not isinstance(value, int) or value < 1:
                raise ConfigurationError(
                    f"{name} must be a positive integer (got {value!r})",
                    field_name=name,
                    value=value,
                )


@dataclass
class SystemConfig:
    """
    Top-level system configuration aggregating all components.
    """
    environment: Environment = Environment.RESEARCH
    features: FeatureConfig = field(default_factory=FeatureConfig)
    regularization: RegularizationConfig = field(default_factory=RegularizationConfig)
    backtest: BacktestConfig = field(default_factory=BacktestConfig)

    # Logging
    log_level: str = field(default_factory=lambda: os.environ.get("LOB_ALPHA_LOG_LEVEL", "INFO"))
    structured_logs: bool = False
    log_file_path: Optional[str] = field(default_factory=lambda: os.environ.get("LOB_ALPHA_LOG_FILE"))


def get_default_config() -> SystemConfig:
    """
    Returns default configuration for the research environment.

    Matches the defaults of the research dashboard: elastic-net with
    alpha 0.1, 100k capital, 5 bps costs and 2 bps slippage.
    """
    return SystemConfig()


def get_backtest_config() -> SystemConfig:
    """
    Returns configuration for batch backtesting (quieter logs).
    """
    config = SystemConfig(environment=Environment.BACKTEST)
    config.log_level = os.environ.get("LOB_ALPHA_LOG_LEVEL", "WARNING")
    return config
