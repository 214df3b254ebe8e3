"""Pytest configuration and shared fixtures."""

from typing import Callable, List, Sequence

import numpy as np
import pytest

from lob_alpha.data.orderbook import BOOK_LEVELS, LOBSnapshot, SnapshotSimulator, make_snapshot
from lob_alpha.features.extractor import FeatureVector
from lob_alpha.signals.signal_generator import Signal


def build_snapshot(
    timestamp: float,
    symbol: str = "TEST",
    bid_sizes: Sequence[float] = (100.0,) * BOOK_LEVELS,
    ask_sizes: Sequence[float] = (100.0,) * BOOK_LEVELS,
    mid: float = 100.0,
    spread: float = 0.02,
    tick: float = 0.01,
) -> LOBSnapshot:
    """Five-level book centred on ``mid`` with evenly spaced levels."""
    best_bid = mid - spread / 2
    best_ask = mid + spread / 2
    return make_snapshot(
        timestamp=timestamp,
        symbol=symbol,
        bid_prices=[best_bid - i * tick for i in range(BOOK_LEVELS)],
        bid_sizes=bid_sizes,
        ask_prices=[best_ask + i * tick for i in range(BOOK_LEVELS)],
        ask_sizes=ask_sizes,
        mid_price=mid,
        spread=spread,
    )


def build_features(**overrides) -> FeatureVector:
    """Feature vector of zeros, with selected fields overridden."""
    values = dict(
        timestamp=0.0,
        symbol="TEST",
        volume_imbalance=0.0,
        depth_imbalance=0.0,
        price_imbalance=0.0,
        relative_spread=0.0,
        effective_spread=0.0,
        microprice_volatility=0.0,
        spread_volatility=0.0,
        order_flow_toxicity=0.0,
        vpin=0.0,
    )
    values.update(overrides)
    return FeatureVector(**values)


def build_signal(
    timestamp: float,
    value: float,
    confidence: float = 1.0,
    mid: float = 100.0,
    effective_spread: float = 0.0,
    symbol: str = "TEST",
) -> Signal:
    """Hand-made signal for backtest scenarios."""
    return Signal(
        timestamp=timestamp,
        symbol=symbol,
        signal_value=value,
        confidence=confidence,
        features=build_features(timestamp=timestamp, symbol=symbol, effective_spread=effective_spread),
        model_tag="test",
        mid_price=mid,
    )


@pytest.fixture
def snapshot_factory() -> Callable[..., LOBSnapshot]:
    return build_snapshot


@pytest.fixture
def features_factory() -> Callable[..., FeatureVector]:
    return build_features


@pytest.fixture
def signal_factory() -> Callable[..., Signal]:
    return build_signal


@pytest.fixture
def balanced_snapshots() -> List[LOBSnapshot]:
    """150 snapshots with 100 lots on every level of both sides and a locked book."""
    return [
        build_snapshot(timestamp=1000.0 + i * 100, spread=0.0, tick=0.0)
        for i in range(150)
    ]


@pytest.fixture
def simulated_snapshots() -> List[LOBSnapshot]:
    """400 deterministic synthetic snapshots."""
    return SnapshotSimulator("SIM", seed=7).generate(400)


@pytest.fixture
def random_signals() -> List[Signal]:
    """Signals with random strength around a random-walk mid, enough to trade often."""
    rng = np.random.default_rng(11)
    mids = 100.0 * np.exp(np.cumsum(rng.normal(0.0, 0.002, 300)))
    return [
        build_signal(
            timestamp=1000.0 + i * 100,
            value=float(rng.uniform(-1, 1)),
            confidence=float(rng.uniform(0, 1)),
            mid=float(mid),
            effective_spread=0.02,
        )
        for i, mid in enumerate(mids)
    ]
