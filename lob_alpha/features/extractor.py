"""
LOB Feature Extraction for LOB Alpha Research System
====================================================

Turns one order book snapshot plus its trailing history into a fixed-width
feature vector.

FEATURES:
=========

1. IMBALANCE (level-based, current snapshot only)
   - Volume imbalance: (bid_vol - ask_vol) / (bid_vol + ask_vol) over the
     top N levels. Positive = more resting buy interest.
   - Depth imbalance: same ratio on price-weighted volume (size * price).
   - Price imbalance: (microprice - mid) / mid. The microprice leans toward
     the side with LESS size, so this is the best-level version of the
     volume imbalance expressed in price terms.

2. SPREAD
   - Relative spread: spread / mid (execution cost proxy)
   - Effective spread: the raw quoted spread

3. VOLATILITY (trailing window, default 20 snapshots)
   - Population std of microprice and of spread over recent history

4. ORDER FLOW TOXICITY
   - VPIN proxy: best-level volume is classified as buy volume when the mid
     ticked up, sell volume when it ticked down; flat steps are ignored.
     VPIN = |buy - sell| / (buy + sell) over the last 50 snapshots.
   - Composite toxicity: |volume imbalance| * relative spread

DEGENERATE INPUTS:
A zero denominator (no volume, zero mid) yields 0 rather than an error, so
one bad snapshot never aborts a whole run.

The extractor is a pure function of (snapshot, history): it keeps no state
between calls and only reads the last max(volatility_window, vpin_window)
history entries, so a bounded ring buffer gives bit-identical output.
"""

from dataclasses import dataclass, fields
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from ..data.orderbook import LOBSnapshot
from ..infra.config import FeatureConfig


# Model features in fixed order (effective_spread and spread_volatility are
# descriptive only and carry no weight)
FEATURE_NAMES: Tuple[str, ...] = (
    "volume_imbalance",
    "depth_imbalance",
    "price_imbalance",
    "relative_spread",
    "microprice_volatility",
    "order_flow_toxicity",
    "vpin",
)


@dataclass(frozen=True)
class FeatureVector:
    """Dimensionless features describing one snapshot in context."""
    timestamp: float
    symbol: str

    # Imbalance features
    volume_imbalance: float
    depth_imbalance: float
    price_imbalance: float

    # Spread features
    relative_spread: float
    effective_spread: float

    # Volatility features
    microprice_volatility: float
    spread_volatility: float

    # Order flow features
    order_flow_toxicity: float
    vpin: float

    def as_array(self, names: Sequence[str] = FEATURE_NAMES) -> np.ndarray:
        return np.array([getattr(self, name) for name in names], dtype=float)

    def to_dict(self) -> Dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def _ratio(numerator: float, denominator: float) -> float:
    if denominator == 0:
        return 0.0
    return numerator / denominator


def _tail(history: Sequence[LOBSnapshot], n: int) -> List[LOBSnapshot]:
    """Last n entries of any indexable sequence (list or deque)."""
    size = len(history)
    return [history[i] for i in range(max(size - n, 0), size)]


def volume_imbalance(snapshot: LOBSnapshot, levels: int = 5) -> float:
    """Size imbalance over the top ``levels`` levels, in [-1, 1]."""
    bid_volume, ask_volume = snapshot.depth_at_levels(levels)
    return _ratio(bid_volume - ask_volume, bid_volume + ask_volume)


def depth_imbalance(snapshot: LOBSnapshot, levels: int = 5) -> float:
    """Price-weighted (notional) imbalance over the top ``levels`` levels."""
    bid_depth, ask_depth = snapshot.notional_at_levels(levels)
    return _ratio(bid_depth - ask_depth, bid_depth + ask_depth)


def relative_spread(snapshot: LOBSnapshot) -> float:
    return _ratio(snapshot.spread, snapshot.mid_price)


def price_imbalance(snapshot: LOBSnapshot) -> float:
    return _ratio(snapshot.microprice - snapshot.mid_price, snapshot.mid_price)


def volatility(values: Sequence[float]) -> float:
    """
    Population standard deviation of a series.

    Fewer than two points carry no dispersion information and give 0.
    """
    if len(values) < 2:
        return 0.0
    return float(np.std(np.asarray(values, dtype=float)))


def vpin(history: Sequence[LOBSnapshot], window: int = 50) -> float:
    """
    Volume-synchronized probability of informed trading (tick-rule proxy).

    Returns 0 when fewer than ``window`` snapshots are available or no
    volume could be classified.
    """
    if len(history) < window:
        return 0.0

    recent = _tail(history, window)
    buy_volume = 0.0
    sell_volume = 0.0

    for previous, current in zip(recent, recent[1:]):
        price_change = current.mid_price - previous.mid_price
        volume = current.top_of_book_volume

        if price_change > 0:
            buy_volume += volume
        elif price_change < 0:
            sell_volume += volume

    return _ratio(abs(buy_volume - sell_volume), buy_volume + sell_volume)


class FeatureExtractor:
    """
    Computes FeatureVectors from snapshots.

    Holds configuration only; safe to share across threads and symbols.
    """

    def __init__(self, config: Optional[FeatureConfig] = None):
        self._config = config or FeatureConfig()

    @property
    def config(self) -> FeatureConfig:
        return self._config

    @property
    def history_window(self) -> int:
        return self._config.history_window

    def extract_features(
        self,
        snapshot: LOBSnapshot,
        history: Sequence[LOBSnapshot],
    ) -> FeatureVector:
        """
        Build the feature vector for ``snapshot``.

        Args:
            snapshot: Current book state
            history: Snapshots strictly preceding ``snapshot`` for the same
                symbol, oldest first

        Returns:
            FeatureVector
        """
        levels = self._config.levels
        vol_imbalance = volume_imbalance(snapshot, levels)
        rel_spread = relative_spread(snapshot)

        recent = _tail(history, self._config.volatility_window)
        microprice_vol = volatility([s.microprice for s in recent])
        spread_vol = volatility([s.spread for s in recent])

        return FeatureVector(
            timestamp=snapshot.timestamp,
            symbol=snapshot.symbol,
            volume_imbalance=vol_imbalance,
            depth_imbalance=depth_imbalance(snapshot, levels),
            price_imbalance=price_imbalance(snapshot),
            relative_spread=rel_spread,
            effective_spread=snapshot.spread,
            microprice_volatility=microprice_vol,
            spread_volatility=spread_vol,
            order_flow_toxicity=abs(vol_imbalance) * rel_spread,
            vpin=vpin(history, self._config.vpin_window),
        )

    def extract_all(self, snapshots: Sequence[LOBSnapshot]) -> List[FeatureVector]:
        """Feature vectors for every snapshot, each using all prior ones as history."""
        return [
            self.extract_features(snapshot, snapshots[max(i - self.history_window, 0):i])
            for i, snapshot in enumerate(snapshots)
        ]
