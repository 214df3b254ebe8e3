"""
Signal Generator for LOB Alpha Research System
==============================================

Combines a feature vector into a bounded alpha signal and a confidence
score.

SIGNAL:
    raw     = Σ w_i * x_i - penalty(w)
    signal  = tanh(raw)            (always in [-1, +1])

where w is the regularized base weight vector (see regularization.py).
Weights are domain priors, not a trained estimator.

CONFIDENCE (in [0, 1]):
    0.4 * (|volume imbalance| + |depth imbalance|)   strong imbalance
  + 0.3 * (1 - min(relative_spread * 100, 1))        tight spread
  + 0.2 * (1 - min(microprice_volatility * 10, 1))   calm microprice
  + 0.1 * vpin                                       informed flow
  all halved and clipped to [0, 1].

WARM-UP:
The first 50 snapshots only build history; one signal is emitted for every
later snapshot.
"""

from collections import deque
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Sequence

import numpy as np

from .regularization import BASE_WEIGHTS, regularization_penalty, regularize_weights
from ..data.orderbook import LOBSnapshot
from ..errors import DataValidationError, InsufficientDataError
from ..features.extractor import FEATURE_NAMES, FeatureExtractor, FeatureVector
from ..infra.config import RegularizationConfig
from ..infra.logging import get_logger, LogCategory


logger = get_logger()

MIN_HISTORY = 50
MODEL_VERSION = "1.0.0"


@dataclass(frozen=True)
class Signal:
    """
    One alpha signal per snapshot after warm-up.

    mid_price is the snapshot's mid at signal time; the backtester uses it
    as the execution reference price.
    """
    timestamp: float
    symbol: str
    signal_value: float    # -1 to +1
    confidence: float      # 0 to 1
    features: FeatureVector
    model_tag: str
    mid_price: float
    model_version: str = MODEL_VERSION

    @property
    def strength(self) -> float:
        """Confidence-scaled signal, the input to position sizing."""
        return self.signal_value * self.confidence

    def to_dict(self) -> Dict:
        return {
            "timestamp": self.timestamp,
            "symbol": self.symbol,
            "signal_value": self.signal_value,
            "confidence": self.confidence,
            "model_tag": self.model_tag,
            "model_version": self.model_version,
            "mid_price": self.mid_price,
            "features": self.features.to_dict(),
        }


class SignalGenerator:
    """
    Stateless signal model: configuration in, signals out.

    The regularized weights and penalty are computed once at construction
    since they depend only on configuration.
    """

    def __init__(
        self,
        regularization: Optional[RegularizationConfig] = None,
        extractor: Optional[FeatureExtractor] = None,
        base_weights: Optional[Dict[str, float]] = None,
    ):
        self._regularization = regularization or RegularizationConfig()
        self._extractor = extractor or FeatureExtractor()
        self._base_weights = dict(base_weights or BASE_WEIGHTS)

        self._weights = regularize_weights(self._regularization, self._base_weights)
        self._weight_vector = np.array([self._weights[name] for name in FEATURE_NAMES], dtype=float)
        self._penalty = regularization_penalty(self._regularization, self._weights)

    @property
    def regularization(self) -> RegularizationConfig:
        return self._regularization

    @property
    def weights(self) -> Dict[str, float]:
        """Regularized weights actually applied to features."""
        return dict(self._weights)

    @property
    def penalty(self) -> float:
        return self._penalty

    def raw_score(self, features: FeatureVector) -> float:
        """Weighted feature sum minus the regularization penalty, before tanh."""
        return float(np.dot(self._weight_vector, features.as_array())) - self._penalty

    def calculate_signal(self, features: FeatureVector) -> float:
        return float(np.tanh(self.raw_score(features)))

    def calculate_confidence(self, features: FeatureVector) -> float:
        imbalance_strength = abs(features.volume_imbalance) + abs(features.depth_imbalance)
        spread_quality = 1 - min(features.relative_spread * 100, 1)
        volatility_quality = 1 - min(features.microprice_volatility * 10, 1)
        vpin_strength = features.vpin

        confidence = (
            imbalance_strength * 0.4
            + spread_quality * 0.3
            + volatility_quality * 0.2
            + vpin_strength * 0.1
        ) / 2

        return float(np.clip(confidence, 0.0, 1.0))

    def iter_signals(self, snapshots: Sequence[LOBSnapshot], model_tag: str = "default") -> Iterator[Signal]:
        """
        Lazily produce signals for a single-symbol snapshot sequence.

        Input is validated immediately; the returned iterator is single-use.
        """
        self._validate(snapshots)
        return self._signal_stream(snapshots, model_tag)

    def generate_signals(self, snapshots: Sequence[LOBSnapshot], model_tag: str = "default") -> List[Signal]:
        """
        Generate one signal per snapshot after the warm-up period.

        Raises:
            InsufficientDataError: fewer than MIN_HISTORY + 1 snapshots
            DataValidationError: snapshots from more than one symbol
        """
        symbol = snapshots[0].symbol if snapshots else None
        with logger.measure_latency("generate_signals", category=LogCategory.SIGNAL, symbol=symbol):
            signals = list(self.iter_signals(snapshots, model_tag))

        if signals:
            logger.log_signal_batch(
                symbol=signals[0].symbol,
                model_tag=model_tag,
                count=len(signals),
                mean_value=float(np.mean([s.signal_value for s in signals])),
                mean_confidence=float(np.mean([s.confidence for s in signals])),
            )
        return signals

    def _validate(self, snapshots: Sequence[LOBSnapshot]) -> None:
        if len(snapshots) <= MIN_HISTORY:
            raise InsufficientDataError(
                f"Need more than {MIN_HISTORY} snapshots to generate signals, got {len(snapshots)}",
                required_count=MIN_HISTORY + 1,
                available_count=len(snapshots),
            )

        symbols = {snapshot.symbol for snapshot in snapshots}
        if len(symbols) > 1:
            raise DataValidationError(
                f"Signal generation expects a single symbol, got {sorted(symbols)}"
            )

    def _signal_stream(self, snapshots: Sequence[LOBSnapshot], model_tag: str) -> Iterator[Signal]:
        # Bounded history: the extractor never reads beyond this window
        history: deque = deque(snapshots[:MIN_HISTORY], maxlen=max(self._extractor.history_window, 1))

        for snapshot in snapshots[MIN_HISTORY:]:
            features = self._extractor.extract_features(snapshot, history)

            yield Signal(
                timestamp=snapshot.timestamp,
                symbol=snapshot.symbol,
                signal_value=self.calculate_signal(features),
                confidence=self.calculate_confidence(features),
                features=features,
                model_tag=model_tag,
                mid_price=snapshot.mid_price,
            )
            history.append(snapshot)

    def select_features(
        self,
        features: Sequence[FeatureVector],
        forward_returns: Sequence[float],
        max_features: Optional[int] = None,
    ) -> List[str]:
        """
        Rank model features by |Pearson correlation| with forward returns.

        Advisory only: the ranking is reported, it does not change weights.
        """
        limit = max_features or self._regularization.max_features
        return select_features(features, forward_returns, limit)


def pearson_correlation(x: Sequence[float], y: Sequence[float]) -> float:
    """Correlation over the common prefix; 0 for empty or constant input."""
    n = min(len(x), len(y))
    if n == 0:
        return 0.0

    xs = np.asarray(x[:n], dtype=float)
    ys = np.asarray(y[:n], dtype=float)
    dx = xs - xs.mean()
    dy = ys - ys.mean()

    denominator = np.sqrt(np.sum(dx * dx) * np.sum(dy * dy))
    if denominator == 0:
        return 0.0
    return float(np.sum(dx * dy) / denominator)


def select_features(
    features: Sequence[FeatureVector],
    forward_returns: Sequence[float],
    max_features: int = 5,
) -> List[str]:
    """Top ``max_features`` feature names by absolute correlation with returns."""
    scores = []
    for name in FEATURE_NAMES:
        values = [getattr(f, name) for f in features]
        scores.append((name, abs(pearson_correlation(values, forward_returns))))

    # Stable sort keeps FEATURE_NAMES order among ties
    scores.sort(key=lambda item: item[1], reverse=True)
    return [name for name, _ in scores[:max_features]]


def forward_returns(signals: Sequence[Signal]) -> List[float]:
    """
    Next-step mid-price return for each signal except the last.

    A zero mid price gives a 0 return.
    """
    returns = []
    for current, following in zip(signals, signals[1:]):
        if current.mid_price == 0:
            returns.append(0.0)
        else:
            returns.append((following.mid_price - current.mid_price) / current.mid_price)
    return returns


def feature_importance(signals: Sequence[Signal]) -> List[tuple]:
    """Mean absolute feature value per model feature, largest first."""
    if not signals:
        return []
    matrix = np.abs(np.array([s.features.as_array() for s in signals]))
    means = matrix.mean(axis=0)
    ranked = sorted(zip(FEATURE_NAMES, means.tolist()), key=lambda item: item[1], reverse=True)
    return ranked


def signal_distribution(signals: Sequence[Signal], bins: int = 20) -> List[int]:
    """Histogram counts of signal values over [-1, 1]."""
    values = np.array([s.signal_value for s in signals], dtype=float)
    counts, _ = np.histogram(values, bins=bins, range=(-1.0, 1.0))
    return counts.tolist()
