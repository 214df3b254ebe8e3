"""Tests for signal generation"""

import numpy as np
import pytest

from lob_alpha.errors import DataValidationError, InsufficientDataError
from lob_alpha.features.extractor import FEATURE_NAMES
from lob_alpha.infra.config import RegularizationConfig, RegularizationMethod
from lob_alpha.signals.signal_generator import (
    MIN_HISTORY,
    SignalGenerator,
    feature_importance,
    forward_returns,
    pearson_correlation,
    select_features,
    signal_distribution,
)


class TestWarmUp:
    """Test warm-up and input validation"""

    def test_one_signal_per_snapshot_after_warm_up(self, balanced_snapshots):
        signals = SignalGenerator().generate_signals(balanced_snapshots)
        assert len(signals) == len(balanced_snapshots) - MIN_HISTORY
        assert signals[0].timestamp == balanced_snapshots[MIN_HISTORY].timestamp

    def test_exactly_warm_up_is_rejected(self, balanced_snapshots):
        """Test 50 snapshots cannot produce a signal"""
        with pytest.raises(InsufficientDataError) as exc_info:
            SignalGenerator().generate_signals(balanced_snapshots[:MIN_HISTORY])
        assert exc_info.value.required_count == MIN_HISTORY + 1
        assert exc_info.value.available_count == MIN_HISTORY

    def test_one_past_warm_up(self, balanced_snapshots):
        signals = SignalGenerator().generate_signals(balanced_snapshots[:MIN_HISTORY + 1])
        assert len(signals) == 1

    def test_empty_input_is_rejected(self):
        with pytest.raises(InsufficientDataError):
            SignalGenerator().generate_signals([])

    def test_mixed_symbols_are_rejected(self, snapshot_factory):
        snapshots = [snapshot_factory(i, symbol="AAA" if i % 2 else "BBB") for i in range(60)]
        with pytest.raises(DataValidationError):
            SignalGenerator().generate_signals(snapshots)

    def test_iter_signals_validates_eagerly(self, balanced_snapshots):
        """Test validation fails on the call, not on first iteration"""
        with pytest.raises(InsufficientDataError):
            SignalGenerator().iter_signals(balanced_snapshots[:10])

    def test_iter_signals_matches_generate(self, simulated_snapshots):
        generator = SignalGenerator()
        assert list(generator.iter_signals(simulated_snapshots)) == generator.generate_signals(simulated_snapshots)


class TestBalancedBook:
    """Test a perfectly balanced book gives a near-neutral signal"""

    def test_imbalances_are_zero(self, balanced_snapshots):
        for signal in SignalGenerator().generate_signals(balanced_snapshots):
            assert signal.features.volume_imbalance == 0.0
            assert signal.features.depth_imbalance == 0.0

    def test_signal_near_zero(self, balanced_snapshots):
        for signal in SignalGenerator().generate_signals(balanced_snapshots):
            assert abs(signal.signal_value) <= 0.05

    def test_signal_near_zero_with_spread(self, snapshot_factory):
        """Test equal sizes around a real spread stay near neutral"""
        snapshots = [snapshot_factory(i * 100, spread=0.02) for i in range(150)]
        for signal in SignalGenerator().generate_signals(snapshots):
            assert signal.features.volume_imbalance == 0.0
            assert abs(signal.features.depth_imbalance) < 1e-3
            assert abs(signal.signal_value) <= 0.05


class TestSignalBounds:
    """Test signal and confidence ranges"""

    @pytest.mark.parametrize("method", list(RegularizationMethod))
    @pytest.mark.parametrize("alpha", [0.0, 0.05, 0.1, 1.0, 10.0])
    def test_bounds_for_every_model(self, simulated_snapshots, method, alpha):
        generator = SignalGenerator(RegularizationConfig(method=method, alpha=alpha))
        for signal in generator.generate_signals(simulated_snapshots):
            assert -1.0 <= signal.signal_value <= 1.0
            assert 0.0 <= signal.confidence <= 1.0

    def test_extreme_features_stay_bounded(self, features_factory):
        generator = SignalGenerator(RegularizationConfig(method="ridge", alpha=0.0))
        features = features_factory(
            volume_imbalance=1.0,
            depth_imbalance=1.0,
            price_imbalance=50.0,
            order_flow_toxicity=100.0,
            vpin=1.0,
        )
        assert -1.0 <= generator.calculate_signal(features) <= 1.0
        assert 0.0 <= generator.calculate_confidence(features) <= 1.0


class TestConfidence:
    """Test the confidence blend"""

    def test_neutral_features(self, features_factory):
        """Test tight spread and calm microprice alone give (0.3 + 0.2) / 2"""
        confidence = SignalGenerator().calculate_confidence(features_factory())
        assert confidence == pytest.approx(0.25)

    def test_wide_spread_and_noise_remove_quality_terms(self, features_factory):
        features = features_factory(relative_spread=0.05, microprice_volatility=0.5)
        assert SignalGenerator().calculate_confidence(features) == 0.0

    def test_strong_imbalance_raises_confidence(self, features_factory):
        weak = SignalGenerator().calculate_confidence(features_factory(volume_imbalance=0.1))
        strong = SignalGenerator().calculate_confidence(features_factory(volume_imbalance=0.9))
        assert strong > weak


class TestSignalFields:
    """Test signal metadata"""

    def test_tag_mid_and_version(self, simulated_snapshots):
        signals = SignalGenerator().generate_signals(simulated_snapshots, model_tag="lasso-a0.1")
        for signal, snapshot in zip(signals, simulated_snapshots[MIN_HISTORY:]):
            assert signal.model_tag == "lasso-a0.1"
            assert signal.mid_price == snapshot.mid_price
            assert signal.symbol == "SIM"
            assert signal.model_version == "1.0.0"

    def test_strength(self, signal_factory):
        signal = signal_factory(0, value=0.5, confidence=0.4)
        assert signal.strength == pytest.approx(0.2)

    def test_to_dict(self, signal_factory):
        data = signal_factory(0, value=0.5).to_dict()
        assert data["signal_value"] == 0.5
        assert set(FEATURE_NAMES) <= set(data["features"])


class TestFeatureSelection:
    """Test advisory feature selection"""

    def test_most_correlated_feature_first(self, features_factory):
        rng = np.random.default_rng(3)
        returns = rng.normal(0, 1, 100)
        features = [
            features_factory(
                volume_imbalance=float(r),
                depth_imbalance=float(rng.normal()),
                vpin=float(-r + rng.normal(0, 0.5)),
            )
            for r in returns
        ]
        selected = select_features(features, returns.tolist(), max_features=2)
        assert selected == ["volume_imbalance", "vpin"]

    def test_max_features(self, features_factory):
        features = [features_factory(volume_imbalance=float(i)) for i in range(10)]
        returns = [float(i) for i in range(10)]
        assert len(select_features(features, returns, max_features=3)) == 3
        assert len(SignalGenerator().select_features(features, returns)) == 5

    def test_pearson_degenerate_input(self):
        assert pearson_correlation([], []) == 0.0
        assert pearson_correlation([1.0, 1.0, 1.0], [1.0, 2.0, 3.0]) == 0.0

    def test_pearson_perfect(self):
        assert pearson_correlation([1.0, 2.0, 3.0], [2.0, 4.0, 6.0]) == pytest.approx(1.0)
        assert pearson_correlation([1.0, 2.0, 3.0], [3.0, 2.0, 1.0]) == pytest.approx(-1.0)


class TestDiagnostics:
    """Test forward returns, importance and distribution helpers"""

    def test_forward_returns(self, signal_factory):
        signals = [signal_factory(i, 0.0, mid=mid) for i, mid in enumerate([100.0, 101.0, 99.99])]
        returns = forward_returns(signals)
        assert len(returns) == 2
        assert returns[0] == pytest.approx(0.01)
        assert returns[1] == pytest.approx(-0.01)

    def test_forward_returns_zero_mid(self, signal_factory):
        signals = [signal_factory(0, 0.0, mid=0.0), signal_factory(1, 0.0, mid=100.0)]
        assert forward_returns(signals) == [0.0]

    def test_feature_importance_sorted(self, simulated_snapshots):
        ranking = feature_importance(SignalGenerator().generate_signals(simulated_snapshots))
        values = [value for _, value in ranking]
        assert [name for name, _ in ranking] != []
        assert values == sorted(values, reverse=True)
        assert {name for name, _ in ranking} == set(FEATURE_NAMES)

    def test_feature_importance_empty(self):
        assert feature_importance([]) == []

    def test_signal_distribution_counts_everything(self, simulated_snapshots):
        signals = SignalGenerator().generate_signals(simulated_snapshots)
        counts = signal_distribution(signals, bins=10)
        assert len(counts) == 10
        assert sum(counts) == len(signals)
