"""Tests for walk-forward validation"""

import numpy as np
import pytest

from lob_alpha.backtest.walk_forward import WalkForwardValidator
from lob_alpha.errors import InsufficientDataError
from lob_alpha.infra.config import BacktestConfig, RegularizationConfig


@pytest.fixture
def validator():
    config = BacktestConfig(walk_forward_window=100, validation_window=50)
    return WalkForwardValidator(config, RegularizationConfig(max_features=3))


class TestFoldLayout:
    """Test train/validation partitioning"""

    def test_fold_bounds(self, validator):
        assert validator.fold_bounds(300) == [
            (0, 100, 150),
            (50, 150, 200),
            (100, 200, 250),
            (150, 250, 300),
        ]

    def test_partial_last_window_is_dropped(self, validator):
        assert len(validator.fold_bounds(299)) == 3

    def test_too_few_signals(self, validator):
        assert validator.fold_bounds(149) == []


class TestValidation:
    """Test running folds"""

    def test_validation_windows_follow_training(self, validator, random_signals):
        result = validator.validate(random_signals)

        assert result.num_folds == 4
        for fold in result.folds:
            assert fold.train_end < fold.validation_start
            assert fold.result.num_signals == 50
            assert len(fold.selected_features) == 3

    def test_validation_windows_do_not_overlap(self, validator, random_signals):
        folds = validator.validate(random_signals).folds
        for earlier, later in zip(folds, folds[1:]):
            assert earlier.validation_end < later.validation_start

    def test_aggregates_are_fold_means(self, validator, random_signals):
        result = validator.validate(random_signals)
        sharpes = [fold.result.metrics.sharpe_ratio for fold in result.folds]
        drawdowns = [fold.result.metrics.max_drawdown for fold in result.folds]

        assert result.mean_sharpe == pytest.approx(np.mean(sharpes))
        assert result.mean_max_drawdown == pytest.approx(np.mean(drawdowns))

    def test_insufficient_signals(self, validator, random_signals):
        with pytest.raises(InsufficientDataError) as exc_info:
            validator.validate(random_signals[:120])
        assert exc_info.value.required_count == 150

    def test_to_dict(self, validator, random_signals):
        data = validator.validate(random_signals).to_dict()
        assert data["num_folds"] == len(data["folds"])
