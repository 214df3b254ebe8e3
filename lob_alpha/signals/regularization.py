"""
Weight Regularization for the Signal Model
==========================================

The signal model does not fit weights to data. It starts from a fixed
prior weight per feature and shrinks that prior with the selected scheme,
then charges a penalty proportional to the remaining weight norm.

SCHEMES:
- Lasso (L1): soft-threshold. |w| < alpha -> 0, else sign(w) * (|w| - alpha).
  Produces sparse weights.
- Ridge (L2): w / (1 + alpha). Proportional shrinkage, never exactly zero.
- Elastic Net: Lasso thresholding first, then Ridge shrinkage with
  alpha * (1 - l1_ratio).

PENALTY (subtracted from the weighted feature sum):
- Lasso:       alpha * ||w||_1
- Ridge:       alpha * ||w||_2
- Elastic Net: alpha * (l1_ratio * ||w||_1 + (1 - l1_ratio) * ||w||_2)

The penalty is computed on the already-regularized weights, so a Lasso alpha
at or above every |prior| zeroes both the weights and the penalty.
"""

from typing import Dict, Mapping

import numpy as np

from ..infra.config import RegularizationConfig, RegularizationMethod


# Domain priors: imbalances predict continuation, wide spreads and noisy
# microprices predict nothing useful
BASE_WEIGHTS: Dict[str, float] = {
    "volume_imbalance": 0.3,
    "depth_imbalance": 0.25,
    "price_imbalance": 0.2,
    "relative_spread": -0.15,
    "microprice_volatility": -0.1,
    "order_flow_toxicity": 0.15,
    "vpin": 0.1,
}


def soft_threshold(weights: np.ndarray, alpha: float) -> np.ndarray:
    magnitudes = np.abs(weights)
    return np.where(magnitudes < alpha, 0.0, np.sign(weights) * (magnitudes - alpha))


def apply_lasso(weights: Mapping[str, float], alpha: float) -> Dict[str, float]:
    names = list(weights)
    shrunk = soft_threshold(np.array([weights[n] for n in names], dtype=float), alpha)
    return {name: float(value) for name, value in zip(names, shrunk)}


def apply_ridge(weights: Mapping[str, float], alpha: float) -> Dict[str, float]:
    return {name: value / (1 + alpha) for name, value in weights.items()}


def apply_elastic_net(weights: Mapping[str, float], alpha: float, l1_ratio: float) -> Dict[str, float]:
    return apply_ridge(apply_lasso(weights, alpha), alpha * (1 - l1_ratio))


def regularize_weights(
    config: RegularizationConfig,
    weights: Mapping[str, float] = BASE_WEIGHTS,
) -> Dict[str, float]:
    """Apply the configured scheme to a weight vector."""
    if config.method == RegularizationMethod.LASSO:
        return apply_lasso(weights, config.alpha)
    if config.method == RegularizationMethod.RIDGE:
        return apply_ridge(weights, config.alpha)
    return apply_elastic_net(weights, config.alpha, config.effective_l1_ratio)


def regularization_penalty(config: RegularizationConfig, weights: Mapping[str, float]) -> float:
    """Penalty term subtracted from the raw weighted sum."""
    values = np.array(list(weights.values()), dtype=float)
    l1_norm = float(np.sum(np.abs(values)))
    l2_norm = float(np.sqrt(np.sum(values ** 2)))

    if config.method == RegularizationMethod.LASSO:
        return config.alpha * l1_norm
    if config.method == RegularizationMethod.RIDGE:
        return config.alpha * l2_norm

    l1_ratio = config.effective_l1_ratio
    return config.alpha * (l1_ratio * l1_norm + (1 - l1_ratio) * l2_norm)
