"""
Signal generation module for LOB Alpha Research System.

Provides:
- Lasso / Ridge / Elastic Net shrinkage of the prior weight vector
- Bounded signals with confidence scores
- Diagnostics: feature selection, feature importance, signal distribution
"""

from .regularization import (
    BASE_WEIGHTS,
    apply_elastic_net,
    apply_lasso,
    apply_ridge,
    regularization_penalty,
    regularize_weights,
)

from .signal_generator import (
    MIN_HISTORY,
    Signal,
    SignalGenerator,
    feature_importance,
    forward_returns,
    pearson_correlation,
    select_features,
    signal_distribution,
)

__all__ = [
    # Regularization
    "BASE_WEIGHTS",
    "apply_elastic_net",
    "apply_lasso",
    "apply_ridge",
    "regularization_penalty",
    "regularize_weights",
    # Signals
    "MIN_HISTORY",
    "Signal",
    "SignalGenerator",
    # Diagnostics
    "feature_importance",
    "forward_returns",
    "pearson_correlation",
    "select_features",
    "signal_distribution",
]
