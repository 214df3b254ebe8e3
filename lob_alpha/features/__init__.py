"""
Feature extraction for LOB Alpha Research System.
"""

from .extractor import (
    FEATURE_NAMES,
    FeatureExtractor,
    FeatureVector,
    depth_imbalance,
    price_imbalance,
    relative_spread,
    volatility,
    volume_imbalance,
    vpin,
)

__all__ = [
    "FEATURE_NAMES",
    "FeatureExtractor",
    "FeatureVector",
    "depth_imbalance",
    "price_imbalance",
    "relative_spread",
    "volatility",
    "volume_imbalance",
    "vpin",
]
