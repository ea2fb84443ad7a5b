"""Indicator-based risk scoring for DRONERISK.

Weighted boolean indicators produce a numeric score, discretized into
Low / Medium / High risk levels.
"""

from dronerisk.classification.risk import (
    BASE_WEIGHTS,
    DEFAULT_WEIGHTS,
    RiskConfig,
    RiskScorer,
    risk_level,
    score_indicators,
)

__all__ = [
    "BASE_WEIGHTS",
    "DEFAULT_WEIGHTS",
    "RiskConfig",
    "RiskScorer",
    "risk_level",
    "score_indicators",
]
