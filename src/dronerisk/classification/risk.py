"""Indicator-weighted risk scoring.

A target's risk score is the sum of the weights of its active boolean
indicators.  The score is discretized into Low / Medium / High with
inclusive lower thresholds, High checked first.  Scoring is pure and
deterministic; results are cached per frozen indicator set.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from functools import lru_cache
from types import MappingProxyType
from typing import Any

from dronerisk.core.types import RiskAssessment, RiskLevel

logger = logging.getLogger(__name__)

BASE_WEIGHTS: Mapping[str, int] = MappingProxyType({
    "imeiModem": 10,
    "dataOnly": 5,
    "highSpeed": 5,
    "highHandover": 5,
    "verticalMovement": 5,
    "inNoFlyZone": 30,
    "uasFlag": 10,
    "loitering": 5,
    "highAltitude": 5,
    "missingRID": 15,
    "repeatSighting": 5,
    "nearMannedCorridor": 10,
})

# Extended table adds the water/land speed-profile indicator (sum = 100)
DEFAULT_WEIGHTS: Mapping[str, int] = MappingProxyType({
    **BASE_WEIGHTS,
    "noSpeedChangeWaterLand": 20,
})

HIGH_THRESHOLD = 50
MEDIUM_THRESHOLD = 20


@dataclass
class RiskConfig:
    """Risk scoring configuration."""

    weights: dict[str, int] = field(default_factory=lambda: dict(DEFAULT_WEIGHTS))
    high_threshold: int = HIGH_THRESHOLD
    medium_threshold: int = MEDIUM_THRESHOLD

    @classmethod
    def from_omegaconf(cls, cfg: Any) -> RiskConfig:
        """Build from OmegaConf dict or plain dict.

        ``weights`` replaces the default table wholesale when given, so a
        scenario can drop the extended indicator.
        """
        if cfg is None:
            return cls()

        from omegaconf import OmegaConf

        if OmegaConf.is_config(cfg):
            cfg = OmegaConf.to_container(cfg, resolve=True)
        if not isinstance(cfg, dict):
            cfg = dict(cfg)

        weights = cfg.get("weights") or dict(DEFAULT_WEIGHTS)
        thresholds = cfg.get("thresholds", {}) or {}
        return cls(
            weights={str(k): int(v) for k, v in weights.items()},
            high_threshold=int(thresholds.get("high", HIGH_THRESHOLD)),
            medium_threshold=int(thresholds.get("medium", MEDIUM_THRESHOLD)),
        )


class RiskScorer:
    """Maps indicator sets to a score and a discrete risk level.

    Args:
        weights: Indicator name -> positive integer weight.
        high_threshold: Minimum score for ``HIGH``.
        medium_threshold: Minimum score for ``MEDIUM``.

    Raises:
        ValueError: On a non-positive weight or inverted thresholds.
    """

    def __init__(
        self,
        weights: Mapping[str, int] = DEFAULT_WEIGHTS,
        high_threshold: int = HIGH_THRESHOLD,
        medium_threshold: int = MEDIUM_THRESHOLD,
    ):
        for name, weight in weights.items():
            if int(weight) <= 0:
                raise ValueError(f"Indicator weight must be positive: {name}={weight}")
        if medium_threshold > high_threshold:
            raise ValueError(
                f"medium_threshold ({medium_threshold}) exceeds high_threshold ({high_threshold})"
            )
        self._weights = MappingProxyType({str(k): int(v) for k, v in weights.items()})
        self._high = high_threshold
        self._medium = medium_threshold
        self._assess_cached = lru_cache(maxsize=256)(self._assess_frozen)

    @classmethod
    def from_config(cls, config: RiskConfig) -> RiskScorer:
        return cls(
            weights=config.weights,
            high_threshold=config.high_threshold,
            medium_threshold=config.medium_threshold,
        )

    @property
    def weights(self) -> Mapping[str, int]:
        return self._weights

    @property
    def max_score(self) -> int:
        return sum(self._weights.values())

    def score(self, indicators: Mapping[str, bool]) -> int:
        """Sum of weights for indicators that are ``True`` (missing = ``False``).

        Names outside the weight table contribute nothing.
        """
        return sum(w for name, w in self._weights.items() if indicators.get(name, False))

    def level(self, score: int) -> RiskLevel:
        if score >= self._high:
            return RiskLevel.HIGH
        if score >= self._medium:
            return RiskLevel.MEDIUM
        return RiskLevel.LOW

    def assess(self, indicators: Mapping[str, bool]) -> RiskAssessment:
        """Score and level for one indicator set."""
        active = frozenset(
            name for name in self._weights if indicators.get(name, False)
        )
        return self._assess_cached(active)

    def _assess_frozen(self, active: frozenset[str]) -> RiskAssessment:
        score = sum(self._weights[name] for name in active)
        # Keep weight-table order for display
        ordered = tuple(name for name in self._weights if name in active)
        return RiskAssessment(score=score, level=self.level(score), active_indicators=ordered)


_DEFAULT_SCORER = RiskScorer()


def score_indicators(indicators: Mapping[str, bool]) -> int:
    """Score against the default 13-indicator table."""
    return _DEFAULT_SCORER.score(indicators)


def risk_level(score: int) -> RiskLevel:
    """Level for *score* using the default thresholds (50 / 20)."""
    return _DEFAULT_SCORER.level(score)
