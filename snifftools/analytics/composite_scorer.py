"""
Composite scorer: weighted combination of normalized sub-scores.

overall = round_half_up(sum(weight[name] * score[name])), clamped to 0-100.
A weighted metric with no normalized value contributes NEUTRAL_SCORE.
Message and label are a band lookup on the overall score:

    >= 90 EXCEPTIONAL, >= 80 STRONG, >= 70 GOOD, >= 60 FAIR, else CAUTION
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from snifftools.analytics.normalizers import (
    METRIC_HOLDERS,
    METRIC_LIQUIDITY,
    METRIC_MARKET_CAP,
    METRIC_POOL_COUNT,
    METRIC_VOLUME,
    NEUTRAL_SCORE,
    NORMALIZERS,
    NormalizedMetric,
    clamp_score,
)
from snifftools.core.exceptions import UnknownMetricError, WeightConfigurationError
from snifftools.logging import get_logger

logger = get_logger(__name__)

WEIGHT_SUM_EPSILON = 1e-6

DEFAULT_WEIGHTS: Mapping[str, float] = MappingProxyType({
    METRIC_LIQUIDITY: 0.30,
    METRIC_VOLUME: 0.30,
    METRIC_HOLDERS: 0.20,
    METRIC_MARKET_CAP: 0.10,
    METRIC_POOL_COUNT: 0.10,
})

LABEL_EXCEPTIONAL = "EXCEPTIONAL"
LABEL_STRONG = "STRONG"
LABEL_GOOD = "GOOD"
LABEL_FAIR = "FAIR"
LABEL_CAUTION = "CAUTION"

# (minimum overall score, label, message), best band first
MESSAGE_BANDS: tuple[tuple[int, str, str], ...] = (
    (90, LABEL_EXCEPTIONAL, "Exceptional token metrics across the board"),
    (80, LABEL_STRONG, "Strong token metrics with healthy market activity"),
    (70, LABEL_GOOD, "Good token metrics with some room for improvement"),
    (60, LABEL_FAIR, "Fair token metrics - do additional research"),
    (0, LABEL_CAUTION, "Caution: weak or missing token metrics"),
)


@dataclass(frozen=True)
class CompositeAnalysis:
    """Per-request result; built once and never mutated."""

    overall_score: int
    label: str
    message: str
    metrics: Mapping[str, NormalizedMetric]
    token_data: Mapping[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": self.overall_score,
            "label": self.label,
            "message": self.message,
            "metrics": {name: m.to_dict() for name, m in self.metrics.items()},
            "tokenData": dict(self.token_data),
        }


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative values (Python's round() is banker's)."""
    return int(math.floor(value + 0.5))


def validate_weights(
    weights: Mapping[str, float],
    known_metrics: Mapping[str, Any] | None = None,
) -> dict[str, float]:
    """
    Check a weight table and return it as a plain dict of floats.

    Non-empty, every weight finite and >= 0, every metric registered, and the
    sum within WEIGHT_SUM_EPSILON of 1.0. Raises WeightConfigurationError or
    UnknownMetricError.
    """
    registry = NORMALIZERS if known_metrics is None else known_metrics
    if not weights:
        raise WeightConfigurationError("Weight table must not be empty")
    out: dict[str, float] = {}
    for name, raw in weights.items():
        if name not in registry:
            raise UnknownMetricError(name)
        try:
            w = float(raw)
        except (TypeError, ValueError) as e:
            raise WeightConfigurationError(f"Weight for {name!r} is not a number: {raw!r}") from e
        if math.isnan(w) or math.isinf(w) or w < 0:
            raise WeightConfigurationError(f"Weight for {name!r} must be finite and >= 0, got {raw!r}")
        out[name] = w
    total = sum(out.values())
    if abs(total - 1.0) > WEIGHT_SUM_EPSILON:
        raise WeightConfigurationError(f"Weights must sum to 1.0, got {total:.6f}")
    return out


def select_band(overall: int) -> tuple[str, str]:
    """Return (label, message) for an overall score; total over every integer."""
    overall = clamp_score(overall)
    for minimum, label, message in MESSAGE_BANDS:
        if overall >= minimum:
            return label, message
    return MESSAGE_BANDS[-1][1], MESSAGE_BANDS[-1][2]


def select_message(overall: int) -> str:
    return select_band(overall)[1]


def label_for_score(overall: int) -> str:
    return select_band(overall)[0]


def weighted_score(
    normalized_metrics: Mapping[str, NormalizedMetric],
    weights: Mapping[str, float],
) -> int:
    """Rounded, clamped weighted sum; missing sub-scores count as neutral."""
    total = 0.0
    for name, weight in weights.items():
        metric = normalized_metrics.get(name)
        sub_score = metric.score if metric is not None else NEUTRAL_SCORE
        total += weight * sub_score
    return clamp_score(round_half_up(total))


def score(
    normalized_metrics: Mapping[str, NormalizedMetric],
    weights: Mapping[str, float],
    token_data: Mapping[str, Any] | None = None,
) -> CompositeAnalysis:
    """
    Combine normalized sub-scores into a CompositeAnalysis.

    weights are expected to be validated already (config layer does it at startup).
    Deterministic: identical inputs give identical output.
    """
    overall = weighted_score(normalized_metrics, weights)
    label, message = select_band(overall)
    metrics = MappingProxyType({name: normalized_metrics[name] for name in weights if name in normalized_metrics})
    logger.debug(
        "composite_score_result",
        overall_score=overall,
        label=label,
        sub_scores={name: m.score for name, m in metrics.items()},
    )
    return CompositeAnalysis(
        overall_score=overall,
        label=label,
        message=message,
        metrics=metrics,
        token_data=MappingProxyType(dict(token_data or {})),
    )
