"""
Metric normalizers: map one raw provider signal to a 0-100 sub-score.

Each metric has its own descending threshold ladder (strictly greater than)
and its own unit scale:

    liquidity    > 1M -> 90, > 100k -> 80, > 10k -> 70, > 1k -> 60, else 50
    volume       > 1M -> 90, > 500k -> 80, > 100k -> 70, > 10k -> 60, else 50
    holders      > 10k -> 90, > 1k -> 80, > 100 -> 70, > 10 -> 60, else 50
    market_cap   > 100M -> 90, > 10M -> 80, > 1M -> 70, > 100k -> 60, else 50
    pool_count   > 9 -> 90, > 4 -> 80, > 1 -> 70, > 0 -> 60, else 50

Missing, non-numeric, negative, NaN, infinite or float-overflowing input is
treated as 0 and falls through to the floor bucket. Pure functions; no I/O,
no state.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Mapping

from snifftools.core.exceptions import UnknownMetricError
from snifftools.utils.number_utils import parse_number

METRIC_LIQUIDITY = "liquidity"
METRIC_VOLUME = "volume"
METRIC_HOLDERS = "holders"
METRIC_MARKET_CAP = "market_cap"
METRIC_POOL_COUNT = "pool_count"
METRIC_SOCIAL = "social"
METRIC_SECURITY = "security"

SCORE_MIN = 0
SCORE_MAX = 100
NEUTRAL_SCORE = 50

BAND_STRONG = 80
BAND_MODERATE = 60

NOT_IMPLEMENTED_DESCRIPTION = "Not implemented"


@dataclass(frozen=True)
class NormalizedMetric:
    """One normalized sub-score and its display text."""

    score: int
    description: str

    def to_dict(self) -> dict[str, Any]:
        return {"score": self.score, "description": self.description}


@dataclass(frozen=True)
class ThresholdLadder:
    """Ordered (threshold, score) steps, highest threshold first."""

    steps: tuple[tuple[float, int], ...]
    floor: int = NEUTRAL_SCORE

    def score(self, value: float) -> int:
        for threshold, bucket in self.steps:
            if value > threshold:
                return bucket
        return self.floor


@dataclass(frozen=True)
class BandDescriptions:
    strong: str
    moderate: str
    low: str

    def for_score(self, score: int) -> str:
        if score >= BAND_STRONG:
            return self.strong
        if score >= BAND_MODERATE:
            return self.moderate
        return self.low


LIQUIDITY_LADDER = ThresholdLadder(((1_000_000, 90), (100_000, 80), (10_000, 70), (1_000, 60)))
VOLUME_LADDER = ThresholdLadder(((1_000_000, 90), (500_000, 80), (100_000, 70), (10_000, 60)))
HOLDERS_LADDER = ThresholdLadder(((10_000, 90), (1_000, 80), (100, 70), (10, 60)))
MARKET_CAP_LADDER = ThresholdLadder(((100_000_000, 90), (10_000_000, 80), (1_000_000, 70), (100_000, 60)))
POOL_COUNT_LADDER = ThresholdLadder(((9, 90), (4, 80), (1, 70), (0, 60)))

LIQUIDITY_DESCRIPTIONS = BandDescriptions(
    strong="Strong liquidity depth",
    moderate="Moderate liquidity",
    low="Low liquidity - trade with caution",
)
VOLUME_DESCRIPTIONS = BandDescriptions(
    strong="Strong 24h trading volume",
    moderate="Moderate 24h trading volume",
    low="Low trading activity - caution",
)
HOLDERS_DESCRIPTIONS = BandDescriptions(
    strong="Broad holder base",
    moderate="Moderate holder base",
    low="Few holders - caution",
)
MARKET_CAP_DESCRIPTIONS = BandDescriptions(
    strong="Strong market capitalization",
    moderate="Moderate market capitalization",
    low="Low market cap - caution",
)
POOL_COUNT_DESCRIPTIONS = BandDescriptions(
    strong="Listed across many pools",
    moderate="Listed in several pools",
    low="Limited pool listings - caution",
)


def coerce_number(raw: Any) -> float:
    """
    Defensive numeric coercion for provider values.

    Same parsing rule as provider extraction (parse_number); anything it
    rejects, and negative values, become 0.0.
    """
    value = parse_number(raw)
    if value is None or value < 0:
        return 0.0
    return value


def clamp_score(score: float) -> int:
    """Clamp to [0, 100] and return an int."""
    return int(max(SCORE_MIN, min(SCORE_MAX, score)))


@dataclass(frozen=True)
class LadderNormalizer:
    """Normalizer backed by a threshold ladder and band descriptions."""

    name: str
    ladder: ThresholdLadder
    descriptions: BandDescriptions

    def __call__(self, raw: Any) -> NormalizedMetric:
        score = clamp_score(self.ladder.score(coerce_number(raw)))
        return NormalizedMetric(score=score, description=self.descriptions.for_score(score))


@dataclass(frozen=True)
class PlaceholderNormalizer:
    """Sub-score with no data source yet; always neutral."""

    name: str
    default_score: int = NEUTRAL_SCORE

    def __call__(self, raw: Any = None) -> NormalizedMetric:
        return NormalizedMetric(score=clamp_score(self.default_score), description=NOT_IMPLEMENTED_DESCRIPTION)


Normalizer = Callable[[Any], NormalizedMetric]

normalize_liquidity = LadderNormalizer(METRIC_LIQUIDITY, LIQUIDITY_LADDER, LIQUIDITY_DESCRIPTIONS)
normalize_volume = LadderNormalizer(METRIC_VOLUME, VOLUME_LADDER, VOLUME_DESCRIPTIONS)
normalize_holders = LadderNormalizer(METRIC_HOLDERS, HOLDERS_LADDER, HOLDERS_DESCRIPTIONS)
normalize_market_cap = LadderNormalizer(METRIC_MARKET_CAP, MARKET_CAP_LADDER, MARKET_CAP_DESCRIPTIONS)
normalize_pool_count = LadderNormalizer(METRIC_POOL_COUNT, POOL_COUNT_LADDER, POOL_COUNT_DESCRIPTIONS)

# TODO: replace with real sub-scores once a social-signal and an audit provider are wired in.
normalize_social = PlaceholderNormalizer(METRIC_SOCIAL)
normalize_security = PlaceholderNormalizer(METRIC_SECURITY)

NORMALIZERS: Mapping[str, Normalizer] = MappingProxyType({
    METRIC_LIQUIDITY: normalize_liquidity,
    METRIC_VOLUME: normalize_volume,
    METRIC_HOLDERS: normalize_holders,
    METRIC_MARKET_CAP: normalize_market_cap,
    METRIC_POOL_COUNT: normalize_pool_count,
    METRIC_SOCIAL: normalize_social,
    METRIC_SECURITY: normalize_security,
})


def normalize(
    metric_name: str,
    raw_value: Any,
    normalizers: Mapping[str, Normalizer] | None = None,
) -> NormalizedMetric:
    """Normalize raw_value with the normalizer registered for metric_name."""
    registry = NORMALIZERS if normalizers is None else normalizers
    normalizer = registry.get(metric_name)
    if normalizer is None:
        raise UnknownMetricError(metric_name)
    return normalizer(raw_value)
