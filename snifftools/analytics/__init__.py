"""
SniffTools scoring core.

Normalizers map raw provider metrics to 0-100 sub-scores; the composite
scorer weights them into one score and message. The orchestrator lives in
snifftools.analytics.analysis_pipeline.
"""

from snifftools.analytics.composite_scorer import (
    DEFAULT_WEIGHTS,
    CompositeAnalysis,
    score,
    select_message,
    validate_weights,
)
from snifftools.analytics.normalizers import NormalizedMetric, normalize

__all__ = [
    "DEFAULT_WEIGHTS",
    "CompositeAnalysis",
    "NormalizedMetric",
    "normalize",
    "score",
    "select_message",
    "validate_weights",
]
