"""
Analysis pipeline: validate -> fetch (fan-out) -> normalize -> score.

Single entrypoint for the API and CLI. Stages:

    IDLE -> VALIDATING_INPUT -> FETCHING -> NORMALIZING -> RESPONDING

An invalid address raises InvalidAddressError before any fetcher runs.
Fetching never fails the request: each provider call is bounded by
fetch_timeout_sec and degrades to empty metrics. Unexpected errors while
scoring are re-raised as InternalComputationError.
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import TYPE_CHECKING, Any, Iterable, Mapping

import httpx

from snifftools.analytics import composite_scorer
from snifftools.analytics.composite_scorer import CompositeAnalysis
from snifftools.analytics.normalizers import (
    METRIC_HOLDERS,
    METRIC_LIQUIDITY,
    METRIC_MARKET_CAP,
    METRIC_POOL_COUNT,
    METRIC_VOLUME,
    NormalizedMetric,
    normalize,
)
from snifftools.core.exceptions import InternalComputationError, InvalidAddressError
from snifftools.logging import bind_token, get_logger
from snifftools.providers import BaseFetcher, RawProviderMetrics, build_fetchers
from snifftools.utils.address_utils import is_valid_solana_address

if TYPE_CHECKING:
    from snifftools.config.settings import Settings

logger = get_logger(__name__)

# Metric name -> RawProviderMetrics attribute. Metrics not listed (placeholders) get None.
METRIC_FIELDS: Mapping[str, str] = {
    METRIC_LIQUIDITY: "liquidity",
    METRIC_VOLUME: "volume_24h",
    METRIC_HOLDERS: "holders",
    METRIC_MARKET_CAP: "market_cap",
    METRIC_POOL_COUNT: "pool_count",
}


class AnalysisStage(str, Enum):
    IDLE = "idle"
    VALIDATING_INPUT = "validating_input"
    FETCHING = "fetching"
    NORMALIZING = "normalizing"
    RESPONDING = "responding"


def normalize_metrics(raw: RawProviderMetrics, weights: Iterable[str]) -> dict[str, NormalizedMetric]:
    """Normalize every weighted metric from merged provider data."""
    out: dict[str, NormalizedMetric] = {}
    for name in weights:
        attr = METRIC_FIELDS.get(name)
        value = getattr(raw, attr) if attr else None
        out[name] = normalize(name, value)
    return out


def merge_results(results: Iterable[RawProviderMetrics]) -> RawProviderMetrics:
    """Merge in fetcher order; the first provider to supply a field wins."""
    merged = RawProviderMetrics.empty()
    for result in results:
        merged = merged.merge(result)
    return merged


class TokenAnalyzer:
    """
    Request-scoped token analysis built around an explicit Settings object.

    fetchers defaults to build_fetchers(settings); transport is passed to
    httpx.AsyncClient (tests use httpx.MockTransport).
    """

    def __init__(
        self,
        settings: "Settings",
        fetchers: Iterable[BaseFetcher] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings
        self.fetchers = list(fetchers) if fetchers is not None else build_fetchers(settings)
        self._transport = transport

    async def analyze(self, address: Any) -> CompositeAnalysis:
        log = bind_token(address if isinstance(address, str) else "")
        stage = AnalysisStage.VALIDATING_INPUT
        log.debug("analysis_stage", stage=stage.value)
        if not is_valid_solana_address(address):
            log.info("analysis_invalid_address")
            raise InvalidAddressError(address)
        address = address.strip()

        stage = AnalysisStage.FETCHING
        log.debug("analysis_stage", stage=stage.value, providers=[f.name for f in self.fetchers])
        raw = await self.fetch_all(address)

        stage = AnalysisStage.NORMALIZING
        log.debug("analysis_stage", stage=stage.value, sources=list(raw.sources))
        try:
            normalized = normalize_metrics(raw, self.settings.weights)
            analysis = composite_scorer.score(normalized, self.settings.weights, token_data=raw.to_token_data())
        except Exception as e:
            log.exception("analysis_scoring_failed", error=type(e).__name__)
            raise InternalComputationError("Scoring failed") from e

        stage = AnalysisStage.RESPONDING
        log.info(
            "analysis_done",
            stage=stage.value,
            score=analysis.overall_score,
            label=analysis.label,
            sources=list(raw.sources),
        )
        return analysis

    async def fetch_all(self, address: str) -> RawProviderMetrics:
        """Run every fetcher concurrently and wait for all to settle."""
        timeout = httpx.Timeout(self.settings.fetch_timeout_sec)
        async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as client:
            results = await asyncio.gather(
                *(self._fetch_bounded(fetcher, address, client) for fetcher in self.fetchers)
            )
        return merge_results(results)

    async def _fetch_bounded(
        self,
        fetcher: BaseFetcher,
        address: str,
        client: httpx.AsyncClient,
    ) -> RawProviderMetrics:
        try:
            return await asyncio.wait_for(
                fetcher.fetch(address, client),
                timeout=self.settings.fetch_timeout_sec,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "provider_fetch_timeout",
                provider=fetcher.name,
                timeout_sec=self.settings.fetch_timeout_sec,
            )
        except Exception as e:
            logger.warning("provider_fetch_crashed", provider=fetcher.name, error=type(e).__name__)
        return RawProviderMetrics.empty()
