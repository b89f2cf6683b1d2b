"""
Base data fetcher: one provider endpoint -> RawProviderMetrics.

fetch() never raises for provider trouble. Network errors, timeouts, non-2xx
statuses, malformed JSON and unexpected shapes are logged as
UpstreamFetchError and replaced with RawProviderMetrics.empty(). Transient
failures (429 / 5xx / transport errors) get bounded retries with exponential
backoff and jitter. retry_budget() splits the fetch timeout so every attempt
and the backoff between them fit inside it; the orchestrator's timeout still
bounds the whole call.
"""

from __future__ import annotations

import asyncio
import random
from typing import Any, Mapping

import httpx

from snifftools.core.exceptions import UpstreamFetchError
from snifftools.logging import get_logger
from snifftools.logging.logger import short_address
from snifftools.providers.models import RawProviderMetrics

logger = get_logger(__name__)

TRANSIENT_STATUS = {429, 500, 502, 503, 504}
RETRY_BASE_DELAY_SEC = 0.2
RETRY_JITTER = 0.25
# Share of a fetch's timeout that worst-case backoff may use
BACKOFF_BUDGET_SHARE = 0.1


def retry_budget(
    total_timeout_sec: float,
    retries: int,
    base_delay_sec: float = RETRY_BASE_DELAY_SEC,
) -> tuple[float, float]:
    """
    Split one fetch timeout across its attempts.

    Returns (per-attempt timeout, backoff base delay) such that every attempt
    plus the worst-case backoff between them fits inside total_timeout_sec.
    Backoff is scaled down when it would take more than BACKOFF_BUDGET_SHARE
    of the total; the remainder is shared evenly by the attempts.
    """
    if retries <= 0:
        return total_timeout_sec, base_delay_sec
    worst_backoff = base_delay_sec * (1 + RETRY_JITTER) * (2 ** retries - 1)
    allowance = total_timeout_sec * BACKOFF_BUDGET_SHARE
    if worst_backoff > allowance:
        base_delay_sec *= allowance / worst_backoff
        worst_backoff = allowance
    return (total_timeout_sec - worst_backoff) / (retries + 1), base_delay_sec


class BaseFetcher:
    """Subclasses set name and implement build_request() and parse()."""

    name = "base"

    def __init__(
        self,
        retries: int = 1,
        retry_base_delay_sec: float = RETRY_BASE_DELAY_SEC,
        attempt_timeout_sec: float | None = None,
    ) -> None:
        self.retries = max(0, int(retries))
        self.retry_base_delay_sec = max(0.0, float(retry_base_delay_sec))
        # None keeps the client's timeout for each attempt
        self.attempt_timeout_sec = attempt_timeout_sec

    @property
    def enabled(self) -> bool:
        """False when the fetcher lacks required configuration (e.g. an API key)."""
        return True

    def build_request(self, address: str) -> tuple[str, Mapping[str, str], Mapping[str, Any] | None]:
        """Return (url, headers, params) for address."""
        raise NotImplementedError

    def parse(self, payload: Any, address: str) -> RawProviderMetrics:
        """Extract metrics from a decoded JSON payload. Raise UpstreamFetchError on unusable shapes."""
        raise NotImplementedError

    async def fetch(self, address: str, client: httpx.AsyncClient) -> RawProviderMetrics:
        if not self.enabled:
            logger.info("provider_skipped_not_configured", provider=self.name, token=short_address(address))
            return RawProviderMetrics.empty()
        try:
            url, headers, params = self.build_request(address)
            payload = await self._get_json(client, url, headers, params)
            metrics = self.parse(payload, address)
        except UpstreamFetchError as e:
            logger.warning(
                "provider_fetch_failed",
                provider=self.name,
                token=short_address(address),
                reason=e.reason,
            )
            return RawProviderMetrics.empty()
        except Exception as e:
            logger.warning(
                "provider_fetch_unexpected_error",
                provider=self.name,
                token=short_address(address),
                error=type(e).__name__,
            )
            return RawProviderMetrics.empty()
        logger.debug("provider_fetch_ok", provider=self.name, token=short_address(address), empty=metrics.is_empty)
        return metrics

    async def _get_json(
        self,
        client: httpx.AsyncClient,
        url: str,
        headers: Mapping[str, str],
        params: Mapping[str, Any] | None,
    ) -> Any:
        delay = self.retry_base_delay_sec
        timeout = self.attempt_timeout_sec if self.attempt_timeout_sec is not None else httpx.USE_CLIENT_DEFAULT
        for attempt in range(self.retries + 1):
            last_attempt = attempt == self.retries
            try:
                resp = await client.get(url, headers=dict(headers), params=params, timeout=timeout)
            except httpx.TimeoutException as e:
                if last_attempt:
                    raise UpstreamFetchError(self.name, "timeout") from e
            except httpx.RequestError as e:
                if last_attempt:
                    raise UpstreamFetchError(self.name, f"request_failed:{type(e).__name__}") from e
            else:
                if resp.status_code in TRANSIENT_STATUS and not last_attempt:
                    logger.debug("provider_retry", provider=self.name, status=resp.status_code, attempt=attempt + 1)
                elif not resp.is_success:
                    raise UpstreamFetchError(self.name, f"http_{resp.status_code}")
                else:
                    try:
                        return resp.json()
                    except ValueError as e:
                        raise UpstreamFetchError(self.name, "malformed_json") from e
            if delay > 0:
                await asyncio.sleep(delay + random.uniform(0, delay * RETRY_JITTER))
            delay *= 2
        raise UpstreamFetchError(self.name, "retries_exhausted")
