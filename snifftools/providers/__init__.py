"""
Data fetchers: one adapter per third-party market-data provider.

Each fetcher normalizes its provider's response into RawProviderMetrics and
degrades to RawProviderMetrics.empty() on any failure.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from snifftools.providers.base import BaseFetcher, retry_budget
from snifftools.providers.birdeye import BirdeyeFetcher
from snifftools.providers.dexscreener import DexScreenerFetcher
from snifftools.providers.models import RawProviderMetrics

if TYPE_CHECKING:
    from snifftools.config.settings import Settings


def build_fetchers(settings: "Settings") -> list[BaseFetcher]:
    """Configured fetchers in merge priority order (first wins per field)."""
    attempt_timeout_sec, retry_base_delay_sec = retry_budget(settings.fetch_timeout_sec, settings.fetch_retries)
    retry = {
        "retries": settings.fetch_retries,
        "retry_base_delay_sec": retry_base_delay_sec,
        "attempt_timeout_sec": attempt_timeout_sec,
    }
    return [
        BirdeyeFetcher(
            api_key=settings.birdeye_api_key,
            base_url=settings.birdeye_base_url,
            **retry,
        ),
        DexScreenerFetcher(
            base_url=settings.dexscreener_base_url,
            api_key=settings.dexscreener_api_key,
            **retry,
        ),
    ]


__all__ = [
    "BaseFetcher",
    "BirdeyeFetcher",
    "DexScreenerFetcher",
    "RawProviderMetrics",
    "build_fetchers",
    "retry_budget",
]
