"""
Pytest fixtures for SniffTools tests. Providers are faked; no network access.
"""

from __future__ import annotations

import asyncio

import pytest

from snifftools.config import Settings
from snifftools.providers import BaseFetcher, RawProviderMetrics

# Valid Solana mints (base58, 32 bytes)
VALID_MINT = "9QCfNuQuxct1Xk9ytFYgxc5fThmTzL4pHQnSjjrVUrka"
VALID_MINT_2 = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"


class FakeFetcher(BaseFetcher):
    """Returns preset metrics and counts calls."""

    def __init__(self, name: str, metrics: RawProviderMetrics | None = None, delay: float = 0.0) -> None:
        super().__init__(retries=0)
        self.name = name
        self.metrics = metrics if metrics is not None else RawProviderMetrics.empty()
        self.delay = delay
        self.calls: list[str] = []

    async def fetch(self, address, client):
        self.calls.append(address)
        if self.delay:
            await asyncio.sleep(self.delay)
        return self.metrics


class ExplodingFetcher(FakeFetcher):
    """Raises from fetch(); the orchestrator must absorb it."""

    async def fetch(self, address, client):
        self.calls.append(address)
        raise RuntimeError("provider adapter bug")


@pytest.fixture
def settings() -> Settings:
    return Settings(
        birdeye_api_key="test-birdeye-key",
        birdeye_base_url="https://birdeye.test",
        dexscreener_base_url="https://dexscreener.test",
        fetch_timeout_sec=1.0,
        fetch_retries=0,
    )


@pytest.fixture
def fast_timeout_settings() -> Settings:
    return Settings(fetch_timeout_sec=0.05, fetch_retries=0)


@pytest.fixture
def birdeye_metrics() -> RawProviderMetrics:
    return RawProviderMetrics(
        liquidity=1_500_000.0,
        volume_24h=50_000.0,
        holders=200,
        price=0.0123,
        name="Sniff Token",
        symbol="SNIFF",
        sources=("birdeye",),
    )


@pytest.fixture
def make_client():
    """Build a FastAPI TestClient around an analyzer with the given fetchers."""
    from fastapi.testclient import TestClient

    from snifftools.analytics.analysis_pipeline import TokenAnalyzer
    from snifftools.api_server.server import create_app

    def _make(settings: Settings, fetchers: list[BaseFetcher]) -> TestClient:
        analyzer = TokenAnalyzer(settings, fetchers=fetchers)
        return TestClient(create_app(settings, analyzer=analyzer))

    return _make
