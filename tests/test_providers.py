"""
Pytest tests for data fetchers (Birdeye, DexScreener) and RawProviderMetrics.

HTTP is served by httpx.MockTransport; no network access.
"""

from __future__ import annotations

import asyncio

import httpx
import pytest

from snifftools.providers import BirdeyeFetcher, DexScreenerFetcher, RawProviderMetrics
from snifftools.providers.base import RETRY_BASE_DELAY_SEC, RETRY_JITTER, retry_budget
from snifftools.providers.models import dig, safe_float, safe_int, safe_str

from tests.conftest import VALID_MINT

BIRDEYE_OK = {
    "success": True,
    "data": {
        "address": VALID_MINT,
        "name": "Sniff Token",
        "symbol": "SNIFF",
        "price": 0.0123,
        "liquidity": 1500000.5,
        "v24hUSD": "50000",
        "holder": 200,
        "mc": 12000000,
        "numberMarkets": 7,
        "priceChange24hPercent": -3.5,
    },
}


def _pair(chain="solana", liquidity=None, volume=None, **extra):
    pair = {
        "chainId": chain,
        "baseToken": {"address": VALID_MINT, "name": "Sniff Token", "symbol": "SNIFF"},
        "quoteToken": {"address": "So11111111111111111111111111111111111111112", "name": "Wrapped SOL", "symbol": "SOL"},
    }
    if liquidity is not None:
        pair["liquidity"] = {"usd": liquidity}
    if volume is not None:
        pair["volume"] = {"h24": volume}
    pair.update(extra)
    return pair


def _fetch(fetcher, handler, address=VALID_MINT) -> RawProviderMetrics:
    async def _run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await fetcher.fetch(address, client)

    return asyncio.run(_run())


def _birdeye(**kwargs) -> BirdeyeFetcher:
    kwargs.setdefault("retries", 0)
    return BirdeyeFetcher(api_key="key-123", base_url="https://birdeye.test", retry_base_delay_sec=0, **kwargs)


def _dexscreener(**kwargs) -> DexScreenerFetcher:
    kwargs.setdefault("retries", 0)
    return DexScreenerFetcher(base_url="https://dexscreener.test", retry_base_delay_sec=0, **kwargs)


# --- Birdeye ---


def test_birdeye_parses_token_overview():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=BIRDEYE_OK)

    result = _fetch(_birdeye(), handler)

    assert len(seen) == 1
    req = seen[0]
    assert req.url.path == "/defi/token_overview"
    assert req.url.params["address"] == VALID_MINT
    assert req.headers["X-API-KEY"] == "key-123"
    assert req.headers["x-chain"] == "solana"

    assert result.liquidity == 1500000.5
    assert result.volume_24h == 50000.0
    assert result.holders == 200
    assert result.market_cap == 12000000.0
    assert result.pool_count == 7
    assert result.price_change_24h == -3.5
    assert result.symbol == "SNIFF"
    assert result.sources == ("birdeye",)


def test_birdeye_without_key_makes_no_call():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json=BIRDEYE_OK)

    fetcher = BirdeyeFetcher(api_key="", base_url="https://birdeye.test")
    assert fetcher.enabled is False
    result = _fetch(fetcher, handler)
    assert calls == []
    assert result.is_empty


def test_birdeye_market_cap_fallback_and_junk_fields():
    payload = {"success": True, "data": {"marketCap": "9000", "liquidity": "lots", "holder": None, "name": 42}}
    result = _fetch(_birdeye(), lambda r: httpx.Response(200, json=payload))
    assert result.market_cap == 9000.0
    assert result.liquidity is None
    assert result.holders is None
    assert result.name is None


def test_birdeye_unsuccessful_or_shapeless_payload_degrades():
    for payload in ({"success": False, "message": "Unauthorized"}, {"success": True, "data": None}, [1, 2, 3], "oops"):
        result = _fetch(_birdeye(), lambda r, p=payload: httpx.Response(200, json=p))
        assert result.is_empty


def test_birdeye_non_2xx_degrades():
    result = _fetch(_birdeye(), lambda r: httpx.Response(401, json={"message": "bad key"}))
    assert result == RawProviderMetrics.empty()


def test_malformed_json_degrades():
    result = _fetch(_birdeye(), lambda r: httpx.Response(200, content=b"<html>gateway</html>"))
    assert result.is_empty


def test_transport_timeout_degrades():
    def handler(request):
        raise httpx.ReadTimeout("slow provider", request=request)

    assert _fetch(_birdeye(), handler).is_empty
    assert _fetch(_dexscreener(), handler).is_empty


def test_connect_error_degrades():
    def handler(request):
        raise httpx.ConnectError("no route", request=request)

    assert _fetch(_dexscreener(), handler).is_empty


def test_transient_status_is_retried_then_succeeds():
    calls = []

    def handler(request):
        calls.append(request)
        if len(calls) == 1:
            return httpx.Response(503)
        return httpx.Response(200, json=BIRDEYE_OK)

    result = _fetch(_birdeye(retries=1), handler)
    assert len(calls) == 2
    assert result.holders == 200


def test_retries_are_bounded():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(429)

    result = _fetch(_birdeye(retries=2), handler)
    assert len(calls) == 3
    assert result.is_empty


def test_client_errors_are_not_retried():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(404)

    assert _fetch(_birdeye(retries=3), handler).is_empty
    assert len(calls) == 1


def test_birdeye_oversized_field_keeps_the_others():
    """An integer too large for a float drops that one field, not the whole provider result."""
    payload = {"success": True, "data": {"liquidity": 2_000_000, "holder": 10**400, "v24hUSD": "1,250,000"}}
    result = _fetch(_birdeye(), lambda r: httpx.Response(200, json=payload))
    assert result.liquidity == 2_000_000.0
    assert result.holders is None
    assert result.volume_24h == 1_250_000.0
    assert result.sources == ("birdeye",)


def test_attempt_timeout_sent_with_each_request():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(503) if len(seen) == 1 else httpx.Response(200, json=BIRDEYE_OK)

    _fetch(_birdeye(retries=1, attempt_timeout_sec=0.4), handler)
    assert len(seen) == 2
    assert all(r.extensions["timeout"]["read"] == 0.4 for r in seen)


def test_retry_budget_fits_attempts_and_backoff():
    assert retry_budget(5.0, 0) == (5.0, RETRY_BASE_DELAY_SEC)

    attempt, delay = retry_budget(5.0, 1)
    worst_backoff = delay * (1 + RETRY_JITTER)
    assert delay == RETRY_BASE_DELAY_SEC
    assert attempt * 2 + worst_backoff == pytest.approx(5.0)

    for total, retries in ((1.0, 1), (0.5, 3), (5.0, 5)):
        attempt, delay = retry_budget(total, retries)
        worst_backoff = delay * (1 + RETRY_JITTER) * (2**retries - 1)
        assert attempt > 0
        assert worst_backoff <= total * 0.1 + 1e-9
        assert attempt * (retries + 1) + worst_backoff == pytest.approx(total)


# --- DexScreener ---


def test_dexscreener_aggregates_solana_pairs():
    seen = []
    payload = {
        "pairs": [
            _pair(liquidity=100_000, volume=20_000, priceUsd="0.01", marketCap=5_000_000, priceChange={"h24": 4.2}),
            _pair(liquidity=400_000, volume=30_000, priceUsd="0.0125", fdv=7_000_000, priceChange={"h24": 5.0}),
            _pair(chain="ethereum", liquidity=9_000_000, volume=9_000_000),
            _pair(liquidity="n/a"),
        ]
    }

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json=payload)

    result = _fetch(_dexscreener(), handler)

    assert seen[0].url.path == f"/latest/dex/tokens/{VALID_MINT}"
    assert "X-API-KEY" not in seen[0].headers
    assert result.pool_count == 3
    assert result.liquidity == 500_000.0
    assert result.volume_24h == 50_000.0
    # Most liquid pair drives price / market cap (fdv fallback)
    assert result.price == 0.0125
    assert result.market_cap == 7_000_000.0
    assert result.price_change_24h == 5.0
    assert result.symbol == "SNIFF"
    assert result.sources == ("dexscreener",)


def test_dexscreener_unlisted_token():
    result = _fetch(_dexscreener(), lambda r: httpx.Response(200, json={"schemaVersion": "1.0.0", "pairs": None}))
    assert result.pool_count == 0
    assert result.liquidity is None
    assert result.sources == ("dexscreener",)


def test_dexscreener_quote_side_token():
    """Mint only on the quote side: name/symbol from its side, no price or market cap from the other token."""
    pair = _pair(liquidity=9_000_000, priceUsd="150.0", marketCap=70_000_000_000, priceChange={"h24": 2.0})
    pair["baseToken"], pair["quoteToken"] = pair["quoteToken"], pair["baseToken"]
    result = _fetch(_dexscreener(), lambda r: httpx.Response(200, json={"pairs": [pair]}))
    assert result.symbol == "SNIFF"
    assert result.price is None
    assert result.market_cap is None
    assert result.price_change_24h is None
    assert result.liquidity == 9_000_000.0
    assert result.pool_count == 1


def test_dexscreener_price_from_most_liquid_base_pair():
    quote_side = _pair(liquidity=9_000_000, priceUsd="150.0", marketCap=70_000_000_000)
    quote_side["baseToken"], quote_side["quoteToken"] = quote_side["quoteToken"], quote_side["baseToken"]
    base_side = _pair(liquidity=20_000, priceUsd="0.01", marketCap=2_000_000)
    result = _fetch(_dexscreener(), lambda r: httpx.Response(200, json={"pairs": [quote_side, base_side]}))
    assert result.price == 0.01
    assert result.market_cap == 2_000_000.0
    assert result.liquidity == 9_020_000.0
    assert result.pool_count == 2


def test_dexscreener_list_payload_and_api_key_header():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json=[_pair(liquidity=1_000, volume=10)])

    result = _fetch(_dexscreener(api_key="dex-key"), handler)
    assert seen[0].headers["X-API-KEY"] == "dex-key"
    assert result.pool_count == 1


def test_dexscreener_bad_pairs_shape_degrades():
    result = _fetch(_dexscreener(), lambda r: httpx.Response(200, json={"pairs": "none"}))
    assert result.is_empty


# --- RawProviderMetrics ---


def test_raw_metrics_merge_first_wins():
    birdeye = RawProviderMetrics(liquidity=1.0, holders=10, sources=("birdeye",))
    dex = RawProviderMetrics(liquidity=2.0, pool_count=3, name="Dex", sources=("dexscreener",))
    merged = birdeye.merge(dex)
    assert merged.liquidity == 1.0
    assert merged.holders == 10
    assert merged.pool_count == 3
    assert merged.name == "Dex"
    assert merged.sources == ("birdeye", "dexscreener")
    # Inputs untouched
    assert birdeye.pool_count is None


def test_raw_metrics_empty_and_token_data():
    empty = RawProviderMetrics.empty()
    assert empty.is_empty
    assert not RawProviderMetrics(pool_count=0).is_empty
    data = RawProviderMetrics(price=1.5, symbol="X", sources=("birdeye",)).to_token_data()
    assert data["price"] == 1.5
    assert data["symbol"] == "X"
    assert data["marketCap"] is None
    assert data["sources"] == ["birdeye"]


def test_safe_extractors():
    assert safe_float("1.5") == 1.5
    assert safe_float(True) is None
    assert safe_float("1,500,000") == 1_500_000.0
    assert safe_float(10**400) is None
    assert safe_int(10**400) is None
    assert safe_float(float("nan")) is None
    assert safe_float({"usd": 1}) is None
    assert safe_int("12.9") == 12
    assert safe_str("  ") is None
    assert safe_str(" SNIFF ") == "SNIFF"
    assert dig({"a": {"b": 2}}, "a", "b") == 2
    assert dig({"a": [1]}, "a", "b") is None
    assert dig(None, "a") is None
