"""
DexScreener token pairs fetcher.

GET {base}/latest/dex/tokens/<mint> -> {"pairs": [...] | null}. Only Solana
pairs are kept. Pool count is the number of pairs; liquidity and 24h volume
are summed across pairs. Price, market cap and 24h change come from the most
liquid pair listing the mint as its base token (None when there is none);
name and symbol come from the mint's side of the most liquid pair.
"""

from __future__ import annotations

from typing import Any, Mapping

from snifftools.core.exceptions import UpstreamFetchError
from snifftools.providers.base import BaseFetcher
from snifftools.providers.models import RawProviderMetrics, dig, safe_float, safe_str

PROVIDER_NAME = "dexscreener"
TOKENS_PATH = "/latest/dex/tokens/"
CHAIN_ID = "solana"


def _sum_optional(values: list[float | None]) -> float | None:
    present = [v for v in values if v is not None]
    return sum(present) if present else None


def _most_liquid(pairs: list[dict[str, Any]]) -> dict[str, Any]:
    return max(pairs, key=lambda p: safe_float(dig(p, "liquidity", "usd")) or 0.0)


def _token_side(pair: dict[str, Any], address: str) -> dict[str, Any]:
    """baseToken unless the mint is the quote side of the pair."""
    base = pair.get("baseToken") if isinstance(pair.get("baseToken"), dict) else {}
    quote = pair.get("quoteToken") if isinstance(pair.get("quoteToken"), dict) else {}
    if base.get("address") != address and quote.get("address") == address:
        return quote
    return base


class DexScreenerFetcher(BaseFetcher):
    name = PROVIDER_NAME

    def __init__(self, base_url: str, api_key: str = "", retries: int = 1, **kwargs: Any) -> None:
        super().__init__(retries=retries, **kwargs)
        self.base_url = base_url.rstrip("/")
        self.api_key = (api_key or "").strip()

    def build_request(self, address: str) -> tuple[str, Mapping[str, str], Mapping[str, Any] | None]:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["X-API-KEY"] = self.api_key
        return f"{self.base_url}{TOKENS_PATH}{address}", headers, None

    def parse(self, payload: Any, address: str) -> RawProviderMetrics:
        if isinstance(payload, dict):
            pairs = payload.get("pairs")
        elif isinstance(payload, list):
            pairs = payload
        else:
            raise UpstreamFetchError(self.name, "unexpected_shape")
        if pairs is None:
            pairs = []
        if not isinstance(pairs, list):
            raise UpstreamFetchError(self.name, "unexpected_shape")

        sol_pairs = [
            p for p in pairs
            if isinstance(p, dict) and p.get("chainId") in (None, CHAIN_ID)
        ]
        if not sol_pairs:
            return RawProviderMetrics(pool_count=0, sources=(self.name,))

        liquidities = [safe_float(dig(p, "liquidity", "usd")) for p in sol_pairs]
        volumes = [safe_float(dig(p, "volume", "h24")) for p in sol_pairs]
        token = _token_side(_most_liquid(sol_pairs), address)

        # priceUsd / marketCap / fdv describe the pair's base token
        base_pairs = [p for p in sol_pairs if dig(p, "baseToken", "address") == address]
        price = market_cap = price_change = None
        if base_pairs:
            top = _most_liquid(base_pairs)
            price = safe_float(top.get("priceUsd"))
            market_cap = safe_float(top.get("marketCap"))
            if market_cap is None:
                market_cap = safe_float(top.get("fdv"))
            price_change = safe_float(dig(top, "priceChange", "h24"))

        return RawProviderMetrics(
            liquidity=_sum_optional(liquidities),
            volume_24h=_sum_optional(volumes),
            price=price,
            market_cap=market_cap,
            pool_count=len(sol_pairs),
            price_change_24h=price_change,
            name=safe_str(token.get("name")),
            symbol=safe_str(token.get("symbol")),
            sources=(self.name,),
        )
