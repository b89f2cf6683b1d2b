"""
Birdeye token overview fetcher.

GET {base}/defi/token_overview?address=<mint> with X-API-KEY and x-chain headers.
Response: {"success": true, "data": {"liquidity", "v24hUSD", "holder", "price",
"mc", "priceChange24hPercent", "numberMarkets", "name", "symbol", ...}}.
Without an API key the fetcher is disabled and degrades without a network call.
"""

from __future__ import annotations

from typing import Any, Mapping

from snifftools.core.exceptions import UpstreamFetchError
from snifftools.providers.base import BaseFetcher
from snifftools.providers.models import RawProviderMetrics, safe_float, safe_int, safe_str

PROVIDER_NAME = "birdeye"
TOKEN_OVERVIEW_PATH = "/defi/token_overview"


class BirdeyeFetcher(BaseFetcher):
    name = PROVIDER_NAME

    def __init__(self, api_key: str, base_url: str, retries: int = 1, **kwargs: Any) -> None:
        super().__init__(retries=retries, **kwargs)
        self.api_key = (api_key or "").strip()
        self.base_url = base_url.rstrip("/")

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def build_request(self, address: str) -> tuple[str, Mapping[str, str], Mapping[str, Any] | None]:
        headers = {
            "X-API-KEY": self.api_key,
            "x-chain": "solana",
            "Accept": "application/json",
        }
        return f"{self.base_url}{TOKEN_OVERVIEW_PATH}", headers, {"address": address}

    def parse(self, payload: Any, address: str) -> RawProviderMetrics:
        if not isinstance(payload, dict):
            raise UpstreamFetchError(self.name, "unexpected_shape")
        if payload.get("success") is False:
            raise UpstreamFetchError(self.name, "unsuccessful_response")
        data = payload.get("data")
        if not isinstance(data, dict):
            raise UpstreamFetchError(self.name, "missing_data")

        market_cap = safe_float(data.get("mc"))
        if market_cap is None:
            market_cap = safe_float(data.get("marketCap"))
        return RawProviderMetrics(
            liquidity=safe_float(data.get("liquidity")),
            volume_24h=safe_float(data.get("v24hUSD")),
            holders=safe_int(data.get("holder")),
            price=safe_float(data.get("price")),
            market_cap=market_cap,
            pool_count=safe_int(data.get("numberMarkets")),
            price_change_24h=safe_float(data.get("priceChange24hPercent")),
            name=safe_str(data.get("name")),
            symbol=safe_str(data.get("symbol")),
            sources=(self.name,),
        )
