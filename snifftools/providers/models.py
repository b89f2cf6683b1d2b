"""
Raw provider metrics and defensive field extraction helpers.

Provider payloads are not trusted: every field is optional and extracted
one by one with an explicit None default.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import Any

from snifftools.utils.number_utils import parse_number

NUMERIC_FIELDS = ("liquidity", "volume_24h", "holders", "price", "market_cap", "pool_count", "price_change_24h")
TEXT_FIELDS = ("name", "symbol")


def safe_float(value: Any) -> float | None:
    """float(value) for numbers and numeric strings; None for anything else (bools, NaN, inf, overflow)."""
    return parse_number(value)


def safe_int(value: Any) -> int | None:
    out = safe_float(value)
    return int(out) if out is not None else None


def safe_str(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def dig(data: Any, *path: str) -> Any:
    """Walk nested dicts; None as soon as a level is missing or not a dict."""
    cur = data
    for key in path:
        if not isinstance(cur, dict):
            return None
        cur = cur.get(key)
    return cur


@dataclass(frozen=True)
class RawProviderMetrics:
    """Loosely-typed provider data; any field may be None."""

    liquidity: float | None = None
    volume_24h: float | None = None
    holders: int | None = None
    price: float | None = None
    market_cap: float | None = None
    pool_count: int | None = None
    price_change_24h: float | None = None
    name: str | None = None
    symbol: str | None = None
    sources: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def empty(cls) -> "RawProviderMetrics":
        """Degraded-empty result substituted when a provider call fails."""
        return cls()

    @property
    def is_empty(self) -> bool:
        return all(getattr(self, name) is None for name in NUMERIC_FIELDS + TEXT_FIELDS)

    def merge(self, other: "RawProviderMetrics") -> "RawProviderMetrics":
        """Fill fields missing here from other; existing values win."""
        updates: dict[str, Any] = {}
        for f in fields(self):
            if f.name == "sources":
                continue
            if getattr(self, f.name) is None and getattr(other, f.name) is not None:
                updates[f.name] = getattr(other, f.name)
        sources = self.sources + tuple(s for s in other.sources if s not in self.sources)
        return replace(self, sources=sources, **updates)

    def to_token_data(self) -> dict[str, Any]:
        """Supplementary fields echoed to clients for display."""
        return {
            "name": self.name,
            "symbol": self.symbol,
            "price": self.price,
            "marketCap": self.market_cap,
            "liquidity": self.liquidity,
            "volume24h": self.volume_24h,
            "holders": self.holders,
            "poolCount": self.pool_count,
            "priceChange24h": self.price_change_24h,
            "sources": list(self.sources),
        }
