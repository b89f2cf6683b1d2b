"""
Application settings.

Built once from the environment and threaded explicitly into the analyzer and
the API app; nothing reads os.environ at request time. Weight tables are
validated here so a bad table fails the process at startup.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from snifftools.analytics.composite_scorer import DEFAULT_WEIGHTS, validate_weights
from snifftools.config.env import (
    current_environ,
    env_float,
    env_int,
    env_list,
    env_present,
    env_str,
    parse_weights,
)
from snifftools.core.exceptions import ConfigurationError

DEFAULT_PORT = 3000
DEFAULT_HOST = "0.0.0.0"
DEFAULT_BIRDEYE_BASE_URL = "https://public-api.birdeye.so"
DEFAULT_DEXSCREENER_BASE_URL = "https://api.dexscreener.com"
DEFAULT_FETCH_TIMEOUT_SEC = 5.0
DEFAULT_FETCH_RETRIES = 1
MAX_FETCH_RETRIES = 5

# Reported by GET /test-config
DIAGNOSTIC_KEYS = ("BIRDEYE_API_KEY", "DEXSCREENER_API_KEY", "SOLANA_RPC_URL")


@dataclass(frozen=True)
class Settings:
    port: int = DEFAULT_PORT
    host: str = DEFAULT_HOST
    birdeye_api_key: str = ""
    dexscreener_api_key: str = ""
    solana_rpc_url: str = ""
    birdeye_base_url: str = DEFAULT_BIRDEYE_BASE_URL
    dexscreener_base_url: str = DEFAULT_DEXSCREENER_BASE_URL
    fetch_timeout_sec: float = DEFAULT_FETCH_TIMEOUT_SEC
    fetch_retries: int = DEFAULT_FETCH_RETRIES
    weights: Mapping[str, float] = field(default_factory=lambda: DEFAULT_WEIGHTS)
    cors_allow_origins: tuple[str, ...] = ("*",)

    def __post_init__(self) -> None:
        if not (0 < self.port < 65536):
            raise ConfigurationError(f"PORT out of range: {self.port}")
        if self.fetch_timeout_sec <= 0:
            raise ConfigurationError(f"FETCH_TIMEOUT_SEC must be > 0, got {self.fetch_timeout_sec}")
        if not (0 <= self.fetch_retries <= MAX_FETCH_RETRIES):
            raise ConfigurationError(f"FETCH_RETRIES must be 0-{MAX_FETCH_RETRIES}, got {self.fetch_retries}")
        object.__setattr__(self, "weights", MappingProxyType(validate_weights(self.weights)))

    def config_report(self) -> dict[str, str]:
        """Presence of secrets/endpoints for diagnostics; values are never exposed."""
        values = {
            "BIRDEYE_API_KEY": self.birdeye_api_key,
            "DEXSCREENER_API_KEY": self.dexscreener_api_key,
            "SOLANA_RPC_URL": self.solana_rpc_url,
        }
        return {key: env_present(values, key) for key in DIAGNOSTIC_KEYS}


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build Settings from environ (defaults to .env + os.environ). Raises ConfigurationError."""
    env = current_environ() if environ is None else environ
    weights = parse_weights(env_str(env, "SCORE_WEIGHTS")) or dict(DEFAULT_WEIGHTS)
    return Settings(
        port=env_int(env, "PORT", DEFAULT_PORT),
        host=env_str(env, "HOST", DEFAULT_HOST),
        birdeye_api_key=env_str(env, "BIRDEYE_API_KEY"),
        dexscreener_api_key=env_str(env, "DEXSCREENER_API_KEY"),
        solana_rpc_url=env_str(env, "SOLANA_RPC_URL"),
        birdeye_base_url=env_str(env, "BIRDEYE_BASE_URL", DEFAULT_BIRDEYE_BASE_URL).rstrip("/"),
        dexscreener_base_url=env_str(env, "DEXSCREENER_BASE_URL", DEFAULT_DEXSCREENER_BASE_URL).rstrip("/"),
        fetch_timeout_sec=env_float(env, "FETCH_TIMEOUT_SEC", DEFAULT_FETCH_TIMEOUT_SEC),
        fetch_retries=env_int(env, "FETCH_RETRIES", DEFAULT_FETCH_RETRIES),
        weights=weights,
        cors_allow_origins=tuple(env_list(env, "CORS_ALLOW_ORIGINS", "*")),
    )


@functools.lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process settings, loaded once on first use."""
    return load_settings()
