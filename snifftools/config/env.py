"""
Environment variable loading for SniffTools.

- Loads .env from the project root when available.
- Typed readers for str / int / float env values; malformed numbers raise
  ConfigurationError so a bad deployment fails at startup, not per request.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Mapping

from snifftools.core.exceptions import ConfigurationError

# Project root: config is snifftools/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_PACKAGE_DIR = _CONFIG_DIR.parent
_ROOT = _PACKAGE_DIR.parent
_ENV_PATH = _ROOT / ".env"


def load_snifftools_env() -> None:
    """Load .env from project root. Safe to call multiple times; never overrides real env."""
    from dotenv import load_dotenv

    load_dotenv(_ENV_PATH, override=False)


def env_str(environ: Mapping[str, str], name: str, default: str = "") -> str:
    return (environ.get(name) or default).strip()


def env_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = (environ.get(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from e


def env_float(environ: Mapping[str, str], name: str, default: float) -> float:
    raw = (environ.get(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from e


def env_list(environ: Mapping[str, str], name: str, default: str) -> list[str]:
    raw = environ.get(name) or default
    return [item.strip() for item in raw.split(",") if item.strip()]


def parse_weights(raw: str) -> dict[str, float]:
    """
    Parse SCORE_WEIGHTS: either a JSON object or "name=weight,name=weight".

    Only parses; range and sum checks live in the composite scorer.
    """
    raw = (raw or "").strip()
    if not raw:
        return {}
    if raw.startswith("{"):
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"SCORE_WEIGHTS is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError("SCORE_WEIGHTS JSON must be an object")
        pairs = data.items()
    else:
        pairs = []
        for part in raw.split(","):
            part = part.strip()
            if not part:
                continue
            name, sep, value = part.partition("=")
            if not sep:
                raise ConfigurationError(f"SCORE_WEIGHTS entry {part!r} must look like name=weight")
            pairs.append((name.strip(), value.strip()))
    weights: dict[str, float] = {}
    for name, value in pairs:
        try:
            weights[str(name)] = float(value)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"SCORE_WEIGHTS weight for {name!r} is not a number: {value!r}") from e
    return weights


def env_present(environ: Mapping[str, str], name: str) -> str:
    """'Present' / 'Missing' for diagnostics; never the value itself."""
    return "Present" if (environ.get(name) or "").strip() else "Missing"


def current_environ() -> Mapping[str, str]:
    load_snifftools_env()
    return os.environ
