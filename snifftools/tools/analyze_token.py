"""
Score one token from the command line and print the API response body as JSON.

How to run:
    From project root (with .env configured):
        py -m snifftools.tools.analyze_token <MINT_ADDRESS>
        py -m snifftools.tools.analyze_token <MINT_ADDRESS> --timeout 3

Env vars: BIRDEYE_API_KEY (optional; Birdeye is skipped without it), DEXSCREENER_API_KEY (optional).
Exit codes: 0 scored, 2 invalid address, 1 configuration or unexpected error.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from dataclasses import replace

from snifftools.analytics.analysis_pipeline import TokenAnalyzer
from snifftools.config import load_settings
from snifftools.core.exceptions import ConfigurationError, InvalidAddressError
from snifftools.logging import get_logger

logger = get_logger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Score a Solana token from Birdeye + DexScreener market data.")
    parser.add_argument("address", help="Token mint address (base58)")
    parser.add_argument("--timeout", type=float, default=None, help="Per-provider timeout in seconds (default: FETCH_TIMEOUT_SEC)")
    args = parser.parse_args(argv)

    try:
        settings = load_settings()
        if args.timeout is not None:
            settings = replace(settings, fetch_timeout_sec=args.timeout)
    except ConfigurationError as e:
        print(f"[analyze_token] configuration error: {e}", file=sys.stderr)
        return 1

    try:
        analysis = asyncio.run(TokenAnalyzer(settings).analyze(args.address))
    except InvalidAddressError as e:
        print(f"[analyze_token] {e}", file=sys.stderr)
        return 2
    except Exception as e:
        logger.exception("analyze_token_failed", error=str(e))
        return 1
    print(json.dumps(analysis.to_dict(), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
