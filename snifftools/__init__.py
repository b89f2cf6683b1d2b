"""
SniffTools: token scoring API for Solana mints.

Queries third-party market-data providers, normalizes liquidity, volume,
holder, market cap and pool metrics to 0-100 sub-scores, and combines them
into one weighted trust/quality score.
"""

__version__ = "0.1.0"
