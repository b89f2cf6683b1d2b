"""Token address validation utilities."""

from __future__ import annotations

from solders.pubkey import Pubkey


def is_valid_solana_address(address: object) -> bool:
    """Return True if address is a valid Solana (Pubkey) address."""
    if not isinstance(address, str) or not address.strip():
        return False
    try:
        Pubkey.from_string(address.strip())
        return True
    except Exception:
        return False
