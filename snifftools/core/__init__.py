"""Core primitives shared across layers (exceptions)."""
