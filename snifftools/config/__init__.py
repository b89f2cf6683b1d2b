"""
Configuration management for SniffTools.

Loads and validates settings from environment variables and an optional
.env file. Exposes a single Settings object for the analyzer and API.
"""

from snifftools.config.settings import Settings, get_settings, load_settings  # noqa: F401

__all__ = ["Settings", "get_settings", "load_settings"]
