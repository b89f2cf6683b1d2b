"""
Structured logging for SniffTools.

JSON logs with timestamp, event_type and the token being analyzed.
Use get_logger() in all modules for aggregation-friendly output.
"""

from snifftools.logging.logger import bind_token, get_logger

__all__ = ["get_logger", "bind_token"]
