"""
Application-level exceptions.

Input errors cross the API boundary as 400s; upstream fetch errors are
absorbed by the fetchers; configuration errors are raised at startup.
"""

from __future__ import annotations


class SniffToolsError(Exception):
    """Base class for all SniffTools errors."""


class InputValidationError(SniffToolsError):
    """Client supplied input that cannot be analyzed."""

    status_code = 400


class InvalidAddressError(InputValidationError):
    """Address does not conform to the Solana base58 public key encoding."""

    def __init__(self, address: object = None) -> None:
        super().__init__("Invalid Solana address")
        self.address = address


class UpstreamFetchError(SniffToolsError):
    """A provider call failed (timeout, non-2xx, malformed body)."""

    def __init__(self, provider: str, reason: str) -> None:
        super().__init__(f"{provider}: {reason}")
        self.provider = provider
        self.reason = reason


class InternalComputationError(SniffToolsError):
    """Unexpected failure while scoring; surfaced to clients as a generic 500."""

    status_code = 500


class ConfigurationError(SniffToolsError):
    """Invalid service configuration detected at startup."""


class WeightConfigurationError(ConfigurationError):
    """Weight table is empty, negative, non-finite, or does not sum to 1."""


class UnknownMetricError(ConfigurationError):
    """A weight or normalize() call names a metric with no registered normalizer."""

    def __init__(self, metric: str) -> None:
        super().__init__(f"Unknown metric: {metric!r}")
        self.metric = metric
