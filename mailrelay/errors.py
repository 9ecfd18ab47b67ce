"""Error types raised while delivering an email."""

from typing import Any


class DeliveryError(RuntimeError):
    """Base class for every failed delivery."""


class ProviderError(DeliveryError):
    """The provider answered with a status we do not treat as success.

    ``body`` is the decoded JSON error when the response body parses,
    otherwise the raw response text.
    """

    def __init__(self, status_code: int, body: Any, message: str = ""):
        self.status_code = status_code
        self.body = body
        super().__init__(message or f"Provider returned {status_code}: {body!r}")


class ResponseDecodeError(DeliveryError):
    """A 200 response whose body is not JSON or carries no message id."""

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"Could not read message id from {status_code} response: {body[:200]!r}")


class TransportError(DeliveryError):
    """No HTTP response was obtained. ``reason`` is the underlying failure."""

    def __init__(self, reason: Any):
        self.reason = reason
        super().__init__(f"Transport failed: {reason}")


class ConfigurationError(ValueError):
    """Provider configuration is missing or invalid."""
