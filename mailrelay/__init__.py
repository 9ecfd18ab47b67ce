"""Send provider-agnostic emails through the Mailgun HTTP API."""

__version__ = "0.1.0"

from mailrelay.email import Attachment, Email
from mailrelay.errors import (
    ConfigurationError,
    DeliveryError,
    ProviderError,
    ResponseDecodeError,
    TransportError,
)
from mailrelay.providers import DeliveryResult, EmailProvider, MailgunProvider, build_provider

__all__ = [
    "Attachment",
    "ConfigurationError",
    "DeliveryError",
    "DeliveryResult",
    "Email",
    "EmailProvider",
    "MailgunProvider",
    "ProviderError",
    "ResponseDecodeError",
    "TransportError",
    "build_provider",
]
