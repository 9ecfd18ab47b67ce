"""Email provider abstraction layer."""

from mailrelay.errors import ConfigurationError
from mailrelay.providers.base import DeliveryResult, EmailProvider
from mailrelay.providers.mailgun import MailgunProvider

PROVIDERS = {
    "mailgun": MailgunProvider,
}


def build_provider(provider_type: str, config: dict) -> EmailProvider:
    """Instantiate a provider from its type name and stored config."""
    try:
        provider_cls = PROVIDERS[provider_type]
    except KeyError:
        raise ConfigurationError(f"Unknown email provider type: {provider_type}") from None
    return provider_cls.from_config(config)


__all__ = [
    "DeliveryResult",
    "EmailProvider",
    "MailgunProvider",
    "build_provider",
]
