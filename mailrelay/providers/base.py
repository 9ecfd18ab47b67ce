"""Base email provider interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from mailrelay.email import Email


@dataclass
class DeliveryResult:
    """A message accepted by the provider."""
    id: str
    provider: str


class EmailProvider(ABC):
    """
    Common interface for all email providers.
    Each provider implements deliver() using its own API.
    """

    @property
    @abstractmethod
    def provider_type(self) -> str:
        ...

    @abstractmethod
    async def deliver(self, email: Email) -> DeliveryResult:
        """Send the email. Raises DeliveryError when it is not accepted."""
        ...
