"""Pluggable HTTP client used by providers to reach their APIs."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

import httpx

from mailrelay.errors import TransportError


@dataclass
class ApiResponse:
    """Status, headers and raw body of a provider response."""
    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""


class ApiClient(ABC):
    """
    Performs the network call for a provider.
    Implementations raise TransportError when no response was obtained.
    """

    @abstractmethod
    async def post(
        self,
        url: str,
        headers: list[tuple[str, str]],
        body: bytes,
        email,
    ) -> ApiResponse:
        ...


class HttpxApiClient(ApiClient):
    """Default client backed by httpx.AsyncClient."""

    def __init__(
        self,
        timeout: float = 15,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout
        self.transport = transport

    async def post(
        self,
        url: str,
        headers: list[tuple[str, str]],
        body: bytes,
        email,
    ) -> ApiResponse:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                resp = await client.post(url, headers=headers, content=body)
        except httpx.HTTPError as e:
            raise TransportError(e) from e

        return ApiResponse(
            status_code=resp.status_code,
            headers=dict(resp.headers),
            body=resp.content,
        )
