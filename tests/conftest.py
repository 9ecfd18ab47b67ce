"""Shared fixtures for mailrelay tests."""

from typing import Optional

import pytest

from mailrelay.api_client import ApiClient, ApiResponse
from mailrelay.email import Email
from mailrelay.errors import TransportError


class StubApiClient(ApiClient):
    """Records every call and answers with a canned response or failure."""

    def __init__(
        self,
        status_code: int = 200,
        body: bytes = b'{"id": "abc"}',
        failure: Optional[Exception] = None,
    ):
        self.response = ApiResponse(status_code=status_code, headers={}, body=body)
        self.failure = failure
        self.calls = []

    async def post(self, url, headers, body, email):
        self.calls.append({"url": url, "headers": headers, "body": body, "email": email})
        if self.failure is not None:
            raise TransportError(self.failure)
        return self.response


@pytest.fixture
def stub_client():
    return StubApiClient()


@pytest.fixture
def simple_email():
    return (
        Email()
        .put_from(("T Stark", "tony.stark@example.com"))
        .to("steve.rogers@example.com")
        .put_subject("Hello, Avengers!")
        .put_html_body("<h1>Hello</h1>")
    )


@pytest.fixture
def full_email():
    return (
        Email()
        .put_from(("T Stark", "tony.stark@example.com"))
        .to(("Steve Rogers", "steve.rogers@example.com"))
        .to("wasp.avengers@example.com")
        .put_reply_to("office.avengers@example.com")
        .cc(("Bruce Banner", "hulk.smash@example.com"))
        .cc("thor.odinson@example.com")
        .bcc(("Clinton Francis Barton", "hawk.eye@example.com"))
        .bcc("beast.avengers@example.com")
        .put_subject("Hello, Avengers!")
        .put_html_body("<h1>Hello</h1>")
        .put_text_body("Hello")
    )
