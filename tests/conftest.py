"""Pytest configuration and fixtures for bitmex-api tests.

This file provides:
- make_envelope: ResponseEnvelope factory with sensible defaults
- RecordingTransport: In-memory transport that records requests and replays
  queued responses, so ApiClient tests never touch the network
- Fixtures: Shared configuration and client instances
"""

from __future__ import annotations

import json
from typing import Any, Generator

import pytest

from bitmex_api.api_client import ApiClient
from bitmex_api.models import Configuration, ResponseEnvelope, SignedRequest

# Secret from the public BitMEX API-key documentation; its example
# signatures are pinned in the auth tests.
TEST_API_KEY = "LAqUlngMIQkIUjXMUreyu3qn"
TEST_API_SECRET = "chNOOS4KvNXR_Xq4k4c9qsfoKWvnDecLATCRlcBwyKDYnWgO"


def make_envelope(
    status_code: int = 200,
    body: Any = None,
    content: bytes | None = None,
    headers: dict[str, str] | None = None,
    reason_phrase: str = "OK",
) -> ResponseEnvelope:
    """Create a ResponseEnvelope for testing.

    body is JSON-encoded; pass content for raw bytes instead. Without
    explicit headers a JSON content type is assumed.
    """
    if content is None:
        content = b"" if body is None else json.dumps(body).encode("utf-8")
    if headers is None:
        headers = {"Content-Type": "application/json"}
    return ResponseEnvelope(
        status_code=status_code,
        reason_phrase=reason_phrase,
        headers=headers,
        content=content,
    )


class RecordingTransport:
    """Stand-in for Transport that records requests and replays responses.

    Usage:
        transport = RecordingTransport(make_envelope(body={"ok": True}))
        client = ApiClient(config, transport=transport)
        client.call_api("GET", "/x")
        assert transport.requests[0].method == "GET"
    """

    def __init__(self, *responses: ResponseEnvelope) -> None:
        self.requests: list[SignedRequest] = []
        self._responses = list(responses)
        self.closed = False

    def queue(self, response: ResponseEnvelope) -> None:
        self._responses.append(response)

    def execute(self, request: SignedRequest) -> ResponseEnvelope:
        self.requests.append(request)
        if len(self._responses) > 1:
            return self._responses.pop(0)
        # The last queued response is repeated for any further calls
        return self._responses[0]

    def close(self) -> None:
        self.closed = True

    @property
    def last_request(self) -> SignedRequest:
        return self.requests[-1]


@pytest.fixture
def configuration() -> Configuration:
    return Configuration(api_key=TEST_API_KEY, api_secret=TEST_API_SECRET)


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport(make_envelope())


@pytest.fixture
def client(
    configuration: Configuration, transport: RecordingTransport
) -> Generator[ApiClient, None, None]:
    api_client = ApiClient(configuration, transport=transport)
    try:
        yield api_client
    finally:
        api_client.close()
