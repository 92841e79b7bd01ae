"""Shared fixtures for the Librato client tests."""

import httpx
import pytest

from librato_client import MetricsClient


class RecordingTransport(httpx.MockTransport):
    """Mock transport that records every request and answers with a fixed status."""

    def __init__(self, status_code: int = 200):
        self.requests = []
        self.status_code = status_code
        super().__init__(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)
        return httpx.Response(self.status_code, text="")


@pytest.fixture
def transport():
    """Create a transport that accepts every request."""
    return RecordingTransport()


@pytest.fixture
def client(transport):
    """Create a client fixture wired to the recording transport."""
    client = MetricsClient("user@example.com", "secret-token", transport=transport)
    yield client
    client.close()


@pytest.fixture
def failing_client():
    """Create a client whose transport answers every request with HTTP 500."""
    failing = RecordingTransport(status_code=500)
    client = MetricsClient("user@example.com", "secret-token", transport=failing)
    yield client
    client.close()
