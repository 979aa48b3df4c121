"""
Shared fixtures for adapter and collector tests.
"""

from datetime import datetime, timezone

import pytest

from core.clock import MockClock
from fetchers.models import FetchResult


class FakeClient:
    """
    Stands in for RateLimitedClient.

    REST responses are keyed by endpoint, JSON-RPC responses by method.
    Anything not configured fails the way a 404 does.
    """

    def __init__(self, provider, responses=None, rpc_responses=None):
        self.provider = provider
        self.name = provider.value
        self.responses = dict(responses or {})
        self.rpc_responses = dict(rpc_responses or {})
        self.requests = []
        self.rpc_calls = []
        self.closed = False

    async def request(self, endpoint="", method="GET", params=None, json_body=None, headers=None):
        self.requests.append((endpoint, params))
        response = self.responses.get(endpoint)
        if isinstance(response, Exception):
            raise response
        return response or FetchResult.fail("HTTP 404: Not Found", 404)

    async def rpc_call(self, method, params=None):
        self.rpc_calls.append((method, params))
        response = self.rpc_responses.get(method)
        if isinstance(response, Exception):
            raise response
        return response or FetchResult.fail("Method not found")

    async def close(self):
        self.closed = True

    @property
    def endpoints(self):
        return [endpoint for endpoint, _ in self.requests]


@pytest.fixture
def clock():
    return MockClock(datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def make_fake_client():
    return FakeClient
