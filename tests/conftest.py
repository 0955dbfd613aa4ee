"""
Pytest configuration and shared fixtures for the test suite.
"""

import asyncio
import itertools
import json
from typing import Dict, List, Mapping, Optional, Tuple
from urllib.parse import unquote, urlsplit

import pytest

from riakclient.config import RiakConfig, set_config
from riakclient.core.client import RiakClient
from riakclient.core.errors import TransportError
from riakclient.transport.interface import Transport, TransportResponse


# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture(autouse=True)
def reset_global_config():
    """Keep the process-wide configuration from leaking between tests."""
    set_config(None)
    yield
    set_config(None)


@pytest.fixture
def test_config() -> RiakConfig:
    """Create a test configuration."""
    return RiakConfig(
        host="riak.test",
        port=8098,
        bucket="test-bucket",
        concurrency_limit=20,
        log_level="DEBUG",
    )


# ============================================================================
# Mock Transport
# ============================================================================

class MockRiakTransport(Transport):
    """
    In-memory stand-in for a Riak node's HTTP interface.

    Supports key GET/PUT/DELETE and secondary index queries, and tracks how
    many requests are in flight at once.
    """

    def __init__(self, delay: float = 0.0):
        self.delay = delay
        self.objects: Dict[Tuple[str, str], Tuple[Dict[str, str], str]] = {}
        self.calls: List[Tuple[str, str, Dict[str, str], Optional[str], Dict[str, str]]] = []
        self.status_overrides: Dict[str, int] = {}
        self.failing_keys: set = set()
        self.in_flight = 0
        self.max_in_flight = 0
        self.closed = False
        self._vclocks = itertools.count(1)

    async def request(
        self,
        method: str,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        body: Optional[str] = None,
        params: Optional[Mapping[str, str]] = None,
    ) -> TransportResponse:
        headers = dict(headers or {})
        params = dict(params or {})
        self.calls.append((method, url, headers, body, params))

        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            return self._handle(method, url, headers, body, params)
        finally:
            self.in_flight -= 1

    async def close(self) -> None:
        self.closed = True

    def _handle(self, method, url, headers, body, params) -> TransportResponse:
        parts = [unquote(p) for p in urlsplit(url).path.strip("/").split("/")]

        if len(parts) >= 5 and parts[0] == "buckets" and parts[2] == "index":
            return self._query_index(parts[1], parts[3], parts[4:], params)

        bucket, key = parts[1], parts[3]

        if key in self.failing_keys:
            raise TransportError(f"connection refused for {key}")
        if key in self.status_overrides:
            return TransportResponse(status_code=self.status_overrides[key], body="boom")

        if method == "GET":
            return self._get(bucket, key)
        if method == "PUT":
            return self._put(bucket, key, headers, body, params)
        if method == "DELETE":
            if self.objects.pop((bucket, key), None) is None:
                return TransportResponse(status_code=404)
            return TransportResponse(status_code=204)

        return TransportResponse(status_code=405)

    def _response_headers(self, bucket: str, stored: Dict[str, str]) -> Dict[str, str]:
        headers = dict(stored)
        up = f'</buckets/{bucket}>; rel="up"'
        headers["link"] = f"{headers['link']}, {up}" if "link" in headers else up
        return headers

    def _get(self, bucket: str, key: str) -> TransportResponse:
        stored = self.objects.get((bucket, key))
        if stored is None:
            return TransportResponse(status_code=404, body="not found\n")

        headers, body = stored
        return TransportResponse(
            status_code=200,
            headers=self._response_headers(bucket, headers),
            body=body,
        )

    def _put(self, bucket, key, headers, body, params) -> TransportResponse:
        stored = {
            name: value for name, value in headers.items()
            if name == "content-type" or name == "link" or name.startswith("x-riak-meta-")
            or name.startswith("x-riak-index-")
        }
        stored["x-riak-vclock"] = f"vclock:{next(self._vclocks)}"
        self.objects[(bucket, key)] = (stored, body or "")

        if params.get("returnbody") != "true":
            return TransportResponse(status_code=204)

        return TransportResponse(
            status_code=200,
            headers=self._response_headers(bucket, stored),
            body=body or "",
        )

    def _query_index(self, bucket, index, bounds, params) -> TransportResponse:
        header = f"x-riak-index-{index}"
        matches = []
        for (stored_bucket, key), (headers, _) in sorted(self.objects.items()):
            if stored_bucket != bucket or header not in headers:
                continue
            term = headers[header]
            if len(bounds) == 1 and term == bounds[0]:
                matches.append((term, key))
            elif len(bounds) == 2 and bounds[0] <= term <= bounds[1]:
                matches.append((term, key))

        if params.get("return_terms") == "true":
            data = {"results": [{term: key} for term, key in matches]}
        else:
            data = {"keys": [key for _, key in matches]}

        return TransportResponse(
            status_code=200,
            headers={"content-type": "application/json"},
            body=json.dumps(data),
        )


@pytest.fixture
def mock_transport() -> MockRiakTransport:
    """Create a mock Riak transport."""
    return MockRiakTransport()


@pytest.fixture
def client(test_config, mock_transport) -> RiakClient:
    """Create a client backed by the mock transport."""
    return RiakClient(config=test_config, transport=mock_transport)
