"""Pytest configuration and shared fixtures."""

import pytest
import sys
from pathlib import Path

import httpx
import pytest_asyncio

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from mikud.cache import LookupCache
from mikud.config import Config
from mikud.service import LookupService


@pytest.fixture(scope="session")
def event_loop_policy():
    """Use default event loop policy for Windows compatibility."""
    import asyncio
    if sys.platform == "win32":
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())
    return asyncio.get_event_loop_policy()


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingUpstream:
    """httpx MockTransport handler that records every request.

    Replies with a fixed body/status, or raises ``error`` if set.
    """

    def __init__(self, body: str = "", status: int = 200, error: Exception | None = None):
        self.body = body
        self.status = status
        self.error = error
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status, text=self.body)

    @property
    def calls(self) -> int:
        return len(self.requests)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return LookupCache(ttl=300, max_entries=100, clock=clock)


@pytest.fixture
def upstream():
    """Upstream that answers with a valid zipcode by default."""
    return RecordingUpstream(body="<html><body>RES86423207</body></html>")


@pytest.fixture
def test_config():
    return Config(
        endpoint_url="http://zip.test/SearchZip?OpenAgent&",
        request_timeout=1.0,
        cache_ttl=300,
        cache_max_entries=100,
        enable_cache=True,
    )


@pytest_asyncio.fixture
async def service(test_config, cache, upstream):
    client = httpx.AsyncClient(transport=httpx.MockTransport(upstream))
    svc = LookupService(test_config, cache=cache, client=client)
    yield svc
    await client.aclose()


@pytest.fixture
def make_upstream():
    """Factory for custom upstream replies."""
    return RecordingUpstream


@pytest_asyncio.fixture
async def make_service(test_config, cache):
    """Build a service around a given upstream handler."""
    clients: list[httpx.AsyncClient] = []

    def _make(handler, config: Config | None = None, cache_override=...):
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        clients.append(client)
        return LookupService(
            config or test_config,
            cache=cache if cache_override is ... else cache_override,
            client=client,
        )

    yield _make

    for client in clients:
        await client.aclose()
