import asyncio
from typing import Dict, List, Optional

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from apirouter.types import EndpointSet, ProbeResponse

REGIONS = ["apac", "eu", "universal", "us-east", "us-west", "fallback"]


@pytest.fixture(autouse=True)
def no_deployment_region(monkeypatch):
    monkeypatch.delenv("AWS_REGION", raising=False)


def region_endpoints(base_url: str) -> EndpointSet:
    return EndpointSet(
        asia_pacific=f"{base_url}?region=apac",
        europe=f"{base_url}?region=eu",
        universal=f"{base_url}?region=universal",
        us_east=f"{base_url}?region=us-east",
        us_west=f"{base_url}?region=us-west",
        fallback=f"{base_url}?region=fallback",
    )


# ============================================================================
# In-memory probe client
# ============================================================================


class FakeProbeClient:
    """Replays canned responses; unknown URLs answer 200 in 1ms."""

    def __init__(self) -> None:
        self.responses: Dict[str, ProbeResponse] = {}
        self.delays: Dict[str, float] = {}
        self.raises: Dict[str, BaseException] = {}
        self.calls: List[str] = []

    def answer(self, url: str, elapsed_ms: float, status: int = 200) -> None:
        self.responses[url] = ProbeResponse(status=status, elapsed_ms=elapsed_ms)

    def fail(self, url: str, error: Optional[BaseException] = None, status: int = 0) -> None:
        self.responses[url] = ProbeResponse(status=status, error=error)

    async def head(self, url: str, timeout_ms: float) -> ProbeResponse:
        self.calls.append(url)
        delay = self.delays.get(url)
        if delay:
            await asyncio.sleep(delay)
        if url in self.raises:
            raise self.raises[url]
        return self.responses.get(url, ProbeResponse(status=200, elapsed_ms=1.0))


@pytest.fixture
def fake_client():
    return FakeProbeClient()


@pytest.fixture
def endpoints():
    return region_endpoints("http://foobar.com/")


# ============================================================================
# Local HTTP server
# ============================================================================


class RegionLatencyServer:
    """Answers HEAD requests after a per-region delay taken from ``?region=``."""

    def __init__(self) -> None:
        self.default_delay = 0.0
        self.delays: Dict[str, float] = {}
        self.statuses: Dict[str, int] = {}
        self.default_status = 200
        self.hits: List[str] = []
        self.base_url = ""

    def only_fast(self, region: str, slow_delay: float = 0.02) -> None:
        self.default_delay = slow_delay
        self.delays = {region: 0.0}

    def endpoints(self) -> EndpointSet:
        return region_endpoints(self.base_url)

    async def handle(self, request: web.Request) -> web.Response:
        region = request.query.get("region", "")
        self.hits.append(region)
        delay = self.delays.get(region, self.default_delay)
        if delay:
            await asyncio.sleep(delay)
        return web.Response(status=self.statuses.get(region, self.default_status))

    async def moved(self, request: web.Request) -> web.Response:
        raise web.HTTPMovedPermanently(location=f"/?region={request.query.get('region', '')}")


@pytest.fixture
async def latency_server():
    state = RegionLatencyServer()
    app = web.Application()
    # add_get also answers HEAD
    app.router.add_get("/", state.handle)
    app.router.add_get("/moved", state.moved)

    server = TestServer(app, host="127.0.0.1")
    await server.start_server()
    state.base_url = f"http://{server.host}:{server.port}/"
    yield state
    await server.close()
