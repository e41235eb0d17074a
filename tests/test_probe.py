"""Tests for the latency probe and the aiohttp probe client."""

import asyncio

import aiohttp
import pytest

from apirouter.http_probe import HttpProbeClient, classify_probe_error
from apirouter.probe import measure_all, pick_fastest, probe_all
from apirouter.types import UNREACHABLE_MS, EndpointSet, ProbeResponse, ProbeResult


# ============================================================================
# pick_fastest Tests
# ============================================================================


class TestPickFastest:
    def test_lowest_wins(self):
        results = [
            ProbeResult(url="a", elapsed_ms=30.0),
            ProbeResult(url="b", elapsed_ms=5.0),
            ProbeResult(url="c", elapsed_ms=12.0),
        ]
        assert pick_fastest(results).url == "b"

    def test_tie_keeps_first(self):
        results = [
            ProbeResult(url="a", elapsed_ms=7.0),
            ProbeResult(url="b", elapsed_ms=7.0),
        ]
        assert pick_fastest(results).url == "a"

    def test_all_unreachable(self):
        results = [
            ProbeResult(url="a", elapsed_ms=UNREACHABLE_MS),
            ProbeResult(url="b", elapsed_ms=UNREACHABLE_MS),
        ]
        assert pick_fastest(results) is None

    def test_empty(self):
        assert pick_fastest([]) is None


# ============================================================================
# measure_all Tests
# ============================================================================


class TestMeasureAll:
    async def test_probes_candidates_only(self, fake_client, endpoints):
        results = await measure_all(fake_client, endpoints, 1_000)
        assert [r.url for r in results] == endpoints.candidates()
        assert endpoints.fallback not in fake_client.calls
        assert len(fake_client.calls) == 5

    async def test_europe_wins(self, fake_client, endpoints):
        for url in endpoints.candidates():
            fake_client.answer(url, 20.0)
        fake_client.answer(endpoints.europe, 0.5)
        assert await probe_all(fake_client, endpoints, 1_000) == endpoints.europe

    async def test_failures_recorded_as_unreachable(self, fake_client, endpoints):
        fake_client.fail(endpoints.us_east, status=503)
        fake_client.fail(endpoints.us_west, error=aiohttp.ServerDisconnectedError())
        results = {r.url: r for r in await measure_all(fake_client, endpoints, 1_000)}

        assert results[endpoints.us_east].elapsed_ms == UNREACHABLE_MS
        assert results[endpoints.us_east].error.code == "BAD_STATUS"
        assert results[endpoints.us_west].elapsed_ms == UNREACHABLE_MS
        assert results[endpoints.us_west].error.code == "CONNECTION_RESET"
        assert results[endpoints.europe].reachable

    async def test_unbuildable_request_skipped(self, fake_client, endpoints):
        fake_client.raises[endpoints.asia_pacific] = ValueError("bad url")
        results = await measure_all(fake_client, endpoints, 1_000)
        assert endpoints.asia_pacific not in [r.url for r in results]
        assert len(results) == 4

    async def test_unexpected_client_error_loses(self, fake_client, endpoints):
        fake_client.raises[endpoints.universal] = RuntimeError("boom")
        results = {r.url: r for r in await measure_all(fake_client, endpoints, 1_000)}
        assert not results[endpoints.universal].reachable
        assert isinstance(results[endpoints.universal].error, RuntimeError)

    async def test_shared_deadline_cuts_off_slow_probes(self, fake_client, endpoints):
        fake_client.delays[endpoints.europe] = 5.0
        loop = asyncio.get_running_loop()
        start = loop.time()

        results = {r.url: r for r in await measure_all(fake_client, endpoints, 100, debug=True)}

        assert loop.time() - start < 1.0
        assert results[endpoints.europe].elapsed_ms == UNREACHABLE_MS
        assert results[endpoints.europe].error.code == "TIMEOUT"
        assert results[endpoints.universal].reachable

    async def test_waits_for_every_probe(self, fake_client, endpoints):
        # The quickest to return is not the quickest to answer
        fake_client.delays[endpoints.europe] = 0.05
        fake_client.answer(endpoints.europe, 0.1)
        for url in endpoints.candidates():
            if url != endpoints.europe:
                fake_client.answer(url, 9.0)

        assert await probe_all(fake_client, endpoints, 1_000) == endpoints.europe

    async def test_no_candidates(self, fake_client):
        endpoints = EndpointSet(fallback="https://fallback.foobar.com")
        assert await measure_all(fake_client, endpoints, 1_000) == []
        assert await probe_all(fake_client, endpoints, 1_000) is None
        assert fake_client.calls == []


# ============================================================================
# Error Classification Tests
# ============================================================================


class TestClassifyProbeError:
    def test_bad_status(self):
        assert classify_probe_error(ProbeResponse(status=404), 1_000).code == "BAD_STATUS"

    def test_timeout(self):
        err = classify_probe_error(ProbeResponse(error=asyncio.TimeoutError()), 250)
        assert err.code == "TIMEOUT"
        assert "250ms" in str(err)

    def test_server_disconnected(self):
        response = ProbeResponse(error=aiohttp.ServerDisconnectedError())
        assert classify_probe_error(response, 1_000).code == "CONNECTION_RESET"

    def test_connection_reset(self):
        response = ProbeResponse(error=ConnectionResetError("reset by peer"))
        assert classify_probe_error(response, 1_000).code == "CONNECTION_RESET"

    def test_other_client_error(self):
        response = ProbeResponse(error=aiohttp.ClientPayloadError("truncated"))
        assert classify_probe_error(response, 1_000).code == "CONNECTION"


# ============================================================================
# HttpProbeClient Tests
# ============================================================================


class TestHttpProbeClient:
    async def test_head_ok(self, latency_server):
        client = HttpProbeClient()
        try:
            response = await client.head(latency_server.endpoints().europe, 1_000)
        finally:
            await client.close()

        assert response.ok
        assert response.status == 200
        assert response.elapsed_ms > 0
        assert latency_server.hits == ["eu"]

    async def test_head_bad_status(self, latency_server):
        latency_server.statuses["eu"] = 503
        client = HttpProbeClient()
        try:
            response = await client.head(latency_server.endpoints().europe, 1_000)
        finally:
            await client.close()

        assert not response.ok
        assert response.status == 503
        assert response.error is None

    async def test_head_follows_redirect(self, latency_server):
        client = HttpProbeClient()
        try:
            response = await client.head(f"{latency_server.base_url}moved?region=eu", 1_000)
        finally:
            await client.close()

        assert response.ok
        assert response.status == 200
        assert latency_server.hits == ["eu"]

    async def test_head_timeout(self, latency_server):
        latency_server.delays["eu"] = 1.0
        client = HttpProbeClient()
        try:
            response = await client.head(latency_server.endpoints().europe, 50)
        finally:
            await client.close()

        assert not response.ok
        assert isinstance(response.error, asyncio.TimeoutError)

    async def test_head_connection_refused(self):
        client = HttpProbeClient()
        try:
            response = await client.head("http://127.0.0.1:1/", 1_000)
        finally:
            await client.close()

        assert not response.ok
        assert isinstance(response.error, aiohttp.ClientError)

    async def test_head_invalid_url(self):
        client = HttpProbeClient()
        try:
            with pytest.raises(ValueError):
                await client.head("http://[::1", 1_000)
        finally:
            await client.close()

    async def test_close(self, latency_server):
        client = HttpProbeClient()
        assert client.closed
        await client.head(latency_server.endpoints().europe, 1_000)
        assert not client.closed
        await client.close()
        assert client.closed
        # closing twice is harmless
        await client.close()
