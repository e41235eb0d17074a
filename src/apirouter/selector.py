"""
APIRouter - LatencySelector

Keeps track of the fastest regional endpoint of an API. The choice is seeded
from the deployment region, confirmed by a probe round before the selector is
handed out, and optionally refreshed in the background.

Example::

    from apirouter import EndpointSet, LatencySelector, config_builder

    endpoints = EndpointSet(
        us_east="https://us-east.api.example.com",
        europe="https://eu.api.example.com",
        fallback="https://api.example.com",
    )
    config = config_builder().ping_interval(60_000).build()

    async with await LatencySelector.create(endpoints, config) as selector:
        base_url = selector.current_endpoint()
"""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any, List, Optional

from .endpoints import validate_endpoints
from .http_probe import HttpProbeClient
from .probe import measure_all, pick_fastest
from .regions import region_from_environment, resolve_region_endpoint
from .types import (
    EndpointSet,
    ProbeClient,
    ProbeResult,
    RouterConfig,
    SelectorState,
)

logger = logging.getLogger("apirouter.selector")


class LatencySelector:
    """Latency-based endpoint selection.

    Use :meth:`create` to get a selector that has already probed once::

        selector = await LatencySelector.create(endpoints, config)

    :meth:`current_endpoint` never blocks on the network and may be called
    from any thread.
    """

    def __init__(
        self, endpoints: EndpointSet, config: Optional[RouterConfig] = None
    ) -> None:
        """Validate and seed only; nothing is probed or scheduled.

        Applications should use :meth:`create`. A selector built directly
        stays on its seeded endpoint until :meth:`refresh` is awaited.
        """
        self._config = config or RouterConfig()
        self._endpoints = validate_endpoints(endpoints)

        self._own_client: Optional[HttpProbeClient] = None
        if self._config.client is not None:
            self._client: ProbeClient = self._config.client
        else:
            self._own_client = HttpProbeClient(timeout_ms=self._config.probe_timeout_ms)
            self._client = self._own_client

        self._lock = threading.Lock()
        self._results: List[ProbeResult] = []

        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._stop_event: Optional[asyncio.Event] = None
        self._task: Optional[asyncio.Task[None]] = None
        self._release_task: Optional[asyncio.Task[None]] = None
        self._stopped = False
        self._closed = False

        region = self._config.region
        if region is None and self._config.region_from_env:
            region = region_from_environment()
        self._region = region

        closest = resolve_region_endpoint(region, self._endpoints)
        self._best_endpoint = (
            closest or self._endpoints.universal or self._endpoints.fallback or ""
        )
        self._state = SelectorState.SEEDED
        self._debug("Seeded endpoint %s (region=%s)", self._best_endpoint, region)

    @staticmethod
    async def create(
        endpoints: EndpointSet, config: Optional[RouterConfig] = None
    ) -> LatencySelector:
        """Validate, seed and probe once, then start refreshing if configured.

        Raises:
            RouterError: If the endpoint set is invalid.
        """
        selector = LatencySelector(endpoints, config)
        await selector.refresh()
        selector._start_refresh()
        return selector

    async def __aenter__(self) -> LatencySelector:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    # =========================================================================
    # Queries
    # =========================================================================

    def current_endpoint(self) -> str:
        with self._lock:
            return self._best_endpoint

    @property
    def state(self) -> SelectorState:
        with self._lock:
            return self._state

    @property
    def endpoints(self) -> EndpointSet:
        return self._endpoints

    @property
    def region(self) -> Optional[str]:
        return self._region

    def last_results(self) -> List[ProbeResult]:
        with self._lock:
            return list(self._results)

    def get_latency(self, url: str) -> Optional[float]:
        for result in self.last_results():
            if result.url == url and result.reachable:
                return result.elapsed_ms
        return None

    # =========================================================================
    # Probing
    # =========================================================================

    async def refresh(self) -> Optional[str]:
        """Run one probe round now.

        Returns:
            The winning URL, or None when every candidate failed or the
            selector has been stopped. The current endpoint is left alone
            in both cases.
        """
        loop = asyncio.get_running_loop()
        with self._lock:
            if self._stopped:
                return None
            # the probe client's session lives on this loop
            if self._loop is None:
                self._loop = loop
            resume = self._state
            if resume is SelectorState.SEEDED or resume is SelectorState.PROBING:
                resume = SelectorState.IDLE
            self._state = SelectorState.PROBING

        results = await measure_all(
            self._client,
            self._endpoints,
            self._config.probe_timeout_ms,
            self._config.debug_mode,
        )
        fastest = pick_fastest(results)

        with self._lock:
            if self._stopped:
                return None
            self._results = results
            self._state = resume
            if fastest is None:
                winner = None
            else:
                self._best_endpoint = fastest.url
                winner = fastest.url

        if winner is None:
            self._debug(
                "No endpoint answered within %dms, keeping %s",
                self._config.probe_timeout_ms,
                self.current_endpoint(),
            )
        else:
            self._debug("Fastest chosen URL: %s (%.1fms)", winner, fastest.elapsed_ms)
        return winner

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def stop(self) -> None:
        """Stop scheduling probe rounds and release the probe client.

        Safe to call more than once and from any thread. A round already in
        flight finishes on its own; its result is discarded. A client passed
        in through the config is left open for its owner.
        """
        with self._lock:
            if self._stopped:
                return
            self._stopped = True
            self._state = SelectorState.STOPPED
            loop, stop_event = self._loop, self._stop_event

        # no loop means no probe ever ran, so there is no session to close
        if loop is None or loop.is_closed():
            return

        # the refresh loop releases the client when it exits
        wake = stop_event.set if stop_event is not None else self._schedule_release

        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is loop:
            wake()
        else:
            loop.call_soon_threadsafe(wake)

    async def close(self) -> None:
        """Stop, wait for the refresh task to exit and release the probe client."""
        self.stop()

        for task in (self._task, self._release_task):
            if task is not None:
                await asyncio.gather(task, return_exceptions=True)
        self._task = None
        self._release_task = None

        await self._release_client()

    def _start_refresh(self) -> None:
        loop = asyncio.get_running_loop()
        with self._lock:
            self._loop = loop
            if self._stopped:
                self._schedule_release()
                return
            if self._config.ping_interval_ms <= 0:
                self._state = SelectorState.STATIC
                return
            self._state = SelectorState.IDLE
            self._stop_event = asyncio.Event()
            self._task = loop.create_task(
                self._refresh_loop(self._stop_event), name="apirouter-refresh"
            )

    async def _refresh_loop(self, stop_event: asyncio.Event) -> None:
        interval = self._config.ping_interval_ms / 1000

        try:
            while not self._stopped and not stop_event.is_set():
                try:
                    await asyncio.wait_for(stop_event.wait(), timeout=interval)
                    break
                except asyncio.TimeoutError:
                    pass

                self._debug("Pinging endpoints for latency")
                try:
                    await self.refresh()
                except Exception:
                    logger.exception("Latency refresh round failed")
        finally:
            await self._release_client()
            self._debug("Stopped pinging endpoints")

    def _schedule_release(self) -> None:
        # runs on the selector's loop
        assert self._loop is not None
        self._release_task = self._loop.create_task(
            self._release_client(), name="apirouter-release"
        )

    async def _release_client(self) -> None:
        if self._own_client is not None and not self._closed:
            self._closed = True
            await self._own_client.close()

    def _debug(self, msg: str, *args: Any) -> None:
        if self._config.debug_mode:
            logger.debug(msg, *args)
