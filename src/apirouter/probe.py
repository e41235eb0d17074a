"""
APIRouter - Latency probe

Times every candidate endpoint concurrently and picks the fastest one that
answered. All probes of a round share one deadline, and the winner is only
chosen once every probe has reported or been cut off.
"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional

from .errors import RouterError
from .http_probe import classify_probe_error
from .types import UNREACHABLE_MS, EndpointSet, ProbeClient, ProbeResult

logger = logging.getLogger("apirouter.probe")


async def measure_all(
    client: ProbeClient,
    endpoints: EndpointSet,
    timeout_ms: float,
    debug: bool = False,
) -> List[ProbeResult]:
    """Probe every candidate once.

    Args:
        client: HEAD request timer.
        endpoints: Validated endpoint set. The fallback is never probed.
        timeout_ms: Deadline shared by the whole round.
        debug: Log every probe outcome.

    Returns:
        One result per candidate in race order. Candidates whose request
        could not be built are left out; failures carry ``UNREACHABLE_MS``.
    """
    candidates = endpoints.candidates()
    if not candidates:
        return []

    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout_ms / 1000

    async def probe_one(url: str) -> Optional[ProbeResult]:
        remaining_ms = max(deadline - loop.time(), 0.0) * 1000
        try:
            response = await client.head(url, remaining_ms)
        except ValueError as e:
            if debug:
                logger.debug("Skipping %s, request could not be built: %s", url, e)
            return None

        if not response.ok:
            reason = classify_probe_error(response, timeout_ms)
            if debug:
                logger.debug("Probe of %s failed [%s]: %s", url, reason.code, reason)
            return ProbeResult(url=url, elapsed_ms=UNREACHABLE_MS, error=reason)

        if debug:
            logger.debug("Probe of %s answered in %.1fms", url, response.elapsed_ms)
        return ProbeResult(url=url, elapsed_ms=response.elapsed_ms)

    tasks = [asyncio.ensure_future(probe_one(url)) for url in candidates]
    try:
        await asyncio.wait(tasks, timeout=timeout_ms / 1000)
    finally:
        for task in tasks:
            if not task.done():
                task.cancel()
        # let cancelled probes unwind and release their connections
        await asyncio.gather(*tasks, return_exceptions=True)

    results: List[ProbeResult] = []
    for url, task in zip(candidates, tasks):
        if task.cancelled():
            if debug:
                logger.debug("Probe of %s cut off by the %.0fms deadline", url, timeout_ms)
            results.append(
                ProbeResult(url=url, elapsed_ms=UNREACHABLE_MS, error=RouterError.timeout(timeout_ms))
            )
            continue

        exc = task.exception()
        if exc is not None:
            if debug:
                logger.debug("Probe of %s raised %r", url, exc)
            results.append(ProbeResult(url=url, elapsed_ms=UNREACHABLE_MS, error=exc))
            continue

        result = task.result()
        if result is not None:
            results.append(result)

    return results


def pick_fastest(results: List[ProbeResult]) -> Optional[ProbeResult]:
    """Lowest elapsed time wins; the first of equal results is kept."""
    fastest: Optional[ProbeResult] = None
    for result in results:
        if not result.reachable:
            continue
        if fastest is None or result.elapsed_ms < fastest.elapsed_ms:
            fastest = result
    return fastest


async def probe_all(
    client: ProbeClient,
    endpoints: EndpointSet,
    timeout_ms: float,
    debug: bool = False,
) -> Optional[str]:
    """Return the fastest responding candidate, or None if all failed."""
    fastest = pick_fastest(await measure_all(client, endpoints, timeout_ms, debug))
    return fastest.url if fastest else None
