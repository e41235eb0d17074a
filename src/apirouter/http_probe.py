"""
APIRouter - HTTP probe client

Times HEAD requests with aiohttp. This is the default :class:`ProbeClient`.
"""

from __future__ import annotations

import asyncio
import errno
import socket
import time
from typing import Optional

import aiohttp

from .errors import RouterError
from .types import ProbeResponse


class HttpProbeClient:
    """HEAD request timer backed by a shared aiohttp session."""

    def __init__(
        self,
        timeout_ms: int = 1_000,
        limit_per_host: int = 100,
        keepalive_timeout: float = 10.0,
    ) -> None:
        self._timeout = aiohttp.ClientTimeout(total=timeout_ms / 1000)
        self._limit_per_host = limit_per_host
        self._keepalive_timeout = keepalive_timeout
        self._session: Optional[aiohttp.ClientSession] = None

    @property
    def closed(self) -> bool:
        return self._session is None or self._session.closed

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=self._timeout,
                connector=aiohttp.TCPConnector(
                    limit_per_host=self._limit_per_host,
                    keepalive_timeout=self._keepalive_timeout,
                ),
            )
        return self._session

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()

    async def head(self, url: str, timeout_ms: float) -> ProbeResponse:
        """Send a HEAD request and time it up to the response headers.

        Raises:
            ValueError: If the request cannot be built from ``url``.
        """
        session = await self._ensure_session()
        # aiohttp treats a zero total as "no timeout"
        timeout = aiohttp.ClientTimeout(total=max(timeout_ms, 1) / 1000)
        start = time.perf_counter()

        try:
            # a redirecting mirror is timed up to the final response
            async with session.head(url, timeout=timeout, allow_redirects=True) as resp:
                elapsed_ms = (time.perf_counter() - start) * 1000
                # drain so the connection goes back to the pool
                await resp.read()
                return ProbeResponse(status=resp.status, elapsed_ms=elapsed_ms)
        except aiohttp.InvalidURL:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            return ProbeResponse(
                elapsed_ms=(time.perf_counter() - start) * 1000, error=e
            )


def classify_probe_error(response: ProbeResponse, timeout_ms: float) -> RouterError:
    """Describe why a probe lost the race."""
    e = response.error
    if e is None:
        return RouterError.bad_status(response.status)

    if isinstance(e, asyncio.TimeoutError):
        return RouterError.timeout(timeout_ms)
    if isinstance(e, aiohttp.ClientConnectorError) and isinstance(
        e.os_error, socket.gaierror
    ):
        return RouterError.no_such_host(str(e))
    if isinstance(e, aiohttp.ServerDisconnectedError) or (
        isinstance(e, aiohttp.ClientOSError) and e.errno == errno.ECONNRESET
    ):
        return RouterError.connection_reset(str(e))
    if isinstance(e, ConnectionResetError):
        return RouterError.connection_reset(str(e))
    return RouterError.connection(f"HEAD request failed: {e}")
