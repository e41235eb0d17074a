"""
APIRouter - Type definitions

Dataclasses, enums and protocols shared across the router.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Protocol, Tuple

# Elapsed time recorded for a failed probe, worse than any real latency.
UNREACHABLE_MS = 3_600_000.0


# =============================================================================
# Endpoints
# =============================================================================


@dataclass(frozen=True)
class EndpointSet:
    """Regional mirrors of one API.

    ``universal`` is a single endpoint that is latency balanced by DNS or a
    load balancer. ``fallback`` is never probed, only used as a last resort.
    """

    asia_pacific: Optional[str] = None
    europe: Optional[str] = None
    universal: Optional[str] = None
    us_east: Optional[str] = None
    us_west: Optional[str] = None
    fallback: Optional[str] = None

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> EndpointSet:
        return EndpointSet(
            asia_pacific=data.get("asia_pacific") or None,
            europe=data.get("europe") or None,
            universal=data.get("universal") or None,
            us_east=data.get("us_east") or None,
            us_west=data.get("us_west") or None,
            fallback=data.get("fallback") or None,
        )

    def to_dict(self) -> Dict[str, str]:
        return {name: url for name, url in self.named_fields() if url}

    def named_fields(self) -> List[Tuple[str, Optional[str]]]:
        return [
            ("asia_pacific", self.asia_pacific),
            ("europe", self.europe),
            ("universal", self.universal),
            ("us_east", self.us_east),
            ("us_west", self.us_west),
            ("fallback", self.fallback),
        ]

    def candidates(self) -> List[str]:
        """URLs that take part in a probe round, in race order."""
        ordered = [self.universal, self.us_east, self.us_west, self.europe, self.asia_pacific]
        return [url for url in ordered if url]

    def urls(self) -> List[str]:
        return [url for _, url in self.named_fields() if url]


# =============================================================================
# Probing
# =============================================================================


@dataclass
class ProbeResponse:
    """What a :class:`ProbeClient` reports for one HEAD request."""

    status: int = 0
    elapsed_ms: float = 0.0
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None and 200 <= self.status < 300


@dataclass
class ProbeResult:
    url: str
    elapsed_ms: float
    error: Optional[BaseException] = None

    @property
    def reachable(self) -> bool:
        return self.elapsed_ms < UNREACHABLE_MS


class ProbeClient(Protocol):
    """Anything that can time a HEAD request.

    Implementations raise ``ValueError`` when the request cannot be built and
    report every other failure through :attr:`ProbeResponse.error`.
    """

    async def head(self, url: str, timeout_ms: float) -> ProbeResponse: ...


# =============================================================================
# Selector
# =============================================================================


class SelectorState(str, Enum):
    SEEDED = "seeded"
    PROBING = "probing"
    IDLE = "idle"
    STATIC = "static"
    STOPPED = "stopped"


@dataclass
class RouterConfig:
    client: Optional[ProbeClient] = None
    # 0 disables periodic refresh
    ping_interval_ms: int = 0
    probe_timeout_ms: int = 1_000
    debug_mode: bool = False
    region: Optional[str] = None
    region_from_env: bool = True
