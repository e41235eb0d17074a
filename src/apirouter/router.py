"""
APIRouter - Environment router

Static routing from the deployment region, with room for a single modifier
(usually a :class:`~apirouter.selector.LatencySelector`) that can override it.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol

from .endpoints import validate_endpoints
from .regions import region_from_environment, resolve_region_endpoint
from .types import EndpointSet

logger = logging.getLogger("apirouter.router")


class RouterModifier(Protocol):
    def current_endpoint(self) -> str: ...


class Router:
    """Picks an endpoint without network access.

    Priority is the endpoint of the deployment region, then ``universal``,
    then ``fallback``.
    """

    def __init__(self, endpoints: EndpointSet, region: Optional[str] = None) -> None:
        self._endpoints = validate_endpoints(endpoints)
        self._region = region
        self._closest_url = resolve_region_endpoint(region, self._endpoints)
        self._modifier: Optional[RouterModifier] = None

    @staticmethod
    def from_environment(
        endpoints: EndpointSet, region: Optional[str] = None
    ) -> Router:
        """Build a router for the region in ``AWS_REGION`` unless one is given."""
        return Router(endpoints, region or region_from_environment())

    @property
    def endpoints(self) -> EndpointSet:
        return self._endpoints

    @property
    def region(self) -> Optional[str]:
        return self._region

    @property
    def closest_url(self) -> Optional[str]:
        return self._closest_url

    def url(self) -> str:
        return (
            self._closest_url
            or self._endpoints.universal
            or self._endpoints.fallback
            or ""
        )

    def add_modifier(self, modifier: RouterModifier) -> None:
        """Attach a modifier. Only the first one is kept."""
        if self._modifier is not None:
            logger.warning("Router already has a modifier, ignoring %r", modifier)
            return
        self._modifier = modifier

    def modifier_url(self) -> str:
        """The modifier's endpoint, or :meth:`url` when it has none."""
        if self._modifier is None:
            return self.url()
        return self._modifier.current_endpoint() or self.url()
