"""
APIRouter - latency-aware endpoint selection for regional API mirrors

Picks the fastest of a handful of regional endpoints of one API and keeps
the choice current in the background.

Example::

    from apirouter import EndpointSet, LatencySelector, config_builder

    endpoints = EndpointSet(
        universal="https://api.example.com",
        us_east="https://us-east.api.example.com",
        us_west="https://us-west.api.example.com",
        europe="https://eu.api.example.com",
        asia_pacific="https://ap.api.example.com",
        fallback="https://api.example.com",
    )

    config = config_builder().ping_interval(300_000).debug_mode(True).build()
    selector = await LatencySelector.create(endpoints, config)

    # Non-blocking, safe from any thread
    base_url = selector.current_endpoint()

    await selector.close()
"""

__version__ = "0.1.0"

# Selection
from .selector import LatencySelector
from .router import Router, RouterModifier

# Configuration
from .config import ConfigBuilder, config_builder

# Validation and region override
from .endpoints import validate_endpoints
from .regions import REGION_FIELDS, region_from_environment, resolve_region_endpoint

# Probing (advanced usage)
from .http_probe import HttpProbeClient
from .probe import measure_all, pick_fastest, probe_all

# Error types
from .errors import RouterError

# Types
from .types import (
    UNREACHABLE_MS,
    EndpointSet,
    ProbeClient,
    ProbeResponse,
    ProbeResult,
    RouterConfig,
    SelectorState,
)

__all__ = [
    "__version__",
    # Selection
    "LatencySelector",
    "Router",
    "RouterModifier",
    # Config
    "ConfigBuilder",
    "config_builder",
    # Validation
    "validate_endpoints",
    "REGION_FIELDS",
    "region_from_environment",
    "resolve_region_endpoint",
    # Probing
    "HttpProbeClient",
    "measure_all",
    "pick_fastest",
    "probe_all",
    # Errors
    "RouterError",
    # Types
    "UNREACHABLE_MS",
    "EndpointSet",
    "ProbeClient",
    "ProbeResponse",
    "ProbeResult",
    "RouterConfig",
    "SelectorState",
]
