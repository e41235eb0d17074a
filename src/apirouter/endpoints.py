"""
APIRouter - Endpoint validation
"""

from __future__ import annotations

import dataclasses
from urllib.parse import urlsplit

from .errors import RouterError
from .types import EndpointSet


def validate_endpoints(endpoints: EndpointSet) -> EndpointSet:
    """Validate an endpoint set once, before any routing happens.

    Args:
        endpoints: Caller-supplied endpoints.

    Returns:
        The validated set. When ``universal`` is the only endpoint supplied
        it doubles as the fallback.

    Raises:
        RouterError: ``MALFORMED_URL``, ``MISSING_PROTOCOL``,
            ``AT_LEAST_ONE_MISSING`` or ``FALLBACK_UNSET``.
    """
    populated = 0
    for name, url in endpoints.named_fields():
        if not url:
            continue
        try:
            parsed = urlsplit(url)
            # raises on a non-numeric or out of range port
            parsed.port
        except ValueError as e:
            raise RouterError.malformed_url(name, url, e) from e

        if not parsed.scheme:
            raise RouterError.missing_protocol(name, url)
        populated += 1

    if populated == 0:
        raise RouterError.at_least_one_missing()

    if populated == 1 and endpoints.universal:
        endpoints = dataclasses.replace(endpoints, fallback=endpoints.universal)

    if not endpoints.fallback:
        raise RouterError.fallback_unset()

    return endpoints
