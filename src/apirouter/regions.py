"""
APIRouter - Deployment region override

Maps the region a process is deployed in to the matching regional endpoint,
without touching the network.
"""

from __future__ import annotations

import os
from typing import Dict, Optional

from .types import EndpointSet

REGION_ENV_VAR = "AWS_REGION"

REGION_FIELDS: Dict[str, str] = {
    "us-east-1": "us_east",
    "us-east-2": "us_east",
    "us-west-1": "us_west",
    "us-west-2": "us_west",
    "ap-south-1": "asia_pacific",
    "ap-southeast-1": "asia_pacific",
    "ap-southeast-2": "asia_pacific",
    "eu-central-1": "europe",
}


def region_from_environment() -> Optional[str]:
    region = os.environ.get(REGION_ENV_VAR, "").strip().lower()
    return region or None


def resolve_region_endpoint(
    region_id: Optional[str], endpoints: EndpointSet
) -> Optional[str]:
    """Return the endpoint serving ``region_id``, if one is configured.

    Unknown regions, and known regions whose endpoint is unset, give None so
    the caller falls through to the universal or fallback endpoint.
    """
    if not region_id:
        return None

    field = REGION_FIELDS.get(region_id.strip().lower())
    if field is None:
        return None
    return dict(endpoints.named_fields()).get(field) or None
