"""
APIRouter - Configuration builder
"""

from __future__ import annotations

from typing import Optional

from .errors import RouterError
from .types import ProbeClient, RouterConfig


class ConfigBuilder:
    """Fluent configuration builder for LatencySelector."""

    def __init__(self) -> None:
        self._client: Optional[ProbeClient] = None
        self._ping_interval: int = 0
        self._probe_timeout: int = 1_000
        self._debug_mode: bool = False
        self._region: Optional[str] = None
        self._region_from_env: bool = True

    def client(self, client: ProbeClient) -> ConfigBuilder:
        """Use an existing probe client. The caller stays responsible for closing it."""
        self._client = client
        return self

    def ping_interval(self, ms: int) -> ConfigBuilder:
        """Re-probe every ``ms`` milliseconds. 0 probes once at startup only."""
        self._ping_interval = ms
        return self

    def probe_timeout(self, ms: int) -> ConfigBuilder:
        self._probe_timeout = ms
        return self

    def debug_mode(self, enabled: bool) -> ConfigBuilder:
        self._debug_mode = enabled
        return self

    def region(self, region: str) -> ConfigBuilder:
        self._region = region
        return self

    def region_from_env(self, enabled: bool) -> ConfigBuilder:
        self._region_from_env = enabled
        return self

    def build(self) -> RouterConfig:
        if self._ping_interval < 0:
            raise RouterError.config("ping_interval must not be negative")

        if self._probe_timeout <= 0:
            raise RouterError.config("probe_timeout must be positive")

        return RouterConfig(
            client=self._client,
            ping_interval_ms=self._ping_interval,
            probe_timeout_ms=self._probe_timeout,
            debug_mode=self._debug_mode,
            region=self._region,
            region_from_env=self._region_from_env,
        )


def config_builder() -> ConfigBuilder:
    """Create a new ConfigBuilder instance."""
    return ConfigBuilder()
