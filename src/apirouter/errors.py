"""
APIRouter - Error types
"""

from __future__ import annotations

from typing import Optional


class RouterError(Exception):
    """Base error for all APIRouter errors."""

    def __init__(self, code: str, message: str, details: Optional[object] = None):
        super().__init__(message)
        self.code = code
        self.details = details

    # Configuration errors, raised synchronously at construction

    @staticmethod
    def at_least_one_missing() -> RouterError:
        return RouterError(
            "AT_LEAST_ONE_MISSING", "at least one endpoint has to be passed in"
        )

    @staticmethod
    def missing_protocol(field: str, url: str) -> RouterError:
        return RouterError(
            "MISSING_PROTOCOL",
            f"missing http or https on {field}: {url}",
            {"field": field, "url": url},
        )

    @staticmethod
    def malformed_url(field: str, url: str, cause: Exception) -> RouterError:
        return RouterError(
            "MALFORMED_URL",
            f"url parsing error {cause} on {field}: {url}",
            {"field": field, "url": url},
        )

    @staticmethod
    def fallback_unset() -> RouterError:
        return RouterError(
            "FALLBACK_UNSET",
            "a fallback endpoint should be sent as a safety mechanism",
        )

    @staticmethod
    def config(msg: str) -> RouterError:
        return RouterError("CONFIG", msg)

    # Probe failures, only ever logged

    @staticmethod
    def timeout(ms: float) -> RouterError:
        return RouterError("TIMEOUT", f"the network request timed out after {ms:.0f}ms")

    @staticmethod
    def connection_reset(msg: str) -> RouterError:
        return RouterError("CONNECTION_RESET", f"the connection was reset by host: {msg}")

    @staticmethod
    def no_such_host(msg: str) -> RouterError:
        return RouterError("NO_SUCH_HOST", f"the endpoint's host could not be found: {msg}")

    @staticmethod
    def bad_status(status: int) -> RouterError:
        return RouterError("BAD_STATUS", f"received a non 2xx status code: {status}", status)

    @staticmethod
    def connection(msg: str) -> RouterError:
        return RouterError("CONNECTION", msg)
