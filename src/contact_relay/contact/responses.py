"""Response building and CORS headers for the contact endpoint."""

from __future__ import annotations

from collections.abc import Collection
from typing import Any

import structlog

from contact_relay.contact.models import HttpResponse

logger = structlog.get_logger()

NULL_ORIGIN = "null"


def allowed_origin(origin: str, allowed_origins: Collection[str]) -> str:
    """Return *origin* if it is allow-listed, otherwise the literal ``"null"``."""
    if origin and origin in allowed_origins:
        return origin
    return NULL_ORIGIN


def cors_headers(origin: str, allowed_origins: Collection[str]) -> dict[str, str]:
    """CORS headers for a response to a request from *origin*."""
    return {
        "Access-Control-Allow-Origin": allowed_origin(origin, allowed_origins),
        "Vary": "Origin",
        "Access-Control-Allow-Headers": "Content-Type",
        "Access-Control-Allow-Methods": "POST, OPTIONS",
    }


class ResponseBuilder:
    """Builds ``HttpResponse`` objects carrying CORS headers for one origin policy.

    Args:
        allowed_origins: Origins whose cross-origin reads are permitted.
    """

    def __init__(self, allowed_origins: Collection[str]) -> None:
        self._allowed_origins = frozenset(allowed_origins)

    def json(self, status_code: int, body: Any, origin: str) -> HttpResponse:
        """A JSON response with CORS headers."""
        logger.debug("contact.response", status_code=status_code, origin=origin)
        return HttpResponse(
            status_code=status_code,
            headers={
                "Content-Type": "application/json",
                **cors_headers(origin, self._allowed_origins),
            },
            body=body,
        )

    def preflight(self, origin: str) -> HttpResponse:
        """An empty 204 response to a CORS preflight."""
        return HttpResponse(
            status_code=204,
            headers=cors_headers(origin, self._allowed_origins),
        )

    def error(self, status_code: int, message: str, origin: str, **extra: Any) -> HttpResponse:
        """A JSON ``{"error": message, ...}`` response."""
        return self.json(status_code, {"error": message, **extra}, origin)
