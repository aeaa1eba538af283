"""Serverless adapter for function platforms (AWS Lambda, Netlify-style events).

The platform passes an event dict with the method, headers and a raw body
string and expects ``{"statusCode", "headers", "body"}`` back.  Settings and
the handler are built once per process and reused across invocations.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
from functools import lru_cache
from typing import Any

import structlog

from contact_relay.app import configure_logging
from contact_relay.config import get_settings
from contact_relay.contact.handler import ContactRequestHandler
from contact_relay.contact.models import HttpRequest
from contact_relay.observability.middleware import bind_request_context
from contact_relay.observability.sentry import init_sentry

logger = structlog.get_logger()


def event_method(event: dict[str, Any]) -> str:
    """Return the HTTP method from a REST-style or HTTP API v2 event."""
    http = (event.get("requestContext") or {}).get("http") or {}
    return str(http.get("method") or event.get("httpMethod") or "")


def event_body(event: dict[str, Any]) -> str:
    """Return the raw body, decoding it when the platform base64-encoded it.

    A body flagged as base64 that does not decode is passed through as-is and
    fails JSON parsing downstream.
    """
    body = event.get("body") or ""
    if event.get("isBase64Encoded"):
        try:
            return base64.b64decode(body, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError, ValueError):
            logger.warning("contact.event_body_undecodable")
            return str(body)
    return str(body)


def event_to_request(event: dict[str, Any]) -> HttpRequest:
    """Convert a platform event into an ``HttpRequest``."""
    http = (event.get("requestContext") or {}).get("http") or {}
    return HttpRequest(
        method=event_method(event),
        headers={k: str(v) for k, v in (event.get("headers") or {}).items()},
        body=event_body(event),
        peer_ip=str(http.get("sourceIp") or ""),
    )


async def handle_event(event: dict[str, Any], handler: ContactRequestHandler) -> dict[str, Any]:
    """Run one platform event through *handler*.

    Args:
        event: The platform event dict.
        handler: The shared request handler.

    Returns:
        A ``{"statusCode", "headers", "body"}`` dict.
    """
    request = event_to_request(event)
    request_id = bind_request_context(request.header("x-request-id"))
    logger.debug("contact.event", path=event.get("path") or event.get("rawPath", ""))

    response = await handler.handle(request)
    return {
        "statusCode": response.status_code,
        "headers": {**response.headers, "X-Request-ID": request_id},
        "body": response.render_body(),
    }


@lru_cache
def get_handler() -> ContactRequestHandler:
    """Build the process-wide handler on first use."""
    settings = get_settings()
    configure_logging(production=settings.production, sentry=bool(settings.sentry_dsn))
    init_sentry(settings.sentry_dsn, production=settings.production)
    return ContactRequestHandler(settings)


def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Synchronous function-platform entry point."""
    return asyncio.run(handle_event(event, get_handler()))
