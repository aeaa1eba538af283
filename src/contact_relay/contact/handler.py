"""Request orchestration for the contact endpoint.

``ContactRequestHandler.handle`` runs one request through a fixed, single-pass
pipeline and always returns an ``HttpResponse``:

1. ``OPTIONS``   -> 204 preflight.
2. not ``POST``  -> 405.
3. bad JSON      -> 400 ``Invalid JSON``.
4. honeypot hit  -> 200 ``{"success": true}`` with nothing sent.
5. invalid input -> 400 naming the failed rule.
6. captcha       -> 400 ``Captcha failed`` (500 if the provider is unavailable).
7. send failure  -> 500 ``Email send failed``.
8. sent          -> 200 ``{"success": true, "id": ...}``.

Provider and configuration details are logged, never returned to the caller.
The handler holds no per-request state and is safe to share across
concurrent requests.
"""

from __future__ import annotations

import json
from typing import Any

import structlog

from contact_relay.config import Settings
from contact_relay.contact.captcha import CaptchaVerifier
from contact_relay.contact.errors import ClientError, ConfigError, ProviderError
from contact_relay.contact.models import (
    ContactSubmission,
    HttpRequest,
    HttpResponse,
)
from contact_relay.contact.relay import MailRelay
from contact_relay.contact.responses import ResponseBuilder
from contact_relay.contact.validation import is_honeypot_hit, mask_email, validate
from contact_relay.observability.metrics import record_outcome

logger = structlog.get_logger()


def get_client_ip(request: HttpRequest) -> str:
    """Best-effort caller IP from platform headers, falling back to the peer address."""
    forwarded = request.header("x-forwarded-for").split(",")[0].strip()
    return (
        request.header("x-nf-client-connection-ip")
        or forwarded
        or request.header("client-ip")
        or request.peer_ip
    )


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def parse_body(body: str | None) -> dict[str, Any]:
    """Parse the request body as a JSON object.  An empty body is ``{}``.

    ``NaN`` and ``Infinity`` are rejected, as strict JSON parsers do.

    Raises:
        ClientError: 400 ``invalid_json`` if the body is not a JSON object,
            including bodies nested too deeply to decode.
    """
    try:
        parsed = json.loads(body or "{}", parse_constant=_reject_constant)
    except (ValueError, RecursionError) as exc:
        raise ClientError(400, "invalid_json", "Invalid JSON") from exc
    if not isinstance(parsed, dict):
        raise ClientError(400, "invalid_json", "Invalid JSON")
    return parsed


class ContactRequestHandler:
    """Validates contact submissions and relays them by email.

    Args:
        settings: The immutable application settings.
        verifier: Captcha verifier; defaults to a ``CaptchaVerifier`` on *settings*.
        relay: Mail relay; defaults to a ``MailRelay`` on *settings*.
    """

    def __init__(
        self,
        settings: Settings,
        verifier: CaptchaVerifier | None = None,
        relay: MailRelay | None = None,
    ) -> None:
        self._verifier = verifier or CaptchaVerifier(settings)
        self._relay = relay or MailRelay(settings)
        self._responses = ResponseBuilder(settings.allowed_origins)

    async def handle(self, request: HttpRequest) -> HttpResponse:
        """Handle one request and map every outcome to a response."""
        origin = request.header("origin")
        ip = get_client_ip(request)

        logger.info("contact.request", method=request.method, origin=origin, ip=ip)

        if request.method == "OPTIONS":
            record_outcome("preflight")
            return self._responses.preflight(origin)

        try:
            return await self._process(request, origin, ip)
        except ClientError as exc:
            record_outcome(exc.reason)
            return self._responses.json(exc.status_code, exc.to_body(), origin)

    async def _process(self, request: HttpRequest, origin: str, ip: str) -> HttpResponse:
        if request.method != "POST":
            logger.info("contact.method_not_allowed", method=request.method)
            raise ClientError(405, "method_not_allowed", "Method Not Allowed")

        try:
            raw = parse_body(request.body)
        except ClientError:
            logger.warning("contact.invalid_json", ip=ip, origin=origin)
            raise

        if is_honeypot_hit(raw):
            # Pretend success so automated submitters learn nothing
            logger.warning("contact.honeypot_hit", ip=ip, origin=origin)
            record_outcome("honeypot")
            return self._responses.json(200, {"success": True}, origin)

        result = validate(raw)
        submission = result.submission
        if submission is None:
            logger.warning(
                "contact.validation_failed", ip=ip, origin=origin, reason=result.reason
            )
            raise ClientError(
                400,
                result.reason,
                result.error_message,
                expose_reason=True,
            )

        logger.info(
            "contact.received",
            ip=ip,
            origin=origin,
            name_len=len(submission.name),
            email_masked=mask_email(submission.email),
            subject_len=len(submission.subject),
            message_len=len(submission.message),
        )

        try:
            outcome = await self._verifier.verify(submission.captcha_token, ip)
        except ProviderError as exc:
            logger.error("contact.captcha_error", error=str(exc))
            record_outcome("captcha_error")
            return self._responses.error(500, "Captcha verification unavailable", origin)

        if not outcome.passed:
            logger.warning("contact.captcha_rejected", ip=ip, reason=outcome.reason)
            raise ClientError(400, "captcha_failed", "Captcha failed")

        return await self._send(submission, origin)

    async def _send(self, submission: ContactSubmission, origin: str) -> HttpResponse:
        try:
            message_id = await self._relay.send(submission)
        except (ConfigError, ProviderError) as exc:
            logger.error("contact.send_failed", error_type=type(exc).__name__)
            record_outcome("send_failed")
            return self._responses.error(500, "Email send failed", origin)

        logger.info("contact.sent", message_id=message_id)
        record_outcome("sent")
        return self._responses.json(200, {"success": True, "id": message_id}, origin)
