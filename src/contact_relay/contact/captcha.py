"""Cloudflare Turnstile verification for contact submissions.

Verification is config-gated: without ``TURNSTILE_SECRET_KEY`` every check is
``SKIPPED``.  When enabled, any failure to reach or understand the provider
raises ``ProviderError`` so the request fails closed.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from contact_relay.config import Settings
from contact_relay.contact.errors import ProviderError
from contact_relay.contact.models import CaptchaOutcome

logger = structlog.get_logger()

TURNSTILE_VERIFY_URL = "https://challenges.cloudflare.com/turnstile/v0/siteverify"


class CaptchaVerifier:
    """Server-side verifier for Turnstile tokens.

    Args:
        settings: Application settings holding the optional secret.
        transport: Optional httpx transport, used by tests to stub the provider.
    """

    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._secret = settings.turnstile_secret_key.get_secret_value()
        self._timeout = settings.outbound_timeout_seconds
        self._transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self._secret)

    async def verify(self, token: str, client_ip: str) -> CaptchaOutcome:
        """Verify *token* for the caller at *client_ip*.

        Args:
            token: The token produced by the client-side widget.
            client_ip: The caller's IP address, or ``""`` when unknown.

        Returns:
            ``SKIPPED`` when verification is disabled, otherwise
            ``ACCEPTED`` or ``REJECTED`` per the provider's ``success`` field.

        Raises:
            ProviderError: If the provider is unreachable, returns a non-2xx
                status, or returns a body without a boolean ``success``.
        """
        if not self.enabled:
            return CaptchaOutcome.skipped()
        if not token:
            return CaptchaOutcome.rejected("missing token")

        form = {"secret": self._secret, "response": token}
        if client_ip:
            form["remoteip"] = client_ip

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.post(
                    TURNSTILE_VERIFY_URL,
                    data=form,
                    timeout=self._timeout,
                )
        except httpx.HTTPError as exc:
            raise ProviderError(f"Turnstile unreachable: {exc}") from exc

        if not response.is_success:
            raise ProviderError(f"Turnstile error {response.status_code}: {response.text}")

        try:
            result: dict[str, Any] = response.json()
        except ValueError as exc:
            raise ProviderError("Turnstile returned a non-JSON body") from exc

        success = result.get("success") if isinstance(result, dict) else None
        if not isinstance(success, bool):
            raise ProviderError("Turnstile response missing boolean 'success'")

        if success:
            return CaptchaOutcome.accepted()

        error_codes = result.get("error-codes")
        if not isinstance(error_codes, list):
            error_codes = []
        reason = ",".join(str(code) for code in error_codes) or "verification failed"
        logger.info("contact.captcha_provider_rejected", error_codes=error_codes)
        return CaptchaOutcome.rejected(reason)
