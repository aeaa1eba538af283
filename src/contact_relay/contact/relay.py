"""Resend relay for validated contact submissions.

``build_email_payload`` is a pure function of the submission and the
configured addresses.  ``MailRelay.send`` checks configuration before any
network call and raises on every provider failure; there are no retries.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from contact_relay.config import Settings
from contact_relay.contact.errors import ConfigError, ProviderError, RelayError
from contact_relay.contact.models import ContactSubmission, EmailPayload

logger = structlog.get_logger()

RESEND_EMAILS_URL = "https://api.resend.com/emails"

DEFAULT_SUBJECT = "New contact form message"
SUBJECT_PREFIX = "[Contact]"


def build_email_text(submission: ContactSubmission, subject: str) -> str:
    """Render the plain-text body for the recipient."""
    return (
        "New contact form submission\n"
        "\n"
        f"Name: {submission.name}\n"
        f"Email: {submission.email}\n"
        f"Phone: {submission.phone or '-'}\n"
        f"Subject: {subject}\n"
        "\n"
        "Message:\n"
        f"{submission.message}\n"
    )


def build_email_payload(
    submission: ContactSubmission,
    from_email: str,
    to_email: str,
) -> EmailPayload:
    """Build the Resend payload for a validated submission.

    Replies go to the submitter, not to the relay's sending address.

    Args:
        submission: A submission that passed validation and captcha.
        from_email: The verified sender address.
        to_email: The destination address.

    Returns:
        The ``EmailPayload`` to POST to Resend.
    """
    subject = submission.subject.strip() or DEFAULT_SUBJECT
    return EmailPayload(
        from_=from_email,
        to=[to_email],
        reply_to=submission.email,
        subject=f"{SUBJECT_PREFIX} {subject}",
        text=build_email_text(submission, subject),
    )


class MailRelay:
    """Sends contact submissions through the Resend API.

    Args:
        settings: Application settings holding the API key and addresses.
        transport: Optional httpx transport, used by tests to stub the provider.
    """

    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = settings.resend_api_key.get_secret_value()
        self._to_email = settings.contact_to_email
        self._from_email = settings.contact_from_email
        self._timeout = settings.outbound_timeout_seconds
        self._transport = transport

    def _check_config(self) -> None:
        for name, value in (
            ("RESEND_API_KEY", self._api_key),
            ("CONTACT_TO_EMAIL", self._to_email),
            ("CONTACT_FROM_EMAIL", self._from_email),
        ):
            if not value:
                logger.error("contact.missing_config", missing=name)
                raise ConfigError(name)

    async def send(self, submission: ContactSubmission) -> str | None:
        """Send *submission* to the configured recipient.

        Args:
            submission: A submission that passed validation and captcha.

        Returns:
            The Resend message id, or ``None`` if the response omits one.

        Raises:
            ConfigError: If a required setting is missing.  No request is made.
            RelayError: If Resend responds with a non-2xx status.
            ProviderError: If Resend cannot be reached.
        """
        self._check_config()

        payload = build_email_payload(submission, self._from_email, self._to_email)

        logger.info(
            "contact.sending_email",
            to=self._to_email,
            from_=self._from_email,
            subject=payload.subject,
            text_len=len(payload.text),
        )

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.post(
                    RESEND_EMAILS_URL,
                    headers={"Authorization": f"Bearer {self._api_key}"},
                    json=payload.model_dump(by_alias=True),
                    timeout=self._timeout,
                )
        except httpx.HTTPError as exc:
            logger.error("contact.resend_unreachable", error=str(exc))
            raise ProviderError(f"Resend unreachable: {exc}") from exc

        if not response.is_success:
            logger.error(
                "contact.resend_error",
                status=response.status_code,
                text_error=response.text,
            )
            raise RelayError(response.status_code, response.text)

        try:
            result: Any = response.json()
        except ValueError:
            logger.warning("contact.resend_body_unparseable", status=response.status_code)
            return None

        message_id = result.get("id") if isinstance(result, dict) else None
        return str(message_id) if message_id else None
