"""Tests for the Resend mail relay: payload construction, config gate, and provider errors."""

from __future__ import annotations

import httpx
import pytest
from support import RecordingTransport, make_settings

from contact_relay.contact.errors import ConfigError, ProviderError, RelayError
from contact_relay.contact.models import ContactSubmission
from contact_relay.contact.relay import (
    DEFAULT_SUBJECT,
    RESEND_EMAILS_URL,
    MailRelay,
    build_email_payload,
)


@pytest.fixture
def submission() -> ContactSubmission:
    return ContactSubmission(
        name="Ada Lovelace",
        email="ada@example.com",
        message="Hello there.\nSecond line.",
        subject="Quote request",
        phone="+1 555 0100",
    )


# ---------------------------------------------------------------------------
# Payload construction
# ---------------------------------------------------------------------------


class TestBuildEmailPayload:
    def test_addresses(self, submission: ContactSubmission) -> None:
        payload = build_email_payload(submission, "form@example.com", "inbox@example.com")

        assert payload.from_ == "form@example.com"
        assert payload.to == ["inbox@example.com"]
        assert payload.reply_to == "ada@example.com"

    def test_subject_is_prefixed(self, submission: ContactSubmission) -> None:
        payload = build_email_payload(submission, "f@example.com", "t@example.com")
        assert payload.subject == "[Contact] Quote request"

    def test_empty_subject_defaults(self, submission: ContactSubmission) -> None:
        sub = submission.model_copy(update={"subject": "  "})
        payload = build_email_payload(sub, "f@example.com", "t@example.com")

        assert payload.subject == f"[Contact] {DEFAULT_SUBJECT}"
        assert f"Subject: {DEFAULT_SUBJECT}\n" in payload.text

    def test_text_template(self, submission: ContactSubmission) -> None:
        payload = build_email_payload(submission, "f@example.com", "t@example.com")

        assert payload.text == (
            "New contact form submission\n"
            "\n"
            "Name: Ada Lovelace\n"
            "Email: ada@example.com\n"
            "Phone: +1 555 0100\n"
            "Subject: Quote request\n"
            "\n"
            "Message:\n"
            "Hello there.\nSecond line.\n"
        )

    def test_missing_phone_uses_dash(self, submission: ContactSubmission) -> None:
        sub = submission.model_copy(update={"phone": ""})
        payload = build_email_payload(sub, "f@example.com", "t@example.com")
        assert "Phone: -\n" in payload.text

    def test_serializes_from_alias(self, submission: ContactSubmission) -> None:
        payload = build_email_payload(submission, "f@example.com", "t@example.com")
        dumped = payload.model_dump(by_alias=True)
        assert set(dumped) == {"from", "to", "reply_to", "subject", "text"}
        assert dumped["from"] == "f@example.com"


# ---------------------------------------------------------------------------
# MailRelay.send
# ---------------------------------------------------------------------------


class TestMailRelaySend:
    @pytest.mark.anyio()
    async def test_returns_provider_id(self, submission: ContactSubmission) -> None:
        transport = RecordingTransport(body={"id": "abc"})
        relay = MailRelay(make_settings(), transport=transport)

        assert await relay.send(submission) == "abc"

    @pytest.mark.anyio()
    async def test_request_shape(self, submission: ContactSubmission) -> None:
        transport = RecordingTransport(body={"id": "abc"})
        relay = MailRelay(make_settings(), transport=transport)

        await relay.send(submission)

        assert len(transport.requests) == 1
        request = transport.requests[0]
        assert request.method == "POST"
        assert str(request.url) == RESEND_EMAILS_URL
        assert request.headers["authorization"] == "Bearer re_test_key"
        assert request.headers["content-type"] == "application/json"
        body = transport.last_json()
        assert body["from"] == "form@example.com"
        assert body["to"] == ["inbox@example.com"]
        assert body["reply_to"] == "ada@example.com"
        assert body["subject"] == "[Contact] Quote request"

    @pytest.mark.anyio()
    async def test_missing_id_returns_none(self, submission: ContactSubmission) -> None:
        relay = MailRelay(make_settings(), transport=RecordingTransport(body={}))
        assert await relay.send(submission) is None

    @pytest.mark.anyio()
    async def test_non_json_success_returns_none(self, submission: ContactSubmission) -> None:
        relay = MailRelay(make_settings(), transport=RecordingTransport(body="queued"))
        assert await relay.send(submission) is None

    @pytest.mark.anyio()
    async def test_non_2xx_raises_relay_error(self, submission: ContactSubmission) -> None:
        transport = RecordingTransport(
            status_code=422, body='{"message":"The from address is not verified"}'
        )
        relay = MailRelay(make_settings(), transport=transport)

        with pytest.raises(RelayError) as exc_info:
            await relay.send(submission)

        assert exc_info.value.status_code == 422
        assert "not verified" in exc_info.value.provider_message
        assert isinstance(exc_info.value, ProviderError)

    @pytest.mark.anyio()
    async def test_transport_error_raises_provider_error(
        self, submission: ContactSubmission
    ) -> None:
        relay = MailRelay(make_settings(), transport=RecordingTransport(error=httpx.ConnectTimeout))

        with pytest.raises(ProviderError):
            await relay.send(submission)


class TestMailRelayConfig:
    """Missing delivery settings fail before any network call."""

    @pytest.mark.anyio()
    @pytest.mark.parametrize(
        ("override", "missing"),
        [
            ({"resend_api_key": ""}, "RESEND_API_KEY"),
            ({"contact_to_email": ""}, "CONTACT_TO_EMAIL"),
            ({"contact_from_email": ""}, "CONTACT_FROM_EMAIL"),
        ],
    )
    async def test_missing_setting_raises_config_error(
        self,
        submission: ContactSubmission,
        override: dict[str, str],
        missing: str,
    ) -> None:
        transport = RecordingTransport(body={"id": "abc"})
        relay = MailRelay(make_settings(**override), transport=transport)

        with pytest.raises(ConfigError) as exc_info:
            await relay.send(submission)

        assert exc_info.value.missing == missing
        assert not transport.called
