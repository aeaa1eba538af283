"""Tests for the function-platform adapter."""

from __future__ import annotations

import base64
import json
from typing import Any
from unittest.mock import patch

import pytest
from support import ALLOWED_ORIGIN, RecordingTransport, make_settings

from contact_relay import serverless
from contact_relay.contact.captcha import CaptchaVerifier
from contact_relay.contact.handler import ContactRequestHandler
from contact_relay.contact.relay import MailRelay
from contact_relay.serverless import (
    event_body,
    event_method,
    event_to_request,
    handle_event,
    lambda_handler,
)


@pytest.fixture
def mail() -> RecordingTransport:
    return RecordingTransport(body={"id": "abc"})


@pytest.fixture
def handler(mail: RecordingTransport) -> ContactRequestHandler:
    settings = make_settings()
    return ContactRequestHandler(
        settings,
        verifier=CaptchaVerifier(settings),
        relay=MailRelay(settings, transport=mail),
    )


class TestEventParsing:
    def test_rest_style_method(self) -> None:
        assert event_method({"httpMethod": "POST"}) == "POST"

    def test_http_api_v2_method(self) -> None:
        event = {"requestContext": {"http": {"method": "OPTIONS"}}}
        assert event_method(event) == "OPTIONS"

    def test_missing_method(self) -> None:
        assert event_method({}) == ""

    def test_plain_body(self) -> None:
        assert event_body({"body": '{"a": 1}'}) == '{"a": 1}'
        assert event_body({"body": None}) == ""

    def test_base64_body(self) -> None:
        raw = base64.b64encode(b'{"name": "Ada"}').decode()
        assert event_body({"body": raw, "isBase64Encoded": True}) == '{"name": "Ada"}'

    @pytest.mark.parametrize(
        "body",
        ["!!!not-b64", base64.b64encode(b"\xff\xfe").decode()],
    )
    def test_undecodable_base64_body_passes_through(self, body: str) -> None:
        assert event_body({"body": body, "isBase64Encoded": True}) == body

    def test_event_to_request(self) -> None:
        request = event_to_request(
            {
                "httpMethod": "post",
                "headers": {"Origin": ALLOWED_ORIGIN},
                "body": "{}",
                "requestContext": {"http": {"sourceIp": "198.51.100.9"}},
            }
        )
        assert request.method == "POST"
        assert request.header("origin") == ALLOWED_ORIGIN
        assert request.peer_ip == "198.51.100.9"


class TestHandleEvent:
    @pytest.mark.anyio()
    async def test_success(
        self,
        handler: ContactRequestHandler,
        mail: RecordingTransport,
        valid_fields: dict[str, Any],
    ) -> None:
        result = await handle_event(
            {
                "httpMethod": "POST",
                "headers": {"origin": ALLOWED_ORIGIN, "x-request-id": "req-1"},
                "body": json.dumps(valid_fields),
            },
            handler,
        )

        assert result["statusCode"] == 200
        assert json.loads(result["body"]) == {"success": True, "id": "abc"}
        assert result["headers"]["Access-Control-Allow-Origin"] == ALLOWED_ORIGIN
        assert result["headers"]["X-Request-ID"] == "req-1"
        assert len(mail.requests) == 1

    @pytest.mark.anyio()
    async def test_malformed_base64_body_is_invalid_json(
        self, handler: ContactRequestHandler, mail: RecordingTransport
    ) -> None:
        result = await handle_event(
            {
                "httpMethod": "POST",
                "headers": {"origin": ALLOWED_ORIGIN},
                "body": "!!!not-b64",
                "isBase64Encoded": True,
            },
            handler,
        )

        assert result["statusCode"] == 400
        assert json.loads(result["body"]) == {"error": "Invalid JSON"}
        assert result["headers"]["Access-Control-Allow-Origin"] == ALLOWED_ORIGIN
        assert not mail.called

    @pytest.mark.anyio()
    async def test_preflight_body_is_empty_string(self, handler: ContactRequestHandler) -> None:
        result = await handle_event({"httpMethod": "OPTIONS", "headers": {}}, handler)

        assert result["statusCode"] == 204
        assert result["body"] == ""
        assert result["headers"]["Access-Control-Allow-Origin"] == "null"


def test_lambda_handler_uses_cached_handler(
    handler: ContactRequestHandler, valid_fields: dict[str, Any]
) -> None:
    with patch.object(serverless, "get_handler", return_value=handler):
        result = lambda_handler(
            {"httpMethod": "POST", "headers": {}, "body": json.dumps(valid_fields)},
            None,
        )

    assert result["statusCode"] == 200
