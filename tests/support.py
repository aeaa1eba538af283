"""Test helpers shared across the suite: settings builder and a recording httpx transport."""

from __future__ import annotations

import json
from typing import Any

import httpx

from contact_relay.config import Settings

ALLOWED_ORIGIN = "https://www.example.com"


def make_settings(**overrides: Any) -> Settings:
    """Build Settings with delivery configured, captcha off, and no ``.env``."""
    defaults: dict[str, Any] = {
        "resend_api_key": "re_test_key",
        "contact_to_email": "inbox@example.com",
        "contact_from_email": "form@example.com",
        "turnstile_secret_key": "",
        "allowed_origins": [ALLOWED_ORIGIN],
    }
    defaults.update(overrides)
    return Settings(_env_file=None, **defaults)  # type: ignore[call-arg]


class RecordingTransport(httpx.MockTransport):
    """MockTransport that records every request it receives.

    Args:
        status_code: Status to answer with.
        body: JSON-encodable body, or a ``str`` sent as plain text.
        error: A transport error type raised instead of answering.
    """

    def __init__(
        self,
        status_code: int = 200,
        body: Any = None,
        error: type[httpx.TransportError] | None = None,
    ) -> None:
        self.requests: list[httpx.Request] = []
        self._status_code = status_code
        self._body = body
        self._error = error
        super().__init__(self._respond)

    def _respond(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._error is not None:
            raise self._error("simulated transport failure", request=request)
        if isinstance(self._body, str):
            return httpx.Response(self._status_code, text=self._body)
        return httpx.Response(self._status_code, json=self._body)

    @property
    def called(self) -> bool:
        return bool(self.requests)

    def last_json(self) -> Any:
        return json.loads(self.requests[-1].content)
