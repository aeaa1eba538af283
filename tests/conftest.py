"""Shared pytest fixtures for the contact relay test suite."""

from __future__ import annotations

from typing import Any

import pytest
from support import make_settings

from contact_relay.config import Settings


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def settings() -> Settings:
    """Settings with delivery configured and captcha disabled."""
    return make_settings()


@pytest.fixture
def valid_fields() -> dict[str, Any]:
    """A contact-form body that passes validation."""
    return {
        "name": "Ada Lovelace",
        "email": "ada@example.com",
        "subject": "Quote request",
        "phone": "+1 555 0100",
        "message": "Hello, I would like a quote for a kitchen renovation.",
        "website": "",
    }
