"""Pydantic v2 models for the contact relay pipeline.

All models are frozen (immutable).  A ``ContactSubmission`` lives only for the
duration of one request and is never persisted.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ValidationFailure(StrEnum):
    """Reason codes for a rejected contact submission."""

    MISSING_FIELDS = "missing_fields"
    INVALID_EMAIL = "invalid_email"
    MESSAGE_TOO_LONG = "message_too_long"


# Caller-facing error text for each validation failure
FAILURE_MESSAGES: dict[ValidationFailure, str] = {
    ValidationFailure.MISSING_FIELDS: "Missing required fields: name, email, message",
    ValidationFailure.INVALID_EMAIL: "Invalid email format",
    ValidationFailure.MESSAGE_TOO_LONG: "Message too long",
}


class CaptchaStatus(StrEnum):
    """Result states of a captcha verification."""

    SKIPPED = "skipped"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class ContactSubmission(BaseModel):
    """A trimmed contact-form submission.

    ``website`` is the honeypot field and is expected to be empty.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    email: str
    message: str
    subject: str = ""
    phone: str = ""
    website: str = ""
    captcha_token: str = ""


class ValidationResult(BaseModel):
    """Either a valid submission or the reason it was rejected."""

    model_config = ConfigDict(frozen=True)

    submission: ContactSubmission | None = None
    failure: ValidationFailure | None = None

    @classmethod
    def valid(cls, submission: ContactSubmission) -> ValidationResult:
        return cls(submission=submission)

    @classmethod
    def invalid(cls, failure: ValidationFailure) -> ValidationResult:
        return cls(failure=failure)

    @property
    def is_valid(self) -> bool:
        return self.failure is None

    @property
    def reason(self) -> str:
        """The failure code, or ``""`` for a valid result."""
        return str(self.failure) if self.failure is not None else ""

    @property
    def error_message(self) -> str:
        """Caller-facing text for the failure, or ``""`` for a valid result."""
        return FAILURE_MESSAGES[self.failure] if self.failure is not None else ""


class CaptchaOutcome(BaseModel):
    """Outcome of a captcha check.  ``SKIPPED`` counts as a pass."""

    model_config = ConfigDict(frozen=True)

    status: CaptchaStatus
    reason: str | None = None

    @classmethod
    def skipped(cls) -> CaptchaOutcome:
        return cls(status=CaptchaStatus.SKIPPED)

    @classmethod
    def accepted(cls) -> CaptchaOutcome:
        return cls(status=CaptchaStatus.ACCEPTED)

    @classmethod
    def rejected(cls, reason: str) -> CaptchaOutcome:
        return cls(status=CaptchaStatus.REJECTED, reason=reason)

    @property
    def passed(self) -> bool:
        return self.status is not CaptchaStatus.REJECTED


class EmailPayload(BaseModel):
    """The JSON body sent to the Resend ``/emails`` endpoint.

    Serialize with ``model_dump(by_alias=True)`` so ``from_`` becomes ``from``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    from_: str = Field(alias="from")
    to: list[str]
    reply_to: str
    subject: str
    text: str


class HttpRequest(BaseModel):
    """Platform-neutral inbound request.

    Header names are lower-cased on construction so lookups are
    case-insensitive.  ``peer_ip`` is the socket address reported by the
    hosting adapter, used when no forwarding header is present.
    """

    model_config = ConfigDict(frozen=True)

    method: str
    headers: dict[str, str] = Field(default_factory=dict)
    body: str | None = None
    peer_ip: str = ""

    @field_validator("headers", mode="before")
    @classmethod
    def lower_case_header_names(cls, v: Any) -> Any:
        if isinstance(v, Mapping):
            return {str(key).lower(): value for key, value in v.items()}
        return v

    @field_validator("method")
    @classmethod
    def upper_case_method(cls, v: str) -> str:
        return v.upper()

    def header(self, name: str) -> str:
        """Return the header value for *name*, or an empty string."""
        return self.headers.get(name.lower(), "")


class HttpResponse(BaseModel):
    """Platform-neutral outbound response."""

    model_config = ConfigDict(frozen=True)

    status_code: int
    headers: dict[str, str] = Field(default_factory=dict)
    body: Any = None

    def render_body(self) -> str:
        """Return the body as a JSON string, or ``""`` when there is no body."""
        if self.body is None:
            return ""
        return json.dumps(self.body)
