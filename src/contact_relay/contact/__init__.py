"""Contact domain: validation, captcha verification, mail relay, and responses."""

from contact_relay.contact.captcha import CaptchaVerifier
from contact_relay.contact.errors import (
    ClientError,
    ConfigError,
    ContactError,
    ProviderError,
    RelayError,
)
from contact_relay.contact.handler import ContactRequestHandler
from contact_relay.contact.models import (
    CaptchaOutcome,
    CaptchaStatus,
    ContactSubmission,
    EmailPayload,
    HttpRequest,
    HttpResponse,
    ValidationFailure,
    ValidationResult,
)
from contact_relay.contact.relay import MailRelay, build_email_payload
from contact_relay.contact.responses import ResponseBuilder, cors_headers
from contact_relay.contact.validation import is_honeypot_hit, validate

__all__ = [
    "CaptchaOutcome",
    "CaptchaStatus",
    "CaptchaVerifier",
    "ClientError",
    "ConfigError",
    "ContactError",
    "ContactRequestHandler",
    "ContactSubmission",
    "EmailPayload",
    "HttpRequest",
    "HttpResponse",
    "MailRelay",
    "ProviderError",
    "RelayError",
    "ResponseBuilder",
    "ValidationFailure",
    "ValidationResult",
    "build_email_payload",
    "cors_headers",
    "is_honeypot_hit",
    "validate",
]
