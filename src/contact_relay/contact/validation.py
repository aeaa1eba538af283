"""Pure validation functions for raw contact-form fields.

Nothing here performs I/O.  ``validate`` turns a parsed JSON object into a
``ValidationResult``; ``is_honeypot_hit`` is checked by the handler before
validation runs.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from typing import Any

from contact_relay.contact.models import ContactSubmission, ValidationFailure, ValidationResult

MAX_MESSAGE_LENGTH = 5000

HONEYPOT_FIELD = "website"

_EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")


def field_text(raw: Mapping[str, Any], key: str) -> str:
    """Return ``raw[key]`` as trimmed text, coerced the way a browser form handler would.

    Absent, null and other falsy values (``0``, ``false``, ``""``) and NaN become
    ``""``.  ``true`` renders as ``"true"`` and integral floats drop their
    fractional part.
    """
    value = raw.get(key)
    if not value or (isinstance(value, float) and math.isnan(value)):
        return ""
    if isinstance(value, bool):
        return "true"
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def utf16_length(text: str) -> int:
    """Length of *text* in UTF-16 code units, as a browser counts it."""
    return len(text.encode("utf-16-le")) // 2


def is_valid_email(email: str) -> bool:
    """True when *email* has the shape ``local@domain.tld``."""
    return _EMAIL_PATTERN.fullmatch(email.strip()) is not None


def is_honeypot_hit(raw: Mapping[str, Any]) -> bool:
    """True when the hidden honeypot field was filled in."""
    return bool(field_text(raw, HONEYPOT_FIELD))


def validate(raw: Mapping[str, Any]) -> ValidationResult:
    """Validate and trim a contact-form submission.

    Checks run in a fixed order: required fields, email format, message
    length.  The first failure wins.

    Args:
        raw: The parsed JSON object from the request body.

    Returns:
        ``ValidationResult.valid`` with the trimmed submission, or
        ``ValidationResult.invalid`` with the failure reason.
    """
    name = field_text(raw, "name")
    email = field_text(raw, "email")
    message = field_text(raw, "message")

    if not name or not email or not message:
        return ValidationResult.invalid(ValidationFailure.MISSING_FIELDS)
    if not is_valid_email(email):
        return ValidationResult.invalid(ValidationFailure.INVALID_EMAIL)
    if utf16_length(message) > MAX_MESSAGE_LENGTH:
        return ValidationResult.invalid(ValidationFailure.MESSAGE_TOO_LONG)

    # Turnstile's widget posts its token as "cf-turnstile-response"
    captcha_token = field_text(raw, "captchaToken") or field_text(raw, "cf-turnstile-response")

    return ValidationResult.valid(
        ContactSubmission(
            name=name,
            email=email,
            message=message,
            subject=field_text(raw, "subject"),
            phone=field_text(raw, "phone"),
            website=field_text(raw, HONEYPOT_FIELD),
            captcha_token=captcha_token,
        )
    )


def mask_email(email: str) -> str:
    """Mask an email address for logging, e.g. ``jo***@example.com``."""
    at = email.find("@")
    if at <= 1:
        return "***"
    return email[:2] + "***" + email[at:]
