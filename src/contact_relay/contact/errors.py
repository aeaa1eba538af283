"""Exception classes for the contact relay pipeline."""


class ContactError(Exception):
    """Base class for all errors raised while handling a contact submission."""


class ClientError(ContactError):
    """Raised for problems with the caller's request.

    Covers bad methods, bad JSON, validation failures and captcha rejections.
    These are surfaced to the caller with a 4xx status and a short reason.

    Attributes:
        status_code: The HTTP status to respond with.
        reason: A short machine-checkable reason code.
        expose_reason: Whether ``reason`` is included in the response body.
    """

    def __init__(
        self,
        status_code: int,
        reason: str,
        message: str,
        *,
        expose_reason: bool = False,
    ) -> None:
        self.status_code = status_code
        self.reason = reason
        self.expose_reason = expose_reason
        super().__init__(message)

    def to_body(self) -> dict[str, str]:
        """The JSON body returned to the caller."""
        body = {"error": str(self)}
        if self.expose_reason:
            body["reason"] = self.reason
        return body


class ConfigError(ContactError):
    """Raised when a required delivery setting is missing.

    Attributes:
        missing: The env var name of the absent setting.
    """

    def __init__(self, missing: str) -> None:
        self.missing = missing
        super().__init__(f"Missing {missing}")


class ProviderError(ContactError):
    """Raised when a downstream provider fails or cannot be reached."""


class RelayError(ProviderError):
    """Raised when the email provider responds with a non-success status.

    Attributes:
        status_code: The provider's HTTP status code.
        provider_message: The provider's raw error text, for server-side logs only.
    """

    def __init__(self, status_code: int, provider_message: str) -> None:
        self.status_code = status_code
        self.provider_message = provider_message
        super().__init__(f"Resend error {status_code}: {provider_message}")
