from starlette.status import (
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_502_BAD_GATEWAY,
    HTTP_503_SERVICE_UNAVAILABLE,
)

from app.errors.base import BaseAppError


class EmailServiceError(BaseAppError):
    """Base class for all email service related errors."""

    def __init__(
        self,
        detail: str = "Email service error",
        status_code: int = HTTP_500_INTERNAL_SERVER_ERROR,
    ) -> None:
        super().__init__(detail=detail, status_code=status_code)


class ConfigurationError(EmailServiceError):
    """Raised when SMTP credentials or sender address are missing."""

    def __init__(self, detail: str = "Email service configuration error") -> None:
        super().__init__(detail, HTTP_503_SERVICE_UNAVAILABLE)


class AuthenticationError(EmailServiceError):
    """Raised when the SMTP server rejects the login."""

    def __init__(self, detail: str = "Email service authentication error") -> None:
        super().__init__(detail, HTTP_503_SERVICE_UNAVAILABLE)


class SendingError(EmailServiceError):
    """Raised when the SMTP server refuses the message."""

    def __init__(self, detail: str = "Email service sending error") -> None:
        super().__init__(detail, HTTP_502_BAD_GATEWAY)


class NetworkError(EmailServiceError):
    """Raised when network connectivity issues occur."""

    def __init__(self, detail: str = "Email service network error") -> None:
        super().__init__(detail, HTTP_503_SERVICE_UNAVAILABLE)


class OTPDeliveryError(EmailServiceError):
    """Raised when a requested verification code could not be emailed."""

    # Detail reaches the client unmasked
    expose = True

    def __init__(self, detail: str = "Failed to send OTP email") -> None:
        super().__init__(detail, HTTP_500_INTERNAL_SERVER_ERROR)
