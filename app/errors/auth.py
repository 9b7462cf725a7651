"""Authentication and authorization errors."""

from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_401_UNAUTHORIZED,
    HTTP_403_FORBIDDEN,
)

from app.errors.base import BaseAppError


class UserAuthenticationError(BaseAppError):
    """Base class for authentication errors."""

    def __init__(
        self,
        detail: str = "Authentication required",
        status_code: int = HTTP_401_UNAUTHORIZED,
    ) -> None:
        super().__init__(detail, status_code)


class InvalidCredentialsError(UserAuthenticationError):
    """Raised when credentials are invalid."""

    def __init__(self) -> None:
        super().__init__("Invalid credentials", HTTP_401_UNAUTHORIZED)


class InvalidTokenError(UserAuthenticationError):
    """Raised when a bearer token cannot be decoded or has expired."""

    def __init__(self) -> None:
        super().__init__("Invalid or expired token", HTTP_401_UNAUTHORIZED)


class ForbiddenError(UserAuthenticationError):
    """Raised when the caller is authenticated but lacks the required role."""

    def __init__(self, detail: str = "Forbidden") -> None:
        super().__init__(detail, HTTP_403_FORBIDDEN)


class VerificationRequiredError(ForbiddenError):
    """Raised when an unverified user attempts a verified-only action."""

    def __init__(self, detail: str = "Please verify your email to continue") -> None:
        super().__init__(detail)
        self.requires_verification = True


class AlreadyVerifiedError(UserAuthenticationError):
    """Raised when verification is requested for a verified account."""

    def __init__(self) -> None:
        super().__init__("User already verified", HTTP_400_BAD_REQUEST)


class InvalidOTPError(UserAuthenticationError):
    """Raised when an OTP does not match or has expired."""

    def __init__(self) -> None:
        super().__init__("Invalid or expired OTP", HTTP_400_BAD_REQUEST)
