from logging import getLogger

from app.configs import file_logger
from app.errors.auth import (
    AlreadyVerifiedError,
    ForbiddenError,
    InvalidCredentialsError,
    InvalidOTPError,
    InvalidTokenError,
    UserAuthenticationError,
    VerificationRequiredError,
)
from app.errors.base import BASE_EXCEPTION, BaseAppError, create_exception_handler, error_envelope
from app.errors.cache import (
    CacheConnectionError,
    CacheDeserializationError,
    CacheExceptionError,
    CacheKeyError,
    CacheSerializationError,
)
from app.errors.database import (
    DatabaseError,
    DuplicateEntryError,
    RecordNotFoundError,
    TransactionError,
)
from app.errors.email import (
    AuthenticationError,
    ConfigurationError,
    EmailServiceError,
    NetworkError,
    OTPDeliveryError,
    SendingError,
)
from app.errors.password_hasher import PasswordHashingError, PasswordRehashError

logger = file_logger(getLogger(__name__))

app_exception_handler = create_exception_handler(logger)

__all__ = [
    "AlreadyVerifiedError",
    "AuthenticationError",
    "BASE_EXCEPTION",
    "BaseAppError",
    "CacheConnectionError",
    "CacheDeserializationError",
    "CacheExceptionError",
    "CacheKeyError",
    "CacheSerializationError",
    "ConfigurationError",
    "DatabaseError",
    "DuplicateEntryError",
    "EmailServiceError",
    "ForbiddenError",
    "InvalidCredentialsError",
    "InvalidOTPError",
    "InvalidTokenError",
    "NetworkError",
    "OTPDeliveryError",
    "PasswordHashingError",
    "PasswordRehashError",
    "RecordNotFoundError",
    "SendingError",
    "TransactionError",
    "UserAuthenticationError",
    "VerificationRequiredError",
    "app_exception_handler",
    "create_exception_handler",
    "error_envelope",
]
