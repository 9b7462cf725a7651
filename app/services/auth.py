"""Authentication service: registration, login and email verification."""

from secrets import token_hex

from app.clients.email_client import EmailClient
from app.configs.settings import DEFAULT_AVATAR_URL
from app.errors import (
    AlreadyVerifiedError,
    DuplicateEntryError,
    EmailServiceError,
    InvalidCredentialsError,
    InvalidOTPError,
    OTPDeliveryError,
    RecordNotFoundError,
)
from app.managers.password_manager import hash_password, verify_and_update_password
from app.managers.token_manager import create_access_token, is_owner_email
from app.models import UserDB
from app.monitoring import get_logger
from app.repositories import UserRepository
from app.schemas.auth import AuthOut, RegisterRequest, UserOut
from app.services.otp import OTPService

logger = get_logger(__name__)


def user_out(user: UserDB) -> UserOut:
    return UserOut(
        id=user.id,
        email=user.email,
        name=user.name,
        profile_image=user.profile_image,
        is_verified=user.is_verified,
        is_owner=is_owner_email(user.email),
    )


class AuthService:
    """Service for account creation, credential checks and OTP verification."""

    def __init__(
        self,
        user_repo: UserRepository,
        otp_service: OTPService,
        email_client: EmailClient,
    ) -> None:
        """
        Initialize the auth service.

        Args:
            user_repo: User repository for database operations
            otp_service: Issues and checks verification codes
            email_client: Delivers verification codes
        """
        self.user_repo = user_repo
        self.otp_service = otp_service
        self.email_client = email_client

    def issue_token(self, user: UserDB) -> AuthOut:
        token = create_access_token(user_id=user.id, email=user.email, name=user.name)
        return AuthOut(token=token, user=user_out(user))

    async def register(self, payload: RegisterRequest) -> AuthOut:
        """
        Create an unverified account and email it a verification code.

        A failed delivery is logged; the user can ask for another code.

        Args:
            payload: Registration form

        Returns:
            AuthOut: Token and user view

        Raises:
            DuplicateEntryError: If the email is already registered
        """
        email = str(payload.email)
        if await self.user_repo.get_by_email(email):
            raise DuplicateEntryError(detail="User already exists")

        profile_image = payload.profile_image or DEFAULT_AVATAR_URL.format(seed=token_hex(8))
        password_hash = await hash_password(payload.password.get_secret_value())
        try:
            user = await self.user_repo.create(email, password_hash, payload.name, profile_image)
        except DuplicateEntryError as e:
            # Lost a race with a concurrent registration
            raise DuplicateEntryError(detail="User already exists") from e
        logger.info("user_registered", user_id=user.id, email=email)

        otp = await self.otp_service.issue(email)
        try:
            await self.email_client.send_otp_email(email, user.name, otp)
        except EmailServiceError as e:
            logger.error("otp_email_failed", email=email, error=e.detail)

        return self.issue_token(user)

    async def login(self, email: str, password: str) -> AuthOut:
        """
        Check credentials and issue a token.

        Raises:
            InvalidCredentialsError: If the email is unknown or the password is wrong
        """
        user = await self.user_repo.get_by_email(email)
        valid, new_hash = await verify_and_update_password(
            password,
            user.password_hash if user else None,
        )
        if not user or not valid:
            logger.info("login_failed", email=email)
            raise InvalidCredentialsError

        if new_hash:
            user = await self.user_repo.update_password_hash(user, new_hash)

        logger.info("login_succeeded", user_id=user.id)
        return self.issue_token(user)

    async def get_user(self, user_id: int) -> UserOut:
        user = await self.user_repo.get_by_id(user_id)
        if not user:
            raise RecordNotFoundError(detail="User not found")
        return user_out(user)

    async def _pending_user(self, email: str) -> UserDB:
        user = await self.user_repo.get_by_email(email)
        if not user:
            raise RecordNotFoundError(detail="User not found")
        if user.is_verified:
            raise AlreadyVerifiedError
        return user

    async def verify_email(self, email: str, otp: str) -> UserOut:
        """
        Consume a verification code and mark the account verified.

        Raises:
            RecordNotFoundError: If no account uses ``email``
            AlreadyVerifiedError: If the account is already verified
            InvalidOTPError: If the code is wrong, expired or absent
        """
        user = await self._pending_user(email)
        if not await self.otp_service.verify(email, otp):
            raise InvalidOTPError

        user = await self.user_repo.mark_verified(user)
        logger.info("user_verified", user_id=user.id)
        return user_out(user)

    async def resend_otp(self, email: str) -> None:
        """
        Issue a new code and send it.

        Raises:
            RecordNotFoundError: If no account uses ``email``
            AlreadyVerifiedError: If the account is already verified
            OTPDeliveryError: If the code could not be delivered
        """
        user = await self._pending_user(email)
        otp = await self.otp_service.issue(email)
        try:
            await self.email_client.send_otp_email(email, user.name, otp)
        except EmailServiceError as e:
            logger.error("otp_email_failed", email=email, error=e.detail)
            raise OTPDeliveryError from e
        logger.info("otp_resent", user_id=user.id)
