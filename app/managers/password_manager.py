"""
Password hashing module using Argon2 with passlib's CryptContext.

The same primitive hashes account passwords and one-time passcodes, so OTP
comparison gets the constant-time verification passlib provides.
"""

from asyncio import get_running_loop
from concurrent.futures import ThreadPoolExecutor

from passlib.context import CryptContext
from passlib.exc import InternalBackendError

from app.configs import CONFIG_MAP, settings
from app.decorators.with_retry import with_retry
from app.errors import PasswordHashingError, PasswordRehashError
from app.monitoring import get_logger

executor = ThreadPoolExecutor(max_workers=4)
logger = get_logger(__name__)


class PasswordHasher:
    """
    Argon2id hashing and verification.

    pbkdf2_sha256 is accepted for verification only and marked deprecated, so
    ``verify_and_update`` upgrades such hashes on the next successful login.
    """

    def __init__(self, level: str | None = None) -> None:
        self.level = level or settings.PASSWORD_SECURITY_LEVEL
        cost = CONFIG_MAP[self.level]
        self.pwd_context = CryptContext(
            schemes=["argon2", "pbkdf2_sha256"],
            deprecated="pbkdf2_sha256",
            argon2__memory_cost=cost.memory_cost,
            argon2__time_cost=cost.time_cost,
            argon2__parallelism=cost.parallelism,
        )
        logger.info(f"PasswordHasher initialized with Argon2id on level {self.level}")

    def hash(self, secret: str) -> str:
        """
        Hash a plaintext secret using Argon2id.

        Raises:
            ValueError: If the secret is empty.
            PasswordHashingError: If the backend fails.
        """
        if not secret:
            msg = "Password cannot be empty"
            raise ValueError(msg)

        try:
            return self.pwd_context.hash(secret)
        except (ValueError, InternalBackendError, UnicodeError) as e:
            logger.exception("Failed to hash secret")
            mssg = "Failed to hash password"
            raise PasswordHashingError(mssg) from e

    def verify(self, secret: str, hashed: str) -> bool:
        """Return True when ``secret`` matches ``hashed``; malformed hashes never match."""
        if not isinstance(hashed, str) or not hashed.strip():
            logger.warning("Invalid hash format provided")
            return False

        try:
            return self.pwd_context.verify(secret, hashed)
        except (ValueError, TypeError):
            logger.exception("Stored hash is corrupted or invalid format")
            return False

    def verify_and_update(self, secret: str, hashed: str | None) -> tuple[bool, str | None]:
        """
        Verify a secret and return a replacement hash if the stored one is outdated.

        Returns:
            tuple[bool, str | None]: Verification result and the new hash, if any.
        """
        if hashed is None:
            # Keep timing similar for unknown accounts
            self.pwd_context.dummy_verify()
            return False, None

        if not self.verify(secret, hashed):
            return False, None

        if not self.pwd_context.needs_update(hashed):
            return True, None

        try:
            return True, self.hash(secret)
        except PasswordHashingError as e:
            mssg = "Failed to rehash password"
            raise PasswordRehashError(mssg) from e


_default_hasher: PasswordHasher | None = None


def get_password_hasher() -> PasswordHasher:
    """Return the process-wide hasher, creating it on first use."""
    global _default_hasher
    if _default_hasher is None:
        _default_hasher = PasswordHasher()
    return _default_hasher


@with_retry(base_delay=1, max_delay=10, exec_retry=PasswordHashingError)
async def hash_password(password: str) -> str:
    """Hash ``password`` in the executor so the event loop is not blocked."""
    return await get_running_loop().run_in_executor(
        executor,
        get_password_hasher().hash,
        password,
    )


async def verify_password(password: str, hashed_password: str) -> bool:
    return await get_running_loop().run_in_executor(
        executor,
        get_password_hasher().verify,
        password,
        hashed_password,
    )


async def verify_and_update_password(
    password: str,
    hashed_password: str | None,
) -> tuple[bool, str | None]:
    return await get_running_loop().run_in_executor(
        executor,
        get_password_hasher().verify_and_update,
        password,
        hashed_password,
    )
