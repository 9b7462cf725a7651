"""
One-time passcode lifecycle.

A code moves from absent to pending when issued, and leaves pending either
by a successful verification (record deleted) or by expiring (record deleted
on the failed attempt or by the periodic sweep).
"""

from datetime import timedelta
from secrets import choice
from string import digits

from app.configs import settings
from app.configs.settings import OTP_LENGTH
from app.managers.password_manager import hash_password, verify_password
from app.monitoring import get_logger
from app.repositories import OTPRepository
from app.utils.helpers import as_utc, utc_now

logger = get_logger(__name__)


def generate_otp() -> str:
    """Cryptographically random numeric code."""
    return "".join(choice(digits) for _ in range(OTP_LENGTH))


class OTPService:
    """Issues, checks and sweeps verification codes."""

    def __init__(self, repo: OTPRepository) -> None:
        self.repo = repo

    async def issue(self, email: str) -> str:
        """
        Create a fresh code for ``email``, replacing any pending one.

        Args:
            email: Recipient email

        Returns:
            str: The plain code, to be delivered out of band
        """
        otp = generate_otp()
        otp_hash = await hash_password(otp)
        expires_at = utc_now() + timedelta(minutes=settings.OTP_EXPIRY_MINUTES)
        await self.repo.replace(email, otp_hash, expires_at)
        logger.info("otp_stored", email=email, expires_at=expires_at.isoformat())
        return otp

    async def verify(self, email: str, otp: str) -> bool:
        """
        Check ``otp`` against the pending code for ``email``.

        An expired record is deleted and committed before returning False. A
        matching record is deleted without committing, so the caller's next
        commit removes it together with its own changes. Only the verification
        whose delete actually removed the row succeeds.

        Args:
            email: Email the code was sent to
            otp: Code supplied by the user

        Returns:
            bool: True when the code matched and had not expired
        """
        record = await self.repo.get(email)
        if record is None:
            logger.info("otp_missing", email=email)
            return False

        if utc_now() >= as_utc(record.expires_at):
            logger.info("otp_expired", email=email)
            await self.repo.remove(email)
            return False

        if not await verify_password(otp, record.otp_hash):
            logger.info("otp_mismatch", email=email)
            return False

        if await self.repo.remove(email, commit=False) != 1:
            # Consumed by a concurrent verification
            logger.info("otp_already_used", email=email)
            return False
        logger.info("otp_verified", email=email)
        return True

    async def clean_expired(self) -> int:
        removed = await self.repo.delete_expired(utc_now())
        logger.info("otp_sweep", removed=removed)
        return removed
