"""Repository for pending one-time passcodes."""

from datetime import datetime

from sqlalchemy import delete

from app.models import OTPVerificationDB
from app.repositories.base import BaseRepository


class OTPRepository(BaseRepository[OTPVerificationDB]):
    """One row per email; storing a new code replaces the previous one."""

    model = OTPVerificationDB
    id_field = "email"

    async def get(self, email: str) -> OTPVerificationDB | None:
        return await self.get_by_field("email", email)

    async def replace(self, email: str, otp_hash: str, expires_at: datetime) -> OTPVerificationDB:
        """
        Store a code for ``email``, dropping any earlier one in the same transaction.

        Args:
            email: Recipient email
            otp_hash: Hash of the code
            expires_at: Expiry instant

        Returns:
            OTPVerificationDB: Committed record
        """
        await self.session.execute(
            delete(OTPVerificationDB).where(OTPVerificationDB.email == email),
        )
        return await self.save(
            OTPVerificationDB(email=email, otp_hash=otp_hash, expires_at=expires_at),
        )

    async def remove(self, email: str, *, commit: bool = True) -> int:
        """Delete the record for ``email``; returns how many rows went."""
        result = await self.session.execute(
            delete(OTPVerificationDB).where(OTPVerificationDB.email == email),
        )
        if commit:
            await self.commit()
        return result.rowcount or 0

    async def delete_expired(self, now: datetime) -> int:
        """Delete every record whose expiry is before ``now``; returns how many."""
        result = await self.session.execute(
            delete(OTPVerificationDB).where(OTPVerificationDB.expires_at < now),
        )
        await self.commit()
        return result.rowcount or 0
