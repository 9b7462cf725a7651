"""One-time passcode database model."""

from datetime import datetime
from typing import cast

from sqlalchemy import DateTime
from sqlalchemy.orm import declared_attr
from sqlmodel import Column, Field, SQLModel, String

from app.utils.helpers import utc_now


class OTPVerificationDB(SQLModel, table=True):
    """Pending email verification code; keyed by email so at most one is active."""

    __tablename__ = cast("declared_attr[str]", "otp_verification")

    email: str = Field(
        sa_column=Column(String(255), primary_key=True),
        description="Email the code was sent to",
    )
    otp_hash: str = Field(
        sa_column=Column(String(255), nullable=False),
        description="Argon2 hash of the code",
    )
    expires_at: datetime = Field(
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True),
    )
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
