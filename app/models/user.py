"""User and user profile database models using SQLModel."""

from datetime import datetime
from typing import cast

from pydantic import ConfigDict
from sqlalchemy import Boolean, DateTime, Integer, Text
from sqlalchemy.orm import declared_attr
from sqlmodel import Column, Field, ForeignKey, SQLModel, String

from app.utils.helpers import utc_now


class UserDB(SQLModel, table=True):
    """
    Registered account.

    Accounts start unverified; the cleanup job removes any account still
    unverified a fixed time after ``created_at``.
    """

    __tablename__ = cast("declared_attr[str]", "users")

    id: int | None = Field(
        default=None,
        sa_column=Column(Integer, primary_key=True, autoincrement=True),
        description="User ID",
    )
    email: str = Field(
        sa_column=Column(String(255), unique=True, nullable=False, index=True),
        description="Email address (unique)",
    )
    password_hash: str = Field(
        sa_column=Column(String(255), nullable=False),
        description="Argon2 password hash",
    )
    name: str = Field(
        sa_column=Column(String(255), nullable=False),
        description="Display name",
    )
    profile_image: str | None = Field(
        default=None,
        sa_column=Column(String(500)),
        description="Profile image URL",
    )
    is_verified: bool = Field(
        default=False,
        sa_column=Column(Boolean, nullable=False, default=False, index=True),
        description="Whether the email address has been verified",
    )

    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True),
        description="Creation timestamp",
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
        description="Last update timestamp",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": 1,
                "email": "jane@example.com",
                "name": "Jane Doe",
                "profile_image": "https://api.dicebear.com/9.x/lorelei/webp?seed=42&flip=true",
                "is_verified": False,
            },
        },
    )


class UserProfileDB(SQLModel, table=True):
    """Optional profile details, one row per user."""

    __tablename__ = cast("declared_attr[str]", "user_profiles")

    id: int | None = Field(
        default=None,
        sa_column=Column(Integer, primary_key=True, autoincrement=True),
    )
    user_id: int = Field(
        sa_column=Column(
            "user_id",
            Integer,
            ForeignKey("users.id", ondelete="CASCADE"),
            unique=True,
            nullable=False,
        ),
        description="Owning user (one-to-one)",
    )
    first_name: str | None = Field(default=None, sa_column=Column(String(100)))
    last_name: str | None = Field(default=None, sa_column=Column(String(100)))
    bio: str | None = Field(default=None, sa_column=Column(Text))
    avatar: str | None = Field(default=None, sa_column=Column(String(500)))
    website: str | None = Field(default=None, sa_column=Column(String(500)))
    location: str | None = Field(default=None, sa_column=Column(String(255)))
    date_of_birth: str | None = Field(
        default=None,
        sa_column=Column(String(10)),
        description="Date of birth (YYYY-MM-DD)",
    )

    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
