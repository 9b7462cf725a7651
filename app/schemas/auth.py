"""Authentication request and response schemas."""

from pydantic import BaseModel, EmailStr, Field, SecretStr, field_validator

from app.configs.settings import OTP_LENGTH
from app.schemas.blog import validate_image_url
from app.schemas.common import CamelModel


class RegisterRequest(CamelModel):
    email: EmailStr = Field(..., examples=["jane@example.com"])
    password: SecretStr = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=255)
    profile_image: str | None = Field(default=None, description="Avatar URL; generated when omitted")

    @field_validator("profile_image")
    @classmethod
    def check_profile_image(cls, v: str | None) -> str | None:
        return validate_image_url(v) if v else None


class LoginRequest(CamelModel):
    email: EmailStr
    password: SecretStr = Field(..., min_length=1)


class VerifyOTPRequest(CamelModel):
    email: EmailStr
    otp: str = Field(..., pattern=rf"^\d{{{OTP_LENGTH}}}$", examples=["123456"])


class ResendOTPRequest(CamelModel):
    email: EmailStr


class UserOut(CamelModel):
    """Public view of a user account."""

    id: int
    email: str
    name: str
    profile_image: str | None = None
    is_verified: bool
    is_owner: bool


class AuthOut(CamelModel):
    token: str
    user: UserOut


class TokenData(BaseModel):
    """Claims extracted from a verified access token."""

    user_id: int
    email: str
    name: str = ""
    is_owner: bool = False
    jti: str | None = None
