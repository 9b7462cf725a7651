"""Database models for the application."""

from app.models.blog import BlogDB, CommentDB
from app.models.otp import OTPVerificationDB
from app.models.user import UserDB, UserProfileDB

__all__ = ["BlogDB", "CommentDB", "OTPVerificationDB", "UserDB", "UserProfileDB"]
