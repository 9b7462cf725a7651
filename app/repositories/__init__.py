"""Repository layer for database operations."""

from app.repositories.blog import BlogRepository
from app.repositories.comment import CommentRepository
from app.repositories.otp import OTPRepository
from app.repositories.user import UserRepository

__all__ = ["BlogRepository", "CommentRepository", "OTPRepository", "UserRepository"]
