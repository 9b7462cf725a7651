from app.services.auth import AuthService
from app.services.cleanup import CleanupScheduler
from app.services.otp import OTPService, generate_otp
from app.services.reorder import ReorderService
from app.services.stats import StatsService

__all__ = [
    "AuthService",
    "CleanupScheduler",
    "OTPService",
    "ReorderService",
    "StatsService",
    "generate_otp",
]
