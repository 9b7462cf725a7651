"""Periodic removal of expired verification codes and stale unverified accounts."""

from asyncio import CancelledError, Task, create_task, gather
from asyncio import sleep as asyncio_sleep
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager, suppress
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from app.configs import settings
from app.db import transaction
from app.monitoring import get_logger
from app.repositories import OTPRepository, UserRepository
from app.services.otp import OTPService
from app.utils.helpers import utc_now

logger = get_logger(__name__)

type SessionFactory = Callable[[], AbstractAsyncContextManager[AsyncSession]]


class CleanupScheduler:
    """
    Runs the cleanup sweep once on start and then every ``interval_minutes``.

    Each sweep deletes expired OTP records and accounts that are still
    unverified ``unverified_ttl_hours`` after creation. The two deletions run
    concurrently, each in its own transaction.
    """

    def __init__(
        self,
        interval_minutes: int = settings.CLEANUP_INTERVAL_MINUTES,
        unverified_ttl_hours: int = settings.UNVERIFIED_USER_TTL_HOURS,
        session_factory: SessionFactory = transaction,
    ) -> None:
        self.interval = interval_minutes * 60
        self.unverified_ttl = timedelta(hours=unverified_ttl_hours)
        self._session_factory = session_factory
        self._task: Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self.running:
            return
        self._task = create_task(self._loop())
        logger.info("cleanup_scheduler_started", interval_minutes=self.interval // 60)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with suppress(CancelledError):
            await self._task
        self._task = None
        logger.info("cleanup_scheduler_stopped")

    async def _loop(self) -> None:
        while True:
            await self.run_once()
            await asyncio_sleep(self.interval)

    async def _sweep_otps(self) -> int:
        async with self._session_factory() as session:
            return await OTPService(OTPRepository(session)).clean_expired()

    async def _sweep_unverified(self) -> list[str]:
        async with self._session_factory() as session:
            cutoff = utc_now() - self.unverified_ttl
            return await UserRepository(session).delete_unverified_before(cutoff)

    async def run_once(self) -> tuple[int, list[str]]:
        """
        Run one sweep.

        Failures are logged and reported as nothing removed, so one bad sweep
        never stops the schedule.

        Returns:
            tuple[int, list[str]]: Expired codes removed and emails of removed accounts
        """
        logger.info("cleanup_started")
        otps, users = await gather(
            self._sweep_otps(),
            self._sweep_unverified(),
            return_exceptions=True,
        )

        if isinstance(otps, BaseException):
            logger.error("otp_sweep_failed", error=str(otps))
            otps = 0
        if isinstance(users, BaseException):
            logger.error("unverified_sweep_failed", error=str(users))
            users = []

        if users:
            logger.info("unverified_users_removed", count=len(users), emails=users)
        logger.info("cleanup_completed", otps_removed=otps)
        return otps, users
