# tests/services/test_cleanup.py
"""Tests for the periodic cleanup of stale OTPs and unverified accounts."""

from asyncio import sleep
from datetime import timedelta

import pytest
from sqlalchemy import update

from app.db import transaction
from app.models import UserDB
from app.repositories import OTPRepository, UserRepository
from app.services.cleanup import CleanupScheduler
from app.utils.helpers import utc_now


async def _age_user(email: str, hours: int) -> None:
    async with transaction() as session:
        await session.execute(
            update(UserDB)
            .where(UserDB.email == email)
            .values(created_at=utc_now() - timedelta(hours=hours)),
        )


@pytest.mark.asyncio
async def test_run_once_removes_stale_rows(user_factory) -> None:
    await user_factory("stale@example.com", verified=False)
    await user_factory("recent@example.com", verified=False)
    await user_factory("old-but-verified@example.com", verified=True)
    await _age_user("stale@example.com", 25)
    await _age_user("old-but-verified@example.com", 100)

    async with transaction() as session:
        repo = OTPRepository(session)
        await repo.replace("expired@example.com", "h", utc_now() - timedelta(minutes=1))
        await repo.replace("pending@example.com", "h", utc_now() + timedelta(minutes=5))

    scheduler = CleanupScheduler(interval_minutes=60, unverified_ttl_hours=24)
    otps_removed, emails = await scheduler.run_once()

    assert otps_removed == 1
    assert emails == ["stale@example.com"]

    async with transaction() as session:
        users = UserRepository(session)
        assert await users.get_by_email("stale@example.com") is None
        assert await users.get_by_email("recent@example.com") is not None
        assert await users.get_by_email("old-but-verified@example.com") is not None
        assert await OTPRepository(session).get("pending@example.com") is not None


@pytest.mark.asyncio
async def test_failed_sweep_does_not_raise(db: None) -> None:
    def broken_factory():
        raise RuntimeError("database unreachable")

    scheduler = CleanupScheduler(session_factory=broken_factory)
    assert await scheduler.run_once() == (0, [])


@pytest.mark.asyncio
async def test_start_runs_immediately_and_stop_cancels(db: None) -> None:
    scheduler = CleanupScheduler(interval_minutes=60)
    calls = 0
    original = scheduler.run_once

    async def counting_run_once() -> tuple[int, list[str]]:
        nonlocal calls
        calls += 1
        return await original()

    scheduler.run_once = counting_run_once
    await scheduler.start()
    await scheduler.start()
    await sleep(0.5)

    assert scheduler.running
    assert calls == 1

    await scheduler.stop()
    assert not scheduler.running
