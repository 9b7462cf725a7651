# tests/services/test_otp_service.py
"""Tests for the OTP state machine."""

from collections.abc import AsyncGenerator
from datetime import timedelta
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import transaction
from app.repositories import OTPRepository
from app.services.otp import OTPService, generate_otp
from app.utils.helpers import utc_now

EMAIL = "otp@example.com"


@pytest.fixture
async def session(db: None) -> AsyncGenerator[AsyncSession]:
    async with transaction() as session:
        yield session


@pytest.fixture
def service(session: AsyncSession) -> OTPService:
    return OTPService(OTPRepository(session))


def test_generate_otp_is_six_digits() -> None:
    codes = {generate_otp() for _ in range(50)}
    assert all(len(code) == 6 and code.isdigit() for code in codes)
    assert len(codes) > 1


@pytest.mark.asyncio
async def test_issue_stores_hash_not_code(service: OTPService) -> None:
    otp = await service.issue(EMAIL)
    record = await service.repo.get(EMAIL)
    assert record is not None
    assert record.otp_hash != otp


@pytest.mark.asyncio
async def test_verify_succeeds_once(service: OTPService, session: AsyncSession) -> None:
    otp = await service.issue(EMAIL)

    assert await service.verify(EMAIL, otp) is True
    await session.commit()

    assert await service.verify(EMAIL, otp) is False


@pytest.mark.asyncio
async def test_mismatch_keeps_record(service: OTPService) -> None:
    otp = await service.issue(EMAIL)
    wrong = "000000" if otp != "000000" else "999999"

    assert await service.verify(EMAIL, wrong) is False
    assert await service.repo.get(EMAIL) is not None
    assert await service.verify(EMAIL, otp) is True


@pytest.mark.asyncio
async def test_expired_code_fails_and_is_removed(service: OTPService) -> None:
    otp = await service.issue(EMAIL)
    record = await service.repo.get(EMAIL)
    await service.repo.replace(EMAIL, record.otp_hash, utc_now() - timedelta(seconds=1))

    assert await service.verify(EMAIL, otp) is False
    assert await service.repo.get(EMAIL) is None


@pytest.mark.asyncio
async def test_reissue_replaces_previous(service: OTPService) -> None:
    await service.issue(EMAIL)
    second = await service.issue(EMAIL)

    assert await service.repo.count() == 1
    assert await service.verify(EMAIL, second) is True


@pytest.mark.asyncio
async def test_missing_record(service: OTPService) -> None:
    assert await service.verify("nobody@example.com", "123456") is False


@pytest.mark.asyncio
async def test_clean_expired(service: OTPService) -> None:
    await service.issue("live@example.com")
    await service.repo.replace("dead@example.com", "hash", utc_now() - timedelta(minutes=5))

    assert await service.clean_expired() == 1
    assert await service.repo.get("live@example.com") is not None
    assert await service.repo.get("dead@example.com") is None


@pytest.mark.asyncio
async def test_remove_reports_deleted_rows(service: OTPService) -> None:
    await service.issue(EMAIL)
    assert await service.repo.remove(EMAIL) == 1
    assert await service.repo.remove(EMAIL) == 0


@pytest.mark.asyncio
async def test_racing_verifications_consume_code_once(db: None) -> None:
    async with transaction() as session:
        otp = await OTPService(OTPRepository(session)).issue(EMAIL)

    async with transaction() as first, transaction() as second:
        winner = OTPService(OTPRepository(first))
        loser = OTPService(OTPRepository(second))
        # Both sessions have read the pending record before either deletes it
        loser.repo.get = AsyncMock(return_value=await loser.repo.get(EMAIL))

        assert await winner.verify(EMAIL, otp) is True
        await first.commit()

        assert await loser.verify(EMAIL, otp) is False
