# tests/routes/test_auth_routes.py
"""Tests for registration, login and email verification endpoints."""

from datetime import timedelta
from unittest.mock import MagicMock

import pytest
from httpx import AsyncClient
from sqlalchemy import update

from app.db import transaction
from app.errors import SendingError
from app.models import OTPVerificationDB, UserDB
from app.utils.helpers import utc_now

REGISTRATION = {"email": "new@example.com", "password": "hunter2hunter2", "name": "Newcomer"}


def _sent_otp(email_client: MagicMock) -> str:
    """Code passed to the most recent OTP email."""
    return email_client.send_otp_email.await_args.args[2]


async def _register(client: AsyncClient, **overrides: str) -> dict:
    response = await client.post("/api/auth/register", json={**REGISTRATION, **overrides})
    assert response.status_code == 201
    return response.json()


class TestRegister:
    """Tests for POST /api/auth/register."""

    @pytest.mark.asyncio
    async def test_register_sends_otp(self, client: AsyncClient, email_client: MagicMock) -> None:
        body = await _register(client)

        assert body["message"] == "Registration successful. Please verify your email with the OTP sent."
        user = body["data"]["user"]
        assert user["email"] == REGISTRATION["email"]
        assert user["isVerified"] is False
        assert user["isOwner"] is False
        assert user["profileImage"].startswith("https://api.dicebear.com/")
        assert body["data"]["token"]

        email_client.send_otp_email.assert_awaited_once()
        otp = _sent_otp(email_client)
        assert len(otp) == 6
        assert otp.isdigit()

    @pytest.mark.asyncio
    async def test_register_sets_cookie(self, client: AsyncClient) -> None:
        response = await client.post("/api/auth/register", json=REGISTRATION)
        assert "access_token" in response.cookies

    @pytest.mark.asyncio
    async def test_owner_flag(self, client: AsyncClient) -> None:
        body = await _register(client, email="Owner@Example.com")
        assert body["data"]["user"]["isOwner"] is True

    @pytest.mark.asyncio
    async def test_duplicate_email_is_400(self, client: AsyncClient) -> None:
        await _register(client)
        response = await client.post("/api/auth/register", json=REGISTRATION)
        assert response.status_code == 400
        assert response.json()["error"] == "User already exists"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [
            {"email": "not-an-email", "password": "x", "name": "A"},
            {"email": "a@example.com", "name": "A"},
            {"email": "a@example.com", "password": "x"},
            {**REGISTRATION, "profileImage": "javascript:alert(1)"},
        ],
    )
    async def test_invalid_payload_is_400(self, client: AsyncClient, payload: dict) -> None:
        response = await client.post("/api/auth/register", json=payload)
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_email_failure_is_not_surfaced(
        self,
        client: AsyncClient,
        email_client: MagicMock,
    ) -> None:
        email_client.send_otp_email.side_effect = SendingError()
        response = await client.post("/api/auth/register", json=REGISTRATION)
        assert response.status_code == 201


class TestLogin:
    """Tests for POST /api/auth/login."""

    @pytest.mark.asyncio
    async def test_login(self, client: AsyncClient) -> None:
        await _register(client)
        response = await client.post(
            "/api/auth/login",
            json={"email": REGISTRATION["email"], "password": REGISTRATION["password"]},
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["user"]["email"] == REGISTRATION["email"]

        me = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {data['token']}"})
        assert me.json()["data"]["user"]["name"] == REGISTRATION["name"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("email", "password"),
        [("new@example.com", "wrong-password"), ("ghost@example.com", "hunter2hunter2")],
    )
    async def test_bad_credentials_are_401(
        self,
        client: AsyncClient,
        email: str,
        password: str,
    ) -> None:
        await _register(client)
        response = await client.post("/api/auth/login", json={"email": email, "password": password})
        assert response.status_code == 401
        assert response.json() == {"success": False, "error": "Invalid credentials"}


class TestMe:
    """Tests for GET /api/auth/me."""

    @pytest.mark.asyncio
    async def test_without_token_is_401(self, client: AsyncClient) -> None:
        assert (await client.get("/api/auth/me")).status_code == 401

    @pytest.mark.asyncio
    async def test_invalid_token_is_401(self, client: AsyncClient) -> None:
        response = await client.get("/api/auth/me", headers={"Authorization": "Bearer abc.def.ghi"})
        assert response.status_code == 401
        assert response.json()["error"] == "Invalid or expired token"

    @pytest.mark.asyncio
    async def test_vanished_user_is_404(self, client: AsyncClient, headers_for) -> None:
        ghost = UserDB(id=4242, email="ghost@example.com", password_hash="x", name="Ghost")
        response = await client.get("/api/auth/me", headers=headers_for(ghost))
        assert response.status_code == 404
        assert response.json()["error"] == "User not found"


class TestVerifyOTP:
    """Tests for POST /api/auth/verify-otp."""

    @pytest.mark.asyncio
    async def test_verify_once(self, client: AsyncClient, email_client: MagicMock) -> None:
        await _register(client)
        otp = _sent_otp(email_client)

        response = await client.post(
            "/api/auth/verify-otp",
            json={"email": REGISTRATION["email"], "otp": otp},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Email verified successfully"
        assert body["data"]["user"]["isVerified"] is True

        replay = await client.post(
            "/api/auth/verify-otp",
            json={"email": REGISTRATION["email"], "otp": otp},
        )
        assert replay.status_code == 400
        assert replay.json()["error"] == "User already verified"

    @pytest.mark.asyncio
    async def test_wrong_code_is_400(self, client: AsyncClient, email_client: MagicMock) -> None:
        await _register(client)
        wrong = "000000" if _sent_otp(email_client) != "000000" else "111111"

        response = await client.post(
            "/api/auth/verify-otp",
            json={"email": REGISTRATION["email"], "otp": wrong},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid or expired OTP"

    @pytest.mark.asyncio
    async def test_expired_code_is_400_and_consumed(
        self,
        client: AsyncClient,
        email_client: MagicMock,
    ) -> None:
        await _register(client)
        otp = _sent_otp(email_client)
        async with transaction() as session:
            await session.execute(
                update(OTPVerificationDB)
                .where(OTPVerificationDB.email == REGISTRATION["email"])
                .values(expires_at=utc_now() - timedelta(minutes=1)),
            )

        payload = {"email": REGISTRATION["email"], "otp": otp}
        response = await client.post("/api/auth/verify-otp", json=payload)
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid or expired OTP"

        async with transaction() as session:
            assert await session.get(OTPVerificationDB, REGISTRATION["email"]) is None

    @pytest.mark.asyncio
    async def test_superseded_code_fails(self, client: AsyncClient, email_client: MagicMock) -> None:
        await _register(client)
        first = _sent_otp(email_client)
        await client.post("/api/auth/resend-otp", json={"email": REGISTRATION["email"]})
        second = _sent_otp(email_client)

        if first != second:
            stale = await client.post(
                "/api/auth/verify-otp",
                json={"email": REGISTRATION["email"], "otp": first},
            )
            assert stale.status_code == 400

        fresh = await client.post(
            "/api/auth/verify-otp",
            json={"email": REGISTRATION["email"], "otp": second},
        )
        assert fresh.status_code == 200

    @pytest.mark.asyncio
    async def test_unknown_user_is_404(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/auth/verify-otp",
            json={"email": "nobody@example.com", "otp": "123456"},
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_malformed_code_is_400(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/auth/verify-otp",
            json={"email": "nobody@example.com", "otp": "12ab"},
        )
        assert response.status_code == 400


class TestResendOTP:
    """Tests for POST /api/auth/resend-otp."""

    @pytest.mark.asyncio
    async def test_resend(self, client: AsyncClient, email_client: MagicMock) -> None:
        await _register(client)
        response = await client.post("/api/auth/resend-otp", json={"email": REGISTRATION["email"]})
        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "OTP sent successfully"}
        assert email_client.send_otp_email.await_count == 2

    @pytest.mark.asyncio
    async def test_already_verified_is_400(self, client: AsyncClient, reader: UserDB) -> None:
        response = await client.post("/api/auth/resend-otp", json={"email": reader.email})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_is_404(self, client: AsyncClient) -> None:
        response = await client.post("/api/auth/resend-otp", json={"email": "x@example.com"})
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_delivery_failure_is_500(
        self,
        client: AsyncClient,
        email_client: MagicMock,
    ) -> None:
        await _register(client)
        email_client.send_otp_email.side_effect = SendingError()

        response = await client.post("/api/auth/resend-otp", json={"email": REGISTRATION["email"]})
        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "Failed to send OTP email"}
