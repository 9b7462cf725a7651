# tests/conftest.py
"""Root pytest configuration and shared fixtures."""

import os
from tempfile import gettempdir

# Must happen before app is imported anywhere
_TEST_DB = os.path.join(gettempdir(), f"blog-backend-test-{os.getpid()}.db")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DB}"
os.environ["ENVIRONMENT"] = "testing"
os.environ["REDIS_ENABLED"] = "false"
os.environ["LOG_TO_FILE"] = "false"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["CLEANUP_ENABLED"] = "false"
os.environ["PASSWORD_SECURITY_LEVEL"] = "low"
os.environ["OWNER_EMAIL"] = "owner@example.com"
os.environ["SECRET_KEY"] = "test-secret-key-with-enough-length-for-hs256"

from collections.abc import AsyncGenerator, Awaitable, Callable
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient
from sqlmodel import SQLModel

from app.clients.email_client import EmailClient
from app.db import engine, transaction
from app.dependencies import get_email_client
from app.main import app
from app.managers.cache_manager import CacheManager
from app.managers.password_manager import hash_password
from app.managers.rate_limiter import limiter
from app.managers.token_manager import create_access_token
from app.models import BlogDB, UserDB
from app.repositories import BlogRepository, UserRepository
from app.schemas import BlogCreate

OWNER_EMAIL = "owner@example.com"
PASSWORD = "correct-horse-battery"

type UserFactory = Callable[..., Awaitable[UserDB]]
type BlogFactory = Callable[..., Awaitable[BlogDB]]


@pytest.fixture
async def db() -> AsyncGenerator[None]:
    """Create every table before the test and drop them afterwards."""
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def cache_manager() -> AsyncGenerator[CacheManager]:
    """In-memory cache manager bound to the app, as the lifespan would do."""
    manager = CacheManager()
    await manager.initialize()
    app.state.cache_manager = manager
    yield manager
    await manager.shutdown()
    app.state.cache_manager = None


@pytest.fixture
def email_client() -> MagicMock:
    """Email client that records OTP emails instead of sending them."""
    mock = MagicMock(spec=EmailClient)
    mock.send_otp_email = AsyncMock(return_value=None)
    return mock


@pytest.fixture
async def client(
    db: None,
    cache_manager: CacheManager,
    email_client: MagicMock,
) -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for testing."""
    limiter.enabled = False
    app.dependency_overrides[get_email_client] = lambda: email_client
    async with AsyncClient(
        base_url="http://test",
        transport=ASGITransport(app=app, raise_app_exceptions=False),
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def user_factory(db: None) -> UserFactory:
    """Insert users straight into the database."""

    async def _create(
        email: str,
        *,
        verified: bool = True,
        name: str = "Reader",
        password: str = PASSWORD,
    ) -> UserDB:
        async with transaction() as session:
            repo = UserRepository(session)
            user = await repo.create(email, await hash_password(password), name, None)
            if verified:
                user = await repo.mark_verified(user)
        return user

    return _create


@pytest.fixture
def blog_factory(db: None) -> BlogFactory:
    """Insert blog posts straight into the database."""

    async def _create(
        author: UserDB,
        title: str = "A post",
        content: str = "Some content",
        tags: list[str] | None = None,
    ) -> BlogDB:
        async with transaction() as session:
            return await BlogRepository(session).create(
                BlogCreate(
                    title=title,
                    content=content,
                    tags=tags or [],
                    image="https://images.example.com/cover.webp",
                ),
                author_id=author.id,
            )

    return _create


def bearer(user: UserDB) -> dict[str, str]:
    """Authorization header carrying a fresh token for ``user``."""
    token = create_access_token(user_id=user.id, email=user.email, name=user.name)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def owner(user_factory: UserFactory) -> UserDB:
    return await user_factory(OWNER_EMAIL, name="Owner")


@pytest.fixture
def owner_headers(owner: UserDB) -> dict[str, str]:
    return bearer(owner)


@pytest.fixture
async def reader(user_factory: UserFactory) -> UserDB:
    return await user_factory("reader@example.com")


@pytest.fixture
def reader_headers(reader: UserDB) -> dict[str, str]:
    return bearer(reader)


@pytest.fixture
def headers_for() -> Callable[[UserDB], dict[str, str]]:
    return bearer
