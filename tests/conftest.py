"""Shared fixtures: an in-memory database, the ASGI client and test users."""

import os

# Settings are read at import time, so the environment comes first
os.environ.setdefault("SECRET_KEY", "test-secret-key-with-at-least-32-characters")
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool, StaticPool

from profusion.api.deps import get_password_hasher, get_token_service
from profusion.core.database import get_db
from profusion.core.security import PasswordHasher
from profusion.main import app
from profusion.models import Base
from profusion.services.tokens import TokenService

TEST_SECRET = "unit-test-signing-secret-0123456789abcdef"
STRONG_PASSWORD = "Abc123!@"


@pytest.fixture
def hasher():
    # Minimum bcrypt cost keeps the suite fast
    return PasswordHasher(rounds=4)


@pytest.fixture
def token_service():
    return TokenService(secret=TEST_SECRET)


def _enforce_foreign_keys(engine):
    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, _record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    _enforce_foreign_keys(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def file_session_maker(tmp_path):
    """Sessions on separate connections to one on-disk database.

    The in-memory engine shares a single connection, so tests that race
    transactions against each other need this one instead.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'race.db'}",
        poolclass=NullPool,
        connect_args={"timeout": 30},
    )
    _enforce_foreign_keys(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_maker, hasher, token_service):
    async def override_get_db():
        async with session_maker() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_password_hasher] = lambda: hasher
    app.dependency_overrides[get_token_service] = lambda: token_service

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def register_user(client):
    """Register an account, log it in and return ``{"user", "token", "headers"}``."""

    async def _register(name: str, email: str, password: str = STRONG_PASSWORD, **extra) -> dict:
        response = await client.post(
            "/api/users/register",
            json={"name": name, "email": email, "password": password, **extra},
        )
        assert response.status_code == 201, response.text

        response = await client.post("/api/users/login", json={"email": email, "password": password})
        assert response.status_code == 200, response.text
        token = response.json()["token"]
        return {
            "user": response.json()["user"],
            "token": token,
            "headers": {"Authorization": f"Bearer {token}"},
        }

    return _register


@pytest_asyncio.fixture
async def admin(register_user):
    # The first account becomes the administrator
    return await register_user("Admin", "admin@example.com")


@pytest_asyncio.fixture
async def member(admin, register_user):
    return await register_user("Member", "member@example.com")


@pytest_asyncio.fixture
async def outsider(member, register_user):
    return await register_user("Outsider", "outsider@example.com")
