"""pytest fixtures shared across all tests."""

from __future__ import annotations

import os
import tempfile

# Must be set before codeshare reads its settings
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="codeshare-uploads-"))
os.environ.setdefault("APP_DEBUG", "true")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from codeshare.core.tokens import TokenConfig, TokenService
from codeshare.models.base import Base

# SQLite in-memory for tests, no PostgreSQL required.
# Each test function gets its own fresh DB to avoid cross-test pollution.
TEST_DB_URL = "sqlite+aiosqlite:///:memory:"

TEST_TOKEN_CONFIG = TokenConfig(
    access_secret="test-access-secret",
    refresh_secret="test-refresh-secret",
)


@pytest_asyncio.fixture
async def engine():
    """Create a fresh in-memory SQLite engine per test function."""
    eng = create_async_engine(
        TEST_DB_URL,
        echo=False,
        connect_args={"check_same_thread": False},
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    """Yield an async session bound to the test engine."""
    factory = async_sessionmaker(engine, expire_on_commit=False, autoflush=True)
    async with factory() as session:
        yield session


@pytest.fixture
def token_service() -> TokenService:
    return TokenService(TEST_TOKEN_CONFIG)


@pytest.fixture
def app(engine, token_service):
    """FastAPI app wired to the test DB and test token secrets."""
    from codeshare.api.app import create_app
    from codeshare.api.dependencies import get_db, get_token_service
    from codeshare.core.limiter import limiter

    application = create_app()
    factory = async_sessionmaker(engine, expire_on_commit=False, autoflush=True)

    async def override_db():
        async with factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    application.dependency_overrides[get_db] = override_db
    application.dependency_overrides[get_token_service] = lambda: token_service

    # Rate-limit counters live in process memory; start every test clean
    limiter.reset()
    return application


@pytest_asyncio.fixture
async def client(app):
    """HTTPX async test client wired to the FastAPI app with a test DB."""
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def register(client):
    """Register a user through the API; returns the JSON body with a ``headers`` key."""

    async def _register(username: str = "alice", email: str | None = None,
                        password: str = "secret1") -> dict:
        r = await client.post(
            "/api/v1/auth/register",
            json={
                "username": username,
                "email": email or f"{username}@example.com",
                "password": password,
            },
        )
        assert r.status_code == 201, r.text
        data = r.json()
        data["headers"] = bearer(data["access_token"])
        return data

    return _register
