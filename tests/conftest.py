"""
Shared test fixtures.

The environment is configured before ``app`` is imported so the cached
settings point at a throwaway SQLite database with rate limiting off.
"""

import os
import tempfile
import uuid
from typing import AsyncGenerator

_TEST_DIR = tempfile.mkdtemp(prefix="task-manager-tests-")

os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_TEST_DIR, 'test.db')}"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["JWT_SECRET"] = "test-secret-key-that-is-at-least-32-characters"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["OVERDUE_REFRESH_ON_READ"] = "false"

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import close_db, create_tables, drop_tables, get_session_factory
from app.main import app
from app.models.user import User

TEST_PASSWORD = "secret123"


@pytest.fixture
async def database() -> AsyncGenerator[None, None]:
    """Fresh schema per test; the engine is disposed so each loop gets its own."""
    await create_tables()
    yield
    await drop_tables()
    await close_db()


@pytest.fixture
async def db_session(database) -> AsyncGenerator[AsyncSession, None]:
    """A session for service-level tests."""
    session_factory = get_session_factory()
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(database) -> AsyncGenerator[httpx.AsyncClient, None]:
    """ASGI client bound to the application."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c


async def make_user(session: AsyncSession, email: str = "owner@example.com") -> User:
    """Insert a user directly (no password hashing needed)."""
    user = User(
        user_id=uuid.uuid4(),
        name=email.split("@")[0],
        email=email,
        password_hash="not-a-real-hash",
    )
    session.add(user)
    await session.flush()
    return user


async def signup(
    client: httpx.AsyncClient,
    email: str,
    name: str = "Test User",
    password: str = TEST_PASSWORD,
) -> dict:
    """Register through the API and return the response data."""
    response = await client.post(
        "/api/auth/signup",
        json={"name": name, "email": email, "password": password},
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def auth_headers(client: httpx.AsyncClient) -> dict[str, str]:
    data = await signup(client, "alice@example.com", name="Alice")
    return bearer(data["token"])


@pytest.fixture
async def other_auth_headers(client: httpx.AsyncClient) -> dict[str, str]:
    data = await signup(client, "bob@example.com", name="Bob")
    return bearer(data["token"])
