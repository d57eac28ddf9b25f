"""
LinkUp Backend: Test Configuration (conftest.py)
==================================================

What:  Shared pytest fixtures for the entire test suite.
Why:   Provides reusable test infrastructure (real SQLite database, services,
       API client, mocked sessions for failure injection).
How:   Each test that needs a database gets its own SQLite file under
       tmp_path, so tests never share rows.

Fixture Hierarchy (all function-scoped):
    settings
    └── app: create_app(settings) with tables created
        ├── context: the app's AppContext
        │   ├── db_session: AsyncSession from the app's session factory
        │   ├── user_service / link_service / file_service
        │   └── make_user: inserts a user row directly
        └── test_client: HTTPX AsyncClient over ASGITransport
    mock_db_session: AsyncMock session (no database)
    sample_image_bytes: tiny PNG for upload tests
"""

import os
import tempfile
from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# Set BEFORE any linkup import: Settings() and get_settings() read the
# process environment
os.environ["JWT_SECRET"] = "test-secret-key-that-is-long-enough-for-hs256"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="linkup_test_")
os.environ["BCRYPT_ROUNDS"] = "4"  # minimum cost, keeps the suite fast
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

from linkup.config import Settings  # noqa: E402
from linkup.database import Base  # noqa: E402
from linkup.main import create_app  # noqa: E402
from linkup.models import User  # noqa: E402


TEST_SECRET = os.environ["JWT_SECRET"]


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings pointing at a throwaway database and upload directory."""
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'linkup.db'}",
        jwt_secret=TEST_SECRET,
        bcrypt_rounds=4,
        upload_dir=str(tmp_path / "uploads"),
        rate_limit_enabled=False,
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def app(settings):
    """
    A fresh application with its tables created.

    The lifespan is not run by ASGITransport, so the schema is created here
    and the engine disposed on teardown.
    """
    application = create_app(settings)
    context = application.state.context
    async with context.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield application
    await context.dispose()


@pytest.fixture
def context(app):
    return app.state.context


@pytest.fixture
def user_service(context):
    return context.user_service


@pytest.fixture
def link_service(context):
    return context.link_service


@pytest_asyncio.fixture
async def db_session(context) -> AsyncGenerator:
    """
    A session on the test database.

    Unlike the request dependency, nothing is committed automatically;
    tests commit when a later step must see the data.
    """
    async with context.session_factory() as session:
        yield session


@pytest.fixture
def make_user(db_session, context):
    """
    Insert a user directly (no bcrypt round trip through register()).

    Usage:
        alice = await make_user("Alice")
    """
    counter = {"n": 0}

    async def _make_user(name: str, email: str = None, password: str = "secret", **fields) -> User:
        counter["n"] += 1
        user = User(
            name=name,
            email=email or f"{name.lower().replace(' ', '.')}.{counter['n']}@example.com",
            password_hash=context.passwords.hash(password),
            **fields,
        )
        db_session.add(user)
        await db_session.commit()
        return user

    return _make_user


@pytest_asyncio.fixture
async def test_client(app) -> AsyncGenerator[AsyncClient, None]:
    """
    Async HTTP client talking to the app in-process.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def mock_db_session():
    """
    A MagicMock that simulates AsyncSession behavior.

    Used to inject SQLAlchemy failures that a real SQLite database will not
    produce on demand.
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.get = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def sample_image_bytes():
    """Smallest useful PNG: signature plus an IHDR chunk header."""
    return (
        b"\x89PNG\r\n\x1a\n"
        b"\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01\x08\x06\x00\x00\x00"
        b"\x1f\x15\xc4\x89"
    )
