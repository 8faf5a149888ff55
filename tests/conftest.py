"""
Pytest configuration and shared fixtures for the MicroGuide test suite.
"""

import os
from datetime import datetime, timedelta
from uuid import UUID

import jwt
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# Set test environment before importing app
os.environ["MG_ENVIRONMENT"] = "test"
os.environ["MG_DB_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["MG_JWT_PUBLIC_KEY"] = "test-secret"
os.environ["MG_JWT_ALGORITHM"] = "HS256"
os.environ["MG_RATE_LIMIT_REQUESTS"] = "999999"
os.environ["MG_SETTLE_DELAY_SECONDS"] = "0"
os.environ["MG_VERIFY_DELAY_SECONDS"] = "0"
os.environ["MG_CACHE_BACKEND"] = "memory"
os.environ["MG_LOG_JSON"] = "false"
# No completion key: the collaborator stays disabled and nothing leaves the box
os.environ.pop("MG_COMPLETION_API_KEY", None)

import microguide.models  # noqa: E402,F401
from microguide.config import get_settings  # noqa: E402
from microguide.db.base import Base, enable_sqlite_foreign_keys  # noqa: E402
from microguide.services.cache import QueryCache  # noqa: E402

settings = get_settings()

TEST_USER_ID = "550e8400-e29b-41d4-a716-446655440000"
OTHER_USER_ID = "550e8400-e29b-41d4-a716-446655440099"


@pytest_asyncio.fixture
async def test_engine():
    """A fresh in-memory database per test."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    enable_sqlite_foreign_keys(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine):
    """Create a test database session."""
    async_session = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session() as session:
        yield session
        await session.rollback()


@pytest.fixture
def cache():
    return QueryCache(ttl_seconds=settings.cache_ttl_seconds)


@pytest.fixture
def test_user_id():
    return UUID(TEST_USER_ID)


@pytest.fixture
def other_user_id():
    return UUID(OTHER_USER_ID)


def make_token(user_id: str) -> str:
    payload = {
        "sub": user_id,
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "exp": datetime.utcnow() + timedelta(hours=1),
        "iat": datetime.utcnow(),
    }
    # Must match MG_JWT_PUBLIC_KEY / MG_JWT_ALGORITHM
    return jwt.encode(payload, "test-secret", algorithm="HS256")


@pytest.fixture
def test_jwt_token():
    return make_token(TEST_USER_ID)


@pytest.fixture
def other_jwt_token():
    return make_token(OTHER_USER_ID)


@pytest.fixture
def app():
    """Create test app instance with its own in-memory store."""
    from microguide.server import create_app

    return create_app()


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_client(client, test_jwt_token):
    """Create an authenticated test client."""
    client.headers.update({"Authorization": f"Bearer {test_jwt_token}"})
    return client


@pytest.fixture
def sample_path_data():
    return {
        "title": "Knife Skills Basics",
        "description": "Practice the core cuts every cook needs",
        "topic": "business",
        "difficulty_level": "beginner",
        "estimated_duration": 6,
        "tags": ["cooking", "knife"],
        "nodes": [
            {
                "title": "Holding the knife",
                "description": "Pinch grip and the claw",
                "content_type": "video",
                "estimated_duration": 20,
                "order_index": 1,
            },
            {
                "title": "Dicing an onion",
                "content_type": "exercise",
                "estimated_duration": 30,
                "order_index": 2,
            },
        ],
    }
