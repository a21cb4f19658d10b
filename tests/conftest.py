"""
Global pytest configuration and fixtures for the Wayfare API test suite.
"""

import os
from typing import Any, Dict
from unittest.mock import AsyncMock, Mock

# Set test environment before the application settings are loaded
os.environ["JWT_SECRET"] = "test-secret-key-for-testing-only-32-chars"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"

import jwt  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

from wayfare.main import app  # noqa: E402

# Import fixtures from fixture modules
from tests.fixtures.auth_fixtures import *  # noqa: F403, F401, E402
from tests.fixtures.database_fixtures import *  # noqa: F403, F401, E402


@pytest.fixture
def mock_db() -> Mock:
    """
    Mock database session for unit tests that don't need a real database.
    """
    mock_session = Mock(spec=AsyncSession)
    mock_session.execute = AsyncMock()
    mock_session.scalar = AsyncMock()
    mock_session.get = AsyncMock()
    mock_session.commit = AsyncMock()
    mock_session.rollback = AsyncMock()
    mock_session.flush = AsyncMock()
    mock_session.refresh = AsyncMock()
    mock_session.delete = AsyncMock()
    return mock_session


@pytest.fixture
def test_jwt_secret() -> str:
    """JWT secret for generating test tokens."""
    return "test-secret-key-for-testing-only-32-chars"


@pytest.fixture
def valid_jwt_payload() -> Dict[str, Any]:
    """Valid JWT payload for testing."""
    return {
        "sub": "test-auth-id-123",
        "email": "owner@example.com",
        "email_verified": True,
        "name": "Olivia Owner",
        "aud": "authenticated",
    }


@pytest.fixture
def valid_jwt_token(test_jwt_secret: str, valid_jwt_payload: Dict[str, Any]) -> str:
    """Generate a valid JWT token for testing."""
    return jwt.encode(valid_jwt_payload, test_jwt_secret, algorithm="HS256")


@pytest.fixture
def auth_headers(valid_jwt_token: str) -> Dict[str, str]:
    """Generate authentication headers with valid JWT token."""
    return {"Authorization": f"Bearer {valid_jwt_token}"}


@pytest.fixture
def client() -> TestClient:
    """FastAPI test client for API endpoint testing."""
    return TestClient(app)


@pytest.fixture
def test_agency_id() -> str:
    """Standard test agency ID."""
    return "42f929b1-8fdb-45b1-a7cf-34fae2314561"


@pytest.fixture
def test_member_id() -> str:
    """Standard test member ID."""
    return "5b0c3c5e-3f69-4f0e-9a57-1d1fbb1b6a01"
