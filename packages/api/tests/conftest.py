"""Shared fixtures for API tests.

The real app from ``fairlend.main`` is a module singleton. Each client fixture
installs a persona and a mock DB session through dependency_overrides, and
``_clean_overrides`` clears them after every test.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fairlend_db import get_db
from fastapi.testclient import TestClient

from factories import customer, employee
from fairlend.main import app as real_app
from fairlend.middleware.auth import get_current_user
from fairlend.schemas.auth import UserContext


@pytest.fixture(autouse=True)
def _clean_overrides():
    """Clear app dependency overrides after each test."""
    yield
    real_app.dependency_overrides.clear()


@pytest.fixture
def mock_session():
    session = MagicMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.execute = AsyncMock()
    return session


@pytest.fixture
def make_client(mock_session):
    """Factory fixture: install a persona and the mock session, return a TestClient."""

    def _make(user: UserContext) -> TestClient:
        async def _get_db():
            yield mock_session

        async def _get_user():
            return user

        real_app.dependency_overrides[get_db] = _get_db
        real_app.dependency_overrides[get_current_user] = _get_user
        return TestClient(real_app, raise_server_exceptions=False)

    return _make


@pytest.fixture
def customer_client(make_client):
    return make_client(customer())


@pytest.fixture
def employee_client(make_client):
    return make_client(employee())
