"""Pytest configuration for integration tests.

These tests require DATABASE_URL_APP to point at a database where
``db/antifraud_schema.sql`` has been applied (uv run db-init).
"""

import os

import pytest

from antifraud.core.auth import ROLES, AuthenticatedUser, get_current_user
from antifraud.core.database import create_async_engine, create_session_factory, reset_engine


def pytest_collection_modifyitems(config, items):
    if os.environ.get("DATABASE_URL_APP"):
        return
    skip = pytest.mark.skip(reason="DATABASE_URL_APP is not set")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip)


@pytest.fixture
async def engine():
    """Create test database engine."""
    from antifraud.core.config import get_settings

    engine = create_async_engine(get_settings().database)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
async def session(session_factory):
    """Session that is rolled back when the test ends."""
    async with session_factory() as s:
        yield s
        await s.rollback()


@pytest.fixture
async def client_app():
    """FastAPI app whose caller holds every role."""
    from antifraud.core.dependencies import reset_risk_engine
    from antifraud.main import create_app

    app = create_app()

    def mock_current_user() -> AuthenticatedUser:
        return AuthenticatedUser(user_id="test_user_integration", roles=list(ROLES))

    app.dependency_overrides[get_current_user] = mock_current_user
    yield app

    reset_risk_engine()
    await reset_engine()
