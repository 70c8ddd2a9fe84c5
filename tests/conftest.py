"""Shared fixtures: pinned settings and an in-process API client."""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from carelog.api.dependencies import settings_dependency
from carelog.config import Settings
from main import app


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture
def settings() -> Settings:
    """Settings independent of the developer's .env."""
    return Settings(
        timezone_name="UTC",
        latest_events_limit=10,
        strict_normalization=False,
        log_level="INFO",
    )


@pytest_asyncio.fixture
async def client(settings: Settings):
    """HTTP test client against the real app, settings overridden."""
    app.dependency_overrides[settings_dependency] = lambda: settings

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
