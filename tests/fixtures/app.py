# tests/fixtures/app.py

"""
🧩 App Fixture:
- Builds the real app via `create_app()` (middleware, handlers, limiter)
- Injects the test DB session and the recording notifier
- Returns an HTTP client fixture for integration tests
"""

from typing import AsyncGenerator

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from fintrack.core.email import get_notifier
from fintrack.db.session import get_async_db
from fintrack.main import create_app
from tests.fixtures.db import get_override_get_db
from tests.fixtures.mocks.email import RecordingNotifier


@pytest.fixture()
async def app(db_session: AsyncSession, notifier: RecordingNotifier) -> FastAPI:
    """🧪 App instance wired to the per-test DB session and notifier."""
    app = create_app()
    app.dependency_overrides[get_async_db] = get_override_get_db(db_session)
    app.dependency_overrides[get_notifier] = lambda: notifier
    return app


@pytest.fixture()
async def async_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """🌐 HTTP client for sending requests to the test app."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
