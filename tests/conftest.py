# tests/conftest.py
"""
Global test bootstrap
- Points the app at in-memory SQLite and a throwaway JWT secret
- Cheap bcrypt rounds so hashing doesn't dominate the run
- Makes SlowAPI rate-limiting test-friendly (bypass by default)
- Exposes an opt-in `ratelimit_on` fixture

The environment is set BEFORE anything under `fintrack` is imported, since
settings, limiter and logger read it at import time.
"""

from __future__ import annotations

import os
import random

import pytest

# ──────────────────────────────────────────────────────────────────────────────
# 🌱 Test env
# ──────────────────────────────────────────────────────────────────────────────
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_TO_FILE", "0")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("ENABLE_HTTPS_REDIRECT", "false")
os.environ["SMTP_HOST"] = ""                                     # never talk to a real SMTP server

os.environ.setdefault("RATELIMIT_STORAGE_URI", "memory://")
os.environ.setdefault("RATE_LIMIT_ENABLED", "true")
os.environ.setdefault("RATE_LIMIT_TEST_BYPASS", "1")             # bypass unless a test disables it
os.environ.setdefault("RATE_LIMIT_NAMESPACE", f"pytest-{random.getrandbits(32)}")

# ──────────────────────────────────────────────────────────────────────────────
# 📦 Pull in the rest of the fixtures (db, app, users, notifier)
# ──────────────────────────────────────────────────────────────────────────────
from tests.fixtures.db import *            # noqa: E402,F401,F403
from tests.fixtures.mocks.email import *   # noqa: E402,F401,F403
from tests.fixtures.app import *           # noqa: E402,F401,F403
from tests.fixtures.users import *         # noqa: E402,F401,F403


# ──────────────────────────────────────────────────────────────────────────────
# 🚦 Opt-in fixture to actually enforce rate limits in a specific test
#    Usage:
#       async def test_something_rate_limited(ratelimit_on, async_client): ...
# ──────────────────────────────────────────────────────────────────────────────
@pytest.fixture()
def ratelimit_on(monkeypatch):
    """Enable rate limiting for tests that assert 429s. The limiter reads the flag per request."""
    monkeypatch.setenv("RATE_LIMIT_TEST_BYPASS", "0")
    yield
