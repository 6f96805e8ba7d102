from __future__ import annotations

from typing import Awaitable, Callable
from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from fintrack.core.security import create_session_token, get_password_hash
from fintrack.db.models.user import User

DEFAULT_PASSWORD = "correct-horse-battery"


# ──────────────────────────────────────────────────────────────
# 🧪 Factory: Create Test User
# ──────────────────────────────────────────────────────────────
@pytest.fixture
def create_test_user(db_session: AsyncSession) -> Callable[..., Awaitable[User]]:
    """
    Insert a user directly (no onboarding). The plaintext password is kept on
    `user.password` and a session token on `user.token` for convenience.
    """
    async def _create(
        email: str | None = None,
        password: str = DEFAULT_PASSWORD,
        full_name: str = "Test User",
        currency: str = "USD",
    ) -> User:
        user = User(
            email=email or f"test_{uuid4().hex[:10]}@example.com",
            password_hash=get_password_hash(password),
            full_name=full_name,
            currency=currency,
            theme="light",
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        user.password = password
        user.token = create_session_token(user.id)
        return user

    return _create


@pytest.fixture
def auth_headers() -> Callable[[str], dict]:
    def _headers(token: str) -> dict:
        return {"Authorization": f"Bearer {token}"}
    return _headers
