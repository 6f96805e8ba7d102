# tests/test_repositories/test_password_reset_repository.py

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from fintrack.repositories.password_reset import SQLPasswordResetRepository
from fintrack.services.auth.otp import hash_otp

NOW = datetime(2026, 5, 4, 8, 0, tzinfo=timezone.utc)


@pytest.mark.anyio
async def test_mark_used_ignores_replaced_request(db_session: AsyncSession, create_test_user):
    user = await create_test_user()
    repo = SQLPasswordResetRepository(db_session)

    stale = await repo.replace(user.id, otp_hash=hash_otp("111111"), expires_at=NOW + timedelta(minutes=10))
    fresh = await repo.replace(user.id, otp_hash=hash_otp("222222"), expires_at=NOW + timedelta(minutes=10))

    assert await repo.mark_used(user.id, NOW, otp_hash=stale.otp_hash) is False
    assert (await repo.get(user.id)).used_at is None

    assert await repo.mark_used(user.id, NOW, otp_hash=fresh.otp_hash) is True
    assert (await repo.get(user.id)).used_at == NOW
    assert await repo.mark_used(user.id, NOW, otp_hash=fresh.otp_hash) is False


@pytest.mark.anyio
async def test_replace_keeps_one_row(db_session: AsyncSession, create_test_user):
    user = await create_test_user()
    repo = SQLPasswordResetRepository(db_session)

    await repo.replace(user.id, otp_hash="a", expires_at=NOW)
    await repo.replace(user.id, otp_hash="b", expires_at=NOW)

    record = await repo.get(user.id)
    assert record.otp_hash == "b"
    assert record.expires_at == NOW
