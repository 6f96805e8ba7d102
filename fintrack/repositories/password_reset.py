from __future__ import annotations

"""
Password-reset ledger: at most one request row per user.

`replace` swaps the user's row for a fresh one (delete then insert, one
transaction). Two concurrent replacements for the same user can collide on
the unique `user_id` index; the loser rolls back and retries once, so the
last writer wins.
"""

import uuid
from dataclasses import dataclass, replace as dc_replace
from datetime import datetime
from typing import Dict, Optional

from loguru import logger
from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from fintrack.db.base_class import as_utc
from fintrack.db.models.password_reset import PasswordReset


@dataclass(frozen=True)
class ResetRecord:
    user_id: uuid.UUID
    otp_hash: str
    expires_at: datetime
    used_at: Optional[datetime] = None


class PasswordResetRepositoryProtocol:
    async def get(self, user_id: uuid.UUID) -> Optional[ResetRecord]:
        raise NotImplementedError

    async def replace(self, user_id: uuid.UUID, *, otp_hash: str, expires_at: datetime) -> ResetRecord:
        raise NotImplementedError

    async def mark_used(self, user_id: uuid.UUID, used_at: datetime, *, otp_hash: str) -> bool:
        """Stamp `used_at` on the request holding `otp_hash` if it is still unused.

        Returns False if nothing changed, including when a newer request has
        replaced the row since it was read.
        """
        raise NotImplementedError


class SQLPasswordResetRepository(PasswordResetRepositoryProtocol):
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get(self, user_id: uuid.UUID) -> Optional[ResetRecord]:
        row = (
            await self.db.execute(select(PasswordReset).where(PasswordReset.user_id == user_id))
        ).scalar_one_or_none()
        if row is None:
            return None
        return ResetRecord(
            user_id=row.user_id,
            otp_hash=row.otp_hash,
            expires_at=as_utc(row.expires_at),
            used_at=as_utc(row.used_at),
        )

    async def _replace_once(self, user_id: uuid.UUID, otp_hash: str, expires_at: datetime) -> None:
        await self.db.execute(delete(PasswordReset).where(PasswordReset.user_id == user_id))
        self.db.add(PasswordReset(user_id=user_id, otp_hash=otp_hash, expires_at=expires_at))
        await self.db.commit()

    async def replace(self, user_id: uuid.UUID, *, otp_hash: str, expires_at: datetime) -> ResetRecord:
        try:
            await self._replace_once(user_id, otp_hash, expires_at)
        except IntegrityError:
            await self.db.rollback()
            logger.info("Reset row collided with a concurrent request; retrying once")
            await self._replace_once(user_id, otp_hash, expires_at)
        return ResetRecord(user_id=user_id, otp_hash=otp_hash, expires_at=expires_at)

    async def mark_used(self, user_id: uuid.UUID, used_at: datetime, *, otp_hash: str) -> bool:
        result = await self.db.execute(
            update(PasswordReset)
            .where(
                PasswordReset.user_id == user_id,
                PasswordReset.otp_hash == otp_hash,
                PasswordReset.used_at.is_(None),
            )
            .values(used_at=used_at)
        )
        await self.db.commit()
        return bool(result.rowcount)


class MemoryPasswordResetRepository(PasswordResetRepositoryProtocol):
    def __init__(self) -> None:
        self._rows: Dict[uuid.UUID, ResetRecord] = {}

    async def get(self, user_id: uuid.UUID) -> Optional[ResetRecord]:
        return self._rows.get(user_id)

    async def replace(self, user_id: uuid.UUID, *, otp_hash: str, expires_at: datetime) -> ResetRecord:
        self._rows[user_id] = ResetRecord(user_id=user_id, otp_hash=otp_hash, expires_at=expires_at)
        return self._rows[user_id]

    async def mark_used(self, user_id: uuid.UUID, used_at: datetime, *, otp_hash: str) -> bool:
        row = self._rows.get(user_id)
        if row is None or row.otp_hash != otp_hash or row.used_at is not None:
            return False
        self._rows[user_id] = dc_replace(row, used_at=used_at)
        return True
