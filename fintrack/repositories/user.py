from __future__ import annotations

"""
Credential store.

`UserRepositoryProtocol` is what the auth service depends on. Two
implementations ship: `SQLUserRepository` over an `AsyncSession` (the app),
and `MemoryUserRepository` (service tests, local experiments).

Emails are matched exactly as supplied.
"""

import uuid
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from fintrack.db.models.user import User


class DuplicateEmailError(Exception):
    """Insert hit the unique email constraint."""


@dataclass(frozen=True)
class UserRecord:
    id: uuid.UUID
    email: str
    password_hash: str
    full_name: str
    currency: str
    theme: str

    def public(self) -> Dict[str, Any]:
        """Client-facing projection. Never includes the hash."""
        return {
            "id": str(self.id),
            "email": self.email,
            "fullName": self.full_name,
            "currency": self.currency,
            "theme": self.theme,
        }


PROFILE_FIELDS = ("full_name", "currency", "theme")


class UserRepositoryProtocol:
    async def get_by_email(self, email: str) -> Optional[UserRecord]:
        raise NotImplementedError

    async def get_by_id(self, user_id: uuid.UUID) -> Optional[UserRecord]:
        raise NotImplementedError

    async def create(
        self, *, email: str, password_hash: str, full_name: str, currency: str, theme: str
    ) -> UserRecord:
        """Insert a user. Raises `DuplicateEmailError` when the email is taken."""
        raise NotImplementedError

    async def update_password(self, user_id: uuid.UUID, password_hash: str) -> None:
        raise NotImplementedError

    async def update_profile(self, user_id: uuid.UUID, patch: Dict[str, Any]) -> Optional[UserRecord]:
        raise NotImplementedError


def _to_record(row: User) -> UserRecord:
    return UserRecord(
        id=row.id,
        email=row.email,
        password_hash=row.password_hash,
        full_name=row.full_name,
        currency=row.currency,
        theme=row.theme,
    )


class SQLUserRepository(UserRepositoryProtocol):
    """SQLAlchemy-backed store. Each mutation commits on its own."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_by_email(self, email: str) -> Optional[UserRecord]:
        row = (await self.db.execute(select(User).where(User.email == email))).scalar_one_or_none()
        return _to_record(row) if row else None

    async def get_by_id(self, user_id: uuid.UUID) -> Optional[UserRecord]:
        row = await self.db.get(User, user_id)
        return _to_record(row) if row else None

    async def create(
        self, *, email: str, password_hash: str, full_name: str, currency: str, theme: str
    ) -> UserRecord:
        row = User(
            email=email,
            password_hash=password_hash,
            full_name=full_name,
            currency=currency,
            theme=theme,
        )
        self.db.add(row)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise DuplicateEmailError(email) from e
        return _to_record(row)

    async def update_password(self, user_id: uuid.UUID, password_hash: str) -> None:
        await self.db.execute(update(User).where(User.id == user_id).values(password_hash=password_hash))
        await self.db.commit()

    async def update_profile(self, user_id: uuid.UUID, patch: Dict[str, Any]) -> Optional[UserRecord]:
        row = await self.db.get(User, user_id)
        if row is None:
            return None
        for key in PROFILE_FIELDS:
            if patch.get(key) is not None:
                setattr(row, key, patch[key])
        await self.db.commit()
        await self.db.refresh(row)
        return _to_record(row)


class MemoryUserRepository(UserRepositoryProtocol):
    def __init__(self) -> None:
        self._by_id: Dict[uuid.UUID, UserRecord] = {}

    async def get_by_email(self, email: str) -> Optional[UserRecord]:
        return next((u for u in self._by_id.values() if u.email == email), None)

    async def get_by_id(self, user_id: uuid.UUID) -> Optional[UserRecord]:
        return self._by_id.get(user_id)

    async def create(
        self, *, email: str, password_hash: str, full_name: str, currency: str, theme: str
    ) -> UserRecord:
        if await self.get_by_email(email) is not None:
            raise DuplicateEmailError(email)
        record = UserRecord(
            id=uuid.uuid4(),
            email=email,
            password_hash=password_hash,
            full_name=full_name,
            currency=currency,
            theme=theme,
        )
        self._by_id[record.id] = record
        return record

    async def update_password(self, user_id: uuid.UUID, password_hash: str) -> None:
        if user_id in self._by_id:
            self._by_id[user_id] = replace(self._by_id[user_id], password_hash=password_hash)

    async def update_profile(self, user_id: uuid.UUID, patch: Dict[str, Any]) -> Optional[UserRecord]:
        current = self._by_id.get(user_id)
        if current is None:
            return None
        changes = {k: patch[k] for k in PROFILE_FIELDS if patch.get(k) is not None}
        self._by_id[user_id] = replace(current, **changes)
        return self._by_id[user_id]
