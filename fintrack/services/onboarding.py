from __future__ import annotations

"""
Onboarding defaults for new accounts
====================================

Every new user starts with one wallet (`Main Wallet`, a bank account with a
zero balance in the user's currency) and a starter set of categories so the
dashboard has something to group transactions by on day one.
"""

from decimal import Decimal
from typing import Final, List, Tuple

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from fintrack.db.models.category import Category
from fintrack.db.models.wallet import Wallet
from fintrack.repositories.user import UserRecord

DEFAULT_WALLET_NAME: Final[str] = "Main Wallet"
DEFAULT_WALLET_TYPE: Final[str] = "bank"

# (name, icon, color, type)
DEFAULT_CATEGORIES: Final[List[Tuple[str, str, str, str]]] = [
    ("Food & Dining", "🍔", "#FF6B6B", "expense"),
    ("Shopping", "🛍️", "#4ECDC4", "expense"),
    ("Transportation", "🚗", "#45B7D1", "expense"),
    ("Bills & Utilities", "💡", "#FFA07A", "expense"),
    ("Entertainment", "🎬", "#98D8C8", "expense"),
    ("Healthcare", "🏥", "#F7DC6F", "expense"),
    ("Salary", "💰", "#52BE80", "income"),
    ("Freelance", "💼", "#5DADE2", "income"),
    ("Investment", "📈", "#58D68D", "income"),
]


class OnboardingProvisionerProtocol:
    async def provision(self, user: UserRecord) -> None:
        raise NotImplementedError


class SQLOnboardingProvisioner(OnboardingProvisionerProtocol):
    """Inserts the default wallet and categories in one commit."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def provision(self, user: UserRecord) -> None:
        self.db.add(
            Wallet(
                user_id=user.id,
                name=DEFAULT_WALLET_NAME,
                type=DEFAULT_WALLET_TYPE,
                balance=Decimal("0"),
                currency=user.currency,
            )
        )
        self.db.add_all(
            Category(user_id=user.id, name=name, icon=icon, color=color, type=kind)
            for name, icon, color, kind in DEFAULT_CATEGORIES
        )
        try:
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        logger.debug("Provisioned defaults | user_id={} categories={}", user.id, len(DEFAULT_CATEGORIES))
