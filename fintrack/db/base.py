# fintrack/db/base.py
"""
Finance Tracker — SQLAlchemy Base registry
==========================================

Import all ORM models so their tables are registered on `Base.metadata`
(used by `create_all` at startup and in tests).

Tip: Keep this file import-only; no runtime logic.
"""

from fintrack.db.base_class import Base

# ───────────────────────────────────────────────────────────────
# Accounts & auth
# ───────────────────────────────────────────────────────────────
from fintrack.db.models.user import User
from fintrack.db.models.password_reset import PasswordReset

# ───────────────────────────────────────────────────────────────
# Onboarding defaults
# ───────────────────────────────────────────────────────────────
from fintrack.db.models.wallet import Wallet
from fintrack.db.models.category import Category

__all__ = [
    "Base",
    "User",
    "PasswordReset",
    "Wallet",
    "Category",
]
