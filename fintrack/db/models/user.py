from __future__ import annotations

"""
👤 Finance Tracker — User (accounts & auth)
===========================================

Account entity: login credentials plus the profile fields the UI reads
(display name, currency, theme).

Design highlights
-----------------
• Email is unique **as supplied** (no case folding, no trimming).
• **DB-driven, tz-aware timestamps** (`func.now()`; `timezone=True`).
• Users are never hard-deleted by this service.
"""

from sqlalchemy import CheckConstraint, Column, DateTime, Index, String, func
from sqlalchemy.orm import relationship

from fintrack.db.base_class import Base, UUIDPKMixin


class User(UUIDPKMixin, Base):
    """Account record with credentials and display preferences."""

    __tablename__ = "users"

    # ── Identity & Authentication ─────────────────────────────────────────────
    email = Column(String(320), nullable=False, unique=True)
    password_hash = Column(String(255), nullable=False, doc="bcrypt hash of the password")

    # ── Profile ──────────────────────────────────────────────────────────────
    full_name = Column(String(255), nullable=False)
    currency = Column(String(3), nullable=False, server_default="USD")
    theme = Column(String(10), nullable=False, server_default="light")

    # ── Timestamps ────────────────────────────────────────────────────────────
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __mapper_args__ = {"eager_defaults": True}

    __table_args__ = (
        CheckConstraint("length(email) > 0", name="email_not_blank"),
        CheckConstraint("theme IN ('light', 'dark')", name="theme_known"),
        Index("ix_users_created_at", "created_at"),
    )

    # ── Relationships ────────────────────────────────────────────────────────
    password_reset = relationship(
        "PasswordReset",
        back_populates="user",
        uselist=False,
        passive_deletes=True,
    )
    wallets = relationship("Wallet", back_populates="user", passive_deletes=True)
    categories = relationship("Category", back_populates="user", passive_deletes=True)

    def __repr__(self) -> str:  # pragma: no cover
        return f"<User id={self.id}>"
