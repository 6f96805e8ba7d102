from __future__ import annotations

"""
🔑 Finance Tracker — Password reset request
==========================================

One row per user at most (unique `user_id`). A new request replaces the
previous row; a successful reset stamps `used_at`. The code itself is never
stored, only its bcrypt hash.

Freshness is decided in application code against an injected clock, not by a
CHECK constraint, so tests can insert already-expired rows.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, Uuid
from sqlalchemy.orm import relationship

from fintrack.db.base_class import Base, CreatedAtMixin, UUIDPKMixin


class PasswordReset(UUIDPKMixin, CreatedAtMixin, Base):
    __tablename__ = "password_resets"

    user_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        comment="Owner; at most one outstanding request",
    )
    otp_hash = Column(String(255), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False, doc="Expiration timestamp (UTC)")
    used_at = Column(DateTime(timezone=True), nullable=True, doc="Set once on successful reset")

    __mapper_args__ = {"eager_defaults": True}

    __table_args__ = (
        Index("ix_password_resets_expires_at", "expires_at"),
    )

    user = relationship("User", back_populates="password_reset")

    def __repr__(self) -> str:  # pragma: no cover
        return f"<PasswordReset user_id={self.user_id} used={self.used_at is not None}>"
