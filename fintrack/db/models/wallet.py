from __future__ import annotations

from decimal import Decimal

from sqlalchemy import Column, ForeignKey, Index, Numeric, String, Uuid
from sqlalchemy.orm import relationship

from fintrack.db.base_class import Base, CreatedAtMixin, UUIDPKMixin


class Wallet(UUIDPKMixin, CreatedAtMixin, Base):
    """A money container (bank account, cash, card). Signup creates one."""

    __tablename__ = "wallets"

    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(100), nullable=False)
    type = Column(String(20), nullable=False, server_default="bank")
    balance = Column(Numeric(14, 2), nullable=False, default=Decimal("0"))
    currency = Column(String(3), nullable=False)

    __table_args__ = (Index("ix_wallets_user_id", "user_id"),)

    user = relationship("User", back_populates="wallets")
