from __future__ import annotations

from sqlalchemy import CheckConstraint, Column, ForeignKey, Index, String, Uuid
from sqlalchemy.orm import relationship

from fintrack.db.base_class import Base, CreatedAtMixin, UUIDPKMixin


class Category(UUIDPKMixin, CreatedAtMixin, Base):
    """Per-user transaction category (income or expense)."""

    __tablename__ = "categories"

    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(100), nullable=False)
    icon = Column(String(16), nullable=True)
    color = Column(String(7), nullable=True)
    type = Column(String(10), nullable=False)

    __table_args__ = (
        CheckConstraint("type IN ('income', 'expense')", name="type_known"),
        Index("ix_categories_user_id_type", "user_id", "type"),
    )

    user = relationship("User", back_populates="categories")
