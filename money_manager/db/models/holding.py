"""
Holding model - the user/item ownership multiset.

A user holding three units of an item has three rows; there is no quantity column.
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, func
from sqlalchemy.orm import Mapped, mapped_column

from money_manager.db.base import Base


class Holding(Base):
    __tablename__ = "item_user"
    __table_args__ = (Index("ix_item_user_user_item", "user_id", "item_id"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    item_id: Mapped[int] = mapped_column(
        ForeignKey("items.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        return f"<Holding(user_id={self.user_id}, item_id={self.item_id})>"
