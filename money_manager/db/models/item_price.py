"""
ItemPrice model - one price point per (item, day).
"""

from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import Date, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from money_manager.db.base import Base

if TYPE_CHECKING:
    from money_manager.db.models.item import Item


class ItemPrice(Base):
    __tablename__ = "item_prices"
    __table_args__ = (UniqueConstraint("item_id", "day", name="uq_item_prices_item_day"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    item_id: Mapped[int] = mapped_column(
        ForeignKey("items.id", ondelete="CASCADE"), nullable=False, index=True
    )
    day: Mapped[date] = mapped_column(Date, nullable=False)
    price_cents: Mapped[int] = mapped_column(nullable=False)

    item: Mapped["Item"] = relationship("Item", back_populates="prices")

    def __repr__(self) -> str:
        return f"<ItemPrice(item_id={self.item_id}, day={self.day}, price_cents={self.price_cents})>"
