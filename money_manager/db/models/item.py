"""
Item model - catalog entry with day-keyed price history.
"""

from datetime import date, datetime

from sqlalchemy import String, Text, DateTime, ForeignKey, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from money_manager.db.base import Base
from money_manager.db.models.item_price import ItemPrice

STATUS_PENDING = "PENDING"


class Item(Base):
    """Catalog item. ``highest_price_cents`` never drops below the current or any recorded price."""

    __tablename__ = "items"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    image: Mapped[str] = mapped_column(Text, nullable=False, default="")
    url: Mapped[str] = mapped_column(Text, nullable=False, default="")
    last_price_cents: Mapped[int] = mapped_column(nullable=False)
    highest_price_cents: Mapped[int] = mapped_column(nullable=False)
    status: Mapped[str | None] = mapped_column(String(32), nullable=True)
    # Set only for items submitted by a non-privileged user (quarantined until promoted)
    user_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    prices: Mapped[list[ItemPrice]] = relationship(
        ItemPrice,
        back_populates="item",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="ItemPrice.day",
    )

    @property
    def price_history(self) -> dict[date, int]:
        return {p.day: p.price_cents for p in self.prices}

    def record_price(self, day: date, price_cents: int) -> None:
        """Write the day's price (same-day writes overwrite) and move current/peak prices."""
        for entry in self.prices:
            if entry.day == day:
                entry.price_cents = price_cents
                break
        else:
            self.prices.append(ItemPrice(day=day, price_cents=price_cents))
        self.last_price_cents = price_cents
        if self.highest_price_cents is None or self.highest_price_cents < price_cents:
            self.highest_price_cents = price_cents

    @property
    def is_quarantined(self) -> bool:
        return self.user_id is not None

    def __repr__(self) -> str:
        return f"<Item(id={self.id}, name={self.name})>"
