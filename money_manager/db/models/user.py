"""
User model - identity, privilege flag and the per-day valuation ledger.
"""

from datetime import date, datetime

from sqlalchemy import String, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from money_manager.db.base import Base
from money_manager.db.models.valuation import Valuation


class User(Base):
    """User entity. ``valuations`` is the cumulative portfolio value by day, not a delta series."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_admin: Mapped[bool] = mapped_column(default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    valuations: Mapped[list[Valuation]] = relationship(
        Valuation,
        back_populates="user",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="Valuation.day",
    )

    @property
    def valuation_by_day(self) -> dict[date, int]:
        return {v.day: v.amount_cents for v in self.valuations}

    def valuation_on(self, day: date) -> int | None:
        for entry in self.valuations:
            if entry.day == day:
                return entry.amount_cents
        return None

    def set_valuation(self, day: date, amount_cents: int) -> None:
        """Overwrite (or create) the entry for ``day``."""
        for entry in self.valuations:
            if entry.day == day:
                entry.amount_cents = amount_cents
                return
        self.valuations.append(Valuation(day=day, amount_cents=amount_cents))

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email})>"
