"""
Valuation model - one ledger entry per (user, day).
"""

from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, Date, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from money_manager.db.base import Base

if TYPE_CHECKING:
    from money_manager.db.models.user import User


class Valuation(Base):
    """Value of everything the user held as of the end of ``day``, in cents."""

    __tablename__ = "valuations"
    __table_args__ = (UniqueConstraint("user_id", "day", name="uq_valuations_user_day"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    day: Mapped[date] = mapped_column(Date, nullable=False)
    amount_cents: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    user: Mapped["User"] = relationship("User", back_populates="valuations")

    def __repr__(self) -> str:
        return f"<Valuation(user_id={self.user_id}, day={self.day}, amount_cents={self.amount_cents})>"
