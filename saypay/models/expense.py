"""Expense model - persisted voice expenses."""

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal

from sqlalchemy import Date, DateTime, Float, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from saypay.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Expense(Base):
    """
    A confirmed expense captured by voice.
    Column types stay portable so SQLite and PostgreSQL both work.
    """

    __tablename__ = "expense"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    # Amount & Currency
    amount: Mapped[Decimal] = mapped_column(Numeric(precision=12, scale=2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)  # ISO 4217

    # Expense Details
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    occurred_on: Mapped[date] = mapped_column(Date, nullable=False)

    # Extraction Metadata
    source: Mapped[str] = mapped_column(String(20), nullable=False)  # primary, fallback
    confidence: Mapped[float | None] = mapped_column(Float, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow)

    def __repr__(self) -> str:
        return (
            f"<Expense(id={self.id}, amount={self.amount} {self.currency}, "
            f"description={self.description[:30]})>"
        )
