from __future__ import annotations

import uuid
from datetime import date, datetime, timezone

from sqlalchemy import Date, DateTime, ForeignKey, Numeric, String, Text, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from family_finance.db.base import Base

ALL_CATEGORIES = "All"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Budget(Base):
    """Spending allocation over a date window, optionally limited to one category."""

    __tablename__ = "budgets"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    account_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("accounts.id", ondelete="CASCADE"), index=True
    )
    name: Mapped[str] = mapped_column(String(256))
    amount: Mapped[float] = mapped_column(Numeric(14, 2, asdecimal=False))
    category: Mapped[str] = mapped_column(String(128), default=ALL_CATEGORIES, index=True)  # "All" = every category
    period: Mapped[str] = mapped_column(String(16), default="monthly")  # weekly | monthly | quarterly | yearly | custom
    start_date: Mapped[date] = mapped_column(Date, index=True)
    end_date: Mapped[date] = mapped_column(Date, index=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Python-side default keeps creation order stable within the same second
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    account: Mapped["Account"] = relationship("Account", back_populates="budgets")
