"""
Contract model: legal/business agreements with a partner.

Lifecycle: active → terminated (one-way). The two cancellation columns are
derived: only the recalculation batch writes them, never a plain edit.
"""

from datetime import date, datetime
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from vertragsdb.database import Base, utcnow

CONTRACT_TYPES = ("framework", "individual")


class Contract(Base):
    __tablename__ = "contracts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    contract_number: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[Optional[str]] = mapped_column(Text)
    conditions: Mapped[Optional[str]] = mapped_column(Text)
    # Scheduling inputs (all optional; missing any disables the schedule)
    notice_period: Mapped[Optional[int]] = mapped_column(Integer)  # months
    minimum_term: Mapped[Optional[date]] = mapped_column(Date)
    term_months: Mapped[Optional[int]] = mapped_column(Integer)
    # Derived by the recalculation batch
    cancellation_date: Mapped[Optional[date]] = mapped_column(Date)
    cancellation_action_date: Mapped[Optional[date]] = mapped_column(Date)
    # Validity
    valid_from: Mapped[date] = mapped_column(Date, nullable=False)
    valid_until: Mapped[Optional[date]] = mapped_column(Date)
    partner: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    contract_type: Mapped[str] = mapped_column(String(20), nullable=False)
    # Informational grouping under a framework contract, no ownership
    framework_contract_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("contracts.id"), nullable=True
    )
    is_terminated: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    terminated_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    __table_args__ = (
        CheckConstraint(
            "contract_type IN (" + ", ".join(f"'{t}'" for t in CONTRACT_TYPES) + ")",
            name="chk_contract_type",
        ),
        Index("idx_contracts_category", "category"),
        Index("idx_contracts_terminated", "is_terminated"),
        Index("idx_contracts_action_date", "cancellation_action_date"),
    )
