"""
Payment and challan models.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text

from docdesk.db.base import Base


class Payment(Base):
    __tablename__ = "payments"

    id: int = Column(Integer, primary_key=True, autoincrement=True)  # type: ignore[assignment]
    document_id: int = Column(  # type: ignore[assignment]
        Integer, ForeignKey("documents.id", ondelete="CASCADE"), nullable=False, index=True
    )
    agreement_value: Decimal = Column(Numeric(15, 2), nullable=False, default=0)  # type: ignore[assignment]
    consideration_amount: Decimal = Column(Numeric(15, 2), nullable=False, default=0)  # type: ignore[assignment]
    dhc_amount: Decimal = Column(Numeric(15, 2), nullable=False, default=0)  # type: ignore[assignment]
    total_amount: Decimal = Column(Numeric(15, 2), nullable=False)  # type: ignore[assignment]
    paid_amount: Decimal = Column(Numeric(15, 2), default=0)  # type: ignore[assignment]
    pending_amount: Decimal = Column(Numeric(15, 2), nullable=False)  # type: ignore[assignment]
    payment_status: str = Column(String(20), default="pending", index=True)  # type: ignore[assignment]
    # cash | cheque | online | dd
    payment_method: str | None = Column(String(20), nullable=True)  # type: ignore[assignment]
    payment_date: date | None = Column(Date, nullable=True)  # type: ignore[assignment]
    challan_number: str | None = Column(String(100), nullable=True, index=True)  # type: ignore[assignment]
    created_at: datetime | None = Column(DateTime, nullable=True)  # type: ignore[assignment]
    updated_at: datetime | None = Column(DateTime, nullable=True)  # type: ignore[assignment]


class Challan(Base):
    __tablename__ = "challans"

    id: int = Column(Integer, primary_key=True, autoincrement=True)  # type: ignore[assignment]
    document_id: int = Column(  # type: ignore[assignment]
        Integer, ForeignKey("documents.id", ondelete="CASCADE"), nullable=False, index=True
    )
    challan_number: str = Column(String(100), unique=True, nullable=False, index=True)  # type: ignore[assignment]
    amount: Decimal = Column(Numeric(15, 2), nullable=False)  # type: ignore[assignment]
    filled_by: str = Column(String(255), nullable=False)  # type: ignore[assignment]
    filled_at: datetime | None = Column(DateTime, nullable=True)  # type: ignore[assignment]
    status: str = Column(String(20), default="draft", index=True)  # type: ignore[assignment]
    notes: str | None = Column(Text, nullable=True)  # type: ignore[assignment]
    created_at: datetime | None = Column(DateTime, nullable=True)  # type: ignore[assignment]
    updated_at: datetime | None = Column(DateTime, nullable=True)  # type: ignore[assignment]
