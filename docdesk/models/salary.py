"""
Staff salary configurations and monthly salary records.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (JSON, Boolean, Column, Date, DateTime, ForeignKey,
                        Index, Integer, Numeric, String, Text)

from docdesk.db.base import Base


class StaffSalaryConfig(Base):
    __tablename__ = "staff_salary_configs"

    id: int = Column(Integer, primary_key=True, autoincrement=True)  # type: ignore[assignment]
    user_id: int = Column(  # type: ignore[assignment]
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    base_salary: Decimal = Column(Numeric(10, 2), nullable=False)  # type: ignore[assignment]
    allowances: list | None = Column(JSON, nullable=True)  # type: ignore[assignment]
    deductions: list | None = Column(JSON, nullable=True)  # type: ignore[assignment]
    overtime_rate: Decimal = Column(Numeric(8, 2), default=0)  # type: ignore[assignment]
    payment_method: str = Column(String(20), default="bank_transfer")  # type: ignore[assignment]
    bank_details: dict | None = Column(JSON, nullable=True)  # type: ignore[assignment]
    is_active: bool = Column(Boolean, default=True, index=True)  # type: ignore[assignment]
    effective_from: date | None = Column(Date, nullable=True)  # type: ignore[assignment]
    created_at: datetime | None = Column(DateTime, nullable=True)  # type: ignore[assignment]
    updated_at: datetime | None = Column(DateTime, nullable=True)  # type: ignore[assignment]


class SalaryRecord(Base):
    __tablename__ = "salary_records"
    __table_args__ = (Index("idx_pay_period", "pay_period_month", "pay_period_year"),)

    id: int = Column(Integer, primary_key=True, autoincrement=True)  # type: ignore[assignment]
    user_id: int = Column(  # type: ignore[assignment]
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_name: str = Column(String(255), nullable=False)  # type: ignore[assignment]
    user_role: str = Column(String(50), nullable=False)  # type: ignore[assignment]
    base_salary: Decimal = Column(Numeric(10, 2), nullable=False)  # type: ignore[assignment]
    allowances: list | None = Column(JSON, nullable=True)  # type: ignore[assignment]
    deductions: list | None = Column(JSON, nullable=True)  # type: ignore[assignment]
    overtime: list | None = Column(JSON, nullable=True)  # type: ignore[assignment]
    bonus: Decimal = Column(Numeric(10, 2), default=0)  # type: ignore[assignment]
    gross_salary: Decimal = Column(Numeric(10, 2), nullable=False)  # type: ignore[assignment]
    net_salary: Decimal = Column(Numeric(10, 2), nullable=False)  # type: ignore[assignment]
    pay_period_month: int = Column(Integer, nullable=False)  # type: ignore[assignment]
    pay_period_year: int = Column(Integer, nullable=False)  # type: ignore[assignment]
    pay_date: date = Column(Date, nullable=False, index=True)  # type: ignore[assignment]
    status: str = Column(String(20), default="draft", index=True)  # type: ignore[assignment]
    payment_method: str = Column(String(20), default="bank_transfer")  # type: ignore[assignment]
    bank_details: dict | None = Column(JSON, nullable=True)  # type: ignore[assignment]
    notes: str | None = Column(Text, nullable=True)  # type: ignore[assignment]
    approved_by: str | None = Column(String(255), nullable=True)  # type: ignore[assignment]
    approved_at: datetime | None = Column(DateTime, nullable=True)  # type: ignore[assignment]
    created_at: datetime | None = Column(DateTime, nullable=True)  # type: ignore[assignment]
    updated_at: datetime | None = Column(DateTime, nullable=True)  # type: ignore[assignment]
