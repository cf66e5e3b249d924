"""
Attendance records (one per user per day) and leave requests.
"""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import (Column, Date, DateTime, Float, ForeignKey, Integer,
                        String, Text, UniqueConstraint)

from docdesk.db.base import Base


class AttendanceRecord(Base):
    __tablename__ = "attendance_records"
    __table_args__ = (UniqueConstraint("user_id", "date", name="unique_user_date"),)

    id: int = Column(Integer, primary_key=True, autoincrement=True)  # type: ignore[assignment]
    user_id: int = Column(  # type: ignore[assignment]
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_name: str = Column(String(255), nullable=False, default="")  # type: ignore[assignment]
    date: date = Column(Date, nullable=False, index=True)  # type: ignore[assignment]
    clock_in_time: datetime | None = Column(DateTime, nullable=True)  # type: ignore[assignment]
    clock_out_time: datetime | None = Column(DateTime, nullable=True)  # type: ignore[assignment]
    status: str = Column(String(20), default="present", index=True)  # type: ignore[assignment]
    total_hours: float | None = Column(Float, nullable=True)  # type: ignore[assignment]
    break_time: int = Column(Integer, default=60)  # type: ignore[assignment]  # minutes
    overtime: float = Column(Float, default=0)  # type: ignore[assignment]
    location: str | None = Column(String(255), nullable=True)  # type: ignore[assignment]
    notes: str | None = Column(Text, nullable=True)  # type: ignore[assignment]
    created_at: datetime | None = Column(DateTime, nullable=True)  # type: ignore[assignment]
    updated_at: datetime | None = Column(DateTime, nullable=True)  # type: ignore[assignment]


class LeaveRequest(Base):
    __tablename__ = "leave_requests"

    id: int = Column(Integer, primary_key=True, autoincrement=True)  # type: ignore[assignment]
    user_id: int = Column(  # type: ignore[assignment]
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_name: str = Column(String(255), nullable=False, default="")  # type: ignore[assignment]
    leave_type: str = Column(String(30), nullable=False)  # type: ignore[assignment]
    start_date: date = Column(Date, nullable=False)  # type: ignore[assignment]
    end_date: date = Column(Date, nullable=False)  # type: ignore[assignment]
    total_days: int = Column(Integer, nullable=False)  # type: ignore[assignment]
    reason: str = Column(Text, nullable=False)  # type: ignore[assignment]
    status: str = Column(String(20), default="pending", index=True)  # type: ignore[assignment]
    applied_at: datetime | None = Column(DateTime, nullable=True)  # type: ignore[assignment]
    reviewed_by: str | None = Column(String(255), nullable=True)  # type: ignore[assignment]
    reviewed_at: datetime | None = Column(DateTime, nullable=True)  # type: ignore[assignment]
    review_comments: str | None = Column(Text, nullable=True)  # type: ignore[assignment]
