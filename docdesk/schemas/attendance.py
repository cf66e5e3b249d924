"""Pydantic schemas for attendance records and leave requests."""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, Field, model_validator

from docdesk.core.status import AttendanceStatus, LeaveStatus


# ── Attendance ──────────────────────────────────────────────────────
class AttendanceRecord(BaseModel):
    id: str = ""
    user_id: str
    user_name: str = ""
    date: date
    clock_in_time: datetime | None = None
    clock_out_time: datetime | None = None
    status: AttendanceStatus = AttendanceStatus.PRESENT
    total_hours: float | None = None
    break_time: int = 60  # minutes
    overtime: float = 0.0
    location: str | None = None
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"extra": "ignore"}


class ClockInRequest(BaseModel):
    location: str | None = None
    notes: str | None = None


class ClockOutRequest(BaseModel):
    notes: str | None = None


class MarkAttendanceRequest(BaseModel):
    user_id: str
    date: date
    status: AttendanceStatus
    notes: str | None = None


class AttendanceUpdate(BaseModel):
    break_time: int | None = Field(default=None, ge=0)
    location: str | None = None
    notes: str | None = None


class AttendanceStats(BaseModel):
    total_days: int = 0
    present_days: int = 0
    absent_days: int = 0
    late_days: int = 0
    half_days: int = 0
    leave_days: int = 0
    total_hours: float = 0.0
    average_hours: float = 0.0
    overtime_hours: float = 0.0
    attendance_percentage: float = 0.0


# ── Leave ───────────────────────────────────────────────────────────
class LeaveType(str, Enum):
    SICK_LEAVE = "sick_leave"
    CASUAL_LEAVE = "casual_leave"
    ANNUAL_LEAVE = "annual_leave"
    MATERNITY_LEAVE = "maternity_leave"
    PATERNITY_LEAVE = "paternity_leave"
    EMERGENCY_LEAVE = "emergency_leave"


class LeaveRequest(BaseModel):
    id: str = ""
    user_id: str
    user_name: str = ""
    leave_type: LeaveType
    start_date: date
    end_date: date
    total_days: int
    reason: str
    status: LeaveStatus = LeaveStatus.PENDING
    applied_at: datetime | None = None
    reviewed_by: str | None = None
    reviewed_at: datetime | None = None
    review_comments: str | None = None

    model_config = {"extra": "ignore"}


class LeaveRequestCreate(BaseModel):
    leave_type: LeaveType
    start_date: date
    end_date: date
    reason: str

    @model_validator(mode="after")
    def _range(self) -> "LeaveRequestCreate":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class LeaveReview(BaseModel):
    comments: str | None = None
