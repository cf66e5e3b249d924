"""
Attendance (clock in/out, admin overrides, stats) and leave request
endpoints.
"""

from __future__ import annotations

import datetime as dt
from typing import Optional

from fastapi import APIRouter, Depends, Query

from docdesk.api.v1.deps import (get_current_active_user, get_stores,
                                 require_permission)
from docdesk.schemas.attendance import (AttendanceRecord, AttendanceStats,
                                        AttendanceUpdate, ClockInRequest,
                                        ClockOutRequest, LeaveRequest,
                                        LeaveRequestCreate, LeaveReview,
                                        MarkAttendanceRequest)
from docdesk.schemas.user import User
from docdesk.stores.base import intersect
from docdesk.stores.registry import Stores

router = APIRouter(tags=["attendance"])


# ── Self-service ────────────────────────────────────────────────────
@router.post("/attendance/clock-in", response_model=AttendanceRecord, status_code=201)
async def clock_in(
    body: ClockInRequest,
    stores: Stores = Depends(get_stores),
    actor: User = Depends(get_current_active_user),
) -> AttendanceRecord:
    return await stores.attendance.clock_in(actor, body.location, body.notes)


@router.post("/attendance/clock-out", response_model=AttendanceRecord)
async def clock_out(
    body: ClockOutRequest,
    stores: Stores = Depends(get_stores),
    actor: User = Depends(get_current_active_user),
) -> AttendanceRecord:
    return await stores.attendance.clock_out(actor, body.notes)


@router.get("/attendance/today")
async def today(
    stores: Stores = Depends(get_stores),
    actor: User = Depends(get_current_active_user),
) -> dict:
    """Today's record for the caller plus the live clock state."""
    record = stores.attendance.today(actor.id)
    return {
        "record": record.model_dump(mode="json") if record else None,
        "is_clocked_in": stores.attendance.is_clocked_in(actor.id),
        "current_working_hours": stores.attendance.current_working_hours(actor.id),
    }


# ── Admin views ─────────────────────────────────────────────────────
@router.get("/attendance", response_model=list[AttendanceRecord])
async def list_attendance(
    start: dt.date,
    end: dt.date,
    user_id: Optional[str] = Query(None),
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("attendance", "read")),
) -> list[AttendanceRecord]:
    return stores.attendance.by_date_range(start, end, user_id)


@router.get("/attendance/stats/{user_id}", response_model=AttendanceStats)
async def attendance_stats(
    user_id: str,
    start: dt.date,
    end: dt.date,
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("attendance", "read")),
) -> AttendanceStats:
    return stores.attendance.stats(user_id, start, end)


@router.post("/attendance/mark", response_model=AttendanceRecord)
async def mark_attendance(
    body: MarkAttendanceRequest,
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("attendance", "manage")),
) -> AttendanceRecord:
    user = stores.users.require(body.user_id)
    return await stores.attendance.mark_attendance(
        user.id, body.date, body.status, body.notes, user_name=user.name
    )


@router.put("/attendance/{record_id}", response_model=AttendanceRecord)
async def update_attendance(
    record_id: str,
    body: AttendanceUpdate,
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("attendance", "manage")),
) -> AttendanceRecord:
    return await stores.attendance.update_attendance(record_id, body)


# ── Leave requests ──────────────────────────────────────────────────
@router.get("/leave-requests", response_model=list[LeaveRequest])
async def list_leave_requests(
    user_id: Optional[str] = Query(None),
    pending: bool = Query(False),
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("leave", "read")),
) -> list[LeaveRequest]:
    requests = stores.leave_requests.pending() if pending else stores.leave_requests.list()
    if user_id is not None:
        requests = intersect(requests, stores.leave_requests.by_user(user_id))
    return requests


@router.post("/leave-requests", response_model=LeaveRequest, status_code=201)
async def submit_leave_request(
    body: LeaveRequestCreate,
    stores: Stores = Depends(get_stores),
    actor: User = Depends(get_current_active_user),
) -> LeaveRequest:
    return await stores.leave_requests.submit(body, actor)


@router.post("/leave-requests/{request_id}/approve", response_model=LeaveRequest)
async def approve_leave_request(
    request_id: str,
    body: LeaveReview,
    stores: Stores = Depends(get_stores),
    actor: User = Depends(require_permission("leave", "manage")),
) -> LeaveRequest:
    return await stores.leave_requests.approve(request_id, actor, body.comments)


@router.post("/leave-requests/{request_id}/reject", response_model=LeaveRequest)
async def reject_leave_request(
    request_id: str,
    body: LeaveReview,
    stores: Stores = Depends(get_stores),
    actor: User = Depends(require_permission("leave", "manage")),
) -> LeaveRequest:
    return await stores.leave_requests.reject(request_id, actor, body.comments)
