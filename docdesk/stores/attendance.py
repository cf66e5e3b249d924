"""
Attendance (clock in / clock out, one record per user per day) and leave
requests.
"""

from __future__ import annotations

import logging
from collections import Counter
from datetime import date, datetime, time, timedelta

from docdesk.core.exceptions import ConflictError, ValidationFailedError
from docdesk.core.status import (ATTENDANCE_TRANSITIONS, LEAVE_TRANSITIONS,
                                 AttendanceStatus, LeaveStatus,
                                 ensure_transition)
from docdesk.schemas.attendance import (AttendanceRecord, AttendanceStats,
                                        AttendanceUpdate, LeaveRequest,
                                        LeaveRequestCreate)
from docdesk.schemas.user import User
from docdesk.stores.base import EntityStore

logger = logging.getLogger(__name__)

_WORKED = {AttendanceStatus.PRESENT, AttendanceStatus.LATE, AttendanceStatus.HALF_DAY}


class AttendanceStore(EntityStore[AttendanceRecord]):
    model = AttendanceRecord
    name = "Attendance record"
    table = "attendance_records"
    id_prefix = "ATT"
    columns = (
        "user_id",
        "user_name",
        "date",
        "clock_in_time",
        "clock_out_time",
        "status",
        "total_hours",
        "break_time",
        "overtime",
        "location",
        "notes",
        "created_at",
        "updated_at",
    )
    ref_columns = frozenset({"user_id"})
    natural_key = ("user_id", "date")

    def check(self, item: AttendanceRecord, existing_id: str | None = None) -> None:
        other = self.for_day(item.user_id, item.date)
        if other is not None and other.id != existing_id:
            raise ConflictError(f"Attendance for {item.user_id} on {item.date} already exists")

    def on_update(self, current: AttendanceRecord, merged: AttendanceRecord) -> AttendanceRecord:
        ensure_transition("Attendance", ATTENDANCE_TRANSITIONS, current.status, merged.status)
        return merged

    # ── Reads ───────────────────────────────────────────────────────
    def for_day(self, user_id: str, day: date) -> AttendanceRecord | None:
        return next(
            (r for r in self._items.values() if r.user_id == user_id and r.date == day), None
        )

    def today(self, user_id: str) -> AttendanceRecord | None:
        return self.for_day(user_id, self.ctx.now().date())

    def is_clocked_in(self, user_id: str) -> bool:
        record = self.today(user_id)
        return record is not None and record.clock_in_time is not None and record.clock_out_time is None

    def current_working_hours(self, user_id: str) -> float:
        """Hours since clock-in less break time for an open record, else the
        recorded total."""
        record = self.today(user_id)
        if record is None or record.clock_in_time is None:
            return 0.0
        if record.clock_out_time is None:
            elapsed = (self.ctx.now() - record.clock_in_time).total_seconds() / 3600
            return round(max(elapsed - record.break_time / 60, 0.0), 2)
        return record.total_hours or 0.0

    def by_date_range(self, start: date, end: date, user_id: str | None = None) -> list[AttendanceRecord]:
        return sorted(
            (
                r
                for r in self._items.values()
                if start <= r.date <= end and (user_id is None or r.user_id == user_id)
            ),
            key=lambda r: (r.date, r.user_id),
        )

    def stats(self, user_id: str, start: date, end: date) -> AttendanceStats:
        records = self.by_date_range(start, end, user_id)
        total_days = len(records)
        if not total_days:
            return AttendanceStats()
        count = Counter(r.status for r in records)
        total_hours = sum(r.total_hours or 0.0 for r in records)
        worked = sum(1 for r in records if r.status in _WORKED)
        return AttendanceStats(
            total_days=total_days,
            present_days=count[AttendanceStatus.PRESENT],
            absent_days=count[AttendanceStatus.ABSENT],
            late_days=count[AttendanceStatus.LATE],
            half_days=count[AttendanceStatus.HALF_DAY],
            leave_days=count[AttendanceStatus.ON_LEAVE],
            total_hours=round(total_hours, 2),
            average_hours=round(total_hours / total_days, 2),
            overtime_hours=round(sum(r.overtime for r in records), 2),
            attendance_percentage=round(worked / total_days * 100, 2),
        )

    # ── Clock in / out ──────────────────────────────────────────────
    def _late_after(self, day: date) -> datetime:
        hours, _, minutes = self.ctx.settings.WORK_START.partition(":")
        start = datetime.combine(day, time(int(hours), int(minutes or 0)))
        return start + timedelta(minutes=self.ctx.settings.LATE_THRESHOLD_MINUTES)

    async def clock_in(
        self, actor: User, location: str | None = None, notes: str | None = None
    ) -> AttendanceRecord:
        now = self.ctx.now()
        existing = self.for_day(actor.id, now.date())
        if existing is not None and existing.clock_in_time is not None:
            raise ConflictError("Already clocked in today")
        status = AttendanceStatus.LATE if now > self._late_after(now.date()) else AttendanceStatus.PRESENT
        if existing is not None:
            # a day pre-marked by an admin still follows the transition table
            record = await self.update(
                existing.id,
                {"clock_in_time": now, "status": status, "location": location, "notes": notes},
            )
        else:
            record = await self.create(
                {
                    "user_id": actor.id,
                    "user_name": actor.name,
                    "date": now.date(),
                    "clock_in_time": now,
                    "status": status,
                    "break_time": self.ctx.settings.DEFAULT_BREAK_MINUTES,
                    "location": location,
                    "notes": notes,
                }
            )
        logger.info("%s clocked in (%s)", actor.email, status.value)
        return record

    async def clock_out(self, actor: User, notes: str | None = None) -> AttendanceRecord:
        now = self.ctx.now()
        record = self.for_day(actor.id, now.date())
        if record is None or record.clock_in_time is None or record.clock_out_time is not None:
            raise ValidationFailedError("No active clock-in found for today")
        conf = self.ctx.settings
        elapsed = (now - record.clock_in_time).total_seconds() / 3600
        total = round(elapsed - record.break_time / 60, 2)
        overtime = round(max(0.0, total - conf.WORKING_HOURS_PER_DAY), 2)
        changes = {
            "clock_out_time": now,
            "total_hours": total,
            "overtime": overtime,
            "notes": notes or record.notes,
        }
        if total < conf.HALF_DAY_THRESHOLD_HOURS:
            changes["status"] = AttendanceStatus.HALF_DAY
        record = await self.update(record.id, changes)
        logger.info("%s clocked out after %.2f h", actor.email, total)
        return record

    # ── Admin overrides ─────────────────────────────────────────────
    async def mark_attendance(
        self,
        user_id: str,
        day: date,
        status: AttendanceStatus,
        notes: str | None = None,
        user_name: str = "",
    ) -> AttendanceRecord:
        existing = self.for_day(user_id, day)
        if existing is not None:
            return await self.update(existing.id, {"status": status, "notes": notes})
        return await self.create(
            {
                "user_id": user_id,
                "user_name": user_name,
                "date": day,
                "status": status,
                "break_time": self.ctx.settings.DEFAULT_BREAK_MINUTES,
                "notes": notes,
            }
        )

    async def update_attendance(self, id: str, data: AttendanceUpdate) -> AttendanceRecord:
        return await self.update(id, data.model_dump(exclude_unset=True))


class LeaveRequestStore(EntityStore[LeaveRequest]):
    model = LeaveRequest
    name = "Leave request"
    table = "leave_requests"
    id_prefix = "LEAVE"
    columns = (
        "user_id",
        "user_name",
        "leave_type",
        "start_date",
        "end_date",
        "total_days",
        "reason",
        "status",
        "applied_at",
        "reviewed_by",
        "reviewed_at",
        "review_comments",
    )
    ref_columns = frozenset({"user_id"})
    natural_key = ("user_id", "start_date", "end_date")

    def on_update(self, current: LeaveRequest, merged: LeaveRequest) -> LeaveRequest:
        ensure_transition("Leave request", LEAVE_TRANSITIONS, current.status, merged.status)
        return merged

    def by_user(self, user_id: str) -> list[LeaveRequest]:
        return [r for r in self._items.values() if r.user_id == user_id]

    def pending(self) -> list[LeaveRequest]:
        return [r for r in self._items.values() if r.status == LeaveStatus.PENDING]

    async def submit(self, data: LeaveRequestCreate, actor: User) -> LeaveRequest:
        payload = data.model_dump()
        payload.update(
            user_id=actor.id,
            user_name=actor.name,
            total_days=(data.end_date - data.start_date).days + 1,
            status=LeaveStatus.PENDING,
            applied_at=self.ctx.now(),
        )
        return await self.create(payload)

    async def _review(
        self, id: str, status: LeaveStatus, reviewer: User, comments: str | None
    ) -> LeaveRequest:
        request = self.require(id)
        if request.status != LeaveStatus.PENDING:
            raise ValidationFailedError(f"Leave request {id} has already been reviewed")
        return await self.update(
            id,
            {
                "status": status,
                "reviewed_by": reviewer.name,
                "reviewed_at": self.ctx.now(),
                "review_comments": comments,
            },
        )

    async def approve(self, id: str, reviewer: User, comments: str | None = None) -> LeaveRequest:
        return await self._review(id, LeaveStatus.APPROVED, reviewer, comments)

    async def reject(self, id: str, reviewer: User, comments: str | None = None) -> LeaveRequest:
        return await self._review(id, LeaveStatus.REJECTED, reviewer, comments)
