"""
Status enums and their explicit transition tables.

Every status change in the stores goes through ``ensure_transition``;
writing the current status again is a no-op.
"""

from __future__ import annotations

from enum import Enum

from docdesk.core.exceptions import InvalidTransitionError


class DocumentStatus(str, Enum):
    PENDING_COLLECTION = "pending_collection"
    COLLECTED = "collected"
    DATA_ENTRY_PENDING = "data_entry_pending"
    DATA_ENTRY_COMPLETED = "data_entry_completed"
    REGISTRATION_PENDING = "registration_pending"
    REGISTERED = "registered"
    READY_FOR_DELIVERY = "ready_for_delivery"
    DELIVERED = "delivered"


class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    ON_HOLD = "on_hold"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    HALF_DAY = "half_day"
    ON_LEAVE = "on_leave"
    HOLIDAY = "holiday"
    WORK_FROM_HOME = "work_from_home"


class ChallanStatus(str, Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"


class SalaryStatus(str, Enum):
    DRAFT = "draft"
    PENDING_APPROVAL = "pending_approval"
    APPROVED = "approved"
    PAID = "paid"
    CANCELLED = "cancelled"


class LeaveStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


# Documents only ever move one step forward along the registration flow.
DOCUMENT_FLOW: list[DocumentStatus] = list(DocumentStatus)
DOCUMENT_TRANSITIONS: dict[DocumentStatus, set[DocumentStatus]] = {
    status: {DOCUMENT_FLOW[i + 1]} if i + 1 < len(DOCUMENT_FLOW) else set()
    for i, status in enumerate(DOCUMENT_FLOW)
}

# Date field stamped when a document reaches the status
DOCUMENT_MILESTONES: dict[DocumentStatus, str] = {
    DocumentStatus.COLLECTED: "collection_date",
    DocumentStatus.DATA_ENTRY_COMPLETED: "data_entry_date",
    DocumentStatus.REGISTERED: "registration_date",
    DocumentStatus.DELIVERED: "delivery_date",
}

TASK_TRANSITIONS: dict[TaskStatus, set[TaskStatus]] = {
    TaskStatus.PENDING: {TaskStatus.IN_PROGRESS, TaskStatus.ON_HOLD, TaskStatus.CANCELLED},
    TaskStatus.IN_PROGRESS: {TaskStatus.ON_HOLD, TaskStatus.COMPLETED, TaskStatus.CANCELLED},
    TaskStatus.ON_HOLD: {TaskStatus.IN_PROGRESS, TaskStatus.CANCELLED},
    TaskStatus.COMPLETED: set(),
    TaskStatus.CANCELLED: set(),
}

_WORKED = {AttendanceStatus.PRESENT, AttendanceStatus.LATE, AttendanceStatus.HALF_DAY}
_NOT_WORKED = {AttendanceStatus.ABSENT, AttendanceStatus.ON_LEAVE, AttendanceStatus.HOLIDAY}
ATTENDANCE_TRANSITIONS: dict[AttendanceStatus, set[AttendanceStatus]] = {
    AttendanceStatus.PRESENT: {AttendanceStatus.LATE, AttendanceStatus.HALF_DAY, AttendanceStatus.ABSENT},
    AttendanceStatus.LATE: {AttendanceStatus.PRESENT, AttendanceStatus.HALF_DAY, AttendanceStatus.ABSENT},
    AttendanceStatus.HALF_DAY: {AttendanceStatus.PRESENT, AttendanceStatus.LATE, AttendanceStatus.ABSENT},
    AttendanceStatus.ABSENT: (_WORKED | _NOT_WORKED | {AttendanceStatus.WORK_FROM_HOME})
    - {AttendanceStatus.ABSENT},
    AttendanceStatus.ON_LEAVE: {AttendanceStatus.ABSENT, AttendanceStatus.PRESENT},
    AttendanceStatus.HOLIDAY: {AttendanceStatus.PRESENT, AttendanceStatus.WORK_FROM_HOME},
    AttendanceStatus.WORK_FROM_HOME: {AttendanceStatus.PRESENT, AttendanceStatus.HALF_DAY, AttendanceStatus.ABSENT},
}

CHALLAN_TRANSITIONS: dict[ChallanStatus, set[ChallanStatus]] = {
    ChallanStatus.DRAFT: {ChallanStatus.SUBMITTED},
    ChallanStatus.SUBMITTED: {ChallanStatus.APPROVED, ChallanStatus.REJECTED},
    ChallanStatus.APPROVED: set(),
    ChallanStatus.REJECTED: {ChallanStatus.DRAFT},
}

SALARY_TRANSITIONS: dict[SalaryStatus, set[SalaryStatus]] = {
    SalaryStatus.DRAFT: {SalaryStatus.PENDING_APPROVAL, SalaryStatus.APPROVED, SalaryStatus.CANCELLED},
    SalaryStatus.PENDING_APPROVAL: {SalaryStatus.APPROVED, SalaryStatus.CANCELLED},
    SalaryStatus.APPROVED: {SalaryStatus.PAID, SalaryStatus.CANCELLED},
    SalaryStatus.PAID: set(),
    SalaryStatus.CANCELLED: set(),
}

LEAVE_TRANSITIONS: dict[LeaveStatus, set[LeaveStatus]] = {
    LeaveStatus.PENDING: {LeaveStatus.APPROVED, LeaveStatus.REJECTED, LeaveStatus.CANCELLED},
    LeaveStatus.APPROVED: {LeaveStatus.CANCELLED},
    LeaveStatus.REJECTED: set(),
    LeaveStatus.CANCELLED: set(),
}


def ensure_transition(entity: str, table: dict, current: Enum, target: Enum) -> None:
    """Raise ``InvalidTransitionError`` unless *current* may move to *target*."""
    if current == target:
        return
    if target not in table.get(current, set()):
        raise InvalidTransitionError(entity, current.value, target.value)
