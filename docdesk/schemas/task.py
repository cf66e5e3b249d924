"""Pydantic schemas for tasks, comments and templates."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

from docdesk.core.status import TaskStatus


class TaskType(str, Enum):
    DOCUMENT_COLLECTION = "document_collection"
    DATA_ENTRY = "data_entry"
    DOCUMENT_DELIVERY = "document_delivery"
    CHALLAN_CREATION = "challan_creation"
    PAYMENT_PROCESSING = "payment_processing"
    CUSTOMER_FOLLOW_UP = "customer_follow_up"
    DOCUMENT_VERIFICATION = "document_verification"
    REGISTRATION_FOLLOW_UP = "registration_follow_up"
    QUALITY_CHECK = "quality_check"
    CUSTOM = "custom"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class TaskComment(BaseModel):
    id: str
    content: str
    author_id: str
    author_name: str
    is_internal: bool = False
    created_at: datetime


class Task(BaseModel):
    id: str = ""
    title: str
    description: str = ""
    type: TaskType = TaskType.CUSTOM
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.PENDING
    assigned_to: str = ""
    assigned_by: str = ""
    document_id: str | None = None
    customer_id: str | None = None
    builder_id: str | None = None
    due_date: datetime | None = None
    completed_at: datetime | None = None
    estimated_hours: float | None = None
    actual_hours: float | None = None
    tags: list[str] = Field(default_factory=list)
    comments: list[TaskComment] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"extra": "ignore"}


class TaskCreate(BaseModel):
    title: str
    description: str = ""
    type: TaskType = TaskType.CUSTOM
    priority: TaskPriority = TaskPriority.MEDIUM
    assigned_to: str = ""
    document_id: str | None = None
    customer_id: str | None = None
    builder_id: str | None = None
    due_date: datetime | None = None
    estimated_hours: float | None = Field(default=None, ge=0)
    tags: list[str] = Field(default_factory=list)

    @field_validator("title")
    @classmethod
    def _title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Title must not be empty")
        return v


class TaskUpdate(BaseModel):
    title: str | None = None
    description: str | None = None
    priority: TaskPriority | None = None
    assigned_to: str | None = None
    due_date: datetime | None = None
    estimated_hours: float | None = Field(default=None, ge=0)
    actual_hours: float | None = Field(default=None, ge=0)
    tags: list[str] | None = None


class CommentCreate(BaseModel):
    content: str
    is_internal: bool = False


class AssignRequest(BaseModel):
    user_id: str


class TaskTemplate(BaseModel):
    id: str
    name: str
    description: str
    type: TaskType
    default_priority: TaskPriority = TaskPriority.MEDIUM
    estimated_hours: float | None = None
    checklist: list[str] = Field(default_factory=list)


class TemplateTaskCreate(BaseModel):
    template_id: str
    # Any TaskCreate field; wins over the template defaults
    overrides: dict[str, Any] = Field(default_factory=dict)


class TaskStats(BaseModel):
    total_tasks: int
    pending_tasks: int
    in_progress_tasks: int
    completed_tasks: int
    overdue_tasks: int
    average_completion_time: float
    tasks_by_type: dict[str, int]
    tasks_by_priority: dict[str, int]
    user_workload: dict[str, int]


# ── Per-user, per-task-type permissions ─────────────────────────────
class TaskActions(BaseModel):
    can_view: bool = False
    can_create: bool = False
    can_edit: bool = False
    can_delete: bool = False
    can_assign: bool = False
    can_comment: bool = False
    can_change_status: bool = False
    can_view_all_tasks: bool = False
    can_edit_priority: bool = False
    can_set_due_date: bool = False
    can_add_attachments: bool = False
    can_view_comments: bool = False


class TaskRestrictions(BaseModel):
    max_tasks_per_day: int | None = Field(default=None, ge=0)
    allowed_statuses: list[TaskStatus] = Field(default_factory=list)
    can_only_view_own_tasks: bool = False


class TaskPermission(BaseModel):
    id: str = ""
    user_id: str
    task_type: TaskType
    permissions: TaskActions = Field(default_factory=TaskActions)
    restrictions: TaskRestrictions | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"extra": "ignore"}


class TaskPermissionSet(BaseModel):
    """One entry of the list that replaces a user's task permissions."""

    task_type: TaskType
    permissions: TaskActions = Field(default_factory=TaskActions)
    restrictions: TaskRestrictions | None = None


class TaskPermissionCheck(BaseModel):
    task_type: TaskType
    action: str
    allowed: bool
