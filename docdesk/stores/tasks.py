"""
Tasks: assignment, status flow, comments, templates, workload stats and
per-type task permissions.

``overdue`` is never stored; it is derived from the due date on read.
"""

from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime
from typing import Any

from pydantic import ValidationError

from docdesk.core.exceptions import (ConflictError, NotFoundError,
                                     ValidationFailedError)
from docdesk.core.status import TASK_TRANSITIONS, TaskStatus, ensure_transition
from docdesk.schemas.task import (CommentCreate, Task, TaskActions, TaskComment,
                                  TaskCreate, TaskPermission, TaskPermissionSet,
                                  TaskPriority, TaskStats, TaskTemplate,
                                  TaskType, TaskUpdate)
from docdesk.schemas.user import Role, User
from docdesk.stores.base import EntityStore, validation_message

logger = logging.getLogger(__name__)

_CLOSED = {TaskStatus.COMPLETED, TaskStatus.CANCELLED}

TASK_TEMPLATES: dict[str, TaskTemplate] = {
    t.id: t
    for t in (
        TaskTemplate(
            id="TEMPLATE001",
            name="Document Collection",
            description="Standard document collection task",
            type=TaskType.DOCUMENT_COLLECTION,
            default_priority=TaskPriority.MEDIUM,
            estimated_hours=2,
            checklist=[
                "Verify customer identity",
                "Collect all required documents",
                "Take photos of documents",
            ],
        ),
        TaskTemplate(
            id="TEMPLATE002",
            name="Data Entry",
            description="Enter collected document details into the registry",
            type=TaskType.DATA_ENTRY,
            default_priority=TaskPriority.MEDIUM,
            estimated_hours=1,
            checklist=["Enter property details", "Cross-check customer details"],
        ),
        TaskTemplate(
            id="TEMPLATE003",
            name="Document Delivery",
            description="Deliver registered documents to the customer",
            type=TaskType.DOCUMENT_DELIVERY,
            default_priority=TaskPriority.HIGH,
            estimated_hours=1.5,
            checklist=["Call customer before visit", "Collect delivery signature"],
        ),
    )
}


def is_overdue(task: Task, now: datetime) -> bool:
    return task.due_date is not None and task.due_date < now and task.status not in _CLOSED


class TaskStore(EntityStore[Task]):
    model = Task
    name = "Task"
    table = "tasks"
    id_prefix = "TASK"
    columns = (
        "title",
        "description",
        "type",
        "priority",
        "status",
        "assigned_to",
        "assigned_by",
        "document_id",
        "customer_id",
        "builder_id",
        "due_date",
        "completed_at",
        "estimated_hours",
        "actual_hours",
        "tags",
        "comments",
        "created_at",
        "updated_at",
    )
    json_columns = frozenset({"tags", "comments"})
    ref_columns = frozenset({"document_id", "customer_id", "builder_id"})
    natural_key = ("title", "assigned_to", "assigned_by")

    def on_update(self, current: Task, merged: Task) -> Task:
        if merged.status == current.status:
            return merged
        ensure_transition("Task", TASK_TRANSITIONS, current.status, merged.status)
        if merged.status == TaskStatus.COMPLETED:
            merged = merged.model_copy(update={"completed_at": self.ctx.now()})
        return merged

    # ── Operations ──────────────────────────────────────────────────
    async def create_task(self, data: TaskCreate, actor: User) -> Task:
        payload = data.model_dump()
        payload["assigned_to"] = data.assigned_to or actor.id
        payload["assigned_by"] = actor.id
        payload["status"] = TaskStatus.PENDING
        return await self.create(payload)

    async def update_task(self, id: str, data: TaskUpdate) -> Task:
        return await self.update(id, data.model_dump(exclude_unset=True))

    async def assign_task(self, id: str, user_id: str, actor: User) -> Task:
        task = await self.update(id, {"assigned_to": user_id, "assigned_by": actor.id})
        logger.info("Task %s assigned to %s", id, user_id)
        return task

    async def update_task_status(self, id: str, status: TaskStatus | str) -> Task:
        try:
            target = TaskStatus(status)
        except ValueError:
            raise ValidationFailedError(f"Unknown task status '{status}'") from None
        return await self.update(id, {"status": target})

    async def add_comment(self, id: str, data: CommentCreate, actor: User) -> Task:
        task = self.require(id)
        comment = TaskComment(
            id=f"CMT{len(task.comments) + 1:03d}",
            content=data.content,
            author_id=actor.id,
            author_name=actor.name,
            is_internal=data.is_internal,
            created_at=self.ctx.now(),
        )
        return await self.update(id, {"comments": [*task.comments, comment]})

    async def create_from_template(
        self, template_id: str, actor: User, overrides: dict[str, Any] | None = None
    ) -> Task:
        template = TASK_TEMPLATES.get(template_id)
        if template is None:
            raise NotFoundError(f"Template {template_id} not found")
        defaults = {
            "title": template.name,
            "description": template.description,
            "type": template.type,
            "priority": template.default_priority,
            "estimated_hours": template.estimated_hours,
        }
        try:
            data = TaskCreate.model_validate({**defaults, **(overrides or {})})
        except ValidationError as e:
            raise ValidationFailedError(validation_message(e)) from e
        return await self.create_task(data, actor)

    # ── Reads ───────────────────────────────────────────────────────
    def by_user(self, user_id: str) -> list[Task]:
        return [t for t in self._items.values() if t.assigned_to == user_id]

    def by_type(self, task_type: TaskType) -> list[Task]:
        return [t for t in self._items.values() if t.type == task_type]

    def overdue(self, now: datetime | None = None) -> list[Task]:
        now = now or self.ctx.now()
        return [t for t in self._items.values() if is_overdue(t, now)]

    def stats(self, now: datetime | None = None) -> TaskStats:
        now = now or self.ctx.now()
        tasks = self.list()
        by_status = Counter(t.status for t in tasks)
        timed = [t.actual_hours for t in tasks if t.status == TaskStatus.COMPLETED and t.actual_hours]
        return TaskStats(
            total_tasks=len(tasks),
            pending_tasks=by_status[TaskStatus.PENDING],
            in_progress_tasks=by_status[TaskStatus.IN_PROGRESS],
            completed_tasks=by_status[TaskStatus.COMPLETED],
            overdue_tasks=sum(1 for t in tasks if is_overdue(t, now)),
            average_completion_time=round(sum(timed) / len(timed), 2) if timed else 0.0,
            tasks_by_type=dict(Counter(t.type.value for t in tasks)),
            tasks_by_priority=dict(Counter(t.priority.value for t in tasks)),
            user_workload=dict(
                Counter(t.assigned_to for t in tasks if t.assigned_to and t.status not in _CLOSED)
            ),
        )


class TaskPermissionStore(EntityStore[TaskPermission]):
    """
    Fine-grained task rights: one entry per user and task type, holding the
    allowed actions and optional restrictions.  ``main_admin`` needs no
    entries; anyone else without a matching entry is refused.
    """

    model = TaskPermission
    name = "Task permission"
    table = "task_permissions"
    id_prefix = "TPERM"
    columns = ("user_id", "task_type", "permissions", "restrictions", "created_at", "updated_at")
    json_columns = frozenset({"permissions", "restrictions"})
    ref_columns = frozenset({"user_id"})
    natural_key = ("user_id", "task_type")

    def check(self, item: TaskPermission, existing_id: str | None = None) -> None:
        other = self.entry(item.user_id, item.task_type)
        if other is not None and other.id != existing_id:
            raise ConflictError(
                f"User {item.user_id} already has permissions for {item.task_type.value} tasks"
            )

    def entry(self, user_id: str, task_type: TaskType) -> TaskPermission | None:
        return next(
            (
                p
                for p in self._items.values()
                if p.user_id == user_id and p.task_type == task_type
            ),
            None,
        )

    def for_user(self, user_id: str) -> list[TaskPermission]:
        return [p for p in self._items.values() if p.user_id == user_id]

    def has_task_permission(self, user: User | None, task_type: TaskType, action: str) -> bool:
        if action not in TaskActions.model_fields:
            raise ValidationFailedError(f"Unknown task action '{action}'")
        if user is None:
            return False
        if user.role == Role.MAIN_ADMIN:
            return True
        entry = self.entry(user.id, task_type)
        return entry is not None and getattr(entry.permissions, action)

    async def replace_for_user(
        self, user_id: str, entries: list[TaskPermissionSet]
    ) -> list[TaskPermission]:
        """Drop the user's current entries and store *entries* instead."""
        types = [e.task_type for e in entries]
        if len(set(types)) != len(types):
            raise ValidationFailedError("Each task type may appear only once")
        for old in self.for_user(user_id):
            await self.delete(old.id)
        created = [
            await self.create({"user_id": user_id, **e.model_dump()}) for e in entries
        ]
        logger.info("Task permissions for %s replaced (%d entries)", user_id, len(created))
        return created
