"""
Task endpoints: CRUD, assignment, status flow, comments, templates and
per-type task permissions.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from docdesk.api.v1.deps import (get_current_active_user, get_stores,
                                 require_permission)
from docdesk.schemas.common import DeleteResponse
from docdesk.schemas.document import StatusChange
from docdesk.schemas.task import (AssignRequest, CommentCreate, Task,
                                  TaskCreate, TaskPermission,
                                  TaskPermissionCheck, TaskPermissionSet,
                                  TaskStats, TaskTemplate, TaskType,
                                  TaskUpdate, TemplateTaskCreate)
from docdesk.schemas.user import User
from docdesk.stores.base import intersect
from docdesk.stores.registry import Stores
from docdesk.stores.tasks import TASK_TEMPLATES

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get("", response_model=list[Task])
async def list_tasks(
    assigned_to: Optional[str] = Query(None),
    type: Optional[TaskType] = Query(None),
    overdue: bool = Query(False),
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("tasks", "read")),
) -> list[Task]:
    tasks = stores.tasks.overdue() if overdue else stores.tasks.list()
    if assigned_to is not None:
        tasks = intersect(tasks, stores.tasks.by_user(assigned_to))
    if type is not None:
        tasks = intersect(tasks, stores.tasks.by_type(type))
    return tasks


@router.get("/stats", response_model=TaskStats)
async def task_stats(
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("tasks", "read")),
) -> TaskStats:
    return stores.tasks.stats()


@router.get("/templates", response_model=list[TaskTemplate])
async def list_templates(
    _actor: User = Depends(require_permission("tasks", "read")),
) -> list[TaskTemplate]:
    return list(TASK_TEMPLATES.values())


# ── Task permissions ────────────────────────────────────────────────
@router.get("/can", response_model=TaskPermissionCheck)
async def check_task_permission(
    task_type: TaskType,
    action: str,
    stores: Stores = Depends(get_stores),
    actor: User = Depends(get_current_active_user),
) -> TaskPermissionCheck:
    """Whether the caller may perform *action* (e.g. ``can_edit``) on tasks of a type."""
    allowed = stores.task_permissions.has_task_permission(actor, task_type, action)
    return TaskPermissionCheck(task_type=task_type, action=action, allowed=allowed)


@router.get("/permissions/{user_id}", response_model=list[TaskPermission])
async def list_task_permissions(
    user_id: str,
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("users", "read")),
) -> list[TaskPermission]:
    stores.users.require(user_id)
    return stores.task_permissions.for_user(user_id)


@router.put("/permissions/{user_id}", response_model=list[TaskPermission])
async def replace_task_permissions(
    user_id: str,
    body: list[TaskPermissionSet],
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("users", "update")),
) -> list[TaskPermission]:
    stores.users.require(user_id)
    return await stores.task_permissions.replace_for_user(user_id, body)


# ── Tasks ───────────────────────────────────────────────────────────
@router.post("/from-template", response_model=Task, status_code=201)
async def create_task_from_template(
    body: TemplateTaskCreate,
    stores: Stores = Depends(get_stores),
    actor: User = Depends(require_permission("tasks", "create")),
) -> Task:
    return await stores.tasks.create_from_template(body.template_id, actor, body.overrides)


@router.post("", response_model=Task, status_code=201)
async def create_task(
    body: TaskCreate,
    stores: Stores = Depends(get_stores),
    actor: User = Depends(require_permission("tasks", "create")),
) -> Task:
    return await stores.tasks.create_task(body, actor)


@router.get("/{task_id}", response_model=Task)
async def get_task(
    task_id: str,
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("tasks", "read")),
) -> Task:
    return stores.tasks.require(task_id)


@router.put("/{task_id}", response_model=Task)
async def update_task(
    task_id: str,
    body: TaskUpdate,
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("tasks", "update")),
) -> Task:
    return await stores.tasks.update_task(task_id, body)


@router.post("/{task_id}/assign", response_model=Task)
async def assign_task(
    task_id: str,
    body: AssignRequest,
    stores: Stores = Depends(get_stores),
    actor: User = Depends(require_permission("tasks", "update")),
) -> Task:
    stores.users.require(body.user_id)
    return await stores.tasks.assign_task(task_id, body.user_id, actor)


@router.patch("/{task_id}/status", response_model=Task)
async def change_task_status(
    task_id: str,
    body: StatusChange,
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("tasks", "update")),
) -> Task:
    return await stores.tasks.update_task_status(task_id, body.status)


@router.post("/{task_id}/comments", response_model=Task)
async def add_task_comment(
    task_id: str,
    body: CommentCreate,
    stores: Stores = Depends(get_stores),
    actor: User = Depends(require_permission("tasks", "update")),
) -> Task:
    return await stores.tasks.add_comment(task_id, body, actor)


@router.delete("/{task_id}", response_model=DeleteResponse)
async def delete_task(
    task_id: str,
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("tasks", "delete")),
) -> DeleteResponse:
    await stores.tasks.delete(task_id)
    return DeleteResponse(success=True, message=f"Task {task_id} deleted")
