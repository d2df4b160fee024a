"""Task management API endpoints."""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from profusion.api.deps import get_current_user, get_permission_service, require_task_permission
from profusion.core.database import get_db
from profusion.core.logging import get_logger
from profusion.models import (
    PermissionLevel, Task, TaskApprovalStatus, TaskStage, TaskStatus, User,
)
from profusion.schemas.common import MessageResponse, PaginatedResponse
from profusion.schemas.task import TaskCreate, TaskResponse, TaskUpdate
from profusion.services.crud import (
    apply_changes, collect_changes, delete_row, ensure_references, get_or_404,
    page_payload, paginate,
)
from profusion.services.permissions import PermissionService

logger = get_logger(__name__)
router = APIRouter()


async def _ensure_task_refs(db: AsyncSession, values: dict) -> None:
    await ensure_references(db, {
        "Assignee": (User, values.get("assigned_to")),
        "Task status": (TaskStatus, values.get("status_id")),
        "Task approval status": (TaskApprovalStatus, values.get("approval_status_id")),
        "Task stage": (TaskStage, values.get("task_stage_id")),
    })


async def _list_readable(
    user: User,
    permissions: PermissionService,
    page: int,
    page_size: int,
    status_id: Optional[UUID] = None,
    task_stage_id: Optional[UUID] = None,
    assigned_to: Optional[UUID] = None,
) -> dict:
    query = select(Task).order_by(Task.created_at.desc())
    if status_id:
        query = query.where(Task.status_id == status_id)
    if task_stage_id:
        query = query.where(Task.task_stage_id == task_stage_id)
    if assigned_to:
        query = query.where(Task.assigned_to == assigned_to)

    query = permissions.readable_tasks(user, query)
    rows, total = await paginate(permissions.db, query, page, page_size)
    return page_payload(rows, total, page, page_size)


@router.get("/", response_model=PaginatedResponse[TaskResponse])
async def list_tasks(
    status_id: Optional[UUID] = Query(None),
    task_stage_id: Optional[UUID] = Query(None),
    assigned_to: Optional[UUID] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    user: User = Depends(get_current_user),
    permissions: PermissionService = Depends(get_permission_service),
):
    """List the tasks the caller may read."""
    return await _list_readable(
        user, permissions, page, page_size,
        status_id=status_id, task_stage_id=task_stage_id, assigned_to=assigned_to,
    )


@router.get("/filter/{status_id}/{task_stage_id}", response_model=PaginatedResponse[TaskResponse])
async def filter_tasks(
    status_id: UUID,
    task_stage_id: UUID,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    user: User = Depends(get_current_user),
    permissions: PermissionService = Depends(get_permission_service),
):
    """Readable tasks in one status and one stage."""
    return await _list_readable(
        user, permissions, page, page_size,
        status_id=status_id, task_stage_id=task_stage_id,
    )


@router.post("/", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    body: TaskCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Create a task. The caller becomes its creator and holds admin on it."""
    values = body.model_dump()
    await _ensure_task_refs(db, values)

    task = Task(created_by=user.id, **values)
    db.add(task)
    await db.commit()

    logger.info("Task created", task_id=str(task.id), created_by=str(user.id))
    return await get_or_404(db, Task, task.id)


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(task: Task = Depends(require_task_permission(PermissionLevel.READ))):
    return task


@router.patch("/{task_id}", response_model=TaskResponse)
async def update_task(
    body: TaskUpdate,
    task: Task = Depends(require_task_permission(PermissionLevel.WRITE)),
    db: AsyncSession = Depends(get_db),
):
    """Update a task (write access required)."""
    changes = collect_changes(body, non_nullable=("title",))
    await _ensure_task_refs(db, changes)
    apply_changes(task, changes)
    await db.commit()

    logger.info("Task updated", task_id=str(task.id), fields=sorted(changes))
    return await get_or_404(db, Task, task.id)


@router.delete("/{task_id}", response_model=MessageResponse)
async def delete_task(
    task: Task = Depends(require_task_permission(PermissionLevel.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    """Delete a task with its permissions and messages (admin access required)."""
    task_id = task.id
    await delete_row(db, task, "Task")
    logger.info("Task deleted", task_id=str(task_id))
    return MessageResponse(message="Task deleted successfully")
