"""Task permission API endpoints."""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select

from profusion.api.deps import ensure_task_access, get_current_user, get_permission_service
from profusion.models import PermissionLevel, Task, TaskPermission, User
from profusion.schemas.common import MessageResponse, PaginatedResponse
from profusion.schemas.task import TaskPermissionCreate, TaskPermissionResponse
from profusion.services.crud import ensure_references, get_or_404, page_payload, paginate
from profusion.services.permissions import PermissionService, is_admin

router = APIRouter()


@router.get("/", response_model=PaginatedResponse[TaskPermissionResponse])
async def list_task_permissions(
    task_id: Optional[UUID] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    user: User = Depends(get_current_user),
    permissions: PermissionService = Depends(get_permission_service),
):
    """Grants on one task, or on every task the caller may read."""
    query = select(TaskPermission).order_by(
        TaskPermission.permission_type.desc(), TaskPermission.created_at
    )
    if task_id:
        await ensure_task_access(permissions, user, task_id, PermissionLevel.READ)
        query = query.where(TaskPermission.task_id == task_id)
    elif not is_admin(user):
        readable = permissions.readable_tasks(user, select(Task.id))
        query = query.where(TaskPermission.task_id.in_(readable))
    rows, total = await paginate(permissions.db, query, page, page_size)
    return page_payload(rows, total, page, page_size)


@router.post("/", response_model=TaskPermissionResponse, status_code=status.HTTP_201_CREATED)
async def grant_task_permission(
    body: TaskPermissionCreate,
    user: User = Depends(get_current_user),
    permissions: PermissionService = Depends(get_permission_service),
):
    """Grant a level on a task, replacing any earlier grant for that user."""
    await ensure_task_access(permissions, user, body.task_id, PermissionLevel.ADMIN)
    await ensure_references(permissions.db, {"User": (User, body.user_id)})

    return await permissions.grant(body.task_id, body.user_id, body.permission_type)


@router.get("/{permission_id}", response_model=TaskPermissionResponse)
async def get_task_permission(
    permission_id: UUID,
    user: User = Depends(get_current_user),
    permissions: PermissionService = Depends(get_permission_service),
):
    grant = await get_or_404(permissions.db, TaskPermission, permission_id, "Task permission")
    await ensure_task_access(permissions, user, grant.task_id, PermissionLevel.READ)
    return grant


@router.delete("/{permission_id}", response_model=MessageResponse)
async def revoke_task_permission(
    permission_id: UUID,
    user: User = Depends(get_current_user),
    permissions: PermissionService = Depends(get_permission_service),
):
    """Revoke a grant (admin access to the task required)."""
    grant = await get_or_404(permissions.db, TaskPermission, permission_id, "Task permission")
    await ensure_task_access(permissions, user, grant.task_id, PermissionLevel.ADMIN)

    await permissions.revoke(grant.task_id, grant.user_id)
    return MessageResponse(message="Task permission deleted successfully")
