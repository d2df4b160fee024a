"""Task message API endpoints."""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select

from profusion.api.deps import ensure_task_access, get_current_user, get_permission_service
from profusion.core.errors import PermissionDenied
from profusion.core.logging import get_logger
from profusion.models import PermissionLevel, Task, TaskMessage, User
from profusion.schemas.common import MessageResponse, PaginatedResponse
from profusion.schemas.task import TaskMessageCreate, TaskMessageResponse
from profusion.services.crud import delete_row, ensure_references, get_or_404, page_payload, paginate
from profusion.services.permissions import PermissionService, is_admin

logger = get_logger(__name__)
router = APIRouter()


@router.get("/", response_model=PaginatedResponse[TaskMessageResponse])
async def list_task_messages(
    task_id: Optional[UUID] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=100),
    user: User = Depends(get_current_user),
    permissions: PermissionService = Depends(get_permission_service),
):
    """Conversation on one task, oldest first.

    Without ``task_id`` the caller gets the messages they sent or received
    plus those on tasks they may read.
    """
    query = select(TaskMessage).order_by(TaskMessage.created_at)
    if task_id:
        await ensure_task_access(permissions, user, task_id, PermissionLevel.READ)
        query = query.where(TaskMessage.task_id == task_id)
    elif not is_admin(user):
        readable = permissions.readable_tasks(user, select(Task.id))
        query = query.where(
            (TaskMessage.sender_id == user.id)
            | (TaskMessage.receiver_id == user.id)
            | TaskMessage.task_id.in_(readable)
        )
    rows, total = await paginate(permissions.db, query, page, page_size)
    return page_payload(rows, total, page, page_size)


@router.post("/", response_model=TaskMessageResponse, status_code=status.HTTP_201_CREATED)
async def send_task_message(
    body: TaskMessageCreate,
    user: User = Depends(get_current_user),
    permissions: PermissionService = Depends(get_permission_service),
):
    """Post a message about a task as the caller."""
    await ensure_task_access(permissions, user, body.task_id, PermissionLevel.READ)
    await ensure_references(permissions.db, {"Receiver": (User, body.receiver_id)})

    db = permissions.db
    message = TaskMessage(
        task_id=body.task_id,
        sender_id=user.id,
        receiver_id=body.receiver_id,
        content=body.content,
    )
    db.add(message)
    await db.commit()

    logger.info("Task message sent", message_id=str(message.id), task_id=str(body.task_id))
    return await get_or_404(db, TaskMessage, message.id, "Task message")


@router.get("/{message_id}", response_model=TaskMessageResponse)
async def get_task_message(
    message_id: UUID,
    user: User = Depends(get_current_user),
    permissions: PermissionService = Depends(get_permission_service),
):
    message = await get_or_404(permissions.db, TaskMessage, message_id, "Task message")
    if user.id not in (message.sender_id, message.receiver_id):
        await ensure_task_access(permissions, user, message.task_id, PermissionLevel.READ)
    return message


@router.delete("/{message_id}", response_model=MessageResponse)
async def delete_task_message(
    message_id: UUID,
    user: User = Depends(get_current_user),
    permissions: PermissionService = Depends(get_permission_service),
):
    """Delete a message (its sender, or admin access to the task)."""
    message = await get_or_404(permissions.db, TaskMessage, message_id, "Task message")
    if message.sender_id != user.id:
        task = await get_or_404(permissions.db, Task, message.task_id, "Task")
        if not await permissions.check(user, task, PermissionLevel.ADMIN):
            raise PermissionDenied("Only the sender or a task administrator can delete this message")

    await delete_row(permissions.db, message, "Task message")
    logger.info("Task message deleted", message_id=str(message_id), by=str(user.id))
    return MessageResponse(message="Task message deleted successfully")
