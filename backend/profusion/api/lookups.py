"""Routers for name-only lookup entities (roles, task statuses, approval statuses)."""

from typing import Type
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from profusion.api.deps import get_current_user, require_admin
from profusion.core.database import get_db
from profusion.core.errors import DuplicateError
from profusion.core.logging import get_logger
from profusion.models import Role, TaskApprovalStatus, TaskStatus
from profusion.models.base import Base
from profusion.schemas.common import (
    MessageResponse, NamedCreate, NamedResponse, NamedUpdate, PaginatedResponse,
)
from profusion.services.crud import (
    apply_changes, collect_changes, commit_unique, delete_row, get_or_404, page_payload, paginate,
)

logger = get_logger(__name__)


def build_lookup_router(model: Type[Base], label: str) -> APIRouter:
    """CRUD router for a model with a single unique ``name`` column.

    Reads need an authenticated user; writes need the admin role.
    """
    router = APIRouter(dependencies=[Depends(get_current_user)])

    @router.get("/", response_model=PaginatedResponse[NamedResponse])
    async def list_items(
        page: int = Query(1, ge=1),
        page_size: int = Query(20, ge=1, le=100),
        db: AsyncSession = Depends(get_db),
    ):
        rows, total = await paginate(db, select(model).order_by(model.name), page, page_size)
        return page_payload(rows, total, page, page_size)

    @router.post(
        "/",
        response_model=NamedResponse,
        status_code=status.HTTP_201_CREATED,
        dependencies=[Depends(require_admin)],
    )
    async def create_item(body: NamedCreate, db: AsyncSession = Depends(get_db)):
        item = model(name=body.name)
        db.add(item)
        await commit_unique(db, DuplicateError(f"{label} already exists"))
        logger.info(f"{label} created", name=body.name)
        return await get_or_404(db, model, item.id, label)

    @router.get("/{item_id}", response_model=NamedResponse)
    async def get_item(item_id: UUID, db: AsyncSession = Depends(get_db)):
        return await get_or_404(db, model, item_id, label)

    @router.patch("/{item_id}", response_model=NamedResponse, dependencies=[Depends(require_admin)])
    async def update_item(item_id: UUID, body: NamedUpdate, db: AsyncSession = Depends(get_db)):
        item = await get_or_404(db, model, item_id, label)
        apply_changes(item, collect_changes(body, non_nullable=("name",)))
        await commit_unique(db, DuplicateError(f"{label} name already exists"))
        return await get_or_404(db, model, item_id, label)

    @router.delete("/{item_id}", response_model=MessageResponse, dependencies=[Depends(require_admin)])
    async def delete_item(item_id: UUID, db: AsyncSession = Depends(get_db)):
        item = await get_or_404(db, model, item_id, label)
        await delete_row(db, item, label)
        logger.info(f"{label} deleted", id=str(item_id))
        return MessageResponse(message=f"{label} deleted successfully")

    return router


roles_router = build_lookup_router(Role, "Role")
task_statuses_router = build_lookup_router(TaskStatus, "Task status")
task_approval_statuses_router = build_lookup_router(TaskApprovalStatus, "Task approval status")
