"""Shared persistence helpers for the entity routers."""

import math
from typing import Any, Dict, List, Optional, Sequence, Tuple, Type, TypeVar
from uuid import UUID

from pydantic import BaseModel
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from profusion.core.errors import ConflictError, DuplicateError, NotFound, ValidationError
from profusion.core.logging import get_logger
from profusion.models.base import Base

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


async def get_or_404(
    db: AsyncSession,
    model: Type[ModelT],
    obj_id: UUID,
    label: Optional[str] = None,
) -> ModelT:
    """Load a row with its references freshly populated, or raise NotFound."""
    result = await db.execute(
        select(model)
        .where(model.id == obj_id)
        .execution_options(populate_existing=True)
    )
    obj = result.scalar_one_or_none()
    if obj is None:
        raise NotFound(f"{label or model.__name__} not found")
    return obj


async def ensure_references(db: AsyncSession, refs: Dict[str, Tuple[Type[Base], Optional[UUID]]]) -> None:
    """Raise NotFound for the first referenced id that does not exist.

    ``refs`` maps a human label to ``(model, id)``; ``None`` ids are skipped.
    """
    for label, (model, ref_id) in refs.items():
        if ref_id is None:
            continue
        exists = await db.scalar(select(func.count()).select_from(model).where(model.id == ref_id))
        if not exists:
            raise NotFound(f"{label} not found")


def collect_changes(update: BaseModel, non_nullable: Sequence[str] = ()) -> Dict[str, Any]:
    """Fields explicitly sent in a PATCH body.

    Raises ValidationError when nothing was sent or when a required column
    is explicitly set to null.
    """
    changes = update.model_dump(exclude_unset=True)
    if not changes:
        raise ValidationError("No fields to update")
    nulled = {field: "may not be null" for field in non_nullable if field in changes and changes[field] is None}
    if nulled:
        raise ValidationError("Invalid update", fields=nulled)
    return changes


def apply_changes(obj: Base, changes: Dict[str, Any]) -> None:
    for field, value in changes.items():
        setattr(obj, field, value)


async def commit_unique(db: AsyncSession, duplicate: DuplicateError) -> None:
    """Commit, translating a unique-constraint violation into ``duplicate``."""
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        logger.info("Unique constraint rejected write", error=str(e.orig))
        raise duplicate from e


async def delete_row(db: AsyncSession, obj: Base, label: str) -> None:
    """Delete a row; rows still referenced by others raise ConflictError."""
    await db.delete(obj)
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise ConflictError(f"{label} is still referenced by other records") from e


async def paginate(
    db: AsyncSession,
    query: Select,
    page: int,
    page_size: int,
) -> Tuple[Sequence[Any], int]:
    """Run ``query`` for one page and return ``(rows, total)``."""
    count_query = select(func.count()).select_from(query.order_by(None).subquery())
    total = await db.scalar(count_query) or 0

    query = query.offset((page - 1) * page_size).limit(page_size)
    result = await db.execute(query)
    return result.scalars().all(), total


def page_payload(items: List[Any], total: int, page: int, page_size: int) -> Dict[str, Any]:
    return {
        "items": items,
        "total": total,
        "page": page,
        "page_size": page_size,
        "pages": math.ceil(total / page_size) if total else 0,
    }
