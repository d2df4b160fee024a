"""Permission model: per-task grants and the single policy check.

Access to a task is decided in one place, ``PermissionService.check``:

* users holding the admin role may do anything;
* the creator of a task holds ``ADMIN`` on it;
* the assignee holds ``WRITE`` on it;
* everyone else needs an explicit grant whose level is at least the
  required one.

Every task-scoped handler goes through this check (see ``api.deps``).
"""

from typing import Optional
from uuid import UUID

from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from profusion.core.config import settings
from profusion.core.errors import NotFound, PermissionDenied
from profusion.core.logging import get_logger
from profusion.models import PermissionLevel, Task, TaskPermission, User
from profusion.services.crud import get_or_404

logger = get_logger(__name__)


def is_admin(user: User) -> bool:
    return user.role is not None and user.role.name == settings.ADMIN_ROLE_NAME


class PermissionService:
    """Grants, revocations and checks of task permissions."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def grant(self, task_id: UUID, user_id: UUID, level: PermissionLevel) -> TaskPermission:
        """Give ``user_id`` the ``level`` on ``task_id``.

        There is at most one grant per (task, user); granting again replaces
        the previous level.
        """
        level = PermissionLevel(level)
        existing = await self._find(task_id, user_id)
        if existing is not None:
            existing.permission_type = int(level)
            await self.db.commit()
            logger.info("Task permission updated", task_id=str(task_id), user_id=str(user_id), level=level.name)
            return await get_or_404(self.db, TaskPermission, existing.id, "Task permission")

        permission = TaskPermission(task_id=task_id, user_id=user_id, permission_type=int(level))
        self.db.add(permission)
        try:
            await self.db.commit()
        except IntegrityError:
            # Lost a race against a concurrent grant for the same pair
            await self.db.rollback()
            existing = await self._find(task_id, user_id)
            if existing is None:
                raise
            existing.permission_type = int(level)
            await self.db.commit()
            permission = existing

        logger.info("Task permission granted", task_id=str(task_id), user_id=str(user_id), level=level.name)
        return await get_or_404(self.db, TaskPermission, permission.id, "Task permission")

    async def revoke(self, task_id: UUID, user_id: UUID) -> None:
        result = await self.db.execute(
            delete(TaskPermission)
            .where(TaskPermission.task_id == task_id)
            .where(TaskPermission.user_id == user_id)
        )
        await self.db.commit()
        if not result.rowcount:
            raise NotFound("Task permission not found")
        logger.info("Task permission revoked", task_id=str(task_id), user_id=str(user_id))

    async def level_for(self, user: User, task: Task) -> Optional[PermissionLevel]:
        """Effective level of ``user`` on ``task``, or None for no access."""
        if is_admin(user) or task.created_by == user.id:
            return PermissionLevel.ADMIN

        levels = []
        if task.assigned_to == user.id:
            levels.append(PermissionLevel.WRITE)

        grant = await self._find(task.id, user.id)
        if grant is not None:
            levels.append(PermissionLevel(grant.permission_type))

        return max(levels) if levels else None

    async def check(self, user: User, task: Task, required: PermissionLevel) -> bool:
        level = await self.level_for(user, task)
        return level is not None and level >= required

    async def ensure(self, user: User, task: Task, required: PermissionLevel) -> None:
        if not await self.check(user, task, required):
            logger.info(
                "Task access denied",
                user_id=str(user.id),
                task_id=str(task.id),
                required=PermissionLevel(required).name,
            )
            raise PermissionDenied(f"{PermissionLevel(required).name.lower()} access to this task is required")

    def readable_tasks(self, user: User, query: Select) -> Select:
        """Restrict a ``select(Task)`` to the tasks ``user`` may read."""
        if is_admin(user):
            return query
        granted = select(TaskPermission.task_id).where(TaskPermission.user_id == user.id)
        return query.where(
            (Task.created_by == user.id)
            | (Task.assigned_to == user.id)
            | Task.id.in_(granted)
        )

    async def _find(self, task_id: UUID, user_id: UUID) -> Optional[TaskPermission]:
        return await self.db.scalar(
            select(TaskPermission)
            .where(TaskPermission.task_id == task_id)
            .where(TaskPermission.user_id == user_id)
        )
