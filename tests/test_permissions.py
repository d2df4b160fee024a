"""Tests for task permission grants and the access check."""

import pytest
import pytest_asyncio
from sqlalchemy import func, select

from profusion.core.errors import NotFound, PermissionDenied
from profusion.models import PermissionLevel, Task, TaskPermission
from profusion.services.credentials import CredentialStore
from profusion.services.permissions import PermissionService, is_admin

PASSWORD = "Abc123!@"


@pytest.fixture
def permissions(db):
    return PermissionService(db)


@pytest_asyncio.fixture
async def users(db, hasher):
    store = CredentialStore(db, hasher)
    return {
        "admin": await store.register("Admin", "admin@x.com", PASSWORD),
        "owner": await store.register("Owner", "owner@x.com", PASSWORD),
        "assignee": await store.register("Assignee", "assignee@x.com", PASSWORD),
        "other": await store.register("Other", "other@x.com", PASSWORD),
    }


@pytest_asyncio.fixture
async def task(db, users):
    task = Task(title="Write report", created_by=users["owner"].id, assigned_to=users["assignee"].id)
    db.add(task)
    await db.commit()
    return task


class TestLevels:
    async def test_admin_role_has_admin_everywhere(self, permissions, users, task):
        assert is_admin(users["admin"])
        assert await permissions.level_for(users["admin"], task) == PermissionLevel.ADMIN

    async def test_creator_has_admin(self, permissions, users, task):
        assert await permissions.level_for(users["owner"], task) == PermissionLevel.ADMIN

    async def test_assignee_has_write(self, permissions, users, task):
        assert await permissions.level_for(users["assignee"], task) == PermissionLevel.WRITE
        assert not await permissions.check(users["assignee"], task, PermissionLevel.ADMIN)

    async def test_stranger_has_nothing(self, permissions, users, task):
        assert await permissions.level_for(users["other"], task) is None
        with pytest.raises(PermissionDenied):
            await permissions.ensure(users["other"], task, PermissionLevel.READ)

    async def test_grant_levels_are_ordered(self, permissions, users, task):
        await permissions.grant(task.id, users["other"].id, PermissionLevel.WRITE)

        other = users["other"]
        assert await permissions.check(other, task, PermissionLevel.READ)
        assert await permissions.check(other, task, PermissionLevel.WRITE)
        assert not await permissions.check(other, task, PermissionLevel.ADMIN)

    async def test_assignee_keeps_the_higher_level(self, permissions, users, task):
        await permissions.grant(task.id, users["assignee"].id, PermissionLevel.READ)
        assert await permissions.level_for(users["assignee"], task) == PermissionLevel.WRITE


class TestGrantAndRevoke:
    async def test_grant_again_replaces_level(self, permissions, users, task, db):
        await permissions.grant(task.id, users["other"].id, PermissionLevel.READ)
        grant = await permissions.grant(task.id, users["other"].id, PermissionLevel.ADMIN)

        assert grant.permission_type == PermissionLevel.ADMIN
        count = await db.scalar(select(func.count()).select_from(TaskPermission))
        assert count == 1

    async def test_revoke(self, permissions, users, task):
        await permissions.grant(task.id, users["other"].id, PermissionLevel.READ)
        await permissions.revoke(task.id, users["other"].id)

        assert await permissions.level_for(users["other"], task) is None

    async def test_revoke_missing_grant(self, permissions, users, task):
        with pytest.raises(NotFound):
            await permissions.revoke(task.id, users["other"].id)


class TestReadableTasks:
    async def test_filters_to_creator_assignee_and_grants(self, permissions, users, task, db):
        hidden = Task(title="Private", created_by=users["owner"].id)
        db.add(hidden)
        await db.commit()

        async def visible_to(user):
            result = await db.execute(permissions.readable_tasks(user, select(Task)))
            return {t.title for t in result.scalars()}

        assert await visible_to(users["admin"]) == {"Write report", "Private"}
        assert await visible_to(users["owner"]) == {"Write report", "Private"}
        assert await visible_to(users["assignee"]) == {"Write report"}
        assert await visible_to(users["other"]) == set()

        await permissions.grant(hidden.id, users["other"].id, PermissionLevel.READ)
        assert await visible_to(users["other"]) == {"Private"}
