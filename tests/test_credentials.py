"""Tests for the credential store."""

import asyncio

import pytest
from sqlalchemy import func, select

from profusion.core.errors import DuplicateEmail, InvalidCredentials, PermissionDenied, WeakPassword
from profusion.models import Role, User
from profusion.services.credentials import CredentialStore, get_or_create_role

PASSWORD = "Abc123!@"


def _count_as_empty_once(db, monkeypatch):
    """Make the next user count read 0, as if taken before another commit landed."""
    real_scalar = db.scalar
    served = []

    async def scalar(statement, *args, **kwargs):
        if not served:
            served.append(statement)
            return 0
        return await real_scalar(statement, *args, **kwargs)

    monkeypatch.setattr(db, "scalar", scalar)


@pytest.fixture
def store(db, hasher):
    return CredentialStore(db, hasher)


class TestRegister:
    async def test_first_user_is_admin_then_members(self, store):
        first = await store.register("Alice", "alice@x.com", PASSWORD)
        second = await store.register("Bob", "bob@x.com", PASSWORD)

        assert first.role.name == "admin"
        assert second.role.name == "member"

    async def test_password_is_stored_hashed(self, store):
        user = await store.register("Alice", "alice@x.com", PASSWORD)

        assert user.hashed_password != PASSWORD
        assert store.hasher.verify(PASSWORD, user.hashed_password)

    async def test_email_is_normalized(self, store):
        user = await store.register("Alice", "  Alice@X.com ", PASSWORD)
        assert user.email == "alice@x.com"

    async def test_duplicate_email(self, store, db):
        await store.register("Alice", "alice@x.com", PASSWORD)

        with pytest.raises(DuplicateEmail):
            await store.register("Alice Again", "ALICE@x.com", PASSWORD)

        assert await db.scalar(select(func.count()).select_from(User)) == 1

    async def test_weak_password_is_rejected_before_hashing(self, store, db, monkeypatch):
        def fail(_password):
            raise AssertionError("weak password reached the hasher")

        monkeypatch.setattr(store.hasher, "hash", fail)

        with pytest.raises(WeakPassword):
            await store.register("Alice", "alice@x.com", "abc123")

        assert await db.scalar(select(func.count()).select_from(User)) == 0

    async def test_explicit_role(self, store, db):
        await store.register("Alice", "alice@x.com", PASSWORD)
        editor = await get_or_create_role(db, "editor")

        user = await store.register("Bob", "bob@x.com", PASSWORD, role_id=editor.id)
        assert user.role_id == editor.id

    async def test_admin_role_cannot_be_self_assigned(self, store):
        first = await store.register("Alice", "alice@x.com", PASSWORD)

        with pytest.raises(PermissionDenied):
            await store.register("Mallory", "mallory@x.com", PASSWORD, role_id=first.role_id)

    async def test_stale_empty_count_falls_back_to_member(self, store, db, monkeypatch):
        await store.register("Alice", "alice@x.com", PASSWORD)
        _count_as_empty_once(db, monkeypatch)

        bob = await store.register("Bob", "bob@x.com", PASSWORD)
        monkeypatch.undo()

        assert bob.role.name == "member"
        assert bob.bootstrap_admin is None
        admins = await db.scalar(
            select(func.count()).select_from(User).where(User.bootstrap_admin.is_(True))
        )
        assert admins == 1

    async def test_stale_empty_count_cannot_claim_admin_role(self, store, db, monkeypatch):
        first = await store.register("Alice", "alice@x.com", PASSWORD)
        _count_as_empty_once(db, monkeypatch)

        with pytest.raises(PermissionDenied):
            await store.register("Mallory", "mallory@x.com", PASSWORD, role_id=first.role_id)
        monkeypatch.undo()

        assert await db.scalar(select(func.count()).select_from(User)) == 1

    async def test_concurrent_first_registrations_elect_one_admin(self, file_session_maker, hasher):
        async def register(name, email):
            async with file_session_maker() as session:
                user = await CredentialStore(session, hasher).register(name, email, PASSWORD)
                return user.role.name

        roles = await asyncio.gather(
            register("Alice", "alice@x.com"),
            register("Bob", "bob@x.com"),
        )

        assert sorted(roles) == ["admin", "member"]

    async def test_default_role_is_created_once(self, store, db):
        await store.register("Alice", "alice@x.com", PASSWORD)
        await store.register("Bob", "bob@x.com", PASSWORD)
        await store.register("Carol", "carol@x.com", PASSWORD)

        count = await db.scalar(select(func.count()).select_from(Role).where(Role.name == "member"))
        assert count == 1


class TestVerify:
    async def test_valid_credentials(self, store):
        registered = await store.register("Alice", "alice@x.com", PASSWORD)

        user = await store.verify("Alice@X.com", PASSWORD)
        assert user.id == registered.id

    async def test_unknown_email_and_wrong_password_look_the_same(self, store):
        await store.register("Alice", "alice@x.com", PASSWORD)

        with pytest.raises(InvalidCredentials) as unknown:
            await store.verify("nobody@x.com", PASSWORD)
        with pytest.raises(InvalidCredentials) as wrong:
            await store.verify("alice@x.com", "Wrong123!")

        assert unknown.value.to_dict() == wrong.value.to_dict()
        assert unknown.value.status_code == wrong.value.status_code


class TestChangePassword:
    async def test_rehashes(self, store, db):
        user = await store.register("Alice", "alice@x.com", PASSWORD)

        await store.change_password(user, "Newpass1!")
        await db.commit()

        assert (await store.verify("alice@x.com", "Newpass1!")).id == user.id
        with pytest.raises(InvalidCredentials):
            await store.verify("alice@x.com", PASSWORD)

    async def test_policy_applies(self, store):
        user = await store.register("Alice", "alice@x.com", PASSWORD)

        with pytest.raises(WeakPassword):
            await store.change_password(user, "short")
