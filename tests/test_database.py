"""Tests for startup table creation."""

from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from profusion.core import database
from profusion.core.config import settings

POSTGRES_URL = "postgresql+asyncpg://profusion:secret@db:5432/profusion"


class _UnreachableEngine:
    def begin(self):
        raise AssertionError("table creation touched the database")


class TestShouldAutoCreate:
    def test_sqlite_always_creates(self, monkeypatch):
        monkeypatch.setattr(settings, "DATABASE_AUTO_CREATE", False)
        assert database.should_auto_create("sqlite+aiosqlite:///:memory:")

    def test_postgres_is_left_to_alembic(self, monkeypatch):
        monkeypatch.setattr(settings, "DATABASE_AUTO_CREATE", False)
        assert not database.should_auto_create(POSTGRES_URL)

    def test_postgres_opt_in(self, monkeypatch):
        monkeypatch.setattr(settings, "DATABASE_AUTO_CREATE", True)
        assert database.should_auto_create(POSTGRES_URL)


class TestInitDb:
    async def test_skips_alembic_managed_database(self, monkeypatch):
        monkeypatch.setattr(settings, "DATABASE_URL", POSTGRES_URL)
        monkeypatch.setattr(settings, "DATABASE_AUTO_CREATE", False)
        monkeypatch.setattr(database, "engine", _UnreachableEngine())

        assert await database.init_db() is False

    async def test_creates_tables_on_sqlite(self, monkeypatch):
        engine = create_async_engine(
            "sqlite+aiosqlite:///:memory:",
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
        monkeypatch.setattr(settings, "DATABASE_URL", "sqlite+aiosqlite:///:memory:")
        monkeypatch.setattr(database, "engine", engine)

        try:
            assert await database.init_db() is True
            async with engine.connect() as conn:
                tables = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())
        finally:
            await engine.dispose()

        assert {"users", "roles", "tasks", "task_permissions"} <= set(tables)
