"""Lookup tables for task workflow states."""

from sqlalchemy import Column, String

from profusion.models.base import Base, UUIDMixin, TimestampMixin


class TaskStatus(Base, UUIDMixin, TimestampMixin):
    """Progress status of a task (e.g. todo, doing, done)."""

    __tablename__ = "task_statuses"

    name = Column(String(100), unique=True, nullable=False)

    def __repr__(self):
        return f"<TaskStatus {self.name}>"


class TaskApprovalStatus(Base, UUIDMixin, TimestampMixin):
    """Approval status of a task (e.g. pending, approved, rejected)."""

    __tablename__ = "task_approval_statuses"

    name = Column(String(100), unique=True, nullable=False)

    def __repr__(self):
        return f"<TaskApprovalStatus {self.name}>"
