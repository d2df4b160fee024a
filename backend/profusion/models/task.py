"""Task model plus per-task permissions and messages."""

import enum

from sqlalchemy import (
    Column, String, Text, Integer, DateTime, ForeignKey, Uuid,
    CheckConstraint, UniqueConstraint, Index,
)
from sqlalchemy.orm import relationship

from profusion.models.base import Base, UUIDMixin, TimestampMixin


class PermissionLevel(enum.IntEnum):
    """Access scope of a task grant. Higher levels include lower ones."""
    READ = 0
    WRITE = 1
    ADMIN = 2


class Task(Base, UUIDMixin, TimestampMixin):
    """Task model - a unit of work inside a project stage."""

    __tablename__ = "tasks"

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    created_by = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id"),
        nullable=False,
    )
    assigned_to = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    status_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("task_statuses.id", ondelete="SET NULL"),
        nullable=True,
    )
    approval_status_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("task_approval_statuses.id", ondelete="SET NULL"),
        nullable=True,
    )
    task_stage_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("task_stages.id", ondelete="SET NULL"),
        nullable=True,
    )

    deadline = Column(DateTime, nullable=True)

    # Relationships
    creator = relationship("User", foreign_keys=[created_by], lazy="selectin")
    assignee = relationship("User", foreign_keys=[assigned_to], lazy="selectin")
    status = relationship("TaskStatus", lazy="selectin")
    approval_status = relationship("TaskApprovalStatus", lazy="selectin")
    stage = relationship("TaskStage", lazy="selectin")

    __table_args__ = (
        Index("ix_tasks_status_stage", "status_id", "task_stage_id"),
    )

    def __repr__(self):
        return f"<Task {self.title}>"


class TaskPermission(Base, UUIDMixin, TimestampMixin):
    """Explicit grant of a permission level on a task to a user."""

    __tablename__ = "task_permissions"

    task_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("tasks.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    permission_type = Column(Integer, nullable=False, default=PermissionLevel.READ)

    task = relationship("Task", lazy="selectin")
    user = relationship("User", lazy="selectin")

    __table_args__ = (
        UniqueConstraint("task_id", "user_id", name="uq_task_permissions_task_user"),
        CheckConstraint("permission_type IN (0, 1, 2)", name="permission_type_valid"),
    )

    def __repr__(self):
        return f"<TaskPermission task={self.task_id} user={self.user_id} level={self.permission_type}>"


class TaskMessage(Base, UUIDMixin, TimestampMixin):
    """Message exchanged between two users about a task."""

    __tablename__ = "task_messages"

    task_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("tasks.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    sender_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    receiver_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    content = Column(Text, nullable=False)

    task = relationship("Task", lazy="selectin")
    sender = relationship("User", foreign_keys=[sender_id], lazy="selectin")
    receiver = relationship("User", foreign_keys=[receiver_id], lazy="selectin")

    def __repr__(self):
        return f"<TaskMessage task={self.task_id} from={self.sender_id}>"
