"""SQLAlchemy models module."""

from profusion.models.base import Base
from profusion.models.role import Role
from profusion.models.company import Company, Department, Team
from profusion.models.user import User
from profusion.models.project import Project, TaskStage
from profusion.models.task_status import TaskStatus, TaskApprovalStatus
from profusion.models.task import Task, TaskPermission, TaskMessage, PermissionLevel

__all__ = [
    "Base",
    "Role",
    "Company",
    "Department",
    "Team",
    "User",
    "Project",
    "TaskStage",
    "TaskStatus",
    "TaskApprovalStatus",
    "Task",
    "TaskPermission",
    "TaskMessage",
    "PermissionLevel",
]
