"""Task, task permission and task message schemas."""

from typing import Optional
from pydantic import BaseModel, Field
from datetime import datetime
from uuid import UUID

from profusion.models.task import PermissionLevel
from profusion.schemas.common import BaseResponseModel, NamedSummary
from profusion.schemas.project import TaskStageSummary
from profusion.schemas.user import UserSummary


class TaskCreate(BaseModel):
    """Schema for creating a task. The creator is the caller."""

    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    assigned_to: Optional[UUID] = None
    status_id: Optional[UUID] = None
    approval_status_id: Optional[UUID] = None
    task_stage_id: Optional[UUID] = None
    deadline: Optional[datetime] = None


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    assigned_to: Optional[UUID] = None
    status_id: Optional[UUID] = None
    approval_status_id: Optional[UUID] = None
    task_stage_id: Optional[UUID] = None
    deadline: Optional[datetime] = None


class TaskSummary(BaseModel):
    id: UUID
    title: str

    class Config:
        from_attributes = True


class TaskResponse(BaseResponseModel):
    title: str
    description: Optional[str]
    created_by: UUID
    assigned_to: Optional[UUID]
    status_id: Optional[UUID]
    approval_status_id: Optional[UUID]
    task_stage_id: Optional[UUID]
    deadline: Optional[datetime]

    creator: Optional[UserSummary] = None
    assignee: Optional[UserSummary] = None
    status: Optional[NamedSummary] = None
    approval_status: Optional[NamedSummary] = None
    stage: Optional[TaskStageSummary] = None


class TaskPermissionCreate(BaseModel):
    """Grant (or re-grant) a level on a task: 0 read, 1 write, 2 admin."""

    task_id: UUID
    user_id: UUID
    permission_type: PermissionLevel


class TaskPermissionResponse(BaseResponseModel):
    task_id: UUID
    user_id: UUID
    permission_type: PermissionLevel

    task: Optional[TaskSummary] = None
    user: Optional[UserSummary] = None


class TaskMessageCreate(BaseModel):
    """A message about a task. The sender is the caller."""

    task_id: UUID
    receiver_id: UUID
    content: str = Field(..., min_length=1)


class TaskMessageResponse(BaseResponseModel):
    task_id: UUID
    sender_id: UUID
    receiver_id: UUID
    content: str

    task: Optional[TaskSummary] = None
    sender: Optional[UserSummary] = None
    receiver: Optional[UserSummary] = None
