"""Project and task stage Pydantic schemas."""

from typing import Optional
from pydantic import BaseModel, Field, model_validator
from datetime import date
from uuid import UUID

from profusion.schemas.common import BaseResponseModel, NamedSummary
from profusion.schemas.user import UserSummary


class ProjectCreate(BaseModel):
    """Schema for creating a project. The creator is the caller."""

    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    company_id: Optional[UUID] = None
    department_id: Optional[UUID] = None
    team_id: Optional[UUID] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @model_validator(mode="after")
    def _dates_in_order(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class ProjectUpdate(BaseModel):
    """Schema for updating a project."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    company_id: Optional[UUID] = None
    department_id: Optional[UUID] = None
    team_id: Optional[UUID] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class ProjectResponse(BaseResponseModel):
    """Schema for project response."""

    name: str
    description: Optional[str]
    created_by: UUID
    company_id: Optional[UUID]
    department_id: Optional[UUID]
    team_id: Optional[UUID]
    start_date: Optional[date]
    end_date: Optional[date]

    creator: Optional[UserSummary] = None
    company: Optional[NamedSummary] = None
    department: Optional[NamedSummary] = None
    team: Optional[NamedSummary] = None


class TaskStageCreate(BaseModel):
    project_id: UUID
    title: Optional[str] = Field(None, max_length=255)


class TaskStageUpdate(BaseModel):
    title: Optional[str] = Field(None, max_length=255)


class TaskStageSummary(BaseModel):
    id: UUID
    title: Optional[str]
    project_id: UUID

    class Config:
        from_attributes = True


class TaskStageResponse(BaseResponseModel):
    project_id: UUID
    title: Optional[str]
    project: Optional[NamedSummary] = None
