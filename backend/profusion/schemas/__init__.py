"""Pydantic schemas module."""

from profusion.schemas.common import (
    PaginatedResponse, MessageResponse, ErrorResponse,
    NamedCreate, NamedUpdate, NamedResponse, NamedSummary,
)
from profusion.schemas.organization import (
    CompanyCreate, CompanyUpdate, CompanyResponse,
    DepartmentCreate, DepartmentUpdate, DepartmentResponse,
    TeamCreate, TeamUpdate, TeamResponse,
)
from profusion.schemas.user import (
    RegisterRequest, LoginRequest, LoginResponse,
    UserUpdate, UserResponse, UserSummary,
)
from profusion.schemas.project import (
    ProjectCreate, ProjectUpdate, ProjectResponse,
    TaskStageCreate, TaskStageUpdate, TaskStageResponse,
)
from profusion.schemas.task import (
    TaskCreate, TaskUpdate, TaskResponse,
    TaskPermissionCreate, TaskPermissionResponse,
    TaskMessageCreate, TaskMessageResponse,
)

__all__ = [
    "PaginatedResponse",
    "MessageResponse",
    "ErrorResponse",
    "NamedCreate",
    "NamedUpdate",
    "NamedResponse",
    "NamedSummary",
    "CompanyCreate",
    "CompanyUpdate",
    "CompanyResponse",
    "DepartmentCreate",
    "DepartmentUpdate",
    "DepartmentResponse",
    "TeamCreate",
    "TeamUpdate",
    "TeamResponse",
    "RegisterRequest",
    "LoginRequest",
    "LoginResponse",
    "UserUpdate",
    "UserResponse",
    "UserSummary",
    "ProjectCreate",
    "ProjectUpdate",
    "ProjectResponse",
    "TaskStageCreate",
    "TaskStageUpdate",
    "TaskStageResponse",
    "TaskCreate",
    "TaskUpdate",
    "TaskResponse",
    "TaskPermissionCreate",
    "TaskPermissionResponse",
    "TaskMessageCreate",
    "TaskMessageResponse",
]
