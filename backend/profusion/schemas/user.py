"""User, registration and login schemas."""

from typing import Optional
from pydantic import BaseModel, EmailStr, Field
from uuid import UUID

from profusion.schemas.common import BaseResponseModel, NamedSummary


class RegisterRequest(BaseModel):
    """Self-registration body. The password is checked by the credential store."""

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., max_length=72)
    role_id: Optional[UUID] = None
    company_id: Optional[UUID] = None
    department_id: Optional[UUID] = None
    team_id: Optional[UUID] = None
    avatar: Optional[str] = Field(None, max_length=1024)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class UserUpdate(BaseModel):
    """Profile update. ``password`` is re-hashed; ``role_id`` is admin-only."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, max_length=72)
    avatar: Optional[str] = Field(None, max_length=1024)
    role_id: Optional[UUID] = None
    company_id: Optional[UUID] = None
    department_id: Optional[UUID] = None
    team_id: Optional[UUID] = None


class UserSummary(BaseModel):
    """User reference embedded in other responses."""

    id: UUID
    name: str
    email: str
    avatar: Optional[str] = None

    class Config:
        from_attributes = True


class UserResponse(BaseResponseModel):
    name: str
    email: str
    avatar: Optional[str]
    role_id: UUID
    company_id: Optional[UUID]
    department_id: Optional[UUID]
    team_id: Optional[UUID]

    role: Optional[NamedSummary] = None
    company: Optional[NamedSummary] = None
    department: Optional[NamedSummary] = None
    team: Optional[NamedSummary] = None


class LoginResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse
