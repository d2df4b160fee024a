"""Company, department and team schemas."""

from typing import Optional
from pydantic import BaseModel, Field
from uuid import UUID

from profusion.schemas.common import BaseResponseModel, NamedSummary


class CompanyCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    is_headquarter: bool = False
    phone: Optional[str] = Field(None, max_length=50)
    email: Optional[str] = Field(None, max_length=255)


class CompanyUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    is_headquarter: Optional[bool] = None
    phone: Optional[str] = Field(None, max_length=50)
    email: Optional[str] = Field(None, max_length=255)


class CompanyResponse(BaseResponseModel):
    name: str
    is_headquarter: bool
    phone: Optional[str]
    email: Optional[str]


class DepartmentCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    company_id: UUID


class DepartmentUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    company_id: Optional[UUID] = None


class DepartmentResponse(BaseResponseModel):
    name: str
    company_id: UUID
    company: Optional[NamedSummary] = None


class TeamCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    department_id: UUID


class TeamUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    department_id: Optional[UUID] = None


class TeamResponse(BaseResponseModel):
    name: str
    department_id: UUID
    department: Optional[NamedSummary] = None
