"""Common Pydantic schemas shared across modules."""

from typing import Generic, TypeVar, List, Optional, Dict
from pydantic import BaseModel, Field
from datetime import datetime
from uuid import UUID

T = TypeVar("T")


class PaginatedResponse(BaseModel, Generic[T]):
    """Generic paginated response wrapper."""

    items: List[T]
    total: int
    page: int
    page_size: int
    pages: int

    class Config:
        from_attributes = True


class BaseResponseModel(BaseModel):
    """Base response model with common fields."""

    id: UUID
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class NamedCreate(BaseModel):
    """Body for lookup entities identified by a unique name."""

    name: str = Field(..., min_length=1, max_length=100)


class NamedUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)


class NamedResponse(BaseResponseModel):
    name: str


class NamedSummary(BaseModel):
    """Reference to a named entity, embedded in other responses."""

    id: UUID
    name: str

    class Config:
        from_attributes = True


class MessageResponse(BaseModel):
    """Simple message response."""

    message: str
    success: bool = True


class ErrorResponse(BaseModel):
    """Body of every domain error response."""

    error: str
    fields: Optional[Dict[str, str]] = None
