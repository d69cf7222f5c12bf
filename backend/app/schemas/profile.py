"""Pydantic schemas for user profiles."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ProfileRole(str, Enum):
    """Access role (matches the SQLAlchemy enum)."""

    PATIENT = "patient"
    ADMIN = "admin"


class ProfileResponse(BaseModel):
    """Schema for a profile in API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    role: ProfileRole
    full_name: str | None
    created_at: datetime
    updated_at: datetime


class ProfileUpdate(BaseModel):
    """Fields a user may change on their own profile."""

    full_name: str | None = Field(default=None, max_length=255)
