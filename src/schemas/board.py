"""Pydantic schemas for board endpoints."""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class BoardCreate(BaseModel):
    """Schema for creating a board; slug is derived from name when omitted."""

    name: str = Field(min_length=1, max_length=200)
    slug: str | None = Field(default=None, max_length=200)
    is_public: bool = False


class BoardEnsurePublic(BaseModel):
    """Schema for ensure-public-board (create if missing, else return as is)."""

    slug: str = Field(min_length=1, max_length=200)
    name: str = Field(min_length=1, max_length=200)


class BoardVisibilityUpdate(BaseModel):
    """Schema for toggling a board's visibility."""

    is_public: bool


class BoardResponse(BaseModel):
    """Schema for board responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    owner_key: str
    name: str
    slug: str
    is_public: bool
    created_at: datetime
    updated_at: datetime
