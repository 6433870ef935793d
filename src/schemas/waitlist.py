"""Pydantic schemas for waitlist endpoints."""
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from schemas.validators import normalize_email


class WaitlistJoin(BaseModel):
    """Schema for joining the waitlist."""

    email: str = Field(min_length=3, max_length=320)
    name: str | None = Field(default=None, max_length=200)
    source: str | None = Field(default=None, max_length=100)
    ref: str | None = Field(default=None, max_length=32)

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        """Normalize and validate the email address."""
        return normalize_email(v)


class WaitlistJoinResult(BaseModel):
    """Position and referral code of a waitlist entry."""

    existing: bool
    id: UUID
    email: str
    referral_code: str
    position: int
    total: int


class WaitlistStats(BaseModel):
    """Aggregate waitlist stats."""

    total: int
