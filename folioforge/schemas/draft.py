"""Draft schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .portfolio import validate_email


class DraftCreate(BaseModel):
    """Schema for saving a draft."""
    email: str
    html_content: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        checked = validate_email(v)
        if not checked:
            raise ValueError("Email is required")
        return checked.lower()


class DraftListResponse(BaseModel):
    """Draft summary without the HTML body."""
    id: str
    email: str
    is_partial: bool
    estimated_completion: int
    content_length: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DraftResponse(DraftListResponse):
    """Full draft including the HTML body."""
    html_content: str
