# app/schemas/review.py
"""
Review & Rating Pydantic Schemas
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ReviewCreate(BaseModel):
    """Schema for reviewing the other party of a completed exchange"""
    exchange_id: int = Field(..., description="Exchange identifier")
    rating: int = Field(..., ge=1, le=5, description="Rating from 1 to 5 stars")
    comment: Optional[str] = Field(None, max_length=1000, description="Review comment (max 1000 chars)")

    @field_validator("comment")
    @classmethod
    def validate_comment(cls, v):
        """Blank comments are stored as no comment"""
        if v is None:
            return None
        return v.strip() or None


class ReviewResponse(BaseModel):
    id: int
    exchange_id: int
    reviewer_id: int
    reviewed_user_id: int
    rating: int
    comment: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
