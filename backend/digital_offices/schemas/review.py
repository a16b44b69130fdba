# backend/digital_offices/schemas/review.py
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import Field, field_validator

from ..core.constants import MAX_REVIEW_COMMENT_LENGTH
from ._strict_base import StrictRequestModel
from .base import StandardizedModel


class ReviewCreate(StrictRequestModel):
    booking_id: UUID
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=MAX_REVIEW_COMMENT_LENGTH)

    @field_validator("comment")
    @classmethod
    def _clean_comment(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return v.strip() or None


class ReviewResponse(StandardizedModel):
    id: str
    booking_id: str
    user_id: str
    rating: int
    comment: Optional[str] = None
    created_at: Optional[datetime] = None


class ReviewListResponse(StandardizedModel):
    reviews: List[ReviewResponse]
    total: int
