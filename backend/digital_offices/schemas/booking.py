# backend/digital_offices/schemas/booking.py
"""
Booking request and response schemas.

Wire names are camelCase; instants are ISO-8601 and always returned in UTC.
"""

from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from pydantic import Field, field_validator

from ..core.constants import MAX_BOOKING_NOTES_LENGTH
from ..models.booking import BookingStatus
from ..utils.time_helpers import ensure_utc
from ._strict_base import StrictRequestModel
from .base import Money, StandardizedModel


class BookingCreate(StrictRequestModel):
    """
    Create a booking for one service.

    The end time, provider and price all come from the service.
    """

    service_id: UUID
    start_time: datetime
    notes: Optional[str] = Field(None, max_length=MAX_BOOKING_NOTES_LENGTH)

    @field_validator("start_time")
    @classmethod
    def _start_in_future(cls, v: datetime) -> datetime:
        """Naive values are read as UTC."""
        v = ensure_utc(v)
        if v <= datetime.now(timezone.utc):
            raise ValueError("Start time must be in the future")
        return v

    @field_validator("notes")
    @classmethod
    def _clean_notes(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return v.strip() or None


class BookingStatusUpdate(StrictRequestModel):
    status: BookingStatus


class BookingServiceInfo(StandardizedModel):
    id: str
    title: str
    duration_min: int


class BookingResponse(StandardizedModel):
    id: str
    user_id: str
    service_id: str
    expert_id: Optional[str] = None
    organization_id: Optional[str] = None
    start_time: datetime
    end_time: datetime
    status: BookingStatus
    total_price: Money
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    service: Optional[BookingServiceInfo] = None


class BookingListResponse(StandardizedModel):
    bookings: List[BookingResponse]
    total: int
