# backend/digital_offices/schemas/availability.py
"""Weekly availability schemas (0=Sunday ... 6=Saturday, HH:MM in UTC)."""

from typing import List

from pydantic import Field, model_validator

from ..core.constants import HHMM_PATTERN, MAX_DAY_OF_WEEK, MIN_DAY_OF_WEEK
from ._strict_base import StrictRequestModel
from .base import StandardizedModel


class AvailabilitySlotInput(StrictRequestModel):
    day_of_week: int = Field(..., ge=MIN_DAY_OF_WEEK, le=MAX_DAY_OF_WEEK)
    start_time: str = Field(..., pattern=HHMM_PATTERN, examples=["09:00"])
    end_time: str = Field(..., pattern=HHMM_PATTERN, examples=["17:00"])

    @model_validator(mode="after")
    def _end_after_start(self) -> "AvailabilitySlotInput":
        # Zero-padded HH:MM compares correctly as text.
        if self.end_time <= self.start_time:
            raise ValueError("End time must be after start time")
        return self


class AvailabilitySyncRequest(StrictRequestModel):
    """Full replacement of the caller's week; an empty list clears it."""

    slots: List[AvailabilitySlotInput]


class AvailabilitySlotResponse(StandardizedModel):
    id: str
    expert_id: str
    day_of_week: int
    start_time: str
    end_time: str


class WeeklyScheduleResponse(StandardizedModel):
    expert_id: str
    slots: List[AvailabilitySlotResponse]
