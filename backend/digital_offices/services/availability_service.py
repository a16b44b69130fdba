# backend/digital_offices/services/availability_service.py
"""
Availability Service for the Digital Offices platform.

Experts publish recurring weekly open hours. A sync replaces the whole week
in one transaction; booking creation asks whether an interval fits.
"""

from datetime import datetime
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from sqlalchemy.orm import Session

from ..core.constants import MAX_DAY_OF_WEEK, MIN_DAY_OF_WEEK
from ..core.exceptions import ValidationException
from ..models.availability import Availability
from ..repositories.availability_repository import AvailabilityRepository
from ..repositories.factory import RepositoryFactory
from ..utils.time_helpers import (
    add_minutes,
    ensure_utc,
    is_hhmm,
    utc_day_of_week,
    utc_hhmm,
)
from .base import BaseService

logger = logging.getLogger(__name__)


class AvailabilityService(BaseService):
    def __init__(self, db: Session, repository: Optional[AvailabilityRepository] = None):
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_availability_repository(db)

    @staticmethod
    def _normalize_slot(index: int, slot: Mapping[str, Any]) -> Dict[str, Any]:
        day = slot.get("day_of_week")
        start = slot.get("start_time")
        end = slot.get("end_time")
        details = {"index": index, "day_of_week": day, "start_time": start, "end_time": end}

        if isinstance(day, bool) or not isinstance(day, int):
            raise ValidationException("dayOfWeek must be an integer", details=details)
        if not MIN_DAY_OF_WEEK <= day <= MAX_DAY_OF_WEEK:
            raise ValidationException(
                f"dayOfWeek must be between {MIN_DAY_OF_WEEK} and {MAX_DAY_OF_WEEK}",
                details=details,
            )
        if not isinstance(start, str) or not is_hhmm(start):
            raise ValidationException("startTime must be in HH:MM format", details=details)
        if not isinstance(end, str) or not is_hhmm(end):
            raise ValidationException("endTime must be in HH:MM format", details=details)
        if end <= start:
            raise ValidationException("End time must be after start time", details=details)
        return {"day_of_week": day, "start_time": start, "end_time": end}

    @BaseService.measure_operation("replace_weekly_schedule")
    def replace_weekly_schedule(
        self, expert_id: str, slots: Iterable[Mapping[str, Any]]
    ) -> List[Availability]:
        """
        Replace the expert's whole week with ``slots``.

        Every slot is validated before anything is written, and the delete
        and insert share one transaction, so a failure keeps the old week.
        An empty list clears the schedule.

        Raises:
            ValidationException: If any slot is malformed
        """
        normalized = [self._normalize_slot(i, slot) for i, slot in enumerate(slots)]

        with self.transaction():
            self.repository.replace_for_expert(expert_id, normalized)

        self.log_operation("replace_weekly_schedule", expert_id=expert_id, slots=len(normalized))
        return self.repository.list_for_expert(expert_id)

    @BaseService.measure_operation("get_weekly_schedule")
    def get_weekly_schedule(self, expert_id: str) -> List[Availability]:
        """The expert's slots ordered by day, then start time."""
        return self.repository.list_for_expert(expert_id)

    def is_within_availability(self, expert_id: str, start: datetime, duration_min: int) -> bool:
        """
        Whether ``[start, start + duration_min)`` fits in one of the expert's slots.

        Day of week and HH:MM are taken in UTC. An interval that ends on the
        next UTC day never fits a single slot.
        """
        start = ensure_utc(start)
        end = add_minutes(start, duration_min)
        if end.date() != start.date():
            return False
        return (
            self.repository.find_covering_slot(
                expert_id,
                utc_day_of_week(start),
                utc_hhmm(start),
                utc_hhmm(end),
            )
            is not None
        )
