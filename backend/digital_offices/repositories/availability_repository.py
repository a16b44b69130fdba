# backend/digital_offices/repositories/availability_repository.py
"""
AvailabilityRepository - weekly open hours per expert.

The week is always replaced as a whole; there is no per-slot update.
"""

import logging
from typing import Iterable, List, Mapping, Optional, cast

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.availability import Availability
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class AvailabilityRepository(BaseRepository[Availability]):
    def __init__(self, db: Session):
        super().__init__(db, Availability)
        self.logger = logging.getLogger(__name__)

    def list_for_expert(self, expert_id: str) -> List[Availability]:
        """All slots for an expert ordered by day, then start time."""
        try:
            return cast(
                List[Availability],
                self.db.query(Availability)
                .filter(Availability.expert_id == expert_id)
                .order_by(Availability.day_of_week, Availability.start_time)
                .all(),
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting availability for {expert_id}: {str(e)}")
            raise RepositoryException(f"Failed to get availability: {str(e)}")

    def replace_for_expert(
        self, expert_id: str, slots: Iterable[Mapping[str, object]]
    ) -> List[Availability]:
        """
        Delete every slot of the expert, then insert ``slots``.

        Runs inside the caller's transaction; a failure part-way leaves the
        old week in place once the caller rolls back.
        """
        try:
            deleted = (
                self.db.query(Availability)
                .filter(Availability.expert_id == expert_id)
                .delete(synchronize_session=False)
            )
            rows = [
                Availability(
                    expert_id=expert_id,
                    day_of_week=slot["day_of_week"],
                    start_time=slot["start_time"],
                    end_time=slot["end_time"],
                )
                for slot in slots
            ]
            self.db.add_all(rows)
            self.db.flush()
            self.logger.debug(
                "Replaced availability for %s: %d removed, %d added", expert_id, deleted, len(rows)
            )
            return rows
        except SQLAlchemyError as e:
            self.logger.error(f"Error replacing availability for {expert_id}: {str(e)}")
            raise RepositoryException(f"Failed to replace availability: {str(e)}") from e

    def find_covering_slot(
        self, expert_id: str, day_of_week: int, start_hhmm: str, end_hhmm: str
    ) -> Optional[Availability]:
        """A slot on ``day_of_week`` that fully contains ``[start_hhmm, end_hhmm]``."""
        try:
            return cast(
                Optional[Availability],
                self.db.query(Availability)
                .filter(
                    Availability.expert_id == expert_id,
                    Availability.day_of_week == day_of_week,
                    Availability.start_time <= start_hhmm,
                    Availability.end_time >= end_hhmm,
                )
                .first(),
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error checking availability for {expert_id}: {str(e)}")
            raise RepositoryException(f"Failed to check availability: {str(e)}") from e
