# backend/digital_offices/repositories/booking_repository.py
"""
Booking Repository for the Digital Offices platform.

Handles:
- Booking inserts, exposing integrity errors for conflict handling
- Half-open interval overlap scans per provider
- Row-locked reads for status changes
- Client and provider booking listings
"""

from datetime import datetime
import logging
from typing import Any, List, Optional, cast

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Query, Session, joinedload

from ..core.exceptions import RepositoryException
from ..database.session_utils import supports_row_locks
from ..domain.owner import Owner
from ..models.booking import ACTIVE_BOOKING_STATUSES, Booking
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class BookingRepository(BaseRepository[Booking]):
    """Repository for booking data access."""

    def __init__(self, db: Session):
        super().__init__(db, Booking)
        self.logger = logging.getLogger(__name__)

    def create(self, **kwargs: Any) -> Booking:
        """Create a booking, exposing integrity and deadlock errors for conflict handling."""
        try:
            return super().create(**kwargs)
        except RepositoryException as exc:
            if isinstance(exc.__cause__, (IntegrityError, OperationalError)):
                raise exc.__cause__
            raise

    def _provider_filter(self, query: Query, owner: Owner) -> Query:
        if owner.expert_id is not None:
            return query.filter(Booking.expert_id == owner.expert_id)
        return query.filter(Booking.organization_id == owner.organization_id)

    def find_overlapping(
        self, owner: Owner, start_time: datetime, end_time: datetime
    ) -> List[Booking]:
        """
        Active bookings of ``owner`` that intersect ``[start_time, end_time)``.

        Two half-open intervals overlap iff each starts before the other
        ends, so bookings that merely touch are not returned.
        """
        try:
            query = self._provider_filter(self.db.query(Booking), owner).filter(
                Booking.status.in_([s.value for s in ACTIVE_BOOKING_STATUSES]),
                Booking.start_time < end_time,
                Booking.end_time > start_time,
            )
            return cast(List[Booking], query.order_by(Booking.start_time).all())
        except SQLAlchemyError as e:
            self.logger.error(f"Error finding overlapping bookings: {str(e)}")
            raise RepositoryException(f"Failed to check booking overlap: {str(e)}") from e

    def has_overlap(self, owner: Owner, start_time: datetime, end_time: datetime) -> bool:
        return bool(self.find_overlapping(owner, start_time, end_time))

    def get_for_actor(
        self, booking_id: str, actor_id: str, *, for_update: bool = False
    ) -> Optional[Booking]:
        """
        Fetch a booking the actor participates in.

        The actor may be the client, the expert or the organization. When
        ``for_update`` is set on Postgres the row stays locked until the
        surrounding transaction ends.
        """
        try:
            query = self.db.query(Booking).filter(
                Booking.id == booking_id,
                or_(
                    Booking.user_id == actor_id,
                    Booking.expert_id == actor_id,
                    Booking.organization_id == actor_id,
                ),
            )
            if for_update and supports_row_locks(self.db):
                query = query.with_for_update()
            return cast(Optional[Booking], query.first())
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting booking {booking_id} for actor: {str(e)}")
            raise RepositoryException(f"Failed to get booking: {str(e)}")

    def list_for_user(self, user_id: str) -> List[Booking]:
        """Client bookings, newest first."""
        try:
            return cast(
                List[Booking],
                self.db.query(Booking)
                .options(joinedload(Booking.service))
                .filter(Booking.user_id == user_id)
                .order_by(Booking.start_time.desc())
                .all(),
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing bookings for user {user_id}: {str(e)}")
            raise RepositoryException(f"Failed to list user bookings: {str(e)}")

    def list_for_provider(self, owner: Owner) -> List[Booking]:
        """Provider bookings, newest first."""
        try:
            query = self.db.query(Booking).options(
                joinedload(Booking.service), joinedload(Booking.user)
            )
            return cast(
                List[Booking],
                self._provider_filter(query, owner).order_by(Booking.start_time.desc()).all(),
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing provider bookings: {str(e)}")
            raise RepositoryException(f"Failed to list provider bookings: {str(e)}")

    def count_for_service(self, service_id: str) -> int:
        return self.count(service_id=service_id)
