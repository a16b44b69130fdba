# backend/digital_offices/repositories/review_repository.py
"""
ReviewRepository - one review per completed booking.
"""

import logging
from typing import List, cast

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..domain.owner import Owner
from ..models.booking import Booking
from ..models.review import Review
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class ReviewRepository(BaseRepository[Review]):
    def __init__(self, db: Session):
        super().__init__(db, Review)
        self.logger = logging.getLogger(__name__)

    def exists_for_booking(self, booking_id: str) -> bool:
        return self.exists(booking_id=booking_id)

    def list_for_provider(self, owner: Owner) -> List[Review]:
        """Reviews left on the provider's bookings, newest first."""
        try:
            query = self.db.query(Review).join(Booking, Review.booking_id == Booking.id)
            if owner.expert_id is not None:
                query = query.filter(Booking.expert_id == owner.expert_id)
            else:
                query = query.filter(Booking.organization_id == owner.organization_id)
            return cast(List[Review], query.order_by(Review.created_at.desc()).all())
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing reviews: {str(e)}")
            raise RepositoryException(f"Failed to list reviews: {str(e)}")
