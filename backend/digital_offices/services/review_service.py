# backend/digital_offices/services/review_service.py
"""
Review Service for the Digital Offices platform.

A client may review a booking once, after it has been completed.
Aggregation (average ratings and the like) is handled elsewhere.
"""

import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.exceptions import (
    ConflictException,
    NotFoundException,
    RepositoryException,
    ValidationException,
)
from ..domain.owner import Owner
from ..models.booking import BookingStatus
from ..models.review import Review
from ..repositories.booking_repository import BookingRepository
from ..repositories.factory import RepositoryFactory
from ..repositories.review_repository import ReviewRepository
from .base import BaseService

logger = logging.getLogger(__name__)

REVIEW_EXISTS_MESSAGE = "This booking has already been reviewed"
UNIQUE_BOOKING_CONSTRAINT_NAME = "uq_reviews_booking_id"


class ReviewService(BaseService):
    def __init__(
        self,
        db: Session,
        repository: Optional[ReviewRepository] = None,
        booking_repository: Optional[BookingRepository] = None,
    ):
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_review_repository(db)
        self.booking_repository = booking_repository or RepositoryFactory.create_booking_repository(
            db
        )

    @staticmethod
    def _is_duplicate_review(cause: Optional[BaseException]) -> bool:
        if not isinstance(cause, IntegrityError):
            return False
        orig = getattr(cause, "orig", None)
        diag = getattr(orig, "diag", None)
        if getattr(diag, "constraint_name", None) == UNIQUE_BOOKING_CONSTRAINT_NAME:
            return True
        message = str(orig)
        return UNIQUE_BOOKING_CONSTRAINT_NAME in message or "reviews.booking_id" in message

    @BaseService.measure_operation("create_review")
    def create_review(
        self, booking_id: str, user_id: str, rating: int, comment: Optional[str] = None
    ) -> Review:
        """
        Record the client's review of a completed booking.

        Someone else's booking is reported as missing.

        Raises:
            NotFoundException: Booking missing or not the caller's
            ValidationException: Booking is not completed
            ConflictException: Booking already has a review
        """
        if not 1 <= rating <= 5:
            raise ValidationException("Rating must be between 1 and 5", details={"rating": rating})
        with self.transaction():
            booking = self.booking_repository.get_by_id(booking_id)
            if booking is None or booking.user_id != user_id:
                raise NotFoundException("Booking not found", details={"booking_id": booking_id})
            if booking.status != BookingStatus.COMPLETED.value:
                raise ValidationException(
                    "Only completed bookings can be reviewed",
                    code="BOOKING_NOT_COMPLETED",
                    details={"booking_id": booking_id, "status": booking.status},
                )
            if self.repository.exists_for_booking(booking_id):
                raise ConflictException(
                    REVIEW_EXISTS_MESSAGE,
                    code="REVIEW_EXISTS",
                    details={"booking_id": booking_id},
                )
            try:
                review = self.repository.create(
                    booking_id=booking_id, user_id=user_id, rating=rating, comment=comment
                )
            except RepositoryException as exc:
                # A concurrent review won the race past the existence check
                if not self._is_duplicate_review(exc.__cause__):
                    raise
                raise ConflictException(
                    REVIEW_EXISTS_MESSAGE,
                    code="REVIEW_EXISTS",
                    details={"booking_id": booking_id},
                ) from exc

        self.log_operation("create_review", review_id=review.id, booking_id=booking_id)
        return review

    @BaseService.measure_operation("list_reviews_for_provider")
    def list_reviews_for_provider(self, owner: Owner) -> List[Review]:
        return self.repository.list_for_provider(owner)
