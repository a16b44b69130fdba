# backend/digital_offices/models/review.py
"""
Review model for the Digital Offices platform.

Design notes:
- Review is per booking (one review per booking via DB unique constraint)
- Only the client of a completed booking may write it
"""

from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import backref, relationship

from ..database import Base
from .types import TimestampMixin, new_uuid


class Review(TimestampMixin, Base):
    """Per-booking review submitted by a client."""

    __tablename__ = "reviews"

    id = Column(String(36), primary_key=True, default=new_uuid)
    booking_id = Column(String(36), ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)

    booking = relationship("Booking", backref=backref("review", uselist=False))

    __table_args__ = (
        UniqueConstraint("booking_id", name="uq_reviews_booking_id"),
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_reviews_rating_range"),
    )

    def __repr__(self) -> str:
        return f"<Review {self.id} booking={self.booking_id} rating={self.rating}>"
