# backend/digital_offices/models/availability.py
"""
Availability model for the Digital Offices platform.

An expert's open hours are a set of recurring weekly windows. Times are
zero-padded 24-hour ``HH:MM`` strings, so lexicographic order matches
chronological order and range checks run directly in SQL.

The whole week for an expert is replaced at once; rows are never patched.
"""

import logging

from sqlalchemy import CheckConstraint, Column, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from ..database import Base
from .types import TimestampMixin, new_uuid

logger = logging.getLogger(__name__)


class Availability(TimestampMixin, Base):
    """Recurring weekly window during which an expert can be booked."""

    __tablename__ = "availability"

    id = Column(String(36), primary_key=True, default=new_uuid)
    expert_id = Column(
        String(36), ForeignKey("experts.id", ondelete="CASCADE"), nullable=False
    )
    day_of_week = Column(Integer, nullable=False)  # 0=Sunday ... 6=Saturday
    start_time = Column(String(5), nullable=False)
    end_time = Column(String(5), nullable=False)

    expert = relationship("Expert")

    __table_args__ = (
        CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_availability_day_of_week"),
        CheckConstraint("start_time < end_time", name="ck_availability_time_order"),
        Index("idx_availability_expert_day", "expert_id", "day_of_week"),
    )

    def __repr__(self) -> str:
        return f"<Availability {self.expert_id} day={self.day_of_week} {self.start_time}-{self.end_time}>"
