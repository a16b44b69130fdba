# backend/digital_offices/models/booking.py
"""
Booking model for the Digital Offices platform.

A booking reserves a contiguous ``[start_time, end_time)`` interval against
one Service. The owning provider and the price are copied from the Service
at creation time so history stays accurate after the service changes.
"""

from enum import Enum
import logging
from typing import Any

from sqlalchemy import (
    CheckConstraint,
    Column,
    ForeignKey,
    Index,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from ..database import Base
from ..domain.owner import Owner, owner_from_columns
from .types import TimestampMixin, UTCDateTime, new_uuid

logger = logging.getLogger(__name__)


class BookingStatus(str, Enum):
    """Booking lifecycle statuses."""

    PENDING = "PENDING"  # Initial - awaiting provider confirmation
    CONFIRMED = "CONFIRMED"  # Provider accepted
    COMPLETED = "COMPLETED"  # Session happened
    CANCELLED = "CANCELLED"  # Either side withdrew
    NO_SHOW = "NO_SHOW"  # Client didn't attend


# Statuses that hold a provider's time.
ACTIVE_BOOKING_STATUSES = (BookingStatus.PENDING, BookingStatus.CONFIRMED)


class Booking(TimestampMixin, Base):
    """Reservation of a provider's time by a client."""

    __tablename__ = "bookings"

    id = Column(String(36), primary_key=True, default=new_uuid)

    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    service_id = Column(String(36), ForeignKey("services.id"), nullable=False)
    expert_id = Column(String(36), ForeignKey("experts.id"), nullable=True)
    organization_id = Column(String(36), ForeignKey("organizations.id"), nullable=True)

    start_time = Column(UTCDateTime(), nullable=False)
    end_time = Column(UTCDateTime(), nullable=False)

    status = Column(String(20), nullable=False, default=BookingStatus.PENDING.value, index=True)
    total_price = Column(Numeric(10, 2), nullable=False)
    notes = Column(Text, nullable=True)

    service = relationship("Service", backref="bookings")
    user = relationship("User")

    __table_args__ = (
        CheckConstraint(
            "status IN ('PENDING', 'CONFIRMED', 'COMPLETED', 'CANCELLED', 'NO_SHOW')",
            name="ck_bookings_status",
        ),
        CheckConstraint(
            "(expert_id IS NULL) <> (organization_id IS NULL)",
            name="ck_bookings_single_provider",
        ),
        CheckConstraint("start_time < end_time", name="ck_bookings_time_order"),
        CheckConstraint("total_price >= 0", name="ck_bookings_price_non_negative"),
        Index("ix_bookings_expert_window", "expert_id", "status", "start_time", "end_time"),
        Index(
            "ix_bookings_organization_window",
            "organization_id",
            "status",
            "start_time",
            "end_time",
        ),
    )

    def __init__(self, **kwargs: Any) -> None:
        owner = kwargs.pop("owner", None)
        super().__init__(**kwargs)
        if owner is not None:
            self.owner = owner
        if not self.status:
            self.status = BookingStatus.PENDING.value
        logger.info(
            f"Creating booking for user {self.user_id} with provider "
            f"{self.expert_id or self.organization_id}"
        )

    def __repr__(self) -> str:
        return (
            f"<Booking {self.id}: user={self.user_id}, "
            f"provider={self.expert_id or self.organization_id}, "
            f"time={self.start_time}-{self.end_time}, status={self.status}>"
        )

    @property
    def owner(self) -> Owner:
        return owner_from_columns(self.expert_id, self.organization_id)

    @owner.setter
    def owner(self, value: Owner) -> None:
        self.expert_id = value.expert_id
        self.organization_id = value.organization_id
