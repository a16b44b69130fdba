# backend/digital_offices/models/service.py
"""
Service model for the Digital Offices platform.

A Service is a sellable offering owned by exactly one provider (an Expert
or an Organization). Supports soft delete via the is_active flag so that
booking history survives once a service has been booked.
"""

import logging
from typing import Any

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)

from ..core.constants import MIN_SERVICE_DURATION
from ..database import Base
from ..domain.owner import Owner, owner_from_columns
from .types import TimestampMixin, new_uuid

logger = logging.getLogger(__name__)


class Service(TimestampMixin, Base):
    """
    Model representing a service offered by a provider.

    Attributes:
        id: UUID primary key
        title: Display title
        description: Optional long description
        price: Fixed-point price with two fraction digits
        duration_min: Session length in whole minutes
        is_active: Whether the service is currently offered (soft delete)
        expert_id / organization_id: Exactly one is set
    """

    __tablename__ = "services"

    id = Column(String(36), primary_key=True, default=new_uuid)
    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    duration_min = Column(Integer, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True, index=True)

    expert_id = Column(
        String(36), ForeignKey("experts.id", ondelete="CASCADE"), nullable=True, index=True
    )
    organization_id = Column(
        String(36), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=True, index=True
    )

    __table_args__ = (
        CheckConstraint(
            "(expert_id IS NULL) <> (organization_id IS NULL)",
            name="ck_services_single_owner",
        ),
        CheckConstraint(f"duration_min >= {MIN_SERVICE_DURATION}", name="ck_services_duration"),
        CheckConstraint("price >= 0", name="ck_services_price_non_negative"),
    )

    def __init__(self, **kwargs: Any) -> None:
        owner = kwargs.pop("owner", None)
        super().__init__(**kwargs)
        if owner is not None:
            self.owner = owner
        if self.is_active is None:
            self.is_active = True
        logger.debug(f"Creating service '{self.title}' for {self.expert_id or self.organization_id}")

    def __repr__(self) -> str:
        status = " (inactive)" if not self.is_active else ""
        return f"<Service {self.title} ${self.price}/{self.duration_min}min{status}>"

    @property
    def owner(self) -> Owner:
        return owner_from_columns(self.expert_id, self.organization_id)

    @owner.setter
    def owner(self, value: Owner) -> None:
        self.expert_id = value.expert_id
        self.organization_id = value.organization_id

    def deactivate(self) -> None:
        """
        Soft delete this service by marking it as inactive.

        Preserves the record for historical bookings while removing
        it from active service listings.
        """
        self.is_active = False
        logger.info(f"Deactivated service {self.id}: {self.title}")

    def activate(self) -> None:
        """Make the service available for booking again."""
        self.is_active = True
        logger.info(f"Activated service {self.id}: {self.title}")
