# backend/digital_offices/repositories/service_repository.py
"""
ServiceRepository - provider-owned service offerings.
"""

import logging
from typing import List, Optional, cast

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..domain.owner import Owner
from ..models.booking import Booking
from ..models.service import Service
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class ServiceRepository(BaseRepository[Service]):
    def __init__(self, db: Session):
        super().__init__(db, Service)
        self.logger = logging.getLogger(__name__)

    def get_active(self, service_id: str) -> Optional[Service]:
        """The service if it exists and is offered; inactive looks like missing."""
        return self.find_one_by(id=service_id, is_active=True)

    def get_owned(self, service_id: str, owner_id: str) -> Optional[Service]:
        """The service when ``owner_id`` is its expert or organization."""
        service = self.get_by_id(service_id)
        if service is None or owner_id not in (service.expert_id, service.organization_id):
            return None
        return service

    def list_active_for_provider(self, owner: Owner) -> List[Service]:
        """Active services of a provider, newest first."""
        try:
            query = self.db.query(Service).filter(Service.is_active.is_(True))
            if owner.expert_id is not None:
                query = query.filter(Service.expert_id == owner.expert_id)
            else:
                query = query.filter(Service.organization_id == owner.organization_id)
            return cast(List[Service], query.order_by(Service.created_at.desc()).all())
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing services: {str(e)}")
            raise RepositoryException(f"Failed to list services: {str(e)}")

    def count_bookings(self, service_id: str) -> int:
        """Bookings in any status that reference the service."""
        try:
            return self.db.query(Booking).filter(Booking.service_id == service_id).count()
        except SQLAlchemyError as e:
            self.logger.error(f"Error counting bookings for service {service_id}: {str(e)}")
            raise RepositoryException(f"Failed to count bookings: {str(e)}")
