# backend/digital_offices/services/service_catalog_service.py
"""
Service Catalog for the Digital Offices platform.

Providers create and maintain their offerings here. A service that has
ever been booked is only deactivated on delete so booking history keeps
its reference; an unbooked one is removed outright.
"""

from decimal import Decimal
from enum import Enum
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.constants import MAX_SERVICE_DURATION, MIN_SERVICE_DURATION
from ..core.exceptions import NotFoundException, ValidationException
from ..domain.owner import Owner
from ..models.service import Service
from ..repositories.factory import RepositoryFactory
from ..repositories.service_repository import ServiceRepository
from .base import BaseService

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = frozenset({"title", "description", "price", "duration_min", "is_active"})
# Columns that may be cleared by sending null
_NULLABLE_FIELDS = frozenset({"description"})


class ServiceDeletion(str, Enum):
    DELETED = "deleted"
    DEACTIVATED = "deactivated"


class ServiceCatalogService(BaseService):
    def __init__(self, db: Session, repository: Optional[ServiceRepository] = None):
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_service_repository(db)

    @staticmethod
    def _validate_fields(data: Dict[str, Any]) -> None:
        price = data.get("price")
        if price is not None and Decimal(str(price)) <= 0:
            raise ValidationException("Price must be positive", details={"price": str(price)})
        duration = data.get("duration_min")
        if duration is not None and not MIN_SERVICE_DURATION <= duration <= MAX_SERVICE_DURATION:
            raise ValidationException(
                f"Duration must be between {MIN_SERVICE_DURATION} and "
                f"{MAX_SERVICE_DURATION} minutes",
                details={"duration_min": duration},
            )

    @BaseService.measure_operation("get_service")
    def get_service(self, service_id: str) -> Service:
        service = self.repository.get_by_id(service_id)
        if service is None:
            raise NotFoundException("Service not found", details={"service_id": service_id})
        return service

    @BaseService.measure_operation("get_active_service")
    def get_active_service(self, service_id: str) -> Service:
        """
        Fetch a service that can currently be booked.

        Raises:
            NotFoundException: If the service is missing or inactive
        """
        service = self.repository.get_active(service_id)
        if service is None:
            raise NotFoundException(
                "Service not found or is currently inactive",
                code="SERVICE_NOT_FOUND",
                details={"service_id": service_id},
            )
        return service

    @BaseService.measure_operation("create_service")
    def create_service(self, owner: Owner, data: Dict[str, Any]) -> Service:
        self._validate_fields(data)
        with self.transaction():
            service = self.repository.create(
                owner=owner,
                title=data["title"],
                description=data.get("description"),
                price=data["price"],
                duration_min=data["duration_min"],
            )
        self.log_operation("create_service", service_id=service.id, provider=owner.id)
        return service

    @BaseService.measure_operation("update_service")
    def update_service(self, service_id: str, owner_id: str, data: Dict[str, Any]) -> Service:
        """
        Update a service owned by ``owner_id``.

        A service owned by someone else is reported as missing. Keys absent
        from ``data`` are left alone; ``is_active`` reactivates or deactivates
        the service.
        """
        changes = {
            k: v
            for k, v in data.items()
            if k in _UPDATABLE_FIELDS and (v is not None or k in _NULLABLE_FIELDS)
        }
        fields = sorted(changes)
        is_active = changes.pop("is_active", None)
        self._validate_fields(changes)
        with self.transaction():
            service = self.repository.get_owned(service_id, owner_id)
            if service is None:
                raise NotFoundException(
                    "Service not found or you are not authorized to modify it",
                    details={"service_id": service_id},
                )
            for key, value in changes.items():
                setattr(service, key, value)
            if is_active is True:
                service.activate()
            elif is_active is False:
                service.deactivate()
            self.db.flush()
        self.log_operation("update_service", service_id=service_id, fields=fields)
        return service

    @BaseService.measure_operation("delete_service")
    def delete_service(self, service_id: str, owner_id: str) -> ServiceDeletion:
        """
        Remove a service, or deactivate it when bookings reference it.

        Returns:
            Which of the two happened
        """
        with self.transaction():
            service = self.repository.get_owned(service_id, owner_id)
            if service is None:
                raise NotFoundException(
                    "Service not found or you are not authorized to delete it",
                    details={"service_id": service_id},
                )
            if self.repository.count_bookings(service_id) > 0:
                service.deactivate()
                self.db.flush()
                outcome = ServiceDeletion.DEACTIVATED
            else:
                self.repository.delete(service_id)
                outcome = ServiceDeletion.DELETED
        self.log_operation("delete_service", service_id=service_id, outcome=outcome.value)
        return outcome

    @BaseService.measure_operation("list_services_for_provider")
    def list_services_for_provider(self, owner: Owner) -> List[Service]:
        """Active services of the provider, newest first."""
        return self.repository.list_active_for_provider(owner)
