# backend/digital_offices/services/booking_service.py
"""
Booking Service for the Digital Offices platform.

Creates bookings without double-booking a provider and moves them through
the status state machine.

Concurrency model for create_booking:
1. A Redis mutex per provider keeps concurrent requests from racing.
2. Inside the transaction a Postgres advisory lock serializes the
   availability and overlap reads for that provider.
3. The bookings exclusion constraint rejects any overlap that still slips
   through; the violation is reported as an ordinary booking conflict.
"""

from datetime import datetime
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import (
    BookingConflictException,
    ConflictException,
    NotFoundException,
    OutsideWorkingHoursException,
    RepositoryException,
)
from ..core.provider_lock import acquire_advisory_xact_lock, provider_lock
from ..domain.owner import Owner
from ..models.booking import Booking, BookingStatus
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.booking_repository import BookingRepository
from ..repositories.factory import RepositoryFactory
from ..utils.time_helpers import add_minutes, ensure_utc
from .availability_service import AvailabilityService
from .base import BaseService
from .booking_status import validate_transition
from .service_catalog_service import ServiceCatalogService

logger = logging.getLogger(__name__)

BOOKING_NOT_FOUND_MESSAGE = "Booking not found or you are not a participant"
OVERLAP_CONSTRAINT_NAME = "bookings_no_overlap_per_provider"


class BookingService(BaseService):
    """
    Service layer for booking operations.

    Depends on the catalog (active service lookup) and availability (expert
    working hours); all booking queries go through BookingRepository.
    """

    repository: BookingRepository

    def __init__(
        self,
        db: Session,
        repository: Optional[BookingRepository] = None,
        catalog_service: Optional[ServiceCatalogService] = None,
        availability_service: Optional[AvailabilityService] = None,
    ):
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_booking_repository(db)
        self.catalog_service = catalog_service or ServiceCatalogService(db)
        self.availability_service = availability_service or AvailabilityService(db)

    @staticmethod
    def _is_deadlock_error(exc: Exception) -> bool:
        if isinstance(exc, RepositoryException):
            cause = exc.__cause__
            if not isinstance(cause, OperationalError):
                return False
            exc = cause
        orig = getattr(exc, "orig", None)
        pgcode = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
        if pgcode == "40P01":
            return True
        return "deadlock detected" in str(exc).lower()

    @staticmethod
    def _is_overlap_violation(exc: IntegrityError) -> bool:
        orig = getattr(exc, "orig", None)
        diag = getattr(orig, "diag", None)
        constraint_name = getattr(diag, "constraint_name", None) or ""
        if constraint_name == OVERLAP_CONSTRAINT_NAME:
            return True
        pgcode = getattr(orig, "pgcode", None)
        # 23P01 is exclusion_violation
        return pgcode == "23P01" or OVERLAP_CONSTRAINT_NAME in str(orig)

    @staticmethod
    def _conflict_details(owner: Owner, start: datetime, end: datetime) -> Dict[str, Any]:
        return {
            "provider_type": owner.kind.value,
            "provider_id": owner.id,
            "start_time": start.isoformat(),
            "end_time": end.isoformat(),
        }

    @BaseService.measure_operation("create_booking")
    def create_booking(
        self,
        user_id: str,
        service_id: str,
        start_time: datetime,
        notes: Optional[str] = None,
    ) -> Booking:
        """
        Reserve ``[start_time, start_time + duration)`` of a service's provider.

        The provider and price are copied from the service; the booking
        starts as PENDING.

        Raises:
            NotFoundException: Service missing or inactive
            OutsideWorkingHoursException: Expert is not working then
            BookingConflictException: Provider already holds an active
                booking that overlaps the interval
            ConflictException: Provider mutex stayed busy
        """
        start = ensure_utc(start_time)
        try:
            service = self.catalog_service.get_active_service(service_id)
        except NotFoundException:
            prometheus_metrics.record_booking_outcome("unknown", "not_found")
            raise

        owner = service.owner
        end = add_minutes(start, service.duration_min)
        provider_type = owner.kind.value

        with provider_lock(owner) as acquired:
            if not acquired:
                prometheus_metrics.record_booking_outcome(provider_type, "busy")
                raise ConflictException(
                    "Another booking for this provider is being processed, please retry",
                    code="PROVIDER_BUSY",
                    details={"provider_type": provider_type, "provider_id": owner.id},
                )

            with self.transaction(isolation_level=settings.booking_isolation_level):
                try:
                    acquire_advisory_xact_lock(self.db, owner)

                    within_hours = not owner.has_availability or (
                        self.availability_service.is_within_availability(
                            owner.id, start, service.duration_min
                        )
                    )
                    if not within_hours:
                        prometheus_metrics.record_booking_outcome(provider_type, "outside_hours")
                        raise OutsideWorkingHoursException(
                            details=self._conflict_details(owner, start, end)
                        )

                    if self.repository.has_overlap(owner, start, end):
                        prometheus_metrics.record_booking_outcome(provider_type, "conflict")
                        raise BookingConflictException(
                            details=self._conflict_details(owner, start, end)
                        )

                    booking = self.repository.create(
                        owner=owner,
                        user_id=user_id,
                        service_id=service.id,
                        start_time=start,
                        end_time=end,
                        status=BookingStatus.PENDING.value,
                        total_price=service.price,
                        notes=notes,
                    )
                except IntegrityError as exc:
                    if not self._is_overlap_violation(exc):
                        raise
                    prometheus_metrics.record_booking_outcome(provider_type, "conflict")
                    raise BookingConflictException(
                        details=self._conflict_details(owner, start, end)
                    ) from exc
                except (OperationalError, RepositoryException) as exc:
                    # Any statement in this transaction can lose a deadlock
                    if not self._is_deadlock_error(exc):
                        raise
                    prometheus_metrics.record_booking_outcome(provider_type, "conflict")
                    raise BookingConflictException(
                        details=self._conflict_details(owner, start, end)
                    ) from exc

        prometheus_metrics.record_booking_outcome(provider_type, "created")
        self.log_operation(
            "create_booking",
            booking_id=booking.id,
            user_id=user_id,
            provider=owner.id,
            start_time=start.isoformat(),
        )
        return booking

    @BaseService.measure_operation("update_booking_status")
    def update_booking_status(
        self, booking_id: str, new_status: BookingStatus, actor_id: str
    ) -> Booking:
        """
        Move a booking to ``new_status`` on behalf of a participant.

        Raises:
            NotFoundException: Booking missing or actor not a participant
            BookingStatusUnchangedException: Booking already has the status
            ForbiddenException: Client tries to confirm their own booking
            InvalidStatusTransitionException: Not a legal state change
        """
        new_status = BookingStatus(new_status)
        with self.transaction():
            booking = self.repository.get_for_actor(booking_id, actor_id, for_update=True)
            if booking is None:
                raise NotFoundException(
                    BOOKING_NOT_FOUND_MESSAGE,
                    code="BOOKING_NOT_FOUND",
                    details={"booking_id": booking_id},
                )
            previous = booking.status
            validate_transition(booking, new_status, actor_id)
            booking.status = new_status.value
            self.db.flush()

        self.log_operation(
            "update_booking_status",
            booking_id=booking_id,
            actor_id=actor_id,
            from_status=previous,
            to_status=new_status.value,
        )
        return booking

    @BaseService.measure_operation("get_booking_for_actor")
    def get_booking_for_actor(self, booking_id: str, actor_id: str) -> Booking:
        booking = self.repository.get_for_actor(booking_id, actor_id)
        if booking is None:
            raise NotFoundException(
                BOOKING_NOT_FOUND_MESSAGE,
                code="BOOKING_NOT_FOUND",
                details={"booking_id": booking_id},
            )
        return booking

    @BaseService.measure_operation("list_bookings_for_user")
    def list_bookings_for_user(self, user_id: str) -> List[Booking]:
        return self.repository.list_for_user(user_id)

    @BaseService.measure_operation("list_bookings_for_provider")
    def list_bookings_for_provider(self, owner: Owner) -> List[Booking]:
        return self.repository.list_for_provider(owner)
