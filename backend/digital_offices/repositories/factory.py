# backend/digital_offices/repositories/factory.py
"""
Repository Factory for the Digital Offices platform.

Centralizes repository creation so services and tests build them the same
way.
"""

from typing import TYPE_CHECKING, Union

from sqlalchemy.orm import Session

from ..core.enums import RoleName

# Avoid circular imports
if TYPE_CHECKING:
    from .account_repository import AccountRepository
    from .availability_repository import AvailabilityRepository
    from .booking_repository import BookingRepository
    from .review_repository import ReviewRepository
    from .service_repository import ServiceRepository


class RepositoryFactory:
    """Factory class for creating repository instances."""

    @staticmethod
    def create_booking_repository(db: Session) -> "BookingRepository":
        from .booking_repository import BookingRepository

        return BookingRepository(db)

    @staticmethod
    def create_availability_repository(db: Session) -> "AvailabilityRepository":
        from .availability_repository import AvailabilityRepository

        return AvailabilityRepository(db)

    @staticmethod
    def create_service_repository(db: Session) -> "ServiceRepository":
        from .service_repository import ServiceRepository

        return ServiceRepository(db)

    @staticmethod
    def create_review_repository(db: Session) -> "ReviewRepository":
        from .review_repository import ReviewRepository

        return ReviewRepository(db)

    @staticmethod
    def create_account_repository(
        db: Session, role: Union[RoleName, str]
    ) -> "AccountRepository":
        """Create the account repository backing the given role's table."""
        from .account_repository import get_account_repository

        return get_account_repository(db, role)
