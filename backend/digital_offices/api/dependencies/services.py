# backend/digital_offices/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

Each request gets fresh service instances bound to its own session.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from ...services.availability_service import AvailabilityService
from ...services.booking_service import BookingService
from ...services.review_service import ReviewService
from ...services.service_catalog_service import ServiceCatalogService
from .database import get_db


def get_service_catalog_service(db: Session = Depends(get_db)) -> ServiceCatalogService:
    return ServiceCatalogService(db)


def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityService:
    return AvailabilityService(db)


def get_booking_service(
    db: Session = Depends(get_db),
    catalog_service: ServiceCatalogService = Depends(get_service_catalog_service),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> BookingService:
    """Get booking service instance sharing the request's catalog and availability services."""
    return BookingService(
        db,
        catalog_service=catalog_service,
        availability_service=availability_service,
    )


def get_review_service(db: Session = Depends(get_db)) -> ReviewService:
    return ReviewService(db)
