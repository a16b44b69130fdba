# backend/digital_offices/services/__init__.py
"""
Service layer for the Digital Offices platform.

Business logic lives here; services own transactions and call repositories
for data access.
"""

from .availability_service import AvailabilityService
from .base import BaseService
from .booking_service import BookingService
from .review_service import ReviewService
from .service_catalog_service import ServiceCatalogService, ServiceDeletion

__all__ = [
    "AvailabilityService",
    "BaseService",
    "BookingService",
    "ReviewService",
    "ServiceCatalogService",
    "ServiceDeletion",
]
