# backend/digital_offices/repositories/__init__.py
"""
Repository layer for the Digital Offices platform.

All queries live here; services call repositories and own transactions.
"""

from .account_repository import AccountRepository, get_account_repository
from .availability_repository import AvailabilityRepository
from .base_repository import BaseRepository, IRepository
from .booking_repository import BookingRepository
from .factory import RepositoryFactory
from .review_repository import ReviewRepository
from .service_repository import ServiceRepository

__all__ = [
    "AccountRepository",
    "AvailabilityRepository",
    "BaseRepository",
    "BookingRepository",
    "IRepository",
    "RepositoryFactory",
    "ReviewRepository",
    "ServiceRepository",
    "get_account_repository",
]
