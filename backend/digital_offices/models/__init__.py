"""
Database models for the Digital Offices platform.

The models are organized by functionality:
- Accounts partitioned by role (users, experts, organizations, admins)
- Provider-owned services
- Weekly expert availability
- Bookings and their reviews
"""

from .account import Admin, Expert, Organization, User
from .availability import Availability
from .booking import ACTIVE_BOOKING_STATUSES, Booking, BookingStatus
from .review import Review
from .service import Service

__all__ = [
    "ACTIVE_BOOKING_STATUSES",
    "Admin",
    "Availability",
    "Booking",
    "BookingStatus",
    "Expert",
    "Organization",
    "Review",
    "Service",
    "User",
]
