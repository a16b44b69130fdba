# backend/digital_offices/api/dependencies/__init__.py
"""
FastAPI dependencies: database session, authenticated actor, services.
"""

from .auth import (
    Actor,
    get_booking_participant,
    get_current_actor,
    get_current_expert,
    get_current_provider,
    get_current_user,
    require_roles,
)
from .database import get_db
from .services import (
    get_availability_service,
    get_booking_service,
    get_review_service,
    get_service_catalog_service,
)

__all__ = [
    "Actor",
    "get_availability_service",
    "get_booking_participant",
    "get_booking_service",
    "get_current_actor",
    "get_current_expert",
    "get_current_provider",
    "get_current_user",
    "get_db",
    "get_review_service",
    "get_service_catalog_service",
    "require_roles",
]
