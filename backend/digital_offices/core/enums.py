# backend/digital_offices/core/enums.py
"""
Core enums for the Digital Offices platform.

Roles form a closed set: each one maps to its own identity table.
"""

from enum import Enum


class RoleName(str, Enum):
    """Account roles carried in the ``role`` claim of an access token."""

    USER = "user"
    EXPERT = "expert"
    ORGANIZATION = "organization"
    ADMIN = "admin"


PROVIDER_ROLES = frozenset({RoleName.EXPERT, RoleName.ORGANIZATION})
