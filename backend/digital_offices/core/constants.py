"""Application-wide constants for the Digital Offices platform."""

from __future__ import annotations

import re

BRAND_NAME = "Digital Offices"

# Service duration constraints
MIN_SERVICE_DURATION = 5  # minutes
MAX_SERVICE_DURATION = 24 * 60  # minutes

# Text constraints
MIN_SERVICE_TITLE_LENGTH = 3
MAX_SERVICE_TITLE_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 1000
MAX_BOOKING_NOTES_LENGTH = 1000
MAX_REVIEW_COMMENT_LENGTH = 1000

# Weekly availability (0=Sunday ... 6=Saturday)
MIN_DAY_OF_WEEK = 0
MAX_DAY_OF_WEEK = 6
HHMM_PATTERN = r"^([01]\d|2[0-3]):([0-5]\d)$"
HHMM_REGEX = re.compile(HHMM_PATTERN)

# Path parameters are lowercase or uppercase hex UUIDs
UUID_PATH_PATTERN = r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"

API_TITLE = f"{BRAND_NAME} API"
API_VERSION = "1.0.0"
API_DESCRIPTION = "Booking lifecycle and scheduling backend for the Digital Offices marketplace"
