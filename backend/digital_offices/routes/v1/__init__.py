"""Version 1 API routers."""

from . import availability, bookings, health, prometheus, reviews, services

__all__ = ["availability", "bookings", "health", "prometheus", "reviews", "services"]
