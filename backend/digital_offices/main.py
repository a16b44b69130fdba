# backend/digital_offices/main.py
from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI

from .core.config import settings
from .core.constants import API_DESCRIPTION, API_TITLE, API_VERSION
from .core.request_context import attach_request_id_filter
from .errors import register_error_handlers
from .middleware.prometheus_middleware import PrometheusMiddleware
from .middleware.request_id import RequestIdMiddleware
from .routes.v1 import availability, bookings, health, prometheus, reviews, services

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s",
)
attach_request_id_filter()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    logger.info(
        "Starting %s %s (environment=%s, booking isolation=%s)",
        API_TITLE,
        API_VERSION,
        settings.environment,
        settings.booking_isolation_level,
    )
    yield
    logger.info("Shutting down %s", API_TITLE)


def create_app() -> FastAPI:
    app = FastAPI(
        title=API_TITLE,
        description=API_DESCRIPTION,
        version=API_VERSION,
        lifespan=lifespan,
    )
    register_error_handlers(app)

    if settings.metrics_enabled:
        app.add_middleware(PrometheusMiddleware)
    # Added last so it wraps everything and the id is set before any logging
    app.add_middleware(RequestIdMiddleware)

    # Create API v1 router
    api_v1 = APIRouter(prefix=settings.api_prefix)
    api_v1.include_router(bookings.router, prefix="/bookings")
    api_v1.include_router(availability.router, prefix="/availability")
    api_v1.include_router(services.router, prefix="/services")
    api_v1.include_router(reviews.router, prefix="/reviews")
    api_v1.include_router(health.router)
    app.include_router(api_v1)

    # Load balancers and Prometheus expect these at the root
    app.include_router(health.router)
    if settings.metrics_enabled:
        app.include_router(prometheus.router)

    return app


app = create_app()
