# backend/digital_offices/routes/v1/bookings.py
"""
Booking routes - API v1

Versioned booking endpoints under /api/v1/bookings.
All business logic delegated to BookingService.

Endpoints:
    POST / - Create a booking (users)
    GET /me - The caller's bookings as a client
    GET /provider - The caller's bookings as a provider
    GET /{booking_id} - One booking the caller participates in
    PATCH /{booking_id}/status - Move a booking through its lifecycle
"""

import asyncio
import logging
from typing import NoReturn

from fastapi import APIRouter, Body, Depends, HTTPException, Path, status

from ...api.dependencies import (
    Actor,
    get_booking_participant,
    get_booking_service,
    get_current_provider,
    get_current_user,
)
from ...core.constants import UUID_PATH_PATTERN
from ...core.exceptions import DomainException
from ...schemas.booking import (
    BookingCreate,
    BookingListResponse,
    BookingResponse,
    BookingStatusUpdate,
)
from ...services.booking_service import BookingService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["bookings-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


# ============================================================================
# Static routes (no path parameters)
# ============================================================================


@router.post(
    "",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Outside the provider's working hours"},
        404: {"description": "Service not found or inactive"},
        409: {"description": "Time slot already reserved"},
    },
)
async def create_booking(
    booking_data: BookingCreate = Body(...),
    current_user: Actor = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    """Reserve a service; the booking starts as PENDING."""
    try:
        booking = await asyncio.to_thread(
            booking_service.create_booking,
            user_id=current_user.id,
            service_id=str(booking_data.service_id),
            start_time=booking_data.start_time,
            notes=booking_data.notes,
        )
        return BookingResponse.model_validate(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/me", response_model=BookingListResponse)
async def list_my_bookings(
    current_user: Actor = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingListResponse:
    """Bookings the caller made, newest first."""
    try:
        bookings = await asyncio.to_thread(booking_service.list_bookings_for_user, current_user.id)
        items = [BookingResponse.model_validate(b) for b in bookings]
        return BookingListResponse(bookings=items, total=len(items))
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/provider", response_model=BookingListResponse)
async def list_provider_bookings(
    current_provider: Actor = Depends(get_current_provider),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingListResponse:
    """Bookings placed with the calling expert or organization, newest first."""
    try:
        bookings = await asyncio.to_thread(
            booking_service.list_bookings_for_provider, current_provider.as_owner()
        )
        items = [BookingResponse.model_validate(b) for b in bookings]
        return BookingListResponse(bookings=items, total=len(items))
    except DomainException as e:
        handle_domain_exception(e)


# ============================================================================
# Dynamic routes (with path parameters - placed last)
# ============================================================================


@router.get(
    "/{booking_id}",
    response_model=BookingResponse,
    responses={404: {"description": "Booking not found"}},
)
async def get_booking(
    booking_id: str = Path(..., pattern=UUID_PATH_PATTERN),
    actor: Actor = Depends(get_booking_participant),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    try:
        booking = await asyncio.to_thread(
            booking_service.get_booking_for_actor, booking_id, actor.id
        )
        return BookingResponse.model_validate(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.patch(
    "/{booking_id}/status",
    response_model=BookingResponse,
    responses={
        400: {"description": "Booking already has the requested status"},
        403: {"description": "Clients cannot confirm their own bookings"},
        404: {"description": "Booking not found or not a participant"},
        409: {"description": "Illegal status transition"},
    },
)
async def update_booking_status(
    booking_id: str = Path(..., pattern=UUID_PATH_PATTERN),
    payload: BookingStatusUpdate = Body(...),
    actor: Actor = Depends(get_booking_participant),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    """Confirm, complete, cancel or mark a booking as a no-show."""
    try:
        booking = await asyncio.to_thread(
            booking_service.update_booking_status,
            booking_id,
            payload.status,
            actor.id,
        )
        return BookingResponse.model_validate(booking)
    except DomainException as e:
        handle_domain_exception(e)
