# backend/digital_offices/routes/v1/availability.py
"""
Availability routes - API v1

Endpoints:
    PUT / - Replace the calling expert's weekly schedule
    GET /{expert_id} - Public weekly schedule of an expert
"""

import asyncio
import logging
from typing import NoReturn

from fastapi import APIRouter, Body, Depends, HTTPException, Path, status

from ...api.dependencies import Actor, get_availability_service, get_current_expert
from ...core.constants import UUID_PATH_PATTERN
from ...core.exceptions import DomainException
from ...schemas.availability import (
    AvailabilitySlotResponse,
    AvailabilitySyncRequest,
    WeeklyScheduleResponse,
)
from ...services.availability_service import AvailabilityService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["availability-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


@router.put("", response_model=WeeklyScheduleResponse)
async def sync_availability(
    payload: AvailabilitySyncRequest = Body(...),
    current_expert: Actor = Depends(get_current_expert),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> WeeklyScheduleResponse:
    """
    Replace the whole week in one step.

    Slots not present in the request are removed; an empty list clears
    the schedule.
    """
    try:
        slots = await asyncio.to_thread(
            availability_service.replace_weekly_schedule,
            current_expert.id,
            [slot.model_dump() for slot in payload.slots],
        )
        return WeeklyScheduleResponse(
            expert_id=current_expert.id,
            slots=[AvailabilitySlotResponse.model_validate(s) for s in slots],
        )
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/{expert_id}", response_model=WeeklyScheduleResponse)
async def get_expert_availability(
    expert_id: str = Path(..., pattern=UUID_PATH_PATTERN),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> WeeklyScheduleResponse:
    try:
        slots = await asyncio.to_thread(availability_service.get_weekly_schedule, expert_id)
        return WeeklyScheduleResponse(
            expert_id=expert_id,
            slots=[AvailabilitySlotResponse.model_validate(s) for s in slots],
        )
    except DomainException as e:
        handle_domain_exception(e)
