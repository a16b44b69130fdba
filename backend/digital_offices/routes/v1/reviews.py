# backend/digital_offices/routes/v1/reviews.py
"""
Review routes - API v1

Endpoints:
    POST / - Review a completed booking (users)
    GET /provider/{provider_id}?type=expert|organization - Provider reviews
"""

import asyncio
import logging
from typing import NoReturn

from fastapi import APIRouter, Body, Depends, HTTPException, Path, Query, status

from ...api.dependencies import Actor, get_current_user, get_review_service
from ...core.constants import UUID_PATH_PATTERN
from ...core.exceptions import DomainException
from ...domain.owner import ProviderType, make_owner
from ...schemas.review import ReviewCreate, ReviewListResponse, ReviewResponse
from ...services.review_service import ReviewService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["reviews-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


@router.post("", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED)
async def create_review(
    payload: ReviewCreate = Body(...),
    current_user: Actor = Depends(get_current_user),
    review_service: ReviewService = Depends(get_review_service),
) -> ReviewResponse:
    try:
        review = await asyncio.to_thread(
            review_service.create_review,
            str(payload.booking_id),
            current_user.id,
            payload.rating,
            payload.comment,
        )
        return ReviewResponse.model_validate(review)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/provider/{provider_id}", response_model=ReviewListResponse)
async def list_provider_reviews(
    provider_id: str = Path(..., pattern=UUID_PATH_PATTERN),
    provider_type: ProviderType = Query(ProviderType.EXPERT, alias="type"),
    review_service: ReviewService = Depends(get_review_service),
) -> ReviewListResponse:
    try:
        reviews = await asyncio.to_thread(
            review_service.list_reviews_for_provider, make_owner(provider_type, provider_id)
        )
        items = [ReviewResponse.model_validate(r) for r in reviews]
        return ReviewListResponse(reviews=items, total=len(items))
    except DomainException as e:
        handle_domain_exception(e)
