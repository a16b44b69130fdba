# backend/digital_offices/schemas/service.py
"""Service catalog schemas."""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import Field, field_validator

from ..core.constants import (
    MAX_DESCRIPTION_LENGTH,
    MAX_SERVICE_DURATION,
    MAX_SERVICE_TITLE_LENGTH,
    MIN_SERVICE_DURATION,
    MIN_SERVICE_TITLE_LENGTH,
)
from ..services.service_catalog_service import ServiceDeletion
from ._strict_base import StrictRequestModel
from .base import Money, StandardizedModel


class ServiceCreate(StrictRequestModel):
    title: str = Field(
        ..., min_length=MIN_SERVICE_TITLE_LENGTH, max_length=MAX_SERVICE_TITLE_LENGTH
    )
    description: Optional[str] = Field(None, max_length=MAX_DESCRIPTION_LENGTH)
    price: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    duration_min: int = Field(..., ge=MIN_SERVICE_DURATION, le=MAX_SERVICE_DURATION)

    @field_validator("title")
    @classmethod
    def _strip_title(cls, v: str) -> str:
        v = v.strip()
        if len(v) < MIN_SERVICE_TITLE_LENGTH:
            raise ValueError(f"Title must be at least {MIN_SERVICE_TITLE_LENGTH} characters")
        return v


class ServiceUpdate(StrictRequestModel):
    """Partial update; omitted fields keep their value."""

    title: Optional[str] = Field(
        None, min_length=MIN_SERVICE_TITLE_LENGTH, max_length=MAX_SERVICE_TITLE_LENGTH
    )
    description: Optional[str] = Field(None, max_length=MAX_DESCRIPTION_LENGTH)
    price: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)
    duration_min: Optional[int] = Field(None, ge=MIN_SERVICE_DURATION, le=MAX_SERVICE_DURATION)
    is_active: Optional[bool] = None


class ServiceResponse(StandardizedModel):
    id: str
    title: str
    description: Optional[str] = None
    price: Money
    duration_min: int
    is_active: bool
    expert_id: Optional[str] = None
    organization_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ServiceListResponse(StandardizedModel):
    services: List[ServiceResponse]
    total: int


class ServiceDeleteResponse(StandardizedModel):
    id: str
    outcome: ServiceDeletion
