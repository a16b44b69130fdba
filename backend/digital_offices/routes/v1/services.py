# backend/digital_offices/routes/v1/services.py
"""
Service catalog routes - API v1

Endpoints:
    POST / - Create a service (experts and organizations)
    PATCH /{service_id} - Update one of the caller's services
    DELETE /{service_id} - Delete, or deactivate when already booked
    GET /provider/{provider_id}?type=expert|organization - Active services
"""

import asyncio
import logging
from typing import NoReturn

from fastapi import APIRouter, Body, Depends, HTTPException, Path, Query, status

from ...api.dependencies import Actor, get_current_provider, get_service_catalog_service
from ...core.constants import UUID_PATH_PATTERN
from ...core.exceptions import DomainException
from ...domain.owner import ProviderType, make_owner
from ...schemas.service import (
    ServiceCreate,
    ServiceDeleteResponse,
    ServiceListResponse,
    ServiceResponse,
    ServiceUpdate,
)
from ...services.service_catalog_service import ServiceCatalogService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["services-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


@router.post("", response_model=ServiceResponse, status_code=status.HTTP_201_CREATED)
async def create_service(
    payload: ServiceCreate = Body(...),
    current_provider: Actor = Depends(get_current_provider),
    catalog_service: ServiceCatalogService = Depends(get_service_catalog_service),
) -> ServiceResponse:
    try:
        service = await asyncio.to_thread(
            catalog_service.create_service, current_provider.as_owner(), payload.model_dump()
        )
        return ServiceResponse.model_validate(service)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/provider/{provider_id}", response_model=ServiceListResponse)
async def list_provider_services(
    provider_id: str = Path(..., pattern=UUID_PATH_PATTERN),
    provider_type: ProviderType = Query(ProviderType.EXPERT, alias="type"),
    catalog_service: ServiceCatalogService = Depends(get_service_catalog_service),
) -> ServiceListResponse:
    """Active services of one provider, newest first."""
    try:
        services = await asyncio.to_thread(
            catalog_service.list_services_for_provider, make_owner(provider_type, provider_id)
        )
        items = [ServiceResponse.model_validate(s) for s in services]
        return ServiceListResponse(services=items, total=len(items))
    except DomainException as e:
        handle_domain_exception(e)


@router.patch(
    "/{service_id}",
    response_model=ServiceResponse,
    responses={404: {"description": "Service not found or not owned by the caller"}},
)
async def update_service(
    service_id: str = Path(..., pattern=UUID_PATH_PATTERN),
    payload: ServiceUpdate = Body(...),
    current_provider: Actor = Depends(get_current_provider),
    catalog_service: ServiceCatalogService = Depends(get_service_catalog_service),
) -> ServiceResponse:
    try:
        service = await asyncio.to_thread(
            catalog_service.update_service,
            service_id,
            current_provider.id,
            payload.model_dump(exclude_unset=True),
        )
        return ServiceResponse.model_validate(service)
    except DomainException as e:
        handle_domain_exception(e)


@router.delete(
    "/{service_id}",
    response_model=ServiceDeleteResponse,
    responses={404: {"description": "Service not found or not owned by the caller"}},
)
async def delete_service(
    service_id: str = Path(..., pattern=UUID_PATH_PATTERN),
    current_provider: Actor = Depends(get_current_provider),
    catalog_service: ServiceCatalogService = Depends(get_service_catalog_service),
) -> ServiceDeleteResponse:
    """Booked services are deactivated instead of removed."""
    try:
        outcome = await asyncio.to_thread(
            catalog_service.delete_service, service_id, current_provider.id
        )
        return ServiceDeleteResponse(id=service_id, outcome=outcome)
    except DomainException as e:
        handle_domain_exception(e)
