"""
Travel package endpoints: agencies' priced offers
"""

from typing import List

import structlog
from fastapi import APIRouter, Depends, status

from travelmarket.api.deps import EntityId, get_storage, owned_or_absent, require_agency
from travelmarket.api.schemas import TravelPackageCreate, TravelPackageRead, TravelPackageUpdate
from travelmarket.core.errors import NotFound
from travelmarket.db.models import Agency, User
from travelmarket.db.storage import Storage

logger = structlog.get_logger(__name__)
router = APIRouter(prefix="/api", tags=["travel-packages"])


async def get_current_agency(
    current_user: User = Depends(require_agency),
    storage: Storage = Depends(get_storage),
) -> Agency:
    agency = await storage.get_agency_by_user_id(current_user.id)
    if agency is None:
        raise NotFound("Agency not found")
    return agency


@router.get("/agency-packages", response_model=List[TravelPackageRead])
async def list_agency_packages(
    agency: Agency = Depends(get_current_agency),
    storage: Storage = Depends(get_storage),
):
    return await storage.get_travel_packages_by_agency_id(agency.id)


@router.post("/travel-packages", response_model=TravelPackageRead, status_code=status.HTTP_201_CREATED)
async def create_travel_package(
    payload: TravelPackageCreate,
    agency: Agency = Depends(get_current_agency),
    storage: Storage = Depends(get_storage),
):
    """Create an offer; the owning agency is always the caller's own"""
    travel_package = await storage.create_travel_package(
        agency_id=agency.id,
        **payload.model_dump(),
    )
    logger.info(
        "travel_package_created",
        package_id=travel_package.id,
        agency_id=agency.id,
        preference_id=travel_package.preference_id,
    )
    return travel_package


@router.patch("/travel-packages/{package_id}", response_model=TravelPackageRead)
async def update_travel_package(
    package_id: EntityId,
    payload: TravelPackageUpdate,
    agency: Agency = Depends(get_current_agency),
    storage: Storage = Depends(get_storage),
):
    owned_or_absent(
        await storage.get_travel_package(package_id),
        agency.id, "agency_id", "Travel package not found",
    )
    updated = await storage.update_travel_package(package_id, **payload.model_dump(exclude_unset=True))
    if updated is None:
        raise NotFound("Travel package not found")
    return updated
