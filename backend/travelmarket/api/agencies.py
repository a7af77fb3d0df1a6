"""
Agency profile endpoints
"""

from typing import List

import structlog
from fastapi import APIRouter, Depends, status

from travelmarket.api.deps import EntityId, get_current_user, get_storage, require_agency
from travelmarket.api.schemas import AgencyCreate, AgencyRead, AgencyUpdate
from travelmarket.core.errors import NotFound, ValidationFailed
from travelmarket.db.models import User, UserRole
from travelmarket.db.storage import Storage

logger = structlog.get_logger(__name__)
router = APIRouter(prefix="/api", tags=["agencies"])


@router.get("/agencies", response_model=List[AgencyRead])
async def list_agencies(storage: Storage = Depends(get_storage)):
    return await storage.get_all_agencies()


@router.get("/agencies/{agency_id}", response_model=AgencyRead)
async def get_agency(agency_id: EntityId, storage: Storage = Depends(get_storage)):
    agency = await storage.get_agency(agency_id)
    if agency is None:
        raise NotFound("Agency not found")
    return agency


@router.post("/agencies", response_model=AgencyRead, status_code=status.HTTP_201_CREATED)
async def create_agency(
    payload: AgencyCreate,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Create the caller's agency profile and switch their role to agency"""
    if await storage.get_agency_by_user_id(current_user.id):
        raise ValidationFailed("User already has an agency profile")

    agency = await storage.create_agency(user_id=current_user.id, **payload.model_dump())

    # Separate write: a failure here leaves the profile with a traveler role.
    await storage.update_user(current_user.id, role=UserRole.AGENCY.value)

    logger.info("agency_created", agency_id=agency.id, company_name=agency.company_name)
    return agency


@router.get("/my-agency", response_model=AgencyRead)
async def get_my_agency(
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    agency = await storage.get_agency_by_user_id(current_user.id)
    if agency is None:
        raise NotFound("Agency profile not found")
    return agency


@router.patch("/my-agency", response_model=AgencyRead)
async def update_my_agency(
    payload: AgencyUpdate,
    current_user: User = Depends(require_agency),
    storage: Storage = Depends(get_storage),
):
    """Update the caller's agency profile, creating it when missing"""
    agency = await storage.get_agency_by_user_id(current_user.id)
    changes = payload.model_dump(exclude_unset=True)

    if agency is None:
        if not changes.get("company_name"):
            raise ValidationFailed(
                "Invalid agency data",
                errors=[{"loc": ["body", "companyName"], "msg": "Field required", "type": "missing"}],
            )
        agency = await storage.create_agency(
            user_id=current_user.id,
            company_name=changes["company_name"],
            description=changes.get("description") or "",
            website_url=changes.get("website_url") or "",
            phone_number=changes.get("phone_number") or "",
        )
        logger.info("agency_created", agency_id=agency.id, via="patch")
        return agency

    updated = await storage.update_agency(agency.id, **changes)
    if updated is None:
        raise NotFound("Agency profile not found")
    return updated
