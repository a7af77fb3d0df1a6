"""
Travel preference endpoints: travelers' trip requests
"""

from typing import List

import structlog
from fastapi import APIRouter, Depends, status

from travelmarket.api.deps import EntityId, get_current_user, get_storage, owned_or_absent
from travelmarket.api.schemas import (
    TravelPackageRead, TravelPreferenceCreate, TravelPreferenceRead, TravelPreferenceUpdate
)
from travelmarket.core.errors import NotFound
from travelmarket.db.models import User
from travelmarket.db.storage import Storage

logger = structlog.get_logger(__name__)
router = APIRouter(prefix="/api/travel-preferences", tags=["travel-preferences"])

PREFERENCE_NOT_FOUND = "Preference not found"


@router.get("", response_model=List[TravelPreferenceRead])
async def list_travel_preferences(
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Agencies see every preference; travelers only their own"""
    if current_user.is_agency:
        return await storage.get_all_travel_preferences()
    return await storage.get_travel_preferences_by_user_id(current_user.id)


@router.post("", response_model=TravelPreferenceRead, status_code=status.HTTP_201_CREATED)
async def create_travel_preference(
    payload: TravelPreferenceCreate,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    preference = await storage.create_travel_preference(
        user_id=current_user.id,
        **payload.model_dump(),
    )
    logger.info(
        "travel_preference_created",
        preference_id=preference.id,
        destination_id=preference.destination_id,
        travelers=preference.travelers,
    )
    return preference


@router.get("/{preference_id}", response_model=TravelPreferenceRead)
async def get_travel_preference(
    preference_id: EntityId,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    preference = await storage.get_travel_preference(preference_id)
    if current_user.is_agency:
        if preference is None:
            raise NotFound(PREFERENCE_NOT_FOUND)
        return preference
    return owned_or_absent(preference, current_user.id, "user_id", PREFERENCE_NOT_FOUND)


@router.patch("/{preference_id}", response_model=TravelPreferenceRead)
async def update_travel_preference(
    preference_id: EntityId,
    payload: TravelPreferenceUpdate,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Partial update, including status changes, by the requester only"""
    owned_or_absent(
        await storage.get_travel_preference(preference_id),
        current_user.id, "user_id", PREFERENCE_NOT_FOUND,
    )
    updated = await storage.update_travel_preference(
        preference_id, **payload.model_dump(exclude_unset=True)
    )
    if updated is None:
        raise NotFound(PREFERENCE_NOT_FOUND)
    logger.info("travel_preference_updated", preference_id=preference_id, status=updated.status)
    return updated


@router.get("/{preference_id}/packages", response_model=List[TravelPackageRead])
async def list_packages_for_preference(
    preference_id: EntityId,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Offers made against one of the caller's own preferences"""
    owned_or_absent(
        await storage.get_travel_preference(preference_id),
        current_user.id, "user_id", PREFERENCE_NOT_FOUND,
    )
    return await storage.get_travel_packages_by_preference_id(preference_id)
