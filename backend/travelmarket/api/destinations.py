"""
Destination catalog endpoints
"""

from typing import List

import structlog
from fastapi import APIRouter, Depends

from travelmarket.api.deps import EntityId, get_storage
from travelmarket.api.schemas import DestinationRead, SeedResult
from travelmarket.core.errors import NotFound
from travelmarket.db.storage import Storage

logger = structlog.get_logger(__name__)
router = APIRouter(prefix="/api/destinations", tags=["destinations"])


@router.get("", response_model=List[DestinationRead])
async def list_destinations(storage: Storage = Depends(get_storage)):
    return await storage.get_all_destinations()


@router.post("/seed",
    response_model=SeedResult,
    summary="Seed destinations",
    description="Load the built-in destinations when the catalog is empty; otherwise a no-op",
)
async def seed_destinations(storage: Storage = Depends(get_storage)):
    inserted = await storage.seed_destinations()
    logger.info("destinations_seed_requested", inserted=inserted)
    message = "Destinations seeded successfully" if inserted else "Destinations already seeded"
    return {"message": message, "inserted": inserted}


@router.get("/{destination_id}", response_model=DestinationRead)
async def get_destination(destination_id: EntityId, storage: Storage = Depends(get_storage)):
    destination = await storage.get_destination(destination_id)
    if destination is None:
        raise NotFound("Destination not found")
    return destination
