"""
User directory endpoints
"""

from typing import List

from fastapi import APIRouter, Depends

from travelmarket.api.deps import get_current_user, get_storage, require_agency
from travelmarket.api.schemas import UserRead, UserSummary
from travelmarket.db.models import User
from travelmarket.db.storage import Storage

router = APIRouter(prefix="/api", tags=["users"])


@router.get("/users", response_model=List[UserSummary])
async def list_users(
    current_user: User = Depends(require_agency),
    storage: Storage = Depends(get_storage),
):
    """Id, username and email of every user; agencies only"""
    return await storage.get_all_users()


@router.get("/contacts", response_model=List[UserRead])
async def list_contacts(
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Users the caller has sent messages to or received messages from"""
    messages = await storage.get_messages_by_user_id(current_user.id)
    contact_ids = {
        m.receiver_id if m.sender_id == current_user.id else m.sender_id
        for m in messages
    }
    contact_ids.discard(current_user.id)
    return await storage.get_users_by_ids(contact_ids)
