"""
Direct messaging between travelers and agencies
"""

from typing import List

import structlog
from fastapi import APIRouter, Depends, status

from travelmarket.api.deps import EntityId, get_current_user, get_storage, owned_or_absent
from travelmarket.api.schemas import MessageCreate, MessageRead
from travelmarket.core.errors import NotFound
from travelmarket.db.models import User
from travelmarket.db.storage import Storage

logger = structlog.get_logger(__name__)
router = APIRouter(prefix="/api/messages", tags=["messages"])


@router.get("/{user_id}", response_model=List[MessageRead])
async def get_conversation(
    user_id: EntityId,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Messages exchanged with ``user_id`` in either direction, oldest first"""
    return await storage.get_messages_between_users(current_user.id, user_id)


@router.post("", response_model=MessageRead, status_code=status.HTTP_201_CREATED)
async def send_message(
    payload: MessageCreate,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    message = await storage.create_message(
        sender_id=current_user.id,
        receiver_id=payload.receiver_id,
        content=payload.content,
    )
    logger.info("message_sent", message_id=message.id, receiver_id=message.receiver_id)
    return message


@router.patch("/{message_id}/read", response_model=MessageRead)
async def mark_message_read(
    message_id: EntityId,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Only the receiver may mark a message read"""
    owned_or_absent(
        await storage.get_message(message_id),
        current_user.id, "receiver_id", "Message not found",
    )
    updated = await storage.mark_message_as_read(message_id)
    if updated is None:
        raise NotFound("Message not found")
    return updated
