"""
FastAPI dependencies shared by the routers: injected services, the session
user, role gates and the owned-or-absent lookup.
"""

from typing import Annotated, Optional, TypeVar

import structlog
from fastapi import Depends, Path, Request

from travelmarket.api.schemas import MAX_INT
from travelmarket.core.errors import NotFound, Unauthorized
from travelmarket.core.sessions import InMemorySessionStore
from travelmarket.core.settings import Settings
from travelmarket.db.models import User, UserRole
from travelmarket.db.storage import Storage

logger = structlog.get_logger(__name__)

T = TypeVar("T")

# Row ids in URL paths; out-of-range values are rejected as bad path parameters
EntityId = Annotated[int, Path(ge=1, le=MAX_INT)]


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_storage(request: Request) -> Storage:
    return request.app.state.storage


def get_session_store(request: Request) -> InMemorySessionStore:
    return request.app.state.sessions


def get_session_id(request: Request, settings: Settings = Depends(get_settings)) -> Optional[str]:
    return request.cookies.get(settings.SESSION_COOKIE_NAME)


async def get_current_user(
    session_id: Optional[str] = Depends(get_session_id),
    sessions: InMemorySessionStore = Depends(get_session_store),
    storage: Storage = Depends(get_storage),
) -> User:
    """Resolve the session cookie to a user, or raise Unauthorized"""
    record = sessions.get(session_id)
    if record is None:
        raise Unauthorized()

    user = await storage.get_user(record.user_id)
    if user is None:
        # account vanished underneath a live session
        sessions.destroy(session_id)
        raise Unauthorized()

    structlog.contextvars.bind_contextvars(user_id=user.id)
    return user


async def require_agency(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role != UserRole.AGENCY.value:
        logger.info("role_gate_rejected", required=UserRole.AGENCY.value, role=current_user.role)
        raise Unauthorized()
    return current_user


def owned_or_absent(entity: Optional[T], owner_id: int, owner_field: str, message: str) -> T:
    """Return ``entity`` only when it exists and belongs to ``owner_id``.

    Absence and foreign ownership both raise the same NotFound, so callers
    cannot probe for ids they do not own.
    """
    if entity is None or getattr(entity, owner_field) != owner_id:
        raise NotFound(message)
    return entity
