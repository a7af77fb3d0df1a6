from typing import Optional

from fastapi import APIRouter, Depends, Request, Response, status
import structlog

from travelmarket.api.deps import (
    get_current_user, get_session_id, get_session_store, get_settings, get_storage
)
from travelmarket.api.schemas import LoginRequest, RegisterRequest, StatusMessage, UserRead
from travelmarket.core.errors import ConstraintViolation, DuplicateUser, InvalidCredentials
from travelmarket.core.rate_limiting import auth_limit, limiter
from travelmarket.core.security import authenticate_user, get_password_hash, performance_timer
from travelmarket.core.sessions import InMemorySessionStore
from travelmarket.core.settings import Settings
from travelmarket.db.models import User
from travelmarket.db.storage import Storage

# Set up logging
logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api", tags=["auth"])


class AuthService:
    """Registration and login on top of storage and the session store"""

    def __init__(self, storage: Storage, sessions: InMemorySessionStore, settings: Settings):
        self.storage = storage
        self.sessions = sessions
        self.settings = settings

    async def _ensure_unique(self, payload: RegisterRequest) -> None:
        if await self.storage.get_user_by_username(payload.username):
            raise DuplicateUser("Username already exists")
        if await self.storage.get_user_by_email(payload.email):
            raise DuplicateUser("Email already exists")

    async def register_user(self, payload: RegisterRequest) -> User:
        await self._ensure_unique(payload)
        try:
            return await self.storage.create_user(
                username=payload.username,
                email=payload.email,
                password=get_password_hash(payload.password),
                full_name=payload.full_name,
                role=payload.role,
            )
        except ConstraintViolation:
            # a concurrent registration took the name or address after the check
            await self._ensure_unique(payload)
            raise

    async def login(self, username_or_email: str, password: str) -> User:
        user = await authenticate_user(self.storage, username_or_email, password)
        if user is None:
            raise InvalidCredentials()
        return user

    def start_session(self, response: Response, user: User, previous_session_id: Optional[str]) -> None:
        """Issue a fresh session id, discarding any previous one"""
        self.sessions.destroy(previous_session_id)
        session_id = self.sessions.create(user.id)
        response.set_cookie(
            key=self.settings.SESSION_COOKIE_NAME,
            value=session_id,
            max_age=self.settings.SESSION_TTL_SECONDS,
            httponly=True,
            samesite="lax",
            secure=self.settings.SESSION_COOKIE_SECURE,
        )

    def end_session(self, response: Response, session_id: Optional[str]) -> bool:
        destroyed = self.sessions.destroy(session_id)
        response.delete_cookie(self.settings.SESSION_COOKIE_NAME)
        return destroyed


def get_auth_service(
    storage: Storage = Depends(get_storage),
    sessions: InMemorySessionStore = Depends(get_session_store),
    settings: Settings = Depends(get_settings),
) -> AuthService:
    return AuthService(storage, sessions, settings)


@router.post("/register",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    responses={
        201: {"description": "User registered and logged in"},
        400: {"description": "Invalid input or user already exists"},
    },
    summary="User registration",
)
@limiter.limit(auth_limit)
async def register(
    request: Request,
    response: Response,
    payload: RegisterRequest,
    session_id: Optional[str] = Depends(get_session_id),
    service: AuthService = Depends(get_auth_service),
):
    """Register a new user and log them in"""
    async with performance_timer("user_registration"):
        user = await service.register_user(payload)
        service.start_session(response, user, session_id)

    logger.info(
        "user_registered",
        username=user.username,
        user_id=user.id,
        role=user.role,
    )
    return user


@router.post("/login",
    response_model=UserRead,
    responses={
        200: {"description": "Successfully authenticated"},
        401: {"description": "Invalid credentials"},
        429: {"description": "Too many attempts"},
    },
    summary="User login",
)
@limiter.limit(auth_limit)
async def login(
    request: Request,
    response: Response,
    payload: LoginRequest,
    session_id: Optional[str] = Depends(get_session_id),
    service: AuthService = Depends(get_auth_service),
):
    """Check credentials and establish a session"""
    async with performance_timer("user_login"):
        user = await service.login(payload.username, payload.password)
        service.start_session(response, user, session_id)

    logger.info(
        "user_login_success",
        username=user.username,
        user_id=user.id,
        ip_address=request.client.host if request.client else None
    )
    return user


@router.post("/logout", response_model=StatusMessage, summary="User logout")
async def logout(
    response: Response,
    session_id: Optional[str] = Depends(get_session_id),
    service: AuthService = Depends(get_auth_service),
):
    """Destroy the current session, if any"""
    if service.end_session(response, session_id):
        logger.info("user_logged_out")
    return {"message": "Logged out"}


@router.get("/user", response_model=UserRead, summary="Get current user")
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    return current_user
