import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from passlib.context import CryptContext

from travelmarket.db.models import User
from travelmarket.db.storage import Storage

# Set up logging
logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Performance timer
@asynccontextmanager
async def performance_timer(operation: str):
    """Context manager for timing operations"""
    start = time.time()
    try:
        yield
    finally:
        duration = time.time() - start
        logger.info(f"{operation} completed in {duration:.2f}s")

def verify_password(plain: str, hashed: str) -> bool:
    """Verify a password against its hash"""
    try:
        return pwd_context.verify(plain, hashed)
    except ValueError as e:
        # malformed or foreign hash in the users table
        logger.error(f"Password verification error: {e}")
        return False

def get_password_hash(password: str) -> str:
    """Generate a one-way bcrypt hash"""
    return pwd_context.hash(password)

async def authenticate_user(
    storage: Storage,
    username_or_email: str,
    password: str,
) -> Optional[User]:
    """Resolve a user by username or email and check the password"""
    async with performance_timer("user_authentication"):
        username_or_email = username_or_email.strip()

        user = await storage.get_user_by_username(username_or_email)
        if user is None:
            user = await storage.get_user_by_email(username_or_email)

        if user is None:
            logger.warning(f"Authentication failed: user not found - {username_or_email}")
            return None

        if not verify_password(password, user.password):
            logger.warning(f"Authentication failed: invalid password for user - {username_or_email}")
            return None

        logger.info(f"User authenticated successfully: {user.username}")
        return user
