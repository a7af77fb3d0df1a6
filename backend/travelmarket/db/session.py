"""
Database lifecycle: async engine, session factory, table creation and health checks
"""

import logging
import time
from contextlib import asynccontextmanager
from dataclasses import asdict, dataclass
from typing import Any, AsyncGenerator, Dict, Optional
from urllib.parse import urlparse

from sqlalchemy import event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel, text

from travelmarket.core.settings import Settings
# registers every table on SQLModel.metadata
from travelmarket.db import models  # noqa: F401

logger = logging.getLogger(__name__)

# sync scheme -> async driver scheme
ASYNC_DRIVERS = {
    "postgres": "postgresql+asyncpg",
    "postgresql": "postgresql+asyncpg",
    "sqlite": "sqlite+aiosqlite",
}


def to_async_url(database_url: str) -> str:
    """Point a plain database URL at its async driver; driver URLs pass through"""
    if not database_url:
        raise ValueError("DB_URL environment variable is required")

    scheme, sep, rest = database_url.partition("://")
    if not sep or not scheme:
        raise ValueError("Invalid database URL format")

    return f"{ASYNC_DRIVERS.get(scheme, scheme)}://{rest}"


@dataclass
class ConnectionStats:
    total_connections: int = 0
    active_connections: int = 0
    failed_connections: int = 0
    last_health_check: Optional[float] = None
    health_status: str = "unknown"


class DatabaseManager:
    """Owns the engine and hands out sessions; constructed once per application"""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.engine: Optional[AsyncEngine] = None
        self.async_session: Optional[async_sessionmaker] = None
        self.stats = ConnectionStats()

    @property
    def is_sqlite(self) -> bool:
        return to_async_url(self.settings.DB_URL).startswith("sqlite")

    def _engine_options(self) -> Dict[str, Any]:
        options: Dict[str, Any] = {"echo": self.settings.DB_ECHO, "pool_pre_ping": True}
        if not self.is_sqlite:
            options.update(
                pool_size=self.settings.DB_POOL_SIZE,
                max_overflow=self.settings.DB_MAX_OVERFLOW,
                pool_timeout=self.settings.DB_POOL_TIMEOUT,
                pool_recycle=self.settings.DB_POOL_RECYCLE,
            )
        return options

    def _watch(self, engine: AsyncEngine) -> None:
        """Count connections and errors; SQLite must be told to enforce foreign keys"""
        stats = self.stats
        sqlite = self.is_sqlite

        @event.listens_for(engine.sync_engine, "connect")
        def on_connect(dbapi_connection, connection_record):
            stats.total_connections += 1
            stats.active_connections += 1
            if sqlite:
                cursor = dbapi_connection.cursor()
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()

        @event.listens_for(engine.sync_engine, "close")
        def on_close(dbapi_connection, connection_record):
            stats.active_connections = max(0, stats.active_connections - 1)

        @event.listens_for(engine.sync_engine, "handle_error")
        def on_error(exception_context):
            stats.failed_connections += 1
            logger.error(f"Database error: {exception_context.original_exception}")

    async def initialize(self) -> None:
        url = to_async_url(self.settings.DB_URL)
        self.engine = create_async_engine(url, **self._engine_options())
        self._watch(self.engine)
        self.async_session = async_sessionmaker(self.engine, class_=AsyncSession, expire_on_commit=False)

        parsed = urlparse(url)
        logger.info(f"Database engine ready: {parsed.scheme}://{parsed.hostname or ''}{parsed.path}")

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Yield a session; roll back on any error and always close"""
        if self.async_session is None:
            raise RuntimeError("Database manager not initialized")

        async with self.async_session() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    async def health_check(self) -> Dict[str, Any]:
        """Round-trip a ``SELECT 1`` and report the outcome"""
        started = time.perf_counter()
        try:
            async with self.get_session() as session:
                await session.execute(text("SELECT 1"))
        except (SQLAlchemyError, RuntimeError, OSError) as e:
            logger.error(f"Database health check failed: {e}")
            self.stats.health_status = "unhealthy"
            return {"status": "unhealthy", "error": str(e)}

        self.stats.last_health_check = time.time()
        self.stats.health_status = "healthy"
        return {"status": "healthy", "response_time": f"{time.perf_counter() - started:.3f}s"}

    async def init_db(self) -> None:
        """Create any missing tables"""
        if self.engine is None:
            raise RuntimeError("Database engine not initialized")

        async with self.engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)
        logger.info("Database tables ready")

    async def close(self) -> None:
        if self.engine is not None:
            await self.engine.dispose()
            self.engine = None
            self.async_session = None
            logger.info("Database connections closed")

    def get_connection_stats(self) -> Dict[str, Any]:
        return asdict(self.stats)
