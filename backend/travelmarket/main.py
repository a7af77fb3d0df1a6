from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from travelmarket.api import agencies, auth, destinations, health, messages, packages, preferences, users
from travelmarket.core.errors import register_exception_handlers
from travelmarket.core.logging_config import configure_logging
from travelmarket.core.rate_limiting import configure_rate_limiting
from travelmarket.core.sessions import InMemorySessionStore
from travelmarket.core.settings import Settings
from travelmarket.db.session import DatabaseManager
from travelmarket.db.storage import DatabaseStorage
from travelmarket.middleware.logging import RequestLoggingMiddleware

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    db: DatabaseManager = app.state.db
    sessions: InMemorySessionStore = app.state.sessions

    # Startup
    logger.info("Starting application...")
    await db.initialize()
    if settings.CREATE_TABLES_ON_STARTUP:
        await db.init_db()
    if settings.SEED_DESTINATIONS_ON_STARTUP:
        await app.state.storage.seed_destinations()
    await sessions.start()

    yield

    # Shutdown
    logger.info("Shutting down application...")
    await sessions.stop()
    await db.close()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application and the services it shares across requests"""
    settings = settings or Settings()
    configure_logging(settings)

    app = FastAPI(
        title="Travel Marketplace API",
        description="Travelers post trip preferences, agencies answer with priced packages",
        version=health.API_VERSION,
        lifespan=lifespan,
    )

    db = DatabaseManager(settings)
    app.state.settings = settings
    app.state.db = db
    app.state.storage = DatabaseStorage(db)
    app.state.sessions = InMemorySessionStore(
        ttl_seconds=settings.SESSION_TTL_SECONDS,
        check_period_seconds=settings.SESSION_CHECK_PERIOD_SECONDS,
    )
    app.state.limiter = configure_rate_limiting(settings)

    register_exception_handlers(app)

    app.add_middleware(RequestLoggingMiddleware)
    # Credentialed CORS so the browser client can send the session cookie
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if settings.ENABLE_METRICS:
        Instrumentator().instrument(app).expose(app, endpoint="/metrics")

    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(destinations.router)
    app.include_router(agencies.router)
    app.include_router(users.router)
    app.include_router(preferences.router)
    app.include_router(packages.router)
    app.include_router(messages.router)

    return app
