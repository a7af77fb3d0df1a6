from pathlib import Path
from typing import Optional, Union
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # Database
    DB_URL: str = "postgresql://postgres:password@db:5432/travelmarket"
    DB_ECHO: bool = False  # Set to True for SQL query logging in development

    # Connection Pool Settings
    DB_POOL_SIZE: int = 10  # Number of connections to maintain in pool
    DB_MAX_OVERFLOW: int = 20  # Maximum overflow connections beyond pool_size
    DB_POOL_TIMEOUT: int = 30  # Timeout in seconds to get connection from pool
    DB_POOL_RECYCLE: int = 3600  # Recycle connections after 1 hour

    # Startup
    CREATE_TABLES_ON_STARTUP: bool = True
    SEED_DESTINATIONS_ON_STARTUP: bool = True

    # Sessions
    SESSION_COOKIE_NAME: str = "travelmarket.sid"
    SESSION_COOKIE_SECURE: bool = False
    SESSION_TTL_SECONDS: int = 7 * 24 * 3600
    SESSION_CHECK_PERIOD_SECONDS: int = 86400  # prune expired entries every 24h

    # Rate Limiting
    ENABLE_RATE_LIMITING: bool = True
    RATE_LIMIT_AUTH: str = "10/minute"

    # Metrics
    ENABLE_METRICS: bool = True

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None
    LOG_JSON: bool = True

    # CORS
    ALLOWED_ORIGINS: Union[list, str] = ["http://localhost:3000", "http://localhost:5000"]

    @field_validator('ALLOWED_ORIGINS', mode='before')
    @classmethod
    def parse_allowed_origins(cls, v):
        """Parse ALLOWED_ORIGINS from comma-separated string or list"""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(',') if origin.strip()]
        return v

    model_config = SettingsConfigDict(
        env_file=str(Path(__file__).parents[3] / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )
