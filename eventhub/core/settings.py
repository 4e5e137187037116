"""
Configuration & Environment Management for EventHub
"""

import logging
import secrets
from functools import lru_cache
from typing import List, Optional, Union

from pydantic import EmailStr, field_validator
from pydantic_settings import BaseSettings as PydanticBaseSettings

logger = logging.getLogger(__name__)


class DatabaseSettings(PydanticBaseSettings):
    """Database configuration settings"""

    DB_URL: Optional[str] = None
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_USER: str = "postgres"
    DB_PASSWORD: str = ""
    DB_NAME: str = "eventhub"

    # Connection Pool Settings
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 3600
    DB_POOL_PRE_PING: bool = True
    DB_ECHO: bool = False

    # Connection Timeouts
    DB_COMMAND_TIMEOUT: int = 60
    DB_STATEMENT_TIMEOUT: str = "60s"

    @property
    def database_url(self) -> str:
        """Generate database URL for async connections"""
        if self.DB_URL:
            return self.DB_URL
        return f"postgresql+asyncpg://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    model_config = {"case_sensitive": True, "env_file": ".env", "extra": "ignore"}


class RedisSettings(PydanticBaseSettings):
    """Redis configuration settings"""

    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_PASSWORD: Optional[str] = None
    REDIS_USERNAME: Optional[str] = None

    @property
    def redis_url(self) -> str:
        """Generate Redis URL"""
        auth = ""
        if self.REDIS_USERNAME and self.REDIS_PASSWORD:
            auth = f"{self.REDIS_USERNAME}:{self.REDIS_PASSWORD}@"
        elif self.REDIS_PASSWORD:
            auth = f":{self.REDIS_PASSWORD}@"

        return f"redis://{auth}{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"

    model_config = {"case_sensitive": True, "env_file": ".env", "extra": "ignore"}


class SecuritySettings(PydanticBaseSettings):
    """Security and authentication settings"""

    SECRET_KEY: str = secrets.token_urlsafe(32)
    JWT_ALGORITHM: str = "HS256"

    # Token Expiration
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 8

    # Password Security
    PASSWORD_HASH_ALGORITHM: str = "bcrypt"
    PASSWORD_MIN_LENGTH: int = 6

    model_config = {"case_sensitive": True, "env_file": ".env", "extra": "ignore"}


class WorkerSettings(PydanticBaseSettings):
    """Background task settings"""

    CELERY_BROKER_URL: str = "redis://localhost:6379/1"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/2"
    CELERY_TASK_SERIALIZER: str = "json"
    CELERY_RESULT_SERIALIZER: str = "json"
    CELERY_ACCEPT_CONTENT: List[str] = ["json"]
    CELERY_TIMEZONE: str = "UTC"
    CELERY_ENABLE_UTC: bool = True

    model_config = {"case_sensitive": True, "env_file": ".env", "extra": "ignore"}


class MonitoringSettings(PydanticBaseSettings):
    """Monitoring and observability settings"""

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"

    # Metrics
    ENABLE_PROMETHEUS: bool = True

    model_config = {"case_sensitive": True, "env_file": ".env", "extra": "ignore"}


class EmailSettings(PydanticBaseSettings):
    """Email configuration settings"""

    SENDGRID_API_KEY: Optional[str] = None
    SENDGRID_FROM_EMAIL: Optional[EmailStr] = None
    SENDGRID_FROM_NAME: str = "EventHub"

    @property
    def emails_enabled(self) -> bool:
        return bool(self.SENDGRID_API_KEY and self.SENDGRID_FROM_EMAIL)

    model_config = {"case_sensitive": True, "env_file": ".env", "extra": "ignore"}


class Settings(PydanticBaseSettings):
    """Main application settings"""

    # Environment
    ENVIRONMENT: str = "development"
    TESTING: bool = False
    VERSION: str = "1.0.0"

    # API Configuration
    API_V1_PREFIX: str = "/api/v1"
    PROJECT_NAME: str = "EventHub"

    # CORS Configuration
    BACKEND_CORS_ORIGINS: List[str] = ["http://localhost:5173"]

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")  # type: ignore
    @classmethod
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> List[str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",")]
        elif isinstance(v, list):
            return v
        return []

    # Admin accounts
    USERS_OPEN_REGISTRATION: bool = True

    # Registrations
    # Whether a submission bumps the owning event's registered counter.
    REGISTRATION_INCREMENTS_COUNT: bool = False
    REGISTRATION_CONFIRMATION_EMAILS: bool = True

    # Dashboard
    REVENUE_PER_PAID_TICKET: int = 50

    # Contact form recipient; falls back to the SendGrid sender
    CONTACT_INBOX_EMAIL: Optional[EmailStr] = None

    # Component Settings
    database: DatabaseSettings = DatabaseSettings()
    redis: RedisSettings = RedisSettings()
    security: SecuritySettings = SecuritySettings()
    worker: WorkerSettings = WorkerSettings()
    monitoring: MonitoringSettings = MonitoringSettings()
    email: EmailSettings = EmailSettings()

    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        return self.database.database_url

    @property
    def REDIS_URL(self) -> str:
        return self.redis.redis_url

    @property
    def SECRET_KEY(self) -> str:
        return self.security.SECRET_KEY

    @property
    def contact_inbox(self) -> Optional[str]:
        return self.CONTACT_INBOX_EMAIL or self.email.SENDGRID_FROM_EMAIL

    model_config = {
        "case_sensitive": True,
        "env_file": ".env",
        "extra": "ignore",
        "validate_assignment": True,
    }


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
