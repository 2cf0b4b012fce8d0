# config/settings.py

import os
import re
from datetime import time
from functools import lru_cache
from typing import List, Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


RATE_PERIODS = {"second": 1, "minute": 60, "hour": 3600}


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Restaurant Staff API"
    DEBUG: bool = False
    ENVIRONMENT: str = Field(default="development", pattern="^(development|staging|production)$")
    AUTO_CREATE_TABLES: bool = True

    # Database
    DATABASE_URL: str = "sqlite:///./restaurant.db"
    DB_POOL_SIZE: int = Field(default=5, ge=1, le=100)
    DB_MAX_OVERFLOW: int = Field(default=10, ge=0, le=100)
    DB_POOL_RECYCLE: int = Field(default=1800, ge=300)

    # Security
    SECRET_KEY: str = Field(default="change-me-in-production", min_length=8)
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_HOURS: int = Field(default=12, ge=1, le=72)

    # Bootstrap admin (database/init_db.py)
    ADMIN_EMAIL: str = "admin@restaurante.pe"
    ADMIN_PASSWORD: str = Field(default="admin123", min_length=6)

    # CORS
    CORS_ORIGINS: str = ""

    # File uploads
    UPLOAD_DIR: str = "uploads"
    MAX_FILE_SIZE: int = Field(default=5 * 1024 * 1024, ge=1024)
    ALLOWED_IMAGE_TYPES: str = "image/jpeg,image/png,image/webp"

    # Attendance
    LOCAL_TIMEZONE: str = "America/Lima"
    DEFAULT_CUTOFF_TIME: str = "09:10"

    # Rate limiting
    REDIS_URL: Optional[str] = None
    RATE_LIMIT_ENABLED: bool = True
    LOGIN_RATE_LIMIT: str = "5/minute"
    # only honour X-Forwarded-For behind a proxy that overwrites it
    TRUST_PROXY_HEADERS: bool = False

    # Monitoring
    LOG_LEVEL: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        if not self.CORS_ORIGINS:
            return ["*"] if self.DEBUG else []
        return [s.strip() for s in self.CORS_ORIGINS.split(",") if s.strip()]

    @property
    def allowed_image_types_list(self) -> List[str]:
        return [t.strip().lower() for t in self.ALLOWED_IMAGE_TYPES.split(",") if t.strip()]

    @property
    def local_zone(self) -> ZoneInfo:
        return ZoneInfo(self.LOCAL_TIMEZONE)

    @property
    def default_cutoff(self) -> time:
        hh, mm = self.DEFAULT_CUTOFF_TIME.split(":")
        return time(int(hh), int(mm))

    @property
    def login_rate_limit(self) -> Tuple[int, int]:
        """(limit, window_seconds) parsed from LOGIN_RATE_LIMIT"""
        count, period = self.LOGIN_RATE_LIMIT.split("/")
        return int(count), RATE_PERIODS[period.strip()]

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @field_validator("DATABASE_URL")
    @classmethod
    def validate_database_url(cls, v):
        """Validate database URL format"""
        if not v.startswith(("postgresql://", "postgresql+psycopg2://", "sqlite://")):
            raise ValueError("Unsupported database URL format")
        return v

    @field_validator("SECRET_KEY")
    @classmethod
    def validate_secret(cls, v):
        if len(v) < 32:
            import warnings
            warnings.warn(
                f"Secret key is only {len(v)} characters. Consider using at least 32 characters for production.",
                UserWarning,
            )
        return v

    @field_validator("LOCAL_TIMEZONE")
    @classmethod
    def validate_timezone(cls, v):
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown time zone: {v!r}")
        return v

    @field_validator("DEFAULT_CUTOFF_TIME")
    @classmethod
    def validate_cutoff(cls, v):
        m = re.fullmatch(r"([01]\d|2[0-3]):([0-5]\d)", v.strip())
        if not m:
            raise ValueError("DEFAULT_CUTOFF_TIME must look like HH:MM")
        return v.strip()

    @field_validator("LOGIN_RATE_LIMIT")
    @classmethod
    def validate_rate_limit(cls, v):
        m = re.fullmatch(r"\s*(\d+)\s*/\s*(second|minute|hour)\s*", v)
        if not m or int(m.group(1)) < 1:
            raise ValueError("Rate limits look like '<count>/<second|minute|hour>'")
        return f"{m.group(1)}/{m.group(2)}"

    @field_validator("REDIS_URL")
    @classmethod
    def validate_redis_url(cls, v):
        """Validate Redis URL format"""
        if v and not v.startswith(("redis://", "rediss://")):
            raise ValueError("Invalid Redis URL format")
        return v or None

    @field_validator("CORS_ORIGINS")
    @classmethod
    def validate_cors_origins(cls, v):
        """Validate CORS origins in production"""
        environment = os.getenv("ENVIRONMENT", "development")
        if environment == "production" and ("*" in v or not v):
            raise ValueError("Wildcard CORS origins not allowed in production")
        return v


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


# Global settings instance
settings = get_settings()
