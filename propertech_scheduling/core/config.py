"""
Propertech Scheduling Configuration
Loads settings from .env file using Pydantic v2 with BaseSettings
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # ==================== Project Info ====================
    PROJECT_NAME: str = "Propertech Scheduling API"
    PROJECT_DESCRIPTION: str = "Viewing bookings and recurring maintenance scheduling"
    VERSION: str = "1.0.0"
    API_PREFIX: str = "/api"

    # ==================== Database ====================
    DATABASE_URL: str = "sqlite:///propertech_scheduling.db"
    DATABASE_POOL_SIZE: int = 5
    DATABASE_MAX_OVERFLOW: int = 10
    DATABASE_POOL_RECYCLE: int = 3600

    # ==================== Security & Authentication ====================
    SECRET_KEY: str = "your-super-secret-key-change-this-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 10080  # 7 days

    # ==================== CORS ====================
    FRONTEND_URL: str = "http://localhost:3000"
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:3001",
    ]

    # ==================== Server Configuration ====================
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    RELOAD: bool = False

    # ==================== Viewing Slots ====================
    # Labels run from SLOT_DAY_START to SLOT_DAY_END inclusive, Monday-Friday
    SLOT_DAY_START: str = "09:00"
    SLOT_DAY_END: str = "18:00"
    SLOT_MINUTES: int = 30

    # ==================== Scheduled Maintenance ====================
    DUE_SOON_WINDOW_DAYS: int = 7

    # ==================== Notifications ====================
    # Empty URL means events are only logged
    NOTIFICATION_WEBHOOK_URL: Optional[str] = None
    NOTIFICATION_TIMEOUT_SECONDS: float = 5.0

    # ==================== Features ====================
    DEBUG: bool = False
    TESTING: bool = False
    LOG_LEVEL: str = "INFO"

    # ==================== Pagination ====================
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    # ==================== Configuration Loading ====================
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="allow",
        validate_default=True,
    )


# ==================== Settings Singleton ====================
@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()


# ==================== Helper Functions ====================
def get_cors_origins() -> List[str]:
    """Get CORS allowed origins"""
    return [settings.FRONTEND_URL, *settings.ALLOWED_ORIGINS]


def is_testing() -> bool:
    """Check if running in testing mode"""
    return settings.TESTING
