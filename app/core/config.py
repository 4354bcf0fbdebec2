"""
StudentNest Application Configuration
Loads settings from .env file using Pydantic v2 with BaseSettings
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # ==================== Project Info ====================
    PROJECT_NAME: str = "StudentNest API"
    PROJECT_DESCRIPTION: str = "Student housing marketplace - listings, room allocation and occupancy"
    VERSION: str = "1.0.0"
    API_PREFIX: str = "/api"

    # ==================== Database ====================
    DATABASE_URL: str = "sqlite:///./studentnest.db"
    DATABASE_POOL_SIZE: int = 5
    DATABASE_MAX_OVERFLOW: int = 10
    DATABASE_POOL_RECYCLE: int = 3600

    # ==================== Security & Authentication ====================
    SECRET_KEY: str = "change-this-secret-key-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 10080  # 7 days

    # ==================== CORS & Frontend ====================
    FRONTEND_URL: str = "http://localhost:3000"
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:3001",
    ]

    # ==================== Server Configuration ====================
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # ==================== Allocation Policy ====================
    # Rooms a single occupancy may claim (multi-room mode)
    MAX_ROOMS_PER_OCCUPANT_SHARED: int = 2
    MAX_ROOMS_PER_OCCUPANT_PRIVATE: int = 1
    FAIR_DISTRIBUTION_ENABLED: bool = True
    # Room-slots that must stay free for every remaining prospective occupant
    FAIR_DISTRIBUTION_MIN_SLOTS_PER_OCCUPANT: float = 1.0

    # ==================== Notifications ====================
    NOTIFICATION_MAX_RETRIES: int = 3

    # ==================== Features ====================
    DEBUG: bool = False
    TESTING: bool = False
    LOG_LEVEL: str = "INFO"

    # ==================== Configuration Loading ====================
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="allow",
        validate_default=True,
    )

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.lower().startswith("sqlite")


# ==================== Settings Singleton ====================
@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()


def get_cors_origins() -> List[str]:
    """Get CORS allowed origins"""
    return settings.ALLOWED_ORIGINS


def is_production() -> bool:
    """Check if running in production"""
    return not settings.DEBUG and settings.FRONTEND_URL.startswith("https")
