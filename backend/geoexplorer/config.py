from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings from environment variables."""

    # Mapillary imagery
    MAPILLARY_API_URL: str = "https://graph.mapillary.com"
    MAPILLARY_TOKEN: Optional[str] = None
    IMAGERY_TIMEOUT_SEC: float = 8.0
    IMAGERY_ATTEMPTS: int = 12

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./geoexplorer.db"

    # Game Configuration
    ROUNDS_PER_GAME: int = 5
    TIME_ATTACK_LIMIT_SEC: int = 60  # per round

    # Service
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["*"]

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
