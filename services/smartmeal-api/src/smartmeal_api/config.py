"""Application configuration"""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # API Settings
    api_title: str = "SmartMeal API"
    api_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # JWT Settings
    jwt_secret: str = "CHANGE_ME_IN_PRODUCTION"
    jwt_algorithm: str = "HS256"
    jwt_expire_hours: int = 24
    jwt_refresh_expire_days: int = 30

    # Database
    database_url: str = "sqlite+aiosqlite:///data/smartmeal.db"

    # Recipe catalog
    recipe_catalog_path: str | None = None  # Defaults to the packaged seed file
    recipe_filter_enabled: bool = False  # Apply diet/allergy/calorie filtering when picking recipes

    # CORS
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
