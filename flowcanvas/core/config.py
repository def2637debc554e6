"""
Application Configuration
"""
from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Editor core settings with environment variable support"""

    # Application
    APP_NAME: str = "flowcanvas"
    APP_VERSION: str = "1.0.0"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    LOG_FILE: Optional[str] = None

    # Layout
    LAYOUT_CROSSING_SWEEPS: int = 4

    # Editor session
    BLOCK_SAVE_ON_ERRORS: bool = True

    class Config:
        env_prefix = "FLOWCANVAS_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance
    Using lru_cache ensures settings are loaded once and reused
    """
    return Settings()
