"""Application configuration."""

import os
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings from environment variables."""

    # Data storage
    data_dir: str = "/data"

    # Web server
    host: str = "0.0.0.0"
    port: int = 8080

    # Optional basic auth for the bridge API
    username: Optional[str] = None
    password: Optional[str] = None

    # Slide defaults
    default_poll_interval: int = 15000  # ms, 0 disables polling
    default_timeout: int = 5000  # ms
    default_slide_username: str = "user"
    refresh_delay: float = 3.0  # seconds after a move before re-reading

    # Logging
    log_level: str = "INFO"

    model_config = {
        "env_prefix": "SLIDELOCAL_",
        "env_file": ".env",
    }

    @property
    def slides_file(self) -> str:
        """Path to slides.json file."""
        return os.path.join(self.data_dir, "slides.json")

    @property
    def auth_enabled(self) -> bool:
        """Check if basic auth is enabled."""
        return bool(self.username and self.password)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
