from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    openai_api_key: str = ""
    openai_realtime_model: str = "gpt-4o-realtime-preview-2024-12-17"
    openai_realtime_url: str = "wss://api.openai.com/v1/realtime"
    generation_timeout: float = 60.0

    firebase_database_url: str = ""
    firebase_credentials: Optional[str] = None

    default_recipe_title: str = "Community Recipe"
    log_level: str = "INFO"

    model_config = {
        "env_file": ".env",
        "env_prefix": "",
        "extra": "ignore",
    }

@lru_cache()
def get_settings() -> Settings:
    """Return cached Settings instance."""
    return Settings()
