from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import List, Literal


class Settings(BaseSettings):
    """Application settings"""

    # Database
    database_url: str = "sqlite:///./training_tracker.db"

    # Application
    debug: bool = False
    log_level: str = "INFO"
    cors_origins: List[str] = ["*"]

    # Template seeding: "atomic" rolls back the whole edition when any
    # template task fails, "best_effort" logs and skips the failed task
    template_seeding_mode: Literal["atomic", "best_effort"] = "atomic"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    """Return the cached settings"""
    return Settings()
