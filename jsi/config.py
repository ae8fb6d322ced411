"""Configuration management using Pydantic Settings."""
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="JSI_",
        case_sensitive=False,
    )

    # Application
    app_name: str = "Job Satisfaction Insights Engine"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # Analysis windows (days)
    baseline_window_days: int = Field(default=14, ge=1)
    trend_window_days: int = Field(default=90, ge=1)
    export_window_days: int = Field(default=90, ge=1)
    insights_window_days: int = Field(default=30, ge=1)
    default_granularity: str = "week"

    # Seed for topic rotation / prompt sampling; unset means nondeterministic
    topic_seed: Optional[int] = None


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
