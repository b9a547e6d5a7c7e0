"""Configuration settings for the GIGO sales engine."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class FlatSettings(BaseSettings):
    """Flat settings read from environment variables or a .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Report categories (order is the display order)
    sales_categories: list[str] = Field(
        default=["qurt", "toys", "milchofka"], validation_alias="SALES_CATEGORIES"
    )

    # Plan defaults
    category_distribution: dict[str, float] = Field(
        default={"qurt": 15.0, "toys": 40.0, "milchofka": 45.0},
        validation_alias="CATEGORY_DISTRIBUTION",
    )
    debt_limit_percent: float = Field(default=7.0, validation_alias="DEBT_LIMIT_PERCENT")
    plan_window_days: int = Field(default=90, validation_alias="PLAN_WINDOW_DAYS")

    # "delta" applies signed increments, "recompute" rebuilds current_total per write
    reconcile_mode: Literal["delta", "recompute"] = Field(
        default="delta", validation_alias="RECONCILE_MODE"
    )

    # Progress colour bands
    progress_amber_from: float = Field(default=51.0, validation_alias="PROGRESS_AMBER_FROM")
    progress_green_from: float = Field(default=86.0, validation_alias="PROGRESS_GREEN_FROM")

    # Reward ladder override (defaults to the packaged rewards.yaml)
    bonus_tiers_file: Path | None = Field(default=None, validation_alias="BONUS_TIERS_FILE")

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", validation_alias="LOG_LEVEL"
    )
    log_format: Literal["json", "console"] = Field(
        default="console", validation_alias="LOG_FORMAT"
    )


@lru_cache
def get_settings() -> FlatSettings:
    """Get cached settings instance."""
    return FlatSettings()
