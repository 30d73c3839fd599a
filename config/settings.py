"""
Application settings loaded from environment variables.

Uses pydantic-settings for validation and type safety.
Engine tunables default to the values the planning team works with.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache


class Settings(BaseSettings):
    """
    Application settings.

    All values loaded from .env file or environment variables.
    Validation happens automatically on startup.
    """

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),  # Check current dir, then parent
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"  # Ignore extra env vars
    )

    # ===================
    # PATTERN SCORING
    # ===================
    changeover_cost: float = Field(
        default=100.0,
        ge=0,
        le=10000,
        description="Fixed penalty for setting up a coil on a line"
    )

    # ===================
    # ORDER GROUPING
    # ===================
    group_width_tolerance_mm: float = Field(
        default=10.0,
        ge=0,
        le=200,
        description="Max width difference (mm) from the group anchor"
    )

    # ===================
    # ALLOCATION
    # ===================
    fulfillment_threshold: float = Field(
        default=0.99,
        gt=0,
        le=1,
        description="Fraction of order weight that counts as fulfilled"
    )

    # ===================
    # RM FORECAST
    # ===================
    forecast_width_margin_mm: float = Field(
        default=20.0,
        ge=0,
        le=200,
        description="Trim allowance added to the widest unfulfilled order"
    )
    forecast_weight_buffer: float = Field(
        default=1.1,
        ge=1,
        le=3,
        description="Multiplier over aggregate unfulfilled weight"
    )

    # ===================
    # COIL USAGE REPORT
    # ===================
    full_use_balance_pct: float = Field(
        default=6.0,
        ge=0,
        le=100,
        description="A used coil with less balance than this (%) counts as fully used; the rest is scrap"
    )

    # ===================
    # APP SETTINGS
    # ===================
    environment: str = Field(
        default="development",
        pattern="^(development|staging|production)$",
        description="Application environment"
    )
    debug: bool = Field(
        default=True,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API host"
    )
    api_port: int = Field(
        default=8000,
        ge=1000,
        le=65535,
        description="API port"
    )

    # ===================
    # COMPUTED PROPERTIES
    # ===================
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload.

    Returns:
        Settings: Application settings

    Raises:
        ValidationError: If env vars are invalid
    """
    return Settings()


# For convenient imports: from config.settings import settings
settings = get_settings()
