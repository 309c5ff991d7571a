"""Application settings using Pydantic for environment-based configuration."""
from functools import lru_cache
from typing import List

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application Configuration
    app_name: str = Field(default="async-patterns-lab", description="Application name")
    app_env: str = Field(default="development", description="Environment (development/production)")
    log_level: str = Field(default="INFO", description="Logging level")
    debug: bool = Field(default=False, description="Debug mode")

    # API Configuration
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8080, description="API port")
    allowed_origins: str = Field(
        default="http://localhost:3000,http://localhost:8080",
        description="CORS allowed origins (comma-separated)"
    )

    # Device simulation
    device_min_delay_seconds: int = Field(default=1, ge=0, description="Minimum device processing delay")
    device_max_delay_seconds: int = Field(default=5, ge=0, description="Maximum device processing delay")
    device_failure_rate: float = Field(default=0.10, description="Probability a device ends FAILED")

    # Payment order simulation
    order_min_delay_seconds: int = Field(default=2, ge=0, description="Minimum order processing delay")
    order_max_delay_seconds: int = Field(default=8, ge=0, description="Maximum order processing delay")
    order_failure_rate: float = Field(default=0.05, description="Probability an order ends FAILED")

    # Deletion and idempotency
    deletion_delay_seconds: float = Field(
        default=2.0, ge=0, description="Delay before a deleted resource is removed"
    )
    stale_idempotency_is_miss: bool = Field(
        default=True,
        description="Treat an idempotency key whose resource was removed as unseen",
    )

    # Backpressure (payments v1)
    max_concurrent_requests: int = Field(default=8, gt=0, description="Concurrent request ceiling")
    backpressure_release_seconds: float = Field(
        default=0.1, ge=0, description="Delay before an admitted slot is released"
    )
    rate_limit_retry_after_seconds: int = Field(
        default=5, description="retryAfter value reported on 429 responses"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level. Must be one of: {valid_levels}")
        return v.upper()

    @field_validator("device_failure_rate", "order_failure_rate")
    @classmethod
    def validate_failure_rate(cls, v: float) -> float:
        """Failure rates are probabilities."""
        if not 0.0 <= v <= 1.0:
            raise ValueError("Failure rate must be between 0 and 1")
        return v

    @model_validator(mode="after")
    def validate_delay_ranges(self) -> "Settings":
        """Reject inverted delay windows."""
        if self.device_min_delay_seconds > self.device_max_delay_seconds:
            raise ValueError("device_min_delay_seconds must not exceed device_max_delay_seconds")
        if self.order_min_delay_seconds > self.order_max_delay_seconds:
            raise ValueError("order_min_delay_seconds must not exceed order_max_delay_seconds")
        return self

    def get_allowed_origins_list(self) -> List[str]:
        """Parse allowed origins from comma-separated string."""
        return [origin.strip() for origin in self.allowed_origins.split(",")]


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
