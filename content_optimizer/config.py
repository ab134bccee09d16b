"""
Configuration management using Pydantic settings.
Loads from environment variables and .env files.
"""

from typing import Dict
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .core.domain import validate_weights


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Database
    database_url: str = Field(
        default="sqlite:///./content_optimizer.db",
        description="Database connection URL for optimization runs"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_file: str = Field(default="logs/content_optimizer.log", description="Log file path")

    # Optimization
    default_weights: Dict[str, float] = Field(
        default_factory=lambda: {
            "engagement_rate": 0.5,
            "click_through_rate": 0.3,
            "conversion_rate": 0.2,
        },
        description="Objective weights used when a request does not supply any"
    )
    variant_count: int = Field(default=3, ge=0, description="A/B variants generated per request")

    @field_validator("default_weights")
    @classmethod
    def check_weights(cls, v):
        """Reject negative weights."""
        return validate_weights(v)


# Global settings instance
settings = Settings()
