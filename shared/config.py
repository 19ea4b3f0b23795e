"""
Shared configuration management for the fleet cache invalidator.
"""

from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from shared.errors import ConfigurationError


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="INVALIDATOR_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")


class InvalidatorConfig(BaseConfig):
    """Invalidator service configuration."""

    service_name: str = "invalidator"
    host: str = "0.0.0.0"
    port: int = Field(default=6051)

    # Fleet lookup
    region: str = Field(default="eu-central-1")
    asg_name: str = Field(default="")
    aws_timeout_seconds: float = Field(default=5.0)

    # Cache daemon on each node
    cache_port: int = Field(default=6081)
    invalidation_method: str = Field(default="FULLBAN")
    dispatch_timeout_seconds: float = Field(default=5.0)

    # False keeps the legacy 200 reply when the fleet lookup fails
    fail_on_resolution_error: bool = Field(default=True)

    def validate_fleet(self) -> None:
        """Fail fast when no fleet has been configured."""
        if not self.asg_name.strip():
            raise ConfigurationError(
                "Auto Scaling group name is required",
                details={"setting": "asg_name", "env": "INVALIDATOR_ASG_NAME"}
            )


def get_config(**overrides: Any) -> InvalidatorConfig:
    """Get invalidator configuration, letting explicit values win over env."""
    values = {key: value for key, value in overrides.items() if value is not None}
    return InvalidatorConfig(**values)
