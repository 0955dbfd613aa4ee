"""
Configuration management for the Riak client.

Supports configuration via environment variables and .env files.
Explicit constructor arguments take precedence over the environment,
which takes precedence over the defaults below.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8098
DEFAULT_CONCURRENCY_LIMIT = 20


class RiakConfig(BaseSettings):
    """
    Configuration settings for the Riak client.

    All settings can be configured via environment variables with the SZ_RIAK_ prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="SZ_RIAK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server settings
    host: str = Field(
        default=DEFAULT_HOST,
        description="Riak HTTP interface host"
    )
    port: int = Field(
        default=DEFAULT_PORT,
        ge=1,
        le=65535,
        description="Riak HTTP interface port"
    )
    bucket: Optional[str] = Field(
        default=None,
        description="Default bucket for key operations"
    )

    # Batching parameters
    concurrency_limit: int = Field(
        default=DEFAULT_CONCURRENCY_LIMIT,
        ge=1,
        description="Maximum number of requests in flight during a batch operation"
    )

    # Transport settings
    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Per-request timeout applied by the HTTP transport"
    )

    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format"
    )

    @property
    def base_url(self) -> str:
        """Get the HTTP base URL of the Riak node."""
        return f"http://{self.host}:{self.port}"


# Global config instance
_config: Optional[RiakConfig] = None


def get_config() -> RiakConfig:
    """Get or create the global configuration instance."""
    global _config
    if _config is None:
        _config = RiakConfig()
    return _config


def set_config(config: Optional[RiakConfig]) -> None:
    """Set the global configuration instance (None resets to environment defaults)."""
    global _config
    _config = config
