"""Gateway configuration using pydantic-settings.

This module defines the GatewaySettings class that reads configuration
from environment variables with the GATEWAY_ prefix. The webhook secret
must be set for the gateway to start.
"""

from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GatewaySettings(BaseSettings):
    """Webhook gateway configuration from environment variables.

    All environment variables are prefixed with GATEWAY_ (e.g., GATEWAY_WEBHOOK_SECRET).

    Required fields (must be set via environment variables):
    - webhook_secret: Shared secret for validating GitCode webhook signatures
    """

    model_config = SettingsConfigDict(
        env_prefix="GATEWAY_",
        case_sensitive=False,
    )

    # -------------------------------------------------------------------------
    # Webhook Configuration
    # -------------------------------------------------------------------------
    # Shared secret for validating X-GitCode-Signature-256
    webhook_secret: str

    # User-Agent the GitCode hook sender identifies itself with
    expected_user_agent: str = "git-gitcode-hook"

    # Deadline in seconds for reading a webhook body
    body_read_timeout_seconds: float = 10.0

    # -------------------------------------------------------------------------
    # GitCode API Configuration
    # -------------------------------------------------------------------------
    # API token for the REST client; the client is not created without it
    gitcode_token: Optional[str] = None

    # Base URL for the GitCode v5 API
    gitcode_base_url: str = "https://api.gitcode.com/api/v5"

    # -------------------------------------------------------------------------
    # Server Configuration
    # -------------------------------------------------------------------------
    host: str = "0.0.0.0"

    port: int = 8080

    log_level: str = "INFO"

    # -------------------------------------------------------------------------
    # Validators
    # -------------------------------------------------------------------------
    @field_validator("webhook_secret")
    @classmethod
    def validate_webhook_secret(cls, v: str) -> str:
        """Validate that webhook secret is not empty."""
        if not v:
            raise ValueError("webhook_secret cannot be empty")
        return v

    @field_validator("expected_user_agent")
    @classmethod
    def validate_user_agent(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("expected_user_agent cannot be empty")
        return v

    @field_validator("body_read_timeout_seconds")
    @classmethod
    def validate_read_timeout(cls, v: float) -> float:
        """Validate that the body read timeout is positive."""
        if v <= 0:
            raise ValueError("body_read_timeout_seconds must be positive")
        return v

    @field_validator("gitcode_base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Validate that the API base URL is a valid URL format."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("gitcode_base_url must start with http:// or https://")
        return v

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate that port is in valid range."""
        if not 1 <= v <= 65535:
            raise ValueError("port must be between 1 and 65535")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unsupported log_level: {v}")
        return level


def get_settings() -> GatewaySettings:
    """Create and return GatewaySettings instance.

    Returns:
        GatewaySettings: Configured settings instance.

    Raises:
        pydantic.ValidationError: If required fields are missing or invalid.
    """
    return GatewaySettings()
