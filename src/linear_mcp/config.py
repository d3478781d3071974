"""Configuration management for the Linear MCP adapter."""

import os
from functools import lru_cache
from typing import Optional, Union

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .auth.credentials import OAuthCredential, StaticKey


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env" if os.getenv("ENVIRONMENT") != "test" else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Linear MCP"
    app_version: str = "0.1.0"
    environment: str = Field(default="development")
    log_level: str = Field(default="INFO")

    # Linear endpoints
    linear_api_url: str = Field(default="https://api.linear.app/graphql")
    linear_oauth_authorize_url: str = Field(default="https://linear.app/oauth/authorize")
    linear_oauth_token_url: str = Field(default="https://api.linear.app/oauth/token")

    # Personal API key
    linear_api_key: Optional[str] = Field(default=None)

    # OAuth Configuration - Linear
    linear_client_id: Optional[str] = Field(default=None)
    linear_client_secret: Optional[str] = Field(default=None)
    linear_redirect_uri: Optional[str] = Field(default=None)

    # HTTP
    request_timeout: float = Field(default=30.0)

    # Feature Flags
    enable_metrics: bool = Field(
        default=False,
        validation_alias=AliasChoices("LINEAR_MCP_ENABLE_METRICS", "enable_metrics"),
    )
    metrics_port: int = Field(
        default=9464,
        validation_alias=AliasChoices("LINEAR_MCP_METRICS_PORT", "metrics_port"),
    )
    metrics_addr: str = Field(
        default="127.0.0.1",
        validation_alias=AliasChoices("LINEAR_MCP_METRICS_ADDR", "metrics_addr"),
    )

    def get_credential(self) -> Optional[Union[StaticKey, OAuthCredential]]:
        """Return the credential configured in the environment, if any.

        An API key wins over OAuth settings. OAuth settings are returned even
        when partially filled so that ``CredentialManager.initialize`` reports
        which field is missing.
        """
        if self.linear_api_key:
            return StaticKey(self.linear_api_key)

        if self.linear_client_id or self.linear_client_secret or self.linear_redirect_uri:
            return OAuthCredential(
                client_id=self.linear_client_id or "",
                client_secret=self.linear_client_secret or "",
                redirect_uri=self.linear_redirect_uri or "",
            )

        return None


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
