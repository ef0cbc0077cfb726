"""Pydantic models for parsing the config.yaml configuration file.

This module contains Pydantic models that correspond to the structure of config.yaml.
These models handle validation and type conversion of the YAML configuration data.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, computed_field

IDENTITY_NAME_CLAIM = "http://schemas.xmlsoap.org/ws/2005/05/identity/claims/name"


class SSOConfig(BaseModel):
    """External login provider configuration."""

    scheme_name: str = Field(
        default="MicrosoftAccount", description="Authentication scheme of this provider"
    )
    authentication_type_prefix: str = Field(
        default="Umbraco.",
        description="Prefix the host puts in front of external authentication schemes",
    )
    group_lookup: dict[str, str] = Field(
        default_factory=dict,
        description="Claim value -> comma separated local group aliases",
    )
    default_groups: list[str] = Field(
        default_factory=list, description="Group aliases always granted"
    )
    set_groups_on_login: bool = Field(
        default=False, description="Rebuild groups from claims on every login"
    )
    group_sync_policy: Literal["replace", "merge", "merge_preserving"] = Field(
        default="replace",
        description="How resolved groups are written on login",
    )
    local_only_groups: list[str] = Field(
        default_factory=list,
        description="Locally managed aliases kept by the merge_preserving policy",
    )
    sync_user_avatar: bool = Field(
        default=True, description="Copy the provider profile picture to the user"
    )
    deny_local_login: bool = Field(
        default=False, description="Disable username/password login"
    )
    auto_redirect_login_to_external_provider: bool = Field(
        default=False, description="Redirect the login screen to this provider"
    )
    microsoft_graph_endpoint: str = Field(
        default="https://graph.microsoft.com", description="Graph API base URL"
    )
    identity_name_claim: str = Field(
        default=IDENTITY_NAME_CLAIM,
        description="Claim holding the provider identity name (login identifier)",
    )
    display_name_claim: str = Field(
        default="name", description="Claim holding the display name"
    )

    @computed_field
    @property
    def scheme_id(self) -> str:
        """Fully qualified scheme name the host uses for this provider."""
        return f"{self.authentication_type_prefix}{self.scheme_name}"


class AvatarConfig(BaseModel):
    """Profile picture synchronization configuration."""

    path_prefix: str = Field(
        default="UserAvatars", description="Media folder for cached avatars"
    )
    hash_algorithm: str = Field(
        default="sha1", description="hashlib algorithm used to key avatars by ETag"
    )
    fetch_timeout_seconds: float = Field(
        default=10.0, description="Timeout applied to the photo request"
    )
    max_connections: int = Field(
        default=20, description="Connection pool size of the graph client"
    )


class MediaConfig(BaseModel):
    """Local media storage configuration."""

    root: str = Field(default="media", description="Root folder of the media file system")


class LoggingConfig(BaseModel):
    """Logging configuration model."""

    level: str = Field(default="INFO", description="Logging level")
    format: Literal["json", "plain"] = Field(default="json", description="Log format")
    file: str = Field(default="logs/app.log", description="Log file path")
    max_size_mb: int = Field(default=10, description="Maximum log file size in MB")
    backup_count: int = Field(
        default=5, description="Number of backup log files to keep"
    )


class DatabaseConfig(BaseModel):
    """Database configuration model."""

    url: str = Field(
        default="sqlite:///./database.db", description="Database connection URL"
    )
    echo: bool = Field(default=False, description="Echo SQL statements")


class AppConfig(BaseModel):
    """Application configuration model."""

    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Application environment"
    )


class ConfigData(BaseModel):
    """Root configuration model that matches the config.yaml structure."""

    sso: SSOConfig = Field(default_factory=SSOConfig, description="SSO configuration")
    avatar: AvatarConfig = Field(
        default_factory=AvatarConfig, description="Avatar synchronization configuration"
    )
    media: MediaConfig = Field(
        default_factory=MediaConfig, description="Media storage configuration"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    database: DatabaseConfig = Field(
        default_factory=DatabaseConfig, description="Database configuration"
    )
    app: AppConfig = Field(
        default_factory=AppConfig, description="Application configuration"
    )
