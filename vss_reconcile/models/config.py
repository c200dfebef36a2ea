"""Configuration models for the reconciliation engine."""

from pydantic import BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RepositoryConfig(BaseModel):
    """Configuration for the source repository connection."""

    location: str = Field(default=..., description="Path to the srcsafe.ini of the database")
    user: str = Field(default="", description="Repository user name")
    password: SecretStr = Field(default=SecretStr(""), description="Repository password")
    roots: list[str] = Field(
        default=..., min_length=1, description="Tracked project paths, e.g. $/proj"
    )
    recursive: bool = Field(default=True, description="Walk and fetch sub projects recursively")
    writable: bool = Field(default=False, description="Fetch files writable instead of read-only")

    @field_validator("roots")
    @classmethod
    def validate_roots(cls, v: list[str]) -> list[str]:
        """Reject blank root paths."""
        for root in v:
            if not root or not root.strip():
                raise ValueError("roots must not contain blank paths")
        return v


class SyncConfig(BaseModel):
    """Configuration for synchronization planning."""

    max_entries: int = Field(
        default=100, ge=1, description="Maximum history entries collected per cycle"
    )
    incremental: bool = Field(
        default=False,
        description="Delete only changed paths instead of wiping the workspace",
    )
    supported_platforms: list[str] = Field(
        default_factory=lambda: ["win32"],
        description="Host platforms (sys.platform values) the repository client runs on",
    )
    workspace: str = Field(default="./workspace", description="Local workspace directory")
    state_file: str = Field(
        default="./.vss_sync_state.json", description="File holding the last sync state"
    )
    changelog_file: str = Field(default="./changelog.xml", description="Change log output file")
    client_factory: str | None = Field(
        default=None,
        description="Import path (module:callable) of the repository client factory",
    )


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    json_logs: bool = Field(
        default=True,
        description="If True, output JSON logs. If False, use console format.",
    )
    log_file: str | None = Field(
        default=None,
        description="Optional path to log file. If None, logs only to stdout.",
    )


class AppConfig(BaseSettings):
    """Main application configuration.

    This class uses pydantic-settings to load configuration from environment
    variables with the APP_ prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    repository: RepositoryConfig
    sync: SyncConfig = Field(default_factory=SyncConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
