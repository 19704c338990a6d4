"""Configuration management using Pydantic Settings.

Loads configuration from multiple sources with the following priority (highest first):
1. Environment variables (NAMECRAFT_* prefix)
2. .env file
3. config.local.yaml (if exists)
4. config.yaml
5. Default values
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_UPSTREAM_URL = "https://userapi.oax.workers.dev/"


class CorsSettings(BaseModel):
    """CORS configuration."""

    allowed_origins: list[str] = ["http://localhost:3000"]
    allowed_methods: list[str] = ["GET", "POST", "DELETE", "OPTIONS"]
    allowed_headers: list[str] = [
        "Content-Type",
        "X-Request-ID",
    ]


class ServerSettings(BaseModel):
    """Server configuration."""

    host: str = "0.0.0.0"
    port: int = 8000
    workers: int = 4
    cors: CorsSettings = Field(default_factory=CorsSettings)


class UpstreamSettings(BaseModel):
    """Name generation service configuration."""

    base_url: str = DEFAULT_UPSTREAM_URL
    timeout_seconds: float = Field(
        default=15.0,
        gt=0,
        le=120,
        description="Hard deadline for a single upstream call",
    )


class LoggingSettings(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "json"


class HealthSettings(BaseModel):
    """Health check configuration."""

    upstream_check_enabled: bool = True
    timeout_seconds: float = Field(default=5.0, gt=0)


class HistorySettings(BaseModel):
    """Settings for the generation history store."""

    enabled: bool = True
    capacity: int = Field(
        default=20,
        ge=1,
        le=1000,
        description="Maximum number of entries kept; oldest are evicted first",
    )


def _load_yaml_config(config_dir: Path) -> dict:
    """Load configuration from YAML files.

    Loads config.yaml and optionally overlays config.local.yaml.
    """
    config = {}

    config_file = config_dir / "config.yaml"
    if config_file.exists():
        with open(config_file) as f:
            config = yaml.safe_load(f) or {}

    local_config_file = config_dir / "config.local.yaml"
    if local_config_file.exists():
        with open(local_config_file) as f:
            local_config = yaml.safe_load(f) or {}
            config = _deep_merge(config, local_config)

    return config


def _deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


class Settings(BaseSettings):
    """Application settings loaded from environment, .env, and config files."""

    model_config = SettingsConfigDict(
        env_prefix="NAMECRAFT_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    server: ServerSettings = Field(default_factory=ServerSettings)
    upstream: UpstreamSettings = Field(default_factory=UpstreamSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    health: HealthSettings = Field(default_factory=HealthSettings)
    history: HistorySettings = Field(default_factory=HistorySettings)

    # Direct environment variable mapping for the upstream endpoint
    upstream_url: str | None = Field(default=None, validation_alias="NAMECRAFT_UPSTREAM_URL")

    def __init__(self, config_dir: Path | None = None, **data):
        """Initialize settings, loading from YAML if config_dir provided."""
        if config_dir is not None:
            yaml_config = _load_yaml_config(config_dir)
            # Merge YAML config with any explicit data (explicit data wins)
            merged = _deep_merge(yaml_config, data)
            super().__init__(**merged)
        else:
            super().__init__(**data)

        if self.upstream_url:
            self.upstream.base_url = self.upstream_url

    def validate_required(self) -> None:
        """Validate that required settings are usable.

        Raises:
            ValueError: If the upstream URL is not an http(s) URL.
        """
        if not self.upstream.base_url.startswith(("http://", "https://")):
            raise ValueError(
                f"upstream.base_url must be an http(s) URL, got {self.upstream.base_url!r}"
            )


@lru_cache
def get_settings(config_dir: Path | None = None) -> Settings:
    """Get cached settings instance.

    Args:
        config_dir: Optional path to config directory. If None, only environment
                   variables and .env file are used.

    Returns:
        Settings instance.
    """
    if config_dir is None:
        # Try to find config directory relative to project root
        project_root = Path(__file__).parent.parent.parent
        default_config_dir = project_root / "config"
        if default_config_dir.exists():
            config_dir = default_config_dir

    return Settings(config_dir=config_dir)
