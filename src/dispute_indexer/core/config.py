"""Configuration management.

Loads from TOML config files + environment variables.
Uses pydantic-settings for validation and env var overriding.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

from .enums import StorageBackend


# ---------------------------------------------------------------------------
# Sub-configs
# ---------------------------------------------------------------------------

class ContentConfig(BaseModel):
    gateway_url: str = "https://ipfs.io"  # Serves /ipfs/<cid>
    timeout_seconds: float = 10.0


class ChainConfig(BaseModel):
    rpc_url: str = "http://localhost:8545"
    timeout_seconds: float = 10.0
    block_tag: str = "latest"


class StorageConfig(BaseModel):
    backend: StorageBackend = StorageBackend.MEMORY
    database_url: str = "sqlite+aiosqlite:///dispute_indexer.db"
    echo: bool = False
    create_tables: bool = True


class ObservabilityConfig(BaseModel):
    log_level: str = "INFO"
    log_format: str = "json"  # "json" or "console"


# ---------------------------------------------------------------------------
# Top-level settings
# ---------------------------------------------------------------------------

class Settings(BaseSettings):
    """Top-level indexer settings.

    Loaded from TOML config files, overridden by environment variables.
    """

    content: ContentConfig = Field(default_factory=ContentConfig)
    chain: ChainConfig = Field(default_factory=ChainConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    model_config = {"env_prefix": "INDEXER_", "env_nested_delimiter": "__"}

    def validate_storage(self) -> None:
        """Reject storage settings that cannot work."""
        from .errors import ConfigError

        if self.storage.backend == StorageBackend.SQL and not self.storage.database_url:
            raise ConfigError(
                "SQL storage backend requires storage.database_url "
                "(INDEXER_STORAGE__DATABASE_URL)."
            )


def load_settings(
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> Settings:
    """Load settings from TOML file + env vars.

    Args:
        config_path: Path to TOML config file (optional).
        overrides: Dict of overrides to apply on top.
    """
    data: dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if path.exists():
            import tomli

            with open(path, "rb") as f:
                data = tomli.load(f)

    if overrides:
        for key, value in overrides.items():
            if isinstance(value, dict) and isinstance(data.get(key), dict):
                data[key] = {**data[key], **value}
            else:
                data[key] = value

    return Settings(**data)
