"""Configuration management for tinydb-migrator."""

import logging
import os
import shutil
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import CONFIG_ENV_VAR, DB_TABLE_MIGRATIONS, DEFAULT_CONFIG_PATH
from .utils import ensure_dir, expand_path

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_TEMPLATE_PATH = Path(__file__).with_name("config.toml")


def _load_default_template() -> dict[str, Any]:
    """Load the packaged default config template."""
    with open(DEFAULT_CONFIG_TEMPLATE_PATH, "rb") as f:
        return tomllib.load(f)


def _merge_config_data(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge config dictionaries recursively."""
    merged = dict(base)
    for key, value in override.items():
        base_value = merged.get(key)
        if isinstance(base_value, dict) and isinstance(value, dict):
            merged[key] = _merge_config_data(base_value, value)
        else:
            merged[key] = value
    return merged


def _copy_default_config(config_path: Path) -> None:
    """Copy the packaged template to the user config path."""
    ensure_dir(config_path.parent)
    shutil.copyfile(DEFAULT_CONFIG_TEMPLATE_PATH, config_path)


class StoreConfig(BaseModel):
    """History store configuration."""

    path: Path
    table: str = Field(default=DB_TABLE_MIGRATIONS, min_length=1)

    @field_validator("path", mode="before")
    @classmethod
    def expand_store_path(cls, v: str | Path) -> Path:
        """Expand path strings with ~ and environment variables."""
        if isinstance(v, str):
            return expand_path(v)
        return v


class MigrationsConfig(BaseModel):
    """Migration source configuration."""

    source: str | None = None

    @field_validator("source", mode="before")
    @classmethod
    def empty_source_is_unset(cls, v: str | None) -> str | None:
        """Treat an empty string as no source."""
        if isinstance(v, str) and not v.strip():
            return None
        return v


class Config(BaseModel):
    """Configuration for tinydb-migrator."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    store: StoreConfig
    migrations: MigrationsConfig = Field(default_factory=MigrationsConfig)

    @property
    def database_path(self) -> Path:
        """TinyDB database file."""
        return self.store.path

    @property
    def table(self) -> str:
        """Table holding migration records."""
        return self.store.table

    @property
    def migrations_source(self) -> str | None:
        """Import path of the migrations, if configured."""
        return self.migrations.source


def get_config_path() -> Path:
    """
    Get configuration file path.

    Priority:
    1. TINYDB_MIGRATOR_CONFIG environment variable
    2. Default: ~/.config/tinydb-migrator/config.toml

    Returns:
        Path to config file
    """
    env_config = os.environ.get(CONFIG_ENV_VAR)
    if env_config:
        return expand_path(env_config)

    return expand_path(DEFAULT_CONFIG_PATH)


def create_default_config() -> Config:
    """Create default configuration from the packaged template."""
    return Config.model_validate(_load_default_template())


def load_config(config_path: Path | None = None) -> Config:
    """
    Load configuration from TOML file using Pydantic validation.

    Values missing from the file fall back to the packaged template. When no
    config file exists at the default location, the template is copied there.

    Args:
        config_path: Optional custom config path

    Returns:
        Config instance with validated values

    Raises:
        ValueError: If config validation fails or the TOML is malformed
    """
    if config_path is None:
        config_path = get_config_path()

    defaults = _load_default_template()

    if not config_path.exists():
        try:
            _copy_default_config(config_path)
        except (OSError, PermissionError) as e:
            logger.warning(f"Could not copy default config to {config_path}: {e}")

    if config_path.exists():
        with open(config_path, "rb") as f:
            data = tomllib.load(f)

        merged_values = _merge_config_data(defaults, data)
        return Config.model_validate(merged_values)

    return Config.model_validate(defaults)
