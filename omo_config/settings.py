"""
Typed settings management using pydantic-settings.

Resolves every file location the tool touches (user config, profiles,
backups, host config, schema override) and the command used to list the
model catalog. Paths are computed from the environment at access time so
tests and callers can redirect them without touching module globals.

Usage:
    from omo_config.settings import get_path_settings

    paths = get_path_settings()
    print(paths.config_file)
"""

from __future__ import annotations

import json
import os
import shlex
from functools import lru_cache
from pathlib import Path
from typing import Annotated, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

# =============================================================================
# Path Configuration
# =============================================================================


def _get_xdg_config_dir() -> Path:
    """Get the opencode config directory, honouring XDG_CONFIG_HOME."""
    xdg_base = os.getenv("XDG_CONFIG_HOME")
    if xdg_base:
        return Path(xdg_base) / "opencode"
    return Path.home() / ".config" / "opencode"


class PathSettings(BaseSettings):
    """XDG-aware file locations for the opencode agent configuration."""

    model_config = SettingsConfigDict(
        env_prefix="OMO_CONFIG_",
        extra="ignore",
        populate_by_name=True,
    )

    # OMO_CONFIG_DIR overrides the whole directory tree
    dir_override: Optional[Path] = Field(default=None, alias="OMO_CONFIG_DIR")

    @property
    def config_dir(self) -> Path:
        """OMO_CONFIG_DIR, XDG_CONFIG_HOME/opencode or ~/.config/opencode"""
        if self.dir_override is not None:
            return self.dir_override
        return _get_xdg_config_dir()

    @property
    def config_file(self) -> Path:
        return self.config_dir / "oh-my-opencode.json"

    @property
    def host_config_file(self) -> Path:
        return self.config_dir / "opencode.json"

    @property
    def backup_dir(self) -> Path:
        return self.config_dir / "backups"

    @property
    def configs_dir(self) -> Path:
        return self.config_dir / "configs"

    @property
    def active_config_file(self) -> Path:
        return self.config_dir / "active-config.json"

    @property
    def schema_file(self) -> Path:
        return self.config_dir / "cache" / "oh-my-opencode-schema.json"

    def ensure_directories(self) -> None:
        """Create the profile and backup directories."""
        for directory in [self.configs_dir, self.backup_dir]:
            directory.mkdir(parents=True, exist_ok=True)


# =============================================================================
# Model Catalog Settings
# =============================================================================


class CatalogSettings(BaseSettings):
    """How the model catalog is obtained from the host CLI."""

    model_config = SettingsConfigDict(
        env_prefix="OMO_CONFIG_",
        extra="ignore",
    )

    models_command: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: ["opencode", "models", "--verbose"],
        description="Command that prints the verbose model catalog",
    )
    recommendation_limit: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Number of models shown by the recommend command",
    )

    @field_validator("models_command", mode="before")
    @classmethod
    def _split_command(cls, value):
        # Accepts a JSON list or a plain shell-style string
        if isinstance(value, str):
            if value.lstrip().startswith("["):
                return json.loads(value)
            return shlex.split(value)
        return value


# =============================================================================
# Master Settings Class
# =============================================================================


class Settings(BaseSettings):
    """Master settings combining all configuration sections."""

    model_config = SettingsConfigDict(
        env_prefix="OMO_CONFIG_",
        extra="ignore",
        case_sensitive=False,
    )

    paths: PathSettings = Field(default_factory=PathSettings)
    catalog: CatalogSettings = Field(default_factory=CatalogSettings)


# =============================================================================
# Cached Singleton Accessors
# =============================================================================


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the cached settings singleton.

    To reload after the environment changed, call clear_settings_cache() first.
    """
    return Settings()


@lru_cache(maxsize=1)
def get_path_settings() -> PathSettings:
    """Get path settings (cached)."""
    return PathSettings()


def clear_settings_cache() -> None:
    """Clear all cached settings instances."""
    get_settings.cache_clear()
    get_path_settings.cache_clear()
