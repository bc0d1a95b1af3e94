"""Typed view of the user's oh-my-opencode.json.

The file on disk is loosely typed JSON that also carries keys this tool
does not interpret (``mcps``, ``google_auth``, ``meta``, per-agent
``temperature``...). These pydantic models validate the parts the
resolution pipeline reads and keep everything else so a config can be
round-tripped without loss.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from omo_config.exceptions import ConfigFileError

logger = logging.getLogger(__name__)


class CategoryOverride(BaseModel):
    """User override block for a category."""

    model_config = ConfigDict(extra="allow")

    model: Optional[str] = Field(default=None, description="provider/model for the category")
    variant: Optional[str] = Field(default=None, description="Variant such as 'high' or 'max'")

    @field_validator("model", "variant", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class AgentOverride(CategoryOverride):
    """User override block for an agent."""

    category: Optional[str] = Field(default=None, description="Category the agent delegates to")

    @field_validator("category", mode="before")
    @classmethod
    def _blank_category_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class UserConfig(BaseModel):
    """The user configuration consumed by the resolution pipeline."""

    model_config = ConfigDict(extra="allow")

    agents: Dict[str, AgentOverride] = Field(default_factory=dict)
    categories: Dict[str, CategoryOverride] = Field(default_factory=dict)

    @field_validator("agents", "categories", mode="before")
    @classmethod
    def _null_to_empty(cls, value):
        if value is None:
            return {}
        if isinstance(value, Mapping):
            return {name: block for name, block in value.items() if block is not None}
        return value

    @classmethod
    def from_raw(cls, raw: Union["UserConfig", Mapping[str, Any], None]) -> "UserConfig":
        """Coerce a dict (or None) into a UserConfig; pass instances through.

        Raises:
            ConfigFileError: if the dict has wrongly typed agent or category blocks.
        """
        if isinstance(raw, UserConfig):
            return raw
        if raw is None:
            return cls()
        try:
            return cls.model_validate(dict(raw))
        except ValidationError as e:
            raise ConfigFileError(f"Config does not match the expected shape: {e}") from e

    def agent(self, name: str) -> Optional[AgentOverride]:
        return self.agents.get(name)

    def category(self, name: str) -> Optional[CategoryOverride]:
        return self.categories.get(name)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready dict without unset optional fields."""
        return self.model_dump(mode="json", exclude_none=True)


def read_config_file(path: Union[str, Path]) -> Dict[str, Any]:
    """Read a configuration file as a plain dict; a missing file is empty.

    Raises:
        ConfigFileError: if the file is not a valid JSON object.
    """
    path = Path(path)
    if not path.exists():
        logger.debug(f"No user config at {path}, using empty config")
        return {}
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except ValueError as e:
        raise ConfigFileError(f"Config file {path} has invalid JSON: {e}") from e
    except OSError as e:
        raise ConfigFileError(f"Failed to read config file {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigFileError(f"Config file {path} must contain a JSON object")
    return raw


def load_user_config(path: Union[str, Path]) -> UserConfig:
    """Read and validate a user configuration file.

    A missing file is an empty configuration.

    Raises:
        ConfigFileError: if the file is not valid JSON or has the wrong shape.
    """
    raw = read_config_file(path)
    try:
        return UserConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigFileError(f"Config file {path} does not match the expected shape: {e}") from e
