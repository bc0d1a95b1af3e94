"""Named configuration profiles.

A profile is a saved copy of an oh-my-opencode.json configuration stored as
``<configs_dir>/<name>.json`` together with a description and timestamps.
One profile is marked active in ``active-config.json``; activating a profile
writes its config to the main config file after backing the old one up.
"""

import copy
import json
import logging
import re
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from omo_config.constants import DEFAULT_PROFILE_NAME, DEFAULTS, MIGRATED_PROFILE_NAME
from omo_config.exceptions import (
    ConfigFileError,
    InvalidProfileNameError,
    ProfileError,
    ProfileExistsError,
    ProfileNotFoundError,
)
from omo_config.settings import PathSettings, get_path_settings

logger = logging.getLogger(__name__)

_PROFILE_NAME = re.compile(r"^[a-z0-9-_]+$", re.IGNORECASE)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def backup_timestamp() -> str:
    """Filesystem-safe UTC timestamp, e.g. 2026-01-31T09-15-00."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S")


def write_json(path: Path, data: Any) -> None:
    """Write pretty-printed JSON, creating parent directories."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
    except OSError as e:
        raise ConfigFileError(f"Failed to write {path}: {e}") from e


@dataclass
class Profile:
    """A saved configuration with its metadata."""

    name: str
    description: str = ""
    created: str = field(default_factory=_now)
    modified: str = field(default_factory=_now)
    config: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Profile":
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})


def validate_config_name(name: Any) -> bool:
    """Profile names are letters, digits, hyphens and underscores."""
    return isinstance(name, str) and bool(_PROFILE_NAME.match(name))


class ConfigurationManager:
    """Stores, activates and migrates named configuration profiles."""

    def __init__(self, paths: Optional[PathSettings] = None):
        self.paths = paths or get_path_settings()
        self.paths.ensure_directories()

    def get_config_path(self, name: str) -> Path:
        """Profile file path; rejects names that would leave the configs dir."""
        self._require_valid_name(name)
        return self.paths.configs_dir / f"{name}.json"

    def _require_valid_name(self, name: str) -> None:
        if not validate_config_name(name):
            raise InvalidProfileNameError(name)

    # -------------------------------------------------------------------------
    # CRUD
    # -------------------------------------------------------------------------

    def list_configurations(self) -> List[str]:
        """Names of all saved profiles, sorted."""
        if not self.paths.configs_dir.is_dir():
            return []
        return sorted(p.stem for p in self.paths.configs_dir.glob("*.json"))

    def config_exists(self, name: str) -> bool:
        return validate_config_name(name) and self.get_config_path(name).is_file()

    def load_configuration(self, name: str) -> Profile:
        """Load a profile.

        Raises:
            ProfileNotFoundError: if the profile file does not exist.
            ProfileError: if the file is not valid JSON or not a profile.
        """
        config_path = self.get_config_path(name)
        if not config_path.is_file():
            raise ProfileNotFoundError(f'Configuration "{name}" not found at {config_path}')
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except ValueError as e:
            raise ProfileError(
                f'Configuration "{name}" has invalid JSON. Check {config_path} for syntax errors.'
            ) from e
        except OSError as e:
            raise ProfileError(f'Failed to load configuration "{name}": {e}') from e

        if not isinstance(data, dict):
            raise ProfileError(f'Configuration "{name}" is not a JSON object')
        data.setdefault("name", name)
        return Profile.from_dict(data)

    def save_configuration(self, name: str, description: str, config: Dict[str, Any]) -> Profile:
        """Create or overwrite a profile, keeping the original ``created`` time."""
        self._require_valid_name(name)

        profile = Profile(name=name, description=description, config=copy.deepcopy(config))
        config_path = self.get_config_path(name)
        if config_path.is_file():
            try:
                with open(config_path, "r", encoding="utf-8") as f:
                    existing = json.load(f)
            except (OSError, ValueError) as e:
                logger.debug(f"Could not read existing profile {name}, resetting created time: {e}")
            else:
                if isinstance(existing, dict) and existing.get("created"):
                    profile.created = existing["created"]

        write_json(config_path, profile.to_dict())
        logger.info(f"Saved configuration profile {name}")
        return profile

    def delete_configuration(self, name: str) -> None:
        config_path = self.get_config_path(name)
        if not config_path.is_file():
            raise ProfileNotFoundError(f'Configuration "{name}" does not exist')
        config_path.unlink()
        logger.info(f"Deleted configuration profile {name}")

    def rename_configuration(self, old_name: str, new_name: str) -> None:
        """Rename a profile.

        Raises:
            InvalidProfileNameError: if ``new_name`` is not a valid name.
            ProfileNotFoundError: if ``old_name`` does not exist.
            ProfileExistsError: if ``new_name`` is already taken.
        """
        self._require_valid_name(new_name)

        old_path = self.get_config_path(old_name)
        new_path = self.get_config_path(new_name)
        if not old_path.is_file():
            raise ProfileNotFoundError(f'Configuration "{old_name}" does not exist')
        if new_path.exists():
            raise ProfileExistsError(f'Configuration "{new_name}" already exists')

        profile = self.load_configuration(old_name)
        profile.name = new_name
        profile.modified = _now()
        write_json(new_path, profile.to_dict())
        old_path.unlink()

        if self.get_active_config() == old_name:
            self.set_active_config(new_name)
        logger.info(f"Renamed configuration profile {old_name} to {new_name}")

    # -------------------------------------------------------------------------
    # Active profile and main config file
    # -------------------------------------------------------------------------

    def get_active_config(self) -> Optional[str]:
        """Name of the active profile, or None if unset or unreadable."""
        active_file = self.paths.active_config_file
        if not active_file.is_file():
            return None
        try:
            with open(active_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable {active_file}: {e}")
            return None
        if not isinstance(data, dict):
            return None
        return data.get("active")

    def set_active_config(self, name: str) -> None:
        write_json(self.paths.active_config_file, {"active": name})

    def create_backup(self, label: str = "backup") -> Optional[Path]:
        """Copy the current main config into the backup directory.

        Returns:
            The backup path, or None when there is no main config yet.
        """
        config_file = self.paths.config_file
        if not config_file.is_file():
            return None
        backup_path = self.paths.backup_dir / f"oh-my-opencode-{label}-{backup_timestamp()}.json"
        self.paths.backup_dir.mkdir(parents=True, exist_ok=True)
        try:
            backup_path.write_bytes(config_file.read_bytes())
        except OSError as e:
            raise ConfigFileError(f"Failed to back up {config_file}: {e}") from e
        logger.info(f"Backed up {config_file} to {backup_path}")
        return backup_path

    def update_main_config_file(self, config: Dict[str, Any]) -> Optional[Path]:
        """Write ``config`` as the main config, backing up the previous one.

        Returns:
            Path of the backup that was taken, if any.
        """
        backup_path = self.create_backup()
        write_json(self.paths.config_file, config)
        return backup_path

    def activate(self, name: str) -> Profile:
        """Mark a profile active and write its config to the main file."""
        profile = self.load_configuration(name)
        self.update_main_config_file(profile.config)
        self.set_active_config(name)
        return profile

    # -------------------------------------------------------------------------
    # First-run migration, import and export
    # -------------------------------------------------------------------------

    def migrate_if_needed(self) -> bool:
        """Create the initial profiles on first run.

        Saves the shipped defaults as ``omo-default`` and, when a main config
        already exists, saves it as ``user-config`` and makes it active.

        Returns:
            True if the profiles were created, False if profiles already exist.
        """
        self.paths.ensure_directories()
        if self.list_configurations():
            return False

        logger.info("First-time setup: migrating to configuration profiles")
        self.save_configuration(
            DEFAULT_PROFILE_NAME, "Oh My Opencode default configuration", DEFAULTS
        )

        config_file = self.paths.config_file
        active = DEFAULT_PROFILE_NAME
        if config_file.is_file():
            try:
                with open(config_file, "r", encoding="utf-8") as f:
                    existing = json.load(f)
            except (OSError, ValueError) as e:
                logger.warning(f"Could not migrate existing config, using defaults: {e}")
            else:
                self.save_configuration(
                    MIGRATED_PROFILE_NAME, "Migrated user configuration", existing
                )
                active = MIGRATED_PROFILE_NAME

        self.set_active_config(active)
        return True

    def export_configuration(self, name: str, dest_path: Union[str, Path]) -> Path:
        """Write a profile (with metadata) to ``dest_path``."""
        profile = self.load_configuration(name)
        dest = Path(dest_path)
        write_json(dest, profile.to_dict())
        return dest

    def import_configuration(
        self,
        source_path: Union[str, Path],
        name: str,
        description: Optional[str] = None,
    ) -> Profile:
        """Import an exported profile or a bare config file as ``name``."""
        source = Path(source_path)
        try:
            with open(source, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError as e:
            raise ProfileError(f"Import file not found: {source}") from e
        except (OSError, ValueError) as e:
            raise ProfileError(f"Failed to read import file {source}: {e}") from e

        if not isinstance(data, dict):
            raise ProfileError(f"Import file {source} is not a JSON object")

        config = data.get("config") or data
        desc = description or data.get("description") or "Imported configuration"
        return self.save_configuration(name, desc, config)
