"""One-time migration of agent configs onto categories.

Older configurations pinned every agent to a model. Agents that have a
natural category are tagged with it, and ``meta.migratedToCategories``
records that the migration ran so it never runs twice.
"""

import copy
import json
import logging
from datetime import date
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from omo_config.exceptions import ConfigFileError
from omo_config.profiles import backup_timestamp, write_json
from omo_config.settings import PathSettings, get_path_settings

logger = logging.getLogger(__name__)

MIGRATION_MARKER = "migratedToCategories"

# agent -> category it is tagged with when it has none
AGENT_CATEGORY_MIGRATIONS: Dict[str, str] = {
    "explore": "quick",
}


def needs_migration(config: Mapping[str, Any]) -> bool:
    meta = config.get("meta") or {}
    return not meta.get(MIGRATION_MARKER)


def mark_migration(config: Mapping[str, Any]) -> Dict[str, Any]:
    """Copy of ``config`` stamped with today's migration date."""
    new_config = copy.deepcopy(dict(config))
    meta = new_config.get("meta") or {}
    meta[MIGRATION_MARKER] = date.today().isoformat()
    new_config["meta"] = meta
    return new_config


def migrate_agent_to_category(
    config: Mapping[str, Any], agent_name: str, target_category: str
) -> Dict[str, Any]:
    new_config = copy.deepcopy(dict(config))
    agents = new_config.get("agents") or {}
    agent_block = agents.get(agent_name) or {}
    agent_block["category"] = target_category
    agents[agent_name] = agent_block
    new_config["agents"] = agents
    return new_config


def migrate_all_agents(config: Mapping[str, Any]) -> Dict[str, Any]:
    """Tag every migratable agent that has no category yet, then mark the config.

    Agents missing from the config are not added.
    """
    new_config = copy.deepcopy(dict(config))
    agents = new_config.get("agents") or {}
    for agent_name, target_category in AGENT_CATEGORY_MIGRATIONS.items():
        block = agents.get(agent_name)
        if block is not None and not block.get("category"):
            new_config = migrate_agent_to_category(new_config, agent_name, target_category)
            logger.debug(f"Migrated agent {agent_name} to category {target_category}")
    return mark_migration(new_config)


def create_migration_backup(config: Mapping[str, Any], paths: Optional[PathSettings] = None) -> Path:
    paths = paths or get_path_settings()
    backup_file = paths.backup_dir / f"oh-my-opencode-pre-migration-{backup_timestamp()}.json"
    write_json(backup_file, config)
    return backup_file


def migrate_main_config(paths: Optional[PathSettings] = None) -> Optional[Dict[str, Any]]:
    """Migrate the main config file in place.

    A missing main config counts as an empty one.

    Returns:
        The migrated config, or None when it was already migrated.

    Raises:
        ConfigFileError: if the main config cannot be read or written.
    """
    paths = paths or get_path_settings()
    config: Dict[str, Any] = {}
    if paths.config_file.is_file():
        try:
            with open(paths.config_file, "r", encoding="utf-8") as f:
                config = json.load(f)
        except (OSError, ValueError) as e:
            raise ConfigFileError(f"Could not read existing config {paths.config_file}: {e}") from e
        if not isinstance(config, dict):
            raise ConfigFileError(f"{paths.config_file} must contain a JSON object")

    if not needs_migration(config):
        logger.debug("Config already migrated to categories")
        return None

    backup_path = create_migration_backup(config, paths)
    migrated = migrate_all_agents(config)
    write_json(paths.config_file, migrated)
    logger.info(f"Config migrated, backup created at {backup_path}")
    return migrated
