"""Category helpers.

Categories are named requirement profiles that agents can delegate to via
``agents.<name>.category``. These helpers read category defaults and tag
agents with categories without touching the caller's config object.
"""

import copy
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from omo_config.core.model_matching import get_provider
from omo_config.core.requirements import (
    ALL_CATEGORIES,
    CATEGORY_MODEL_REQUIREMENTS,
    ModelRequirements,
    RequirementTable,
    load_requirement_tables,
)
from omo_config.exceptions import InvalidCategoryError

logger = logging.getLogger(__name__)

RawConfig = Mapping[str, Any]


def load_categories(schema_file: Optional[Union[str, Path]] = None) -> RequirementTable:
    """Category table from a local schema file, else the built-in table."""
    if schema_file is None:
        from omo_config.settings import get_path_settings

        schema_file = get_path_settings().schema_file
    _, categories = load_requirement_tables(schema_file)
    return categories


def _configured_category_model(config: RawConfig, category_name: str) -> Optional[str]:
    block = (config.get("categories") or {}).get(category_name) or {}
    model = block.get("model")
    return model or None


def get_category_default(category_name: str, config: Optional[RawConfig] = None) -> Optional[str]:
    """The model a category would use, ignoring availability.

    The configured category model wins; otherwise the first provider of the
    first fallback entry.
    """
    configured = _configured_category_model(config or {}, category_name)
    if configured:
        return configured

    requirements = CATEGORY_MODEL_REQUIREMENTS.get(category_name)
    if requirements and requirements.fallback_chain:
        first_entry = requirements.fallback_chain[0]
        return f"{first_entry.providers[0]}/{first_entry.model}"

    return None


def get_category_default_with_available_providers(
    category_name: str,
    config: Optional[RawConfig] = None,
    available_providers: Iterable[str] = (),
) -> Optional[str]:
    """The model a category would use given the connected providers.

    A configured category model counts only if its provider is available;
    otherwise the first chain entry/provider that is available is used.
    """
    providers = set(available_providers)

    configured = _configured_category_model(config or {}, category_name)
    if configured and get_provider(configured) in providers:
        return configured

    requirements = CATEGORY_MODEL_REQUIREMENTS.get(category_name)
    if requirements:
        for entry in requirements.fallback_chain:
            for provider in entry.providers:
                if provider in providers:
                    return f"{provider}/{entry.model}"

    return None


def get_category_requirements(category_name: str) -> Optional[ModelRequirements]:
    return CATEGORY_MODEL_REQUIREMENTS.get(category_name)


def is_valid_category(category_name: str) -> bool:
    return category_name in ALL_CATEGORIES or category_name in CATEGORY_MODEL_REQUIREMENTS


def apply_category_to_agent(
    config: RawConfig,
    agent_name: str,
    category_name: str,
    categories: Optional[RequirementTable] = None,
) -> Dict[str, Any]:
    """Return a copy of ``config`` with the agent tagged with a category.

    ``categories`` is the table to check the name against (built-in when
    omitted).

    Raises:
        InvalidCategoryError: if the category is unknown.
    """
    known = category_name in categories if categories is not None else is_valid_category(category_name)
    if not known:
        raise InvalidCategoryError(category_name)

    new_config = copy.deepcopy(dict(config))
    agents = new_config.get("agents") or {}
    agent_block = agents.get(agent_name) or {}
    agent_block["category"] = category_name
    agents[agent_name] = agent_block
    new_config["agents"] = agents
    logger.debug(f"Tagged agent {agent_name} with category {category_name}")
    return new_config


def get_agent_category(config: RawConfig, agent_name: str) -> Optional[str]:
    block = (config.get("agents") or {}).get(agent_name) or {}
    return block.get("category") or None


def list_all_categories(categories: Optional[RequirementTable] = None) -> List[Dict[str, Any]]:
    """All known categories with their requirements.

    Defaults to the built-in table; pass the result of ``load_categories``
    to list a schema-provided table instead.
    """
    if categories is None:
        categories = CATEGORY_MODEL_REQUIREMENTS
    return [{"name": name, "requirements": requirements} for name, requirements in categories.items()]
