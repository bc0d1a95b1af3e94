"""Editing the model assignments of a configuration.

Every function here returns a new config dict and leaves its input alone;
callers persist the result, normally through
``ConfigurationManager.update_main_config_file`` so the previous file is
backed up first.
"""

import copy
import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

from omo_config.constants import AGENT_PROFILES
from omo_config.core.model_resolution import ModelResolver, resolve_variant
from omo_config.model_catalog import get_recommended_models

logger = logging.getLogger(__name__)

RawConfig = Mapping[str, Any]


@dataclass
class AssignmentChange:
    """A proposed model change for one agent.

    Attributes:
        agent: Agent name.
        current: Model currently configured, if any.
        proposed: Model that would be written.
        variant: Variant to write with it, if any.
        score: Recommendation score when the proposal came from scoring.
    """

    agent: str
    current: Optional[str]
    proposed: str
    variant: Optional[str] = None
    score: Optional[int] = None

    def to_dict(self) -> dict:
        return asdict(self)


def _set_block_model(
    config: RawConfig,
    section: str,
    name: str,
    model: str,
    variant: Optional[str],
) -> Dict[str, Any]:
    new_config = copy.deepcopy(dict(config))
    blocks = new_config.get(section) or {}
    block = blocks.get(name) or {}
    block["model"] = model
    if variant is not None:
        block["variant"] = variant
    blocks[name] = block
    new_config[section] = blocks
    return new_config


def set_agent_model(
    config: RawConfig,
    agent_name: str,
    model: str,
    variant: Optional[str] = None,
) -> Dict[str, Any]:
    """Return a copy of ``config`` with ``agents.<agent_name>.model`` set.

    The existing variant is kept unless a new one is given.
    """
    logger.debug(f"Setting agent {agent_name} to {model} (variant {variant})")
    return _set_block_model(config, "agents", agent_name, model, variant)


def set_category_model(
    config: RawConfig,
    category_name: str,
    model: str,
    variant: Optional[str] = None,
) -> Dict[str, Any]:
    """Return a copy of ``config`` with ``categories.<category_name>.model`` set."""
    logger.debug(f"Setting category {category_name} to {model} (variant {variant})")
    return _set_block_model(config, "categories", category_name, model, variant)


def _configured_model(config: RawConfig, agent_name: str) -> Optional[str]:
    block = (config.get("agents") or {}).get(agent_name) or {}
    return block.get("model") or None


def plan_recommended_changes(
    models: Sequence[Mapping[str, Any]],
    config: RawConfig,
) -> List[AssignmentChange]:
    """Top-scored model for every configured agent that has a profile.

    Only agents whose current model differs from the top recommendation
    are returned. Agents without a scoring profile are left alone.
    """
    changes: List[AssignmentChange] = []
    for agent_name in config.get("agents") or {}:
        if agent_name not in AGENT_PROFILES:
            logger.debug(f"No scoring profile for {agent_name}, skipping")
            continue
        recommended = get_recommended_models(models, agent_name, config, limit=1)
        if not recommended:
            continue
        top = recommended[0]
        current = _configured_model(config, agent_name)
        if top["id"] != current:
            changes.append(
                AssignmentChange(agent=agent_name, current=current, proposed=top["id"], score=top["score"])
            )
    return changes


def plan_resolved_changes(
    resolver: ModelResolver,
    available_models: Sequence[str],
    config: RawConfig,
) -> List[AssignmentChange]:
    """Pin every known agent to the model the pipeline resolves for it.

    Agents that already name the exact resolved id are skipped, as are
    agents nothing could be resolved for.
    """
    changes: List[AssignmentChange] = []
    for agent_name in resolver.agent_requirements:
        result = resolver.resolve(available_models, config, agent_name)
        if result is None:
            continue
        current = _configured_model(config, agent_name)
        if result.model == current:
            continue
        changes.append(
            AssignmentChange(
                agent=agent_name,
                current=current,
                proposed=result.model,
                variant=resolve_variant(config, agent_name, result.variant),
            )
        )
    return changes


def apply_changes(config: RawConfig, changes: Sequence[AssignmentChange]) -> Dict[str, Any]:
    """Return a copy of ``config`` with every change written."""
    new_config: Dict[str, Any] = copy.deepcopy(dict(config))
    for change in changes:
        new_config = set_agent_model(new_config, change.agent, change.proposed, change.variant)
    return new_config
