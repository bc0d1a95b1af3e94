"""Five-tier model resolution pipeline.

Decides which concrete model id (and variant) an agent or category uses,
given the models currently reachable, the user's configuration and the
requirement tables. Tiers are tried in order and the first one that
produces a result wins:

    1. UI override       - primary agents only, model picked in the host UI
    2. User config       - agents.<name>.model / categories.<name>.model
    3. Category          - the category an agent is tagged with
    4. Fallback chain    - the agent's or category's own chain
    5. System default    - host default model, else first available model

Each tier is a plain function ``(ResolutionContext) -> Optional[ResolutionResult]``
so the policy stays visible as a list and every tier can be tested alone.
The pipeline is pure: it reads snapshots, never mutates them, never raises
for missing data, and returns None only when nothing at all is available.

Usage:
    from omo_config.core.model_resolution import resolve_model_pipeline

    result = resolve_model_pipeline(available_models, config, "oracle")
    if result:
        print(result.model, result.variant, result.provenance.value)
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import (
    Any,
    Callable,
    Dict,
    FrozenSet,
    Iterable,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    Union,
)

from omo_config.core.model_matching import extract_providers_from_models, fuzzy_match_model
from omo_config.core.requirements import (
    AGENT_MODEL_REQUIREMENTS,
    CATEGORY_MODEL_REQUIREMENTS,
    FallbackChain,
    ModelRequirements,
    RequirementTable,
)
from omo_config.user_config import CategoryOverride, UserConfig

logger = logging.getLogger(__name__)

# Agents whose model can be switched from the host UI
PRIMARY_AGENTS: FrozenSet[str] = frozenset(["sisyphus", "atlas"])


class Provenance(str, Enum):
    """Which tier produced a resolution result."""

    UI_OVERRIDE = "ui-override"
    USER_CONFIG = "user-config"
    CATEGORY_DEFAULT = "category-default"
    PROVIDER_FALLBACK = "provider-fallback"
    SYSTEM_DEFAULT = "system-default"


@dataclass(frozen=True)
class ResolutionResult:
    """A resolved model with the variant to apply and where it came from."""

    model: str
    variant: Optional[str]
    provenance: Provenance

    def to_dict(self) -> Dict[str, Any]:
        return {
            "model": self.model,
            "variant": self.variant,
            "provenance": self.provenance.value,
        }


SystemDefaultGetter = Callable[[], Optional[str]]
UserConfigLike = Union[UserConfig, Mapping[str, Any], None]


def is_primary_agent(agent_name: str) -> bool:
    """Check if an agent accepts a model override from the host UI."""
    return agent_name in PRIMARY_AGENTS


def get_system_default_model(host_config_file: Optional[Union[str, Path]] = None) -> Optional[str]:
    """Read the host's default model from opencode.json.

    Args:
        host_config_file: Path to opencode.json. Defaults to the location
            from the path settings.

    Returns:
        The configured ``model`` value, or None when the file is missing,
        unreadable or has no model.
    """
    if host_config_file is None:
        from omo_config.settings import get_path_settings

        host_config_file = get_path_settings().host_config_file

    path = Path(host_config_file)
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.debug(f"Ignoring unreadable host config {path}: {e}")
        return None
    if not isinstance(data, dict):
        return None
    model = data.get("model")
    return model if isinstance(model, str) and model else None


# =============================================================================
# Fallback chain resolver
# =============================================================================


def resolve_from_fallback_chain(
    available_models: Sequence[str],
    fallback_chain: FallbackChain,
    available_providers: Optional[Iterable[str]] = None,
) -> Optional[ResolutionResult]:
    """Walk a fallback chain and return the first available match.

    Entries are tried top to bottom and, within an entry, provider by
    provider. When ``available_providers`` is given, providers outside it
    are skipped without attempting a match.

    Returns:
        A ``provider-fallback`` result carrying the entry's variant, or None.
    """
    allowed = None if available_providers is None else frozenset(available_providers)

    for entry in fallback_chain:
        for provider in entry.providers:
            if allowed is not None and provider not in allowed:
                continue
            match = fuzzy_match_model(available_models, f"{provider}/{entry.model}")
            if match:
                return ResolutionResult(
                    model=match,
                    variant=entry.variant or None,
                    provenance=Provenance.PROVIDER_FALLBACK,
                )
    return None


# =============================================================================
# Resolution context and tiers
# =============================================================================


@dataclass(frozen=True)
class ResolutionContext:
    """Everything one resolution needs, captured as an immutable snapshot."""

    name: str
    available_models: Tuple[str, ...]
    available_providers: Tuple[str, ...]
    config: UserConfig
    ui_selected_model: Optional[str]
    agent_requirements: Optional[ModelRequirements]
    category_requirements: Optional[ModelRequirements]
    category_table: RequirementTable
    primary_agents: FrozenSet[str]
    system_default: SystemDefaultGetter

    @property
    def is_agent(self) -> bool:
        return self.agent_requirements is not None

    @property
    def is_category(self) -> bool:
        return self.category_requirements is not None

    @property
    def is_known(self) -> bool:
        return self.is_agent or self.is_category

    @property
    def requirements(self) -> Optional[ModelRequirements]:
        """Agent requirements win when a name is in both tables."""
        return self.agent_requirements or self.category_requirements

    @property
    def user_block(self) -> Optional[CategoryOverride]:
        """The config block for this name; category blocks win for categories."""
        if self.is_category:
            return self.config.category(self.name)
        return self.config.agent(self.name)


Tier = Callable[[ResolutionContext], Optional[ResolutionResult]]


def resolve_ui_override(ctx: ResolutionContext) -> Optional[ResolutionResult]:
    """Tier 1: model chosen in the host UI, honoured for primary agents only."""
    if not (ctx.is_agent and ctx.name in ctx.primary_agents and ctx.ui_selected_model):
        return None
    match = fuzzy_match_model(ctx.available_models, ctx.ui_selected_model)
    if not match:
        return None
    return ResolutionResult(model=match, variant=None, provenance=Provenance.UI_OVERRIDE)


def resolve_user_config(ctx: ResolutionContext) -> Optional[ResolutionResult]:
    """Tier 2: explicit model in the user's agent or category block."""
    block = ctx.user_block
    if block is None or not block.model:
        return None
    match = fuzzy_match_model(ctx.available_models, block.model)
    if not match:
        logger.debug(f"{ctx.name}: configured model {block.model} is not available")
        return None
    return ResolutionResult(
        model=match,
        variant=block.variant or None,
        provenance=Provenance.USER_CONFIG,
    )


def resolve_agent_category(ctx: ResolutionContext) -> Optional[ResolutionResult]:
    """Tier 3: the category an agent is tagged with.

    The category's configured model is tried first (``category-default``),
    then the category's own fallback chain (``provider-fallback``).
    """
    if not ctx.is_agent:
        return None
    agent_block = ctx.config.agent(ctx.name)
    if agent_block is None or not agent_block.category:
        return None

    category_name = agent_block.category
    category_requirements = ctx.category_table.get(category_name)
    if category_requirements is None:
        logger.debug(f"{ctx.name}: tagged with unknown category {category_name}")
        return None

    category_block = ctx.config.category(category_name)
    if category_block is not None and category_block.model:
        match = fuzzy_match_model(ctx.available_models, category_block.model)
        if match:
            return ResolutionResult(
                model=match,
                variant=category_block.variant or None,
                provenance=Provenance.CATEGORY_DEFAULT,
            )

    return resolve_from_fallback_chain(
        ctx.available_models,
        category_requirements.fallback_chain,
        ctx.available_providers,
    )


def resolve_own_fallback_chain(ctx: ResolutionContext) -> Optional[ResolutionResult]:
    """Tier 4: the agent's or category's own fallback chain."""
    requirements = ctx.requirements
    if requirements is None or not requirements.fallback_chain:
        return None
    return resolve_from_fallback_chain(
        ctx.available_models,
        requirements.fallback_chain,
        ctx.available_providers,
    )


def resolve_system_default(ctx: ResolutionContext) -> Optional[ResolutionResult]:
    """Tier 5: host default model, else the first available model."""
    system_default = ctx.system_default()
    if system_default:
        match = fuzzy_match_model(ctx.available_models, system_default)
        if match:
            return ResolutionResult(model=match, variant=None, provenance=Provenance.SYSTEM_DEFAULT)

    if ctx.available_models:
        return ResolutionResult(
            model=ctx.available_models[0],
            variant=None,
            provenance=Provenance.SYSTEM_DEFAULT,
        )
    return None


DEFAULT_TIERS: Tuple[Tier, ...] = (
    resolve_ui_override,
    resolve_user_config,
    resolve_agent_category,
    resolve_own_fallback_chain,
    resolve_system_default,
)

# Names in neither table skip straight to the system default
UNKNOWN_KEY_TIERS: Tuple[Tier, ...] = (resolve_system_default,)


def first_success(tiers: Iterable[Tier], ctx: ResolutionContext) -> Optional[ResolutionResult]:
    """Run tiers in order and return the first non-None result."""
    for tier in tiers:
        result = tier(ctx)
        if result is not None:
            logger.debug(
                f"{ctx.name}: resolved {result.model} via {tier.__name__} "
                f"({result.provenance.value})"
            )
            return result
    logger.debug(f"{ctx.name}: no tier produced a model")
    return None


# =============================================================================
# Resolver
# =============================================================================


class ModelResolver:
    """Resolves agents and categories against a set of requirement tables.

    Holds only read-only inputs (tables, primary-agent allowlist, system
    default getter); every call builds its own context, so one resolver can
    serve any number of independent resolutions.
    """

    def __init__(
        self,
        agent_requirements: RequirementTable = AGENT_MODEL_REQUIREMENTS,
        category_requirements: RequirementTable = CATEGORY_MODEL_REQUIREMENTS,
        primary_agents: Iterable[str] = PRIMARY_AGENTS,
        system_default: SystemDefaultGetter = get_system_default_model,
        tiers: Sequence[Tier] = DEFAULT_TIERS,
    ):
        self.agent_requirements = agent_requirements
        self.category_requirements = category_requirements
        self.primary_agents = frozenset(primary_agents)
        self.system_default = system_default
        self.tiers = tuple(tiers)

    def is_known(self, name: str) -> bool:
        return name in self.agent_requirements or name in self.category_requirements

    def build_context(
        self,
        available_models: Sequence[str],
        config: UserConfigLike,
        agent_or_category: str,
        ui_selected_model: Optional[str] = None,
    ) -> ResolutionContext:
        models = tuple(available_models)
        return ResolutionContext(
            name=agent_or_category,
            available_models=models,
            available_providers=tuple(extract_providers_from_models(models)),
            config=UserConfig.from_raw(config),
            ui_selected_model=ui_selected_model,
            agent_requirements=self.agent_requirements.get(agent_or_category),
            category_requirements=self.category_requirements.get(agent_or_category),
            category_table=self.category_requirements,
            primary_agents=self.primary_agents,
            system_default=self.system_default,
        )

    def resolve(
        self,
        available_models: Sequence[str],
        config: UserConfigLike,
        agent_or_category: str,
        ui_selected_model: Optional[str] = None,
    ) -> Optional[ResolutionResult]:
        """Resolve one agent or category.

        Args:
            available_models: Fully-qualified ids currently reachable.
            config: User configuration (UserConfig, raw dict or None).
            agent_or_category: Name to resolve; unknown names get the
                system default.
            ui_selected_model: Model picked in the host UI, if any.

        Returns:
            The resolution, or None when no model is available at all.
        """
        ctx = self.build_context(available_models, config, agent_or_category, ui_selected_model)
        tiers = self.tiers if ctx.is_known else UNKNOWN_KEY_TIERS
        return first_success(tiers, ctx)

    def resolve_all_agents(
        self,
        available_models: Sequence[str],
        config: UserConfigLike,
        ui_selected_model: Optional[str] = None,
    ) -> Dict[str, Optional[ResolutionResult]]:
        """Resolve every agent in the agent table, in table order."""
        user_config = UserConfig.from_raw(config)
        return {
            name: self.resolve(available_models, user_config, name, ui_selected_model)
            for name in self.agent_requirements
        }

    def resolve_all_categories(
        self,
        available_models: Sequence[str],
        config: UserConfigLike,
    ) -> Dict[str, Optional[ResolutionResult]]:
        """Resolve every category in the category table, in table order."""
        user_config = UserConfig.from_raw(config)
        return {
            name: self.resolve(available_models, user_config, name)
            for name in self.category_requirements
        }


def resolve_model_pipeline(
    available_models: Sequence[str],
    config: UserConfigLike,
    agent_or_category: str,
    ui_selected_model: Optional[str] = None,
    *,
    system_default: SystemDefaultGetter = get_system_default_model,
    agent_requirements: RequirementTable = AGENT_MODEL_REQUIREMENTS,
    category_requirements: RequirementTable = CATEGORY_MODEL_REQUIREMENTS,
) -> Optional[ResolutionResult]:
    """Resolve one agent or category with the default tier policy.

    See ``ModelResolver.resolve``.
    """
    resolver = ModelResolver(
        agent_requirements=agent_requirements,
        category_requirements=category_requirements,
        system_default=system_default,
    )
    return resolver.resolve(available_models, config, agent_or_category, ui_selected_model)


# =============================================================================
# Variant resolution
# =============================================================================


def resolve_variant(
    config: UserConfigLike,
    agent_or_category: str,
    fallback_variant: Optional[str] = None,
) -> Optional[str]:
    """Pick the variant to store alongside a resolved model.

    Precedence: explicit variant in the agent block (or the category block
    when there is no agent block) > ``fallback_variant`` > variant of the
    category the agent is tagged with > None.
    """
    user_config = UserConfig.from_raw(config)
    agent_block = user_config.agent(agent_or_category)
    block: Optional[CategoryOverride] = agent_block or user_config.category(agent_or_category)

    if block is not None and block.variant:
        return block.variant

    if fallback_variant:
        return fallback_variant

    if agent_block is not None and agent_block.category:
        category_block = user_config.category(agent_block.category)
        if category_block is not None:
            return category_block.variant or None

    return None
