"""Agent and category model requirements - single source of truth.

Each agent role and each delegation category carries an ordered fallback
chain of (providers, model, variant) entries and, optionally, a hard model
requirement. The resolution pipeline only reads these tables.

The built-in tables mirror the Oh My Opencode defaults. A schema file with
``AGENT_MODEL_REQUIREMENTS`` / ``CATEGORY_MODEL_REQUIREMENTS`` keys (same
JSON shape as upstream, camelCase) can replace them at runtime via
``load_requirement_tables``.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FallbackChainEntry:
    """One step of a fallback chain.

    Attributes:
        providers: Provider ids tried in order for this model.
        model: Bare model name (no provider prefix).
        variant: Optional variant (e.g. reasoning effort) to apply on match.
    """

    providers: Tuple[str, ...]
    model: str
    variant: Optional[str] = None

    def __post_init__(self):
        # Accept any iterable of providers but store an immutable tuple
        providers = self.providers
        if isinstance(providers, str):
            providers = (providers,)
        object.__setattr__(self, "providers", tuple(providers))
        if not self.providers:
            raise ValueError(f"Fallback entry for '{self.model}' needs at least one provider")
        if not self.model:
            raise ValueError("Fallback entry needs a non-empty model name")

    def target_ids(self) -> Tuple[str, ...]:
        """Fully-qualified ids this entry asks for, in preference order."""
        return tuple(f"{provider}/{self.model}" for provider in self.providers)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"providers": list(self.providers), "model": self.model}
        if self.variant:
            data["variant"] = self.variant
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FallbackChainEntry":
        return cls(
            providers=tuple(data.get("providers") or ()),
            model=data.get("model") or "",
            variant=data.get("variant") or None,
        )


FallbackChain = Tuple[FallbackChainEntry, ...]


@dataclass(frozen=True)
class ModelRequirements:
    """Requirements of one agent or category."""

    fallback_chain: FallbackChain = ()
    requires_model: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "fallback_chain", tuple(self.fallback_chain))

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "fallbackChain": [entry.to_dict() for entry in self.fallback_chain]
        }
        if self.requires_model:
            data["requiresModel"] = self.requires_model
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ModelRequirements":
        chain = data.get("fallbackChain", data.get("fallback_chain")) or ()
        requires = data.get("requiresModel", data.get("requires_model")) or None
        return cls(
            fallback_chain=tuple(FallbackChainEntry.from_dict(entry) for entry in chain),
            requires_model=requires,
        )


RequirementTable = Mapping[str, ModelRequirements]


def _entry(providers: Iterable[str], model: str, variant: Optional[str] = None) -> FallbackChainEntry:
    return FallbackChainEntry(providers=tuple(providers), model=model, variant=variant)


# Provider groups that serve the same upstream model families
_ANTHROPIC = ("anthropic", "github-copilot", "opencode")
_OPENAI = ("openai", "github-copilot", "opencode")
_GOOGLE = ("google", "github-copilot", "opencode")


# =============================================================================
# AGENT REQUIREMENTS
# =============================================================================

AGENT_MODEL_REQUIREMENTS: RequirementTable = MappingProxyType(
    {
        # Primary orchestrators (selectable from the host UI)
        "sisyphus": ModelRequirements(
            fallback_chain=(
                _entry(_ANTHROPIC, "claude-opus-4-5", "max"),
                _entry(("zai-coding-plan",), "glm-4.7"),
                _entry(_OPENAI, "gpt-5.2-codex", "medium"),
                _entry(_GOOGLE, "gemini-3-pro"),
            ),
        ),
        "atlas": ModelRequirements(
            fallback_chain=(
                _entry(_ANTHROPIC, "claude-sonnet-4-5"),
                _entry(_OPENAI, "gpt-5.2"),
                _entry(_GOOGLE, "gemini-3-pro"),
            ),
        ),
        # Deep worker, only meaningful on codex
        "hephaestus": ModelRequirements(
            fallback_chain=(_entry(_OPENAI, "gpt-5.2-codex", "medium"),),
            requires_model="gpt-5.2-codex",
        ),
        "oracle": ModelRequirements(
            fallback_chain=(
                _entry(_OPENAI, "gpt-5.2", "high"),
                _entry(_GOOGLE, "gemini-3-pro", "high"),
                _entry(_ANTHROPIC, "claude-opus-4-5", "max"),
            ),
        ),
        "librarian": ModelRequirements(
            fallback_chain=(
                _entry(("zai-coding-plan",), "glm-4.7"),
                _entry(("anthropic",), "claude-sonnet-4-5"),
            ),
        ),
        "explore": ModelRequirements(
            fallback_chain=(
                _entry(("xai", "opencode"), "grok-code-fast-1"),
                _entry(_ANTHROPIC, "claude-haiku-4-5"),
                _entry(("opencode",), "gpt-5-nano"),
            ),
        ),
        "multimodal-looker": ModelRequirements(
            fallback_chain=(
                _entry(_GOOGLE, "gemini-3-flash"),
                _entry(_OPENAI, "gpt-5.2"),
                _entry(_ANTHROPIC, "claude-haiku-4-5"),
            ),
        ),
        "prometheus": ModelRequirements(
            fallback_chain=(
                _entry(_ANTHROPIC, "claude-opus-4-5", "max"),
                _entry(_OPENAI, "gpt-5.2", "high"),
                _entry(_GOOGLE, "gemini-3-pro"),
            ),
        ),
        "metis": ModelRequirements(
            fallback_chain=(
                _entry(_ANTHROPIC, "claude-opus-4-5", "max"),
                _entry(_OPENAI, "gpt-5.2", "high"),
                _entry(_GOOGLE, "gemini-3-pro", "high"),
            ),
        ),
        "momus": ModelRequirements(
            fallback_chain=(
                _entry(_OPENAI, "gpt-5.2", "medium"),
                _entry(_ANTHROPIC, "claude-opus-4-5", "max"),
                _entry(_GOOGLE, "gemini-3-pro", "high"),
            ),
        ),
    }
)


# =============================================================================
# CATEGORY REQUIREMENTS
# =============================================================================

CATEGORY_MODEL_REQUIREMENTS: RequirementTable = MappingProxyType(
    {
        "visual-engineering": ModelRequirements(
            fallback_chain=(
                _entry(_GOOGLE, "gemini-3-pro"),
                _entry(_ANTHROPIC, "claude-opus-4-5", "max"),
                _entry(("zai-coding-plan",), "glm-4.7"),
            ),
        ),
        "ultrabrain": ModelRequirements(
            fallback_chain=(
                _entry(_OPENAI, "gpt-5.2-codex", "xhigh"),
                _entry(_GOOGLE, "gemini-3-pro", "high"),
                _entry(_ANTHROPIC, "claude-opus-4-5", "max"),
            ),
        ),
        "deep": ModelRequirements(
            fallback_chain=(_entry(_OPENAI, "gpt-5.2-codex", "medium"),),
            requires_model="gpt-5.2-codex",
        ),
        "artistry": ModelRequirements(
            fallback_chain=(
                _entry(_GOOGLE, "gemini-3-pro", "high"),
                _entry(_ANTHROPIC, "claude-opus-4-5", "max"),
            ),
            requires_model="gemini-3-pro",
        ),
        "quick": ModelRequirements(
            fallback_chain=(
                _entry(_ANTHROPIC, "claude-haiku-4-5"),
                _entry(_GOOGLE, "gemini-3-flash"),
                _entry(("opencode",), "gpt-5-nano"),
            ),
        ),
        "unspecified-low": ModelRequirements(
            fallback_chain=(
                _entry(_ANTHROPIC, "claude-sonnet-4-5"),
                _entry(_OPENAI, "gpt-5.2-codex", "medium"),
                _entry(_GOOGLE, "gemini-3-flash"),
            ),
        ),
        "unspecified-high": ModelRequirements(
            fallback_chain=(
                _entry(_ANTHROPIC, "claude-opus-4-5", "max"),
                _entry(_OPENAI, "gpt-5.2", "high"),
                _entry(_GOOGLE, "gemini-3-pro"),
            ),
        ),
        "writing": ModelRequirements(
            fallback_chain=(
                _entry(_GOOGLE, "gemini-3-flash"),
                _entry(_ANTHROPIC, "claude-sonnet-4-5"),
                _entry(("zai-coding-plan",), "glm-4.7"),
            ),
        ),
    }
)

ALL_AGENTS: Tuple[str, ...] = tuple(AGENT_MODEL_REQUIREMENTS)
ALL_CATEGORIES: Tuple[str, ...] = tuple(CATEGORY_MODEL_REQUIREMENTS)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================


def get_agent_requirements(agent_name: str) -> Optional[ModelRequirements]:
    """Requirements for an agent, or None if the agent is unknown."""
    return AGENT_MODEL_REQUIREMENTS.get(agent_name)


def get_category_requirements(category_name: str) -> Optional[ModelRequirements]:
    """Requirements for a category, or None if the category is unknown."""
    return CATEGORY_MODEL_REQUIREMENTS.get(category_name)


def parse_requirement_table(raw: Mapping[str, Any]) -> RequirementTable:
    """Build a read-only requirement table from its JSON shape.

    Raises:
        ValueError: if an entry is malformed (empty providers or model).
    """
    table = {name: ModelRequirements.from_dict(data or {}) for name, data in raw.items()}
    return MappingProxyType(table)


def load_requirement_tables(
    schema_file: Optional[Union[str, Path]] = None,
) -> Tuple[RequirementTable, RequirementTable]:
    """Agent and category tables, replaced from a schema file when possible.

    Each table is taken from the file only if its key is present and it
    parses; otherwise the built-in table is used. Problems are logged and
    never raised, so a broken cache cannot break resolution.

    Args:
        schema_file: JSON file with AGENT_MODEL_REQUIREMENTS and/or
            CATEGORY_MODEL_REQUIREMENTS objects.

    Returns:
        (agent_table, category_table)
    """
    agents: RequirementTable = AGENT_MODEL_REQUIREMENTS
    categories: RequirementTable = CATEGORY_MODEL_REQUIREMENTS

    if schema_file is None:
        return agents, categories

    path = Path(schema_file)
    if not path.is_file():
        return agents, categories

    try:
        schema = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning(f"Failed to load requirement schema from {path}: {e}")
        return agents, categories

    if not isinstance(schema, dict):
        logger.warning(f"Ignoring requirement schema {path}: not a JSON object")
        return agents, categories

    for key in ("AGENT_MODEL_REQUIREMENTS", "CATEGORY_MODEL_REQUIREMENTS"):
        raw = schema.get(key)
        if not isinstance(raw, dict):
            continue
        try:
            table = parse_requirement_table(raw)
        except (ValueError, TypeError, AttributeError) as e:
            logger.warning(f"Ignoring {key} from {path}: {e}")
            continue
        if key == "AGENT_MODEL_REQUIREMENTS":
            agents = table
        else:
            categories = table
        logger.debug(f"Loaded {len(table)} entries for {key} from {path}")

    return agents, categories
