"""Model resolution core.

Pure, synchronous building blocks: identifier matching, requirement tables,
the five-tier resolution pipeline and its validators.
"""

from .model_matching import (
    extract_providers_from_models,
    fuzzy_match_model,
    normalize_model_name,
)
from .model_resolution import (
    DEFAULT_TIERS,
    PRIMARY_AGENTS,
    ModelResolver,
    Provenance,
    ResolutionContext,
    ResolutionResult,
    first_success,
    get_system_default_model,
    is_primary_agent,
    resolve_from_fallback_chain,
    resolve_model_pipeline,
    resolve_variant,
)
from .model_validation import (
    ValidationResult,
    check_requires_model,
    validate_agent_model,
    validate_category_model,
)
from .requirements import (
    AGENT_MODEL_REQUIREMENTS,
    ALL_AGENTS,
    ALL_CATEGORIES,
    CATEGORY_MODEL_REQUIREMENTS,
    FallbackChainEntry,
    ModelRequirements,
    load_requirement_tables,
)

__all__ = [
    # Matching
    "extract_providers_from_models",
    "fuzzy_match_model",
    "normalize_model_name",
    # Tables
    "AGENT_MODEL_REQUIREMENTS",
    "CATEGORY_MODEL_REQUIREMENTS",
    "ALL_AGENTS",
    "ALL_CATEGORIES",
    "FallbackChainEntry",
    "ModelRequirements",
    "load_requirement_tables",
    # Pipeline
    "DEFAULT_TIERS",
    "PRIMARY_AGENTS",
    "ModelResolver",
    "Provenance",
    "ResolutionContext",
    "ResolutionResult",
    "first_success",
    "get_system_default_model",
    "is_primary_agent",
    "resolve_from_fallback_chain",
    "resolve_model_pipeline",
    "resolve_variant",
    # Validation
    "ValidationResult",
    "check_requires_model",
    "validate_agent_model",
    "validate_category_model",
]
