"""Pass/fail validation wrappers around the resolution pipeline.

The pipeline only ever returns optional results. These helpers add the
hard ``requires_model`` gate and turn "nothing resolved" into a structured
result with a message ready to show a user (and to drive a CLI exit code).
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence

from omo_config.core.model_matching import get_base_name
from omo_config.core.model_resolution import (
    ModelResolver,
    Provenance,
    ResolutionResult,
    UserConfigLike,
)
from omo_config.core.requirements import ModelRequirements


@dataclass
class ValidationResult:
    """Outcome of validating an agent or category."""

    valid: bool
    model: Optional[str] = None
    variant: Optional[str] = None
    provenance: Optional[Provenance] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, result: Optional[ResolutionResult] = None) -> "ValidationResult":
        if result is None:
            return cls(valid=True)
        return cls(
            valid=True,
            model=result.model,
            variant=result.variant,
            provenance=result.provenance,
        )

    @classmethod
    def failure(cls, error: str) -> "ValidationResult":
        return cls(valid=False, error=error)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"valid": self.valid}
        if self.model is not None:
            data["model"] = self.model
            data["variant"] = self.variant
        if self.provenance is not None:
            data["provenance"] = self.provenance.value
        if self.error is not None:
            data["error"] = self.error
        return data


def check_requires_model(
    requirements: Optional[ModelRequirements],
    available_models: Sequence[str],
) -> ValidationResult:
    """Coarse gate for a hard model requirement.

    Valid when there is no requirement, or when some available model's base
    name (after the last slash) equals or contains the required name. No
    normalization is applied.
    """
    if requirements is None or not requirements.requires_model:
        return ValidationResult.ok()

    required = requirements.requires_model
    for model_id in available_models:
        base_name = get_base_name(model_id)
        if base_name == required or required in base_name:
            return ValidationResult.ok()

    return ValidationResult.failure(
        f'Required model "{required}" not available in connected providers'
    )


def _validate(
    kind: str,
    name: str,
    requirements: Optional[ModelRequirements],
    available_models: Sequence[str],
    config: UserConfigLike,
    resolver: ModelResolver,
) -> ValidationResult:
    check = check_requires_model(requirements, available_models)
    if not check.valid:
        return check

    result = resolver.resolve(available_models, config, name)
    if result is None:
        return ValidationResult.failure(f'Could not resolve model for {kind} "{name}"')
    return ValidationResult.ok(result)


def validate_agent_model(
    agent_name: str,
    available_models: Sequence[str],
    config: UserConfigLike,
    resolver: Optional[ModelResolver] = None,
) -> ValidationResult:
    """Validate that an agent can be given a model right now."""
    resolver = resolver or ModelResolver()
    return _validate(
        "agent",
        agent_name,
        resolver.agent_requirements.get(agent_name),
        available_models,
        config,
        resolver,
    )


def validate_category_model(
    category_name: str,
    available_models: Sequence[str],
    config: UserConfigLike,
    resolver: Optional[ModelResolver] = None,
) -> ValidationResult:
    """Validate that a category can be given a model right now."""
    resolver = resolver or ModelResolver()
    return _validate(
        "category",
        category_name,
        resolver.category_requirements.get(category_name),
        available_models,
        config,
        resolver,
    )
