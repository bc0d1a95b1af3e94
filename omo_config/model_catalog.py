"""Model catalog loading and recommendations.

The catalog comes from the host CLI (``opencode models --verbose``), which
prints each model as a ``provider/model`` header line followed by a
pretty-printed JSON object. This module runs that command, parses its
output, and scores models against agent profiles for recommendations.
"""

import json
import logging
import re
import subprocess
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from omo_config.constants import AGENT_PROFILES
from omo_config.core.model_matching import get_provider
from omo_config.exceptions import ModelCatalogError

logger = logging.getLogger(__name__)

CatalogModel = Dict[str, Any]

_MODEL_HEADER = re.compile(r"^[a-z0-9-]+/[a-z0-9-.:/]+$", re.IGNORECASE)

FAST_PATTERNS = ("flash", "fast", "mini", "lite", "haiku", "instant")

# Combined input+output price per million tokens below which a model counts as fast
FAST_COST_CEILING = 5


@dataclass
class ModelCatalog:
    """Parsed catalog: model records plus the providers they come from."""

    models: List[CatalogModel] = field(default_factory=list)
    providers: List[str] = field(default_factory=list)

    @property
    def model_ids(self) -> List[str]:
        """Fully-qualified ids in catalog order (the pipeline's input)."""
        return [model["id"] for model in self.models]

    def get(self, model_id: str) -> Optional[CatalogModel]:
        for model in self.models:
            if model["id"] == model_id:
                return model
        return None

    def for_provider(self, provider: str) -> List[CatalogModel]:
        return [model for model in self.models if _provider_of(model) == provider]


def _provider_of(model: Mapping[str, Any]) -> str:
    return model.get("providerID") or get_provider(model.get("id", ""))


def parse_models(output: str) -> List[CatalogModel]:
    """Parse ``opencode models --verbose`` output into model records.

    A header line starts a block; following lines are collected until their
    braces balance, then parsed as JSON. Each record keeps the JSON ``id``
    as ``modelID`` and takes the header as its ``id``. Malformed blocks are
    skipped.
    """
    models: List[CatalogModel] = []
    current_model: Optional[str] = None
    buffer: List[str] = []
    brace_count = 0

    for line in output.split("\n"):
        if brace_count == 0 and _MODEL_HEADER.match(line):
            current_model = line.strip()
            buffer = []
            continue

        if current_model is None:
            continue

        brace_count += line.count("{") - line.count("}")
        if buffer or line:
            buffer.append(line)

        if brace_count == 0 and buffer:
            try:
                model_data = json.loads("\n".join(buffer))
            except json.JSONDecodeError:
                logger.debug(f"Skipping malformed catalog entry for {current_model}")
            else:
                if isinstance(model_data, dict):
                    models.append({**model_data, "modelID": model_data.get("id"), "id": current_model})
            current_model = None
            buffer = []

    return models


def extract_providers(models: Sequence[Mapping[str, Any]]) -> List[str]:
    """Sorted unique providers of a list of model records."""
    return sorted({provider for provider in map(_provider_of, models) if provider})


def load_models(command: Optional[Sequence[str]] = None) -> ModelCatalog:
    """Run the catalog command and parse its output.

    Args:
        command: argv to run. Defaults to the configured models command.

    Raises:
        ModelCatalogError: if the command cannot be started or fails.
    """
    if command is None:
        from omo_config.settings import get_settings

        command = get_settings().catalog.models_command

    command_str = " ".join(command)
    try:
        completed = subprocess.run(
            list(command),
            capture_output=True,
            text=True,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError) as e:
        stderr = getattr(e, "stderr", None) or ""
        raise ModelCatalogError(_catalog_failure_message(command_str, stderr)) from e

    models = parse_models(completed.stdout)
    providers = extract_providers(models)
    logger.info(f"Loaded {len(models)} models from {len(providers)} providers")
    return ModelCatalog(models=models, providers=providers)


def _catalog_failure_message(command_str: str, stderr: str) -> str:
    parts = [
        f'Failed to run "{command_str}".',
        "",
        "Possible causes:",
        "  1. OpenCode is not installed",
        "  2. OpenCode is not in your PATH",
        "  3. OpenCode failed to start due to a configuration/plugin error "
        "(common: ProviderModelNotFoundError)",
        "",
    ]
    if stderr.strip():
        parts.extend(["OpenCode error output:", stderr.strip(), ""])
    parts.extend(
        [
            "To fix:",
            "  - Verify installation: opencode --version",
            "  - Try: opencode models",
            "  - If you recently changed providers/models, your config may reference "
            "a model that no longer exists.",
        ]
    )
    return "\n".join(parts)


# =============================================================================
# Capability heuristics
# =============================================================================


def has_extended_thinking(model: Mapping[str, Any]) -> bool:
    """True when the model advertises an interleaved reasoning field."""
    interleaved = (model.get("capabilities") or {}).get("interleaved")
    return isinstance(interleaved, dict) and bool(interleaved.get("field"))


def is_fast_model(model: Mapping[str, Any]) -> bool:
    """Name-based or price-based guess at whether a model is fast."""
    haystacks = [
        (model.get("name") or "").lower(),
        (model.get("id") or "").lower(),
        (model.get("family") or "").lower(),
    ]
    for pattern in FAST_PATTERNS:
        if any(pattern in text for text in haystacks):
            return True

    cost = model.get("cost")
    if cost:
        total_cost = (cost.get("input") or 0) + (cost.get("output") or 0)
        if 0 < total_cost < FAST_COST_CEILING:
            return True

    return False


def _context_length(model: Mapping[str, Any]) -> int:
    return (model.get("limit") or {}).get("context") or 0


def score_model(
    model: Mapping[str, Any],
    agent_type: str,
    config: Optional[Mapping[str, Any]] = None,
) -> int:
    """Score how well a model fits an agent profile (higher is better).

    Unknown agents score 0 for every model.
    """
    profile = AGENT_PROFILES.get(agent_type)
    if not profile:
        return 0

    score = 0
    caps = model.get("capabilities") or {}
    caps_input = caps.get("input") or {}
    context = _context_length(model)
    min_context = profile.get("minContext") or 32000

    if context >= min_context:
        score += 10
        context_ratio = min(context / min_context, 4)
        score += int((context_ratio - 1) * 3.33)
    else:
        deficit = (min_context - context) / min_context
        score -= int(deficit * 20)

    name_and_id = f"{model.get('name') or ''} {model.get('id') or ''}".lower()

    for pref in profile["preferred"]:
        if pref == "reasoning":
            if caps.get("reasoning") or has_extended_thinking(model):
                score += 15
        elif pref == "thinking":
            if has_extended_thinking(model):
                score += 12
            elif "thinking" in name_and_id:
                score += 10
        elif pref == "large_context":
            if context >= 500000:
                score += 12
            elif context >= 200000:
                score += 8
            elif context >= 128000:
                score += 4
        elif pref == "multimodal":
            has_image = caps_input.get("image")
            has_pdf = caps_input.get("pdf")
            if has_image and has_pdf:
                score += 15
            elif has_image or has_pdf:
                score += 10
            if caps_input.get("video"):
                score += 3
        elif pref == "image_input":
            if caps_input.get("image"):
                score += 12
        elif pref == "pdf_input":
            if caps_input.get("pdf"):
                score += 8
        elif pref == "fast":
            if is_fast_model(model):
                score += 10
        elif pref == "text_output":
            if (caps.get("output") or {}).get("text"):
                score += 5

    preferred_providers = list((config or {}).get("preferred_providers") or [])
    if preferred_providers:
        provider = _provider_of(model)
        if provider in preferred_providers:
            score += (len(preferred_providers) - preferred_providers.index(provider)) * 5

    return score


def get_recommended_models(
    models: Sequence[Mapping[str, Any]],
    agent_type: str,
    config: Optional[Mapping[str, Any]] = None,
    limit: int = 5,
) -> List[CatalogModel]:
    """Top ``limit`` models for an agent, each a copy with a ``score`` key.

    Ties keep catalog order.
    """
    scored = [{**model, "score": score_model(model, agent_type, config)} for model in models]
    scored.sort(key=lambda m: m["score"], reverse=True)
    return scored[:limit]
