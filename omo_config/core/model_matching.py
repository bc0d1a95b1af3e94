"""Model identifier normalization and fuzzy matching.

Provider catalogs rename and retag the same model inconsistently
(``claude-opus-4-5`` vs ``claude-opus-4.5-20251101``, ``antigravity-``
prefixes, ``-preview`` suffixes). These helpers compare identifiers with a
graduated cascade of rules so a fallback chain is not starved by naming
drift.
"""

import re
from typing import Iterable, List, Optional, Sequence, Tuple

_ANTIGRAVITY_PREFIX = "antigravity-"
_STRIPPED_SUFFIXES = ("-preview", "-tee")
_TOKEN_SPLIT = re.compile(r"[-.]")

# Token overlap needs this many shared tokens of at least _MIN_TOKEN_LENGTH characters
_MIN_SHARED_TOKENS = 2
_MIN_TOKEN_LENGTH = 3


def normalize_model_name(model_name: str) -> str:
    """Canonicalize a bare model name for cross-provider comparison.

    Lower-cases, then strips a leading ``antigravity-`` prefix, a trailing
    ``-preview`` suffix and a trailing ``-tee`` suffix, in that order.
    """
    name = model_name.lower()
    if name.startswith(_ANTIGRAVITY_PREFIX):
        name = name[len(_ANTIGRAVITY_PREFIX):]
    for suffix in _STRIPPED_SUFFIXES:
        if name.endswith(suffix):
            name = name[: -len(suffix)]
    return name


def split_model_id(model_id: str) -> Tuple[str, str]:
    """Split ``provider/model`` on the first slash.

    An id without a slash is all base name with an empty provider. A
    trailing slash ("provider/") keeps the whole id as the base so an empty
    base never prefix-matches everything.
    """
    provider, sep, base = model_id.partition("/")
    if not sep:
        return "", model_id
    if not base:
        return provider, model_id
    return provider, base


def get_provider(model_id: str) -> str:
    """Return the provider prefix of a model id ("" when there is none)."""
    return split_model_id(model_id)[0]


def get_base_name(model_id: str) -> str:
    """Return everything after the last slash of a model id."""
    return model_id.rsplit("/", 1)[-1]


def extract_providers_from_models(available_models: Iterable[str]) -> List[str]:
    """Unique providers in order of first appearance."""
    providers: List[str] = []
    for model_id in available_models:
        provider = get_provider(model_id)
        if provider and provider not in providers:
            providers.append(provider)
    return providers


def _tokens(normalized_name: str) -> List[str]:
    return _TOKEN_SPLIT.split(normalized_name)


def _shares_enough_tokens(candidate: str, target: str) -> bool:
    target_tokens = set(_tokens(target))
    common = [
        token
        for token in _tokens(candidate)
        if token in target_tokens and len(token) >= _MIN_TOKEN_LENGTH
    ]
    return len(common) >= _MIN_SHARED_TOKENS


def fuzzy_match_model(available_models: Sequence[str], target_model: str) -> Optional[str]:
    """Find the first available model that plausibly is ``target_model``.

    Candidates are scanned in order and the first one satisfying any rule
    wins. Comparison is case-insensitive; the candidate is returned as given.

    Rules, per candidate:
        1. identical base names
        2. identical normalized base names
        3. one base name is a prefix of the other
        4. one base name is a substring of the other
        5. the normalized names share two or more tokens longer than two
           characters AND the providers are equal

    Only rule 5 looks at the provider, so a same-named model from another
    provider can match under rules 1-4.

    Args:
        available_models: Fully-qualified ids ("provider/model").
        target_model: Id to look for, usually "provider/model".

    Returns:
        The matching entry of ``available_models`` or None.
    """
    target_provider, target_base = split_model_id(target_model.lower())
    target_normalized = normalize_model_name(target_base)

    for model_id in available_models:
        provider, base = split_model_id(model_id.lower())

        if base == target_base:
            return model_id

        if normalize_model_name(base) == target_normalized:
            return model_id

        if base.startswith(target_base) or target_base.startswith(base):
            return model_id

        if target_base in base or base in target_base:
            return model_id

        if provider == target_provider and _shares_enough_tokens(
            normalize_model_name(base), target_normalized
        ):
            return model_id

    return None
