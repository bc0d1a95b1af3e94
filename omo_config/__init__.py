import importlib.metadata

try:
    _detected_version = importlib.metadata.version("omo-config")
    __version__ = _detected_version if _detected_version else "0.0.0-dev"
except importlib.metadata.PackageNotFoundError:
    # Running from a source checkout
    __version__ = "0.0.0-dev"

from omo_config.core import (
    ModelResolver,
    Provenance,
    ResolutionResult,
    ValidationResult,
    fuzzy_match_model,
    resolve_model_pipeline,
    resolve_variant,
    validate_agent_model,
    validate_category_model,
)
from omo_config.settings import (
    CatalogSettings,
    PathSettings,
    Settings,
    clear_settings_cache,
    get_path_settings,
    get_settings,
)
from omo_config.user_config import UserConfig, load_user_config

__all__ = [
    "__version__",
    # Resolution
    "ModelResolver",
    "Provenance",
    "ResolutionResult",
    "ValidationResult",
    "fuzzy_match_model",
    "resolve_model_pipeline",
    "resolve_variant",
    "validate_agent_model",
    "validate_category_model",
    # Config
    "UserConfig",
    "load_user_config",
    # Settings
    "Settings",
    "PathSettings",
    "CatalogSettings",
    "get_settings",
    "get_path_settings",
    "clear_settings_cache",
]
