"""Exception hierarchy for omo-config.

The resolution core never raises for missing data; these exceptions are
reserved for the boundaries (catalog loading, profile files, categories).
"""


class OmoConfigError(Exception):
    """Base class for all omo-config errors surfaced to the CLI."""


class ConfigFileError(OmoConfigError):
    """A configuration file could not be read or written."""


class ModelCatalogError(OmoConfigError):
    """The external model catalog could not be loaded."""


class InvalidCategoryError(OmoConfigError, ValueError):
    """Raised when an unknown category is applied to an agent."""

    def __init__(self, category: str):
        self.category = category
        super().__init__(f"Invalid category: {category}")


class ProfileError(OmoConfigError):
    """Base class for configuration profile errors."""


class ProfileNotFoundError(ProfileError):
    """Raised when a named profile does not exist."""


class ProfileExistsError(ProfileError):
    """Raised when a profile would overwrite an existing one."""


class InvalidProfileNameError(ProfileError, ValueError):
    """Raised for profile names outside [a-z0-9-_]."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(
            "Invalid configuration name. Use only letters, numbers, hyphens, and underscores."
        )
