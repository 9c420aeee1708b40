"""Custom exception hierarchy for ContextGuard.

The analysis pipeline itself never raises for any source text: unreadable
constructs simply produce fewer findings. These exceptions cover the
boundary around it, where settings, rule catalogs and caller input are
validated before an analysis starts.
"""


class ContextGuardError(Exception):
    """Base exception for all ContextGuard errors.

    All custom exceptions should inherit from this class to allow
    callers to catch all ContextGuard-specific errors with a single
    except clause when appropriate.
    """
    pass


# =============================================================================
# Configuration Errors
# =============================================================================

class ConfigurationError(ContextGuardError):
    """Base exception for configuration-related errors."""
    pass


class InvalidConfigError(ConfigurationError):
    """A setting value could not be parsed or is out of range."""

    def __init__(self, message: str, setting: str | None = None):
        super().__init__(message)
        self.setting = setting


# =============================================================================
# Catalog Errors
# =============================================================================

class CatalogError(ContextGuardError):
    """Base exception for rule catalog errors."""
    pass


class InvalidPatternError(CatalogError):
    """A catalog rule carries a regular expression that does not compile."""

    def __init__(self, message: str, rule_id: str | None = None, pattern: str | None = None):
        super().__init__(message)
        self.rule_id = rule_id
        self.pattern = pattern


# =============================================================================
# Input Errors
# =============================================================================

class InputError(ContextGuardError):
    """Base exception for problems obtaining the text to analyze."""
    pass


class SourceReadError(InputError):
    """The source file could not be read."""
    pass


class SourceTooLargeError(InputError):
    """Source exceeds maximum allowed size for analysis."""

    def __init__(self, message: str, size: int | None = None, limit: int | None = None):
        super().__init__(message)
        self.size = size
        self.limit = limit
