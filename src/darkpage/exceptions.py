"""Custom exceptions for darkpage.

The engine itself never raises: unparseable colors and missing snapshots are
"no change". These errors belong to the edges (page files, config, messages).
"""


class DarkpageError(Exception):
    """Base exception for all darkpage errors."""

    pass


class ValidationError(DarkpageError):
    """Raised when a page description or control message fails validation."""

    pass


class ParseError(DarkpageError):
    """Raised when YAML parsing fails."""

    pass


class ConfigError(DarkpageError):
    """Raised when a configuration file is invalid."""

    pass
