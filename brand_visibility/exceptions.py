"""
Custom exceptions for Brand Visibility.

The analysis core (normalizer, matcher, citation handling, aggregation,
deduplication) never raises on bad data; it returns safe defaults instead.
These exceptions belong to the outer layers: configuration loading and the
CLI's input readers. All inherit from BrandVisibilityError for consistent
catching.

Exception Hierarchy:
    BrandVisibilityError (base)
    ├── ConfigurationError
    │   ├── ConfigFileNotFoundError
    │   └── ConfigValidationError
    └── InputFileError

Usage:
    from brand_visibility.exceptions import ConfigurationError

    try:
        config = load_config(path)
    except ConfigFileNotFoundError as e:
        logger.error(f"Config file not found: {e}")
        raise typer.Exit(1)
"""


class BrandVisibilityError(Exception):
    """
    Base exception for all Brand Visibility errors.

    Example:
        try:
            config = load_config(path)
        except BrandVisibilityError as e:
            logger.error(f"Application error: {e}")
    """

    pass


# ============================================================================
# Configuration Errors
# ============================================================================


class ConfigurationError(BrandVisibilityError):
    """
    Base class for configuration-related errors.

    Raised when configuration loading, parsing, or validation fails.
    Should be caught and result in exit code 1 (configuration error).
    """

    pass


class ConfigFileNotFoundError(ConfigurationError):
    """
    Configuration file does not exist at the specified path.

    Example:
        raise ConfigFileNotFoundError("/path/to/brands.config.yaml")
    """

    pass


class ConfigValidationError(ConfigurationError):
    """
    Configuration file is invalid (YAML syntax or schema validation failed).

    Should include details about which field(s) failed validation.

    Example:
        raise ConfigValidationError("  - brands: Brand names must be unique")
    """

    pass


# ============================================================================
# Input Errors
# ============================================================================


class InputFileError(BrandVisibilityError):
    """
    A responses or prompts file could not be read or has an unsupported shape.

    Should be caught and result in exit code 2 (input error).

    Example:
        raise InputFileError("responses.json must contain a JSON list")
    """

    pass
