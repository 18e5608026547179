"""
Configuration loader for Brand Visibility.

This module loads YAML configuration files and validates them with Pydantic
models to create an AnalysisConfig.

Functions:
    load_config: Main entrypoint to load and validate brands.config.yaml
    format_validation_error: Render a Pydantic ValidationError as a bullet list
"""

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from brand_visibility.exceptions import (
    ConfigFileNotFoundError,
    ConfigValidationError,
)

from .schema import AnalysisConfig

logger = logging.getLogger(__name__)


def format_validation_error(error: ValidationError) -> str:
    """
    Format Pydantic validation errors as "  - loc: msg" lines.

    Example:
        >>> format_validation_error(e)
        '  - brands.0.name: Value error, Brand name cannot be empty'
    """
    lines = []
    for item in error.errors():
        loc = ".".join(str(x) for x in item["loc"])
        lines.append(f"  - {loc}: {item['msg']}")
    return "\n".join(lines)


def load_config(config_path: str | Path) -> AnalysisConfig:
    """
    Load and validate brands.config.yaml.

    This function:
    1. Loads YAML from the specified path
    2. Validates structure using the AnalysisConfig Pydantic model
    3. Returns the validated configuration

    Args:
        config_path: Path to brands.config.yaml file (relative or absolute)

    Returns:
        Validated AnalysisConfig

    Raises:
        ConfigFileNotFoundError: If config file doesn't exist at the specified path
        ConfigValidationError: If YAML is invalid or config validation fails

    Example:
        >>> config = load_config("examples/brands.config.yaml")
        >>> config.owner.name
        'Y Combinator'

    Security:
        - Uses yaml.safe_load() to prevent code injection
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise ConfigFileNotFoundError(f"Configuration file not found: {config_path}")

    try:
        with config_path.open(encoding="utf-8") as f:
            raw_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigValidationError(f"Invalid YAML syntax in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigValidationError(
            f"Failed to read configuration file {config_path}: {e}"
        ) from e

    if raw_config is None:
        raise ConfigValidationError(f"Configuration file is empty: {config_path}")

    if not isinstance(raw_config, dict):
        raise ConfigValidationError(
            f"Configuration root must be a mapping in {config_path}, "
            f"got: {type(raw_config).__name__}"
        )

    try:
        config = AnalysisConfig.model_validate(raw_config)
    except ValidationError as e:
        raise ConfigValidationError(
            f"Configuration validation failed in {config_path}:\n"
            + format_validation_error(e)
        ) from e

    logger.info(
        "Configuration loaded",
        extra={
            "context": {
                "path": str(config_path),
                "brands": len(config.brands),
                "owner": config.owner.name if config.owner else None,
            }
        },
    )

    return config
