"""
YAML override file loader and validator.

Lets a build keep its publish settings in a file next to the build config
instead of passing them in code. The loaded mapping is handed to
resolve_config() as caller overrides.

Example config file (publish.yaml):
    ```yaml
    prefix: static/storefront
    retry: 2
    exist_check: true
    use_gzip: 6
    exclude: '.*\\.(html|map)$'
    options:
      headers:
        Cache-Control: max-age=31536000
    auth:
      bucket: web-assets
      region: oss-cn-hangzhou
    ```

Usage:
    >>> from asset_publisher import BuildPlugin
    >>> plugin = BuildPlugin({"retry": 1}, config_path="publish.yaml")

    or, step by step:

    >>> overrides = load_config("publish.yaml")
    >>> errors = validate_config(overrides)
    >>> if not errors:
    ...     config = resolve_config(overrides)
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import yaml

from asset_publisher.utils.config import (
    AUTH_KEYS,
    CONFIG_KEYS,
    SUPPORTED_BACKENDS,
    validate_use_gzip,
)
from asset_publisher.utils.logging import get_logger

logger = get_logger(__name__)

BOOL_KEYS = ["exist_check", "enable_log", "ignore_errors", "remove_mode"]
STRING_KEYS = ["oss_base_dir", "project_name", "prefix", "env_prefix"]


@dataclass
class ConfigError:
    """Validation error in an override file."""

    field: str
    message: str
    value: Optional[Any] = None

    def __str__(self) -> str:
        if self.value is not None:
            return f"{self.field}: {self.message} (got: {self.value})"
        return f"{self.field}: {self.message}"


def load_config(config_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load publish overrides from a YAML file.

    Args:
        config_path: Path to YAML file

    Returns:
        Dictionary of overrides

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the path is not a file, or the file is empty or not
            a mapping
        yaml.YAMLError: If the YAML is malformed
    """
    path = Path(config_path)
    logger.info(f"Loading publish overrides from: {path}")

    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    if not path.is_file():
        raise ValueError(f"Configuration path is not a file: {path}")

    try:
        with open(path, "r") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse YAML: {e}")
        raise

    if config is None:
        raise ValueError("Configuration file is empty")

    if not isinstance(config, dict):
        raise ValueError(
            f"Configuration file must contain a mapping, got {type(config).__name__}"
        )

    return dict(config)


def validate_config(config: Dict[str, Any]) -> List[ConfigError]:
    """
    Validate an override mapping before it is resolved.

    Args:
        config: Overrides dictionary

    Returns:
        List of validation errors (empty if valid)
    """
    errors: List[ConfigError] = []

    for key in sorted(set(config) - CONFIG_KEYS):
        errors.append(ConfigError(key, "Unknown configuration key"))

    for key in BOOL_KEYS:
        if key in config and not isinstance(config[key], bool):
            errors.append(ConfigError(key, "Must be a boolean", config[key]))

    for key in STRING_KEYS:
        if key in config and not isinstance(config[key], str):
            errors.append(ConfigError(key, "Must be a string", config[key]))

    if "retry" in config:
        retry = config["retry"]
        if isinstance(retry, bool) or not isinstance(retry, int):
            errors.append(ConfigError("retry", "Must be an integer", retry))
        elif retry < 0:
            errors.append(ConfigError("retry", "Must not be negative", retry))

    if "retry_delay" in config:
        delay = config["retry_delay"]
        if isinstance(delay, bool) or not isinstance(delay, (int, float)) or delay < 0:
            errors.append(ConfigError("retry_delay", "Must be a non-negative number", delay))

    if "use_gzip" in config:
        try:
            validate_use_gzip(config["use_gzip"])
        except ValueError as e:
            errors.append(ConfigError("use_gzip", str(e)))

    if "exclude" in config:
        try:
            re.compile(config["exclude"])
        except (re.error, TypeError) as e:
            errors.append(ConfigError("exclude", f"Invalid pattern: {e}", config["exclude"]))

    if "backend" in config and config["backend"] not in SUPPORTED_BACKENDS:
        errors.append(
            ConfigError(
                "backend",
                f"Invalid backend (valid: {SUPPORTED_BACKENDS})",
                config["backend"],
            )
        )

    if "options" in config and config["options"] is not None:
        options = config["options"]
        if not isinstance(options, dict):
            errors.append(ConfigError("options", "Must be a mapping", type(options).__name__))
        elif "headers" in options and not isinstance(options["headers"], dict):
            errors.append(ConfigError("options.headers", "Must be a mapping"))

    if "auth" in config:
        errors.extend(_validate_auth(config["auth"]))

    if errors:
        logger.warning(f"Configuration validation failed with {len(errors)} errors")
    else:
        logger.info("Configuration validation passed")

    return errors


def _validate_auth(auth: Any) -> List[ConfigError]:
    """Validate the nested auth section."""
    errors: List[ConfigError] = []

    if not isinstance(auth, dict):
        errors.append(ConfigError("auth", "Must be a mapping", type(auth).__name__))
        return errors

    for key, value in auth.items():
        if key not in AUTH_KEYS:
            errors.append(ConfigError(f"auth.{key}", f"Unknown key (valid: {sorted(AUTH_KEYS)})"))
        elif not isinstance(value, str):
            errors.append(ConfigError(f"auth.{key}", "Must be a string", type(value).__name__))

    return errors


def load_overrides(
    config_path: Union[str, Path],
    overrides: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Load and validate an override file, then layer explicit overrides on top.

    Top-level keys from ``overrides`` replace the file's; ``auth`` is merged
    field by field.

    Args:
        config_path: Path to YAML file
        overrides: Caller-supplied overrides (take precedence over the file)

    Returns:
        Merged overrides, ready for resolve_config()

    Raises:
        ValueError: If the file fails validation
    """
    file_overrides = load_config(config_path)
    errors = validate_config(file_overrides)
    if errors:
        details = "; ".join(str(error) for error in errors)
        raise ValueError(f"Invalid configuration file {config_path}: {details}")

    merged = {**file_overrides, **(overrides or {})}
    file_auth = file_overrides.get("auth")
    explicit_auth = (overrides or {}).get("auth")
    if isinstance(file_auth, Mapping) and isinstance(explicit_auth, Mapping):
        merged["auth"] = {**file_auth, **explicit_auth}
    return merged
