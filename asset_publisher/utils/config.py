"""
Publish configuration resolver.

Merges built-in defaults, environment variables (optionally loaded from a
.env file) and caller-supplied overrides into one immutable PublishConfig.

Precedence, lowest to highest:
    defaults -> environment -> overrides

Top-level keys are replaced wholesale. The nested ``auth`` mapping is merged
field by field in the same order.

Example usage:
    >>> from asset_publisher.utils.config import resolve_config
    >>> config = resolve_config({"prefix": "static/web", "retry": 2})
    >>> config.prefix
    'static/web'
"""

import dataclasses
import os
import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Pattern, Union

from dotenv import find_dotenv, load_dotenv

from asset_publisher.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_EXCLUDE = r".*\.html$"
SUPPORTED_BACKENDS = ["oss", "gcs"]


@dataclass(frozen=True)
class AuthConfig:
    """
    Object-store credentials and location.

    Attributes:
        access_key_id: Access key ID
        access_key_secret: Access key secret (hidden from repr)
        bucket: Bucket name
        region: Store region, e.g. "oss-cn-hangzhou"
        endpoint: Explicit endpoint URL (derived from region when empty)
    """

    access_key_id: str = ""
    access_key_secret: str = field(default="", repr=False)
    bucket: str = ""
    region: str = ""
    endpoint: str = ""


@dataclass(frozen=True)
class PublishConfig:
    """
    Fully-resolved publish configuration. Read-only for the whole run.

    Attributes:
        auth: Store credentials
        retry: Retries after the first upload attempt (>= 0)
        exist_check: Skip assets whose remote key already exists
        oss_base_dir: Base directory used when no explicit prefix is given
        project_name: Project directory under oss_base_dir
        prefix: Explicit remote prefix; overrides oss_base_dir/project_name
        exclude: Asset names matching this pattern are never published
        enable_log: Emit progress messages at INFO instead of DEBUG
        ignore_errors: Log terminal errors instead of failing the build
        remove_mode: Drop published assets from the build's output collection
        use_gzip: False, True, or a gzip compression level (0-9)
        env_prefix: Prefix for environment variable names
        options: Static transport options passed to every write
        backend: Store implementation, "oss" (S3-compatible) or "gcs"
        retry_delay: Base delay between retries in seconds (0 = immediate)
    """

    auth: AuthConfig = field(default_factory=AuthConfig)
    retry: int = 3
    exist_check: bool = True
    oss_base_dir: str = "auto_upload_ci"
    project_name: str = ""
    prefix: str = ""
    exclude: Pattern[str] = field(default_factory=lambda: re.compile(DEFAULT_EXCLUDE))
    enable_log: bool = False
    ignore_errors: bool = False
    remove_mode: bool = True
    use_gzip: Union[bool, int] = True
    env_prefix: str = ""
    options: Optional[Mapping[str, Any]] = None
    backend: str = "oss"
    retry_delay: float = 0.0


CONFIG_KEYS = frozenset(f.name for f in dataclasses.fields(PublishConfig))
AUTH_KEYS = frozenset(f.name for f in dataclasses.fields(AuthConfig))

# Environment variable suffix -> auth field
_AUTH_ENV = {
    "ACCESS_KEY_ID": "access_key_id",
    "ACCESS_KEY_SECRET": "access_key_secret",
    "BUCKET": "bucket",
    "REGION": "region",
}

# Environment variable suffix -> (config field, is boolean)
_CONFIG_ENV = {
    "ENABLE_LOG": ("enable_log", True),
    "IGNORE_ERRORS": ("ignore_errors", True),
    "REMOVE_MODE": ("remove_mode", True),
    "OSS_BASE_DIR": ("oss_base_dir", False),
    "PREFIX": ("prefix", False),
}


def is_truthy(value: str) -> bool:
    """Environment booleans are true only for the exact literal "true"."""
    return value == "true"


def load_environment_config(
    env_prefix: str = "", environ: Optional[Mapping[str, str]] = None
) -> Dict[str, Any]:
    """
    Read configuration values from environment variables.

    Only variables that are set to a non-empty value contribute, so unset
    variables never shadow the built-in defaults.

    Args:
        env_prefix: Prefix prepended to every variable name
        environ: Mapping to read from (defaults to os.environ)

    Returns:
        Partial configuration dict; ``auth`` is a partial dict as well
    """
    if environ is None:
        environ = os.environ

    values: Dict[str, Any] = {}
    auth: Dict[str, str] = {}

    for suffix, auth_field in _AUTH_ENV.items():
        value = environ.get(f"{env_prefix}{suffix}", "")
        if value:
            auth[auth_field] = value

    for suffix, (config_field, is_bool) in _CONFIG_ENV.items():
        value = environ.get(f"{env_prefix}{suffix}", "")
        if value:
            values[config_field] = is_truthy(value) if is_bool else value

    if auth:
        values["auth"] = auth
    return values


def validate_retry(value: Any) -> int:
    """Coerce the retry count to a non-negative integer (0 when invalid)."""
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        if value != 0:
            logger.debug(f"Invalid retry value {value!r}, using 0")
        return 0
    return value


def validate_use_gzip(value: Any) -> Union[bool, int]:
    """
    Normalize ``use_gzip`` to a bool or an int compression level.

    Integral floats (``6.0``) become ints.

    Raises:
        ValueError: For a non-numeric value, a fractional level, or a level
            outside 0-9
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int):
        raise ValueError(f"use_gzip must be a boolean or a level 0-9, got {value!r}")
    if not 0 <= value <= 9:
        raise ValueError(f"use_gzip level must be between 0 and 9, got {value}")
    return value


def _auth_dict(value: Any) -> Dict[str, Any]:
    if value is None:
        return {}
    if isinstance(value, AuthConfig):
        return dataclasses.asdict(value)
    if not isinstance(value, Mapping):
        raise ValueError(f"auth must be a mapping, got {type(value).__name__}")
    unknown = set(value) - AUTH_KEYS
    if unknown:
        raise ValueError(f"Unknown auth keys: {sorted(unknown)}")
    return dict(value)


def _compile_exclude(value: Union[str, Pattern[str], None]) -> Pattern[str]:
    if value is None:
        return re.compile(DEFAULT_EXCLUDE)
    if isinstance(value, str):
        return re.compile(value)
    return value


def resolve_config(
    overrides: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> PublishConfig:
    """
    Build the PublishConfig for one pipeline instance.

    Args:
        overrides: Caller-supplied settings (highest precedence)
        environ: Environment mapping; when omitted, a .env file in the working
            directory is loaded into os.environ (never overriding real
            variables) and os.environ is used

    Returns:
        Immutable PublishConfig

    Raises:
        ValueError: If overrides contain unknown keys or a malformed value
    """
    overrides = dict(overrides or {})
    unknown = set(overrides) - CONFIG_KEYS
    if unknown:
        raise ValueError(f"Unknown configuration keys: {sorted(unknown)}")

    if environ is None:
        dotenv_path = find_dotenv(usecwd=True)
        if dotenv_path:
            load_dotenv(dotenv_path, override=False)
        environ = os.environ

    env_values = load_environment_config(overrides.get("env_prefix") or "", environ)

    defaults = {f.name: getattr(PublishConfig(), f.name) for f in dataclasses.fields(PublishConfig)}
    merged: Dict[str, Any] = {**defaults, **env_values, **overrides}

    merged["auth"] = AuthConfig(
        **{
            **dataclasses.asdict(AuthConfig()),
            **_auth_dict(env_values.get("auth")),
            **_auth_dict(overrides.get("auth")),
        }
    )
    merged["retry"] = validate_retry(merged["retry"])
    merged["use_gzip"] = validate_use_gzip(merged["use_gzip"])
    merged["exclude"] = _compile_exclude(merged["exclude"])
    merged["env_prefix"] = merged["env_prefix"] or ""

    options = merged["options"]
    if options is not None and not isinstance(options, Mapping):
        logger.warning(f"Ignoring transport options of type {type(options).__name__}")
        options = None
    merged["options"] = MappingProxyType(dict(options)) if options is not None else None

    if merged["backend"] not in SUPPORTED_BACKENDS:
        raise ValueError(
            f"Unsupported backend {merged['backend']!r} (valid: {SUPPORTED_BACKENDS})"
        )
    merged["retry_delay"] = max(float(merged["retry_delay"] or 0.0), 0.0)

    config = PublishConfig(**merged)
    if config.enable_log:
        logger.info(f"Final configuration: {config}")
    return config
