"""
Configuration module for otlp_transform.

The encoders are pure functions and take every option as an argument.
This module only supplies the defaults used when a caller leaves an
option out, supporting both environment variables and programmatic
configuration.

Configuration Priority (highest to lowest):
    1. Explicit keyword argument on the encoding call
    2. Programmatic configuration via configure()
    3. Environment variables
    4. Default values

Environment Variables:
    OTLP_TRANSFORM_ID_ENCODING: "hex" or "base64" (default: hex)
    OTLP_TRANSFORM_ERROR_POLICY: "raise" or "drop" (default: raise)
    OTLP_TRANSFORM_LOG_LEVEL: Logging verbosity (default: WARNING)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

__all__ = [
    "LogLevel",
    "IdEncoding",
    "ErrorPolicy",
    "TransformConfig",
    "get_config",
    "configure",
    "reset_config",
    "resolve_id_encoding",
    "resolve_error_policy",
]


class LogLevel(str, Enum):
    """Log level enum matching Python logging levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class IdEncoding(str, Enum):
    """Text encoding applied to trace and span ids on the wire."""
    HEX = "hex"
    BASE64 = "base64"


class ErrorPolicy(str, Enum):
    """
    What to do when a single attribute, event or link cannot be encoded.

    RAISE propagates the error. DROP omits the offending item and counts
    it in the matching dropped*Count field.
    """
    RAISE = "raise"
    DROP = "drop"


def _get_enum_env(
    key: str,
    enum_cls: type[Enum],
    default: Enum,
    normalize: Callable[[str], str] = str.lower,
) -> Any:
    """Parse an enum member from an environment variable."""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return enum_cls(normalize(value.strip()))
    except ValueError:
        logging.getLogger("otlp_transform.config").warning(
            "Ignoring invalid %s=%r, using %s", key, value, default.value
        )
        return default


@dataclass
class TransformConfig:
    """
    Defaults for otlp_transform encoders.

    Attributes:
        id_encoding: Encoding used for trace/span ids when a call does not
            choose one.
        error_policy: Whether malformed attributes, events and links raise
            or are dropped and counted.
        log_level: Level applied to the ``otlp_transform`` logger.

    Examples:
        !!! example "Configure via environment"
            ```bash
            export OTLP_TRANSFORM_ID_ENCODING=base64
            ```

        !!! example "Configure programmatically"
            ```python
            from otlp_transform import configure

            configure(id_encoding="base64", error_policy="drop")
            ```
    """

    id_encoding: IdEncoding = IdEncoding.HEX
    error_policy: ErrorPolicy = ErrorPolicy.RAISE
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> TransformConfig:
        """Create configuration from environment variables."""
        return cls(
            id_encoding=_get_enum_env("OTLP_TRANSFORM_ID_ENCODING", IdEncoding, IdEncoding.HEX),
            error_policy=_get_enum_env("OTLP_TRANSFORM_ERROR_POLICY", ErrorPolicy, ErrorPolicy.RAISE),
            log_level=_get_enum_env(
                "OTLP_TRANSFORM_LOG_LEVEL", LogLevel, LogLevel.WARNING, str.upper
            ).value,
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ValueError: If any configuration value is invalid
        """
        if not isinstance(self.id_encoding, IdEncoding):
            raise ValueError(f"id_encoding must be an IdEncoding, got {self.id_encoding!r}")

        if not isinstance(self.error_policy, ErrorPolicy):
            raise ValueError(f"error_policy must be an ErrorPolicy, got {self.error_policy!r}")

        if self.log_level not in LogLevel.__members__:
            raise ValueError(f"log_level must be one of {list(LogLevel.__members__)}, got {self.log_level!r}")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging/debugging."""
        return {
            'id_encoding': self.id_encoding.value,
            'error_policy': self.error_policy.value,
            'log_level': self.log_level,
        }


# Global configuration instance
_config: TransformConfig | None = None


def get_config() -> TransformConfig:
    """
    Get the current configuration.

    If not explicitly configured, loads from environment variables.

    Returns:
        Current TransformConfig instance
    """
    global _config
    if _config is None:
        _config = TransformConfig.from_env()
    return _config


def configure(
    *,
    id_encoding: IdEncoding | str | None = None,
    error_policy: ErrorPolicy | str | None = None,
    log_level: str | None = None,
) -> TransformConfig:
    """
    Configure otlp_transform defaults programmatically.

    Args:
        id_encoding: Default id encoding ("hex" or "base64")
        error_policy: Default error policy ("raise" or "drop")
        log_level: Logging level for the otlp_transform logger

    Returns:
        The updated TransformConfig instance

    Raises:
        ValueError: If a value is not recognised

    Example:
        >>> from otlp_transform import configure
        >>> configure(id_encoding="base64")
    """
    global _config

    # Start with current config (or env defaults)
    config = get_config()

    if id_encoding is not None:
        config.id_encoding = resolve_id_encoding(id_encoding)
    if error_policy is not None:
        config.error_policy = resolve_error_policy(error_policy)
    if log_level is not None:
        config.log_level = log_level.upper()

    config.validate()

    logging.getLogger("otlp_transform").setLevel(getattr(logging, config.log_level))

    _config = config
    return config


def reset_config() -> None:
    """
    Reset configuration to defaults.

    Primarily for testing purposes.
    """
    global _config
    _config = None


def resolve_id_encoding(value: IdEncoding | str | None = None) -> IdEncoding:
    """
    Normalise an id encoding argument.

    ``None`` selects the configured default; strings are matched
    case-insensitively against the enum values.
    """
    if value is None:
        return get_config().id_encoding
    try:
        return IdEncoding(value.lower())
    except (AttributeError, ValueError):
        raise ValueError(
            f"id_encoding must be one of {[e.value for e in IdEncoding]}, got {value!r}"
        ) from None


def resolve_error_policy(value: ErrorPolicy | str | None = None) -> ErrorPolicy:
    """Normalise an error policy argument (``None`` selects the default)."""
    if value is None:
        return get_config().error_policy
    try:
        return ErrorPolicy(value.lower())
    except (AttributeError, ValueError):
        raise ValueError(
            f"error_policy must be one of {[e.value for e in ErrorPolicy]}, got {value!r}"
        ) from None
