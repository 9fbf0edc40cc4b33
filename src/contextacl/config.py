"""Configuration contract for contextacl.

Pydantic-validated settings shared by every ``Acl`` instance an embedding
application constructs. Direct os.environ/os.getenv usage is confined to
``load_config_from_env``; everything else receives an ``AclConfig``.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, ValidationError, field_validator

from .exceptions import ConfigurationError


class LogLevel(str, Enum):
    """Standard log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class AclConfig(BaseModel):
    """Settings for an access control list instance.

    Attributes:
        name: Instance name attached to every log record of this ACL.
        log_level: Logging level applied by ``setup_logging``.
        log_json: Use JSON log format (default: plain text).
        log_decisions: Log every ``is_allowed`` verdict at INFO instead of DEBUG.
        delete_cascade: Default mode of ``Acl.delete_group`` when the caller
            does not choose one. False means restricted delete.
    """

    name: str = Field(
        default="default",
        min_length=1,
        description="Instance name used in log records",
    )
    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Logging level",
    )
    log_json: bool = Field(
        default=False,
        description="Use JSON log format (default: plain text)",
    )
    log_decisions: bool = Field(
        default=False,
        description="Log each access decision at INFO level",
    )
    delete_cascade: bool = Field(
        default=False,
        description="Cascade group deletion to descendants by default",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str | LogLevel) -> LogLevel:
        """Convert string to LogLevel enum."""
        if isinstance(v, LogLevel):
            return v
        if isinstance(v, str):
            try:
                return LogLevel[v.upper()]
            except KeyError:
                raise ValueError(f"Invalid log level: {v}. Must be one of {[e.value for e in LogLevel]}")
        raise ValueError(f"Log level must be string or LogLevel enum, got {type(v)}")

    model_config = {
        "use_enum_values": True,
        "extra": "forbid",
    }


_TRUTHY = ("true", "1", "yes", "on")


def load_config_from_env() -> AclConfig:
    """Load configuration from environment variables.

    Environment variables:
    - ACL_NAME: Instance name (default: "default")
    - LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - LOG_JSON: Use JSON log format (true/false, default: false)
    - ACL_LOG_DECISIONS: Log each decision at INFO (true/false)
    - ACL_DELETE_CASCADE: Cascade group deletion by default (true/false)

    Returns:
        AclConfig instance with values from environment or defaults.

    Raises:
        ConfigurationError: A variable holds an invalid value.
    """
    import os

    try:
        return AclConfig(
            name=os.getenv("ACL_NAME", "default"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_json=os.getenv("LOG_JSON", "false").lower() in _TRUTHY,
            log_decisions=os.getenv("ACL_LOG_DECISIONS", "false").lower() in _TRUTHY,
            delete_cascade=os.getenv("ACL_DELETE_CASCADE", "false").lower() in _TRUTHY,
        )
    except ValidationError as e:
        raise ConfigurationError(f"Invalid ACL configuration: {e}") from e


__all__ = [
    "AclConfig",
    "LogLevel",
    "load_config_from_env",
]
