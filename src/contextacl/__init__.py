from .acl import (
    AccessDecision,
    Acl,
    Assertion,
    DecisionReason,
    EntityId,
    Group,
    GroupHierarchy,
    Permission,
    Service,
    User,
)
from .config import AclConfig, LogLevel, load_config_from_env
from .exceptions import (
    AclError,
    ConfigurationError,
    DuplicateUserError,
    DuplicateServiceError,
    HasDependentsError,
    HierarchyError,
    InvalidParentError,
    TypeMismatchError,
    UnknownGroupError,
    UnknownPermissionError,
    UnknownServiceError,
    UnknownUserError,
)
from .logging import (
    AclFormatter,
    AclLoggerAdapter,
    get_acl_logger,
    safe_preview,
    setup_logging,
)

__version__ = "0.1.0"

__all__ = [
    'AccessDecision',
    'Acl',
    'Assertion',
    'DecisionReason',
    'EntityId',
    'Group',
    'GroupHierarchy',
    'Permission',
    'Service',
    'User',
    'AclConfig',
    'LogLevel',
    'load_config_from_env',
    'AclError',
    'ConfigurationError',
    'DuplicateUserError',
    'DuplicateServiceError',
    'HasDependentsError',
    'HierarchyError',
    'InvalidParentError',
    'TypeMismatchError',
    'UnknownGroupError',
    'UnknownPermissionError',
    'UnknownServiceError',
    'UnknownUserError',
    'AclFormatter',
    'AclLoggerAdapter',
    'get_acl_logger',
    'safe_preview',
    'setup_logging',
]
