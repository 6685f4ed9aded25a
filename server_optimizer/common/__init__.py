"""
Common Utilities

Shared modules used across all services:
- config.py - Configuration dataclasses and tolerant loader
- exceptions.py - Custom exception classes
- logging_setup.py - Structured logging setup
- scheduler.py - Interval scheduler
"""

from .config import (
    OptimizerConfig,
    ServiceSettings,
    PERMISSION_ADMIN,
    PERMISSION_STATUS,
    PERMISSION_TOGGLE,
    ALL_PERMISSIONS,
    load_optimizer_config,
)
from .exceptions import (
    OptimizerError,
    ConfigError,
    HostError,
    ApplyError,
    ControlError,
    PermissionDeniedError,
    ServiceError,
)
from .logging_setup import (
    setup_logging,
    get_service_logger,
    configure_logging,
    log_fps_adjustment,
    log_command,
)
from .scheduler import ScheduledLoop

__all__ = [
    # Config
    "OptimizerConfig",
    "ServiceSettings",
    "PERMISSION_ADMIN",
    "PERMISSION_STATUS",
    "PERMISSION_TOGGLE",
    "ALL_PERMISSIONS",
    "load_optimizer_config",
    # Exceptions
    "OptimizerError",
    "ConfigError",
    "HostError",
    "ApplyError",
    "ControlError",
    "PermissionDeniedError",
    "ServiceError",
    # Logging
    "setup_logging",
    "get_service_logger",
    "configure_logging",
    "log_fps_adjustment",
    "log_command",
    # Scheduling
    "ScheduledLoop",
]
