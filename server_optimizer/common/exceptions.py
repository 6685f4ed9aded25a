"""
Custom Exception Classes for Server Optimizer

Hierarchical exception structure for error handling across services.
"""


class OptimizerError(Exception):
    """Base exception for all server optimizer errors"""

    def __init__(self, message: str, recoverable: bool = True):
        self.message = message
        self.recoverable = recoverable
        super().__init__(message)


class ConfigError(OptimizerError):
    """Configuration load/save errors"""

    def __init__(self, message: str, path: str | None = None, recoverable: bool = True):
        self.path = path
        super().__init__(f"Config Error: {message}", recoverable)


class HostError(OptimizerError):
    """Errors raised by the game server host adapter"""

    def __init__(self, message: str, recoverable: bool = True):
        super().__init__(f"Host Error: {message}", recoverable)


class ApplyError(HostError):
    """The host did not accept an fps.limit command"""

    def __init__(self, value: int, reason: str = "rejected"):
        self.value = value
        self.reason = reason
        super().__init__(f"fps.limit {value} {reason}", recoverable=True)


class ControlError(OptimizerError):
    """Control loop lifecycle errors"""

    def __init__(self, message: str, recoverable: bool = True):
        super().__init__(f"Control Error: {message}", recoverable)


class PermissionDeniedError(OptimizerError):
    """Command invoked without the required permission"""

    def __init__(self, permission: str, member_id: str | None = None):
        self.permission = permission
        self.member_id = member_id
        super().__init__(
            f"{member_id or 'console'} lacks permission {permission}",
            recoverable=True,
        )


class ServiceError(OptimizerError):
    """Service lifecycle errors"""

    def __init__(self, message: str, service_name: str, recoverable: bool = True):
        self.service_name = service_name
        super().__init__(f"Service [{service_name}]: {message}", recoverable)
