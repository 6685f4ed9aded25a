"""
Commands Service - chat and console commands

Responsibilities:
- Check permissions before anything reaches the control loop
- Status, toggle and help commands with their aliases
"""

from .handlers import CommandHandler
from .permissions import PermissionRegistry, PERMISSION_DESCRIPTIONS

__all__ = ["CommandHandler", "PermissionRegistry", "PERMISSION_DESCRIPTIONS"]
