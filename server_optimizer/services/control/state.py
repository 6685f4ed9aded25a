"""
Control State Dataclasses

Data structures for control loop state.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any


class LoopState(str, Enum):
    """Control loop lifecycle states"""
    STOPPED = "stopped"
    RUNNING_ENABLED = "running_enabled"
    RUNNING_DISABLED = "running_disabled"


@dataclass
class ControlState:
    """Mutable state owned by the control loop"""
    # None until the first evaluation applies a value
    current_value: int | None = None
    enabled: bool = True
    last_load: int = 0

    # Bookkeeping
    evaluation_count: int = 0
    change_count: int = 0
    started_at: datetime | None = None
    last_evaluated_at: datetime | None = None
    last_change_at: datetime | None = None

    # Result of the last apply
    write_success: bool = True
    write_error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for the state endpoint"""
        return {
            "current_value": self.current_value,
            "enabled": self.enabled,
            "last_load": self.last_load,
            "evaluation_count": self.evaluation_count,
            "change_count": self.change_count,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "last_evaluated_at": self.last_evaluated_at.isoformat() if self.last_evaluated_at else None,
            "last_change_at": self.last_change_at.isoformat() if self.last_change_at else None,
            "write_success": self.write_success,
            "write_error": self.write_error,
        }


@dataclass(frozen=True)
class StatusSnapshot:
    """Read-only view handed to command handlers"""
    current_value: int | None
    enabled: bool
    current_load: int
    state: LoopState

    def to_dict(self) -> dict[str, Any]:
        return {
            "current_value": self.current_value,
            "enabled": self.enabled,
            "current_load": self.current_load,
            "state": self.state.value,
        }
