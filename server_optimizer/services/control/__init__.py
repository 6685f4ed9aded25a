"""
Control Service - dynamic FPS control loop

Responsibilities:
- Compute the target FPS from the connected player count
- Evaluate on a fixed interval and on every join/leave
- Apply and notify only when the target changes
- Enable/disable toggle with max_fps restore
"""

from .policy import compute_target
from .state import ControlState, LoopState, StatusSnapshot
from .loop import ControlLoop

__all__ = [
    "compute_target",
    "ControlState",
    "LoopState",
    "StatusSnapshot",
    "ControlLoop",
]
