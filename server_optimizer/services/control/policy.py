"""
FPS Policy

Maps the connected player count to a target fps.limit.

Algorithm:
    players == 0:  target = idle_fps
    players >= 1:  target = min(base_fps + floor(players * increment), max_fps)

The idle branch is deliberately separate from the linear formula so an
empty server can run far below base_fps.
"""

import math

from server_optimizer.common.config import OptimizerConfig


def compute_target(load: int, config: OptimizerConfig) -> int:
    """
    Compute the target FPS for a player count.

    Pure and total: negative load is treated as an empty server.

    Args:
        load: Connected player count
        config: Current configuration

    Returns:
        Target fps.limit value
    """
    if load <= 0:
        return config.idle_fps

    scaled = config.base_fps + math.floor(load * config.fps_increment_per_player)
    return min(scaled, config.max_fps)
