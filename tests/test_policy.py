"""
Tests for the FPS policy.
"""

import pytest

from server_optimizer.common.config import OptimizerConfig
from server_optimizer.services.control import compute_target


@pytest.mark.parametrize(
    "load, expected",
    [(0, 9), (1, 27), (2, 29), (10, 41), (22, 59), (23, 60), (40, 60), (1000, 60)],
)
def test_default_tuning(load, expected):
    assert compute_target(load, OptimizerConfig()) == expected


def test_negative_load_is_idle():
    assert compute_target(-3, OptimizerConfig()) == 9


def test_monotonic_in_load():
    config = OptimizerConfig()
    targets = [compute_target(n, config) for n in range(1, 100)]
    assert targets == sorted(targets)
    assert all(t <= config.max_fps for t in targets)


def test_idle_independent_of_other_settings():
    config = OptimizerConfig(idle_fps=5, base_fps=100, max_fps=200, fps_increment_per_player=10)
    assert compute_target(0, config) == 5


def test_max_below_base_clamps_to_max():
    config = OptimizerConfig(base_fps=50, max_fps=40)
    assert compute_target(1, config) == 40


def test_fractional_increment_floors():
    config = OptimizerConfig(base_fps=20, max_fps=100, fps_increment_per_player=0.3)
    assert compute_target(3, config) == 20
    assert compute_target(4, config) == 21
