"""
Simulator - virtual game server and scripted load scenarios
"""

from .scenarios import SCENARIOS, ScenarioStep, get_scenario, run_scenario
from .virtual_server import VirtualServer

__all__ = ["VirtualServer", "ScenarioStep", "SCENARIOS", "get_scenario", "run_scenario"]
