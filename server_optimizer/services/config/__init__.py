"""
Config Service - YAML persistence

Responsibilities:
- Load configuration with per-field fallback to defaults
- Write defaults when no configuration exists
- Persist the enabled flag after a toggle
"""

from .store import ConfigStore, DEFAULT_CONFIG_PATH
from .validator import ConfigValidator

__all__ = ["ConfigStore", "ConfigValidator", "DEFAULT_CONFIG_PATH"]
