"""
Configuration Store

YAML persistence for OptimizerConfig. A missing file is created with the
defaults; an unreadable one is replaced by the defaults.
"""

import os
from pathlib import Path

import yaml

from server_optimizer.common.config import OptimizerConfig, load_optimizer_config
from server_optimizer.common.exceptions import ConfigError
from server_optimizer.common.logging_setup import get_service_logger

from .validator import ConfigValidator

logger = get_service_logger("config.store")

DEFAULT_CONFIG_PATH = "config.yaml"


class ConfigStore:
    """Loads and saves the optimizer configuration file"""

    def __init__(self, path: Path | str = DEFAULT_CONFIG_PATH):
        self.path = Path(path)
        self.validator = ConfigValidator()

    def load(self) -> OptimizerConfig:
        """
        Load configuration from disk.

        Never raises: invalid fields fall back to their defaults, and a
        missing or unparseable file is replaced with the defaults.

        Returns:
            Loaded configuration
        """
        if not self.path.exists():
            logger.warning(f"Creating default configuration at {self.path}")
            return self._write_defaults()

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Error loading configuration: {e}")
            return self._write_defaults()

        if data is None:
            logger.warning(f"Configuration file {self.path} is empty")
            return self._write_defaults()

        if not isinstance(data, dict):
            logger.error(f"Configuration root must be a mapping, got {type(data).__name__}")
            return self._write_defaults()

        self.validator.validate(data)
        config = load_optimizer_config(data)

        logger.info(
            f"Configuration loaded from {self.path} "
            f"(enabled={config.enabled}, interval={config.check_interval_s}s)"
        )
        return config

    def save(self, config: OptimizerConfig) -> None:
        """
        Write configuration to disk atomically.

        Raises:
            ConfigError: If the file cannot be written
        """
        temp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            if self.path.parent and not self.path.parent.exists():
                self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_path, "w", encoding="utf-8") as f:
                yaml.safe_dump(
                    config.to_dict(),
                    f,
                    sort_keys=False,
                    allow_unicode=True,
                    default_flow_style=False,
                )
            os.replace(temp_path, self.path)
        except OSError as e:
            raise ConfigError(f"Cannot write configuration: {e}", path=str(self.path)) from e

        logger.debug(f"Configuration saved to {self.path}")

    def _write_defaults(self) -> OptimizerConfig:
        config = OptimizerConfig()
        try:
            self.save(config)
        except ConfigError as e:
            logger.error(str(e))
        return config
