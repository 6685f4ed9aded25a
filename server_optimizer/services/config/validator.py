"""
Configuration Validator

Reports problems in a raw configuration mapping. The loader substitutes
defaults for bad fields; the validator only makes them visible.
"""

from numbers import Number
from typing import Any

from server_optimizer.common.config import ALL_PERMISSIONS, config_field_names
from server_optimizer.common.logging_setup import get_service_logger

logger = get_service_logger("config.validator")

FPS_FIELDS = ("idle_fps", "base_fps", "max_fps", "neutral_fps")
BOOL_FIELDS = (
    "enabled",
    "notify_on_change",
    "show_debug_messages",
    "force_initialization",
    "show_init_message",
)


def _is_number(value: Any) -> bool:
    return isinstance(value, Number) and not isinstance(value, bool)


class ConfigValidator:
    """Validates optimizer configuration"""

    def validate(self, config: dict[str, Any]) -> tuple[bool, list[str]]:
        """
        Validate configuration.

        Args:
            config: Configuration dictionary

        Returns:
            Tuple of (is_valid, list of error messages)
        """
        errors: list[str] = []

        errors.extend(self._validate_unknown_keys(config))
        errors.extend(self._validate_fps_settings(config))
        errors.extend(self._validate_timing(config))
        errors.extend(self._validate_flags(config))
        errors.extend(self._validate_permissions(config))

        is_valid = len(errors) == 0

        if not is_valid:
            logger.warning(
                f"Config validation failed: {len(errors)} errors",
                extra={"errors": errors},
            )
        else:
            logger.debug("Config validation passed")

        return is_valid, errors

    def _validate_unknown_keys(self, config: dict[str, Any]) -> list[str]:
        known = set(config_field_names())
        return [f"Unknown setting: {key}" for key in config if key not in known]

    def _validate_fps_settings(self, config: dict[str, Any]) -> list[str]:
        """FPS values must be non-negative numbers"""
        errors = []

        for name in FPS_FIELDS:
            if name not in config:
                continue
            value = config[name]
            if not _is_number(value):
                errors.append(f"Invalid {name}: must be a number")
            elif value < 0:
                errors.append(f"Invalid {name}: must be non-negative")
            elif isinstance(value, float) and not value.is_integer():
                errors.append(f"Invalid {name}: must be a whole number")

        increment = config.get("fps_increment_per_player")
        if increment is not None:
            if not _is_number(increment):
                errors.append("Invalid fps_increment_per_player: must be a number")
            elif increment < 0:
                errors.append("Invalid fps_increment_per_player: must be non-negative")

        # Expected, not enforced: the policy clamps to max_fps anyway
        base, maximum = config.get("base_fps"), config.get("max_fps")
        if _is_number(base) and _is_number(maximum) and maximum < base:
            logger.warning(f"max_fps ({maximum}) is below base_fps ({base})")

        return errors

    def _validate_timing(self, config: dict[str, Any]) -> list[str]:
        errors = []
        interval = config.get("check_interval_s")
        if interval is not None:
            if not _is_number(interval):
                errors.append("Invalid check_interval_s: must be a number")
            elif interval <= 0:
                errors.append("Invalid check_interval_s: must be > 0")
        return errors

    def _validate_flags(self, config: dict[str, Any]) -> list[str]:
        return [
            f"Invalid {name}: must be true or false"
            for name in BOOL_FIELDS
            if name in config and not isinstance(config[name], bool)
        ]

    def _validate_permissions(self, config: dict[str, Any]) -> list[str]:
        errors = []
        permissions = config.get("permissions")
        if permissions is None:
            return errors

        if not isinstance(permissions, dict):
            return ["Invalid permissions: must map member ids to permission lists"]

        for member_id, perms in permissions.items():
            if isinstance(perms, str):
                perms = [perms]
            if not isinstance(perms, list):
                errors.append(f"Invalid permissions for {member_id}: must be a list")
                continue
            for perm in perms:
                if perm not in ALL_PERMISSIONS:
                    errors.append(f"Unknown permission for {member_id}: {perm}")

        return errors
