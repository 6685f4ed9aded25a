"""
Configuration Dataclasses

Type-safe configuration structures for the optimizer.
Configuration is persisted as YAML by the config store; a field that is
missing or invalid falls back to the compiled-in default below.
"""

from dataclasses import asdict, dataclass, field, fields
from typing import Any, Callable

from .logging_setup import get_service_logger

logger = get_service_logger("config")

# Permission names a member can be granted in the `permissions` section
PERMISSION_ADMIN = "serveroptimizer.admin"
PERMISSION_STATUS = "serveroptimizer.status"
PERMISSION_TOGGLE = "serveroptimizer.toggle"
ALL_PERMISSIONS = (PERMISSION_ADMIN, PERMISSION_STATUS, PERMISSION_TOGGLE)


@dataclass
class ServiceSettings:
    """Service runtime configuration"""
    health_host: str = "127.0.0.1"
    health_port: int = 8090
    log_level: str = "INFO"
    log_format: str = "json"  # json, text


@dataclass
class OptimizerConfig:
    """Dynamic FPS configuration"""
    # Policy inputs
    enabled: bool = True
    idle_fps: int = 9                       # No players connected
    base_fps: int = 26                      # Floor with at least one player
    max_fps: int = 60                       # Upper clamp, also the toggle-off value
    fps_increment_per_player: float = 1.5
    check_interval_s: float = 30.0

    # Notifications
    notify_on_change: bool = True
    show_debug_messages: bool = False
    chat_prefix: str = "[ServerOptimizer] "
    default_language: str = "en"

    # Startup behaviour
    force_initialization: bool = True
    show_init_message: bool = True

    # Applied on shutdown so the host is left un-throttled
    neutral_fps: int = 60

    # member_id -> granted permission names
    permissions: dict[str, list[str]] = field(default_factory=dict)

    service: ServiceSettings = field(default_factory=ServiceSettings)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dict for YAML persistence"""
        return asdict(self)


# ── Field coercion ───────────────────────────────────────────────────

def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "yes", "on", "1"):
        return True
    if isinstance(value, str) and value.strip().lower() in ("false", "no", "off", "0"):
        return False
    raise ValueError(f"not a boolean: {value!r}")


def _to_non_negative_int(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(f"not a number: {value!r}")
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"not a whole number: {value!r}")
    number = int(value)
    if number < 0:
        raise ValueError(f"must be non-negative, got {number}")
    return number


def _to_non_negative_float(value: Any) -> float:
    if isinstance(value, bool):
        raise ValueError(f"not a number: {value!r}")
    number = float(value)
    if number < 0:
        raise ValueError(f"must be non-negative, got {number}")
    return number


def _to_positive_float(value: Any) -> float:
    number = _to_non_negative_float(value)
    if number <= 0:
        raise ValueError(f"must be > 0, got {number}")
    return number


def _to_str(value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError(f"not a string: {value!r}")
    return value


def _to_permissions(value: Any) -> dict[str, list[str]]:
    if not isinstance(value, dict):
        raise ValueError(f"not a mapping: {value!r}")
    result: dict[str, list[str]] = {}
    for member_id, perms in value.items():
        if isinstance(perms, str):
            perms = [perms]
        if not isinstance(perms, list):
            raise ValueError(f"permissions for {member_id} must be a list")
        result[str(member_id)] = [str(p) for p in perms]
    return result


_FIELD_COERCERS: dict[str, Callable[[Any], Any]] = {
    "enabled": _to_bool,
    "idle_fps": _to_non_negative_int,
    "base_fps": _to_non_negative_int,
    "max_fps": _to_non_negative_int,
    "fps_increment_per_player": _to_non_negative_float,
    "check_interval_s": _to_positive_float,
    "notify_on_change": _to_bool,
    "show_debug_messages": _to_bool,
    "chat_prefix": _to_str,
    "default_language": _to_str,
    "force_initialization": _to_bool,
    "show_init_message": _to_bool,
    "neutral_fps": _to_non_negative_int,
    "permissions": _to_permissions,
}

_SERVICE_COERCERS: dict[str, Callable[[Any], Any]] = {
    "health_host": _to_str,
    "health_port": _to_non_negative_int,
    "log_level": _to_str,
    "log_format": _to_str,
}


def _coerce_section(
    data: dict,
    coercers: dict[str, Callable[[Any], Any]],
    defaults: Any,
    section: str,
) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for name, coerce in coercers.items():
        if name not in data or data[name] is None:
            continue
        try:
            values[name] = coerce(data[name])
        except (TypeError, ValueError) as e:
            default = getattr(defaults, name)
            logger.warning(
                f"Invalid {section}{name} ({e}), using default {default!r}",
                extra={"field": name, "default": default},
            )
    return values


def load_optimizer_config(data: dict | None) -> OptimizerConfig:
    """
    Load OptimizerConfig from a dictionary (e.g., parsed YAML).

    Missing or invalid fields are replaced by their defaults individually;
    this function never raises for bad values.
    """
    if not isinstance(data, dict):
        data = {}

    defaults = OptimizerConfig()
    values = _coerce_section(data, _FIELD_COERCERS, defaults, "")

    service_data = data.get("service") or {}
    if not isinstance(service_data, dict):
        logger.warning("Invalid service section, using defaults")
        service_data = {}
    service_values = _coerce_section(
        service_data, _SERVICE_COERCERS, ServiceSettings(), "service."
    )

    config = OptimizerConfig(**values, service=ServiceSettings(**service_values))

    if config.max_fps < config.base_fps:
        logger.warning(
            f"max_fps ({config.max_fps}) is below base_fps ({config.base_fps}); "
            "every non-idle target will be clamped to max_fps"
        )

    return config


def config_field_names() -> list[str]:
    """Names of the top-level config fields"""
    return [f.name for f in fields(OptimizerConfig)]
