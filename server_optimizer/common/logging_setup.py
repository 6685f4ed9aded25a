"""
Structured Logging Setup

Every module logs through a `server_optimizer.<service>` logger with its
own stdout handler. Records are JSON lines by default; set
OPTIMIZER_LOG_FORMAT=text for human-readable output while developing.

Environment:
    OPTIMIZER_LOG_LEVEL   DEBUG, INFO (default), WARNING, ERROR
    OPTIMIZER_LOG_FORMAT  json (default) or text
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone

LOGGER_PREFIX = "server_optimizer"
TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
TEXT_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Whatever a bare LogRecord carries is bookkeeping; the rest came from `extra`
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__
) | {"message", "asctime", "service", "taskName"}


class JsonFormatter(logging.Formatter):
    """One JSON object per record, `extra` fields inlined"""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "service": getattr(record, "service", "unknown"),
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(
            (key, value) for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRS
        )
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class ServiceLoggerAdapter(logging.LoggerAdapter):
    """Stamps the service name onto every record"""

    def process(self, msg: str, kwargs: dict) -> tuple[str, dict]:
        kwargs["extra"] = {**kwargs.get("extra", {}), "service": self.extra["service"]}
        return msg, kwargs


def _level(name: str) -> int:
    return getattr(logging, name.upper(), logging.INFO)


def _formatter(json_format: bool) -> logging.Formatter:
    if json_format:
        return JsonFormatter()
    return logging.Formatter(TEXT_FORMAT, datefmt=TEXT_DATEFMT)


def setup_logging(
    service_name: str,
    log_level: str = "INFO",
    json_format: bool = True,
) -> logging.Logger:
    """
    (Re)create the logger for one service.

    Args:
        service_name: Suffix of the logger name, e.g. "control"
        log_level: Level name
        json_format: JSON lines if True, plain text otherwise

    Returns:
        The configured logger; it does not propagate to the root logger
    """
    level = _level(log_level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(_formatter(json_format))

    logger = logging.getLogger(f"{LOGGER_PREFIX}.{service_name}")
    logger.setLevel(level)
    logger.handlers[:] = [handler]
    logger.propagate = False
    return logger


def get_service_logger(service_name: str) -> ServiceLoggerAdapter:
    """Logger adapter for a service, configured from the environment"""
    logger = setup_logging(
        service_name,
        os.environ.get("OPTIMIZER_LOG_LEVEL", "INFO"),
        os.environ.get("OPTIMIZER_LOG_FORMAT", "json").lower() == "json",
    )
    return ServiceLoggerAdapter(logger, {"service": service_name})


def configure_logging(log_level: str, json_format: bool | None = None) -> None:
    """
    Apply the level (and optionally the format) from the configuration
    file to every optimizer logger created so far at import time.
    """
    level = _level(log_level)
    for name, logger in list(logging.Logger.manager.loggerDict.items()):
        if not name.startswith(f"{LOGGER_PREFIX}.") or not isinstance(logger, logging.Logger):
            continue
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)
            if json_format is not None:
                handler.setFormatter(_formatter(json_format))


def log_fps_adjustment(
    logger: logging.Logger | logging.LoggerAdapter,
    old_fps: int | None,
    new_fps: int,
    players: int,
    verbose: bool = False,
) -> None:
    """Applied fps.limit change; INFO when verbose, DEBUG otherwise"""
    emit = logger.info if verbose else logger.debug
    emit(
        f"Adjusting server FPS: {old_fps} -> {new_fps} (Players: {players})",
        extra={"old_fps": old_fps, "new_fps": new_fps, "players": players},
    )


def log_command(
    logger: logging.Logger | logging.LoggerAdapter,
    command: str,
    member_id: str | None,
    allowed: bool,
) -> None:
    invoker = member_id or "console"
    extra = {"command": command, "member_id": member_id, "allowed": allowed}
    if allowed:
        logger.info(f"Command {command} by {invoker}", extra=extra)
    else:
        logger.warning(f"Command {command} denied for {invoker}", extra=extra)
