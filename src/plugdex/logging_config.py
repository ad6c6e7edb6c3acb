"""
Logging setup for Plugdex.

Configures the ``plugdex`` logger hierarchy with a console handler and an
optional rotating file handler. Modules only ever call
``logging.getLogger(__name__)``; this module decides where records go.
"""

import json
import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

from plugdex.config import Settings, settings as default_settings

ROOT_LOGGER = "plugdex"

STANDARD_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

# Marker attribute so repeated setup_logging() calls only replace our handlers
_HANDLER_MARK = "_plugdex_handler"


class JsonFormatter(logging.Formatter):
    """Render log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def _build_formatter(log_format: str) -> logging.Formatter:
    if log_format == "json":
        return JsonFormatter()
    return logging.Formatter(STANDARD_FORMAT)


def setup_logging(
    context: str = "plugdex",
    level: Optional[str] = None,
    config: Optional[Settings] = None,
) -> logging.Logger:
    """
    Configure logging for the given runtime context.

    Args:
        context: Name of the running component (used for the log file name)
        level: Log level override (defaults to settings.log_level)
        config: Settings instance (defaults to the global settings)

    Returns:
        The configured ``plugdex`` logger

    Raises:
        PermissionError: If file logging is enabled but the log directory
            cannot be created
    """
    config = config or default_settings
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel((level or config.log_level).upper())

    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_MARK, False):
            logger.removeHandler(handler)
            handler.close()

    formatter = _build_formatter(config.log_format)
    handlers: list[logging.Handler] = []

    if config.log_console_enabled:
        handlers.append(logging.StreamHandler(sys.stderr))

    if config.log_file_enabled:
        log_dir = config.log_directory
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                log_dir / f"{context}.log",
                maxBytes=config.log_max_bytes,
                backupCount=config.log_backup_count,
                encoding="utf-8",
            )
        )

    for handler in handlers:
        handler.setFormatter(formatter)
        setattr(handler, _HANDLER_MARK, True)
        logger.addHandler(handler)

    logger.propagate = False
    return logger
