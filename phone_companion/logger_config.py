"""
Logging configuration for Phone Companion.

Uses dictConfig so the CLI, the API server and tests can all reconfigure
logging repeatedly without stacking handlers.

Environment Variables:
    LOG_LEVEL: Set log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               Defaults to INFO if not set or invalid.

Usage:
    from phone_companion.logger_config import setup_logging
    setup_logging()  # Uses LOG_LEVEL env var, defaults to INFO

    # Or override explicitly, keeping stdout free for command output:
    setup_logging(level=logging.DEBUG, stream="ext://sys.stderr")
"""

import logging
import logging.config
import os
from typing import Optional

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_log_level() -> int:
    """
    Get log level from LOG_LEVEL environment variable.

    Returns:
        Logging level constant (e.g., logging.INFO).
    """
    level_name = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    level = logging.getLevelName(level_name)

    # getLevelName returns "Level X" strings for unknown names
    if not isinstance(level, int):
        return logging.INFO

    return level


def setup_logging(
    level: Optional[int] = None,
    format_string: Optional[str] = None,
    log_file: Optional[str] = None,
    stream: str = "ext://sys.stderr",
) -> None:
    """
    Configure logging for the application using dictConfig.

    Args:
        level: Logging level. If None, reads from LOG_LEVEL env var (default: INFO).
        format_string: Optional custom format string.
        log_file: Optional file path to write logs to (with rotation).
        stream: Console stream in dictConfig "ext://" notation.
    """
    if level is None:
        level = get_log_level()

    config: dict = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": format_string or DEFAULT_FORMAT,
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "standard",
                "stream": stream,
            },
        },
        "root": {
            "level": level,
            "handlers": ["console"],
        },
    }

    if log_file:
        config["handlers"]["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": level,
            "formatter": "standard",
            "filename": log_file,
            "maxBytes": 10_485_760,  # 10 MB
            "backupCount": 5,
        }
        config["root"]["handlers"].append("file")

    logging.config.dictConfig(config)
