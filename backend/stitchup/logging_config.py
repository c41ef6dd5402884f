"""
Logging for the stitch-up CLI.

Progress is written to stderr as ``timestamp | level | logger | message`` so
stdout carries only the path of the produced artifact.

Levels come from settings (and therefore the environment):
- LOG_LEVEL: Global log level (default: INFO)
- LOG_LEVEL_PROVIDERS / LOG_LEVEL_PIPELINE / LOG_LEVEL_POLLER: Per-module override
"""

import logging
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from stitchup.config import Settings


# Settings field suffix -> logger name
MODULE_LOGGERS = {
    "providers": "stitchup.services.providers",
    "pipeline": "stitchup.services.pipeline",
    "poller": "stitchup.services.job_poller",
}

# Longest prefix first
LOGGER_PREFIXES = ("stitchup.services.", "stitchup.")

QUIET_LOGGERS = ("httpx", "httpcore", "anthropic")


class StructuredFormatter(logging.Formatter):
    """
    Pipe-separated formatter.

    Format: timestamp | level | logger | message
    """

    def format(self, record: logging.LogRecord) -> str:
        name = record.name
        for prefix in LOGGER_PREFIXES:
            if name.startswith(prefix):
                name = name[len(prefix):]
                break

        timestamp = self.formatTime(record, "%Y-%m-%d %H:%M:%S")
        message = f"{timestamp} | {record.levelname:8} | {name:20} | {record.getMessage()}"

        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)
        return message


def parse_level(name: str | None, default: int = logging.INFO) -> int:
    """Map a level name like "debug" to its logging constant."""
    if not name:
        return default
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else default


def setup_logging(settings: "Settings") -> None:
    """
    Configure the root logger once per process.

    Args:
        settings: Application settings with log levels
    """
    root_level = parse_level(settings.log_level)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(StructuredFormatter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(root_level)

    for module_key, logger_name in MODULE_LOGGERS.items():
        override = getattr(settings, f"log_level_{module_key}", None)
        if override:
            logging.getLogger(logger_name).setLevel(parse_level(override, root_level))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
