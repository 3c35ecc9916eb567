"""Logging setup for the CLI; engine modules only create named loggers."""
import json
import logging
import sys
from datetime import datetime, timezone

from config.settings import LOG_FORMAT, LOG_LEVEL

STANDARD_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# Package loggers that follow the configured level
ENGINE_LOGGERS = ("core", "data_manager")


class JsonFormatter(logging.Formatter):
    """One JSON object per record"""

    def format(self, record: logging.LogRecord) -> str:
        return json.dumps({
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        })


def setup_logging(level: str = LOG_LEVEL, format_type: str = LOG_FORMAT) -> None:
    """Route all records to stderr at `level`; format_type is "standard" or "json"."""
    log_level = getattr(logging, level.upper(), logging.WARNING)
    if format_type == "json":
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(STANDARD_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # stdout carries CSV output
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    for name in ENGINE_LOGGERS:
        logging.getLogger(name).setLevel(log_level)
