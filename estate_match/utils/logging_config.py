"""Centralized logging configuration with environment variable support."""

import os
import logging
import sys
from typing import Optional
from pythonjsonlogger import jsonlogger

# Loggers that write one line per evaluated (listing, buyer) pair
DECISION_LOGGERS = (
    "estate_match.services.criteria_matcher",
    "estate_match.services.geometry_resolver",
)


class LoggingConfig:
    """Centralized logging configuration."""

    # Environment variable defaults
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
    LOG_FORMAT = os.environ.get("LOG_FORMAT", "json").lower()
    LOG_MATCH_DECISIONS = os.environ.get("LOG_MATCH_DECISIONS", "false").lower() == "true"
    LOG_SLOW_OPERATION_THRESHOLD_MS = int(os.environ.get("LOG_SLOW_OPERATION_THRESHOLD_MS", "1000"))

    @classmethod
    def setup_logging(cls, level: Optional[str] = None, log_format: Optional[str] = None) -> None:
        """
        Configure the root logger.

        Args:
            level: Overrides LOG_LEVEL
            log_format: Overrides LOG_FORMAT ("json" or "text")
        """
        level_value = getattr(logging, (level or cls.LOG_LEVEL).upper(), logging.INFO)
        log_format = (log_format or cls.LOG_FORMAT).lower()

        root_logger = logging.getLogger()
        root_logger.setLevel(level_value)
        root_logger.handlers.clear()

        # Batch runs are read by log shippers from stdout
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(level_value)

        if log_format == "json":
            formatter = jsonlogger.JsonFormatter(
                "%(timestamp)s %(levelname)s %(name)s %(message)s",
                rename_fields={"levelname": "level"},
                timestamp=True
            )
        else:
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )

        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

        # Per-pair rejection lines stay off unless asked for, even at DEBUG
        decision_level = logging.NOTSET if cls.LOG_MATCH_DECISIONS else max(level_value, logging.INFO)
        for name in DECISION_LOGGERS:
            logging.getLogger(name).setLevel(decision_level)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name."""
    return logging.getLogger(name)
