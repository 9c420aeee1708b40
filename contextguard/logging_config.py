"""
Logging configuration for analysis decisions.

Every verdict the engine reaches is logged on the ``contextguard.decisions``
logger with structured extra fields, so a caller can keep an audit trail of
which files were blocked and why.
"""

import json
import logging
from logging.handlers import TimedRotatingFileHandler
from typing import Any

ROOT_LOGGER_NAME = "contextguard"
DECISION_LOGGER_NAME = "contextguard.decisions"

_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class DecisionFormatter(logging.Formatter):
    """Formats log records as JSON lines with analysis fields."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if hasattr(record, "event"):
            log_entry["event"] = record.event

        # Verdict fields
        for field in ["file_name", "risk_level", "should_block", "requires_review", "score"]:
            if hasattr(record, field):
                log_entry[field] = getattr(record, field)

        for field in ["critical_count", "high_count", "duration_ms", "mode"]:
            if hasattr(record, field):
                log_entry[field] = getattr(record, field)

        if record.exc_info:
            log_entry["error"] = self.formatException(record.exc_info)

        return json.dumps(log_entry)


def configure_logging(
    log_file: str | None = None,
    log_level: str = "INFO",
    enable_console: bool = True,
    json_format: bool = False,
) -> None:
    """
    Configure the ``contextguard`` logger hierarchy.

    Args:
        log_file: Path to a JSON decision log file (optional)
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        enable_console: Whether to also log to stderr
        json_format: Render console output as JSON lines instead of text
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(getattr(logging, log_level.upper()))
    logger.propagate = False

    logger.handlers.clear()

    if log_file:
        # Rotate daily, keep a week
        file_handler = TimedRotatingFileHandler(
            log_file,
            when="D",
            interval=1,
            backupCount=7,
            encoding="utf-8",
            utc=False,
        )
        file_handler.suffix = "%Y%m%d.log"
        file_handler.setFormatter(DecisionFormatter())
        logger.addHandler(file_handler)

    if enable_console:
        console_handler = logging.StreamHandler()
        if json_format:
            console_handler.setFormatter(DecisionFormatter())
        else:
            console_handler.setFormatter(logging.Formatter(_TEXT_FORMAT))
        logger.addHandler(console_handler)


def get_decision_logger() -> logging.Logger:
    """Get the logger that records analysis verdicts."""
    return logging.getLogger(DECISION_LOGGER_NAME)
