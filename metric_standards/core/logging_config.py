"""
Logging setup for the metric standards tooling.

The CLI calls setup_logging() once; library modules only call get_logger().
Two record shapes carry structured data and both formatters understand them:

- log_with_context(): key/value pairs in record.extra_fields
  (scan totals, registry counts)
- utils.error_handling.log_and_continue(): record.error_type,
  record.exception_class and record.context (the file or metric id that
  was skipped)

Usage:
    from metric_standards.core.logging_config import get_logger

    logger = get_logger(__name__)
    logger.info("Loaded 9 metric definitions")
"""

import json
import logging
import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

# Attributes set by log_and_continue()
FAILURE_FIELDS = ("error_type", "exception_class", "context")

CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
CONSOLE_DATEFMT = "%Y-%m-%d %H:%M:%S"


class JSONFormatter(logging.Formatter):
    """
    One JSON object per line, for CI log collectors and METRIC_STANDARDS_LOG_FILE.

    Skipped files and rejected import items keep their error_type,
    exception_class and context as top-level keys.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "line": record.lineno,
        }

        for name in FAILURE_FIELDS:
            if hasattr(record, name):
                log_data[name] = getattr(record, name)

        if hasattr(record, "extra_fields"):
            log_data.update(record.extra_fields)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str, ensure_ascii=False)


class ContextFormatter(logging.Formatter):
    """
    Console formatter.

    Colors the level name on a terminal and appends structured context as
    ``[key=value ...]`` so a skipped file is visible without JSON output.
    """

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        record = logging.makeLogRecord(record.__dict__)
        if sys.stderr.isatty():
            color = self.COLORS.get(record.levelname, "")
            record.levelname = f"{color}{record.levelname}{self.RESET}"

        text = super().format(record)
        context = _context_of(record)
        if context:
            pairs = " ".join(f"{key}={value}" for key, value in context.items())
            text = f"{text} [{pairs}]"
        return text


def _context_of(record: logging.LogRecord) -> dict[str, Any]:
    context: dict[str, Any] = {}
    if isinstance(getattr(record, "context", None), dict):
        context.update(record.context)
    if isinstance(getattr(record, "extra_fields", None), dict):
        context.update(record.extra_fields)
    return context


def setup_logging(
    level: str = "INFO",
    log_file: Path | None = None,
    json_output: bool = False,
) -> None:
    """
    Configure the root logger for a CLI run.

    Console output goes to stderr so reports written to stdout can be piped.
    The optional log file always receives JSON.

    Args:
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL (unknown names mean INFO)
        log_file: Optional JSON log file; parent directories are created
        json_output: Use JSONFormatter on the console as well

    Example:
        setup_logging(level="DEBUG")
        setup_logging(level="INFO", log_file=Path(".tmp/logs/metrics.log"), json_output=True)
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    if json_output:
        console_handler.setFormatter(JSONFormatter())
    else:
        console_handler.setFormatter(ContextFormatter(fmt=CONSOLE_FORMAT, datefmt=CONSOLE_DATEFMT))
    root_logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(log_level)
        file_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    """Module logger; pass __name__."""
    return logging.getLogger(name)


def log_with_context(logger: logging.Logger, level: str, message: str, **context: Any) -> None:
    """
    Log a message with key/value context attached as extra_fields.

    Example:
        log_with_context(logger, "info", "Scan finished", files_scanned=120, usages=37)
    """
    log_func = getattr(logger, level.lower())
    log_func(message, extra={"extra_fields": context})
