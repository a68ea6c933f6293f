"""
Error Handling Utility Module

Reusable patterns for best-effort processing: the consistency scan and the
registry import must never abort on a single bad input, so per-item failures
are logged with structured context and processing continues.

log_and_continue() logs the error and lets the caller move on to the next item.
"""

import logging
from typing import Any


def log_and_continue(
    logger: logging.Logger,
    error: Exception,
    context: dict[str, Any],
    error_type: str = "Operation",
) -> None:
    """
    Log an error with structured context and continue execution gracefully.

    Use this when encountering expected errors that should not halt execution
    (e.g., a malformed item inside an import batch).

    Args:
        logger: Logger instance from get_logger(__name__)
        error: The caught exception
        context: Structured data about what failed (metric_id, file, etc.)
        error_type: Human-readable description of the operation

    Example:
        try:
            definition = MetricDefinition.from_dict(item)
        except (KeyError, TypeError, ValueError) as e:
            log_and_continue(logger, e, {"metric_id": item.get("id")}, "Metric import")
            continue
    """
    logger.warning(
        f"{error_type} failed: {error}",
        extra={
            "error_type": error_type,
            "exception_class": error.__class__.__name__,
            "context": context,
        },
    )
