"""
Core Infrastructure - Configuration and Logging

Usage:
    from metric_standards.core import get_config, get_logger

    config = get_config()
    logger = get_logger(__name__)
"""

from .config import ConfigurationError, StandardsConfig, get_config, load_config, reset_config
from .logging_config import get_logger, log_with_context, setup_logging

__all__ = [
    # Configuration
    "get_config",
    "load_config",
    "reset_config",
    "ConfigurationError",
    "StandardsConfig",
    # Logging
    "get_logger",
    "log_with_context",
    "setup_logging",
]
