"""
Configuration Management

Provides centralized, validated configuration for the metric standards tooling.
Values come from environment variables (optionally loaded from a .env file)
and are validated up front so misconfiguration fails fast.

Usage:
    from metric_standards.core import get_config

    config = get_config()
    print(config.project_root)
    print(config.log_level)

Environment variables:
    METRIC_STANDARDS_ROOT       Project tree to scan (default: current directory)
    METRIC_STANDARDS_RULES      Path to a custom rule table JSON file
    METRIC_STANDARDS_LOG_LEVEL  DEBUG, INFO, WARNING, ERROR or CRITICAL (default: INFO)
    METRIC_STANDARDS_LOG_JSON   "true" to emit JSON logs on the console
    METRIC_STANDARDS_LOG_FILE   Optional JSON log file path

Raises:
    ConfigurationError: If configuration is invalid
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
TRUE_VALUES = ("1", "true", "yes", "on")
FALSE_VALUES = ("0", "false", "no", "off", "")


class ConfigurationError(Exception):
    """Raised when configuration is missing or invalid."""

    pass


@dataclass
class StandardsConfig:
    """
    Validated runtime configuration.

    Attributes:
        project_root: Root directory scanned by the consistency checker
        rules_file: Optional custom rule table (None uses the packaged defaults)
        log_level: Logging level name
        log_json: Emit JSON logs on the console
        log_file: Optional JSON log file
    """

    project_root: Path
    rules_file: Path | None = None
    log_level: str = "INFO"
    log_json: bool = False
    log_file: Path | None = None

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self._validate()

    def _validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if not self.project_root.is_dir():
            raise ConfigurationError(f"METRIC_STANDARDS_ROOT is not a directory: {self.project_root}")

        if self.rules_file is not None and not self.rules_file.is_file():
            raise ConfigurationError(f"METRIC_STANDARDS_RULES file does not exist: {self.rules_file}")

        self.log_level = self.log_level.upper()
        if self.log_level not in VALID_LOG_LEVELS:
            raise ConfigurationError(
                f"METRIC_STANDARDS_LOG_LEVEL must be one of {', '.join(VALID_LOG_LEVELS)}: {self.log_level}"
            )


def _parse_bool(name: str, raw: str | None) -> bool:
    value = (raw or "").strip().lower()
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be a boolean (true/false): {raw}")


def load_config() -> StandardsConfig:
    """
    Build configuration from the environment.

    Loads a .env file first (existing environment variables win).

    Returns:
        StandardsConfig: Validated configuration

    Raises:
        ConfigurationError: If any value is invalid
    """
    load_dotenv()

    root = os.getenv("METRIC_STANDARDS_ROOT") or os.getcwd()
    rules = os.getenv("METRIC_STANDARDS_RULES")
    log_file = os.getenv("METRIC_STANDARDS_LOG_FILE")

    return StandardsConfig(
        project_root=Path(root),
        rules_file=Path(rules) if rules else None,
        log_level=os.getenv("METRIC_STANDARDS_LOG_LEVEL", "INFO"),
        log_json=_parse_bool("METRIC_STANDARDS_LOG_JSON", os.getenv("METRIC_STANDARDS_LOG_JSON")),
        log_file=Path(log_file) if log_file else None,
    )


_config_instance: StandardsConfig | None = None


def get_config() -> StandardsConfig:
    """
    Get the cached configuration instance.

    Returns:
        StandardsConfig: The validated configuration
    """
    global _config_instance
    if _config_instance is None:
        _config_instance = load_config()
    return _config_instance


def reset_config() -> None:
    """Drop the cached configuration so the next get_config() re-reads the environment."""
    global _config_instance
    _config_instance = None
