"""
Consistency rule table

The extraction patterns, non-standard naming map, field groups and denylist
used by the consistency checker and the validator live in a JSON file so
they can be extended without code changes. The packaged default is
data/default_rules.json; a project may point METRIC_STANDARDS_RULES at its
own copy.
"""

import json
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

from metric_standards.core.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_RULES_FILE = Path(__file__).parent / "data" / "default_rules.json"

REQUIRED_KEYS = (
    "extensions",
    "skip_dirs",
    "extraction_patterns",
    "naming_alternatives",
    "time_fields",
    "rate_fields",
    "unit_drift",
    "declaration_pattern",
    "declaration_marker",
    "forbidden_names",
    "common_tags",
)


class RuleTableError(ValueError):
    """Raised when a rule table file cannot be read or is malformed."""

    pass


@dataclass(frozen=True)
class ExtractionPattern:
    """A field name and the regex whose first group captures its numeric literal."""

    field: str
    regex: re.Pattern[str]


@dataclass(frozen=True)
class RuleTable:
    """
    Compiled rule table.

    Attributes:
        extensions: File suffixes the tree walk visits
        skip_dirs: Directory names the tree walk never enters
        extraction_patterns: Ordered field extractors
        naming_alternatives: Non-standard token to canonical name
        time_fields: Fields checked for seconds/milliseconds drift
        rate_fields: Fields checked for 0-1/0-100 drift
        seconds_below: Time values below this look like seconds
        milliseconds_from: Time values from this up look like milliseconds
        declaration_pattern: Regex capturing a declared type name
        declaration_marker: Substring a declaration line must contain
        forbidden_names: Metric names the validator rejects
        common_tags: Category tags the validator expects at least one of
    """

    extensions: frozenset[str]
    skip_dirs: frozenset[str]
    extraction_patterns: tuple[ExtractionPattern, ...]
    naming_alternatives: dict[str, str]
    time_fields: tuple[str, ...]
    rate_fields: tuple[str, ...]
    seconds_below: float
    milliseconds_from: float
    declaration_pattern: re.Pattern[str]
    declaration_marker: str
    forbidden_names: frozenset[str]
    common_tags: tuple[str, ...]

    def standard_name_for(self, token: str) -> str | None:
        return self.naming_alternatives.get(token)

    def token_patterns(self) -> list[tuple[str, re.Pattern[str]]]:
        """Word-boundary regexes for every non-standard token, in table order."""
        return [(token, re.compile(rf"\b{re.escape(token)}\b")) for token in self.naming_alternatives]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuleTable":
        """
        Compile a rule table from its JSON shape.

        Raises:
            RuleTableError: If a key is missing or a regex does not compile
        """
        missing = [key for key in REQUIRED_KEYS if key not in data]
        if missing:
            raise RuleTableError(f"Rule table missing keys: {', '.join(missing)}")

        try:
            patterns = tuple(
                ExtractionPattern(field=entry["field"], regex=re.compile(entry["pattern"]))
                for entry in data["extraction_patterns"]
            )
            declaration_pattern = re.compile(data["declaration_pattern"])
        except re.error as e:
            raise RuleTableError(f"Invalid regex in rule table: {e}") from e
        except (KeyError, TypeError) as e:
            raise RuleTableError(f"Malformed extraction pattern entry: {e}") from e

        for pattern in patterns:
            if pattern.regex.groups < 1:
                raise RuleTableError(f"Extraction pattern for {pattern.field} must capture the value")

        # Tokens are matched against the first canonical name that lists them
        alternatives: dict[str, str] = {}
        try:
            for standard, tokens in data["naming_alternatives"].items():
                for token in tokens:
                    alternatives.setdefault(token, standard)
        except (AttributeError, TypeError) as e:
            raise RuleTableError(f"naming_alternatives must map names to token lists: {e}") from e

        unit_drift = data["unit_drift"]
        if not isinstance(unit_drift, dict):
            raise RuleTableError("unit_drift must be an object")

        return cls(
            extensions=frozenset(data["extensions"]),
            skip_dirs=frozenset(data["skip_dirs"]),
            extraction_patterns=patterns,
            naming_alternatives=alternatives,
            time_fields=tuple(data["time_fields"]),
            rate_fields=tuple(data["rate_fields"]),
            seconds_below=float(unit_drift.get("seconds_below", 100)),
            milliseconds_from=float(unit_drift.get("milliseconds_from", 1000)),
            declaration_pattern=declaration_pattern,
            declaration_marker=data["declaration_marker"],
            forbidden_names=frozenset(data["forbidden_names"]),
            common_tags=tuple(data["common_tags"]),
        )


def load_rule_table(path: str | Path | None = None) -> RuleTable:
    """
    Load and compile a rule table file.

    Args:
        path: JSON rule file (default: the packaged default_rules.json)

    Returns:
        RuleTable ready for the checker and validator

    Raises:
        RuleTableError: If the file is unreadable, not JSON or malformed
    """
    rules_path = Path(path) if path is not None else DEFAULT_RULES_FILE

    try:
        with open(rules_path, encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise RuleTableError(f"Cannot read rule table {rules_path}: {e}") from e
    except json.JSONDecodeError as e:
        raise RuleTableError(f"Rule table {rules_path} is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise RuleTableError(f"Rule table {rules_path} must be a JSON object")

    table = RuleTable.from_dict(data)
    logger.debug(
        f"Loaded rule table from {rules_path}: "
        f"{len(table.extraction_patterns)} patterns, {len(table.naming_alternatives)} naming alternatives"
    )
    return table


@lru_cache(maxsize=1)
def default_rule_table() -> RuleTable:
    """The packaged rule table, loaded once per process."""
    return load_rule_table()
