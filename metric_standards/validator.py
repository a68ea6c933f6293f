"""
Metric Definition Validator

Scores a candidate definition against the naming, id, unit/type/format,
threshold, version, formula, governance and tag conventions. Validation
never raises: every problem is returned as a ValidationIssue in the result's
errors (invalidating) or warnings (advisory) list.

Usage:
    from metric_standards.validator import MetricValidator

    result = MetricValidator().validate(definition)
    if not result.is_valid:
        for error in result.errors:
            print(f"{error.code} [{error.field}]: {error.message}")
"""

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from numbers import Real
from typing import Any

from metric_standards.consistency.rules import RuleTable, default_rule_table
from metric_standards.core.logging_config import get_logger
from metric_standards.domain.definitions import (
    DisplayType,
    MetricDataType,
    MetricDefinition,
    MetricFormat,
    MetricUnit,
    ReviewCycle,
)
from metric_standards.utils.datetime_utils import is_iso_timestamp, months_since, parse_iso_timestamp

logger = get_logger(__name__)

# Wire (camelCase) names, in reporting order
REQUIRED_FIELDS = (
    "id",
    "name",
    "displayName",
    "category",
    "level",
    "domain",
    "description",
    "formula",
    "unit",
    "dataType",
    "format",
    "precision",
    "qualityThresholds",
    "governance",
    "version",
    "changeHistory",
    "tags",
)

CAMEL_CASE_PATTERN = re.compile(r"^[a-z][a-zA-Z0-9]*$")
ID_PATTERN = re.compile(r"^[a-z]+_[a-z]+_[a-zA-Z]+$")
SEMVER_PATTERN = re.compile(r"^\d+\.\d+\.\d+$")
TAG_PATTERN = re.compile(r"^[a-z][a-z_]*$")

TIME_NAME_PATTERN = re.compile(r"(Time|Duration|Latency|Delay)$")
RATE_NAME_PATTERN = re.compile(r"(Rate|Ratio|Percentage)$")
COUNT_NAME_PATTERN = re.compile(r"^(total|avg|max|min)|(Count|Number)$")

FORMULA_OPERATOR_PATTERN = re.compile(r"[+\-*/()×÷]")
FORMULA_VARIABLE_PATTERN = re.compile(r"[a-zA-Z]")
DIVISION_SAFEGUARDS = ("non-zero", "nonzero", "!= 0", "!=0", "> 0", ">0", "denominator", "非零")

# Day-granularity metrics (e.g. retention windows) are exempt from the time suffix rule
NAMED_TIME_UNITS = frozenset({"milliseconds", "seconds", "minutes", "hours"})
NAMED_RATIO_UNITS = frozenset({"percentage", "ratio"})
INTEGER_UNITS = frozenset({"count", "days", "hours"})
CURRENCY_UNITS = frozenset({"cny", "usd"})

OVERDUE_FACTOR = 1.5

ERROR_PENALTY = 15
WARNING_PENALTY = 5


@dataclass(frozen=True)
class ValidationIssue:
    """
    One validation finding.

    Attributes:
        code: Stable machine-readable code (e.g. INVALID_ID_FORMAT)
        field: Wire name of the offending field
        message: Human-readable explanation
        suggestion: Optional remediation hint
    """

    code: str
    field: str
    message: str
    suggestion: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data = {"code": self.code, "field": self.field, "message": self.message}
        if self.suggestion is not None:
            data["suggestion"] = self.suggestion
        return data


@dataclass
class ValidationResult:
    metric_id: str
    is_valid: bool
    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)
    score: int = 100

    def codes(self) -> list[str]:
        """Codes of all errors then all warnings."""
        return [issue.code for issue in [*self.errors, *self.warnings]]

    def to_dict(self) -> dict[str, Any]:
        return {
            "metricId": self.metric_id,
            "isValid": self.is_valid,
            "errors": [issue.to_dict() for issue in self.errors],
            "warnings": [issue.to_dict() for issue in self.warnings],
            "score": self.score,
        }


def _text(value: Any) -> str | None:
    """Enum members and strings as their string value; anything else as None."""
    if isinstance(value, Enum):
        value = value.value
    return value if isinstance(value, str) else None


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def _capitalize(name: str) -> str:
    return name[:1].upper() + name[1:]


class MetricValidator:
    """
    Rule-based validator for metric definitions.

    Each check runs independently and appends zero or more issues; a check
    whose inputs are absent is skipped (absence itself is reported by the
    required-field check).

    Args:
        rules: Rule table supplying the forbidden names and common tags
            (default: the packaged table)
        now: Reference time for review staleness (default: current UTC time)

    Example:
        >>> result = MetricValidator().validate({"id": "invalid_id_format", "name": "respTime"})
        >>> result.is_valid, result.score < 100
        (False, True)
    """

    def __init__(self, rules: RuleTable | None = None, now: datetime | None = None) -> None:
        self.rules = rules or default_rule_table()
        self.now = now

    def validate(self, candidate: MetricDefinition | Mapping[str, Any]) -> ValidationResult:
        """
        Validate one definition.

        Args:
            candidate: A built definition or a (possibly partial) camelCase mapping

        Returns:
            ValidationResult with errors, warnings and a 0-100 score
        """
        if isinstance(candidate, MetricDefinition):
            data = candidate.to_dict()
        elif isinstance(candidate, Mapping):
            data = dict(candidate)
        else:
            data = {}

        errors: list[ValidationIssue] = []
        warnings: list[ValidationIssue] = []

        self._check_required_fields(data, errors)
        self._check_naming(data, errors, warnings)
        self._check_id_format(data, errors)
        self._check_unit_consistency(data, errors, warnings)
        self._check_quality_thresholds(data, errors)
        self._check_version(data, errors)
        self._check_formula(data, warnings)
        self._check_governance(data, errors, warnings)
        self._check_tags(data, warnings)

        score = max(0, 100 - ERROR_PENALTY * len(errors) - WARNING_PENALTY * len(warnings))
        metric_id = data.get("id") if isinstance(data.get("id"), str) and data.get("id") else "unknown"

        logger.debug(f"Validated {metric_id}: {len(errors)} errors, {len(warnings)} warnings, score {score}")
        return ValidationResult(
            metric_id=metric_id,
            is_valid=not errors,
            errors=errors,
            warnings=warnings,
            score=score,
        )

    def validate_batch(self, candidates: Iterable[MetricDefinition | Mapping[str, Any]]) -> list[ValidationResult]:
        """Validate each candidate independently, preserving order."""
        return [self.validate(candidate) for candidate in candidates]

    # ===== Checks =====

    def _check_required_fields(self, data: dict[str, Any], errors: list[ValidationIssue]) -> None:
        for field_name in REQUIRED_FIELDS:
            if data.get(field_name) is None:
                errors.append(
                    ValidationIssue("MISSING_REQUIRED_FIELD", field_name, f"Missing required field: {field_name}")
                )

        for field_name, code in (("domain", "EMPTY_DOMAIN_ARRAY"), ("tags", "EMPTY_TAGS_ARRAY")):
            value = data.get(field_name)
            if isinstance(value, list | tuple) and not value:
                errors.append(ValidationIssue(code, field_name, f"{field_name} must not be an empty list"))

    def _check_naming(
        self, data: dict[str, Any], errors: list[ValidationIssue], warnings: list[ValidationIssue]
    ) -> None:
        name = data.get("name")
        if not name:
            return

        if isinstance(name, str) and name in self.rules.forbidden_names:
            errors.append(
                ValidationIssue("FORBIDDEN_NAME", "name", f'Metric name "{name}" violates the naming convention')
            )

        if not isinstance(name, str) or not CAMEL_CASE_PATTERN.match(name):
            errors.append(ValidationIssue("INVALID_CAMEL_CASE", "name", f'Metric name "{name}" must be camelCase'))
            return

        unit = _text(data.get("unit"))
        if not unit:
            return

        if unit in NAMED_TIME_UNITS and not TIME_NAME_PATTERN.search(name):
            warnings.append(
                ValidationIssue(
                    "INCONSISTENT_TIME_NAMING",
                    "name",
                    "Time metrics should end with Time, Duration, Latency or Delay",
                    f"Rename to {name}Time or {name}Duration",
                )
            )

        if unit in NAMED_RATIO_UNITS and not RATE_NAME_PATTERN.search(name):
            warnings.append(
                ValidationIssue(
                    "INCONSISTENT_RATE_NAMING",
                    "name",
                    "Ratio metrics should end with Rate, Ratio or Percentage",
                    f"Rename to {name}Rate or {name}Ratio",
                )
            )

        if unit == MetricUnit.COUNT.value and not COUNT_NAME_PATTERN.search(name):
            warnings.append(
                ValidationIssue(
                    "INCONSISTENT_COUNT_NAMING",
                    "name",
                    "Count metrics should start with total, avg, max or min, or end with Count or Number",
                    f"Rename to total{_capitalize(name)} or {name}Count",
                )
            )

    def _check_id_format(self, data: dict[str, Any], errors: list[ValidationIssue]) -> None:
        metric_id = data.get("id")
        if not metric_id:
            return

        if not isinstance(metric_id, str) or not ID_PATTERN.match(metric_id):
            errors.append(
                ValidationIssue(
                    "INVALID_ID_FORMAT",
                    "id",
                    "Metric id must follow {category}_{domain}_{name}, e.g. business_user_taskSuccessRate",
                )
            )
            return

        category = _text(data.get("category"))
        if category and not metric_id.startswith(f"{category}_"):
            errors.append(
                ValidationIssue("ID_CATEGORY_MISMATCH", "id", f"Metric id must start with its category: {category}_")
            )

        name = data.get("name")
        if name and metric_id.split("_", 2)[2] != name:
            errors.append(ValidationIssue("ID_NAME_MISMATCH", "id", f"Metric id must end with its name: {name}"))

    def _check_unit_consistency(
        self, data: dict[str, Any], errors: list[ValidationIssue], warnings: list[ValidationIssue]
    ) -> None:
        unit = _text(data.get("unit"))
        data_type = _text(data.get("dataType"))
        metric_format = data.get("format")
        if not unit or not data_type or not metric_format:
            return

        if isinstance(metric_format, MetricFormat):
            display_type = metric_format.display_type.value
        elif isinstance(metric_format, Mapping):
            display_type = _text(metric_format.get("displayType"))
        else:
            display_type = None

        if unit == MetricUnit.BOOLEAN.value and data_type != MetricDataType.BOOLEAN.value:
            errors.append(
                ValidationIssue("UNIT_DATATYPE_MISMATCH", "unit", "Boolean unit requires the boolean data type")
            )

        if unit in INTEGER_UNITS and data_type == MetricDataType.FLOAT.value:
            warnings.append(
                ValidationIssue(
                    "UNIT_PRECISION_WARNING",
                    "dataType",
                    f"Unit {unit} is integral and rarely needs a float data type",
                    "Use the integer data type",
                )
            )

        if unit == MetricUnit.PERCENTAGE.value and display_type != DisplayType.PERCENTAGE.value:
            warnings.append(
                ValidationIssue(
                    "FORMAT_UNIT_MISMATCH",
                    "format",
                    "Percentage units should use the percentage display type",
                    "Set format.displayType = 'percentage'",
                )
            )

        if unit in CURRENCY_UNITS and display_type != DisplayType.CURRENCY.value:
            warnings.append(
                ValidationIssue(
                    "FORMAT_CURRENCY_MISMATCH",
                    "format",
                    "Currency units should use the currency display type",
                    "Set format.displayType = 'currency'",
                )
            )

    def _check_quality_thresholds(self, data: dict[str, Any], errors: list[ValidationIssue]) -> None:
        thresholds = data.get("qualityThresholds")
        if thresholds is None:
            return

        keys = ("excellent", "good", "warning", "critical")
        values = [thresholds.get(key) for key in keys] if isinstance(thresholds, Mapping) else []
        if len(values) != len(keys) or not all(_is_number(value) for value in values):
            errors.append(
                ValidationIssue(
                    "INVALID_THRESHOLD_VALUE",
                    "qualityThresholds",
                    "Quality thresholds need numeric excellent, good, warning and critical values",
                )
            )
            return

        excellent, good, warning, critical = values
        if not excellent > good > warning > critical:
            errors.append(
                ValidationIssue(
                    "INVALID_THRESHOLD_ORDER",
                    "qualityThresholds",
                    "Quality thresholds must satisfy excellent > good > warning > critical",
                )
            )

        if _text(data.get("unit")) == MetricUnit.PERCENTAGE.value and not all(0 <= v <= 100 for v in values):
            errors.append(
                ValidationIssue(
                    "INVALID_PERCENTAGE_THRESHOLD",
                    "qualityThresholds",
                    "Percentage thresholds must lie within 0-100",
                )
            )

    def _check_version(self, data: dict[str, Any], errors: list[ValidationIssue]) -> None:
        version = data.get("version")
        if not version:
            return

        if not isinstance(version, str) or not SEMVER_PATTERN.match(version):
            errors.append(
                ValidationIssue(
                    "INVALID_VERSION_FORMAT",
                    "version",
                    "Version must be semantic major.minor.patch (e.g. 1.0.0)",
                )
            )

    def _check_formula(self, data: dict[str, Any], warnings: list[ValidationIssue]) -> None:
        formula = data.get("formula")
        if not formula or not isinstance(formula, str):
            return

        if not FORMULA_OPERATOR_PATTERN.search(formula) and not FORMULA_VARIABLE_PATTERN.search(formula):
            warnings.append(
                ValidationIssue(
                    "SIMPLE_FORMULA_WARNING",
                    "formula",
                    "Formula looks too simple to describe the calculation",
                    "Name the quantities and steps, e.g. (successful sessions / total sessions) × 100",
                )
            )

        lowered = formula.lower()
        if ("/" in formula or "÷" in formula) and not any(marker in lowered for marker in DIVISION_SAFEGUARDS):
            warnings.append(
                ValidationIssue(
                    "DIVISION_BY_ZERO_WARNING",
                    "formula",
                    "Formulas with division should state how a zero denominator is handled",
                    "Note the non-zero denominator condition or the fallback value",
                )
            )

    def _check_governance(
        self, data: dict[str, Any], errors: list[ValidationIssue], warnings: list[ValidationIssue]
    ) -> None:
        governance = data.get("governance")
        if not isinstance(governance, Mapping):
            return

        last_reviewed = governance.get("lastReviewed")
        if not last_reviewed:
            return

        if not is_iso_timestamp(last_reviewed):
            errors.append(
                ValidationIssue(
                    "INVALID_DATE_FORMAT",
                    "governance.lastReviewed",
                    f"Review date must be an ISO 8601 timestamp: {last_reviewed}",
                )
            )
            return

        try:
            cycle = ReviewCycle(_text(governance.get("reviewCycle")))
        except ValueError:
            return

        age = months_since(parse_iso_timestamp(last_reviewed), self.now)
        if age > OVERDUE_FACTOR * cycle.months:
            warnings.append(
                ValidationIssue(
                    "OVERDUE_REVIEW",
                    "governance.lastReviewed",
                    f"Review is overdue for a {cycle.value} cycle ({age:.1f} months since last review)",
                    "Schedule a review and update governance.lastReviewed",
                )
            )

    def _check_tags(self, data: dict[str, Any], warnings: list[ValidationIssue]) -> None:
        tags = data.get("tags")
        if not isinstance(tags, list | tuple) or not tags:
            return

        for tag in tags:
            if not isinstance(tag, str) or not TAG_PATTERN.match(tag):
                warnings.append(
                    ValidationIssue(
                        "INVALID_TAG_FORMAT",
                        "tags",
                        f'Tag "{tag}" should use lowercase letters and underscores',
                        "Use tags like business, user_experience, core_metric",
                    )
                )

        common_tags = self.rules.common_tags
        if not any(tag in common_tags for tag in tags):
            warnings.append(
                ValidationIssue(
                    "MISSING_COMMON_TAG",
                    "tags",
                    "Add a common category tag to make the metric searchable",
                    f"Consider adding one of: {', '.join(common_tags)}",
                )
            )


class MetricNamingSuggester:
    """Suggests standard camelCase names from a free-text description and a unit."""

    KEYWORDS: dict[frozenset[str], list[tuple[tuple[str, ...], list[str]]]] = {
        frozenset({"percentage", "ratio"}): [
            (("success", "complet"), ["successRate", "completionRate"]),
            (("fail", "error"), ["failureRate", "errorRate"]),
            (("conversion", "convert"), ["conversionRate", "conversionRatio"]),
        ],
        frozenset({"milliseconds", "seconds"}): [
            (("response", "respond"), ["responseTime", "avgResponseTime"]),
            (("process", "execut"), ["processingTime", "executionTime"]),
            (("wait", "queue"), ["waitTime", "queueTime"]),
        ],
        frozenset({"count"}): [
            (("total",), ["totalSessions", "totalRequests"]),
            (("average", "avg", "mean"), ["avgCount", "avgValue"]),
        ],
        frozenset({"cny", "usd"}): [
            (("cost", "spend"), ["totalCost", "avgCostPerSession"]),
            (("revenue", "income"), ["totalRevenue", "avgRevenue"]),
        ],
    }

    @classmethod
    def suggest_names(cls, description: str, unit: MetricUnit) -> list[str]:
        """
        Suggest names for a metric.

        Example:
            >>> MetricNamingSuggester.suggest_names("Share of failed requests", MetricUnit.PERCENTAGE)
            ['failureRate', 'errorRate']
        """
        lowered = description.lower()
        suggestions: list[str] = []
        for units, rules in cls.KEYWORDS.items():
            if unit.value not in units:
                continue
            for keywords, names in rules:
                if any(keyword in lowered for keyword in keywords):
                    suggestions.extend(name for name in names if name not in suggestions)
        return suggestions


class MetricFormatSuggester:
    """Suggests a display format for a unit and data type."""

    @staticmethod
    def suggest_format(unit: MetricUnit, data_type: MetricDataType) -> MetricFormat:
        if unit is MetricUnit.PERCENTAGE:
            return MetricFormat(display_type=DisplayType.PERCENTAGE, suffix="%")
        if unit is MetricUnit.CNY:
            return MetricFormat(display_type=DisplayType.CURRENCY, thousands_separator=True, prefix="¥")
        if unit is MetricUnit.USD:
            return MetricFormat(display_type=DisplayType.CURRENCY, thousands_separator=True, prefix="$")
        if unit is MetricUnit.SECONDS:
            return MetricFormat(display_type=DisplayType.DURATION, suffix="s")
        if unit is MetricUnit.MILLISECONDS:
            return MetricFormat(display_type=DisplayType.DURATION, suffix="ms")
        if unit is MetricUnit.COUNT:
            return MetricFormat(display_type=DisplayType.NUMBER, thousands_separator=True)
        return MetricFormat(
            display_type=DisplayType.NUMBER,
            thousands_separator=data_type is MetricDataType.INTEGER,
        )
