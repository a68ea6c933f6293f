"""
Consistency check domain models

Represents what the source-tree scan finds and reports:
    - MetricUsage: one metric-field occurrence on a source line
    - MetricInconsistency: one detected drift issue
    - ConsistencyReport: the full result of a check
    - AutoFixResult: outcome of an auto-fix pass
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class UsageKind(Enum):
    """What a scanned occurrence represents."""

    VALUE = "value"  # field assigned a numeric literal
    NAMING_ISSUE = "naming_issue"  # non-standard field name
    DECLARATION = "declaration"  # structural type declaration mentioning Metric


class Severity(Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Sort weight, higher is more severe."""
        return {"critical": 4, "high": 3, "medium": 2, "low": 1}[self.value]


class InconsistencyType(Enum):
    NAMING = "naming"
    FORMAT = "format"
    DEPENDENCY = "dependency"
    DUPLICATE = "duplicate"
    MISSING = "missing"


class InconsistencyRule(Enum):
    """Which analysis produced an inconsistency."""

    NAMING_DRIFT = "naming_drift"
    UNIT_DRIFT = "unit_drift"
    RANGE_DRIFT = "range_drift"
    DUPLICATE_DEFINITION = "duplicate_definition"
    MISSING_STANDARD = "missing_standard"


@dataclass(frozen=True)
class MetricUsage:
    """
    A metric-field occurrence found while scanning.

    Attributes:
        file: Path relative to the scanned project root (forward slashes)
        line: 1-based line number
        field_name: Field (VALUE), non-standard token (NAMING_ISSUE) or type name (DECLARATION)
        value: Numeric literal for VALUE usages, None otherwise
        context: The stripped source line
        kind: What the occurrence represents
    """

    file: str
    line: int
    field_name: str
    value: float | None
    context: str
    kind: UsageKind = UsageKind.VALUE


@dataclass(frozen=True)
class SourceLocation:
    file: str
    line: int

    def __str__(self) -> str:
        return f"{self.file}:{self.line}"


@dataclass
class MetricInconsistency:
    """
    A detected divergence from the registered standard.

    Attributes:
        type: Issue family (naming, format, dependency, duplicate, missing)
        rule: Analysis that produced the issue
        severity: critical, high, medium or low
        metric_ids: Affected field names, type names or metric ids
        description: What was found
        suggestion: How to remediate
        auto_fixable: Whether MetricAutoFixer may resolve it
        locations: Source lines involved
        replacement: Canonical name for naming drift
    """

    type: InconsistencyType
    rule: InconsistencyRule
    severity: Severity
    metric_ids: list[str]
    description: str
    suggestion: str
    auto_fixable: bool
    locations: list[SourceLocation] = field(default_factory=list)
    replacement: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "type": self.type.value,
            "rule": self.rule.value,
            "severity": self.severity.value,
            "metricIds": list(self.metric_ids),
            "description": self.description,
            "suggestion": self.suggestion,
            "autoFixable": self.auto_fixable,
            "locations": [{"file": loc.file, "line": loc.line} for loc in self.locations],
        }
        if self.replacement is not None:
            data["replacement"] = self.replacement
        return data


@dataclass
class ConsistencyReport:
    """
    Result of a consistency check.

    Attributes:
        total_metrics: Number of definitions in the registry
        valid_metrics: Registry definitions passing validation
        invalid_metrics: Registry definitions failing validation
        inconsistencies: Issues sorted by descending severity
        suggestions: Aggregate remediation hints
        generated_at: ISO 8601 generation timestamp
        files_scanned: Number of files read during the walk
    """

    total_metrics: int
    valid_metrics: int
    invalid_metrics: int
    inconsistencies: list[MetricInconsistency]
    suggestions: list[str]
    generated_at: str
    files_scanned: int = 0

    @property
    def auto_fixable(self) -> list[MetricInconsistency]:
        return [issue for issue in self.inconsistencies if issue.auto_fixable]

    def by_severity(self) -> dict[Severity, list[MetricInconsistency]]:
        """Group issues by severity, most severe first; empty groups are omitted."""
        grouped: dict[Severity, list[MetricInconsistency]] = {}
        for severity in sorted(Severity, key=lambda s: s.rank, reverse=True):
            issues = [issue for issue in self.inconsistencies if issue.severity is severity]
            if issues:
                grouped[severity] = issues
        return grouped

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalMetrics": self.total_metrics,
            "validMetrics": self.valid_metrics,
            "invalidMetrics": self.invalid_metrics,
            "inconsistencies": [issue.to_dict() for issue in self.inconsistencies],
            "suggestions": list(self.suggestions),
            "generatedAt": self.generated_at,
            "filesScanned": self.files_scanned,
        }


@dataclass
class AutoFixResult:
    """
    Outcome of an auto-fix pass.

    Attributes:
        fixed: Issues resolved (or planned, in a dry run)
        failed: Issues that could not be resolved
        details: One human-readable line per attempted issue
        dry_run: True if no file was modified
    """

    fixed: int = 0
    failed: int = 0
    details: list[str] = field(default_factory=list)
    dry_run: bool = True
