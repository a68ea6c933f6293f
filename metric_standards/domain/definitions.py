"""
Metric definition domain models

The standardized metadata record for a single metric:
    - MetricDefinition: identity, classification, unit/type, display format,
      quality thresholds, governance and version history
    - Enumerations for the closed vocabularies (category, level, unit, ...)

Definitions are immutable. The wire format (registry export/import, validator
input) uses camelCase keys; `to_dict()` / `from_dict()` convert between the two.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class MetricCategory(Enum):
    """Business area a metric belongs to."""

    BUSINESS = "business"
    PERFORMANCE = "performance"
    QUALITY = "quality"
    COST = "cost"
    USER = "user"
    SYSTEM = "system"
    SECURITY = "security"


class MetricLevel(Enum):
    """
    Metric tier.

    Attributes:
        L1: Core business metrics
        L2: Supporting analysis metrics
        L3: Technical monitoring metrics
    """

    L1 = "L1"
    L2 = "L2"
    L3 = "L3"


class MetricUnit(Enum):
    """Closed enumeration of standard units. Time is stored in milliseconds by convention."""

    COUNT = "count"
    PERCENTAGE = "percentage"  # 0-100
    RATIO = "ratio"  # 0-1
    RATE = "rate"  # events per time unit

    MILLISECONDS = "milliseconds"
    SECONDS = "seconds"
    MINUTES = "minutes"
    HOURS = "hours"
    DAYS = "days"

    BYTES = "bytes"
    KILOBYTES = "kilobytes"
    MEGABYTES = "megabytes"
    GIGABYTES = "gigabytes"

    CNY = "cny"
    USD = "usd"

    SCORE = "score"
    DIMENSIONLESS = "dimensionless"
    BOOLEAN = "boolean"


class MetricDataType(Enum):
    """Storage type of metric values."""

    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    STRING = "string"
    TIMESTAMP = "timestamp"


class MetricStatus(Enum):
    """Approval status in the governance workflow."""

    DRAFT = "draft"
    REVIEW = "review"
    APPROVED = "approved"
    DEPRECATED = "deprecated"
    RETIRED = "retired"


class ReviewCycle(Enum):
    """How often a definition must be reviewed."""

    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"

    @property
    def months(self) -> int:
        return {"monthly": 1, "quarterly": 3, "yearly": 12}[self.value]


class DisplayType(Enum):
    """Display kind hint for renderers."""

    NUMBER = "number"
    PERCENTAGE = "percentage"
    CURRENCY = "currency"
    DURATION = "duration"
    SIZE = "size"


class ChangeType(Enum):
    CREATE = "create"
    MODIFY = "modify"
    DEPRECATE = "deprecate"


class QualityLevel(Enum):
    """Classification of an observed value against the quality thresholds."""

    EXCELLENT = "excellent"
    GOOD = "good"
    WARNING = "warning"
    CRITICAL = "critical"


@dataclass(frozen=True)
class ColorMapping:
    """Quality level to display color (hex strings)."""

    excellent: str
    good: str
    warning: str
    critical: str


@dataclass(frozen=True)
class MetricFormat:
    """
    Display hints consumed by downstream renderers.

    Attributes:
        display_type: Display kind (number, percentage, currency, duration, size)
        thousands_separator: Group digits with commas
        prefix: Text placed before the value (e.g. "$")
        suffix: Text placed after the value (e.g. "%", "ms")
        color_mapping: Optional quality level to color mapping
    """

    display_type: DisplayType
    thousands_separator: bool = False
    prefix: str | None = None
    suffix: str | None = None
    color_mapping: ColorMapping | None = None


@dataclass(frozen=True)
class MetricRange:
    """Valid value range; either bound may be open."""

    min: float | None = None
    max: float | None = None

    def contains(self, value: float) -> bool:
        if self.min is not None and value < self.min:
            return False
        if self.max is not None and value > self.max:
            return False
        return True


@dataclass(frozen=True)
class QualityThresholds:
    """
    Four breakpoints used to classify an observed value.

    The standard ordering is strictly descending (excellent > good > warning > critical)
    for higher-is-better metrics; lower-is-better metrics such as latency or cost
    use an ascending quadruple.
    """

    excellent: float
    good: float
    warning: float
    critical: float

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.excellent, self.good, self.warning, self.critical)

    @property
    def is_descending(self) -> bool:
        """True if excellent > good > warning > critical holds strictly."""
        return self.excellent > self.good > self.warning > self.critical


@dataclass(frozen=True)
class MetricGovernance:
    """
    Ownership, review cadence and approval metadata.

    Attributes:
        owner: Owning team or person
        review_cycle: How often the definition must be reviewed
        last_reviewed: ISO 8601 timestamp of the last review
        approval_status: Current approval status
        business_approver: Optional business sign-off
        technical_approver: Optional technical sign-off
        approval_date: Optional ISO 8601 approval timestamp
    """

    owner: str
    review_cycle: ReviewCycle
    last_reviewed: str
    approval_status: MetricStatus
    business_approver: str | None = None
    technical_approver: str | None = None
    approval_date: str | None = None


@dataclass(frozen=True)
class MetricChange:
    """One entry in a definition's change history."""

    version: str
    date: str
    author: str
    type: ChangeType
    description: str
    impact_assessment: str | None = None
    rollback_plan: str | None = None


@dataclass(frozen=True)
class MetricDefinition:
    """
    Standardized metric definition.

    Construct through MetricDefinitionBuilder, which checks that every
    required field is present. Cross-references (dependencies, derived_metrics)
    are ids resolved through the registry and may dangle.

    Attributes:
        id: Globally unique id, `{category}_{domain}_{name}`
        name: camelCase identifier used in source code
        display_name: Human label
        category: Business area
        level: Metric tier (L1/L2/L3)
        domain: Applicability tags (non-empty)
        description: Free text
        formula: Calculation, referencing named quantities
        unit: Standard unit
        data_type: Storage type
        format: Display hints
        precision: Decimal places
        quality_thresholds: Classification breakpoints
        governance: Ownership and review metadata
        version: Semantic version
        change_history: Ordered change records
        range: Optional valid range
        dependencies: Ids this metric is computed from
        derived_metrics: Ids computed from this metric
        tags: Lowercase, underscore-delimited labels (non-empty)
        metadata: Opaque extension map

    Example:
        definition = registry.get_metric("performance_system_avgResponseTime")
        level = definition.classify(1800)
        print(definition.format_value(1800), level.value)
    """

    id: str
    name: str
    display_name: str
    category: MetricCategory
    level: MetricLevel
    domain: tuple[str, ...]
    description: str
    formula: str
    unit: MetricUnit
    data_type: MetricDataType
    format: MetricFormat
    precision: int
    quality_thresholds: QualityThresholds
    governance: MetricGovernance
    version: str
    tags: tuple[str, ...]
    change_history: tuple[MetricChange, ...] = ()
    range: MetricRange | None = None
    dependencies: tuple[str, ...] = ()
    derived_metrics: tuple[str, ...] = ()
    metadata: dict[str, Any] = field(default_factory=dict, compare=False)

    def classify(self, value: float) -> QualityLevel:
        """
        Classify an observed value against the quality thresholds.

        Descending thresholds mean higher is better; ascending thresholds
        mean lower is better (latency, cost).

        Returns:
            The best quality level whose breakpoint the value reaches

        Example:
            >>> # thresholds 90/75/60/45
            >>> definition.classify(80)
            <QualityLevel.GOOD: 'good'>
        """
        t = self.quality_thresholds
        higher_is_better = t.excellent >= t.critical

        def reaches(breakpoint: float) -> bool:
            return value >= breakpoint if higher_is_better else value <= breakpoint

        if reaches(t.excellent):
            return QualityLevel.EXCELLENT
        if reaches(t.good):
            return QualityLevel.GOOD
        if reaches(t.warning):
            return QualityLevel.WARNING
        return QualityLevel.CRITICAL

    def format_value(self, value: float) -> str:
        """
        Render a value with the definition's precision, separators, prefix and suffix.

        Example:
            >>> # precision=2, thousands_separator=True, prefix="$"
            >>> definition.format_value(12345.678)
            '$12,345.68'
        """
        format_spec = f"{',' if self.format.thousands_separator else ''}.{self.precision}f"
        rendered = format(float(value), format_spec)
        return f"{self.format.prefix or ''}{rendered}{self.format.suffix or ''}"

    def to_dict(self) -> dict[str, Any]:
        """
        Convert to the camelCase JSON shape used by export/import.

        Optional keys that are unset are omitted.
        """
        fmt: dict[str, Any] = {
            "displayType": self.format.display_type.value,
            "thousandsSeparator": self.format.thousands_separator,
        }
        if self.format.prefix is not None:
            fmt["prefix"] = self.format.prefix
        if self.format.suffix is not None:
            fmt["suffix"] = self.format.suffix
        if self.format.color_mapping is not None:
            cm = self.format.color_mapping
            fmt["colorMapping"] = {
                "excellent": cm.excellent,
                "good": cm.good,
                "warning": cm.warning,
                "critical": cm.critical,
            }

        governance: dict[str, Any] = {
            "owner": self.governance.owner,
            "reviewCycle": self.governance.review_cycle.value,
            "lastReviewed": self.governance.last_reviewed,
            "approvalStatus": self.governance.approval_status.value,
        }
        for key, value in (
            ("businessApprover", self.governance.business_approver),
            ("technicalApprover", self.governance.technical_approver),
            ("approvalDate", self.governance.approval_date),
        ):
            if value is not None:
                governance[key] = value

        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "displayName": self.display_name,
            "category": self.category.value,
            "level": self.level.value,
            "domain": list(self.domain),
            "description": self.description,
            "formula": self.formula,
            "unit": self.unit.value,
            "dataType": self.data_type.value,
            "format": fmt,
            "precision": self.precision,
            "qualityThresholds": {
                "excellent": self.quality_thresholds.excellent,
                "good": self.quality_thresholds.good,
                "warning": self.quality_thresholds.warning,
                "critical": self.quality_thresholds.critical,
            },
            "governance": governance,
            "version": self.version,
            "changeHistory": [_change_to_dict(change) for change in self.change_history],
            "dependencies": list(self.dependencies),
            "derivedMetrics": list(self.derived_metrics),
            "tags": list(self.tags),
            "metadata": dict(self.metadata),
        }
        if self.range is not None:
            data["range"] = {"min": self.range.min, "max": self.range.max}
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MetricDefinition":
        """
        Deserialize from the camelCase JSON shape.

        Raises:
            KeyError: If a required key is missing
            ValueError: If an enumerated value is unknown
            TypeError: If a nested value has the wrong shape
        """
        for key in ("id", "name"):
            if not isinstance(data[key], str):
                raise TypeError(f"{key} must be a string, got {type(data[key]).__name__}")

        fmt = data["format"]
        color_mapping = fmt.get("colorMapping")
        governance = data["governance"]
        thresholds = data["qualityThresholds"]
        value_range = data.get("range")

        return cls(
            id=data["id"],
            name=data["name"],
            display_name=data["displayName"],
            category=MetricCategory(data["category"]),
            level=MetricLevel(data["level"]),
            domain=_str_tuple(data, "domain"),
            description=data["description"],
            formula=data["formula"],
            unit=MetricUnit(data["unit"]),
            data_type=MetricDataType(data["dataType"]),
            format=MetricFormat(
                display_type=DisplayType(fmt["displayType"]),
                thousands_separator=bool(fmt.get("thousandsSeparator", False)),
                prefix=fmt.get("prefix"),
                suffix=fmt.get("suffix"),
                color_mapping=ColorMapping(**color_mapping) if color_mapping else None,
            ),
            precision=int(data["precision"]),
            quality_thresholds=QualityThresholds(
                excellent=thresholds["excellent"],
                good=thresholds["good"],
                warning=thresholds["warning"],
                critical=thresholds["critical"],
            ),
            governance=MetricGovernance(
                owner=governance["owner"],
                review_cycle=ReviewCycle(governance["reviewCycle"]),
                last_reviewed=governance["lastReviewed"],
                approval_status=MetricStatus(governance["approvalStatus"]),
                business_approver=governance.get("businessApprover"),
                technical_approver=governance.get("technicalApprover"),
                approval_date=governance.get("approvalDate"),
            ),
            version=data["version"],
            tags=_str_tuple(data, "tags"),
            change_history=tuple(_change_from_dict(change) for change in data.get("changeHistory", [])),
            range=MetricRange(min=value_range.get("min"), max=value_range.get("max")) if value_range else None,
            dependencies=_str_tuple(data, "dependencies", required=False),
            derived_metrics=_str_tuple(data, "derivedMetrics", required=False),
            metadata=dict(data.get("metadata", {})),
        )


def _change_to_dict(change: MetricChange) -> dict[str, Any]:
    data: dict[str, Any] = {
        "version": change.version,
        "date": change.date,
        "author": change.author,
        "type": change.type.value,
        "description": change.description,
    }
    if change.impact_assessment is not None:
        data["impactAssessment"] = change.impact_assessment
    if change.rollback_plan is not None:
        data["rollbackPlan"] = change.rollback_plan
    return data


def _change_from_dict(data: dict[str, Any]) -> MetricChange:
    return MetricChange(
        version=data["version"],
        date=data["date"],
        author=data["author"],
        type=ChangeType(data["type"]),
        description=data["description"],
        impact_assessment=data.get("impactAssessment"),
        rollback_plan=data.get("rollbackPlan"),
    )


def _str_tuple(data: dict[str, Any], key: str, required: bool = True) -> tuple[str, ...]:
    values = data[key] if required else data.get(key, [])
    if not isinstance(values, list) or not all(isinstance(value, str) for value in values):
        raise TypeError(f"{key} must be a list of strings")
    return tuple(values)
