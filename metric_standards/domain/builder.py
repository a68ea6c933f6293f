"""
Fluent builder for metric definitions

Accumulates a partial definition through chained setters and fails fast in
build() if any required field is missing. Also provides the standard
templates used to pre-fill common metric shapes.

Usage:
    definition = (
        MetricDefinitionBuilder()
        .id("performance_tool_toolCallSuccessRate")
        .name("toolCallSuccessRate")
        ...
        .build()
    )
"""

from dataclasses import dataclass
from typing import Any

from metric_standards.utils.datetime_utils import utc_now_iso

from .definitions import (
    ChangeType,
    ColorMapping,
    DisplayType,
    MetricCategory,
    MetricChange,
    MetricDataType,
    MetricDefinition,
    MetricFormat,
    MetricGovernance,
    MetricLevel,
    MetricRange,
    MetricStatus,
    MetricUnit,
    QualityThresholds,
    ReviewCycle,
)

# Checked in this order; the first missing one is reported
REQUIRED_FIELDS = (
    "id",
    "name",
    "display_name",
    "category",
    "level",
    "description",
    "formula",
    "unit",
    "data_type",
    "format",
    "precision",
    "quality_thresholds",
    "governance",
    "version",
    "tags",
    "domain",
)

WIRE_NAMES = {
    "display_name": "displayName",
    "data_type": "dataType",
    "quality_thresholds": "qualityThresholds",
}

DEFAULT_COLOR_MAPPING = ColorMapping(
    excellent="#10B981",
    good="#3B82F6",
    warning="#F59E0B",
    critical="#EF4444",
)


class MissingFieldError(ValueError):
    """Raised by MetricDefinitionBuilder.build() when a required field is absent."""

    def __init__(self, field_name: str):
        self.field_name = field_name
        super().__init__(f"Missing required field: {WIRE_NAMES.get(field_name, field_name)}")


@dataclass(frozen=True)
class MetricTemplate:
    """
    Partial definition shared by a family of metrics.

    Attributes:
        level: Metric tier
        category: Business area
        format: Display hints
        precision: Decimal places
        quality_thresholds: Default breakpoints
        review_cycle: Default review cadence
        approval_status: Default approval status
    """

    level: MetricLevel
    category: MetricCategory
    format: MetricFormat
    precision: int
    quality_thresholds: QualityThresholds
    review_cycle: ReviewCycle
    approval_status: MetricStatus = MetricStatus.APPROVED


L1_BUSINESS = MetricTemplate(
    level=MetricLevel.L1,
    category=MetricCategory.BUSINESS,
    format=MetricFormat(display_type=DisplayType.PERCENTAGE, thousands_separator=False, suffix="%"),
    precision=1,
    quality_thresholds=QualityThresholds(excellent=90, good=75, warning=60, critical=45),
    review_cycle=ReviewCycle.MONTHLY,
)

L2_QUALITY = MetricTemplate(
    level=MetricLevel.L2,
    category=MetricCategory.QUALITY,
    format=MetricFormat(display_type=DisplayType.NUMBER, thousands_separator=True),
    precision=2,
    quality_thresholds=QualityThresholds(excellent=85, good=70, warning=55, critical=40),
    review_cycle=ReviewCycle.QUARTERLY,
)

L3_PERFORMANCE = MetricTemplate(
    level=MetricLevel.L3,
    category=MetricCategory.PERFORMANCE,
    format=MetricFormat(display_type=DisplayType.DURATION, thousands_separator=False),
    precision=1,
    quality_thresholds=QualityThresholds(excellent=95, good=85, warning=70, critical=50),
    review_cycle=ReviewCycle.QUARTERLY,
)

STANDARD_METRIC_TEMPLATES = {
    "L1_BUSINESS": L1_BUSINESS,
    "L2_QUALITY": L2_QUALITY,
    "L3_PERFORMANCE": L3_PERFORMANCE,
}


class MetricDefinitionBuilder:
    """
    Chainable builder for MetricDefinition.

    Every setter returns the builder. build() raises MissingFieldError naming
    the first absent required field; it never registers the result anywhere.

    Example:
        >>> builder = MetricDefinitionBuilder().id("cost_token_totalCost").name("totalCost")
        >>> builder.build()
        Traceback (most recent call last):
        ...
        MissingFieldError: Missing required field: displayName
    """

    def __init__(self) -> None:
        self._fields: dict[str, Any] = {}
        self._template_governance: tuple[ReviewCycle, MetricStatus] | None = None

    @classmethod
    def from_template(cls, template: MetricTemplate) -> "MetricDefinitionBuilder":
        """
        Start a builder pre-filled from a standard template.

        Governance still has to be supplied, either fully via governance() or
        through owned_by(), which combines the owner with the template's
        review cycle and approval status.
        """
        builder = cls()
        builder._fields.update(
            level=template.level,
            category=template.category,
            format=template.format,
            precision=template.precision,
            quality_thresholds=template.quality_thresholds,
        )
        builder._template_governance = (template.review_cycle, template.approval_status)
        return builder

    def id(self, metric_id: str) -> "MetricDefinitionBuilder":
        self._fields["id"] = metric_id
        return self

    def name(self, name: str) -> "MetricDefinitionBuilder":
        self._fields["name"] = name
        return self

    def display_name(self, display_name: str) -> "MetricDefinitionBuilder":
        self._fields["display_name"] = display_name
        return self

    def category(self, category: MetricCategory) -> "MetricDefinitionBuilder":
        self._fields["category"] = category
        return self

    def level(self, level: MetricLevel) -> "MetricDefinitionBuilder":
        self._fields["level"] = level
        return self

    def description(self, description: str) -> "MetricDefinitionBuilder":
        self._fields["description"] = description
        return self

    def formula(self, formula: str) -> "MetricDefinitionBuilder":
        self._fields["formula"] = formula
        return self

    def unit(self, unit: MetricUnit) -> "MetricDefinitionBuilder":
        self._fields["unit"] = unit
        return self

    def data_type(self, data_type: MetricDataType) -> "MetricDefinitionBuilder":
        self._fields["data_type"] = data_type
        return self

    def precision(self, precision: int) -> "MetricDefinitionBuilder":
        self._fields["precision"] = precision
        return self

    def range(self, min_value: float | None = None, max_value: float | None = None) -> "MetricDefinitionBuilder":
        self._fields["range"] = MetricRange(min=min_value, max=max_value)
        return self

    def quality_thresholds(self, thresholds: QualityThresholds) -> "MetricDefinitionBuilder":
        self._fields["quality_thresholds"] = thresholds
        return self

    def format(self, metric_format: MetricFormat) -> "MetricDefinitionBuilder":
        self._fields["format"] = metric_format
        return self

    def governance(self, governance: MetricGovernance) -> "MetricDefinitionBuilder":
        self._fields["governance"] = governance
        return self

    def owned_by(self, owner: str, last_reviewed: str | None = None) -> "MetricDefinitionBuilder":
        """Set governance from the template's cadence and status (requires from_template)."""
        if self._template_governance is None:
            raise ValueError("owned_by() requires a builder created with from_template()")
        review_cycle, approval_status = self._template_governance
        self._fields["governance"] = MetricGovernance(
            owner=owner,
            review_cycle=review_cycle,
            last_reviewed=last_reviewed or utc_now_iso(),
            approval_status=approval_status,
        )
        return self

    def version(self, version: str) -> "MetricDefinitionBuilder":
        self._fields["version"] = version
        return self

    def tags(self, *tags: str) -> "MetricDefinitionBuilder":
        self._fields["tags"] = tuple(tags)
        return self

    def domains(self, *domains: str) -> "MetricDefinitionBuilder":
        self._fields["domain"] = tuple(domains)
        return self

    def dependencies(self, *dependencies: str) -> "MetricDefinitionBuilder":
        self._fields["dependencies"] = tuple(dependencies)
        return self

    def derived_metrics(self, *derived: str) -> "MetricDefinitionBuilder":
        self._fields["derived_metrics"] = tuple(derived)
        return self

    def change_history(self, *changes: MetricChange) -> "MetricDefinitionBuilder":
        self._fields["change_history"] = tuple(changes)
        return self

    def metadata(self, **metadata: Any) -> "MetricDefinitionBuilder":
        self._fields["metadata"] = dict(metadata)
        return self

    def build(self) -> MetricDefinition:
        """
        Assemble the definition.

        Returns:
            Immutable MetricDefinition with defaults filled in

        Raises:
            MissingFieldError: If a required field was never set
        """
        for field_name in REQUIRED_FIELDS:
            if self._fields.get(field_name) is None:
                raise MissingFieldError(field_name)

        fields = dict(self._fields)
        if not fields.get("change_history"):
            fields["change_history"] = (
                MetricChange(
                    version=fields["version"],
                    date=utc_now_iso(),
                    author="system",
                    type=ChangeType.CREATE,
                    description=f"Created metric {fields['display_name']}",
                ),
            )
        fields.setdefault("dependencies", ())
        fields.setdefault("derived_metrics", ())
        fields.setdefault("metadata", {})

        return MetricDefinition(**fields)
