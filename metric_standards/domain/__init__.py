"""
Domain Models - Type-safe data structures for metric standards

This package contains dataclasses representing the standardization domain:
    - definitions: MetricDefinition and its vocabularies
    - builder: MetricDefinitionBuilder, standard templates
    - consistency: MetricUsage, MetricInconsistency, ConsistencyReport

Usage:
    from metric_standards.domain import MetricDefinitionBuilder, MetricCategory

    definition = MetricDefinitionBuilder().id(...).name(...).build()
    if definition.category is MetricCategory.COST:
        print(definition.format_value(1234.5))
"""

from .builder import STANDARD_METRIC_TEMPLATES, MetricDefinitionBuilder, MetricTemplate, MissingFieldError
from .consistency import (
    AutoFixResult,
    ConsistencyReport,
    InconsistencyRule,
    InconsistencyType,
    MetricInconsistency,
    MetricUsage,
    Severity,
    SourceLocation,
    UsageKind,
)
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
    QualityLevel,
    QualityThresholds,
    ReviewCycle,
)

__all__ = [
    # Definition model
    "ChangeType",
    "ColorMapping",
    "DisplayType",
    "MetricCategory",
    "MetricChange",
    "MetricDataType",
    "MetricDefinition",
    "MetricFormat",
    "MetricGovernance",
    "MetricLevel",
    "MetricRange",
    "MetricStatus",
    "MetricUnit",
    "QualityLevel",
    "QualityThresholds",
    "ReviewCycle",
    # Builder
    "MetricDefinitionBuilder",
    "MetricTemplate",
    "MissingFieldError",
    "STANDARD_METRIC_TEMPLATES",
    # Consistency
    "AutoFixResult",
    "ConsistencyReport",
    "InconsistencyRule",
    "InconsistencyType",
    "MetricInconsistency",
    "MetricUsage",
    "Severity",
    "SourceLocation",
    "UsageKind",
]
