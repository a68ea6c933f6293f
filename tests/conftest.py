"""
Pytest configuration and shared fixtures

Provides definition builders, registries and throwaway project trees for
the metric standards tests.
"""

from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path

import pytest

from metric_standards.domain.builder import DEFAULT_COLOR_MAPPING, MetricDefinitionBuilder
from metric_standards.domain.definitions import (
    DisplayType,
    MetricCategory,
    MetricDataType,
    MetricDefinition,
    MetricFormat,
    MetricGovernance,
    MetricLevel,
    MetricStatus,
    MetricUnit,
    QualityThresholds,
    ReviewCycle,
)
from metric_standards.registry import MetricRegistry
from metric_standards.standard_metrics import create_default_registry

# ===== Definition Fixtures =====


@pytest.fixture
def review_date():
    """Review timestamp used by sample definitions"""
    return "2026-01-15T00:00:00.000Z"


@pytest.fixture
def fixed_now():
    """Reference time shortly after review_date, so sample reviews are not overdue"""
    return datetime(2026, 2, 1, tzinfo=UTC)


@pytest.fixture
def definition_builder(review_date) -> Callable[..., MetricDefinitionBuilder]:
    """
    Factory for a fully-populated builder.

    Keyword arguments override the default id/name/category/tags so tests
    can derive variants.
    """

    def _make(
        metric_id: str = "performance_tool_toolCallSuccessRate",
        name: str = "toolCallSuccessRate",
        category: MetricCategory = MetricCategory.PERFORMANCE,
        tags: tuple[str, ...] = ("performance", "tool", "technical"),
    ) -> MetricDefinitionBuilder:
        return (
            MetricDefinitionBuilder()
            .id(metric_id)
            .name(name)
            .display_name("Tool Call Success Rate")
            .category(category)
            .level(MetricLevel.L3)
            .domains("tool_execution")
            .description("Share of tool calls that complete without error")
            .formula("(successful tool calls / total tool calls) × 100, non-zero denominator")
            .unit(MetricUnit.PERCENTAGE)
            .data_type(MetricDataType.FLOAT)
            .precision(1)
            .range(0, 100)
            .quality_thresholds(QualityThresholds(excellent=98, good=95, warning=90, critical=85))
            .format(
                MetricFormat(
                    display_type=DisplayType.PERCENTAGE,
                    suffix="%",
                    color_mapping=DEFAULT_COLOR_MAPPING,
                )
            )
            .governance(
                MetricGovernance(
                    owner="Engineering Team",
                    review_cycle=ReviewCycle.QUARTERLY,
                    last_reviewed=review_date,
                    approval_status=MetricStatus.APPROVED,
                )
            )
            .version("1.0.0")
            .tags(*tags)
        )

    return _make


@pytest.fixture
def sample_definition(definition_builder) -> MetricDefinition:
    """A definition that passes every validation rule"""
    return definition_builder().build()


@pytest.fixture
def cost_definition(review_date) -> MetricDefinition:
    """A lower-is-better currency definition"""
    return (
        MetricDefinitionBuilder()
        .id("cost_model_dailyCost")
        .name("dailyCost")
        .display_name("Daily Model Cost")
        .category(MetricCategory.COST)
        .level(MetricLevel.L2)
        .domains("cost_management")
        .description("Model spend per day")
        .formula("sum of model call costs per day")
        .unit(MetricUnit.USD)
        .data_type(MetricDataType.FLOAT)
        .precision(2)
        .quality_thresholds(QualityThresholds(excellent=100, good=250, warning=500, critical=1000))
        .format(MetricFormat(display_type=DisplayType.CURRENCY, thousands_separator=True, prefix="$"))
        .governance(
            MetricGovernance(
                owner="Finance Team",
                review_cycle=ReviewCycle.MONTHLY,
                last_reviewed=review_date,
                approval_status=MetricStatus.REVIEW,
            )
        )
        .version("1.2.0")
        .tags("cost", "financial")
        .dependencies("cost_token_totalCost", "cost_model_unknownMetric")
        .build()
    )


# ===== Registry Fixtures =====


@pytest.fixture
def registry() -> MetricRegistry:
    """Registry seeded with the standard definitions"""
    return create_default_registry()


@pytest.fixture
def empty_registry() -> MetricRegistry:
    return MetricRegistry()


# ===== Project Tree Fixtures =====


@pytest.fixture
def make_project(tmp_path) -> Callable[[dict[str, str]], Path]:
    """
    Factory that writes a project tree under tmp_path.

    Usage:
        root = make_project({"src/api.ts": "const respTime = 42;"})
    """

    def _make(files: dict[str, str]) -> Path:
        root = tmp_path / "project"
        root.mkdir(exist_ok=True)
        for relative_path, content in files.items():
            path = root / relative_path
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return root

    return _make
