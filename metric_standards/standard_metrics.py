"""
Standard Metric Definitions

The fixed seed set of organization-wide metric definitions across the three
tiers (L1 business, L2 quality, L3 technical), and a factory for a registry
pre-loaded with them.

Usage:
    from metric_standards.standard_metrics import create_default_registry

    registry = create_default_registry()
    definition = registry.get_metric("performance_system_avgResponseTime")
"""

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

SEED_REVIEW_DATE = "2024-08-25T00:00:00.000Z"
SEED_VERSION = "1.0.0"

PRODUCT_TEAM = "Product Team"
GROWTH_TEAM = "Growth Team"
QUALITY_TEAM = "Quality Team"
ENGINEERING_TEAM = "Engineering Team"
FINANCE_TEAM = "Finance Team"


def _display(
    display_type: DisplayType,
    suffix: str | None = None,
    prefix: str | None = None,
    thousands_separator: bool = False,
) -> MetricFormat:
    return MetricFormat(
        display_type=display_type,
        thousands_separator=thousands_separator,
        prefix=prefix,
        suffix=suffix,
        color_mapping=DEFAULT_COLOR_MAPPING,
    )


def _governance(owner: str, review_cycle: ReviewCycle) -> MetricGovernance:
    return MetricGovernance(
        owner=owner,
        review_cycle=review_cycle,
        last_reviewed=SEED_REVIEW_DATE,
        approval_status=MetricStatus.APPROVED,
    )


def _percentage_metric(metric_id: str, name: str) -> MetricDefinitionBuilder:
    """Common shape of the 0-100 percentage metrics."""
    return (
        MetricDefinitionBuilder()
        .id(metric_id)
        .name(name)
        .unit(MetricUnit.PERCENTAGE)
        .data_type(MetricDataType.FLOAT)
        .precision(1)
        .range(0, 100)
        .format(_display(DisplayType.PERCENTAGE, suffix="%"))
        .version(SEED_VERSION)
    )


def _business_metrics() -> list[MetricDefinition]:
    task_success_rate = (
        _percentage_metric("business_user_taskSuccessRate", "taskSuccessRate")
        .display_name("Task Success Rate")
        .category(MetricCategory.BUSINESS)
        .level(MetricLevel.L1)
        .domains("user_experience", "business_outcome")
        .description(
            "Share of sessions in which users complete their intended task; "
            "the key measure of how well the product delivers its core value"
        )
        .formula("(sessions with completed task / total sessions) × 100")
        .quality_thresholds(QualityThresholds(excellent=90, good=75, warning=60, critical=45))
        .governance(_governance(PRODUCT_TEAM, ReviewCycle.MONTHLY))
        .tags("business", "user", "success", "core")
        .build()
    )

    user_value_density = (
        MetricDefinitionBuilder()
        .id("business_user_userValueDensity")
        .name("userValueDensity")
        .display_name("User Value Density")
        .category(MetricCategory.BUSINESS)
        .level(MetricLevel.L1)
        .domains("user_experience", "value_creation")
        .description("Average quantified value a user gets from a single session")
        .formula("total user value score / total sessions")
        .unit(MetricUnit.SCORE)
        .data_type(MetricDataType.FLOAT)
        .precision(2)
        .range(0, 10)
        .quality_thresholds(QualityThresholds(excellent=3.0, good=2.0, warning=1.0, critical=0.5))
        .format(_display(DisplayType.NUMBER, suffix=" pts"))
        .governance(_governance(PRODUCT_TEAM, ReviewCycle.MONTHLY))
        .version(SEED_VERSION)
        .tags("business", "user", "value", "core")
        .dependencies("business_user_taskSuccessRate")
        .build()
    )

    # Filed under the user category while keeping its business_ id prefix
    retention_rate_7d = (
        _percentage_metric("business_user_retentionRate7d", "retentionRate7d")
        .display_name("7-Day Retention Rate")
        .category(MetricCategory.USER)
        .level(MetricLevel.L1)
        .domains("user_retention", "product_stickiness")
        .description("Share of new users who return within 7 days of first use; reflects short-term stickiness")
        .formula("new users returning within 7 days / total new users")
        .quality_thresholds(QualityThresholds(excellent=70, good=50, warning=30, critical=15))
        .governance(_governance(GROWTH_TEAM, ReviewCycle.MONTHLY))
        .tags("business", "user", "retention", "growth")
        .build()
    )

    return [task_success_rate, user_value_density, retention_rate_7d]


def _quality_metrics() -> list[MetricDefinition]:
    effective_depth = (
        MetricDefinitionBuilder()
        .id("quality_interaction_effectiveDepth")
        .name("effectiveInteractionDepth")
        .display_name("Effective Interaction Depth")
        .category(MetricCategory.QUALITY)
        .level(MetricLevel.L2)
        .domains("interaction_quality", "engagement")
        .description("Average number of meaningful conversation turns per session")
        .formula("sum of effective interaction turns / total sessions")
        .unit(MetricUnit.COUNT)
        .data_type(MetricDataType.FLOAT)
        .precision(1)
        .range(1, 20)
        .quality_thresholds(QualityThresholds(excellent=3.0, good=2.5, warning=2.0, critical=1.5))
        .format(_display(DisplayType.NUMBER, suffix=" turns"))
        .governance(_governance(QUALITY_TEAM, ReviewCycle.QUARTERLY))
        .version(SEED_VERSION)
        .tags("quality", "interaction", "engagement")
        .build()
    )

    first_response_hit_rate = (
        _percentage_metric("quality_interaction_firstResponseHitRate", "firstResponseHitRate")
        .display_name("First Response Hit Rate")
        .category(MetricCategory.QUALITY)
        .level(MetricLevel.L2)
        .domains("response_quality", "accuracy")
        .description("Share of sessions whose first reply already satisfies the user's request")
        .formula("sessions satisfied by first reply / total sessions")
        .quality_thresholds(QualityThresholds(excellent=85, good=70, warning=55, critical=40))
        .governance(_governance(QUALITY_TEAM, ReviewCycle.QUARTERLY))
        .tags("quality", "response", "accuracy")
        .build()
    )

    return [effective_depth, first_response_hit_rate]


def _technical_metrics() -> list[MetricDefinition]:
    # Latency and cost are lower-is-better: their thresholds ascend
    avg_response_time = (
        MetricDefinitionBuilder()
        .id("performance_system_avgResponseTime")
        .name("avgResponseTime")
        .display_name("Average Response Time")
        .category(MetricCategory.PERFORMANCE)
        .level(MetricLevel.L3)
        .domains("system_performance", "user_experience")
        .description("Average time the system takes to respond to a user request")
        .formula("sum of session response times / total sessions")
        .unit(MetricUnit.MILLISECONDS)
        .data_type(MetricDataType.INTEGER)
        .precision(0)
        .range(0, 30000)
        .quality_thresholds(QualityThresholds(excellent=2000, good=3000, warning=5000, critical=10000))
        .format(_display(DisplayType.DURATION, suffix="ms"))
        .governance(_governance(ENGINEERING_TEAM, ReviewCycle.QUARTERLY))
        .version(SEED_VERSION)
        .tags("performance", "response_time", "technical")
        .build()
    )

    session_success_rate = (
        _percentage_metric("performance_session_successRate", "sessionSuccessRate")
        .display_name("Session Success Rate")
        .category(MetricCategory.PERFORMANCE)
        .level(MetricLevel.L3)
        .domains("system_reliability", "quality")
        .description("Share of sessions that complete successfully")
        .formula("(successful sessions / total sessions) × 100")
        .quality_thresholds(QualityThresholds(excellent=95, good=90, warning=85, critical=80))
        .governance(_governance(ENGINEERING_TEAM, ReviewCycle.QUARTERLY))
        .tags("performance", "success_rate", "technical")
        .build()
    )

    total_cost = (
        MetricDefinitionBuilder()
        .id("cost_token_totalCost")
        .name("totalCost")
        .display_name("Total Token Cost")
        .category(MetricCategory.COST)
        .level(MetricLevel.L3)
        .domains("cost_management", "operations")
        .description("Total cost of all model calls")
        .formula("sum of model call costs")
        .unit(MetricUnit.CNY)
        .data_type(MetricDataType.FLOAT)
        .precision(2)
        .range(0, 1000000)
        .quality_thresholds(QualityThresholds(excellent=1000, good=5000, warning=10000, critical=50000))
        .format(_display(DisplayType.CURRENCY, prefix="¥", thousands_separator=True))
        .governance(_governance(FINANCE_TEAM, ReviewCycle.MONTHLY))
        .version(SEED_VERSION)
        .tags("cost", "token", "financial")
        .build()
    )

    avg_cost_per_session = (
        MetricDefinitionBuilder()
        .id("cost_token_avgCostPerSession")
        .name("avgCostPerSession")
        .display_name("Average Cost per Session")
        .category(MetricCategory.COST)
        .level(MetricLevel.L3)
        .domains("cost_efficiency", "operations")
        .description("Average token cost incurred by a single session")
        .formula("total token cost / total sessions")
        .unit(MetricUnit.CNY)
        .data_type(MetricDataType.FLOAT)
        .precision(2)
        .range(0, 100)
        .quality_thresholds(QualityThresholds(excellent=1.0, good=2.0, warning=5.0, critical=10.0))
        .format(_display(DisplayType.CURRENCY, prefix="¥"))
        .governance(_governance(FINANCE_TEAM, ReviewCycle.MONTHLY))
        .version(SEED_VERSION)
        .tags("cost", "efficiency", "financial")
        .dependencies("cost_token_totalCost")
        .build()
    )

    return [avg_response_time, session_success_rate, total_cost, avg_cost_per_session]


def standard_metric_definitions() -> list[MetricDefinition]:
    """
    Build the standard definitions, L1 first.

    Returns:
        A fresh list of nine definitions
    """
    return [*_business_metrics(), *_quality_metrics(), *_technical_metrics()]


def create_default_registry() -> MetricRegistry:
    """Construct a registry seeded with standard_metric_definitions()."""
    return MetricRegistry(standard_metric_definitions())
