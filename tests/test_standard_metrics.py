#!/usr/bin/env python3
"""
Tests for the standard metric seed set
"""

from metric_standards.domain.definitions import (
    MetricCategory,
    MetricLevel,
    MetricStatus,
    MetricUnit,
    QualityLevel,
)
from metric_standards.standard_metrics import (
    SEED_REVIEW_DATE,
    create_default_registry,
    standard_metric_definitions,
)

EXPECTED_IDS = [
    "business_user_taskSuccessRate",
    "business_user_userValueDensity",
    "business_user_retentionRate7d",
    "quality_interaction_effectiveDepth",
    "quality_interaction_firstResponseHitRate",
    "performance_system_avgResponseTime",
    "performance_session_successRate",
    "cost_token_totalCost",
    "cost_token_avgCostPerSession",
]


class TestStandardDefinitions:
    """Tests for standard_metric_definitions()"""

    def test_ids_in_tier_order(self):
        """Test nine definitions are produced, L1 first"""
        definitions = standard_metric_definitions()

        assert [d.id for d in definitions] == EXPECTED_IDS
        assert [d.level for d in definitions[:3]] == [MetricLevel.L1] * 3

    def test_fresh_list_each_call(self):
        """Test callers get an independent list"""
        first = standard_metric_definitions()
        first.pop()

        assert len(standard_metric_definitions()) == 9

    def test_shared_governance(self):
        """Test every seed definition is approved and reviewed on the seed date"""
        for definition in standard_metric_definitions():
            assert definition.governance.approval_status is MetricStatus.APPROVED
            assert definition.governance.last_reviewed == SEED_REVIEW_DATE
            assert definition.version == "1.0.0"
            assert definition.format.color_mapping is not None

    def test_retention_filed_under_user(self):
        """Test the retention metric keeps its business_ id but the user category"""
        retention = create_default_registry().get_metric("business_user_retentionRate7d")

        assert retention.category is MetricCategory.USER
        assert retention.unit is MetricUnit.PERCENTAGE

    def test_names_differ_from_id_suffix(self):
        """Test the two definitions whose names are longer than their id suffix"""
        registry = create_default_registry()

        assert registry.get_metric("quality_interaction_effectiveDepth").name == "effectiveInteractionDepth"
        assert registry.get_metric("performance_session_successRate").name == "sessionSuccessRate"


class TestStandardBehaviour:
    """Tests exercising seed definitions through classify/format_value"""

    def test_latency_is_lower_is_better(self, registry):
        """Test response time classification with ascending thresholds"""
        latency = registry.get_metric("performance_system_avgResponseTime")

        assert latency.classify(1500) is QualityLevel.EXCELLENT
        assert latency.classify(4000) is QualityLevel.WARNING
        assert latency.classify(12000) is QualityLevel.CRITICAL
        assert latency.format_value(1800) == "1800ms"

    def test_task_success_rate(self, registry):
        """Test a higher-is-better percentage"""
        task = registry.get_metric("business_user_taskSuccessRate")

        assert task.classify(80) is QualityLevel.GOOD
        assert task.format_value(80) == "80.0%"

    def test_total_cost_format(self, registry):
        """Test currency prefix and separators"""
        assert registry.get_metric("cost_token_totalCost").format_value(12345.678) == "¥12,345.68"

    def test_dependencies(self, registry):
        """Test seeded cross-references"""
        assert registry.get_metric("business_user_userValueDensity").dependencies == (
            "business_user_taskSuccessRate",
        )
        assert registry.get_metric("cost_token_avgCostPerSession").dependencies == ("cost_token_totalCost",)
