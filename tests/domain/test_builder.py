#!/usr/bin/env python3
"""
Tests for MetricDefinitionBuilder and the standard templates
"""

import pytest

from metric_standards.domain.builder import (
    L1_BUSINESS,
    L3_PERFORMANCE,
    STANDARD_METRIC_TEMPLATES,
    MetricDefinitionBuilder,
    MissingFieldError,
)
from metric_standards.domain.definitions import (
    ChangeType,
    MetricCategory,
    MetricChange,
    MetricDataType,
    MetricLevel,
    MetricStatus,
    MetricUnit,
    ReviewCycle,
)
from metric_standards.utils.datetime_utils import is_iso_timestamp


class TestBuild:
    """Tests for build()"""

    def test_complete_builder(self, definition_builder):
        """Test a fully populated builder produces a definition"""
        definition = definition_builder().build()

        assert definition.id == "performance_tool_toolCallSuccessRate"
        assert definition.name == "toolCallSuccessRate"
        assert definition.domain == ("tool_execution",)
        assert definition.range is not None and definition.range.max == 100

    def test_missing_display_name(self):
        """Test the first missing required field is named in wire form"""
        builder = MetricDefinitionBuilder().id("cost_token_totalCost").name("totalCost")

        with pytest.raises(MissingFieldError) as exc_info:
            builder.build()

        assert str(exc_info.value) == "Missing required field: displayName"
        assert exc_info.value.field_name == "display_name"

    def test_empty_builder_reports_id(self):
        """Test id is the first required field checked"""
        with pytest.raises(MissingFieldError, match="Missing required field: id"):
            MetricDefinitionBuilder().build()

    def test_missing_domain_reported_last(self, definition_builder):
        """Test domain is checked after every other required field"""
        builder = definition_builder()
        builder._fields.pop("domain")

        with pytest.raises(MissingFieldError, match="domain"):
            builder.build()

    def test_missing_field_error_is_value_error(self):
        """Test callers can catch ValueError"""
        with pytest.raises(ValueError):
            MetricDefinitionBuilder().id("x").build()

    def test_setters_chain(self):
        """Test every setter returns the same builder"""
        builder = MetricDefinitionBuilder()
        assert builder.id("a") is builder
        assert builder.tags("a", "b") is builder
        assert builder.metadata(owner_note="x") is builder


class TestDefaults:
    """Tests for defaults filled in by build()"""

    def test_synthetic_change_history(self, definition_builder):
        """Test a create entry is added when no history was supplied"""
        definition = definition_builder().build()

        assert len(definition.change_history) == 1
        change = definition.change_history[0]
        assert change.type is ChangeType.CREATE
        assert change.author == "system"
        assert change.version == "1.0.0"
        assert change.description == "Created metric Tool Call Success Rate"
        assert is_iso_timestamp(change.date)

    def test_explicit_change_history_kept(self, definition_builder):
        """Test supplied history is not replaced"""
        change = MetricChange(
            version="0.9.0",
            date="2025-01-01T00:00:00.000Z",
            author="alice",
            type=ChangeType.MODIFY,
            description="Tightened thresholds",
        )

        definition = definition_builder().change_history(change).build()

        assert definition.change_history == (change,)

    def test_collections_default_empty(self, definition_builder):
        """Test optional collections default to empty"""
        definition = definition_builder().build()

        assert definition.dependencies == ()
        assert definition.derived_metrics == ()
        assert definition.metadata == {}


class TestTemplates:
    """Tests for from_template() and owned_by()"""

    def test_templates_registered(self):
        """Test all three standard templates are exposed by name"""
        assert set(STANDARD_METRIC_TEMPLATES) == {"L1_BUSINESS", "L2_QUALITY", "L3_PERFORMANCE"}

    def test_l1_business_defaults(self):
        """Test L1 business template values"""
        assert L1_BUSINESS.level is MetricLevel.L1
        assert L1_BUSINESS.format.suffix == "%"
        assert L1_BUSINESS.quality_thresholds.as_tuple() == (90, 75, 60, 45)
        assert L1_BUSINESS.review_cycle is ReviewCycle.MONTHLY

    def test_from_template_prefills(self, review_date):
        """Test template fields are pre-filled and governance derives from the template"""
        definition = (
            MetricDefinitionBuilder.from_template(L3_PERFORMANCE)
            .id("performance_system_p95Latency")
            .name("p95Latency")
            .display_name("P95 Latency")
            .domains("system_performance")
            .description("95th percentile request latency")
            .formula("p95(request durations)")
            .unit(MetricUnit.MILLISECONDS)
            .data_type(MetricDataType.INTEGER)
            .version("1.0.0")
            .tags("performance", "technical")
            .owned_by("Engineering Team", last_reviewed=review_date)
            .build()
        )

        assert definition.level is MetricLevel.L3
        assert definition.category is MetricCategory.PERFORMANCE
        assert definition.precision == 1
        assert definition.governance.owner == "Engineering Team"
        assert definition.governance.review_cycle is ReviewCycle.QUARTERLY
        assert definition.governance.approval_status is MetricStatus.APPROVED
        assert definition.governance.last_reviewed == review_date

    def test_template_values_can_be_overridden(self):
        """Test setters after from_template() win"""
        builder = MetricDefinitionBuilder.from_template(L1_BUSINESS).category(MetricCategory.USER)

        assert builder._fields["category"] is MetricCategory.USER

    def test_owned_by_requires_template(self):
        """Test owned_by() without a template is rejected"""
        with pytest.raises(ValueError, match="from_template"):
            MetricDefinitionBuilder().owned_by("Product Team")

    def test_owned_by_defaults_review_date(self):
        """Test owned_by() stamps the current time when no date is given"""
        builder = MetricDefinitionBuilder.from_template(L1_BUSINESS).owned_by("Product Team")

        assert is_iso_timestamp(builder._fields["governance"].last_reviewed)
