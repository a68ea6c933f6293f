#!/usr/bin/env python3
"""
Tests for the metric definition model

Covers enum vocabularies, quality classification, value formatting and the
camelCase (de)serialization used by export/import.
"""

import dataclasses

import pytest

from metric_standards.domain.definitions import (
    ChangeType,
    DisplayType,
    MetricDefinition,
    MetricRange,
    MetricUnit,
    QualityLevel,
    QualityThresholds,
    ReviewCycle,
)


class TestVocabularies:
    """Tests for the enumerations"""

    def test_review_cycle_months(self):
        """Test review cycles map to their length in months"""
        assert ReviewCycle.MONTHLY.months == 1
        assert ReviewCycle.QUARTERLY.months == 3
        assert ReviewCycle.YEARLY.months == 12

    def test_boolean_unit_exists(self):
        """Test boolean is part of the unit vocabulary"""
        assert MetricUnit("boolean") is MetricUnit.BOOLEAN

    def test_unknown_unit_rejected(self):
        """Test unknown unit values raise ValueError"""
        with pytest.raises(ValueError):
            MetricUnit("furlongs")


class TestValueObjects:
    """Tests for thresholds, ranges and color mappings"""

    def test_thresholds_descending(self):
        """Test strict descending detection"""
        assert QualityThresholds(90, 75, 60, 45).is_descending
        assert not QualityThresholds(90, 90, 60, 45).is_descending
        assert not QualityThresholds(1000, 5000, 10000, 50000).is_descending

    def test_thresholds_as_tuple(self):
        """Test tuple order is excellent, good, warning, critical"""
        assert QualityThresholds(4, 3, 2, 1).as_tuple() == (4, 3, 2, 1)

    def test_range_contains(self):
        """Test range bounds are inclusive and may be open"""
        bounded = MetricRange(min=0, max=100)
        assert bounded.contains(0)
        assert bounded.contains(100)
        assert not bounded.contains(100.1)
        assert MetricRange(min=1).contains(1_000_000)
        assert MetricRange().contains(-5)

    def test_definition_is_frozen(self, sample_definition):
        """Test definitions cannot be mutated in place"""
        with pytest.raises(dataclasses.FrozenInstanceError):
            sample_definition.name = "other"  # type: ignore[misc]


class TestClassify:
    """Tests for MetricDefinition.classify()"""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (99, QualityLevel.EXCELLENT),
            (98, QualityLevel.EXCELLENT),
            (96, QualityLevel.GOOD),
            (90, QualityLevel.WARNING),
            (50, QualityLevel.CRITICAL),
        ],
    )
    def test_higher_is_better(self, sample_definition, value, expected):
        """Test descending thresholds classify higher values as better"""
        assert sample_definition.classify(value) is expected

    @pytest.mark.parametrize(
        "value,expected",
        [
            (80, QualityLevel.EXCELLENT),
            (250, QualityLevel.GOOD),
            (400, QualityLevel.WARNING),
            (5000, QualityLevel.CRITICAL),
        ],
    )
    def test_lower_is_better(self, cost_definition, value, expected):
        """Test ascending thresholds classify lower values as better"""
        assert cost_definition.classify(value) is expected


class TestFormatValue:
    """Tests for MetricDefinition.format_value()"""

    def test_percentage_suffix(self, sample_definition):
        """Test precision and suffix are applied"""
        assert sample_definition.format_value(96.456) == "96.5%"

    def test_currency_prefix_and_separator(self, cost_definition):
        """Test prefix and thousands separator are applied"""
        assert cost_definition.format_value(12345.678) == "$12,345.68"

    def test_integer_value(self, cost_definition):
        """Test integers are rendered with the configured precision"""
        assert cost_definition.format_value(5) == "$5.00"


class TestSerialization:
    """Tests for to_dict() / from_dict()"""

    def test_to_dict_uses_camel_case(self, sample_definition):
        """Test wire keys are camelCase and enums are plain values"""
        data = sample_definition.to_dict()

        assert data["displayName"] == "Tool Call Success Rate"
        assert data["dataType"] == "float"
        assert data["unit"] == "percentage"
        assert data["qualityThresholds"] == {"excellent": 98, "good": 95, "warning": 90, "critical": 85}
        assert data["governance"]["reviewCycle"] == "quarterly"
        assert data["format"]["displayType"] == "percentage"
        assert data["format"]["colorMapping"]["excellent"] == "#10B981"
        assert data["range"] == {"min": 0, "max": 100}

    def test_to_dict_omits_unset_optionals(self, cost_definition):
        """Test optional keys that are not set are left out"""
        data = cost_definition.to_dict()

        assert "range" not in data
        assert "suffix" not in data["format"]
        assert "colorMapping" not in data["format"]
        assert "businessApprover" not in data["governance"]

    def test_change_history_serialized(self, sample_definition):
        """Test the synthetic create entry is part of the wire shape"""
        history = sample_definition.to_dict()["changeHistory"]

        assert len(history) == 1
        assert history[0]["type"] == ChangeType.CREATE.value
        assert history[0]["author"] == "system"

    def test_from_dict_restores_definition(self, sample_definition, cost_definition):
        """Test deserialization restores an equal definition"""
        for definition in (sample_definition, cost_definition):
            assert MetricDefinition.from_dict(definition.to_dict()) == definition

    def test_from_dict_missing_key(self, sample_definition):
        """Test a missing required key raises KeyError"""
        data = sample_definition.to_dict()
        del data["unit"]

        with pytest.raises(KeyError):
            MetricDefinition.from_dict(data)

    def test_from_dict_unknown_enum(self, sample_definition):
        """Test an unknown enum value raises ValueError"""
        data = sample_definition.to_dict()
        data["format"]["displayType"] = "sparkline"

        with pytest.raises(ValueError):
            MetricDefinition.from_dict(data)

    @pytest.mark.parametrize(
        "key,value,message",
        [
            ("id", ["performance_tool_x"], "id must be a string"),
            ("name", 42, "name must be a string"),
            ("tags", [["nested"]], "tags must be a list of strings"),
            ("domain", "tool_execution", "domain must be a list of strings"),
            ("derivedMetrics", [1], "derivedMetrics must be a list of strings"),
        ],
    )
    def test_from_dict_rejects_wrong_types(self, sample_definition, key, value, message):
        """Test identifier and string-list fields are type checked"""
        data = sample_definition.to_dict()
        data[key] = value

        with pytest.raises(TypeError, match=message):
            MetricDefinition.from_dict(data)

    def test_from_dict_defaults_optional_collections(self, sample_definition):
        """Test absent optional collections default to empty"""
        data = sample_definition.to_dict()
        for key in ("changeHistory", "dependencies", "derivedMetrics", "metadata", "range"):
            data.pop(key)

        restored = MetricDefinition.from_dict(data)

        assert restored.change_history == ()
        assert restored.dependencies == ()
        assert restored.metadata == {}
        assert restored.range is None
        assert restored.format.display_type is DisplayType.PERCENTAGE
