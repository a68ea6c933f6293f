"""
Metric Registry

Indexed in-memory store of metric definitions keyed by id, with secondary
indexes by category, level and tag. Supports search with faceted counts,
statistics, a dependency graph view and JSON export/import.

The registry is an ordinary object: construct one (or use
create_default_registry() for the seeded standard set) and pass it to the
checker and any other consumer. It is not thread safe; serialize writes.

Usage:
    from metric_standards.registry import MetricRegistry, SearchCriteria

    registry = MetricRegistry()
    registry.register_metric(definition)
    result = registry.search_metrics(SearchCriteria(category=MetricCategory.COST))
    print(result.total, result.facets.tags)
"""

import dataclasses
import json
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from metric_standards.core.logging_config import get_logger
from metric_standards.domain.definitions import (
    MetricCategory,
    MetricDefinition,
    MetricLevel,
    MetricStatus,
)
from metric_standards.utils.atomic_json import atomic_write_text
from metric_standards.utils.datetime_utils import utc_now_iso
from metric_standards.utils.error_handling import log_and_continue

logger = get_logger(__name__)

EXPORT_FORMAT_VERSION = "1.0.0"


class RegistryFormatError(ValueError):
    """Raised when an import payload is structurally invalid at the top level."""

    pass


@dataclass
class SearchCriteria:
    """
    Search filters, combined with AND.

    Attributes:
        query: Case-insensitive substring over name, display name, description, formula
        category: Exact category
        level: Exact level
        domain: Must be one of the definition's domains
        tags: At least one must be among the definition's tags
        status: Governance approval status
        owner: Substring of the governance owner
    """

    query: str | None = None
    category: MetricCategory | None = None
    level: MetricLevel | None = None
    domain: str | None = None
    tags: list[str] = field(default_factory=list)
    status: MetricStatus | None = None
    owner: str | None = None


@dataclass
class SearchFacets:
    """Count breakdowns of a search result set."""

    categories: dict[str, int]
    levels: dict[str, int]
    tags: dict[str, int]


@dataclass
class SearchResult:
    metrics: list[MetricDefinition]
    total: int
    facets: SearchFacets


@dataclass
class ImportResult:
    """Outcome of a best-effort import: per-item errors never abort the batch."""

    imported: int
    errors: list[str]


@dataclass
class RegistryStats:
    total: int
    by_category: dict[str, int]
    by_level: dict[str, int]
    by_status: dict[str, int]
    last_updated: str


@dataclass
class DependencyNode:
    """
    A definition's position in the dependency graph.

    Attributes:
        metric_id: Definition id
        name: Definition name
        category: Definition category
        level: Definition level
        dependencies: Ids this metric depends on (may reference unknown ids)
        dependents: Registered ids that depend on this metric
    """

    metric_id: str
    name: str
    category: MetricCategory
    level: MetricLevel
    dependencies: list[str]
    dependents: list[str] = field(default_factory=list)


class MetricRegistry:
    """
    In-memory metric definition store with secondary indexes.

    Lookups return None or empty lists for unknown keys; they never raise.
    """

    def __init__(self, metrics: list[MetricDefinition] | None = None) -> None:
        self._metrics: dict[str, MetricDefinition] = {}
        self._categories: dict[MetricCategory, list[str]] = {}
        self._levels: dict[MetricLevel, list[str]] = {}
        self._tags: dict[str, list[str]] = {}
        self._last_updated = utc_now_iso()

        for metric in metrics or []:
            self.register_metric(metric)

    def __len__(self) -> int:
        return len(self._metrics)

    def __contains__(self, metric_id: object) -> bool:
        return metric_id in self._metrics

    @property
    def last_updated(self) -> str:
        return self._last_updated

    # ===== Mutation =====

    def register_metric(self, metric: MetricDefinition) -> None:
        """
        Insert or overwrite a definition by id (last write wins) and index it.

        Args:
            metric: Definition to store
        """
        tags = list(dict.fromkeys(metric.tags))
        previous = self._metrics.get(metric.id)
        if previous is not None:
            self._remove_from_indexes(previous)
            logger.debug(f"Overwriting metric definition {metric.id}")

        self._metrics[metric.id] = metric
        self._add_to_indexes(metric, tags)
        self._touch()

    def update_metric(self, metric_id: str, updates: dict[str, Any]) -> bool:
        """
        Merge field updates into a stored definition.

        All indexes are rebuilt from scratch afterwards (O(n)) rather than
        patched incrementally.

        Args:
            metric_id: Id of the definition to update
            updates: MetricDefinition attribute names mapped to new values

        Returns:
            False if no definition has this id

        Raises:
            TypeError: If updates names an unknown attribute
            ValueError: If updates tries to change the id
        """
        if "id" in updates and updates["id"] != metric_id:
            raise ValueError(f"Cannot change the id of {metric_id}; remove it and register a new definition")

        existing = self._metrics.get(metric_id)
        if existing is None:
            return False

        self._metrics[metric_id] = dataclasses.replace(existing, **updates)
        self._rebuild_indexes()
        self._touch()
        return True

    def remove_metric(self, metric_id: str) -> bool:
        """
        Remove a definition and prune it from every index.

        Returns:
            False if no definition has this id
        """
        metric = self._metrics.pop(metric_id, None)
        if metric is None:
            return False

        self._remove_from_indexes(metric)
        self._touch()
        return True

    # ===== Lookup =====

    def get_metric(self, metric_id: str) -> MetricDefinition | None:
        return self._metrics.get(metric_id)

    def get_all_metrics(self) -> list[MetricDefinition]:
        """Snapshot of all definitions; the returned list is the caller's to modify."""
        return list(self._metrics.values())

    def get_metrics_by_category(self, category: MetricCategory) -> list[MetricDefinition]:
        return self._resolve(self._categories.get(category, []))

    def get_metrics_by_level(self, level: MetricLevel) -> list[MetricDefinition]:
        return self._resolve(self._levels.get(level, []))

    def get_metrics_by_tag(self, tag: str) -> list[MetricDefinition]:
        return self._resolve(self._tags.get(tag, []))

    def search_metrics(self, criteria: SearchCriteria) -> SearchResult:
        """
        Filter definitions by ANDed criteria and facet the matches.

        Facet counts are computed over the filtered result set, not the
        whole registry.

        Example:
            >>> result = registry.search_metrics(SearchCriteria(query="cost"))
            >>> sum(result.facets.categories.values()) == result.total
            True
        """
        results = self.get_all_metrics()

        if criteria.query:
            query = criteria.query.lower()
            results = [
                m
                for m in results
                if query in m.name.lower()
                or query in m.display_name.lower()
                or query in m.description.lower()
                or query in m.formula.lower()
            ]

        if criteria.category is not None:
            results = [m for m in results if m.category is criteria.category]

        if criteria.level is not None:
            results = [m for m in results if m.level is criteria.level]

        if criteria.domain:
            results = [m for m in results if criteria.domain in m.domain]

        if criteria.tags:
            wanted = set(criteria.tags)
            results = [m for m in results if wanted.intersection(m.tags)]

        if criteria.status is not None:
            results = [m for m in results if m.governance.approval_status is criteria.status]

        if criteria.owner:
            results = [m for m in results if criteria.owner in m.governance.owner]

        facets = SearchFacets(
            categories=dict(Counter(m.category.value for m in results)),
            levels=dict(Counter(m.level.value for m in results)),
            tags=dict(Counter(tag for m in results for tag in m.tags)),
        )
        return SearchResult(metrics=results, total=len(results), facets=facets)

    def get_stats(self) -> RegistryStats:
        """Aggregate counts by category, level and approval status."""
        metrics = self.get_all_metrics()
        return RegistryStats(
            total=len(metrics),
            by_category={category.value: len(ids) for category, ids in self._categories.items() if ids},
            by_level={level.value: len(ids) for level, ids in self._levels.items() if ids},
            by_status=dict(Counter(m.governance.approval_status.value for m in metrics)),
            last_updated=self._last_updated,
        )

    def get_dependency_graph(self) -> dict[str, DependencyNode]:
        """
        Build the dependency graph of registered definitions.

        References to unregistered ids are kept in `dependencies` but
        produce no reverse edge.

        Returns:
            Mapping of metric id to its graph node
        """
        graph = {
            m.id: DependencyNode(
                metric_id=m.id,
                name=m.name,
                category=m.category,
                level=m.level,
                dependencies=list(m.dependencies),
            )
            for m in self._metrics.values()
        }

        for node in graph.values():
            for dependency_id in node.dependencies:
                target = graph.get(dependency_id)
                if target is None:
                    logger.debug(f"Metric {node.metric_id} depends on unregistered metric {dependency_id}")
                    continue
                target.dependents.append(node.metric_id)

        return graph

    # ===== Export / Import =====

    def export_registry(self) -> str:
        """
        Serialize all definitions to JSON.

        Returns:
            JSON text: {"version", "exportedAt", "metrics": [...]}
        """
        payload = {
            "version": EXPORT_FORMAT_VERSION,
            "exportedAt": utc_now_iso(),
            "metrics": [metric.to_dict() for metric in self._metrics.values()],
        }
        return json.dumps(payload, indent=2, ensure_ascii=False)

    def import_registry(self, json_data: str) -> ImportResult:
        """
        Register every definition in an export payload.

        Each item is imported independently; malformed items are reported in
        the result and skipped. Existing ids are overwritten.

        Args:
            json_data: JSON text in export format

        Returns:
            ImportResult with the imported count and per-item errors

        Raises:
            RegistryFormatError: If the payload is not JSON or has no metrics list
        """
        try:
            data = json.loads(json_data)
        except json.JSONDecodeError as e:
            raise RegistryFormatError(f"Registry payload is not valid JSON: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("metrics"), list):
            raise RegistryFormatError("Invalid registry format: missing 'metrics' list")

        imported = 0
        errors: list[str] = []

        for index, item in enumerate(data["metrics"]):
            metric_id = item.get("id", "unknown") if isinstance(item, dict) else "unknown"
            try:
                if not isinstance(item, dict):
                    raise TypeError(f"expected an object, got {type(item).__name__}")
                definition = MetricDefinition.from_dict(item)
                self.register_metric(definition)
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                reason = f"missing key {e}" if isinstance(e, KeyError) else str(e)
                errors.append(f"Failed to import metric {metric_id}: {reason}")
                log_and_continue(logger, e, {"metric_id": metric_id, "index": index}, "Metric import")
                continue

            imported += 1

        logger.info(f"Imported {imported} metric definitions ({len(errors)} errors)")
        return ImportResult(imported=imported, errors=errors)

    def export_to_file(self, path: str | Path) -> None:
        """Write export_registry() output to a file atomically."""
        atomic_write_text(self.export_registry(), path, suffix=".json")
        logger.info(f"Exported {len(self)} metric definitions to {path}")

    def import_from_file(self, path: str | Path) -> ImportResult:
        """Import an export file written by export_to_file()."""
        return self.import_registry(Path(path).read_text(encoding="utf-8"))

    # ===== Index maintenance =====

    def _resolve(self, metric_ids: list[str]) -> list[MetricDefinition]:
        return [self._metrics[metric_id] for metric_id in metric_ids if metric_id in self._metrics]

    def _add_to_indexes(self, metric: MetricDefinition, tags: list[str]) -> None:
        self._categories.setdefault(metric.category, []).append(metric.id)
        self._levels.setdefault(metric.level, []).append(metric.id)
        for tag in tags:
            self._tags.setdefault(tag, []).append(metric.id)

    def _remove_from_indexes(self, metric: MetricDefinition) -> None:
        buckets = [self._categories.get(metric.category), self._levels.get(metric.level)]
        buckets.extend(self._tags.get(tag) for tag in metric.tags)
        for bucket in buckets:
            if bucket and metric.id in bucket:
                bucket.remove(metric.id)

    def _rebuild_indexes(self) -> None:
        self._categories.clear()
        self._levels.clear()
        self._tags.clear()
        for metric in self._metrics.values():
            self._add_to_indexes(metric, list(dict.fromkeys(metric.tags)))

    def _touch(self) -> None:
        self._last_updated = utc_now_iso()
