"""
Metric Consistency Checker

Walks a project tree, extracts metric-field usages line by line with the
rule table's patterns, and compares them against the registry to find
naming, unit and range drift, duplicate declarations and fields that have
no registered standard.

This is a textual scan, not a parser: it can be fooled by comments or
strings that look like assignments.

Usage:
    from metric_standards.consistency.checker import MetricConsistencyChecker
    from metric_standards.standard_metrics import create_default_registry

    checker = MetricConsistencyChecker("/path/to/project", create_default_registry())
    report = checker.check_consistency()
    for issue in report.inconsistencies:
        print(issue.severity.value, issue.description)
"""

import os
import threading
from collections import defaultdict
from collections.abc import Iterator
from pathlib import Path

from metric_standards.core.logging_config import get_logger, log_with_context
from metric_standards.domain.consistency import (
    ConsistencyReport,
    InconsistencyRule,
    InconsistencyType,
    MetricInconsistency,
    MetricUsage,
    Severity,
    SourceLocation,
    UsageKind,
)
from metric_standards.registry import MetricRegistry
from metric_standards.utils.datetime_utils import utc_now_iso
from metric_standards.utils.error_handling import log_and_continue
from metric_standards.validator import MetricValidator

from .rules import RuleTable, default_rule_table

logger = get_logger(__name__)

STAGED_REMEDIATION_THRESHOLD = 10


class ScanCancelled(Exception):
    """Raised when a consistency check is cancelled mid-walk; partial results are discarded."""

    pass


def _locations(usages: list[MetricUsage]) -> list[SourceLocation]:
    return [SourceLocation(file=usage.file, line=usage.line) for usage in usages]


class MetricConsistencyChecker:
    """
    Scans a source tree for metric usages and reports drift from the registry.

    Args:
        project_root: Directory to walk
        registry: Source of truth for registered metric names
        rules: Rule table (default: the packaged table)
        validator: Validator used to count valid/invalid registry definitions
    """

    def __init__(
        self,
        project_root: str | Path,
        registry: MetricRegistry,
        rules: RuleTable | None = None,
        validator: MetricValidator | None = None,
    ) -> None:
        self.project_root = Path(project_root)
        self.registry = registry
        self.rules = rules or default_rule_table()
        self.validator = validator or MetricValidator(rules=self.rules)
        self._token_patterns = self.rules.token_patterns()

    def check_consistency(self, cancel_event: threading.Event | None = None) -> ConsistencyReport:
        """
        Run the full check: walk, scan, analyze, summarize.

        Args:
            cancel_event: Optional event; once set, the walk stops before the next file

        Returns:
            ConsistencyReport with issues sorted by descending severity

        Raises:
            ScanCancelled: If cancel_event was set during the walk
        """
        logger.info(f"Starting metric consistency check in {self.project_root}")

        usages, files_scanned = self.scan_project(cancel_event)
        inconsistencies = self.analyze(usages)
        suggestions = generate_suggestions(inconsistencies)

        results = self.validator.validate_batch(self.registry.get_all_metrics())
        valid = sum(1 for result in results if result.is_valid)

        report = ConsistencyReport(
            total_metrics=len(self.registry),
            valid_metrics=valid,
            invalid_metrics=len(results) - valid,
            inconsistencies=inconsistencies,
            suggestions=suggestions,
            generated_at=utc_now_iso(),
            files_scanned=files_scanned,
        )

        log_with_context(
            logger,
            "info",
            f"Consistency check complete: {len(inconsistencies)} issues in {files_scanned} files",
            usages=len(usages),
            auto_fixable=len(report.auto_fixable),
        )
        return report

    # ===== Walk and scan =====

    def iter_source_files(self) -> Iterator[Path]:
        """Yield scannable files depth-first in sorted order, pruning skipped directories."""
        for dirpath, dirnames, filenames in os.walk(self.project_root):
            dirnames[:] = sorted(name for name in dirnames if name not in self.rules.skip_dirs)
            for filename in sorted(filenames):
                if Path(filename).suffix in self.rules.extensions:
                    yield Path(dirpath) / filename

    def scan_project(self, cancel_event: threading.Event | None = None) -> tuple[list[MetricUsage], int]:
        """
        Scan every source file under the project root.

        Unreadable files are logged and skipped.

        Returns:
            (usages, number of files read)

        Raises:
            ScanCancelled: If cancel_event was set during the walk
        """
        usages: list[MetricUsage] = []
        files_scanned = 0

        for path in self.iter_source_files():
            if cancel_event is not None and cancel_event.is_set():
                logger.warning(f"Consistency check cancelled after {files_scanned} files")
                raise ScanCancelled(f"Scan cancelled after {files_scanned} files")

            relative = path.relative_to(self.project_root).as_posix()
            try:
                content = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                log_and_continue(logger, e, {"file": relative}, "File read")
                continue

            files_scanned += 1
            usages.extend(self.scan_file_content(relative, content))

        logger.debug(f"Found {len(usages)} metric usages in {files_scanned} files")
        return usages, files_scanned

    def scan_file_content(self, relative_path: str, content: str) -> list[MetricUsage]:
        """
        Extract usages from one file's content.

        Args:
            relative_path: Path reported in usages
            content: File text

        Returns:
            VALUE, NAMING_ISSUE and DECLARATION usages in line order
        """
        usages: list[MetricUsage] = []

        for line_number, line in enumerate(content.splitlines(), start=1):
            context = line.strip()

            for pattern in self.rules.extraction_patterns:
                for match in pattern.regex.finditer(line):
                    try:
                        value = float(match.group(1))
                    except (TypeError, ValueError):
                        logger.debug(f"Non-numeric capture for {pattern.field} at {relative_path}:{line_number}")
                        continue
                    usages.append(
                        MetricUsage(
                            file=relative_path,
                            line=line_number,
                            field_name=pattern.field,
                            value=value,
                            context=context,
                        )
                    )

            for token, token_regex in self._token_patterns:
                if token_regex.search(line):
                    usages.append(
                        MetricUsage(
                            file=relative_path,
                            line=line_number,
                            field_name=token,
                            value=None,
                            context=context,
                            kind=UsageKind.NAMING_ISSUE,
                        )
                    )

            if self.rules.declaration_marker in line:
                declaration = self.rules.declaration_pattern.search(line)
                if declaration:
                    usages.append(
                        MetricUsage(
                            file=relative_path,
                            line=line_number,
                            field_name=declaration.group(1),
                            value=None,
                            context=context,
                            kind=UsageKind.DECLARATION,
                        )
                    )

        return usages

    # ===== Analyses =====

    def analyze(self, usages: list[MetricUsage]) -> list[MetricInconsistency]:
        """Run the five analyses and sort the issues by descending severity (stable)."""
        inconsistencies = [
            *self._check_naming_drift(usages),
            *self._check_unit_drift(usages),
            *self._check_range_drift(usages),
            *self._check_duplicate_definitions(usages),
            *self._check_missing_standards(usages),
        ]
        return sorted(inconsistencies, key=lambda issue: issue.severity.rank, reverse=True)

    def _check_naming_drift(self, usages: list[MetricUsage]) -> list[MetricInconsistency]:
        by_token: dict[str, list[MetricUsage]] = defaultdict(list)
        for usage in usages:
            if usage.kind is UsageKind.NAMING_ISSUE:
                by_token[usage.field_name].append(usage)

        issues = []
        for token, token_usages in by_token.items():
            standard = self.rules.standard_name_for(token)
            if standard is None:
                continue
            issues.append(
                MetricInconsistency(
                    type=InconsistencyType.NAMING,
                    rule=InconsistencyRule.NAMING_DRIFT,
                    severity=Severity.HIGH,
                    metric_ids=[token],
                    description=f'Non-standard name "{token}" used in {len(token_usages)} places',
                    suggestion=f'Use the standard name "{standard}"',
                    auto_fixable=True,
                    locations=_locations(token_usages),
                    replacement=standard,
                )
            )
        return issues

    def _check_unit_drift(self, usages: list[MetricUsage]) -> list[MetricInconsistency]:
        time_usages = [
            usage
            for usage in usages
            if usage.kind is UsageKind.VALUE and usage.field_name in self.rules.time_fields and usage.value is not None
        ]
        seconds = [usage for usage in time_usages if usage.value < self.rules.seconds_below]
        milliseconds = [usage for usage in time_usages if usage.value >= self.rules.milliseconds_from]

        if not seconds or not milliseconds:
            return []

        observed = {usage.field_name for usage in time_usages}
        return [
            MetricInconsistency(
                type=InconsistencyType.FORMAT,
                rule=InconsistencyRule.UNIT_DRIFT,
                severity=Severity.HIGH,
                metric_ids=[name for name in self.rules.time_fields if name in observed],
                description=(
                    f"Time fields mix units: {len(seconds)} values look like seconds, "
                    f"{len(milliseconds)} look like milliseconds"
                ),
                suggestion="Store time in milliseconds and convert only for display",
                auto_fixable=False,
                locations=_locations(seconds + milliseconds),
            )
        ]

    def _check_range_drift(self, usages: list[MetricUsage]) -> list[MetricInconsistency]:
        issues = []
        for field_name in self.rules.rate_fields:
            values = [
                usage
                for usage in usages
                if usage.kind is UsageKind.VALUE and usage.field_name == field_name and usage.value is not None
            ]
            fractions = [usage for usage in values if 0 < usage.value <= 1]
            percents = [usage for usage in values if 1 < usage.value <= 100]
            if not fractions or not percents:
                continue

            issues.append(
                MetricInconsistency(
                    type=InconsistencyType.FORMAT,
                    rule=InconsistencyRule.RANGE_DRIFT,
                    severity=Severity.MEDIUM,
                    metric_ids=[field_name],
                    description=(
                        f"{field_name} mixes value ranges: {len(fractions)} values on a 0-1 scale, "
                        f"{len(percents)} on a 0-100 scale"
                    ),
                    suggestion="Store rates on the 0-100 scale",
                    auto_fixable=True,
                    locations=_locations(fractions),
                )
            )
        return issues

    def _check_duplicate_definitions(self, usages: list[MetricUsage]) -> list[MetricInconsistency]:
        by_name: dict[str, list[MetricUsage]] = defaultdict(list)
        for usage in usages:
            if usage.kind is UsageKind.DECLARATION:
                by_name[usage.field_name].append(usage)

        issues = []
        for type_name, declarations in by_name.items():
            if len(declarations) < 2:
                continue
            files = {usage.file for usage in declarations}
            issues.append(
                MetricInconsistency(
                    type=InconsistencyType.DUPLICATE,
                    rule=InconsistencyRule.DUPLICATE_DEFINITION,
                    severity=Severity.MEDIUM,
                    metric_ids=[type_name],
                    description=f'Type "{type_name}" is declared {len(declarations)} times across {len(files)} files',
                    suggestion="Move the declaration into one shared metric types module",
                    auto_fixable=False,
                    locations=_locations(declarations),
                )
            )
        return issues

    def _check_missing_standards(self, usages: list[MetricUsage]) -> list[MetricInconsistency]:
        registered = {metric.name for metric in self.registry.get_all_metrics()}
        observed = dict.fromkeys(usage.field_name for usage in usages if usage.kind is UsageKind.VALUE)
        missing = [name for name in observed if name not in registered]

        if not missing:
            return []

        return [
            MetricInconsistency(
                type=InconsistencyType.MISSING,
                rule=InconsistencyRule.MISSING_STANDARD,
                severity=Severity.LOW,
                metric_ids=missing,
                description=f"{len(missing)} metric fields in use have no standard definition: {', '.join(missing)}",
                suggestion="Register standard definitions for these fields or rename them to existing standard metrics",
                auto_fixable=False,
                locations=_locations(
                    [u for u in usages if u.kind is UsageKind.VALUE and u.field_name in missing]
                ),
            )
        ]


def generate_suggestions(inconsistencies: list[MetricInconsistency]) -> list[str]:
    """
    Aggregate remediation hints for a set of issues.

    Returns:
        At least one suggestion; a single all-clear line when there are no issues
    """
    suggestions = []

    critical = sum(1 for issue in inconsistencies if issue.severity is Severity.CRITICAL)
    high = sum(1 for issue in inconsistencies if issue.severity is Severity.HIGH)
    if critical:
        suggestions.append(f"Found {critical} critical issues; fix them immediately")
    if high:
        suggestions.append(f"Found {high} high-priority issues; address them first")

    naming = sum(1 for issue in inconsistencies if issue.type is InconsistencyType.NAMING)
    if naming:
        suggestions.append(f"Auto-fix recommended for {naming} naming problems")

    formatting = sum(1 for issue in inconsistencies if issue.type is InconsistencyType.FORMAT)
    if formatting:
        suggestions.append(f"Unify data formats and units to resolve {formatting} format inconsistencies")

    if any(issue.type is InconsistencyType.DUPLICATE for issue in inconsistencies):
        suggestions.append("Merge duplicate type declarations into a shared types module")

    if len(inconsistencies) > STAGED_REMEDIATION_THRESHOLD:
        suggestions.append("Many issues found; remediate in stages, critical and high severity first")

    if not suggestions:
        suggestions.append("Metric usage is consistent with the standard")

    return suggestions
