"""
Metric Auto-Fixer

Resolves the auto-fixable issues of a consistency report by rewriting the
recorded source lines:
    - naming drift: replace the non-standard token with the canonical name
    - range drift: rescale 0-1 literals of the rate field to the 0-100 scale

Runs as a dry run by default and only reports the planned edits; pass
apply=True to write the files. An issue whose recorded line no longer
contains the expected text is counted as failed and its file is left alone.
"""

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path

from metric_standards.core.logging_config import get_logger
from metric_standards.domain.consistency import AutoFixResult, InconsistencyRule, MetricInconsistency
from metric_standards.utils.atomic_json import atomic_write_text
from metric_standards.utils.error_handling import log_and_continue

from .rules import RuleTable, default_rule_table

logger = get_logger(__name__)

FIXABLE_RULES = (InconsistencyRule.NAMING_DRIFT, InconsistencyRule.RANGE_DRIFT)


class FixConflict(Exception):
    """A recorded location no longer matches the file content."""

    pass


@dataclass(frozen=True)
class LineEdit:
    file: str
    line: int
    before: str
    after: str


def _percent_literal(value: Decimal) -> str:
    """Render a 0-1 literal on the 0-100 scale with every source digit kept (0.95 -> '95')."""
    return format((value * 100).normalize(), "f")


class MetricAutoFixer:
    """
    Plans and applies fixes for naming and range drift.

    Args:
        project_root: Root the report's relative locations resolve against
        rules: Rule table supplying the field extraction patterns
    """

    def __init__(self, project_root: str | Path, rules: RuleTable | None = None) -> None:
        self.project_root = Path(project_root)
        self.rules = rules or default_rule_table()

    def auto_fix(self, inconsistencies: list[MetricInconsistency], apply: bool = False) -> AutoFixResult:
        """
        Fix every auto-fixable naming or range issue.

        Args:
            inconsistencies: Issues from a ConsistencyReport
            apply: Write the edits; when False nothing on disk changes

        Returns:
            AutoFixResult with fixed/failed counts and one detail line per issue
        """
        result = AutoFixResult(dry_run=not apply)
        candidates = [issue for issue in inconsistencies if issue.auto_fixable and issue.rule in FIXABLE_RULES]

        for issue in candidates:
            try:
                edits = self.plan(issue)
                if apply:
                    self._write(edits)
            except (FixConflict, OSError, ValueError) as e:
                result.failed += 1
                result.details.append(f"Failed: {issue.description} ({e})")
                log_and_continue(logger, e, {"rule": issue.rule.value, "metric_ids": issue.metric_ids}, "Auto-fix")
                continue

            result.fixed += 1
            places = ", ".join(f"{edit.file}:{edit.line}" for edit in edits)
            verb = "Fixed" if apply else "Planned"
            result.details.append(f"{verb}: {self._summary(issue)} at {places}")

        logger.info(
            f"Auto-fix {'applied' if apply else 'dry run'}: {result.fixed} fixed, {result.failed} failed "
            f"of {len(candidates)} fixable issues"
        )
        return result

    def plan(self, issue: MetricInconsistency) -> list[LineEdit]:
        """
        Compute the line edits that resolve one issue, without writing.

        Raises:
            FixConflict: If a recorded line is missing or no longer matches
            OSError: If a recorded file cannot be read
        """
        edits = []
        for location in dict.fromkeys(issue.locations):
            lines = self._read_lines(location.file)
            if not 1 <= location.line <= len(lines):
                raise FixConflict(f"{location} is past the end of the file")

            before = lines[location.line - 1]
            if issue.rule is InconsistencyRule.NAMING_DRIFT:
                after = self._rename(issue, before)
            else:
                after = self._rescale(issue, before)

            if after == before:
                raise FixConflict(f"{location} no longer contains the expected text")
            edits.append(LineEdit(file=location.file, line=location.line, before=before, after=after))
        return edits

    def _rename(self, issue: MetricInconsistency, line: str) -> str:
        if not issue.replacement or not issue.metric_ids:
            raise FixConflict("naming issue has no replacement name")
        token = issue.metric_ids[0]
        return re.sub(rf"\b{re.escape(token)}\b", issue.replacement, line)

    def _rescale(self, issue: MetricInconsistency, line: str) -> str:
        field_name = issue.metric_ids[0] if issue.metric_ids else None
        patterns = [p.regex for p in self.rules.extraction_patterns if p.field == field_name]
        if not patterns:
            raise FixConflict(f"no extraction pattern for field {field_name}")

        for regex in patterns:
            # Right to left so earlier spans stay valid
            for match in reversed(list(regex.finditer(line))):
                try:
                    value = Decimal(match.group(1))
                except InvalidOperation:
                    continue
                if 0 < value <= 1:
                    start, end = match.span(1)
                    line = f"{line[:start]}{_percent_literal(value)}{line[end:]}"
        return line

    def _summary(self, issue: MetricInconsistency) -> str:
        if issue.rule is InconsistencyRule.NAMING_DRIFT:
            return f"rename {issue.metric_ids[0]} -> {issue.replacement}"
        return f"rescale {issue.metric_ids[0]} to 0-100"

    def _read_lines(self, relative_path: str) -> list[str]:
        # newline="" keeps CRLF endings intact on rewrite
        with open(self.project_root / relative_path, encoding="utf-8", newline="") as f:
            return f.read().splitlines(keepends=True)

    def _write(self, edits: list[LineEdit]) -> None:
        by_file: dict[str, list[LineEdit]] = {}
        for edit in edits:
            by_file.setdefault(edit.file, []).append(edit)

        for relative_path, file_edits in by_file.items():
            lines = self._read_lines(relative_path)
            for edit in file_edits:
                if lines[edit.line - 1] != edit.before:
                    raise FixConflict(f"{relative_path}:{edit.line} changed while fixing")
                lines[edit.line - 1] = edit.after
            atomic_write_text("".join(lines), self.project_root / relative_path, newline="")
            logger.debug(f"Rewrote {len(file_edits)} lines in {relative_path}")
