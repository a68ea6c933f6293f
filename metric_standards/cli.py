#!/usr/bin/env python3
"""
Metric Standards command line

Checks a project tree against the metric standards, renders reports and
applies auto-fixes.

Usage:
    metric-standards --check
    metric-standards --report --output metric-report.md
    metric-standards --fix --root ./src
    metric-standards --check --format json --output report.json

Exit codes:
    0   No critical or high severity issues
    1   Critical or high severity issues remain
    2   Configuration, rule table or registry file errors
    130 Interrupted
"""

import argparse
import sys
from collections.abc import Callable
from pathlib import Path

from metric_standards import __version__
from metric_standards.consistency.autofix import MetricAutoFixer
from metric_standards.consistency.checker import MetricConsistencyChecker
from metric_standards.consistency.renderer import REPORT_FORMATS, render_report
from metric_standards.consistency.rules import RuleTable, RuleTableError, load_rule_table
from metric_standards.core.config import ConfigurationError, StandardsConfig, load_config
from metric_standards.core.logging_config import get_logger, setup_logging
from metric_standards.domain.consistency import ConsistencyReport, Severity
from metric_standards.registry import MetricRegistry, RegistryFormatError
from metric_standards.standard_metrics import create_default_registry
from metric_standards.utils.atomic_json import atomic_write_text

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_ISSUES = 1
EXIT_CONFIG_ERROR = 2
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="metric-standards",
        description="Check metric naming, units and ranges in a project against the metric standards",
    )

    mode = parser.add_argument_group("mode (default: --check)")
    mode.add_argument("--check", action="store_true", help="Run the consistency check and print the result")
    mode.add_argument("--fix", action="store_true", help="Plan auto-fixes and apply them after confirmation")
    mode.add_argument("--report", action="store_true", help="Generate a detailed report (markdown by default)")

    parser.add_argument("--output", type=Path, default=None, help="Write the report to this file instead of stdout")
    parser.add_argument(
        "--format",
        choices=REPORT_FORMATS,
        default=None,
        help="Report format (default: console, or markdown with --report)",
    )
    parser.add_argument("--root", type=Path, default=None, help="Project root to scan (default: METRIC_STANDARDS_ROOT)")
    parser.add_argument("--registry", type=Path, default=None, help="Registry export to check against")
    parser.add_argument("--export-registry", type=Path, default=None, help="Write the registry as JSON to this file")
    parser.add_argument("--yes", action="store_true", help="Apply fixes without asking (for CI)")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    return parser


def parse_arguments(argv: list[str] | None = None) -> tuple[argparse.Namespace, list[str]]:
    """
    Parse command-line arguments.

    Unknown arguments are returned rather than rejected so the caller can
    warn about them and carry on.

    Returns:
        (parsed arguments, unknown arguments)
    """
    return build_parser().parse_known_args(argv)


def confirm(prompt: str, input_func: Callable[[str], str] = input) -> bool:
    """Ask a yes/no question; anything but y/yes (including EOF) is no."""
    try:
        answer = input_func(f"{prompt} [y/N]: ")
    except EOFError:
        return False
    return answer.strip().lower() in ("y", "yes")


def resolve_config(args: argparse.Namespace) -> StandardsConfig:
    """
    Load configuration from the environment and apply command-line overrides.

    Raises:
        ConfigurationError: If the environment or --root is invalid
    """
    config = load_config()
    if args.root is not None:
        config = StandardsConfig(
            project_root=args.root,
            rules_file=config.rules_file,
            log_level=config.log_level,
            log_json=config.log_json,
            log_file=config.log_file,
        )
    if args.verbose:
        config.log_level = "DEBUG"
    return config


def load_registry(registry_file: Path | None) -> MetricRegistry:
    """
    Build the registry to check against.

    Raises:
        RegistryFormatError: If the registry file is structurally invalid
        OSError: If the registry file cannot be read
    """
    if registry_file is None:
        return create_default_registry()

    registry = MetricRegistry()
    result = registry.import_from_file(registry_file)
    for error in result.errors:
        logger.warning(error)
    logger.info(f"Loaded {result.imported} metric definitions from {registry_file}")
    return registry


def has_blocking_issues(report: ConsistencyReport) -> bool:
    return any(issue.severity in (Severity.CRITICAL, Severity.HIGH) for issue in report.inconsistencies)


def emit(text: str, output: Path | None) -> None:
    if output is None:
        print(text)
        return
    atomic_write_text(text, output)
    logger.info(f"Report written to {output}")


def run_fix(
    checker: MetricConsistencyChecker,
    report: ConsistencyReport,
    rules: RuleTable,
    assume_yes: bool,
    input_func: Callable[[str], str] = input,
) -> ConsistencyReport:
    """
    Show the auto-fix plan, confirm, apply and re-check.

    Returns:
        The report after fixing, or the original report if nothing was applied
    """
    fixer = MetricAutoFixer(checker.project_root, rules=rules)
    plan = fixer.auto_fix(report.inconsistencies)

    print("\nAuto-fix plan:")
    if not plan.details:
        print("  Nothing to fix automatically")
        return report
    for line in plan.details:
        print(f"  {line}")

    if plan.fixed == 0:
        return report

    if not assume_yes and not confirm(f"Apply {plan.fixed} fixes to files under {checker.project_root}?", input_func):
        print("Auto-fix cancelled; no files were changed")
        return report

    applied = fixer.auto_fix(report.inconsistencies, apply=True)
    print(f"\nAuto-fix complete: {applied.fixed} fixed, {applied.failed} failed")
    for line in applied.details:
        print(f"  {line}")

    return checker.check_consistency()


def main(argv: list[str] | None = None, input_func: Callable[[str], str] = input) -> int:
    """
    Run the command line.

    Returns:
        Process exit code
    """
    args, unknown = parse_arguments(argv)

    try:
        config = resolve_config(args)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    setup_logging(level=config.log_level, log_file=config.log_file, json_output=config.log_json)

    for flag in unknown:
        logger.warning(f"Ignoring unknown argument: {flag}")

    try:
        rules = load_rule_table(config.rules_file)
        registry = load_registry(args.registry)
    except (RuleTableError, RegistryFormatError, OSError) as e:
        logger.error(f"Cannot start metric check: {e}")
        return EXIT_CONFIG_ERROR

    if args.export_registry is not None:
        registry.export_to_file(args.export_registry)

    output_format = args.format or ("markdown" if args.report else "console")
    checker = MetricConsistencyChecker(config.project_root, registry, rules=rules)

    try:
        report = checker.check_consistency()
        if args.fix:
            print(render_report(report, "console"))
            report = run_fix(checker, report, rules, args.yes, input_func)
            if args.output is not None or args.format is not None:
                emit(render_report(report, output_format), args.output)
        else:
            emit(render_report(report, output_format), args.output)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return EXIT_INTERRUPTED

    return EXIT_ISSUES if has_blocking_issues(report) else EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
