"""
Report Rendering Utilities

Renders a ConsistencyReport in the three output formats:
    - json: direct serialization of report.to_dict()
    - markdown: totals, one section per severity, recommendations
    - console: flattened plain text for terminals

Markdown and console output come from Jinja2 templates shipped in
consistency/templates/.

Usage:
    from metric_standards.consistency.renderer import render_report

    print(render_report(report, "markdown"))
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape

from metric_standards.core.logging_config import get_logger
from metric_standards.domain.consistency import ConsistencyReport, Severity

logger = get_logger(__name__)

REPORT_FORMATS = ("json", "markdown", "console")

TEMPLATES = {
    "markdown": "report.md.j2",
    "console": "report.txt.j2",
}

SEVERITY_ICONS = {
    Severity.CRITICAL: "🚨",
    Severity.HIGH: "⚠️",
    Severity.MEDIUM: "🔶",
    Severity.LOW: "ℹ️",
}

# Initialize Jinja2 environment (singleton)
_jinja_env: Environment | None = None


def get_jinja_environment() -> Environment:
    """
    Get or create the Jinja2 environment (singleton pattern).

    Templates are plain text, so autoescaping only applies to html/xml names.

    :returns: Configured Jinja2 Environment with custom filters registered
    """
    global _jinja_env

    if _jinja_env is None:
        template_dir = Path(__file__).parent / "templates"

        _jinja_env = Environment(
            loader=FileSystemLoader(template_dir),
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )

        _jinja_env.filters["format_date"] = format_date
        _jinja_env.filters["severity_icon"] = severity_icon
        _jinja_env.filters["yes_no"] = yes_no

    return _jinja_env


def render_report(report: ConsistencyReport, output_format: str = "console") -> str:
    """
    Render a report in one of REPORT_FORMATS.

    :param report: Report from MetricConsistencyChecker.check_consistency()
    :param output_format: json, markdown or console
    :returns: Rendered text
    :raises ValueError: If output_format is unknown
    """
    if output_format == "json":
        return json.dumps(report.to_dict(), indent=2, ensure_ascii=False)

    template_name = TEMPLATES.get(output_format)
    if template_name is None:
        raise ValueError(f"Unknown report format: {output_format} (expected one of {', '.join(REPORT_FORMATS)})")

    template = get_jinja_environment().get_template(template_name)
    context: dict[str, Any] = {
        "report": report,
        "groups": list(report.by_severity().items()),
    }
    rendered: str = template.render(**context)
    logger.debug(f"Rendered {output_format} report ({len(rendered)} chars)")
    return rendered


def render_markdown(report: ConsistencyReport) -> str:
    return render_report(report, "markdown")


def render_console(report: ConsistencyReport) -> str:
    return render_report(report, "console")


# Custom Jinja2 filters


def format_date(value: Any, format_str: str = "%Y-%m-%d") -> str:
    """
    Format an ISO 8601 string or datetime (Jinja2 filter).

    Unparseable strings are returned unchanged.

    Example:
        {{ "2026-02-07T10:00:00.000Z"|format_date }} -> "2026-02-07"
    """
    if isinstance(value, datetime):
        return value.strftime(format_str)
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00")).strftime(format_str)
        except ValueError:
            return value
    return str(value)


def severity_icon(severity: Severity) -> str:
    return SEVERITY_ICONS.get(severity, "?")


def yes_no(value: bool) -> str:
    return "yes" if value else "no"
