"""
Metric Standards Engine

Governs how metrics are named, typed, formatted and thresholded across a
codebase, and detects source code that drifts from the registered standard.

Package Structure:
    - core: Infrastructure (configuration, logging)
    - domain: Definition model, builder, consistency report models
    - registry: Indexed in-memory store of metric definitions
    - validator: Rule engine scoring candidate definitions
    - consistency: Source-tree checker, auto-fixer, report rendering
    - cli: Command-line entry point
"""

__version__ = "1.0.0"
__author__ = "Metric Standards Team"
