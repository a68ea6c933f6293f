"""
Consistency checking for metric usage in source trees

Modules:
    - rules: externalized rule table (patterns, naming map, denylist)
    - checker: MetricConsistencyChecker, the tree walk and five analyses
    - autofix: MetricAutoFixer, plans and applies naming/range fixes
    - renderer: Jinja2 markdown and plain-text report rendering

Import from the submodules directly:
    from metric_standards.consistency.checker import MetricConsistencyChecker
"""
