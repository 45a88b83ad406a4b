"""funcstudy package: numeric study of real functions of one variable."""

__all__ = [
    "config",
    "parser",
    "evaluator",
    "solver",
    "calculus",
    "classifier",
    "analysis",
    "plotting",
    "cli",
    "types",
    "api",
    "logging_config",
]

# Public API exports

__api_exports__ = [
    "analyze_expression",
    "plot_data",
    "differentiate",
    "validate_expression",
]
