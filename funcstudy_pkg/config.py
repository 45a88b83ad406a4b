"""Centralized configuration for funcstudy.

This module defines:
- Input validation limits
- Scan intervals, steps and tolerances for the numeric analysis core
- Fixed sample grids used by the property aggregator
- Plot sampling defaults
- The table of named functions and constants known to the parser

Configuration can be overridden via:
- CLI flags (see cli.py)
- Environment variables (prefixed with FUNCSTUDY_)
"""

import math
import os
import re

# Version is defined in pyproject.toml [project] section
try:
    import importlib.metadata

    VERSION = importlib.metadata.version("funcstudy")
except Exception:
    # Fallback if package not installed
    VERSION = "1.0.0"

# Input validation limits
MAX_INPUT_LENGTH = int(os.getenv("FUNCSTUDY_MAX_INPUT_LENGTH", "10000"))  # characters
MAX_EXPRESSION_DEPTH = int(
    os.getenv("FUNCSTUDY_MAX_EXPRESSION_DEPTH", "100")
)  # nesting of parentheses and signs
MAX_TREE_HEIGHT = int(
    os.getenv("FUNCSTUDY_MAX_TREE_HEIGHT", "500")
)  # longest operator chain

# Root finding (sign-change scan + bisection)
ZERO_SEARCH_MIN = float(os.getenv("FUNCSTUDY_ZERO_SEARCH_MIN", "-10"))
ZERO_SEARCH_MAX = float(os.getenv("FUNCSTUDY_ZERO_SEARCH_MAX", "10"))
ZERO_SEARCH_STEP = float(os.getenv("FUNCSTUDY_ZERO_SEARCH_STEP", "0.5"))
ROOT_TOLERANCE = float(
    os.getenv("FUNCSTUDY_ROOT_TOLERANCE", "1e-4")
)  # |f(x0)| below this counts as a root
MAX_ROOTS = int(os.getenv("FUNCSTUDY_MAX_ROOTS", "10"))
BISECTION_MAX_ITERATIONS = int(os.getenv("FUNCSTUDY_BISECTION_MAX_ITERATIONS", "20"))
ROOT_MERGE_TOLERANCE = float(
    os.getenv("FUNCSTUDY_ROOT_MERGE_TOLERANCE", "0.01")
)  # roots closer than this are reported once

# Derivative estimation
DERIVATIVE_STEP = float(os.getenv("FUNCSTUDY_DERIVATIVE_STEP", "1e-3"))
SYMBOLIC_DERIVATIVE = (
    os.getenv("FUNCSTUDY_SYMBOLIC_DERIVATIVE", "true").lower() == "true"
)

# Critical points
CRITICAL_SEARCH_MIN = float(os.getenv("FUNCSTUDY_CRITICAL_SEARCH_MIN", "-5"))
CRITICAL_SEARCH_MAX = float(os.getenv("FUNCSTUDY_CRITICAL_SEARCH_MAX", "5"))
CRITICAL_SEARCH_STEP = float(os.getenv("FUNCSTUDY_CRITICAL_SEARCH_STEP", "0.2"))
CRITICAL_MERGE_TOLERANCE = float(os.getenv("FUNCSTUDY_CRITICAL_MERGE_TOLERANCE", "0.1"))
CRITICAL_PROBE = float(os.getenv("FUNCSTUDY_CRITICAL_PROBE", "0.1"))
MAX_CRITICAL_POINTS = int(os.getenv("FUNCSTUDY_MAX_CRITICAL_POINTS", "10"))

# Property aggregator thresholds
PARITY_TOLERANCE = float(
    os.getenv("FUNCSTUDY_PARITY_TOLERANCE", "0.01")
)  # 0.001 for the stricter check
BOUNDEDNESS_LIMIT = float(os.getenv("FUNCSTUDY_BOUNDEDNESS_LIMIT", "100"))
CONVEXITY_TOLERANCE = float(os.getenv("FUNCSTUDY_CONVEXITY_TOLERANCE", "1e-9"))
MONOTONICITY_RATIO = float(os.getenv("FUNCSTUDY_MONOTONICITY_RATIO", "2"))
ASYMPTOTIC_PROBE = float(os.getenv("FUNCSTUDY_ASYMPTOTIC_PROBE", "100"))
ASYMPTOTIC_THRESHOLD = float(os.getenv("FUNCSTUDY_ASYMPTOTIC_THRESHOLD", "1000"))
DISPLAY_DECIMALS = int(os.getenv("FUNCSTUDY_DISPLAY_DECIMALS", "4"))

BOUNDEDNESS_POINTS = (-10.0, -5.0, -1.0, 0.0, 1.0, 5.0, 10.0)
MONOTONICITY_POINTS = (-10.0, -5.0, -2.0, -1.0, 0.0, 1.0, 2.0, 5.0, 10.0)
CONVEXITY_POINTS = (-2.0, -1.0, 0.0, 1.0, 2.0)

# Plot sampling
DEFAULT_PLOT_RANGE = float(os.getenv("FUNCSTUDY_DEFAULT_PLOT_RANGE", "10"))
MIN_PLOT_RANGE = float(os.getenv("FUNCSTUDY_MIN_PLOT_RANGE", "1"))
MAX_PLOT_RANGE = float(os.getenv("FUNCSTUDY_MAX_PLOT_RANGE", "1000"))
PLOT_DIVISIONS = int(
    os.getenv("FUNCSTUDY_PLOT_DIVISIONS", "100")
)  # step = range / divisions
PLOT_Y_LIMIT = float(
    os.getenv("FUNCSTUDY_PLOT_Y_LIMIT", "1000")
)  # |y| at or above this is drawn as a gap


def _log10(value: float) -> float:
    return math.log10(value)


def _cot(value: float) -> float:
    return 1.0 / math.tan(value)


ALLOWED_FUNCTIONS = {
    "sin": math.sin,
    "cos": math.cos,
    "tan": math.tan,
    "cot": _cot,
    "asin": math.asin,
    "acos": math.acos,
    "atan": math.atan,
    "exp": math.exp,
    "log": _log10,
    "ln": math.log,
    "sqrt": math.sqrt,
    "abs": abs,
}

ALLOWED_CONSTANTS = {
    "pi": math.pi,
    "e": math.e,
}

VARIABLE_NAME = "x"

UNICODE_REPLACEMENTS = {
    "π": "pi",
    "√": "sqrt",
    "−": "-",
    "–": "-",
    "×": "*",
    "·": "*",
    "÷": "/",
    "**": "^",
}
SUPERSCRIPT_DIGITS = str.maketrans("⁰¹²³⁴⁵⁶⁷⁸⁹⁻", "0123456789-")

NUMBER_REGEX = re.compile(r"\d+(?:\.\d*)?|\.\d+")
SUPERSCRIPT_REGEX = re.compile(r"([⁻]?[⁰¹²³⁴⁵⁶⁷⁸⁹]+)")
FUNCTION_PREFIX_REGEX = re.compile(r"^\s*(?:y|f\s*\(\s*x\s*\))\s*=")
