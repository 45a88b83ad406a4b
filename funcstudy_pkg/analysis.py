"""Property aggregator: the full description of one expression.

``analyze`` compiles the expression, then runs a fixed pipeline of property
stages. Only a compilation failure aborts the analysis; any other stage that
raises is logged and its property omitted, so the rest still renders.

Record order (consumers rely on it):
type, domain, zeros, y_intercept, parity, boundedness, monotonicity,
convexity, category extras (period, vertical_asymptote, derivative, extrema),
asymptotics.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, replace
from functools import cached_property
from typing import Callable, Iterable, Optional, Union

from . import config
from .calculus import derivative, find_extrema
from .classifier import classify_function, normalize
from .config import (
    ASYMPTOTIC_PROBE,
    ASYMPTOTIC_THRESHOLD,
    BOUNDEDNESS_LIMIT,
    BOUNDEDNESS_POINTS,
    CONVEXITY_POINTS,
    CONVEXITY_TOLERANCE,
    CRITICAL_SEARCH_MAX,
    CRITICAL_SEARCH_MIN,
    DEFAULT_PLOT_RANGE,
    MONOTONICITY_POINTS,
    MONOTONICITY_RATIO,
    ZERO_SEARCH_MAX,
    ZERO_SEARCH_MIN,
)
from .evaluator import CompiledFunction, compile_expression
from .logging_config import get_logger
from .parser import format_number
from .plotting import clamp_range, plot_samples
from .solver import find_zeros
from .types import (
    CategoryKind,
    CriticalKind,
    FunctionCategory,
    PropertyRecord,
    SamplePoint,
)

logger = get_logger("analysis")

EVEN = "Even"
ODD = "Odd"
GENERAL = "General"
UNKNOWN = "Unknown"

_CRITICAL_LABELS = {
    CriticalKind.MAXIMUM: "Local maximum",
    CriticalKind.MINIMUM: "Local minimum",
    CriticalKind.INFLECTION_OR_UNKNOWN: "Stationary point (inflection or unknown)",
}

_RATIONAL_DOMAIN_RE = re.compile(r"/\(.*x.*\)")


def domain_heuristic(expr: str) -> tuple[str, Optional[str]]:
    """Guess the domain from the expression text alone.

    This is a syntactic heuristic and is not checked against evaluation: an
    expression dividing by a sub-expression that vanishes away from ``x = 0``
    is still reported as excluding only ``0``.

    Returns:
        (interval notation, condition on x or None for all reals)
    """
    text = normalize(expr)
    if "/x" in text or _RATIONAL_DOMAIN_RE.search(text):
        return "(-∞, 0) ∪ (0, +∞)", "x != 0"
    if "log" in text or "ln" in text:
        return "(0, +∞)", "x > 0"
    if "sqrt" in text:
        return "[0, +∞)", "x >= 0"
    return "(-∞, +∞)", None


def check_parity(f: CompiledFunction, tolerance: Optional[float] = None) -> str:
    """Compare f(1) with f(-1): Even, Odd, General or Unknown."""
    if tolerance is None:
        tolerance = config.PARITY_TOLERANCE
    right = f(1.0)
    left = f(-1.0)
    if right is None or left is None:
        return UNKNOWN
    if abs(right - left) < tolerance:
        return EVEN
    if abs(right + left) < tolerance:
        return ODD
    return GENERAL


def check_boundedness(f: CompiledFunction) -> tuple[str, Optional[float]]:
    """Bounded if every defined sample stays below BOUNDEDNESS_LIMIT in magnitude."""
    values = [f(point) for point in BOUNDEDNESS_POINTS]
    defined = [abs(value) for value in values if value is not None]
    if not defined:
        return UNKNOWN, None
    largest = max(defined)
    return ("Bounded" if largest < BOUNDEDNESS_LIMIT else "Unbounded"), largest


def check_monotonicity(f: CompiledFunction) -> tuple[str, int, int]:
    """Majority vote of increasing vs. decreasing consecutive sample pairs.

    Returns:
        (verdict, increasing pair count, decreasing pair count)
    """
    values = [f(point) for point in MONOTONICITY_POINTS]
    increasing = decreasing = compared = 0
    for before, after in zip(values, values[1:]):
        if before is None or after is None:
            continue
        compared += 1
        if after > before:
            increasing += 1
        elif after < before:
            decreasing += 1
    if compared == 0:
        return UNKNOWN, 0, 0
    if increasing == 0 and decreasing == 0:
        return "Constant", 0, 0
    if increasing > decreasing and increasing >= MONOTONICITY_RATIO * decreasing:
        return "Increasing", increasing, decreasing
    if decreasing > increasing and decreasing >= MONOTONICITY_RATIO * increasing:
        return "Decreasing", increasing, decreasing
    return "Non-monotonic", increasing, decreasing


def check_convexity(f: CompiledFunction) -> str:
    """Sign of the second differences f(x-1) - 2f(x) + f(x+1) on a small grid."""
    values = [f(point) for point in CONVEXITY_POINTS]
    differences = []
    for before, middle, after in zip(values, values[1:], values[2:]):
        if before is None or middle is None or after is None:
            continue
        differences.append(before - 2 * middle + after)
    if not differences:
        return UNKNOWN
    if all(abs(d2) <= CONVEXITY_TOLERANCE for d2 in differences):
        return "No curvature (linear)"
    if all(d2 > CONVEXITY_TOLERANCE for d2 in differences):
        return "Convex (concave up)"
    if all(d2 < -CONVEXITY_TOLERANCE for d2 in differences):
        return "Concave (concave down)"
    return "Changes concavity"


def _trend(value: Optional[float]) -> str:
    if value is None:
        return "undefined"
    if abs(value) > ASYMPTOTIC_THRESHOLD:
        return "f→+∞" if value > 0 else "f→-∞"
    return "bounded"


def asymptotic_behavior(f: CompiledFunction) -> tuple[str, Optional[float], Optional[float]]:
    """Probe f at ±ASYMPTOTIC_PROBE; beyond ASYMPTOTIC_THRESHOLD counts as growth."""
    at_plus = f(ASYMPTOTIC_PROBE)
    at_minus = f(-ASYMPTOTIC_PROBE)
    plus, minus = _trend(at_plus), _trend(at_minus)
    if plus == "bounded" and minus == "bounded":
        return "Bounded behavior", at_plus, at_minus
    if plus.startswith("f→") or minus.startswith("f→"):
        summary = f"Unbounded growth (as x→+∞: {plus}; as x→-∞: {minus})"
    else:
        summary = f"As x→+∞: {plus}; as x→-∞: {minus}"
    return summary, at_plus, at_minus


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


@dataclass
class _Context:
    expression: str
    function: CompiledFunction

    @cached_property
    def category(self) -> FunctionCategory:
        return classify_function(self.expression)

    @cached_property
    def derivative(self) -> CompiledFunction:
        return derivative(self.function)


StageOutput = Union[PropertyRecord, Iterable[PropertyRecord], None]


def _type_stage(ctx: _Context) -> PropertyRecord:
    return PropertyRecord(
        "type", ctx.category.label, "Classification by the form of the expression",
        ctx.category,
    )


def _domain_stage(ctx: _Context) -> PropertyRecord:
    interval, condition = domain_heuristic(ctx.expression)
    return PropertyRecord(
        "domain",
        interval,
        "Admissible values of x (syntactic estimate, not verified by evaluation)",
        condition,
    )


def _zeros_stage(ctx: _Context) -> PropertyRecord:
    roots = find_zeros(ctx.function)
    value = ", ".join(format_number(root) for root in roots) if roots else "No real zeros"
    return PropertyRecord(
        "zeros",
        value,
        f"Crossings of the x-axis, f(x) = 0, searched on "
        f"[{format_number(ZERO_SEARCH_MIN)}, {format_number(ZERO_SEARCH_MAX)}]",
        tuple(roots),
    )


def _y_intercept_stage(ctx: _Context) -> Optional[PropertyRecord]:
    y_value = ctx.function(0.0)
    if y_value is None:
        return None
    shown = round(y_value, 3) + 0.0
    return PropertyRecord(
        "y_intercept", f"(0, {shown:.3f})", "Value at x = 0", y_value
    )


def _parity_stage(ctx: _Context) -> PropertyRecord:
    return PropertyRecord(
        "parity", check_parity(ctx.function), "Symmetry of the graph from f(1) and f(-1)"
    )


def _boundedness_stage(ctx: _Context) -> PropertyRecord:
    verdict, largest = check_boundedness(ctx.function)
    return PropertyRecord(
        "boundedness",
        verdict,
        f"|f| compared with {format_number(BOUNDEDNESS_LIMIT)} at sample points",
        largest,
    )


def _monotonicity_stage(ctx: _Context) -> PropertyRecord:
    verdict, increasing, decreasing = check_monotonicity(ctx.function)
    return PropertyRecord(
        "monotonicity",
        verdict,
        f"{increasing} increasing and {decreasing} decreasing sampled steps",
        (increasing, decreasing),
    )


def _convexity_stage(ctx: _Context) -> PropertyRecord:
    return PropertyRecord(
        "convexity",
        check_convexity(ctx.function),
        "Second differences on x = -2..2",
    )


def _period_stage(ctx: _Context) -> Optional[PropertyRecord]:
    category = ctx.category
    if category.kind is not CategoryKind.TRIGONOMETRIC:
        return None
    if category.subtype in ("tan", "cot"):
        return PropertyRecord("period", "π", "Period of the tangent family", math.pi)
    if category.subtype in ("sin", "cos"):
        return PropertyRecord("period", "2π", "Period of sine and cosine", 2 * math.pi)
    return PropertyRecord("period", "Not periodic", "Inverse trigonometric function")


def _vertical_asymptote_stage(ctx: _Context) -> Optional[PropertyRecord]:
    if ctx.category.kind is not CategoryKind.RATIONAL:
        return None
    return PropertyRecord(
        "vertical_asymptote", "x = 0", "Where the denominator vanishes (estimate)", 0.0
    )


def _derivative_stage(ctx: _Context) -> PropertyRecord:
    df = ctx.derivative
    if df.method == "symbolic":
        value = df.source
    else:
        value = "numeric estimate (central difference)"
    return PropertyRecord("derivative", value, "f'(x)", df.method)


def _extrema_stage(ctx: _Context) -> PropertyRecord:
    extrema = find_extrema(ctx.function, ctx.derivative)
    if extrema:
        value = "; ".join(
            f"{_CRITICAL_LABELS[point.kind]} at x = {format_number(point.x)}"
            for point in extrema
        )
    else:
        value = "No critical points"
    return PropertyRecord(
        "extrema",
        value,
        f"Sign changes of f'(x) on "
        f"[{format_number(CRITICAL_SEARCH_MIN)}, {format_number(CRITICAL_SEARCH_MAX)}]",
        tuple(extrema),
    )


def _asymptotics_stage(ctx: _Context) -> PropertyRecord:
    summary, at_plus, at_minus = asymptotic_behavior(ctx.function)
    return PropertyRecord(
        "asymptotics",
        summary,
        f"Behavior at x = ±{format_number(ASYMPTOTIC_PROBE)}",
        (at_plus, at_minus),
    )


PIPELINE: tuple[tuple[str, Callable[[_Context], StageOutput]], ...] = (
    ("type", _type_stage),
    ("domain", _domain_stage),
    ("zeros", _zeros_stage),
    ("y_intercept", _y_intercept_stage),
    ("parity", _parity_stage),
    ("boundedness", _boundedness_stage),
    ("monotonicity", _monotonicity_stage),
    ("convexity", _convexity_stage),
    ("period", _period_stage),
    ("vertical_asymptote", _vertical_asymptote_stage),
    ("derivative", _derivative_stage),
    ("extrema", _extrema_stage),
    ("asymptotics", _asymptotics_stage),
)


def _run_stage(
    name: str, stage: Callable[[_Context], StageOutput], ctx: _Context
) -> list[PropertyRecord]:
    try:
        produced = stage(ctx)
    except Exception as e:
        logger.warning(
            f"Property '{name}' failed for {ctx.expression!r}: {e}", exc_info=True
        )
        return []
    if produced is None:
        return []
    if isinstance(produced, PropertyRecord):
        return [produced]
    return list(produced)


def _collect(ctx: _Context) -> list[PropertyRecord]:
    records: list[PropertyRecord] = []
    for name, stage in PIPELINE:
        records.extend(_run_stage(name, stage, ctx))
    logger.debug(f"analyze({ctx.expression!r}) -> {len(records)} properties")
    return records


def analyze(expr: str) -> list[PropertyRecord]:
    """Compute the ordered property records of an expression.

    Raises:
        ParseError: If the expression cannot be compiled
    """
    return _collect(_Context(expr, compile_expression(expr)))


@dataclass(frozen=True)
class AnalysisSession:
    """Everything a front end needs to show one expression.

    Sessions are values: each user action builds a new one, and the caller
    keeps whichever was produced last.
    """

    expression: str
    function: CompiledFunction
    category: FunctionCategory
    properties: tuple[PropertyRecord, ...]
    samples: tuple[SamplePoint, ...]
    x_range: float

    def with_range(self, x_range: float | str | None) -> "AnalysisSession":
        """Re-sample for a new plotting range; properties are unchanged."""
        radius = clamp_range(x_range)
        return replace(
            self, x_range=radius, samples=tuple(plot_samples(self.function, radius))
        )


def start_session(
    expr: str, x_range: float | str | None = DEFAULT_PLOT_RANGE
) -> AnalysisSession:
    """Analyze and sample an expression in one pass.

    Raises:
        ParseError: If the expression cannot be compiled
    """
    ctx = _Context(expr, compile_expression(expr))
    radius = clamp_range(x_range)
    return AnalysisSession(
        expression=expr.strip(),
        function=ctx.function,
        category=ctx.category,
        properties=tuple(_collect(ctx)),
        samples=tuple(plot_samples(ctx.function, radius)),
        x_range=radius,
    )
