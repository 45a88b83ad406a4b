"""Public API for funcstudy - returns structured objects without side effects."""

from __future__ import annotations

from .analysis import analyze
from .calculus import derivative
from .config import DEFAULT_PLOT_RANGE
from .evaluator import compile_expression
from .logging_config import get_logger
from .parser import preprocess, parse_preprocessed
from .plotting import clamp_range, count_defined, plot_samples
from .types import AnalysisResult, DerivativeResult, ParseError, PlotResult

logger = get_logger("api")


def analyze_expression(expression: str) -> AnalysisResult:
    """Analyze a function of x.

    Args:
        expression: Expression string (e.g., "x^2 - 4", "sin(x)")

    Returns:
        AnalysisResult with the ordered property records, or a single error
        message when the expression cannot be compiled

    Example:
        >>> from funcstudy_pkg.api import analyze_expression
        >>> result = analyze_expression("x^2 - 4")
        >>> [prop.value for prop in result.properties][:3]
        ['Quadratic (parabola)', '(-∞, +∞)', '-2, 2']
    """
    try:
        properties = analyze(expression)
    except ParseError as e:
        return AnalysisResult(ok=False, expression=expression, error=str(e))
    return AnalysisResult(ok=True, expression=expression.strip(), properties=properties)


def plot_data(expression: str, x_range: float | str | None = DEFAULT_PLOT_RANGE) -> PlotResult:
    """Sample a function over ``[-x_range, x_range]`` for plotting.

    Args:
        expression: Function expression
        x_range: Half-width of the plotting window (clamped to a sane range)

    Returns:
        PlotResult with the sample table; undefined samples have ``y=None``

    Example:
        >>> from funcstudy_pkg.api import plot_data
        >>> result = plot_data("1/x", 10)
        >>> result.samples[100].y is None
        True
    """
    try:
        f = compile_expression(expression)
    except ParseError as e:
        return PlotResult(ok=False, error=str(e))
    radius = clamp_range(x_range)
    samples = plot_samples(f, radius)
    if count_defined(samples) == 0:
        return PlotResult(
            ok=False, x_range=radius, error="Function is undefined on the whole plotting range"
        )
    return PlotResult(ok=True, samples=samples, x_range=radius)


def differentiate(expression: str) -> DerivativeResult:
    """Differentiate an expression with respect to x.

    Example:
        >>> from funcstudy_pkg.api import differentiate
        >>> differentiate("x^3").derivative
        '3*x**2'
    """
    try:
        f = compile_expression(expression)
    except ParseError as e:
        return DerivativeResult(ok=False, error=str(e))
    df = derivative(f)
    if df.method == "symbolic":
        return DerivativeResult(ok=True, derivative=df.source, method=df.method)
    return DerivativeResult(ok=True, method=df.method)


def validate_expression(expression: str) -> tuple[bool, str | None]:
    """Validate an expression without evaluating it.

    Returns:
        Tuple of (is_valid, error_message)

    Example:
        >>> from funcstudy_pkg.api import validate_expression
        >>> validate_expression("2x + 1")
        (True, None)
        >>> validate_expression("2x +* 1")
        (False, "Unexpected '*' at position 4")
    """
    try:
        parse_preprocessed(preprocess(expression))
        return True, None
    except ParseError as e:
        return False, str(e)
