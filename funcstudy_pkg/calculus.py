"""Derivative estimation and critical point classification.

SymPy acts as the optional symbolic differentiator. When it cannot produce a
derivative (or is switched off), the central difference
``(f(x+h) - f(x-h)) / (2h)`` keeps every operation available.
"""

from __future__ import annotations

from typing import Optional, Tuple

import sympy as sp

from . import config
from .config import (
    CRITICAL_MERGE_TOLERANCE,
    CRITICAL_PROBE,
    CRITICAL_SEARCH_MAX,
    CRITICAL_SEARCH_MIN,
    CRITICAL_SEARCH_STEP,
    DERIVATIVE_STEP,
    MAX_CRITICAL_POINTS,
    ROOT_TOLERANCE,
)
from .evaluator import CompiledFunction
from .logging_config import get_logger
from .parser import X
from .solver import scan_sign_changes
from .types import CriticalKind, CriticalPoint, DomainError

logger = get_logger("calculus")


def symbolic_derivative(f: CompiledFunction) -> Optional[CompiledFunction]:
    """Differentiate ``f`` with SymPy.

    Returns:
        CompiledFunction evaluating the exact derivative through mpmath, or
        None when ``f`` has no SymPy form or differentiation fails
    """
    expr = f.as_sympy()
    if expr is None:
        return None
    try:
        diff_expr = sp.diff(expr, X)
        raw = sp.lambdify(X, diff_expr, modules="mpmath")
    except (ValueError, TypeError, AttributeError, NotImplementedError) as e:
        logger.debug(f"Symbolic differentiation failed for {f.source!r}: {e}")
        return None
    return CompiledFunction(
        source=str(diff_expr), raw=raw, method="symbolic", symbolic=diff_expr
    )


def central_difference(f: CompiledFunction, h: float = DERIVATIVE_STEP) -> CompiledFunction:
    """Numeric derivative of ``f``; undefined wherever either sample is."""
    if h <= 0:
        raise ValueError("Difference step must be positive")

    def raw(x: float) -> float:
        ahead = f(x + h)
        behind = f(x - h)
        if ahead is None or behind is None:
            raise DomainError(f"derivative undefined at {x}")
        return (ahead - behind) / (2 * h)

    return CompiledFunction(
        source=f"d/dx[{f.source}]", raw=raw, method="central-difference"
    )


def derivative(
    f: CompiledFunction, h: float = DERIVATIVE_STEP, symbolic: Optional[bool] = None
) -> CompiledFunction:
    """Derivative of ``f`` as another CompiledFunction.

    Args:
        f: Function to differentiate
        h: Step of the central difference fallback
        symbolic: Prefer the SymPy derivative (default: config.SYMBOLIC_DERIVATIVE)

    Example:
        >>> from funcstudy_pkg.evaluator import compile_expression
        >>> derivative(compile_expression("x^2"))(3)
        6.0
    """
    use_symbolic = config.SYMBOLIC_DERIVATIVE if symbolic is None else symbolic
    if use_symbolic:
        df = symbolic_derivative(f)
        if df is not None:
            return df
    return central_difference(f, h)


def find_critical_points(
    df: CompiledFunction,
    interval: Tuple[float, float] = (CRITICAL_SEARCH_MIN, CRITICAL_SEARCH_MAX),
    step: float = CRITICAL_SEARCH_STEP,
    tolerance: float = ROOT_TOLERANCE,
    max_points: int = MAX_CRITICAL_POINTS,
) -> list[float]:
    """Zeros of the derivative ``df`` inside ``interval``, merged within 0.1."""
    return scan_sign_changes(
        df,
        float(interval[0]),
        float(interval[1]),
        step,
        tolerance=tolerance,
        max_count=max_points,
        merge_tolerance=CRITICAL_MERGE_TOLERANCE,
    )


def classify_critical_point(
    df: CompiledFunction, point: float, probe: float = CRITICAL_PROBE
) -> CriticalKind:
    """Classify by the sign of ``df`` just left and right of ``point``."""
    left = df(point - probe)
    right = df(point + probe)
    if left is None or right is None:
        return CriticalKind.INFLECTION_OR_UNKNOWN
    if left > 0 and right < 0:
        return CriticalKind.MAXIMUM
    if left < 0 and right > 0:
        return CriticalKind.MINIMUM
    return CriticalKind.INFLECTION_OR_UNKNOWN


def find_extrema(
    f: CompiledFunction,
    df: Optional[CompiledFunction] = None,
    interval: Tuple[float, float] = (CRITICAL_SEARCH_MIN, CRITICAL_SEARCH_MAX),
    step: float = CRITICAL_SEARCH_STEP,
) -> list[CriticalPoint]:
    """Critical points of ``f`` with their kind and function value."""
    if df is None:
        df = derivative(f)
    return [
        CriticalPoint(x=point, kind=classify_critical_point(df, point), y=f(point))
        for point in find_critical_points(df, interval, step)
    ]
