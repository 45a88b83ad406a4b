"""Numeric root finding by sign-change scan and bisection.

The scan walks a bounded interval in fixed steps. A grid point where
``|f(x)| < tolerance`` is recorded directly; a step whose endpoints have
opposite signs is refined by bisection under a fixed iteration cap. Steps
with an undefined endpoint are skipped.

Known limitation: roots of even multiplicity that fall between grid points,
functions identically zero on an interval, and functions with more roots than
the cap are under-reported. Every pass is bounded, so it always terminates.
"""

from __future__ import annotations

import math
from typing import Optional, Tuple

from .config import (
    BISECTION_MAX_ITERATIONS,
    MAX_ROOTS,
    ROOT_MERGE_TOLERANCE,
    ROOT_TOLERANCE,
    ZERO_SEARCH_MAX,
    ZERO_SEARCH_MIN,
    ZERO_SEARCH_STEP,
)
from .evaluator import CompiledFunction
from .logging_config import get_logger

logger = get_logger("solver")


def bisect(
    f: CompiledFunction,
    a: float,
    b: float,
    fa: float,
    fb: float,
    tolerance: float = ROOT_TOLERANCE,
    max_iterations: int = BISECTION_MAX_ITERATIONS,
) -> Optional[float]:
    """Refine a sign change on ``[a, b]``.

    Returns:
        The refined point, or None when the bracket straddles a discontinuity
        (undefined midpoint, or a residual that grows instead of shrinking)
    """
    if abs(fa) < tolerance:
        return a
    if abs(fb) < tolerance:
        return b
    bound = max(abs(fa), abs(fb))
    mid, fm = a, fa
    for _ in range(max_iterations):
        mid = (a + b) / 2
        fm = f(mid)
        if fm is None:
            return None
        if abs(fm) < tolerance:
            return mid
        if fa * fm < 0:
            b, fb = mid, fm
        else:
            a, fa = mid, fm
    if abs(fm) > bound:
        return None
    return mid


def _is_new(candidate: float, found: list[float], merge_tolerance: float) -> bool:
    return all(abs(candidate - existing) >= merge_tolerance for existing in found)


def scan_sign_changes(
    f: CompiledFunction,
    lo: float,
    hi: float,
    step: float,
    tolerance: float = ROOT_TOLERANCE,
    max_count: int = MAX_ROOTS,
    merge_tolerance: float = ROOT_MERGE_TOLERANCE,
    max_iterations: int = BISECTION_MAX_ITERATIONS,
) -> list[float]:
    """Find points in ``[lo, hi]`` where ``f`` vanishes.

    Args:
        f: Function to scan
        lo, hi: Scan interval
        step: Grid step
        tolerance: Residual below which a point counts as a zero
        max_count: Stop after this many distinct points
        merge_tolerance: Points closer than this to an accepted one are dropped
        max_iterations: Bisection cap per bracket

    Returns:
        Ascending list of distinct points

    Raises:
        ValueError: If the step is not positive
    """
    if step <= 0:
        raise ValueError("Scan step must be positive")
    found: list[float] = []
    steps = int(math.floor((hi - lo) / step + 1e-9))
    for i in range(steps + 1):
        if len(found) >= max_count:
            break
        x0 = round(lo + i * step, 10)
        y0 = f(x0)
        if y0 is None:
            continue
        if abs(y0) < tolerance:
            candidate = x0
        elif i < steps:
            x1 = round(lo + (i + 1) * step, 10)
            y1 = f(x1)
            if y1 is None or y0 * y1 > 0:
                continue
            candidate = bisect(f, x0, x1, y0, y1, tolerance, max_iterations)
            if candidate is None:
                logger.debug(f"Discarded sign change across a discontinuity in [{x0}, {x1}]")
                continue
        else:
            continue
        if _is_new(candidate, found, merge_tolerance):
            found.append(candidate + 0.0)
    return sorted(found)


def find_zeros(
    f: CompiledFunction,
    interval: Tuple[float, float] = (ZERO_SEARCH_MIN, ZERO_SEARCH_MAX),
    step: float = ZERO_SEARCH_STEP,
    tolerance: float = ROOT_TOLERANCE,
    max_roots: int = MAX_ROOTS,
) -> list[float]:
    """Find the real zeros of ``f`` inside ``interval``.

    Example:
        >>> from funcstudy_pkg.evaluator import compile_expression
        >>> find_zeros(compile_expression("x^2 - 4"))
        [-2.0, 2.0]
    """
    roots = scan_sign_changes(
        f,
        float(interval[0]),
        float(interval[1]),
        step,
        tolerance=tolerance,
        max_count=max_roots,
        merge_tolerance=ROOT_MERGE_TOLERANCE,
    )
    logger.debug(f"find_zeros({f.source!r}) -> {roots}")
    return roots
