"""Dense sample tables for the rendering collaborator.

Rendering itself happens elsewhere; this module only produces the points.
Undefined samples stay in the table as ``y=None`` so the renderer draws a gap
instead of connecting across a pole.
"""

from __future__ import annotations

import math

import numpy as np

from .config import (
    DEFAULT_PLOT_RANGE,
    MAX_PLOT_RANGE,
    MIN_PLOT_RANGE,
    PLOT_DIVISIONS,
    PLOT_Y_LIMIT,
)
from .evaluator import CompiledFunction, sample_function
from .types import SamplePoint


def clamp_range(x_range: float | str | None) -> float:
    """Coerce a user-supplied range to ``[MIN_PLOT_RANGE, MAX_PLOT_RANGE]``.

    Anything that is not a positive finite number falls back to the default.
    """
    try:
        value = float(x_range)
    except (TypeError, ValueError):
        return DEFAULT_PLOT_RANGE
    if not math.isfinite(value) or value <= 0:
        return DEFAULT_PLOT_RANGE
    return min(max(value, MIN_PLOT_RANGE), MAX_PLOT_RANGE)


def plot_samples(
    f: CompiledFunction,
    x_range: float | str | None = DEFAULT_PLOT_RANGE,
    divisions: int = PLOT_DIVISIONS,
) -> list[SamplePoint]:
    """Sample ``f`` over ``[-r, r]`` at step ``r / divisions``.

    Example:
        >>> from funcstudy_pkg.evaluator import compile_expression
        >>> len(plot_samples(compile_expression("x^2"), 10))
        201
    """
    radius = clamp_range(x_range)
    return sample_function(f, -radius, radius, radius / divisions)


def count_defined(samples: list[SamplePoint]) -> int:
    return sum(1 for point in samples if point.defined)


def to_series(
    samples: list[SamplePoint], y_limit: float | None = PLOT_Y_LIMIT
) -> tuple[np.ndarray, np.ndarray]:
    """Convert samples to x/y arrays with ``nan`` where the plot must break.

    Args:
        samples: Sample table from ``plot_samples``
        y_limit: Values with ``|y| >= y_limit`` are also dropped (None keeps all)
    """
    xs = np.array([point.x for point in samples], dtype=float)
    ys = np.array(
        [np.nan if point.y is None else point.y for point in samples], dtype=float
    )
    if y_limit is not None:
        ys[np.abs(ys) >= y_limit] = np.nan
    return xs, ys
