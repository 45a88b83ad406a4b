"""Compiled, never-raising real functions of one variable.

A ``CompiledFunction`` wraps any raw callable (an AST walk, a lambdified
SymPy derivative, a finite-difference estimate) behind one guard: every
per-point failure becomes ``None`` (Undefined) instead of an exception.
Instances hold no mutable state and may be shared freely between analyses.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Callable

import numpy as np
import sympy as sp

from .logging_config import get_logger
from .parser import Node, parse_expression
from .types import ParseError, SamplePoint

logger = get_logger("evaluator")

# Errors absorbed into Undefined. EvaluationError subclasses ArithmeticError,
# which also covers ZeroDivisionError and OverflowError; TypeError comes from
# complex results of the mpmath backend.
ABSORBED_ERRORS = (ArithmeticError, ValueError, TypeError)


@dataclass(frozen=True)
class CompiledFunction:
    """A pure mapping from a real number to a real number or None.

    Attributes:
        source: Text the function was built from (expression or derivative)
        raw: Underlying callable; may raise, the guard in ``__call__`` absorbs it
        tree: Parsed AST when built from user input
        method: "parsed", "symbolic" or "central-difference"
        symbolic: SymPy expression when one is known
    """

    source: str
    raw: Callable[[float], Any] = field(repr=False, compare=False)
    tree: Node | None = field(default=None, repr=False)
    method: str = "parsed"
    symbolic: Any = field(default=None, repr=False, compare=False)

    def __call__(self, x: float) -> float | None:
        try:
            value = self.raw(float(x))
            if isinstance(value, complex):
                if value.imag != 0:
                    return None
                value = value.real
            value = float(value)
        except ABSORBED_ERRORS:
            return None
        if not math.isfinite(value):
            return None
        return value

    def as_sympy(self) -> sp.Basic | None:
        """Return the SymPy form of this function, or None when unavailable."""
        if self.symbolic is not None:
            return self.symbolic
        if self.tree is None:
            return None
        try:
            return self.tree.to_sympy()
        except (ValueError, TypeError, AttributeError) as e:
            logger.debug(f"SymPy conversion failed for {self.source!r}: {e}")
            return None


def compile_expression(expr: str) -> CompiledFunction:
    """Compile user text into a CompiledFunction.

    Args:
        expr: Expression in ``x`` (e.g. "2x^2 - sin(x)")

    Returns:
        CompiledFunction that never raises on evaluation

    Raises:
        ParseError: If the expression is empty or has no recognizable structure
    """
    try:
        tree = parse_expression(expr)
    except ParseError as e:
        logger.info(f"Compilation failed ({e.code}): {e.message}")
        raise
    return CompiledFunction(source=expr.strip(), raw=tree.evaluate, tree=tree)


def evaluate(f: CompiledFunction, x: float) -> float | None:
    """Evaluate ``f`` at ``x``; None means undefined at that point."""
    return f(x)


def is_defined(value: float | None) -> bool:
    return value is not None


def sample_function(
    f: CompiledFunction, x_min: float, x_max: float, step: float
) -> list[SamplePoint]:
    """Sample ``f`` on ``[x_min, x_max]`` at a fixed step.

    Grid points are ``x_min + i*step`` rounded to 10 decimals, so points such as
    ``0`` are hit exactly rather than missed by accumulated error.

    Raises:
        ValueError: If the step is not positive or the interval is reversed
    """
    if step <= 0:
        raise ValueError("Sampling step must be positive")
    if x_max < x_min:
        raise ValueError("Sampling interval is reversed")
    count = int(math.floor((x_max - x_min) / step + 1e-9)) + 1
    xs = np.round(x_min + np.arange(count) * step, 10)
    return [SamplePoint(float(x_val) + 0.0, f(x_val)) for x_val in xs]
