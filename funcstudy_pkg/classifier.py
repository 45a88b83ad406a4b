"""Heuristic, purely syntactic classification of expressions.

An expression often matches several patterns (``sin(x^2)`` is both
trigonometric and quadratic), so the matchers run in the fixed order of
``CATEGORY_MATCHERS`` and the first hit wins:

1. Quadratic      ``x^2``
2. Power          ``x^n`` with integer ``n``
3. Trigonometric  ``sin cos tan cot asin acos atan``
4. Rational       ``1/``, ``/x`` or ``/( ... x ... )``
5. Exponential    ``exp``, ``e^`` or a number raised to a power of ``x``
6. Logarithmic    ``log``, ``ln``
7. Linear         ``*x`` or a leading ``[sign][digits]x``
8. Algebraic      everything else
"""

from __future__ import annotations

import re
from typing import Callable, Optional

from .parser import preprocess
from .types import CategoryKind, FunctionCategory, ParseError

QUADRATIC_RE = re.compile(r"x\^(?:2|\(2\))(?![\d.])")
POWER_RE = re.compile(r"x\^\(?(-?\d+)\)?(?![\d.])")
TRIG_RE = re.compile(r"asin|acos|atan|sin|cos|tan|cot")
RATIONAL_RE = re.compile(r"1/|/x|/\([^)]*x")
EXPONENTIAL_RE = re.compile(r"exp|e\^|\d\^\(?[-+]?x")
LOGARITHMIC_RE = re.compile(r"log|ln")
LINEAR_RE = re.compile(r"\*x|^[-+]?[\d.]*x")

Matcher = Callable[[str], Optional[FunctionCategory]]


def normalize(expr: str) -> str:
    """Lowercase, strip whitespace and unify notation (``**``, superscripts)."""
    try:
        text = preprocess(expr)
    except ParseError:
        text = (expr or "").lower()
    return re.sub(r"\s+", "", text)


def _match_quadratic(text: str) -> Optional[FunctionCategory]:
    if QUADRATIC_RE.search(text):
        return FunctionCategory(CategoryKind.QUADRATIC)
    return None


def _match_power(text: str) -> Optional[FunctionCategory]:
    match = POWER_RE.search(text)
    if match:
        return FunctionCategory(CategoryKind.POWER, degree=int(match.group(1)))
    return None


def _match_trigonometric(text: str) -> Optional[FunctionCategory]:
    match = TRIG_RE.search(text)
    if match:
        return FunctionCategory(CategoryKind.TRIGONOMETRIC, subtype=match.group(0))
    return None


def _simple(kind: CategoryKind, pattern: re.Pattern) -> Matcher:
    def matcher(text: str) -> Optional[FunctionCategory]:
        return FunctionCategory(kind) if pattern.search(text) else None

    return matcher


CATEGORY_MATCHERS: tuple[tuple[CategoryKind, Matcher], ...] = (
    (CategoryKind.QUADRATIC, _match_quadratic),
    (CategoryKind.POWER, _match_power),
    (CategoryKind.TRIGONOMETRIC, _match_trigonometric),
    (CategoryKind.RATIONAL, _simple(CategoryKind.RATIONAL, RATIONAL_RE)),
    (CategoryKind.EXPONENTIAL, _simple(CategoryKind.EXPONENTIAL, EXPONENTIAL_RE)),
    (CategoryKind.LOGARITHMIC, _simple(CategoryKind.LOGARITHMIC, LOGARITHMIC_RE)),
    (CategoryKind.LINEAR, _simple(CategoryKind.LINEAR, LINEAR_RE)),
)


def classify_function(expr: str) -> FunctionCategory:
    """Assign a coarse category; falls back to Algebraic, never "unknown".

    Example:
        >>> classify_function("x^2 - 4").kind
        <CategoryKind.QUADRATIC: 'quadratic'>
        >>> classify_function("sin(x)").label
        'Trigonometric (sin)'
    """
    text = normalize(expr)
    for _, matcher in CATEGORY_MATCHERS:
        category = matcher(text)
        if category is not None:
            return category
    return FunctionCategory(CategoryKind.ALGEBRAIC)
