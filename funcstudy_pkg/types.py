"""Type definitions, result dataclasses and the error taxonomy.

Undefined evaluation results are represented by ``None`` throughout the
package: a value typed ``float | None`` is either a finite real or the
Undefined sentinel.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ParseError(Exception):
    """Raised when an expression cannot be compiled at all."""

    def __init__(self, message: str, code: str = "PARSE_ERROR"):
        self.message = message
        self.code = code
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class EvaluationError(ArithmeticError):
    """Base class for per-point evaluation failures (never escape a CompiledFunction)."""


class DomainError(EvaluationError):
    """Raised when an argument lies outside a function's real domain."""


class NumericNonFinite(EvaluationError):
    """Raised when an evaluation overflows or produces NaN."""


@dataclass(frozen=True)
class SamplePoint:
    """One sample of a function; ``y`` is None where the function is undefined."""

    x: float
    y: float | None

    @property
    def defined(self) -> bool:
        return self.y is not None

    def to_dict(self) -> dict[str, Any]:
        return {"x": self.x, "y": self.y}


class CriticalKind(str, Enum):
    MAXIMUM = "maximum"
    MINIMUM = "minimum"
    INFLECTION_OR_UNKNOWN = "inflection_or_unknown"


@dataclass(frozen=True)
class CriticalPoint:
    x: float
    kind: CriticalKind
    y: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"x": self.x, "kind": self.kind.value, "y": self.y}


class CategoryKind(str, Enum):
    LINEAR = "linear"
    QUADRATIC = "quadratic"
    POWER = "power"
    TRIGONOMETRIC = "trigonometric"
    EXPONENTIAL = "exponential"
    LOGARITHMIC = "logarithmic"
    RATIONAL = "rational"
    ALGEBRAIC = "algebraic"


_CATEGORY_LABELS = {
    CategoryKind.LINEAR: "Linear",
    CategoryKind.QUADRATIC: "Quadratic (parabola)",
    CategoryKind.POWER: "Power",
    CategoryKind.TRIGONOMETRIC: "Trigonometric",
    CategoryKind.EXPONENTIAL: "Exponential",
    CategoryKind.LOGARITHMIC: "Logarithmic",
    CategoryKind.RATIONAL: "Rational",
    CategoryKind.ALGEBRAIC: "Algebraic",
}


@dataclass(frozen=True)
class FunctionCategory:
    """Coarse syntactic classification of an expression.

    ``degree`` is only set for POWER, ``subtype`` only for TRIGONOMETRIC
    (the name of the first trigonometric function in the expression).
    """

    kind: CategoryKind
    degree: int | None = None
    subtype: str | None = None

    @property
    def label(self) -> str:
        base = _CATEGORY_LABELS[self.kind]
        if self.kind is CategoryKind.POWER and self.degree is not None:
            return f"{base} (degree {self.degree})"
        if self.kind is CategoryKind.TRIGONOMETRIC and self.subtype:
            return f"{base} ({self.subtype})"
        return base

    def to_dict(self) -> dict[str, Any]:
        result_dict: dict[str, Any] = {"kind": self.kind.value, "label": self.label}
        if self.degree is not None:
            result_dict["degree"] = self.degree
        if self.subtype is not None:
            result_dict["subtype"] = self.subtype
        return result_dict


@dataclass(frozen=True)
class PropertyRecord:
    """One computed property: display value, description and raw data."""

    name: str
    value: str
    description: str
    data: Any = None

    def to_dict(self) -> dict[str, Any]:
        result_dict = {
            "name": self.name,
            "value": self.value,
            "description": self.description,
        }
        if self.data is not None:
            result_dict["data"] = _jsonable(self.data)
        return result_dict


def _jsonable(value: Any) -> Any:
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    if isinstance(value, dict):
        return {key: _jsonable(item) for key, item in value.items()}
    return value


@dataclass
class AnalysisResult:
    """Result of analyzing one expression."""

    ok: bool
    expression: str | None = None
    properties: list[PropertyRecord] = field(default_factory=list)
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result_dict: dict[str, Any] = {"ok": self.ok}
        if self.expression is not None:
            result_dict["expression"] = self.expression
        if self.ok:
            result_dict["properties"] = [prop.to_dict() for prop in self.properties]
        if self.error is not None:
            result_dict["error"] = self.error
        return result_dict

    def __repr__(self) -> str:
        if not self.ok:
            return f"AnalysisResult(ok=False, error={self.error!r})"
        names = [prop.name for prop in self.properties]
        return f"AnalysisResult(ok=True, expression={self.expression!r}, properties={names!r})"


@dataclass
class PlotResult:
    """Dense sample table for the rendering collaborator."""

    ok: bool
    samples: list[SamplePoint] = field(default_factory=list)
    x_range: float | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result_dict: dict[str, Any] = {"ok": self.ok}
        if self.ok:
            result_dict["x_range"] = self.x_range
            result_dict["samples"] = [point.to_dict() for point in self.samples]
        if self.error is not None:
            result_dict["error"] = self.error
        return result_dict

    def __repr__(self) -> str:
        if not self.ok:
            return f"PlotResult(ok=False, error={self.error!r})"
        return f"PlotResult(ok=True, x_range={self.x_range!r}, samples={len(self.samples)})"


@dataclass
class DerivativeResult:
    """Derivative of an expression, symbolic where the CAS could produce one."""

    ok: bool
    derivative: str | None = None
    method: str | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result_dict: dict[str, Any] = {"ok": self.ok}
        if self.derivative is not None:
            result_dict["derivative"] = self.derivative
        if self.method is not None:
            result_dict["method"] = self.method
        if self.error is not None:
            result_dict["error"] = self.error
        return result_dict
