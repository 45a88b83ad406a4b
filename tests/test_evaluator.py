"""Tests for compiled functions and the Undefined sentinel."""

import math
from concurrent.futures import ThreadPoolExecutor

import pytest
import sympy as sp

from funcstudy_pkg.evaluator import (
    CompiledFunction,
    compile_expression,
    evaluate,
    is_defined,
    sample_function,
)
from funcstudy_pkg.parser import X
from funcstudy_pkg.types import ParseError


class TestCompileExpression:
    """Compilation of user text."""

    def test_polynomial_value(self):
        assert compile_expression("x^2")(3) == pytest.approx(9.0)
        assert compile_expression("2x^2 - 3x + 1")(2) == pytest.approx(3.0)

    def test_implicit_and_explicit_forms_agree(self):
        assert compile_expression("2x")(5) == compile_expression("2*x")(5)
        assert compile_expression("x2")(5) == compile_expression("x*2")(5)

    def test_constants(self):
        assert compile_expression("exp(1)")(0) == pytest.approx(math.e)
        assert compile_expression("e^x")(1) == pytest.approx(math.e)
        assert compile_expression("pi x")(2) == pytest.approx(2 * math.pi)

    def test_log_is_base_ten_and_ln_natural(self):
        assert compile_expression("log(x)")(100) == pytest.approx(2.0)
        assert compile_expression("ln(x)")(math.e) == pytest.approx(1.0)

    def test_empty_expression_rejected(self):
        with pytest.raises(ParseError):
            compile_expression("")

    def test_unknown_function_rejected(self):
        with pytest.raises(ParseError) as exc_info:
            compile_expression("foo(x)")
        assert exc_info.value.code == "UNKNOWN_NAME"

    def test_source_is_kept(self):
        f = compile_expression("  x^2 ")
        assert f.source == "x^2"
        assert f.method == "parsed"

    def test_as_sympy(self):
        assert compile_expression("x^2").as_sympy() == X**2
        assert compile_expression("log(x)").as_sympy() == sp.log(X, 10)


class TestUndefined:
    """Failures at a point become None, never an exception."""

    @pytest.mark.parametrize(
        "expr,x",
        [
            ("1/x", 0),
            ("sqrt(x)", -1),
            ("ln(x)", 0),
            ("log(x)", -5),
            ("asin(x)", 2),
            ("cot(x)", 0),
            ("exp(x)", 1000),
            ("x^(1/3)", -8),
            ("1/(x-x)", 3),
        ],
    )
    def test_undefined_points(self, expr, x):
        assert evaluate(compile_expression(expr), x) is None

    def test_nan_input_is_undefined(self):
        assert compile_expression("x")(float("nan")) is None

    def test_defined_values(self):
        assert compile_expression("abs(x)")(-3) == 3
        assert compile_expression("tan(x)")(0) == 0
        assert is_defined(compile_expression("1/x")(2))
        assert not is_defined(compile_expression("1/x")(0))

    def test_raw_errors_are_absorbed(self):
        def raw(x):
            raise ZeroDivisionError("boom")

        assert CompiledFunction(source="boom", raw=raw)(1.0) is None

    def test_complex_results_are_undefined(self):
        assert CompiledFunction(source="c", raw=lambda x: complex(x, 1))(1.0) is None
        assert CompiledFunction(source="c", raw=lambda x: complex(x, 0))(2.0) == 2.0


class TestSampleFunction:
    def test_grid_hits_exact_points(self):
        samples = sample_function(compile_expression("x"), -1, 1, 0.5)
        assert [point.x for point in samples] == [-1.0, -0.5, 0.0, 0.5, 1.0]
        assert [point.y for point in samples] == [-1.0, -0.5, 0.0, 0.5, 1.0]

    def test_undefined_samples_are_kept(self):
        samples = sample_function(compile_expression("1/x"), -1, 1, 0.5)
        assert len(samples) == 5
        assert samples[2].x == 0.0
        assert samples[2].y is None
        assert not samples[2].defined

    def test_invalid_arguments(self):
        f = compile_expression("x")
        with pytest.raises(ValueError):
            sample_function(f, -1, 1, 0)
        with pytest.raises(ValueError):
            sample_function(f, 1, -1, 0.5)


def test_shared_function_across_threads():
    """Compiled functions are immutable and safe to share."""
    f = compile_expression("x^2 - 4")
    with ThreadPoolExecutor(max_workers=4) as pool:
        values = list(pool.map(f, range(-50, 50)))
    assert values == [float(x * x - 4) for x in range(-50, 50)]
