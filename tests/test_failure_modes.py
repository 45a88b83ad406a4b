"""Tests for failure modes: malformed input and hostile expressions.

Every failure must surface as a ParseError at compile time or as an
undefined value at evaluation time, never as an unexpected exception.
"""

import pytest

from funcstudy_pkg.analysis import analyze
from funcstudy_pkg.api import analyze_expression
from funcstudy_pkg.evaluator import compile_expression
from funcstudy_pkg.types import ParseError


class TestMalformedInput:
    """Test handling of malformed input."""

    @pytest.mark.parametrize(
        "expr,code",
        [
            ("", "EMPTY_INPUT"),
            ("   ", "EMPTY_INPUT"),
            ("(x + 1", "UNBALANCED"),
            ("x + 1)", "UNBALANCED"),
            ("2 +* 3", "SYNTAX_ERROR"),
            ("x # 2", "SYNTAX_ERROR"),
            ("sin()", "SYNTAX_ERROR"),
            ("z^2", "UNKNOWN_NAME"),
            ("import os", "UNKNOWN_NAME"),
        ],
    )
    def test_error_codes(self, expr, code):
        with pytest.raises(ParseError) as exc_info:
            compile_expression(expr)
        assert exc_info.value.code == code

    def test_none_input(self):
        with pytest.raises(ParseError):
            compile_expression(None)

    def test_code_injection_is_not_executed(self):
        result = analyze_expression("__import__('os').system('echo hi')")
        assert not result.ok


class TestHostileExpressions:
    """Expressions that compile but misbehave numerically."""

    def test_huge_power_is_undefined(self):
        f = compile_expression("10^(10^x)")
        assert f(5) is None
        assert f(0) == pytest.approx(10.0)

    def test_nested_exponentials(self):
        f = compile_expression("exp(exp(exp(x)))")
        assert f(10) is None

    def test_analysis_of_nowhere_defined_function(self):
        names = [record.name for record in analyze("sqrt(-1 - x^2)")]
        assert names[0] == "type"
        assert "zeros" in names
        assert "y_intercept" not in names

    def test_analysis_of_wild_function_completes(self):
        records = analyze("tan(1/x) + ln(abs(sin(x)))")
        assert records[0].name == "type"

    def test_zero_to_negative_power(self):
        assert compile_expression("0^(-1)")(1) is None
        assert compile_expression("x^(-2)")(0) is None


class TestLongOperatorChains:
    """Long chains must be rejected with a ParseError, not exhaust the stack."""

    @pytest.mark.parametrize("expr", ["x^" * 600 + "x", "2^" * 600 + "2", "-" * 600 + "x"])
    def test_power_and_sign_chains(self, expr):
        with pytest.raises(ParseError) as exc_info:
            compile_expression(expr)
        assert exc_info.value.code == "TOO_DEEP"

    def test_api_reports_chain_as_error(self):
        from funcstudy_pkg.api import validate_expression

        result = analyze_expression("x^" * 600 + "x")
        assert not result.ok
        assert "too deeply nested" in result.error
        valid, message = validate_expression("2^" * 600 + "2")
        assert not valid
        assert "too deeply nested" in message

    def test_short_power_chain_still_parses(self):
        assert compile_expression("2^2^2^2")(0) == 65536.0
