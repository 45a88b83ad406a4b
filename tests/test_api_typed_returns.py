"""Tests for typed API return values."""

import json
import math
import unittest

from funcstudy_pkg.api import (
    analyze_expression,
    differentiate,
    plot_data,
    validate_expression,
)
from funcstudy_pkg.evaluator import compile_expression
from funcstudy_pkg.plotting import clamp_range, count_defined, plot_samples, to_series
from funcstudy_pkg.types import AnalysisResult, DerivativeResult, PlotResult


class TestTypedAPI(unittest.TestCase):
    """Test that API functions return typed dataclasses."""

    def test_analyze_returns_result(self):
        result = analyze_expression("x^2 - 4")
        self.assertIsInstance(result, AnalysisResult)
        self.assertTrue(result.ok)
        self.assertEqual(result.expression, "x^2 - 4")
        self.assertEqual(result.properties[0].name, "type")

    def test_analyze_error(self):
        result = analyze_expression("")
        self.assertFalse(result.ok)
        self.assertEqual(result.error, "Input cannot be empty")
        self.assertEqual(result.properties, [])

    def test_analyze_to_dict_is_json_serializable(self):
        payload = json.dumps(analyze_expression("x^3 - 3x").to_dict())
        data = json.loads(payload)
        self.assertTrue(data["ok"])
        extrema = [p for p in data["properties"] if p["name"] == "extrema"][0]
        self.assertEqual(extrema["data"][0]["kind"], "maximum")

    def test_plot_data(self):
        result = plot_data("1/x", 10)
        self.assertIsInstance(result, PlotResult)
        self.assertTrue(result.ok)
        self.assertEqual(len(result.samples), 201)
        self.assertIsNone(result.samples[100].y)
        xs = [point.x for point in result.samples]
        self.assertEqual(xs, sorted(xs))
        self.assertEqual(len(set(xs)), len(xs))

    def test_plot_data_all_undefined(self):
        result = plot_data("sqrt(-1 - x^2)")
        self.assertFalse(result.ok)
        self.assertEqual(result.error, "Function is undefined on the whole plotting range")

    def test_plot_data_parse_error(self):
        result = plot_data("2 +* 3")
        self.assertFalse(result.ok)
        self.assertIn("position", result.error)

    def test_differentiate(self):
        result = differentiate("x^3")
        self.assertIsInstance(result, DerivativeResult)
        self.assertTrue(result.ok)
        self.assertEqual(result.derivative, "3*x**2")
        self.assertEqual(result.method, "symbolic")
        self.assertFalse(differentiate("").ok)

    def test_validate_expression(self):
        self.assertEqual(validate_expression("2x + 1"), (True, None))
        self.assertEqual(
            validate_expression("2x +* 1"), (False, "Unexpected '*' at position 4")
        )
        valid, message = validate_expression("foo(x)")
        self.assertFalse(valid)
        self.assertIn("Unknown name", message)

    def test_repr(self):
        self.assertIn("ok=False", repr(analyze_expression("")))
        self.assertIn("samples=201", repr(plot_data("x")))


class TestPlotting(unittest.TestCase):
    def test_clamp_range(self):
        self.assertEqual(clamp_range(None), 10)
        self.assertEqual(clamp_range(-5), 10)
        self.assertEqual(clamp_range(float("inf")), 10)
        self.assertEqual(clamp_range(0.1), 1)
        self.assertEqual(clamp_range("20"), 20)
        self.assertEqual(clamp_range(5000), 1000)

    def test_count_defined(self):
        samples = plot_samples(compile_expression("sqrt(x)"), 1)
        self.assertEqual(len(samples), 201)
        self.assertEqual(count_defined(samples), 101)

    def test_to_series_breaks_at_gaps(self):
        samples = plot_samples(compile_expression("1/x"), 1)
        xs, ys = to_series(samples, y_limit=5)
        self.assertEqual(len(xs), 201)
        self.assertTrue(math.isnan(ys[100]))
        self.assertTrue(math.isnan(ys[101]))
        self.assertAlmostEqual(ys[-1], 1.0)

    def test_to_series_without_limit(self):
        samples = plot_samples(compile_expression("x^3"), 20)
        _, ys = to_series(samples, y_limit=None)
        self.assertAlmostEqual(ys[-1], 8000.0)


if __name__ == "__main__":
    unittest.main()
