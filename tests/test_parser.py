"""Unit tests for parser module."""

import math
import unittest

from funcstudy_pkg.parser import (
    format_number,
    is_balanced,
    parse_expression,
    preprocess,
    tokenize,
    tree_height,
)
from funcstudy_pkg.types import ParseError


class TestPreprocess(unittest.TestCase):
    """Test preprocessing functions."""

    def test_lowercase_and_strip(self):
        self.assertEqual(preprocess("  SIN(X) "), "sin(x)")

    def test_exponent_conversion(self):
        self.assertEqual(preprocess("x**2"), "x^2")
        self.assertEqual(preprocess("x²"), "x^2")
        self.assertEqual(preprocess("x⁻¹"), "x^-1")

    def test_unicode_symbols(self):
        self.assertEqual(preprocess("π"), "pi")
        self.assertEqual(preprocess("√(x)"), "sqrt(x)")
        self.assertEqual(preprocess("2×x−1"), "2*x-1")

    def test_function_prefix_dropped(self):
        self.assertEqual(preprocess("y = 2x"), "2x")
        self.assertEqual(preprocess("f(x) = x"), "x")

    def test_brackets_become_parentheses(self):
        self.assertEqual(preprocess("[x+1]*{x-1}"), "(x+1)*(x-1)")

    def test_empty_input(self):
        with self.assertRaises(ParseError) as ctx:
            preprocess("   ")
        self.assertEqual(ctx.exception.code, "EMPTY_INPUT")
        with self.assertRaises(ParseError):
            preprocess("y =")

    def test_input_length_limit(self):
        from funcstudy_pkg.config import MAX_INPUT_LENGTH

        with self.assertRaises(ParseError) as ctx:
            preprocess("x" * (MAX_INPUT_LENGTH + 1))
        self.assertEqual(ctx.exception.code, "TOO_LONG")

    def test_parentheses_balancing(self):
        self.assertTrue(is_balanced("((1+2)*3)")[0])
        self.assertEqual(is_balanced("(1+2"), (False, 0))
        self.assertEqual(is_balanced("1+2)"), (False, 3))
        with self.assertRaises(ParseError) as ctx:
            preprocess("(x + 1]")
        self.assertEqual(ctx.exception.code, "UNBALANCED")


class TestTokenize(unittest.TestCase):
    """Test tokenizer and name splitting."""

    def kinds(self, text):
        return [token.kind for token in tokenize(text)]

    def test_implicit_number_variable(self):
        self.assertEqual(self.kinds("2x"), ["NUM", "VAR"])
        self.assertEqual(self.kinds("x2"), ["VAR", "NUM"])

    def test_letter_runs_split_into_names(self):
        self.assertEqual(
            self.kinds("xsin(x)"), ["VAR", "FUNC", "LPAREN", "VAR", "RPAREN"]
        )
        self.assertEqual(self.kinds("pix"), ["CONST", "VAR"])
        self.assertEqual(self.kinds("ex"), ["CONST", "VAR"])

    def test_exp_is_not_the_constant_e(self):
        tokens = tokenize("exp(x)")
        self.assertEqual(tokens[0].kind, "FUNC")
        self.assertEqual(tokens[0].text, "exp")

    def test_unknown_name(self):
        with self.assertRaises(ParseError) as ctx:
            tokenize("y+1")
        self.assertEqual(ctx.exception.code, "UNKNOWN_NAME")

    def test_unexpected_character(self):
        with self.assertRaises(ParseError) as ctx:
            tokenize("2 $ 3")
        self.assertEqual(ctx.exception.code, "SYNTAX_ERROR")


class TestParse(unittest.TestCase):
    """Test parsing and AST evaluation."""

    def value(self, text, x):
        return parse_expression(text).evaluate(x)

    def test_precedence(self):
        self.assertEqual(self.value("2x^2", 3), 18)
        self.assertEqual(self.value("-x^2", 3), -9)
        self.assertEqual(self.value("1+2*x", 3), 7)

    def test_power_is_right_associative(self):
        self.assertEqual(self.value("2^3^2", 0), 512)
        self.assertEqual(self.value("2^-1", 0), 0.5)

    def test_implicit_multiplication(self):
        self.assertEqual(self.value("(x+1)(x-1)", 3), 8)
        self.assertEqual(self.value("x2", 3), 6)
        self.assertEqual(self.value("2(x+1)", 3), 8)
        self.assertEqual(self.value("1/2x", 4), 2)

    def test_function_then_power(self):
        self.assertAlmostEqual(self.value("sin(x)^2", math.pi / 2), 1.0)
        self.assertAlmostEqual(self.value("sin x", math.pi / 2), 1.0)

    def test_constants(self):
        self.assertAlmostEqual(self.value("pi", 0), math.pi)
        self.assertAlmostEqual(self.value("2e", 0), 2 * math.e)
        self.assertAlmostEqual(self.value("e^x", 1), math.e)

    def test_syntax_errors(self):
        for text in ("2 +* 3", "sin", "()", "x +", "2^"):
            with self.subTest(text=text):
                with self.assertRaises(ParseError) as ctx:
                    parse_expression(text)
                self.assertEqual(ctx.exception.code, "SYNTAX_ERROR")

    def test_nesting_limit(self):
        with self.assertRaises(ParseError) as ctx:
            parse_expression("(" * 150 + "x" + ")" * 150)
        self.assertEqual(ctx.exception.code, "TOO_DEEP")

    def test_operator_chain_limit(self):
        with self.assertRaises(ParseError) as ctx:
            parse_expression("+".join(["x"] * 600))
        self.assertEqual(ctx.exception.code, "TOO_COMPLEX")

    def test_tree_height(self):
        self.assertEqual(tree_height(parse_expression("x")), 1)
        self.assertEqual(tree_height(parse_expression("sin(x+1)")), 3)


class TestFormatNumber(unittest.TestCase):
    def test_integers_and_decimals(self):
        self.assertEqual(format_number(2.0), "2")
        self.assertEqual(format_number(-2.0), "-2")
        self.assertEqual(format_number(1.41421356), "1.4142")

    def test_no_negative_zero(self):
        self.assertEqual(format_number(-0.00001), "0")


if __name__ == "__main__":
    unittest.main()
