"""Input parsing and preprocessing module.

This module handles:
- Input sanitization and validation
- Expression preprocessing (unicode symbols, superscripts, ``**`` to ``^``)
- Tokenizing with implicit multiplication and greedy name splitting
- Recursive-descent parsing into an explicit AST
- Conversion of the AST to SymPy for the optional CAS collaborator
- Number formatting for display

The AST is walked directly by ``evaluator.py``; no user text is ever handed to
a generic code evaluator.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from fractions import Fraction
from typing import Any

import sympy as sp

from .config import (
    ALLOWED_CONSTANTS,
    ALLOWED_FUNCTIONS,
    DISPLAY_DECIMALS,
    FUNCTION_PREFIX_REGEX,
    MAX_EXPRESSION_DEPTH,
    MAX_INPUT_LENGTH,
    MAX_TREE_HEIGHT,
    NUMBER_REGEX,
    SUPERSCRIPT_DIGITS,
    SUPERSCRIPT_REGEX,
    UNICODE_REPLACEMENTS,
    VARIABLE_NAME,
)
from .types import DomainError, NumericNonFinite, ParseError

X = sp.Symbol(VARIABLE_NAME, real=True)

SYMPY_FUNCTIONS = {
    "sin": sp.sin,
    "cos": sp.cos,
    "tan": sp.tan,
    "cot": sp.cot,
    "asin": sp.asin,
    "acos": sp.acos,
    "atan": sp.atan,
    "exp": sp.exp,
    "log": lambda arg: sp.log(arg, 10),
    "ln": sp.log,
    "sqrt": sp.sqrt,
    "abs": sp.Abs,
}

SYMPY_CONSTANTS = {
    "pi": sp.pi,
    "e": sp.E,
}

# Longest first, so "exp" wins over "e" and "asin" over "sin"
KNOWN_NAMES = sorted(
    [VARIABLE_NAME, *ALLOWED_FUNCTIONS, *ALLOWED_CONSTANTS], key=len, reverse=True
)

OPERATORS = "+-*/^"


def format_number(val: Any, decimals: int = DISPLAY_DECIMALS) -> str:
    """Format a numeric value for display.

    Args:
        val: Numeric value to format
        decimals: Number of decimal places kept before formatting

    Returns:
        Shortest readable representation (e.g. ``2``, ``-1.4142``)
    """
    try:
        rounded = round(float(val), decimals)
        if rounded == 0:
            rounded = 0.0  # no "-0"
        return f"{rounded:.12g}"
    except (ValueError, TypeError, OverflowError):
        return str(val)


def is_balanced(input_str: str) -> tuple[bool, int | None]:
    """Check if parentheses/brackets are balanced. Returns (is_balanced, error_position)."""
    pairs = {"(": ")", "[": "]", "{": "}"}
    stack: list[tuple[str, int]] = []  # (char, position)
    for i, char in enumerate(input_str):
        if char in pairs:
            stack.append((char, i))
        elif char in pairs.values():
            if not stack:
                return False, i
            opening, _ = stack.pop()
            if pairs[opening] != char:
                return False, i
    if stack:
        return False, stack[0][1]  # Return position of first unmatched
    return True, None


def preprocess(input_str: str) -> str:
    """Preprocess input string for parsing.

    Applies transformations:
    - Validates input length and emptiness
    - Drops a leading ``y =`` or ``f(x) =``
    - Lowercases (names are case-insensitive)
    - Converts superscript digits to ``^`` exponents
    - Standardizes unicode symbols and ``**`` to ASCII ``^``
    - Validates balanced parentheses/brackets and maps brackets to parentheses

    Args:
        input_str: Raw input string from user

    Returns:
        Normalized expression text

    Raises:
        ParseError: If input is empty, too long, or unbalanced
    """
    input_str = input_str.strip() if input_str else ""
    if not input_str:
        raise ParseError("Input cannot be empty", "EMPTY_INPUT")
    if len(input_str) > MAX_INPUT_LENGTH:
        raise ParseError(f"Input too long (>{MAX_INPUT_LENGTH} characters)", "TOO_LONG")

    text = input_str.lower()
    text = FUNCTION_PREFIX_REGEX.sub("", text, count=1)
    text = SUPERSCRIPT_REGEX.sub(
        lambda match: "^" + match.group(1).translate(SUPERSCRIPT_DIGITS), text
    )
    for source, target in UNICODE_REPLACEMENTS.items():
        text = text.replace(source, target)
    text = text.strip()
    if not text:
        raise ParseError("Input cannot be empty", "EMPTY_INPUT")

    balanced, position = is_balanced(text)
    if not balanced:
        raise ParseError(
            f"Unbalanced parentheses at position {position}", "UNBALANCED"
        )
    return text.translate(str.maketrans("[{]}", "(())"))


# ---------------------------------------------------------------------------
# AST
# ---------------------------------------------------------------------------


def _checked(value: float) -> float:
    if math.isnan(value) or math.isinf(value):
        raise NumericNonFinite("non-finite intermediate result")
    return value


@dataclass(frozen=True)
class Number:
    value: float
    text: str

    def evaluate(self, x: float) -> float:
        return self.value

    def to_sympy(self) -> sp.Basic:
        fraction = Fraction(self.text)
        return sp.Rational(fraction.numerator, fraction.denominator)


@dataclass(frozen=True)
class Variable:
    name: str = VARIABLE_NAME

    def evaluate(self, x: float) -> float:
        return x

    def to_sympy(self) -> sp.Basic:
        return X


@dataclass(frozen=True)
class Constant:
    name: str

    def evaluate(self, x: float) -> float:
        return ALLOWED_CONSTANTS[self.name]

    def to_sympy(self) -> sp.Basic:
        return SYMPY_CONSTANTS[self.name]


@dataclass(frozen=True)
class UnaryOp:
    op: str
    operand: "Node"

    def evaluate(self, x: float) -> float:
        value = self.operand.evaluate(x)
        return -value if self.op == "-" else value

    def to_sympy(self) -> sp.Basic:
        inner = self.operand.to_sympy()
        return -inner if self.op == "-" else inner


@dataclass(frozen=True)
class BinaryOp:
    op: str
    left: "Node"
    right: "Node"

    def evaluate(self, x: float) -> float:
        left = self.left.evaluate(x)
        right = self.right.evaluate(x)
        if self.op == "+":
            return _checked(left + right)
        if self.op == "-":
            return _checked(left - right)
        if self.op == "*":
            return _checked(left * right)
        if self.op == "/":
            if right == 0:
                raise DomainError("division by zero")
            return _checked(left / right)
        try:
            return _checked(math.pow(left, right))
        except OverflowError as e:
            raise NumericNonFinite(str(e)) from e
        except ValueError as e:
            # negative base with fractional exponent, or 0 to a negative power
            raise DomainError(str(e)) from e

    def to_sympy(self) -> sp.Basic:
        left = self.left.to_sympy()
        right = self.right.to_sympy()
        if self.op == "+":
            return left + right
        if self.op == "-":
            return left - right
        if self.op == "*":
            return left * right
        if self.op == "/":
            return left / right
        return sp.Pow(left, right)


@dataclass(frozen=True)
class Call:
    name: str
    argument: "Node"

    def evaluate(self, x: float) -> float:
        value = self.argument.evaluate(x)
        try:
            return _checked(ALLOWED_FUNCTIONS[self.name](value))
        except OverflowError as e:
            raise NumericNonFinite(f"{self.name}: {e}") from e
        except (ValueError, ZeroDivisionError) as e:
            raise DomainError(f"{self.name}: {e}") from e

    def to_sympy(self) -> sp.Basic:
        return SYMPY_FUNCTIONS[self.name](self.argument.to_sympy())


Node = Number | Variable | Constant | UnaryOp | BinaryOp | Call


# ---------------------------------------------------------------------------
# Tokenizer
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Token:
    kind: str  # NUM, VAR, CONST, FUNC, OP, LPAREN, RPAREN
    text: str
    position: int


def _split_name(run: str, position: int) -> list[Token]:
    """Split a run of letters into known names, longest match first.

    ``xsin`` becomes ``x``, ``sin``; ``pix`` becomes ``pi``, ``x``.
    """
    tokens: list[Token] = []
    index = 0
    while index < len(run):
        for name in KNOWN_NAMES:
            if run.startswith(name, index):
                if name == VARIABLE_NAME:
                    kind = "VAR"
                elif name in ALLOWED_FUNCTIONS:
                    kind = "FUNC"
                else:
                    kind = "CONST"
                tokens.append(Token(kind, name, position + index))
                index += len(name)
                break
        else:
            raise ParseError(
                f"Unknown name '{run}' at position {position}", "UNKNOWN_NAME"
            )
    return tokens


def tokenize(text: str) -> list[Token]:
    """Turn preprocessed text into tokens.

    Raises:
        ParseError: On characters that cannot start any token
    """
    tokens: list[Token] = []
    index = 0
    while index < len(text):
        char = text[index]
        if char.isspace():
            index += 1
            continue
        if char.isdigit() or char == ".":
            match = NUMBER_REGEX.match(text, index)
            if match is None:
                raise ParseError(
                    f"Malformed number at position {index}", "SYNTAX_ERROR"
                )
            tokens.append(Token("NUM", match.group(0), index))
            index = match.end()
            continue
        if char.isalpha():
            end = index
            while end < len(text) and text[end].isalpha():
                end += 1
            tokens.extend(_split_name(text[index:end], index))
            index = end
            continue
        if char in OPERATORS:
            tokens.append(Token("OP", char, index))
        elif char == "(":
            tokens.append(Token("LPAREN", char, index))
        elif char == ")":
            tokens.append(Token("RPAREN", char, index))
        else:
            raise ParseError(
                f"Unexpected character '{char}' at position {index}", "SYNTAX_ERROR"
            )
        index += 1
    return tokens


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

_OPERAND_START = ("NUM", "VAR", "CONST", "FUNC", "LPAREN")


class Parser:
    """Recursive descent parser for single-variable real expressions.

    Grammar::

        expression := term (("+" | "-") term)*
        term       := unary (("*" | "/") unary | power)*   # adjacency multiplies
        unary      := ("-" | "+") unary | power
        power      := primary ("^" unary)?                 # right-associative
        primary    := NUM | VAR | CONST | FUNC primary-or-parens | "(" expression ")"
    """

    def __init__(self, tokens: list[Token]):
        self.tokens = tokens
        self.pos = 0
        self.depth = 0

    def parse(self) -> Node:
        if not self.tokens:
            raise ParseError("Input cannot be empty", "EMPTY_INPUT")
        node = self._expression()
        if self.pos < len(self.tokens):
            token = self.tokens[self.pos]
            raise ParseError(
                f"Unexpected '{token.text}' at position {token.position}",
                "SYNTAX_ERROR",
            )
        return node

    def _peek(self) -> Token | None:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def _consume(self) -> Token:
        token = self._peek()
        if token is None:
            raise ParseError("Unexpected end of expression", "SYNTAX_ERROR")
        self.pos += 1
        return token

    def _peek_op(self, *ops: str) -> bool:
        token = self._peek()
        return token is not None and token.kind == "OP" and token.text in ops

    def _enter(self) -> None:
        self.depth += 1
        if self.depth > MAX_EXPRESSION_DEPTH:
            raise ParseError(
                f"Expression too deeply nested (>{MAX_EXPRESSION_DEPTH} levels)",
                "TOO_DEEP",
            )

    def _expression(self) -> Node:
        node = self._term()
        while self._peek_op("+", "-"):
            op = self._consume().text
            node = BinaryOp(op, node, self._term())
        return node

    def _term(self) -> Node:
        node = self._unary()
        while True:
            token = self._peek()
            if token is None:
                return node
            if token.kind == "OP" and token.text in ("*", "/"):
                self._consume()
                node = BinaryOp(token.text, node, self._unary())
            elif token.kind in _OPERAND_START:
                node = BinaryOp("*", node, self._power())
            else:
                return node

    def _unary(self) -> Node:
        if self._peek_op("-", "+"):
            op = self._consume().text
            self._enter()
            try:
                operand = self._unary()
            finally:
                self.depth -= 1
            return UnaryOp("-", operand) if op == "-" else operand
        return self._power()

    def _power(self) -> Node:
        base = self._primary()
        if self._peek_op("^"):
            self._consume()
            self._enter()
            try:
                exponent = self._unary()
            finally:
                self.depth -= 1
            return BinaryOp("^", base, exponent)
        return base

    def _primary(self) -> Node:
        self._enter()
        try:
            token = self._consume()
            if token.kind == "NUM":
                return Number(float(token.text), token.text)
            if token.kind == "VAR":
                return Variable()
            if token.kind == "CONST":
                return Constant(token.text)
            if token.kind == "FUNC":
                if self._peek() is None:
                    raise ParseError(
                        f"Missing argument for '{token.text}'", "SYNTAX_ERROR"
                    )
                if self._peek().kind == "LPAREN":
                    return Call(token.text, self._primary())
                return Call(token.text, self._power())
            if token.kind == "LPAREN":
                if self._peek() is not None and self._peek().kind == "RPAREN":
                    raise ParseError(
                        f"Empty parentheses at position {token.position}",
                        "SYNTAX_ERROR",
                    )
                node = self._expression()
                closing = self._consume()
                if closing.kind != "RPAREN":
                    raise ParseError(
                        f"Expected ')' at position {closing.position}", "SYNTAX_ERROR"
                    )
                return node
            raise ParseError(
                f"Unexpected '{token.text}' at position {token.position}",
                "SYNTAX_ERROR",
            )
        finally:
            self.depth -= 1


def tree_height(node: Node) -> int:
    """Height of an AST, computed without recursion."""
    height = 0
    stack = [(node, 1)]
    while stack:
        current, level = stack.pop()
        height = max(height, level)
        if isinstance(current, BinaryOp):
            stack.append((current.left, level + 1))
            stack.append((current.right, level + 1))
        elif isinstance(current, UnaryOp):
            stack.append((current.operand, level + 1))
        elif isinstance(current, Call):
            stack.append((current.argument, level + 1))
    return height


def parse_preprocessed(text: str) -> Node:
    """Parse already-preprocessed text into an AST."""
    try:
        node = Parser(tokenize(text)).parse()
    except RecursionError as e:
        raise ParseError("Expression too complex to parse", "TOO_COMPLEX") from e
    if tree_height(node) > MAX_TREE_HEIGHT:
        raise ParseError(
            f"Expression too complex (>{MAX_TREE_HEIGHT} levels)", "TOO_COMPLEX"
        )
    return node


def parse_expression(input_str: str) -> Node:
    """Preprocess and parse raw user input into an AST.

    Raises:
        ParseError: If the input has no recognizable structure
    """
    return parse_preprocessed(preprocess(input_str))
