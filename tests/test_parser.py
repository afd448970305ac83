"""
Unit Tests: Parser
==================

Run with: pytest tests/test_parser.py -v
"""

from decimal import Decimal

import pytest

from treegrad import (
    Add, Div, Lit, Log, Mul, Neg, ParseError, Pow, Sub, Var,
    backward, evaluate, parse, tokenize,
)


TOLERANCE = 1e-9


def assert_close(actual: float, expected: float, tol: float = TOLERANCE) -> None:
    """Assert two values are approximately equal."""
    diff = abs(actual - expected)
    assert diff < tol, f"Values differ: {actual} vs {expected} (diff={diff})"


class TestTokenize:
    """Test the tokenizer."""

    def test_tokens(self) -> None:
        """Test numbers, names and operators."""
        assert tokenize("3.5*x + log(y)") == [
            ('number', '3.5'), ('op', '*'), ('name', 'x'), ('op', '+'),
            ('name', 'log'), ('op', '('), ('name', 'y'), ('op', ')'),
        ]

    def test_double_star(self) -> None:
        """Test ** is normalised to ^."""
        assert tokenize("x**2") == [('name', 'x'), ('op', '^'), ('number', '2')]

    def test_scientific_notation(self) -> None:
        """Test exponents in number literals."""
        assert tokenize("1e-3 .5") == [('number', '1e-3'), ('number', '.5')]

    def test_unexpected_character(self) -> None:
        """Test unknown characters are reported with their position."""
        with pytest.raises(ParseError, match="position 2"):
            tokenize("1 $ 2")


class TestParse:
    """Test parsing into expression trees."""

    def test_structure(self) -> None:
        """Test a simple expression tree."""
        expr = parse("x * y + 1", {'x': 2.0, 'y': 3.0})
        assert expr == Add(Mul(Var('x', 2.0), Var('y', 3.0)), Lit(1.0))

    def test_left_associative(self) -> None:
        """Test - and / group to the left."""
        assert parse("8 - 2 - 1") == Sub(Sub(Lit(8.0), Lit(2.0)), Lit(1.0))
        assert parse("8 / 2 / 2") == Div(Div(Lit(8.0), Lit(2.0)), Lit(2.0))

    def test_precedence(self) -> None:
        """Test * binds tighter than +."""
        assert evaluate(parse("1 + 2 * 3")) == 7.0
        assert evaluate(parse("(1 + 2) * 3")) == 9.0

    def test_power_right_associative(self) -> None:
        """Test 2^3^2 = 2^9."""
        assert evaluate(parse("2 ^ 3 ^ 2")) == 512.0
        assert evaluate(parse("2 ** 3")) == 8.0

    def test_unary_minus(self) -> None:
        """Test -x^2 is (-x)^2 and 2^-1 is 0.5."""
        expr = parse("-x^2", {'x': 3.0})
        assert expr == Pow(Neg(Var('x', 3.0)), Lit(2.0))
        assert evaluate(expr) == 9.0
        assert evaluate(parse("-(x^2)", {'x': 3.0})) == -9.0
        assert evaluate(parse("2^-1")) == 0.5
        assert parse("--x", {'x': 1.0}) == Neg(Neg(Var('x', 1.0)))

    def test_unary_minus_binds_tighter_than_multiplication(self) -> None:
        """Test -x*y and -x^y^z group the minus with x."""
        bindings = {'x': 2.0, 'y': 3.0, 'z': 2.0}
        assert parse("-x*y", bindings) == Mul(Neg(Var('x', 2.0)), Var('y', 3.0))
        assert parse("-x^y^z", bindings) == Pow(
            Neg(Var('x', 2.0)), Pow(Var('y', 3.0), Var('z', 2.0)))

    @pytest.mark.filterwarnings("ignore::RuntimeWarning")
    def test_negated_base_gradient(self) -> None:
        """Test d/dx of -x^2 is 2x, the derivative of (-x)^2."""
        grads = backward(parse("-x^2", {'x': 3.0}))
        assert abs(grads['x'] - 6.0) < TOLERANCE

    def test_log(self) -> None:
        """Test log(...) becomes a Log node."""
        assert parse("log(x + 1)", {'x': 1.0}) == Log(Add(Var('x', 1.0), Lit(1.0)))

    def test_variable_named_like_function(self) -> None:
        """Test log without parentheses is an ordinary name."""
        assert parse("log * 2", {'log': 3.0}) == Mul(Var('log', 3.0), Lit(2.0))

    def test_convert(self) -> None:
        """Test number tokens go through convert."""
        assert parse("1.5", convert=Decimal) == Lit(Decimal('1.5'))

    def test_gradient_of_parsed_text(self) -> None:
        """Test parsed polynomial gives 6x - 4."""
        expr = parse("3*x^2 - 4*x + 5", {'x': 2.0})
        assert evaluate(expr) == 9.0
        assert_close(backward(expr)['x'], 8.0)


class TestParseErrors:
    """Test malformed input."""

    @pytest.mark.parametrize("text, message", [
        ("x +", "Unexpected end of expression"),
        ("", "Unexpected end of expression"),
        ("(1 + 2", "Missing closing parenthesis"),
        ("log(1 + 2", "Missing closing parenthesis for log"),
        ("y * 2", "Unknown variable: y"),
        ("2 x", "Unexpected token: x"),
        ("1 + )", "Unexpected token: \\)"),
    ])
    def test_errors(self, text: str, message: str) -> None:
        """Test each failure mode raises ParseError."""
        with pytest.raises(ParseError, match=message):
            parse(text, {'x': 1.0})

    def test_parse_error_is_value_error(self) -> None:
        """Test ParseError can be caught as ValueError."""
        with pytest.raises(ValueError):
            parse("(", {})
