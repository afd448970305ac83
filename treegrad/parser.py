"""
Expression Parser
=================

Turns text like ``"3 * x^2 - 4*x + log(y)"`` into an expression tree.

Grammar (recursive descent, lowest precedence first):

    expr    := term (('+' | '-') term)*
    term    := power (('*' | '/') power)*
    power   := unary (('^' | '**') power)?         right associative
    unary   := '-' unary | primary
    primary := NUMBER | NAME | 'log' '(' expr ')' | '(' expr ')'

Unary minus binds tighter than ``^``: ``-x^2`` is ``(-x)^2`` and ``2^-1``
is ``2^(-1)``. Write ``-(x^2)`` for the negated square.

Numbers become Lit nodes, names become Var nodes with their value looked up
in the ``variables`` mapping, and unary minus becomes Neg.
"""

from __future__ import annotations
import logging
import re
from typing import Any, Callable, List, Mapping, Optional, Tuple

from .expression import Add, Div, Expr, Lit, Log, Mul, Neg, Pow, Sub, Var


logger = logging.getLogger(__name__)

_TOKEN = re.compile(
    r"(?:"
    r"(?P<number>(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)"
    r"|(?P<name>[A-Za-z_]\w*)"
    r"|(?P<op>\*\*|[-+*/^()])"
    r")"
)

Token = Tuple[str, str]


class ParseError(ValueError):
    """Raised when text cannot be turned into an expression."""


def tokenize(text: str) -> List[Token]:
    """
    Split text into (kind, text) tokens.

    ``**`` is normalised to ``^``.

    Raises:
        ParseError: On a character that starts no token.
    """
    tokens: List[Token] = []
    pos = 0
    while pos < len(text):
        if text[pos].isspace():
            pos += 1
            continue
        match = _TOKEN.match(text, pos)
        if match is None:
            raise ParseError(f"Unexpected character {text[pos]!r} at position {pos}")
        kind = match.lastgroup
        value = match.group(kind)
        tokens.append((kind, '^' if value == '**' else value))
        pos = match.end()
    return tokens


class _Parser:

    def __init__(self, tokens: List[Token], variables: Mapping[str, Any], convert: Callable[[str], Any]) -> None:
        self.tokens = tokens
        self.pos = 0
        self.variables = variables
        self.convert = convert

    def peek(self) -> Optional[str]:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos][1]
        return None

    def next(self) -> Token:
        if self.pos >= len(self.tokens):
            raise ParseError("Unexpected end of expression")
        token = self.tokens[self.pos]
        self.pos += 1
        return token

    def expect(self, value: str, message: str) -> None:
        if self.peek() != value:
            raise ParseError(message)
        self.pos += 1

    def expression(self) -> Expr:
        left = self.term()
        while self.peek() in ('+', '-'):
            op = self.next()[1]
            right = self.term()
            left = Add(left, right) if op == '+' else Sub(left, right)
        return left

    def term(self) -> Expr:
        left = self.power()
        while self.peek() in ('*', '/'):
            op = self.next()[1]
            right = self.power()
            left = Mul(left, right) if op == '*' else Div(left, right)
        return left

    def power(self) -> Expr:
        base = self.unary()
        if self.peek() == '^':
            self.pos += 1
            return Pow(base, self.power())
        return base

    def unary(self) -> Expr:
        if self.peek() == '-':
            self.pos += 1
            return Neg(self.unary())
        return self.primary()

    def primary(self) -> Expr:
        kind, value = self.next()
        if value == '(':
            inner = self.expression()
            self.expect(')', "Missing closing parenthesis")
            return inner
        if kind == 'name' and value == 'log' and self.peek() == '(':
            self.pos += 1
            inner = self.expression()
            self.expect(')', "Missing closing parenthesis for log")
            return Log(inner)
        if kind == 'number':
            return Lit(self.convert(value))
        if kind == 'name':
            if value not in self.variables:
                raise ParseError(f"Unknown variable: {value}")
            return Var(value, self.variables[value])
        raise ParseError(f"Unexpected token: {value}")


def parse(
    text: str,
    variables: Optional[Mapping[str, Any]] = None,
    convert: Callable[[str], Any] = float
) -> Expr:
    """
    Parse text into an expression.

    Args:
        text: The expression source.
        variables: Values for the names that may appear in the text.
        convert: Turns a number token into the target scalar type.

    Returns:
        The expression tree.

    Raises:
        ParseError: If the text is not a well-formed expression, uses an
            unknown variable, or has tokens left over.

    Example:
        >>> parse("x * y + 1", {'x': 2.0, 'y': 3.0})
        Add(left=Mul(left=Var(id='x', data=2.0), right=Var(id='y', data=3.0)), right=Lit(data=1.0))
    """
    tokens = tokenize(text)
    logger.debug("parse: %d tokens", len(tokens))
    parser = _Parser(tokens, variables or {}, convert)
    expr = parser.expression()
    if parser.pos != len(tokens):
        raise ParseError(f"Unexpected token: {parser.peek()}")
    return expr
