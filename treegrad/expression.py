"""
Expression Trees
================

A scalar computation written down as data.

An expression is an immutable tree. Leaves are named variables (whose
gradients we want), literals (opaque numbers in the target type) and
structural constants (exact integers that are part of the shape, like the
2 in x^2). Inner nodes are the usual arithmetic operators.

Nothing here knows how to add two numbers. Evaluation takes a NumberLike
and asks it to do the arithmetic, which is what lets the same tree be
evaluated with float64, float32, Decimal, or anything else.

    >>> x, y = variables(x=2.0, y=3.0)
    >>> f = x * y + x
    >>> float(evaluate(f))
    8.0

Every operator builds a new node. Operands are never mutated, and two
trees with the same shape and data compare equal.
"""

from __future__ import annotations
import numbers
from dataclasses import dataclass, replace
from typing import Any, Dict, Generic, Iterator, List, Mapping, Tuple, TypeVar, Union

from .numeric import FLOAT64, NumberLike


A = TypeVar('A')


class Expr(Generic[A]):
    """
    Base class for every expression node.

    Provides the operator syntax. Raw numbers on either side of an operator
    are lifted into Lit nodes, so ``x + 2.0`` and ``2.0 * x`` both work.
    """

    __slots__ = ()

    # =========================================================================
    # Operator Syntax
    # =========================================================================

    def __add__(self, other: Any) -> Expr[A]:
        other = _lift(other)
        return NotImplemented if other is None else Add(self, other)

    def __radd__(self, other: Any) -> Expr[A]:
        other = _lift(other)
        return NotImplemented if other is None else Add(other, self)

    def __sub__(self, other: Any) -> Expr[A]:
        other = _lift(other)
        return NotImplemented if other is None else Sub(self, other)

    def __rsub__(self, other: Any) -> Expr[A]:
        other = _lift(other)
        return NotImplemented if other is None else Sub(other, self)

    def __mul__(self, other: Any) -> Expr[A]:
        other = _lift(other)
        return NotImplemented if other is None else Mul(self, other)

    def __rmul__(self, other: Any) -> Expr[A]:
        other = _lift(other)
        return NotImplemented if other is None else Mul(other, self)

    def __truediv__(self, other: Any) -> Expr[A]:
        other = _lift(other)
        return NotImplemented if other is None else Div(self, other)

    def __rtruediv__(self, other: Any) -> Expr[A]:
        other = _lift(other)
        return NotImplemented if other is None else Div(other, self)

    def __pow__(self, other: Any) -> Expr[A]:
        other = _lift(other)
        return NotImplemented if other is None else Pow(self, other)

    def __rpow__(self, other: Any) -> Expr[A]:
        other = _lift(other)
        return NotImplemented if other is None else Pow(other, self)

    def __neg__(self) -> Expr[A]:
        return Neg(self)

    def log(self) -> Expr[A]:
        """Natural logarithm node."""
        return Log(self)

    def pow(self, exp: Any) -> Expr[A]:
        """Same as ``self ** exp``."""
        return power(self, exp)

    # =========================================================================
    # Interpreters
    # =========================================================================

    def eval(self, num: NumberLike[A] = FLOAT64) -> A:
        """Method form of evaluate()."""
        return evaluate(self, num)

    def __str__(self) -> str:
        from .render import to_string
        return to_string(self)


# =============================================================================
# Leaves
# =============================================================================

@dataclass(frozen=True)
class Var(Expr[A]):
    """A named input. Several Var nodes may share one id."""
    id: str
    data: A


@dataclass(frozen=True)
class Lit(Expr[A]):
    """A value of the target numeric type. Never receives a gradient."""
    data: A


@dataclass(frozen=True)
class Const(Expr[A]):
    """An exact integer, converted with ``num.from_int`` at evaluation time."""
    n: int


# =============================================================================
# Operators
# =============================================================================

@dataclass(frozen=True)
class Add(Expr[A]):
    left: Expr[A]
    right: Expr[A]


@dataclass(frozen=True)
class Sub(Expr[A]):
    left: Expr[A]
    right: Expr[A]


@dataclass(frozen=True)
class Mul(Expr[A]):
    left: Expr[A]
    right: Expr[A]


@dataclass(frozen=True)
class Div(Expr[A]):
    left: Expr[A]
    right: Expr[A]


@dataclass(frozen=True)
class Pow(Expr[A]):
    base: Expr[A]
    exp: Expr[A]


@dataclass(frozen=True)
class Neg(Expr[A]):
    value: Expr[A]


@dataclass(frozen=True)
class Log(Expr[A]):
    value: Expr[A]


BINARY = (Add, Sub, Mul, Div)
LEAVES = (Var, Lit, Const)


def _lift(value: Any) -> Union[Expr, None]:
    if isinstance(value, Expr):
        return value
    if isinstance(value, numbers.Number):
        return Lit(value)
    return None


def _expr(value: Any) -> Expr:
    return value if isinstance(value, Expr) else Lit(value)


# =============================================================================
# Builders
# =============================================================================

def literal(data: A) -> Lit[A]:
    return Lit(data)


def constant(n: int) -> Const:
    return Const(n)


def variable(id: str, data: A) -> Var[A]:
    return Var(id, data)


def add(left: Any, right: Any) -> Add:
    return Add(_expr(left), _expr(right))


def sub(left: Any, right: Any) -> Sub:
    return Sub(_expr(left), _expr(right))


def mul(left: Any, right: Any) -> Mul:
    return Mul(_expr(left), _expr(right))


def div(left: Any, right: Any) -> Div:
    return Div(_expr(left), _expr(right))


def power(base: Any, exp: Any) -> Pow:
    return Pow(_expr(base), _expr(exp))


def neg(value: Any) -> Neg:
    return Neg(_expr(value))


def log(value: Any) -> Log:
    return Log(_expr(value))


def variables(**bindings: Any) -> Tuple[Var, ...]:
    """
    Create one Var per keyword argument, named after the keyword.

    Example:
        >>> x, y = variables(x=2.0, y=3.0)
        >>> x
        Var(id='x', data=2.0)
    """
    return tuple(Var(name, data) for name, data in bindings.items())


# =============================================================================
# Evaluation
# =============================================================================

def evaluate(expr: Expr[A], num: NumberLike[A] = FLOAT64) -> A:
    """
    Compute the value of an expression bottom-up.

    There is no caching: a subtree is evaluated every time it is reached.

    Args:
        expr: The expression to evaluate.
        num: The arithmetic to use.

    Returns:
        The value in the capability's scalar type.

    Raises:
        TypeError: If the tree contains something that is not an Expr node.
    """
    if isinstance(expr, (Var, Lit)):
        return expr.data
    if isinstance(expr, Const):
        return num.from_int(expr.n)
    if isinstance(expr, Add):
        return num.add(evaluate(expr.left, num), evaluate(expr.right, num))
    if isinstance(expr, Sub):
        return num.sub(evaluate(expr.left, num), evaluate(expr.right, num))
    if isinstance(expr, Mul):
        return num.mul(evaluate(expr.left, num), evaluate(expr.right, num))
    if isinstance(expr, Div):
        return num.div(evaluate(expr.left, num), evaluate(expr.right, num))
    if isinstance(expr, Pow):
        return num.pow(evaluate(expr.base, num), evaluate(expr.exp, num))
    if isinstance(expr, Neg):
        return num.sub(num.from_int(0), evaluate(expr.value, num))
    if isinstance(expr, Log):
        return num.log(evaluate(expr.value, num))
    raise TypeError(f"Not an expression node: {type(expr).__name__}")


# =============================================================================
# Traversal Utilities
# =============================================================================

def children(expr: Expr) -> Tuple[Expr, ...]:
    """Return the direct operands of a node, left to right."""
    if isinstance(expr, LEAVES):
        return ()
    if isinstance(expr, BINARY):
        return (expr.left, expr.right)
    if isinstance(expr, Pow):
        return (expr.base, expr.exp)
    if isinstance(expr, (Neg, Log)):
        return (expr.value,)
    raise TypeError(f"Not an expression node: {type(expr).__name__}")


def iter_nodes(expr: Expr) -> Iterator[Expr]:
    """Yield every node, parent before children (pre-order)."""
    stack = [expr]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(children(node)))


def topological_sort(root: Expr) -> List[Expr]:
    """
    Order the nodes of an expression so that operands come before the node
    that uses them. The root is last.

    This is a tree, so a subtree that occurs twice is listed twice.

    Args:
        root: The expression to sort.

    Returns:
        List of nodes in post-order.
    """
    topo: List[Expr] = []

    def dfs(node: Expr) -> None:
        for child in children(node):
            dfs(child)
        topo.append(node)

    dfs(root)
    return topo


def variable_ids(expr: Expr) -> List[str]:
    """Distinct variable ids in the order they are first reached."""
    seen: Dict[str, None] = {}
    for node in iter_nodes(expr):
        if isinstance(node, Var):
            seen.setdefault(node.id, None)
    return list(seen)


def substitute(expr: Expr[A], bindings: Mapping[str, A]) -> Expr[A]:
    """
    Rebuild an expression with new data for the bound variables.

    Variables whose id is not in ``bindings`` keep their data.

    Args:
        expr: The expression to rebind.
        bindings: Mapping from variable id to its new value.

    Returns:
        A new expression with the same shape.
    """
    if isinstance(expr, Var):
        return Var(expr.id, bindings[expr.id]) if expr.id in bindings else expr
    if isinstance(expr, (Lit, Const)):
        return expr
    if isinstance(expr, BINARY):
        return replace(
            expr,
            left=substitute(expr.left, bindings),
            right=substitute(expr.right, bindings),
        )
    if isinstance(expr, Pow):
        return Pow(substitute(expr.base, bindings), substitute(expr.exp, bindings))
    if isinstance(expr, (Neg, Log)):
        return type(expr)(substitute(expr.value, bindings))
    raise TypeError(f"Not an expression node: {type(expr).__name__}")
