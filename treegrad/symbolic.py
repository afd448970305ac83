"""
Symbolic Gradients
==================

The same reverse-mode walk as treegrad.grad, but the upstream gradient is an
expression instead of a number. Where the numerical engine multiplies two
partials, this one builds a Mul node. No arithmetic happens here, so no
NumberLike is needed.

The result maps each variable id to an expression for its derivative. Those
expressions are ordinary trees: evaluate them with any NumberLike, print
them, or differentiate them again.

Every write to the map wraps in Add, including the first one, so the
gradient of a variable seen once with upstream u is ``Add(Const(0), u)``.
"""

from __future__ import annotations
import logging
from typing import Dict

from .expression import Add, Const, Div, Expr, Lit, Log, Mul, Neg, Pow, Sub, Var


logger = logging.getLogger(__name__)


def symbolic_backward(expr: Expr) -> Dict[str, Expr]:
    """
    Build derivative expressions for every variable in ``expr``.

    Args:
        expr: The expression to differentiate.

    Returns:
        Dict from variable id to an expression computing d(expr)/d(variable).

    Example:
        >>> x, y = Var('x', 2.0), Var('y', 3.0)
        >>> symbolic_backward(x * y)['x']
        Add(left=Const(n=0), right=Mul(left=Const(n=1), right=Var(id='y', data=3.0)))
    """
    grads: Dict[str, Expr] = {}
    _backward(expr, Const(1), grads)
    logger.debug("symbolic_backward: %d gradient expressions", len(grads))
    return grads


def _backward(expr: Expr, upstream: Expr, grads: Dict[str, Expr]) -> Dict[str, Expr]:
    if isinstance(expr, Var):
        grads[expr.id] = Add(grads.get(expr.id, Const(0)), upstream)
    elif isinstance(expr, (Lit, Const)):
        pass
    elif isinstance(expr, Add):
        _backward(expr.left, upstream, grads)
        _backward(expr.right, upstream, grads)
    elif isinstance(expr, Sub):
        _backward(expr.left, upstream, grads)
        _backward(expr.right, Neg(upstream), grads)
    elif isinstance(expr, Mul):
        _backward(expr.left, Mul(upstream, expr.right), grads)
        _backward(expr.right, Mul(upstream, expr.left), grads)
    elif isinstance(expr, Div):
        left, right = expr.left, expr.right
        _backward(left, Div(upstream, right), grads)
        _backward(right, Neg(Div(Mul(upstream, left), Mul(right, right))), grads)
    elif isinstance(expr, Pow):
        b, e = expr.base, expr.exp
        _backward(b, Mul(upstream, Mul(e, Pow(b, Sub(e, Const(1))))), grads)
        _backward(e, Mul(upstream, Mul(Pow(b, e), Log(b))), grads)
    elif isinstance(expr, Neg):
        _backward(expr.value, Neg(upstream), grads)
    elif isinstance(expr, Log):
        _backward(expr.value, Div(upstream, expr.value), grads)
    else:
        raise TypeError(f"Not an expression node: {type(expr).__name__}")
    return grads
