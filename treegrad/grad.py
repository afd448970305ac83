"""
Numerical Gradients
===================

Reverse-mode automatic differentiation over an expression tree.

The walk starts at the root with an upstream gradient of 1 (d(out)/d(out))
and pushes it down. At every operator the upstream gets multiplied by the
local derivative of that operator with respect to each operand (the chain
rule), and the result is handed to the operand. When the walk reaches a
variable, the upstream is added to that variable's entry in the gradient
map. Variables that appear at several leaves are summed.

The tree stores no forward values, so products, quotients and powers
re-evaluate the sibling subtree they need.

Local derivatives:
    l + r      d/dl = 1              d/dr = 1
    l - r      d/dl = 1              d/dr = -1
    l * r      d/dl = r              d/dr = l
    l / r      d/dl = 1/r            d/dr = -l/r^2
    b ^ e      d/db = e * b^(e-1)    d/de = b^e * log(b)
    -v         d/dv = -1
    log(v)     d/dv = 1/v
"""

from __future__ import annotations
import logging
from typing import Dict, TypeVar

from .expression import Add, Const, Div, Expr, Lit, Log, Mul, Neg, Pow, Sub, Var, evaluate
from .numeric import FLOAT64, NumberLike


logger = logging.getLogger(__name__)

A = TypeVar('A')


def backward(expr: Expr[A], num: NumberLike[A] = FLOAT64) -> Dict[str, A]:
    """
    Compute the gradient of an expression with respect to every variable.

    Args:
        expr: The expression to differentiate.
        num: The arithmetic to use.

    Returns:
        Dict from variable id to d(expr)/d(variable). Ids that do not occur
        in the tree have no entry. A variable whose contributions cancel
        (``x - x``) is present with value 0.

    Example:
        >>> x = Var('x', 3.0)
        >>> float(backward(x * x)['x'])
        6.0
    """
    grads: Dict[str, A] = {}
    _backward(expr, num.from_int(1), grads, num)
    logger.debug("backward: %d gradient entries", len(grads))
    return grads


def _negate(value: A, num: NumberLike[A]) -> A:
    return num.sub(num.from_int(0), value)


def _backward(expr: Expr[A], upstream: A, grads: Dict[str, A], num: NumberLike[A]) -> Dict[str, A]:
    # Left operand is fully processed before the right one.
    if isinstance(expr, Var):
        grads[expr.id] = num.add(grads.get(expr.id, num.from_int(0)), upstream)
    elif isinstance(expr, (Lit, Const)):
        pass
    elif isinstance(expr, Add):
        _backward(expr.left, upstream, grads, num)
        _backward(expr.right, upstream, grads, num)
    elif isinstance(expr, Sub):
        _backward(expr.left, upstream, grads, num)
        _backward(expr.right, _negate(upstream, num), grads, num)
    elif isinstance(expr, Mul):
        _backward(expr.left, num.mul(upstream, evaluate(expr.right, num)), grads, num)
        _backward(expr.right, num.mul(upstream, evaluate(expr.left, num)), grads, num)
    elif isinstance(expr, Div):
        lv = evaluate(expr.left, num)
        rv = evaluate(expr.right, num)
        _backward(expr.left, num.div(upstream, rv), grads, num)
        r_grad = _negate(num.div(num.mul(upstream, lv), num.mul(rv, rv)), num)
        _backward(expr.right, r_grad, grads, num)
    elif isinstance(expr, Pow):
        b = evaluate(expr.base, num)
        e = evaluate(expr.exp, num)
        # Both partials are always computed; constant exponents drop theirs.
        b_grad = num.mul(upstream, num.mul(e, num.pow(b, num.sub(e, num.from_int(1)))))
        _backward(expr.base, b_grad, grads, num)
        e_grad = num.mul(upstream, num.mul(num.pow(b, e), num.log(b)))
        _backward(expr.exp, e_grad, grads, num)
    elif isinstance(expr, Neg):
        _backward(expr.value, _negate(upstream, num), grads, num)
    elif isinstance(expr, Log):
        _backward(expr.value, num.div(upstream, evaluate(expr.value, num)), grads, num)
    else:
        raise TypeError(f"Not an expression node: {type(expr).__name__}")
    return grads
