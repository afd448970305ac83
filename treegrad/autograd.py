"""Value and gradients in one call."""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Dict, Generic, Mapping, Optional, TypeVar

from .expression import Expr, evaluate, substitute
from .grad import backward
from .numeric import FLOAT64, NumberLike


logger = logging.getLogger(__name__)

A = TypeVar('A')


@dataclass(frozen=True)
class Traced(Generic[A]):
    """
    The result of trace().

    Attributes:
        value: The evaluated expression.
        grads: Variable id to numerical gradient.
    """
    value: A
    grads: Dict[str, A]


def trace(
    expr: Expr[A],
    num: NumberLike[A] = FLOAT64,
    bindings: Optional[Mapping[str, A]] = None
) -> Traced[A]:
    """
    Evaluate an expression and compute its gradients.

    Args:
        expr: The expression.
        num: The arithmetic to use.
        bindings: Optional new values for variables, by id.

    Returns:
        Traced(value, grads).

    Example:
        >>> from treegrad import Var
        >>> x = Var('x', 2.0)
        >>> t = trace(x * x, bindings={'x': 5.0})
        >>> float(t.value), float(t.grads['x'])
        (25.0, 10.0)
    """
    if bindings:
        logger.debug("trace: rebinding %s", sorted(bindings))
        expr = substitute(expr, bindings)
    return Traced(evaluate(expr, num), backward(expr, num))
