#!/usr/bin/env python3
"""
TreeGrad Demo: Derivatives of an Expression Tree
================================================

This demo shows the complete workflow:
1. Build an expression (by hand and from text)
2. Evaluate it and compute numerical gradients
3. Build symbolic gradients and evaluate them
4. Plot f(x) = 3x^2 - 4x + 5 and its derivative

Run: python examples/demo.py
"""

import numpy as np
import matplotlib.pyplot as plt
from typing import List, Tuple

from treegrad import (
    DECIMAL, Const, Var, backward, draw_graph, evaluate, parse,
    symbolic_backward, to_string, trace, variables,
)


def f(x: Var):
    """f(x) = 3x^2 - 4x + 5."""
    return Const(3) * (x ** Const(2)) - Const(4) * x + Const(5)


def sample(xs: np.ndarray) -> Tuple[List[float], List[float]]:
    """
    Evaluate f and its gradient at every point.

    Args:
        xs: Points to sample.

    Returns:
        Values and gradients, one per point.
    """
    values, grads = [], []
    # x^2 also computes the unused exponent partial, log(x), which is nan for x <= 0
    with np.errstate(divide='ignore', invalid='ignore'):
        for x in xs:
            traced = trace(f(Var('x', float(x))))
            values.append(float(traced.value))
            grads.append(float(traced.grads['x']))
    return values, grads


def demo_gradient_computation() -> None:
    """
    Demonstrate basic gradient computation.
    """
    print("=" * 60)
    print("DEMO 1: Numerical Gradients")
    print("=" * 60)
    print()

    print("Computing gradients for f(x) = 3x^2 - 4x + 5 at x = 2")
    print()

    x = Var('x', 2.0)
    expr = f(x)
    print(f"f        = {to_string(expr)}")
    print(f"f(2)     = {float(evaluate(expr))}")
    print(f"df/dx    = {float(backward(expr)['x'])}")
    print("(Analytical: df/dx = 6x - 4 = 6(2) - 4 = 8)")
    print()

    print("Computing gradients for g(a, b) = log(a*b + a^b) / b")
    print()

    a, b = variables(a=2.0, b=3.0)
    g = (a * b + a ** b).log() / b
    grads = backward(g)
    print(draw_graph(g, grads=grads))
    print()


def demo_symbolic() -> None:
    """
    Build derivative expressions and evaluate them with two number types.
    """
    print("=" * 60)
    print("DEMO 2: Symbolic Gradients")
    print("=" * 60)
    print()

    expr = parse("x^y + x*y", {'x': 2.0, 'y': 3.0})
    print(f"g = {to_string(expr)}")
    for name, grad in symbolic_backward(expr).items():
        print(f"dg/d{name} = {to_string(grad)}")
        print(f"      = {float(evaluate(grad)):.6f}")
    print()

    from decimal import Decimal
    x = Var('x', Decimal('1.5'))
    grad = symbolic_backward(f(x))['x']
    print(f"df/dx at x = 1.5 with Decimal arithmetic: {evaluate(grad, DECIMAL)}")
    print()


def plot_function_and_gradient(xs: np.ndarray, values: List[float], grads: List[float]) -> None:
    """
    Plot f and df/dx side by side.

    Args:
        xs: Sample points.
        values: f at each point.
        grads: df/dx at each point.
    """
    plt.figure(figsize=(10, 6))
    plt.plot(xs, values, 'b-', linewidth=2, label='f(x) = 3x² - 4x + 5')
    plt.plot(xs, grads, 'r--', linewidth=2, label="f'(x) (backward)")
    plt.axhline(0, color='black', linewidth=0.5)
    plt.axvline(2 / 3, color='gray', linestyle=':', label='minimum at x = 2/3')
    plt.xlabel('x')
    plt.legend()
    plt.grid(True, alpha=0.3)
    plt.title('Function and Gradient')
    plt.tight_layout()
    plt.savefig('./gradient.png', dpi=150)
    plt.close()
    print("Saved plot to: gradient.png")


def main() -> None:
    """Run all demos."""
    demo_gradient_computation()
    demo_symbolic()

    print("=" * 60)
    print("DEMO 3: Plotting")
    print("=" * 60)
    print()
    xs = np.linspace(-2.0, 3.0, 101)
    values, grads = sample(xs)
    plot_function_and_gradient(xs, values, grads)


if __name__ == "__main__":
    main()
