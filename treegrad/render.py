"""
Rendering
=========

Human-readable views of an expression: a fully parenthesised infix string,
and a node-by-node graph (plain text or Graphviz DOT).

This is presentation only. It walks the tree on its own and never touches
the gradient engines; pass a gradient map in if you want gradients shown.
"""

from __future__ import annotations
from typing import Any, List, Mapping, Optional, Tuple

from .expression import (
    Add, Const, Div, Expr, Lit, Log, Mul, Neg, Pow, Sub, Var,
    children, evaluate,
)
from .numeric import FLOAT64, NumberLike


_SYMBOLS = {Add: '+', Sub: '-', Mul: '*', Div: '/', Pow: '^'}


def to_string(expr: Expr) -> str:
    """
    Render an expression as infix text with every operation parenthesised.

    Example:
        >>> to_string(Var('x', 1.0) * Var('y', 2.0) + Const(3))
        '((x * y) + 3)'
    """
    if isinstance(expr, Var):
        return expr.id
    if isinstance(expr, Lit):
        return str(expr.data)
    if isinstance(expr, Const):
        return str(expr.n)
    if isinstance(expr, Neg):
        return f"(-{to_string(expr.value)})"
    if isinstance(expr, Log):
        return f"log({to_string(expr.value)})"
    symbol = _SYMBOLS.get(type(expr))
    if symbol is None:
        raise TypeError(f"Not an expression node: {type(expr).__name__}")
    left, right = children(expr)
    return f"({to_string(left)} {symbol} {to_string(right)})"


def node_label(node: Expr) -> str:
    """Short label for one node: the id, the literal, or the operator."""
    if isinstance(node, Var):
        return node.id
    if isinstance(node, Lit):
        return str(node.data)
    if isinstance(node, Const):
        return str(node.n)
    if isinstance(node, Neg):
        return 'neg'
    if isinstance(node, Log):
        return 'log'
    return _SYMBOLS[type(node)]


def _numbered(root: Expr) -> List[Tuple[Expr, Tuple[int, ...]]]:
    # One entry per occurrence, operands before their parent.
    out: List[Tuple[Expr, Tuple[int, ...]]] = []

    def visit(node: Expr) -> int:
        operands = tuple(visit(child) for child in children(node))
        out.append((node, operands))
        return len(out) - 1

    visit(root)
    return out


def draw_graph(
    root: Expr,
    format: str = 'text',
    num: NumberLike = FLOAT64,
    grads: Optional[Mapping[str, Any]] = None
) -> str:
    """
    Generate a visualization of the expression tree.

    Every node shows its value. Variable nodes also show their gradient when
    ``grads`` is given.

    Args:
        root: Root of the expression to visualize.
        format: 'text' for an aligned listing, 'dot' for Graphviz DOT.
        num: Arithmetic used to evaluate each node.
        grads: Optional gradient map, e.g. from backward().

    Returns:
        String representation of the graph.

    Raises:
        ValueError: If format is neither 'text' nor 'dot'.
    """
    if format not in ('text', 'dot'):
        raise ValueError(f"Unknown graph format: {format!r}")

    nodes = _numbered(root)
    grads = grads or {}

    def describe(node: Expr, sep: str) -> str:
        text = f'data={float(evaluate(node, num)):.4f}'
        if isinstance(node, Var) and node.id in grads:
            text += f'{sep}grad={float(grads[node.id]):.4f}'
        return text

    if format == 'dot':
        newline = '\\n'
        lines = ['digraph G {', '  rankdir=LR;']
        for nid, (node, operands) in enumerate(nodes):
            shape = 'circle' if operands else 'box'
            lines.append(
                f'  n{nid} [label="{node_label(node)}{newline}{describe(node, newline)}", shape={shape}];'
            )
            for pid in operands:
                lines.append(f'  n{pid} -> n{nid};')
        lines.append('}')
        return '\n'.join(lines)

    # Rows and operand references share one naming rule.
    labels = [node.id if isinstance(node, Var) else f'v{nid}' for nid, (node, _) in enumerate(nodes)]
    lines = ['Expression Graph:', '=' * 50]
    for nid, (node, operands) in reversed(list(enumerate(nodes))):
        op_str = ''
        if operands:
            op_str = f' = {node_label(node)}(' + ', '.join(labels[p] for p in operands) + ')'
        lines.append(f'{labels[nid]:>10}: {describe(node, ", ")}{op_str}')
    return '\n'.join(lines)
