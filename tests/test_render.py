"""
Unit Tests: Rendering and the trace() Wrapper
=============================================

Run with: pytest tests/test_render.py -v
"""

import dataclasses

import pytest

from treegrad import (
    DECIMAL, Const, Lit, Traced, Var,
    backward, draw_graph, to_string, trace, variables,
)


class TestToString:
    """Test infix rendering."""

    def test_operators(self) -> None:
        """Test every node kind renders parenthesised."""
        x, y = variables(x=1.0, y=2.0)
        assert to_string(x * y + Const(3)) == '((x * y) + 3)'
        assert to_string(x - y / Lit(2.5)) == '(x - (y / 2.5))'
        assert to_string(x ** Const(2)) == '(x ^ 2)'
        assert to_string(-x) == '(-x)'
        assert to_string(x.log()) == 'log(x)'

    def test_str(self) -> None:
        """Test str() of a node uses the same rendering."""
        x = Var('x', 1.0)
        assert str(x * Lit(2.0)) == '(x * 2.0)'

    def test_rejects_foreign_nodes(self) -> None:
        """Test non-expression objects raise TypeError."""
        with pytest.raises(TypeError):
            to_string(object())


class TestDrawGraph:
    """Test the text and DOT graph views."""

    def test_text(self) -> None:
        """Test the text listing shows values and operators."""
        x, y = variables(x=2.0, y=3.0)
        text = draw_graph(x * y + x)
        lines = text.splitlines()
        assert lines[0] == 'Expression Graph:'
        assert 'data=8.0000' in lines[2]
        assert '= +(v2, x)' in lines[2]
        assert len(lines) == 2 + 5

    def test_text_operands_use_row_labels(self) -> None:
        """Test every operand named in the listing has a row of its own."""
        x, y = variables(x=2.0, y=3.0)
        lines = draw_graph(x * y + x).splitlines()[2:]
        mul_line = next(line for line in lines if '= *(' in line)
        assert mul_line.strip().startswith('v2:')
        assert mul_line.endswith('= *(x, y)')
        row_labels = {line.split(':')[0].strip() for line in lines}
        for line in lines:
            if ' = ' in line:
                operands = line.split('(', 1)[1].rstrip(')').split(', ')
                assert set(operands) <= row_labels

    def test_text_with_gradients(self) -> None:
        """Test variable lines show gradients when given."""
        x, y = variables(x=2.0, y=3.0)
        expr = x * y + x
        text = draw_graph(expr, grads=backward(expr))
        assert 'grad=4.0000' in text
        assert 'grad=2.0000' in text

    def test_dot(self) -> None:
        """Test DOT output has one node per occurrence and tree edges."""
        x, y = variables(x=2.0, y=3.0)
        dot = draw_graph(x * y + x, format='dot')
        assert dot.startswith('digraph G {')
        assert dot.endswith('}')
        assert dot.count(' -> ') == 4
        assert dot.count('shape=box') == 3
        assert dot.count('shape=circle') == 2

    def test_other_number_type(self) -> None:
        """Test node values are computed with the given capability."""
        from decimal import Decimal
        x = Var('x', Decimal('1.5'))
        assert 'data=3.0000' in draw_graph(x + x, num=DECIMAL)

    def test_unknown_format(self) -> None:
        """Test an unknown format raises ValueError."""
        with pytest.raises(ValueError):
            draw_graph(Var('x', 1.0), format='svg')


class TestTrace:
    """Test the value-plus-gradients wrapper."""

    def test_trace(self) -> None:
        """Test value and gradients together."""
        x, y = variables(x=2.0, y=3.0)
        traced = trace(x * y + x)
        assert isinstance(traced, Traced)
        assert traced.value == 8.0
        assert traced.grads == {'x': 4.0, 'y': 2.0}

    def test_bindings(self) -> None:
        """Test bindings replace variable data before evaluation."""
        x = Var('x', 2.0)
        traced = trace(x * x, bindings={'x': 5.0})
        assert traced.value == 25.0
        assert traced.grads['x'] == 10.0

    def test_no_variables(self) -> None:
        """Test a constant expression traces to an empty gradient map."""
        traced = trace(Lit(2.0) + Const(3))
        assert traced.value == 5.0
        assert traced.grads == {}

    def test_frozen(self) -> None:
        """Test Traced is immutable."""
        traced = trace(Var('x', 1.0))
        with pytest.raises(dataclasses.FrozenInstanceError):
            traced.value = 2.0
