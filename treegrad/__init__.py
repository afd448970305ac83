"""TreeGrad: reverse-mode differentiation over scalar expression trees."""

from .numeric import (
    NumberLike, NumpyNumber, PythonFloat, DecimalNumber,
    FLOAT64, FLOAT32, PYTHON_FLOAT, DECIMAL, NUMBER_LIKES, get_number_like,
)
from .expression import (
    Expr, Var, Lit, Const, Add, Sub, Mul, Div, Pow, Neg, Log,
    literal, constant, variable, add, sub, mul, div, power, neg, log,
    variables, evaluate, children, iter_nodes, topological_sort,
    variable_ids, substitute,
)
from .grad import backward
from .symbolic import symbolic_backward
from .autograd import Traced, trace
from .parser import ParseError, parse, tokenize
from .render import to_string, draw_graph

__all__ = [
    "NumberLike",
    "NumpyNumber",
    "PythonFloat",
    "DecimalNumber",
    "FLOAT64",
    "FLOAT32",
    "PYTHON_FLOAT",
    "DECIMAL",
    "NUMBER_LIKES",
    "get_number_like",
    "Expr",
    "Var",
    "Lit",
    "Const",
    "Add",
    "Sub",
    "Mul",
    "Div",
    "Pow",
    "Neg",
    "Log",
    "literal",
    "constant",
    "variable",
    "add",
    "sub",
    "mul",
    "div",
    "power",
    "neg",
    "log",
    "variables",
    "evaluate",
    "children",
    "iter_nodes",
    "topological_sort",
    "variable_ids",
    "substitute",
    "backward",
    "symbolic_backward",
    "Traced",
    "trace",
    "ParseError",
    "parse",
    "tokenize",
    "to_string",
    "draw_graph",
]
