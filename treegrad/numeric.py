"""
Number-Like Capabilities
========================

Everything in treegrad is generic over the scalar type. The expression tree
and both gradient engines never touch a number directly: every addition,
multiplication or logarithm goes through a NumberLike object.

That keeps the core honest about numeric semantics. Division by zero, the log
of a negative number, a fractional power of a negative base: whatever the
scalar type natively does, that is what you get. NumPy floats give inf/nan
(with a RuntimeWarning), builtin floats raise, Decimals follow their context.

Adding a new scalar type means writing one subclass. Nothing else changes.
"""

from __future__ import annotations
import math
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any, Dict, Generic, TypeVar

import numpy as np


A = TypeVar('A')


class NumberLike(ABC, Generic[A]):
    """
    The arithmetic a scalar type must support.

    All operations are pure. None of them add error handling on top of the
    underlying type.

    Note there is no negate: the engines negate as ``sub(from_int(0), x)``.
    """

    name: str = ''

    @abstractmethod
    def add(self, x: A, y: A) -> A:
        """Return x + y."""

    @abstractmethod
    def sub(self, x: A, y: A) -> A:
        """Return x - y."""

    @abstractmethod
    def mul(self, x: A, y: A) -> A:
        """Return x * y."""

    @abstractmethod
    def div(self, x: A, y: A) -> A:
        """Return x / y."""

    @abstractmethod
    def pow(self, x: A, exp: A) -> A:
        """Return x raised to exp."""

    @abstractmethod
    def log(self, x: A) -> A:
        """Return the natural logarithm of x."""

    @abstractmethod
    def from_int(self, n: int) -> A:
        """Convert an exact integer into the scalar type."""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.name!r})"


# =============================================================================
# NumPy (IEEE-754)
# =============================================================================

class NumpyNumber(NumberLike[np.floating]):
    """
    IEEE-754 floats backed by NumPy ufuncs.

    Operands are coerced to ``dtype`` before every operation, so integer
    literals never hit integer-power rules and float32 stays float32.

    Args:
        dtype: A NumPy floating scalar type, e.g. ``np.float64``.
    """

    def __init__(self, dtype: Any = np.float64) -> None:
        self.dtype = np.dtype(dtype).type
        self.name = np.dtype(dtype).name

    def add(self, x, y):
        return np.add(self.dtype(x), self.dtype(y))

    def sub(self, x, y):
        return np.subtract(self.dtype(x), self.dtype(y))

    def mul(self, x, y):
        return np.multiply(self.dtype(x), self.dtype(y))

    def div(self, x, y):
        return np.divide(self.dtype(x), self.dtype(y))

    def pow(self, x, exp):
        return np.power(self.dtype(x), self.dtype(exp))

    def log(self, x):
        return np.log(self.dtype(x))

    def from_int(self, n: int):
        return self.dtype(n)


# =============================================================================
# Builtin float
# =============================================================================

class PythonFloat(NumberLike[float]):
    """
    Plain Python floats.

    Unlike NumPy, the builtin type raises on undefined operations:
    ZeroDivisionError for ``x / 0`` and ValueError from ``math.log`` and
    ``math.pow`` outside their domain. Those propagate unchanged.

    ``backward`` computes both partials of every power, including the
    exponent's partial ``b^e * log(b)`` that a constant exponent discards.
    So ``backward(x ** Const(2), PYTHON_FLOAT)`` with ``x <= 0`` raises
    ValueError from ``math.log``. Use a NumPy type to get a discarded nan
    instead.
    """

    name = 'float'

    def add(self, x: float, y: float) -> float:
        return x + y

    def sub(self, x: float, y: float) -> float:
        return x - y

    def mul(self, x: float, y: float) -> float:
        return x * y

    def div(self, x: float, y: float) -> float:
        return x / y

    def pow(self, x: float, exp: float) -> float:
        return math.pow(x, exp)

    def log(self, x: float) -> float:
        return math.log(x)

    def from_int(self, n: int) -> float:
        return float(n)


# =============================================================================
# Decimal
# =============================================================================

class DecimalNumber(NumberLike[Decimal]):
    """Arbitrary precision decimals under the active ``decimal`` context."""

    name = 'decimal'

    def add(self, x: Decimal, y: Decimal) -> Decimal:
        return Decimal(x) + Decimal(y)

    def sub(self, x: Decimal, y: Decimal) -> Decimal:
        return Decimal(x) - Decimal(y)

    def mul(self, x: Decimal, y: Decimal) -> Decimal:
        return Decimal(x) * Decimal(y)

    def div(self, x: Decimal, y: Decimal) -> Decimal:
        return Decimal(x) / Decimal(y)

    def pow(self, x: Decimal, exp: Decimal) -> Decimal:
        return Decimal(x) ** Decimal(exp)

    def log(self, x: Decimal) -> Decimal:
        return Decimal(x).ln()

    def from_int(self, n: int) -> Decimal:
        return Decimal(n)


FLOAT64 = NumpyNumber(np.float64)
FLOAT32 = NumpyNumber(np.float32)
PYTHON_FLOAT = PythonFloat()
DECIMAL = DecimalNumber()

NUMBER_LIKES: Dict[str, NumberLike] = {
    'float64': FLOAT64,
    'float32': FLOAT32,
    'float': PYTHON_FLOAT,
    'decimal': DECIMAL,
}


def get_number_like(name: str) -> NumberLike:
    """
    Look up a registered capability by name.

    Args:
        name: One of the keys of NUMBER_LIKES.

    Returns:
        The shared NumberLike instance.

    Raises:
        KeyError: If no capability is registered under that name.
    """
    try:
        return NUMBER_LIKES[name]
    except KeyError:
        known = ', '.join(sorted(NUMBER_LIKES))
        raise KeyError(f"Unknown number type {name!r} (known: {known})") from None
