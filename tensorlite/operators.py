"""Collection of the core scalar operators used by the tensor backends."""

from typing import Iterable

# ## Scalar functions
# Each function takes and returns floats. They are plain Python so that
# `fast_ops` can compile them with numba.


def mul(x: float, y: float) -> float:
    """Multiply two numbers."""
    return x * y


def add(x: float, y: float) -> float:
    """Add two numbers."""
    return x + y


def sub(x: float, y: float) -> float:
    """Subtract `y` from `x`."""
    return x - y


def div(x: float, y: float) -> float:
    """Divide `x` by `y`.

    No zero check: on float64 operands (NumPy scalars, or numba with the
    numpy error model) a zero divisor gives `inf`, `-inf` or `nan`.
    """
    return x / y


def is_close(x: float, y: float) -> bool:
    """Check if two numbers are close in value."""
    return abs(x - y) < 1e-2


def prod(xs: Iterable[float]) -> float:
    """Product of an iterable. The empty product is 1."""
    result = 1
    for x in xs:
        result = result * x
    return result
