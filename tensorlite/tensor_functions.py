"""Constructors and named operations for Tensor."""

from __future__ import annotations

import logging
import random
from typing import TYPE_CHECKING

import numpy as np

from . import operators
from .tensor import Tensor
from .tensor_data import ShapeMismatchError, infer_shape, validate_shape
from .tensor_ops import SimpleBackend, TensorBackend

if TYPE_CHECKING:
    from typing import Any, List, Sequence

    from .tensor_data import UserShape

logger = logging.getLogger(__name__)


# Helpers for Constructing tensors
def new(shape: UserShape, backend: TensorBackend = SimpleBackend) -> Tensor:
    """Produce a zero tensor of size `shape`.

    Args:
    ----
        shape : shape of tensor, every extent positive
        backend : tensor backend

    Returns:
    -------
        new tensor

    Raises:
    ------
        InvalidShapeError : if an extent is zero or negative.

    """
    shape = validate_shape(shape)
    return Tensor.make(
        np.zeros(int(operators.prod(shape)), dtype=np.float64), shape, backend=backend
    )


def from_data(
    shape: UserShape, data: Sequence[float], backend: TensorBackend = SimpleBackend
) -> Tensor:
    """Produce a tensor of shape `shape` holding a copy of `data`.

    One extent of `shape` may be 0, meaning "infer it from `len(data)`" ::

        from_data([2, 0], [1, 2, 3, 4, 5, 6]).shape == (2, 3)

    Args:
    ----
        shape : shape of tensor, with at most one 0 placeholder
        data : flat row-major values
        backend : tensor backend

    Returns:
    -------
        new tensor

    Raises:
    ------
        InvalidShapeError : more than one placeholder or a bad extent.
        ShapeMismatchError : `len(data)` does not equal the shape product, or
            `data` is ragged.

    """
    try:
        storage = np.array(data, dtype=np.float64).reshape(-1)
    except ValueError as e:
        raise ShapeMismatchError(f"Data for shape {tuple(shape)} must be numbers in equal-length rows: {e}") from e
    resolved = infer_shape(shape, storage.size)
    if tuple(resolved) != tuple(shape):
        logger.debug("Inferred shape %s from %s for %d values", resolved, tuple(shape), storage.size)
    return Tensor.make(storage, resolved, backend=backend)


def ones(shape: UserShape, backend: TensorBackend = SimpleBackend) -> Tensor:
    """Produce a ones tensor of size `shape`.

    Args:
    ----
        shape : shape of tensor
        backend : tensor backend

    Returns:
    -------
        new tensor

    """
    shape = validate_shape(shape)
    return Tensor.make([1.0] * int(operators.prod(shape)), shape, backend=backend)


def rand(shape: UserShape, backend: TensorBackend = SimpleBackend) -> Tensor:
    """Produce a random tensor of size `shape`, values uniform in [0, 1).

    Args:
    ----
        shape : shape of tensor
        backend : tensor backend

    Returns:
    -------
        :class:`Tensor` : new tensor

    """
    shape = validate_shape(shape)
    vals = [random.random() for _ in range(int(operators.prod(shape)))]
    return Tensor.make(vals, shape, backend=backend)


def tensor(ls: Any, backend: TensorBackend = SimpleBackend) -> Tensor:
    """Produce a tensor with data and shape from ls

    Args:
    ----
        ls: data for tensor, a number or (nested) lists of equal lengths
        backend : tensor backend

    Returns:
    -------
        :class:`Tensor` : new tensor

    """

    def shape(ls: Any) -> List[int]:
        if isinstance(ls, (list, tuple)):
            return [len(ls)] + shape(ls[0]) if len(ls) else [0]
        else:
            return []

    def flatten(ls: Any) -> List[float]:
        if isinstance(ls, (list, tuple)):
            return [y for x in ls for y in flatten(x)]
        else:
            return [ls]

    cur = flatten(ls)
    shape2 = validate_shape(shape(ls))
    return Tensor.make(cur, shape2, backend=backend)


# Named operations


def add(a: Tensor, b: Tensor) -> Tensor:
    """Broadcasting elementwise sum."""
    return a.f.add_zip(a, b)


def sub(a: Tensor, b: Tensor) -> Tensor:
    """Broadcasting elementwise difference."""
    return a.f.sub_zip(a, b)


def mul(a: Tensor, b: Tensor) -> Tensor:
    """Broadcasting elementwise product."""
    return a.f.mul_zip(a, b)


def div(a: Tensor, b: Tensor) -> Tensor:
    """Broadcasting elementwise quotient. Zero divisors give inf/nan."""
    return a.f.div_zip(a, b)


def matmul(a: Tensor, b: Tensor) -> Tensor:
    """Strict 2D matrix product."""
    return a.f.matrix_multiply(a, b)


def matadd(a: Tensor, b: Tensor) -> Tensor:
    """Elementwise sum of two tensors of identical shape."""
    return a.f.matadd(a, b)


def matsub(a: Tensor, b: Tensor) -> Tensor:
    """Elementwise difference of two tensors of identical shape."""
    return a.f.matsub(a, b)


def clone(a: Tensor) -> Tensor:
    """Deep copy of `a`."""
    return a.clone()
