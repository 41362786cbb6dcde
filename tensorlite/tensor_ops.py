from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Tuple, Type

import numpy as np

from . import operators
from .tensor_data import (
    BroadcastError,
    DimensionMismatchError,
    RankError,
    ShapeMismatchError,
)

if TYPE_CHECKING:
    from .tensor import Tensor
    from .tensor_data import Storage, UserShape

logger = logging.getLogger(__name__)

ZipKernel = Callable[["Storage", "Storage", "Storage"], None]


class TensorOps:
    @staticmethod
    def zip(fn: Callable[[float, float], float]) -> Callable[[Tensor, Tensor], Tensor]:
        """Higher-order broadcasting binary operation."""
        raise NotImplementedError("Not implemented for this backend")

    @staticmethod
    def strict_zip(
        fn: Callable[[float, float], float],
    ) -> Callable[[Tensor, Tensor], Tensor]:
        """Higher-order binary operation on identically shaped tensors."""
        raise NotImplementedError("Not implemented for this backend")

    @staticmethod
    def matrix_multiply(a: Tensor, b: Tensor) -> Tensor:
        """Matrix multiply of two 2D tensors."""
        raise NotImplementedError("Not implemented for this backend")


class TensorBackend:
    def __init__(self, ops: Type[TensorOps]):
        """Dynamically construct a tensor backend based on a `tensor_ops` object
        that implements zip, strict_zip and matrix_multiply.

        Args:
        ----
            ops : tensor operations object see `tensor_ops.py`


        Returns:
        -------
            A collection of tensor functions

        """
        logger.debug("Building tensor backend from %s", ops.__name__)
        self.name = ops.__name__

        # Zips (broadcasting)
        self.add_zip = ops.zip(operators.add)
        self.sub_zip = ops.zip(operators.sub)
        self.mul_zip = ops.zip(operators.mul)
        self.div_zip = ops.zip(operators.div)

        # Strict (no broadcasting)
        self.matadd = ops.strict_zip(operators.add)
        self.matsub = ops.strict_zip(operators.sub)
        self.matrix_multiply = ops.matrix_multiply

    def __repr__(self) -> str:
        return f"TensorBackend({self.name})"


def expand_storage(storage: Storage, block: int, repeats: int) -> Storage:
    """Tile a flat buffer along one axis.

    The buffer is read as consecutive blocks of `block` elements and every
    block is repeated `repeats` times in place, so `[a, b, c, d]` with
    `block=2, repeats=2` becomes `[a, b, a, b, c, d, c, d]`.
    """
    return np.tile(storage.reshape(-1, block), (1, repeats)).reshape(-1)


def broadcast_storage(
    a_storage: Storage, a_shape: UserShape, b_storage: Storage, b_shape: UserShape
) -> Tuple[Storage, Storage, UserShape]:
    """Expand two flat buffers to their common broadcast shape.

    Axes are visited from the trailing end. Missing leading axes count as
    extent 1. When one side has extent 1 and the other does not, that side's
    buffer is tiled in blocks of `stride`, the number of result elements
    covered by the axes already visited. The stride grows by the *result*
    extent of each axis, so tiling a leading axis repeats everything the
    trailing axes already expanded.

    Args:
    ----
        a_storage : flat row-major data of the first operand.
        a_shape : shape of the first operand.
        b_storage : flat row-major data of the second operand.
        b_shape : shape of the second operand.

    Returns:
    -------
        The two expanded buffers, each of length `prod(shape)`, and the
        broadcast shape.

    Raises:
    ------
        BroadcastError : if an axis pair is neither equal nor contains a 1.

    """
    len1 = len(a_shape)
    len2 = len(b_shape)
    max_len = max(len1, len2)
    out_shape = []

    stride = 1
    expanded1 = a_storage
    expanded2 = b_storage
    for i in range(max_len):
        dim1 = a_shape[len1 - 1 - i] if i < len1 else 1
        dim2 = b_shape[len2 - 1 - i] if i < len2 else 1
        if not (dim1 == dim2 or dim1 == 1 or dim2 == 1):
            raise BroadcastError(a_shape, b_shape, max_len - 1 - i, dim1, dim2)

        out_shape.insert(0, max(dim1, dim2))
        if dim1 == 1 and dim2 != 1:
            expanded1 = expand_storage(expanded1, stride, dim2)
        if dim2 == 1 and dim1 != 1:
            expanded2 = expand_storage(expanded2, stride, dim1)
        stride *= max(dim1, dim2)

    assert len(expanded1) == len(expanded2) == stride
    return expanded1, expanded2, tuple(out_shape)


def check_same_shape(a: Tensor, b: Tensor) -> None:
    if tuple(a.shape) != tuple(b.shape):
        raise ShapeMismatchError(
            f"Shapes {a.shape} and {b.shape} must match exactly."
        )


def check_matmul_shapes(a: Tensor, b: Tensor) -> Tuple[int, int, int]:
    """Validate operands of a matrix product.

    Returns
    -------
        (rows, inner, cols) of the product.

    """
    if a.dims != 2:
        raise RankError(f"First tensor is not a 2D matrix, shape {a.shape}.")
    if b.dims != 2:
        raise RankError(f"Second tensor is not a 2D matrix, shape {b.shape}.")
    if a.shape[1] != b.shape[0]:
        raise DimensionMismatchError(
            f"Dimensions do not match for matrix multiplication: {a.shape} @ {b.shape}."
        )
    return a.shape[0], a.shape[1], b.shape[1]


class SimpleOps(TensorOps):
    @staticmethod
    def zip(
        fn: Callable[[float, float], float],
    ) -> Callable[[Tensor, Tensor], Tensor]:
        """Higher-order tensor zip function ::

          fn_zip = zip(fn)
          out = fn_zip(a, b)

        Simple version ::

            for i:
                for j:
                    out[i, j] = fn(a[i, j], b[i, j])

        Broadcasted version (`a` and `b` might be smaller than `out`) ::

            for i:
                for j:
                    out[i, j] = fn(a[i, 0], b[0, j])


        Args:
        ----
            fn: function from two floats-to-float to apply

        Returns:
        -------
            function applying `fn` to two broadcast tensors

        """
        f = tensor_zip(fn)

        def ret(a: Tensor, b: Tensor) -> Tensor:
            a_storage, b_storage, c_shape = broadcast_storage(
                a.data, a.shape, b.data, b.shape
            )
            logger.debug("%s: %s with %s -> %s", fn.__name__, a.shape, b.shape, c_shape)
            out = a.zeros(c_shape)
            f(out.data, a_storage, b_storage)
            return out

        return ret

    @staticmethod
    def strict_zip(
        fn: Callable[[float, float], float],
    ) -> Callable[[Tensor, Tensor], Tensor]:
        """Higher-order zip that requires identical shapes.

        Args:
        ----
            fn: function from two floats-to-float to apply

        Returns:
        -------
            function applying `fn` positionally to two tensors of one shape.

        """
        f = tensor_zip(fn)

        def ret(a: Tensor, b: Tensor) -> Tensor:
            check_same_shape(a, b)
            out = a.zeros(a.shape)
            f(out.data, a.data, b.data)
            return out

        return ret

    @staticmethod
    def matrix_multiply(a: Tensor, b: Tensor) -> Tensor:
        """Triple loop matrix multiply.

        `out[i, j]` accumulates `a[i, k] * b[k, j]` from 0.0 in increasing
        `k`; rows are visited before columns.
        """
        rows, inner, cols = check_matmul_shapes(a, b)
        logger.debug("matmul: (%d, %d) @ (%d, %d)", rows, inner, inner, cols)
        out = a.zeros((rows, cols))
        tensor_matrix_multiply(out.data, a.data, b.data, rows, inner, cols)
        return out


# Implementations.


def tensor_zip(fn: Callable[[float, float], float]) -> ZipKernel:
    """Low-level implementation of tensor zip on buffers that were already
    broadcast to one length.

    Args:
    ----
        fn: function mapping two floats to float to apply.

    Returns:
    -------
        Tensor zip function.

    """

    def _zip(out: Storage, a_storage: Storage, b_storage: Storage) -> None:
        # float64 semantics for division by zero and overflow
        with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
            for i in range(len(out)):
                out[i] = fn(a_storage[i], b_storage[i])

    return _zip


def tensor_matrix_multiply(
    out: Storage,
    a_storage: Storage,
    b_storage: Storage,
    rows: int,
    inner: int,
    cols: int,
) -> None:
    for i in range(rows):
        for j in range(cols):
            acc = 0.0
            for k in range(inner):
                acc += a_storage[i * inner + k] * b_storage[k * cols + j]
            out[i * cols + j] = acc


SimpleBackend = TensorBackend(SimpleOps)
