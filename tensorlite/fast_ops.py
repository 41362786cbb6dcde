from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, TypeVar

from numba import njit as _njit
from numba import prange

from .tensor_ops import (
    TensorBackend,
    TensorOps,
    broadcast_storage,
    check_matmul_shapes,
    check_same_shape,
)

if TYPE_CHECKING:
    from .tensor import Tensor
    from .tensor_data import Storage

logger = logging.getLogger(__name__)

# This code will JIT compile fast versions of the tensor kernels.
# If you get an error, read the docs for NUMBA as to what is allowed
# in these functions.

Fn = TypeVar("Fn")


def njit(fn: Fn, **kwargs: Any) -> Fn:
    """JIT compile `fn` with numba.

    The numpy error model makes float division by zero produce inf/nan
    instead of raising ZeroDivisionError.
    """
    return _njit(inline="always", error_model="numpy", **kwargs)(fn)  # type: ignore


class FastOps(TensorOps):
    @staticmethod
    def zip(
        fn: Callable[[float, float], float],
    ) -> Callable[[Tensor, Tensor], Tensor]:
        """See `tensor_ops.py`"""
        f = tensor_zip(njit(fn))

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
        """See `tensor_ops.py`"""
        f = tensor_zip(njit(fn))

        def ret(a: Tensor, b: Tensor) -> Tensor:
            check_same_shape(a, b)
            out = a.zeros(a.shape)
            f(out.data, a.data, b.data)
            return out

        return ret

    @staticmethod
    def matrix_multiply(a: Tensor, b: Tensor) -> Tensor:
        """Batched over rows, parallel version of the triple loop.

        Each output cell is still summed in increasing `k`, so results are
        identical to `SimpleOps.matrix_multiply`.

        Args:
        ----
            a : tensor data a, shape (n, m)
            b : tensor data b, shape (m, p)

        Returns:
        -------
            New tensor data of shape (n, p)

        """
        rows, inner, cols = check_matmul_shapes(a, b)
        logger.debug("matmul: (%d, %d) @ (%d, %d)", rows, inner, inner, cols)
        out = a.zeros((rows, cols))
        tensor_matrix_multiply(out.data, a.data, b.data, rows, inner, cols)
        return out


# Implementations


def tensor_zip(
    fn: Callable[[float, float], float],
) -> Callable[[Storage, Storage, Storage], None]:
    """NUMBA higher-order positional zip on already broadcast buffers.

    Optimizations:

    * Main loop in parallel
    * No index buffers, both inputs are laid out like `out`

    Args:
    ----
        fn: function maps two floats to float to apply.

    Returns:
    -------
        Tensor zip function.

    """

    def _zip(out: Storage, a_storage: Storage, b_storage: Storage) -> None:
        for i in prange(len(out)):
            out[i] = fn(a_storage[i], b_storage[i])

    return njit(_zip, parallel=True)  # type: ignore


def _tensor_matrix_multiply(
    out: Storage,
    a_storage: Storage,
    b_storage: Storage,
    rows: int,
    inner: int,
    cols: int,
) -> None:
    """NUMBA matrix multiply function on contiguous row-major buffers.

    * Outer loop (rows) in parallel
    * Inner `k` loop accumulates in order into a local, one write per cell

    Returns:
    -------
        None : Fills in `out`

    """
    for i in prange(rows):
        for j in range(cols):
            acc = 0.0
            for k in range(inner):
                acc += a_storage[i * inner + k] * b_storage[k * cols + j]
            out[i * cols + j] = acc


tensor_matrix_multiply = njit(_tensor_matrix_multiply, parallel=True)
assert tensor_matrix_multiply is not None

FastBackend = TensorBackend(FastOps)
