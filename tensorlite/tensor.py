"""Implementation of the core Tensor object."""

from __future__ import annotations

import numbers
from typing import TYPE_CHECKING, Any, List, Optional, Union

import numpy as np

from . import operators
from .tensor_data import IndexingError, TensorData
from .tensor_ops import SimpleBackend, TensorBackend

if TYPE_CHECKING:
    import numpy.typing as npt

    from .tensor_data import Storage, UserIndex, UserShape

    TensorLike = Union[float, int, "Tensor"]


class Tensor:
    """Tensor is a flat, row-major buffer of float64 values with a shape.

    Arithmetic (`+ - * /`) broadcasts; `@`, `matmul`, `matadd` and `matsub`
    are strict 2D matrix operations. Every operation returns a new tensor
    with its own storage; operands are never modified.
    """

    backend: TensorBackend
    _tensor: TensorData

    def __init__(self, v: TensorData, backend: Optional[TensorBackend] = None):
        assert isinstance(v, TensorData)
        self._tensor = v
        self.backend = backend if backend is not None else SimpleBackend
        self.f = self.backend

    @staticmethod
    def make(
        storage: Union[Storage, List[float]],
        shape: UserShape,
        backend: Optional[TensorBackend] = None,
    ) -> Tensor:
        """Create a new tensor from data"""
        return Tensor(TensorData(storage, shape), backend=backend)

    # Properties
    @property
    def shape(self) -> UserShape:
        """Returns
        shape of the tensor

        """
        return self._tensor.shape

    @property
    def data(self) -> Storage:
        """The flat row-major storage.

        Writing to it changes the tensor in place. This is how callers apply
        elementwise transforms (activations and the like) without a copy.
        """
        return self._tensor._storage

    @property
    def size(self) -> int:
        """Returns
        int : size of the tensor

        """
        return self._tensor.size

    @property
    def dims(self) -> int:
        """Returns
        int : dimensionality of the tensor

        """
        return self._tensor.dims

    def _ensure_tensor(self, b: TensorLike) -> Tensor:
        """Turns a python number into a tensor with the same backend."""
        if isinstance(b, (int, float)):
            c = Tensor.make([b], (1,), backend=self.backend)
        else:
            c = b
        return c

    # Broadcasting arithmetic
    def __add__(self, b: TensorLike) -> Tensor:
        return self.f.add_zip(self, self._ensure_tensor(b))

    def __sub__(self, b: TensorLike) -> Tensor:
        return self.f.sub_zip(self, self._ensure_tensor(b))

    def __mul__(self, b: TensorLike) -> Tensor:
        return self.f.mul_zip(self, self._ensure_tensor(b))

    def __truediv__(self, b: TensorLike) -> Tensor:
        return self.f.div_zip(self, self._ensure_tensor(b))

    def __radd__(self, b: TensorLike) -> Tensor:
        return self.f.add_zip(self._ensure_tensor(b), self)

    def __rsub__(self, b: TensorLike) -> Tensor:
        return self.f.sub_zip(self._ensure_tensor(b), self)

    def __rmul__(self, b: TensorLike) -> Tensor:
        return self.f.mul_zip(self._ensure_tensor(b), self)

    def __rtruediv__(self, b: TensorLike) -> Tensor:
        return self.f.div_zip(self._ensure_tensor(b), self)

    def __neg__(self) -> Tensor:
        return self.f.mul_zip(self, self._ensure_tensor(-1.0))

    def __matmul__(self, b: Tensor) -> Tensor:
        return self.f.matrix_multiply(self, b)

    def add(self, b: TensorLike) -> Tensor:
        return self + b

    def sub(self, b: TensorLike) -> Tensor:
        return self - b

    def mul(self, b: TensorLike) -> Tensor:
        return self * b

    def div(self, b: TensorLike) -> Tensor:
        return self / b

    # Strict matrix operations
    def matmul(self, b: Tensor) -> Tensor:
        """Matrix product of two 2D tensors, shape (n, m) @ (m, p) -> (n, p)."""
        return self.f.matrix_multiply(self, b)

    def matadd(self, b: Tensor) -> Tensor:
        """Elementwise sum of two tensors of exactly the same shape."""
        return self.f.matadd(self, b)

    def matsub(self, b: Tensor) -> Tensor:
        """Elementwise difference of two tensors of exactly the same shape."""
        return self.f.matsub(self, b)

    # Comparison
    def __eq__(self, b: object) -> bool:
        if not isinstance(b, Tensor):
            return NotImplemented
        return tuple(self.shape) == tuple(b.shape) and bool(
            np.array_equal(self.data, b.data)
        )

    __hash__ = None  # type: ignore

    def is_close(self, b: Tensor) -> bool:
        """Same shape and every element within `operators.is_close`."""
        if tuple(self.shape) != tuple(b.shape):
            return False
        return all(operators.is_close(x, y) for x, y in zip(self.data, b.data))

    # Access
    def item(self) -> float:
        """Convert a 1-element tensor to a float"""
        if self.size != 1:
            raise IndexingError(f"Only single element tensors have an item, got shape {self.shape}.")
        x: float = float(self.data[0])
        return x

    def __getitem__(self, key: Union[int, UserIndex]) -> float:
        key2 = (key,) if isinstance(key, numbers.Integral) else key
        return self._tensor.get(key2)

    def to_numpy(self) -> npt.NDArray[np.float64]:
        """Returns
        Converted to numpy array

        """
        return self.data.copy().reshape(self.shape)

    def tolist(self) -> Any:
        """Nested python lists (a float for 0-d tensors)."""
        return self.to_numpy().tolist()

    def __repr__(self) -> str:
        return self._tensor.to_string()

    # Internal methods used for construction
    def zeros(self, shape: Optional[UserShape] = None) -> Tensor:
        """Zero tensor on the same backend, of `shape` or of this tensor's shape."""
        if shape is None:
            shape = self.shape
        return Tensor.make(
            np.zeros(int(operators.prod(shape)), dtype=np.float64),
            tuple(shape),
            backend=self.backend,
        )

    def clone(self) -> Tensor:
        """Deep copy: new shape tuple and new storage on the same backend."""
        return Tensor(self._tensor.copy(), backend=self.backend)
