from __future__ import annotations

import numbers
import random
from typing import Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np
import numpy.typing as npt
from numpy import array, float64

from .operators import prod


class TensorError(RuntimeError):
    """Base class for tensor contract violations."""

    pass


class IndexingError(TensorError):
    """Exception raised for indexing errors."""

    pass


class InvalidShapeError(TensorError):
    """A shape has a non-positive or non-integer extent, or more than one inferred axis."""

    pass


class ShapeMismatchError(TensorError):
    """Data length or operand shape does not match the required shape."""

    pass


class RankError(TensorError):
    """An operand has the wrong number of dimensions."""

    pass


class DimensionMismatchError(TensorError):
    """Inner dimensions of a matrix product differ."""

    pass


class BroadcastError(TensorError):
    """Two shapes cannot be broadcast together.

    Attributes
    ----------
        axis : axis of the broadcast result where the extents clash.
        dim1 : extent of the first operand on that axis.
        dim2 : extent of the second operand on that axis.

    """

    def __init__(self, shape1: UserShape, shape2: UserShape, axis: int, dim1: int, dim2: int):
        self.axis = axis
        self.dim1 = dim1
        self.dim2 = dim2
        super().__init__(
            f"Shapes {tuple(shape1)} and {tuple(shape2)} could not be broadcast "
            f"together: axis {axis} has extents {dim1} and {dim2}."
        )


Storage = npt.NDArray[np.float64]
OutIndex = npt.NDArray[np.int32]
Index = npt.NDArray[np.int32]
Shape = npt.NDArray[np.int32]
Strides = npt.NDArray[np.int32]

UserIndex = Sequence[int]
UserShape = Sequence[int]
UserStrides = Sequence[int]


def index_to_position(index: Index, strides: Strides) -> int:
    """Converts a multidimensional tensor `index` into a single-dimensional position in
    storage based on strides.

    Args:
    ----
        index : index tuple of ints
        strides : tensor strides

    Returns:
    -------
        Position in storage

    """
    position = 0
    for ind, stride in zip(index, strides):
        position += ind * stride
    return position


def to_index(ordinal: int, shape: Shape, out_index: OutIndex) -> None:
    """Convert an `ordinal` to an index in the `shape`.
    Should ensure that enumerating position 0 ... size of a
    tensor produces every index exactly once.

    Args:
    ----
        ordinal: ordinal position to convert.
        shape : tensor shape.
        out_index : return index corresponding to position.

    """
    cur_ord = ordinal + 0
    for i in range(len(shape) - 1, -1, -1):
        sh = shape[i]
        out_index[i] = int(cur_ord % sh)
        cur_ord = cur_ord // sh


def broadcast_index(
    big_index: Index, big_shape: Shape, shape: Shape, out_index: OutIndex
) -> None:
    """Convert a `big_index` into `big_shape` to a smaller `out_index`
    into `shape` following broadcasting rules. In this case
    it may be larger or with more dimensions than the `shape`
    given. Additional dimensions may need to be mapped to 0 or
    removed.

    Args:
    ----
        big_index : multidimensional index of bigger tensor
        big_shape : tensor shape of bigger tensor
        shape : tensor shape of smaller tensor
        out_index : multidimensional index of smaller tensor

    """
    for i, s in enumerate(shape):
        if s > 1:
            out_index[i] = big_index[i + (len(big_shape) - len(shape))]
        else:
            out_index[i] = 0


def shape_broadcast(shape1: UserShape, shape2: UserShape) -> UserShape:
    """Broadcast two shapes to create a new union shape.

    Args:
    ----
        shape1 : first shape
        shape2 : second shape

    Returns:
    -------
        broadcasted shape

    Raises:
    ------
        BroadcastError : if cannot broadcast

    """
    len1, len2 = len(shape1), len(shape2)
    m = max(len1, len2)
    c_rev = []
    for i in range(m):
        dim1 = shape1[len1 - 1 - i] if i < len1 else 1
        dim2 = shape2[len2 - 1 - i] if i < len2 else 1
        if dim1 != dim2 and dim1 != 1 and dim2 != 1:
            raise BroadcastError(shape1, shape2, m - 1 - i, dim1, dim2)
        c_rev.append(max(dim1, dim2))
    return tuple(reversed(c_rev))


def strides_from_shape(shape: UserShape) -> UserStrides:
    """Return a contiguous (row-major) stride for a shape."""
    layout = [1]
    offset = 1
    for s in reversed(shape):
        layout.append(s * offset)
        offset = s * offset
    return tuple(reversed(layout[:-1]))


def shape_extents(shape: UserShape) -> List[int]:
    """Extents of `shape` as python ints. Floats and bools are not extents."""
    extents = []
    for s in shape:
        if isinstance(s, bool) or not isinstance(s, numbers.Integral):
            raise InvalidShapeError(
                f"Shape {tuple(shape)} has extent {s!r}; extents must be integers."
            )
        extents.append(int(s))
    return extents


def validate_shape(shape: UserShape) -> Tuple[int, ...]:
    """Check that every extent of `shape` is a positive integer.

    Raises:
    ------
        InvalidShapeError : on a zero, negative or non-integer extent.

    """
    shape = tuple(shape_extents(shape))
    for axis, s in enumerate(shape):
        if s <= 0:
            raise InvalidShapeError(
                f"Shape {shape} has extent {s} on axis {axis}; extents must be positive."
            )
    return shape


def infer_shape(shape: UserShape, size: int) -> Tuple[int, ...]:
    """Resolve a shape with at most one placeholder axis (extent 0) against
    a data length.

    The placeholder becomes `size // prod(known extents)`.

    Args:
    ----
        shape : requested shape, possibly with one 0 extent.
        size : number of data elements.

    Returns:
    -------
        Fully specified shape whose product is `size`.

    Raises:
    ------
        InvalidShapeError : more than one placeholder, a negative or
            non-integer extent, or an inferred extent of 0.
        ShapeMismatchError : the shape product does not equal `size`.

    """
    resolved = shape_extents(shape)
    if any(s < 0 for s in resolved):
        raise InvalidShapeError(f"Shape {tuple(resolved)} has a negative extent.")
    placeholders = [axis for axis, s in enumerate(resolved) if s == 0]
    if len(placeholders) > 1:
        raise InvalidShapeError(
            f"Only one dimension can be inferred, shape {tuple(resolved)} has {len(placeholders)}."
        )
    if placeholders:
        known = int(prod(s for s in resolved if s != 0))
        resolved[placeholders[0]] = size // known
    if prod(resolved) != size:
        raise ShapeMismatchError(
            f"Shape {tuple(resolved)} holds {prod(resolved)} elements, data has {size}."
        )
    return validate_shape(resolved)


class TensorData:
    _storage: Storage
    _strides: Strides
    strides: UserStrides
    shape: UserShape
    dims: int

    def __init__(
        self,
        storage: Union[Sequence[float], Storage],
        shape: UserShape,
        strides: Optional[UserStrides] = None,
    ):
        if isinstance(storage, np.ndarray) and storage.dtype == float64:
            self._storage = storage
        else:
            self._storage = array(storage, dtype=float64)

        shape = validate_shape(shape)
        row_major = strides_from_shape(shape)
        if strides is None:
            strides = row_major

        # Kernels assume row-major storage.
        if tuple(strides) != row_major:
            raise IndexingError(
                f"Strides {tuple(strides)} are not the row-major strides {row_major} of {shape}."
            )
        self._strides = array(row_major)
        self.strides = row_major
        self.dims = len(strides)
        self.size = int(prod(shape))
        self.shape = shape
        if self._storage.ndim != 1 or len(self._storage) != self.size:
            raise ShapeMismatchError(
                f"The product of the shape {shape} must match the data length {self._storage.size}."
            )

    def index(self, index: Union[int, UserIndex]) -> int:
        if isinstance(index, numbers.Integral):
            aindex: Index = array([index], dtype=np.int64)
        else:
            aindex = array(index, dtype=np.int64)

        if aindex.ndim != 1 or aindex.shape[0] != len(self.shape):
            raise IndexingError(f"Index {tuple(aindex)} must be size of {self.shape}.")
        for i, ind in enumerate(aindex):
            if ind >= self.shape[i]:
                raise IndexingError(f"Index {tuple(aindex)} out of range {self.shape}.")
            if ind < 0:
                raise IndexingError(f"Negative indexing for {tuple(aindex)} not supported.")

        return int(index_to_position(aindex, self._strides))

    def indices(self) -> Iterable[UserIndex]:
        lshape: Shape = array(self.shape)
        out_index: Index = array(self.shape)
        for i in range(self.size):
            to_index(i, lshape, out_index)
            yield tuple(int(x) for x in out_index)

    def sample(self) -> UserIndex:
        """Get a random valid index"""
        return tuple((random.randint(0, s - 1) for s in self.shape))

    def get(self, key: UserIndex) -> float:
        x: float = float(self._storage[self.index(key)])
        return x

    def copy(self) -> TensorData:
        """Deep copy of storage and shape."""
        return TensorData(self._storage.copy(), self.shape)

    def to_string(self) -> str:
        """Convert to string"""
        if self.dims == 0:
            return f"{self._storage[0]:3.2f}"
        s = ""
        for index in self.indices():
            l = ""
            for i in range(len(index) - 1, -1, -1):
                if index[i] == 0:
                    l = "\n%s[" % ("\t" * i) + l
                else:
                    break
            s += l
            v = self.get(index)
            s += f"{v:3.2f}"
            l = ""
            for i in range(len(index) - 1, -1, -1):
                if index[i] == self.shape[i] - 1:
                    l += "]"
                else:
                    break
            if l:
                s += l
            else:
                s += " "
        return s
