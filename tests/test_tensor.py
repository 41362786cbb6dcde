import numpy as np
import pytest
from hypothesis import given

import tensorlite
from tensorlite import (
    IndexingError,
    InvalidShapeError,
    ShapeMismatchError,
    Tensor,
)

from .strategies import assert_close
from .tensor_strategies import shapes, tensors


@pytest.mark.construction
@given(shapes())
def test_new_is_zero_filled(shape) -> None:
    t = tensorlite.new(shape)
    assert t.shape == tuple(shape)
    assert t.size == tensorlite.operators.prod(shape)
    assert len(t.data) == t.size
    assert all(x == 0.0 for x in t.data)


@pytest.mark.construction
def test_new_scalar() -> None:
    t = tensorlite.new(())
    assert t.shape == ()
    assert t.dims == 0
    assert t.item() == 0.0


@pytest.mark.construction
def test_new_rejects_zero_extent() -> None:
    with pytest.raises(InvalidShapeError):
        tensorlite.new((2, 0, 3))
    with pytest.raises(InvalidShapeError):
        tensorlite.new((0,))


@pytest.mark.construction
def test_new_rejects_non_integer_extent() -> None:
    with pytest.raises(InvalidShapeError):
        tensorlite.new((2.7, 3))
    with pytest.raises(InvalidShapeError):
        tensorlite.new((2.0, 3))
    with pytest.raises(InvalidShapeError):
        tensorlite.new((True, 3))
    with pytest.raises(InvalidShapeError):
        tensorlite.from_data((1.5, 0), [1.0, 2.0, 3.0])

    # NumPy integers are extents like any other int.
    t = tensorlite.new((np.int64(2), 3))
    assert t.shape == (2, 3)
    assert all(type(s) is int for s in t.shape)


@pytest.mark.construction
@given(tensors())
def test_size_matches_data(t: Tensor) -> None:
    assert len(t.data) == tensorlite.operators.prod(t.shape)
    assert t.data.dtype == np.float64


@pytest.mark.construction
def test_from_data() -> None:
    t = tensorlite.from_data([2, 3], [1, 2, 3, 4, 5, 6])
    assert t.shape == (2, 3)
    assert t[0, 0] == 1.0
    assert t[1, 2] == 6.0
    assert t[0, 2] == 3.0


@pytest.mark.construction
def test_from_data_infers_placeholder() -> None:
    data = [1, 2, 3, 4, 5, 6]
    t = tensorlite.from_data([2, 0], data)
    assert t == tensorlite.from_data([2, 3], data)
    assert t.shape == (2, 3)

    t = tensorlite.from_data([0, 3], data)
    assert t.shape == (2, 3)

    t = tensorlite.from_data([0], data)
    assert t.shape == (6,)


@pytest.mark.construction
def test_from_data_errors() -> None:
    with pytest.raises(InvalidShapeError):
        tensorlite.from_data([0, 0], [1.0, 2.0])
    with pytest.raises(ShapeMismatchError):
        tensorlite.from_data([2, 2], [1.0, 2.0, 3.0])
    with pytest.raises(ShapeMismatchError):
        tensorlite.from_data([4, 0], [1.0, 2.0, 3.0, 4.0, 5.0, 6.0])
    with pytest.raises(InvalidShapeError):
        tensorlite.from_data([2, 0], [])


@pytest.mark.construction
def test_from_data_rejects_ragged_data() -> None:
    with pytest.raises(ShapeMismatchError):
        tensorlite.from_data([2, 0], [[1.0, 2.0], [3.0]])

    # Regular nesting is flattened in row-major order.
    t = tensorlite.from_data([2, 0], [[1.0, 2.0], [3.0, 4.0]])
    assert t.shape == (2, 2)
    assert t[1, 0] == 3.0


@pytest.mark.construction
def test_make_is_row_major() -> None:
    t = Tensor.make([1.0, 2.0, 3.0, 4.0, 5.0, 6.0], (2, 3))
    assert t[0, 1] == 2.0
    assert t[0, 1] == (t + tensorlite.new((1,)))[0, 1]
    with pytest.raises(TypeError):
        Tensor.make([1.0, 2.0, 3.0, 4.0, 5.0, 6.0], (2, 3), strides=(1, 2))


@pytest.mark.construction
def test_from_data_copies_input() -> None:
    source = np.array([1.0, 2.0, 3.0])
    t = tensorlite.from_data([3], source)
    source[0] = 100.0
    assert t[0] == 1.0


@pytest.mark.construction
def test_tensor_from_nested_lists() -> None:
    t = tensorlite.tensor([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]])
    assert t.shape == (2, 3)
    assert t[1, 0] == 4.0
    assert t.tolist() == [[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]]

    s = tensorlite.tensor(2.5)
    assert s.shape == ()
    assert s.item() == 2.5

    with pytest.raises(InvalidShapeError):
        tensorlite.tensor([])
    with pytest.raises(ShapeMismatchError):
        tensorlite.tensor([[1.0, 2.0], [3.0]])


@pytest.mark.construction
@given(shapes())
def test_ones_and_rand(shape) -> None:
    o = tensorlite.ones(shape)
    assert o.shape == tuple(shape)
    assert all(x == 1.0 for x in o.data)

    r = tensorlite.rand(shape)
    assert r.shape == tuple(shape)
    assert all(0.0 <= x < 1.0 for x in r.data)


@pytest.mark.construction
@given(tensors())
def test_clone(t: Tensor) -> None:
    c = t.clone()
    assert c == t
    assert c.backend is t.backend
    assert c.data is not t.data

    before = t.to_numpy()
    c.data[0] = c.data[0] + 1.0
    np.testing.assert_array_equal(t.to_numpy(), before)
    assert c != t


@pytest.mark.construction
def test_clone_function() -> None:
    t = tensorlite.from_data([2], [1.0, 2.0])
    assert tensorlite.clone(t) == t


@pytest.mark.construction
def test_in_place_data_update() -> None:
    "Callers apply elementwise transforms by writing to `data`."
    t = tensorlite.from_data([2, 2], [-1.0, 0.0, 1.0, 2.0])
    for i, x in enumerate(t.data):
        t.data[i] = 1.0 / (1.0 + np.exp(-x))
    assert_close(t[0, 0], 0.2689)
    assert_close(t[0, 1], 0.5)
    assert t.shape == (2, 2)


@pytest.mark.construction
def test_equality() -> None:
    a = tensorlite.from_data([2, 2], [1.0, 2.0, 3.0, 4.0])
    assert a == tensorlite.from_data([2, 2], [1.0, 2.0, 3.0, 4.0])
    assert a != tensorlite.from_data([4], [1.0, 2.0, 3.0, 4.0])
    assert a != tensorlite.from_data([2, 2], [1.0, 2.0, 3.0, 5.0])
    assert a != [1.0, 2.0, 3.0, 4.0]
    with pytest.raises(TypeError):
        hash(a)


@pytest.mark.construction
def test_is_close() -> None:
    a = tensorlite.from_data([2], [1.0, 2.0])
    assert a.is_close(tensorlite.from_data([2], [1.001, 2.0]))
    assert not a.is_close(tensorlite.from_data([2], [1.5, 2.0]))
    assert not a.is_close(tensorlite.from_data([1, 2], [1.0, 2.0]))


@pytest.mark.construction
def test_access_errors() -> None:
    t = tensorlite.from_data([2, 2], [1.0, 2.0, 3.0, 4.0])
    with pytest.raises(IndexingError):
        t[2, 0]
    with pytest.raises(IndexingError):
        t[0]
    with pytest.raises(IndexingError):
        t.item()


@pytest.mark.construction
def test_numpy_integer_keys() -> None:
    t = tensorlite.from_data([3], [1.0, 2.0, 3.0])
    assert t[np.int64(1)] == 2.0
    assert t[(np.int32(2),)] == 3.0
    with pytest.raises(IndexingError):
        t[np.int64(3)]

    m = tensorlite.from_data([2, 2], [1.0, 2.0, 3.0, 4.0])
    assert m[np.int64(1), np.int64(0)] == 3.0
    with pytest.raises(IndexingError):
        m[np.int64(1)]


@pytest.mark.construction
def test_to_numpy() -> None:
    t = tensorlite.from_data([2, 0], [1.0, 2.0, 3.0, 4.0, 5.0, 6.0])
    n = t.to_numpy()
    assert n.shape == (2, 3)
    assert n[1, 2] == 6.0
    n[0, 0] = 50.0
    assert t[0, 0] == 1.0


@pytest.mark.construction
def test_repr() -> None:
    t = tensorlite.from_data([3], [1.0, 2.0, 3.0])
    assert repr(t) == "\n[1.00 2.00 3.00]"
