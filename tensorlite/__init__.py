"""tensorlite: a minimal N-dimensional float64 tensor library.

This package provides a flat-buffer tensor with NumPy-style broadcasting and
strict 2D matrix operations. It includes:

- operators: Scalar functions used by the tensor kernels.
- tensor_data: Shape, stride and storage handling, and the error types.
- tensor_ops: The broadcasting engine, strict matrix operations and the simple backend.
- tensor: The Tensor object and its operator surface.
- tensor_functions: Constructors (`new`, `from_data`, ...) and named operations.

This project also includes a numba-compiled backend in the `fast_ops` module.
It runs the same kernels in parallel and gives identical results.

- fast_ops: Fast, parallel implementations of the tensor kernels using the Numba library.

"""

import logging

from .tensor_data import *  # noqa: F401,F403
from .tensor import *  # noqa: F401,F403
from .tensor_ops import *  # noqa: F401,F403
from .tensor_functions import *  # noqa: F401,F403
from .fast_ops import *  # noqa: F401,F403
from . import operators, fast_ops  # noqa: F401,F403

logging.getLogger(__name__).addHandler(logging.NullHandler())
