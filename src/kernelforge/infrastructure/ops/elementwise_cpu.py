"""
CPU reference kernels for broadcasted binary operations.

The generic primitive `broadcasted_binary_op` walks every output element by
linear index, recovers its multi-index, zeros the components along which each
operand is broadcast, and re-linearizes to read the operands. `add` and
`subtract` are specializations of a scaled sum `c1*a + c2*b`.

`multiply` and `divide` use a modulo fast path (`a[i % a.size]`) when every
operand replicates a trailing block of the output (a scalar or a
trailing-suffix operand) and the general walk for any other broadcast.
"""

from __future__ import annotations

import math
from typing import Callable, Tuple, Union

import numpy as np

from ...domain._dtype import DType, get_nan, is_val_nan
from ...domain.shape._broadcast import (
    assert_and_get_broadcast_shape,
    get_broadcast_dims,
)
from ...domain.shape._indexing import (
    compute_strides,
    index_to_loc,
    loc_to_index,
    size_from_shape,
)
from ..tensor._tensor import Tensor, storage_dtype

Number = Union[int, float]


def broadcasted_binary_op(
    a: Tensor,
    b: Tensor,
    dtype: DType,
    op: Callable[[Number, Number], Number],
) -> Tensor:
    """
    Apply a scalar combinator over the broadcast of `a` and `b`.

    Parameters
    ----------
    a, b : Tensor
        Operands; their shapes must be broadcast-compatible.
    dtype : DType
        Output element type.
    op : Callable[[number, number], number]
        Scalar combinator applied to each aligned pair of elements.

    Returns
    -------
    Tensor
        New tensor of the broadcast shape.

    Raises
    ------
    ShapeMismatchError
        If the shapes cannot be broadcast together.
    """
    out_shape = assert_and_get_broadcast_shape(a.shape, b.shape)
    out_strides = compute_strides(out_shape)
    out_size = size_from_shape(out_shape)

    a_vals = a.values().tolist()
    b_vals = b.values().tolist()
    a_rank, b_rank = a.rank, b.rank
    a_bcast = get_broadcast_dims(a.shape, out_shape)
    b_bcast = get_broadcast_dims(b.shape, out_shape)

    out = [0] * out_size
    for i in range(out_size):
        loc = index_to_loc(i, out_shape, out_strides)

        a_loc = loc[len(loc) - a_rank :]
        for d in a_bcast:
            a_loc[d] = 0
        b_loc = loc[len(loc) - b_rank :]
        for d in b_bcast:
            b_loc[d] = 0

        out[i] = op(
            a_vals[loc_to_index(a_loc, a.strides)],
            b_vals[loc_to_index(b_loc, b.strides)],
        )
    return Tensor.make(out_shape, np.asarray(out, dtype=storage_dtype(dtype)), dtype)


def _scaled_array_add(c1: float, a: Tensor, c2: float, b: Tensor) -> Tensor:
    return broadcasted_binary_op(
        a, b, DType.FLOAT32, lambda x, y: c1 * x + c2 * y
    )


def add_cpu(a: Tensor, b: Tensor) -> Tensor:
    """Broadcasted `a + b` (float32 output)."""
    return _scaled_array_add(1.0, a, 1.0, b)


def subtract_cpu(a: Tensor, b: Tensor) -> Tensor:
    """Broadcasted `a - b` (float32 output)."""
    return _scaled_array_add(1.0, a, -1.0, b)


def _is_trailing_block(shape: Tuple[int, ...], out_shape: Tuple[int, ...]) -> bool:
    """True if `shape`, ignoring leading 1s, equals the tail of `out_shape`."""
    dims = list(shape)
    while dims and dims[0] == 1:
        dims.pop(0)
    if not dims:
        return True
    return tuple(dims) == tuple(out_shape[len(out_shape) - len(dims) :])


def _modulo_binary(a: Tensor, b: Tensor, op: Callable[[float, float], float]) -> Tensor:
    out_shape = assert_and_get_broadcast_shape(a.shape, b.shape)
    if not (
        _is_trailing_block(a.shape, out_shape)
        and _is_trailing_block(b.shape, out_shape)
    ):
        return broadcasted_binary_op(a, b, DType.FLOAT32, op)
    out_size = size_from_shape(out_shape)
    a_vals = a.values().tolist()
    b_vals = b.values().tolist()
    a_size, b_size = a.size, b.size
    out = [op(a_vals[i % a_size], b_vals[i % b_size]) for i in range(out_size)]
    return Tensor.make(out_shape, np.asarray(out, dtype=np.float32), DType.FLOAT32)


def multiply_cpu(a: Tensor, b: Tensor) -> Tensor:
    """
    Broadcasted `a * b` (float32 output).

    Scalar and suffix-shaped operands take the modulo fast path.
    """
    return _modulo_binary(a, b, lambda x, y: x * y)


def _divide(x: float, y: float) -> float:
    if y == 0:
        if x == 0 or math.isnan(x):
            return math.nan
        return math.copysign(math.inf, x) * math.copysign(1.0, y)
    return x / y


def divide_cpu(a: Tensor, b: Tensor) -> Tensor:
    """
    Broadcasted `a / b`, always float32.

    Division by zero follows IEEE semantics (`±inf`, or NaN for `0/0`).
    """
    return _modulo_binary(a, b, _divide)


def neg_cpu(x: Tensor) -> Tensor:
    """`-x`, expressed as multiplication by the scalar -1."""
    return multiply_cpu(Tensor.scalar(-1.0), x)


def equal_cpu(a: Tensor, b: Tensor) -> Tensor:
    """
    Broadcasted equality with NaN propagation.

    Returns a bool tensor: 1 where equal, 0 where not, and the bool NaN
    sentinel where either operand element is NaN under its own dtype.
    """
    a_dtype, b_dtype = a.dtype, b.dtype
    nan_bool = get_nan(DType.BOOL)

    def _eq(x: Number, y: Number) -> Number:
        if is_val_nan(x, a_dtype) or is_val_nan(y, b_dtype):
            return nan_bool
        return 1 if x == y else 0

    return broadcasted_binary_op(a, b, DType.BOOL, _eq)
