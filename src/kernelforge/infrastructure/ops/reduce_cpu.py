"""
CPU reference kernels for reductions over trailing axes.

Every reduction requires the reduced axes to be the innermost axes of the
input, so each output element owns a contiguous window of
`reduce_size = product(reduced dims)` input elements starting at
`i * reduce_size`.

NaN policy
----------
- `min`/`max`: the first NaN seen in a window sets the result to NaN and ends
  the scan (fail-fast rather than IEEE total order).
- `arg_min`/`arg_max`: the first NaN seen sets the index to `NAN_INT32` and
  ends the scan.
- `sum`: NaN propagates through ordinary addition.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

import numpy as np

from ...domain._dtype import NAN_INT32, SUM_DTYPES, DType, get_nan, is_val_nan
from ...domain.shape._axis import (
    assert_axes_are_inner_most_dims,
    compute_out_and_reduce_shapes,
)
from ...domain.shape._indexing import size_from_shape
from ..tensor._tensor import Tensor, storage_dtype


def _windows(
    op: str, x: Tensor, axes: Sequence[int]
) -> Tuple[Tuple[int, ...], int, List]:
    axes = list(axes)
    assert_axes_are_inner_most_dims(op, axes, x.rank)
    out_shape, reduce_shape = compute_out_and_reduce_shapes(x.shape, axes)
    return out_shape, size_from_shape(reduce_shape), x.values().tolist()


def _wrap_int32(value: int) -> int:
    return ((value + 2**31) % 2**32) - 2**31


def sum_cpu(x: Tensor, axes: Sequence[int]) -> Tensor:
    """
    Sum over the trailing `axes`.

    Output dtype is float32 for float32 input and int32 for int32/bool input.
    Integer sums wrap around to the int32 range.
    """
    out_shape, reduce_size, vals = _windows("sum", x, axes)
    out_size = size_from_shape(out_shape)
    out_dtype = SUM_DTYPES[x.dtype]

    out = [0] * out_size
    for i in range(out_size):
        offset = i * reduce_size
        total = 0
        for j in range(reduce_size):
            total += vals[offset + j]
        if out_dtype is not DType.FLOAT32:
            total = _wrap_int32(total)
        out[i] = total
    return Tensor.make(out_shape, np.asarray(out, dtype=storage_dtype(out_dtype)), out_dtype)


def _min_max(op: str, x: Tensor, axes: Sequence[int], take_min: bool) -> Tensor:
    out_shape, reduce_size, vals = _windows(op, x, axes)
    out_size = size_from_shape(out_shape)
    dtype = x.dtype
    nan = get_nan(dtype)

    out = [0] * out_size
    for i in range(out_size):
        offset = i * reduce_size
        best = vals[offset]
        for j in range(reduce_size):
            value = vals[offset + j]
            if is_val_nan(value, dtype):
                best = nan
                break
            if (take_min and value < best) or (not take_min and value > best):
                best = value
        out[i] = best
    return Tensor.make(out_shape, np.asarray(out, dtype=storage_dtype(dtype)), dtype)


def min_cpu(x: Tensor, axes: Sequence[int]) -> Tensor:
    """Minimum over the trailing `axes`; dtype-preserving, NaN fails fast."""
    return _min_max("min", x, axes, take_min=True)


def max_cpu(x: Tensor, axes: Sequence[int]) -> Tensor:
    """Maximum over the trailing `axes`; dtype-preserving, NaN fails fast."""
    return _min_max("max", x, axes, take_min=False)


def _arg_min_max(op: str, x: Tensor, axes: Sequence[int], take_min: bool) -> Tensor:
    out_shape, reduce_size, vals = _windows(op, x, axes)
    out_size = size_from_shape(out_shape)
    dtype = x.dtype

    out = [0] * out_size
    for i in range(out_size):
        offset = i * reduce_size
        best = vals[offset]
        best_index = 0
        for j in range(reduce_size):
            value = vals[offset + j]
            if is_val_nan(value, dtype):
                best_index = NAN_INT32
                break
            if (take_min and value < best) or (not take_min and value > best):
                best = value
                best_index = j
        out[i] = best_index
    return Tensor.make(out_shape, np.asarray(out, dtype=np.int32), DType.INT32)


def arg_min_cpu(x: Tensor, axes: Sequence[int]) -> Tensor:
    """
    Index of the minimum within each trailing window (int32).

    Ties resolve to the first occurrence; a NaN yields `NAN_INT32`.
    """
    return _arg_min_max("argMin", x, axes, take_min=True)


def arg_max_cpu(x: Tensor, axes: Sequence[int]) -> Tensor:
    """
    Index of the maximum within each trailing window (int32).

    Ties resolve to the first occurrence; a NaN yields `NAN_INT32`.
    """
    return _arg_min_max("argMax", x, axes, take_min=False)
