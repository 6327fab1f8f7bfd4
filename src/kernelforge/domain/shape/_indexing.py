"""
Row-major index arithmetic.

Helpers converting between linear buffer offsets and multi-indices for a
contiguous, row-major (last axis fastest) layout. Shared by the Tensor type
and by kernels that walk output buffers by linear index.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple


def size_from_shape(shape: Sequence[int]) -> int:
    """Number of elements of a tensor with `shape` (1 for a scalar)."""
    size = 1
    for d in shape:
        size *= int(d)
    return size


def compute_strides(shape: Sequence[int]) -> Tuple[int, ...]:
    """
    Row-major strides of `shape`.

    `stride[d] = product(shape[d+1:])`, so the last axis has stride 1.
    """
    rank = len(shape)
    strides = [1] * rank
    for d in range(rank - 2, -1, -1):
        strides[d] = strides[d + 1] * int(shape[d + 1])
    return tuple(strides)


def index_to_loc(index: int, shape: Sequence[int], strides: Sequence[int]) -> List[int]:
    """
    Convert a linear offset into a multi-index.

    Parameters
    ----------
    index : int
        Linear offset into the row-major buffer.
    shape : Sequence[int]
        Tensor shape.
    strides : Sequence[int]
        Strides from `compute_strides(shape)`.

    Returns
    -------
    list[int]
        The multi-index `(i0, ..., ik)`; empty for a scalar.
    """
    loc = [0] * len(shape)
    for d in range(len(shape) - 1):
        loc[d] = index // strides[d]
        index -= loc[d] * strides[d]
    if shape:
        loc[-1] = index
    return loc


def loc_to_index(loc: Sequence[int], strides: Sequence[int]) -> int:
    """Convert a multi-index into a linear offset: `sum(i_d * stride_d)`."""
    index = 0
    for i, s in zip(loc, strides):
        index += int(i) * s
    return index
