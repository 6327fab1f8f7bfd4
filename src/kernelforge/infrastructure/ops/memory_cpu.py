"""
CPU reference kernels for layout operations: clone, slice, concat, tile and
transpose.

Every kernel copies into a new buffer; outputs never alias their inputs.
All of these preserve the input dtype.
"""

from __future__ import annotations

from typing import List, Sequence

import numpy as np

from ...domain._errors import InvalidArgumentError, UnsupportedDTypeError
from ...domain.shape._concat import assert_valid_slice, compute_concat_out_shape
from ...domain.shape._indexing import (
    compute_strides,
    index_to_loc,
    loc_to_index,
    size_from_shape,
)
from ..tensor._tensor import STORAGE_DTYPES, Tensor, storage_dtype


def clone_cpu(x: Tensor) -> Tensor:
    """Copy `x` into a fresh buffer with the same shape and dtype."""
    return Tensor.make(x.shape, x.values().copy(), x.dtype)


def slice_cpu(
    x: Tensor, begin: Sequence[int], size: Sequence[int], rank: int
) -> Tensor:
    """
    Copy the block `[begin, begin + size)` out of a rank-`rank` tensor.

    Raises
    ------
    ShapeMismatchError
        If `x` is not of the expected rank.
    InvalidArgumentError
        If the block is out of bounds.
    """
    x.expect_rank(rank, "x")
    begin = [int(v) for v in begin]
    size = [int(v) for v in size]
    assert_valid_slice(x.shape, begin, size)

    vals = x.values()
    out_size = size_from_shape(size)
    out_strides = compute_strides(size)
    out = np.empty(out_size, dtype=storage_dtype(x.dtype))
    for i in range(out_size):
        loc = index_to_loc(i, size, out_strides)
        src = [loc[d] + begin[d] for d in range(rank)]
        out[i] = vals[loc_to_index(src, x.strides)]
    return Tensor.make(tuple(size), out, x.dtype)


def concat_cpu(a: Tensor, b: Tensor, axis: int, rank: int) -> Tensor:
    """
    Concatenate two rank-`rank` tensors along `axis`.

    Along axis 0 the result is a plain append of the two flat buffers;
    otherwise each output position reads from `a` or from `b` depending on
    whether its `axis` coordinate falls before `a.shape[axis]`.
    """
    a.expect_rank(rank, "a")
    b.expect_rank(rank, "b")
    if a.dtype is not b.dtype:
        raise UnsupportedDTypeError("concat of mixed dtypes", f"{a.dtype}/{b.dtype}")
    out_shape = compute_concat_out_shape(a.shape, b.shape, int(axis))

    if axis == 0:
        out = np.concatenate([a.values(), b.values()])
        return Tensor.make(out_shape, out, a.dtype)

    a_vals, b_vals = a.values(), b.values()
    out_strides = compute_strides(out_shape)
    out_size = size_from_shape(out_shape)
    split = a.shape[axis]
    out = np.empty(out_size, dtype=storage_dtype(a.dtype))
    for i in range(out_size):
        loc = index_to_loc(i, out_shape, out_strides)
        if loc[axis] < split:
            out[i] = a_vals[loc_to_index(loc, a.strides)]
        else:
            loc[axis] -= split
            out[i] = b_vals[loc_to_index(loc, b.strides)]
    return Tensor.make(out_shape, out, a.dtype)


def tile_cpu(x: Tensor, reps: Sequence[int]) -> Tensor:
    """
    Repeat `x` `reps[d]` times along each axis `d`.

    Raises
    ------
    UnsupportedDTypeError
        If `x` has a dtype the kernel does not handle.
    InvalidArgumentError
        If `reps` does not have one positive entry per axis.
    """
    if x.dtype not in STORAGE_DTYPES:
        raise UnsupportedDTypeError("tile", x.dtype)
    reps = [int(r) for r in reps]
    if len(reps) != x.rank or any(r <= 0 for r in reps):
        raise InvalidArgumentError(
            f"tile reps {tuple(reps)} must have {x.rank} positive entries"
        )
    new_shape = tuple(x.shape[d] * reps[d] for d in range(x.rank))

    vals = x.values()
    out_strides = compute_strides(new_shape)
    out_size = size_from_shape(new_shape)
    out = np.empty(out_size, dtype=storage_dtype(x.dtype))
    for i in range(out_size):
        new_loc = index_to_loc(i, new_shape, out_strides)
        src_loc = [new_loc[d] % x.shape[d] for d in range(x.rank)]
        out[i] = vals[loc_to_index(src_loc, x.strides)]
    return Tensor.make(new_shape, out, x.dtype)


def _check_perm(perm: Sequence[int], rank: int) -> List[int]:
    perm = [int(p) for p in perm]
    if sorted(perm) != list(range(rank)):
        raise InvalidArgumentError(
            f"perm {tuple(perm)} is not a permutation of the {rank} axes"
        )
    return perm


def inverse_permutation(perm: Sequence[int]) -> List[int]:
    """Permutation that undoes `perm`: `inv[perm[i]] = i`."""
    perm = _check_perm(perm, len(perm))
    inv = [0] * len(perm)
    for i, p in enumerate(perm):
        inv[p] = i
    return inv


def transpose_cpu(x: Tensor, perm: Sequence[int]) -> Tensor:
    """
    Permute the axes of `x`: output axis `i` is input axis `perm[i]`.

    Raises
    ------
    InvalidArgumentError
        If `perm` is not a permutation of `range(x.rank)`.
    """
    perm = _check_perm(perm, x.rank)
    new_shape = tuple(x.shape[p] for p in perm)
    new_strides = compute_strides(new_shape)

    vals = x.values()
    out = np.empty(x.size, dtype=storage_dtype(x.dtype))
    for i in range(x.size):
        loc = x.index_to_loc(i)
        new_loc = [loc[p] for p in perm]
        out[loc_to_index(new_loc, new_strides)] = vals[i]
    return Tensor.make(new_shape, out, x.dtype)
