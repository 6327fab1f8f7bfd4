"""
Output-shape rules for concatenation and slicing.
"""

from __future__ import annotations

from typing import Sequence, Tuple

from .._errors import InvalidArgumentError, ShapeMismatchError


def compute_concat_out_shape(
    shape_a: Sequence[int], shape_b: Sequence[int], axis: int
) -> Tuple[int, ...]:
    """
    Shape of `concat(a, b, axis)`.

    Both operands must share their rank and every dimension except `axis`;
    the output's `axis` dimension is the sum of the two.

    Raises
    ------
    ShapeMismatchError
        On a rank mismatch or a mismatching non-axis dimension.
    InvalidArgumentError
        If `axis` is outside `[0, rank)`.
    """
    if len(shape_a) != len(shape_b):
        raise ShapeMismatchError(
            f"Error in concat: rank of x1 ({len(shape_a)}) and x2 "
            f"({len(shape_b)}) must be the same.",
            shape_a,
            shape_b,
        )
    if axis < 0 or axis >= len(shape_a):
        raise InvalidArgumentError(
            f"axis {axis} out of bounds for concat of rank {len(shape_a)}"
        )
    out = list(shape_a)
    for i in range(len(shape_a)):
        if i == axis:
            out[i] = shape_a[i] + shape_b[i]
        elif shape_a[i] != shape_b[i]:
            raise ShapeMismatchError(
                f"Error in concat: shape ({tuple(shape_a)}) does not match "
                f"({tuple(shape_b)}) along the non-concatenated axis {i}.",
                shape_a,
                shape_b,
            )
    return tuple(out)


def assert_valid_slice(
    shape: Sequence[int], begin: Sequence[int], size: Sequence[int]
) -> None:
    """
    Validate that `[begin, begin + size)` lies inside `shape` on every axis.

    Raises
    ------
    InvalidArgumentError
        If the lengths disagree with the rank, `begin` is negative, `size` is
        non-positive, or the slice overruns the tensor.
    """
    rank = len(shape)
    if len(begin) != rank or len(size) != rank:
        raise InvalidArgumentError(
            f"slice begin {tuple(begin)} and size {tuple(size)} must both "
            f"have length {rank}"
        )
    for d in range(rank):
        if begin[d] < 0 or size[d] <= 0 or begin[d] + size[d] > shape[d]:
            raise InvalidArgumentError(
                f"slice begin {tuple(begin)} + size {tuple(size)} is out of "
                f"bounds for shape {tuple(shape)}"
            )
