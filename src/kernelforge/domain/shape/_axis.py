"""
Reduction-axis algebra.

Reductions in KernelForge always run over a contiguous trailing run of axes,
so the inner loop of every reduction is a plain scan over
`reduce_size = product(reduced dims)` consecutive elements.
"""

from __future__ import annotations

import numbers
from typing import List, Optional, Sequence, Tuple, Union

from .._errors import InvalidArgumentError


def parse_axis_param(
    axis: Optional[Union[int, Sequence[int]]], shape: Sequence[int]
) -> List[int]:
    """
    Normalize an axis argument into a sorted list of non-negative axes.

    Parameters
    ----------
    axis : None, int or Sequence[int]
        `None` selects every axis. Negative axes count from the end.
    shape : Sequence[int]
        Shape of the tensor being reduced.

    Raises
    ------
    InvalidArgumentError
        If an axis is out of range or repeated.
    """
    rank = len(shape)
    if axis is None:
        return list(range(rank))
    if isinstance(axis, numbers.Integral):
        axis = [axis]
    axes = [int(a) for a in axis]
    normalized = []
    for a in axes:
        if a < -rank or a >= rank:
            raise InvalidArgumentError(
                f"axis {a} out of bounds for tensor of rank {rank}"
            )
        normalized.append(a + rank if a < 0 else a)
    if len(set(normalized)) != len(normalized):
        raise InvalidArgumentError(f"repeated axis in {axes}")
    return sorted(normalized)


def axes_are_inner_most_dims(axes: Sequence[int], rank: int) -> bool:
    """True if `axes` is exactly the trailing run `rank-len(axes) .. rank-1`."""
    for i, a in enumerate(sorted(axes)):
        if a != rank - len(axes) + i:
            return False
    return True


def assert_axes_are_inner_most_dims(op: str, axes: Sequence[int], rank: int) -> None:
    """
    Raises
    ------
    InvalidArgumentError
        If the reduced axes are not the innermost axes of the tensor.
    """
    if not axes_are_inner_most_dims(axes, rank):
        raise InvalidArgumentError(
            f"{op}() supports only inner-most axes for now. "
            f"Got axes {list(axes)} and rank-{rank} input."
        )


def compute_out_and_reduce_shapes(
    shape: Sequence[int], axes: Sequence[int]
) -> Tuple[Tuple[int, ...], Tuple[int, ...]]:
    """
    Partition `shape` into the kept (output) and reduced dimensions.

    Returns
    -------
    tuple[tuple[int, ...], tuple[int, ...]]
        `(out_shape, reduce_shape)`.
    """
    axis_set = set(axes)
    out_shape = tuple(d for i, d in enumerate(shape) if i not in axis_set)
    reduce_shape = tuple(shape[a] for a in axes)
    return out_shape, reduce_shape
