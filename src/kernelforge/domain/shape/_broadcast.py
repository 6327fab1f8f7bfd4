"""
Broadcast-shape algebra.

Shapes are right-aligned; each aligned pair of dimensions must either match
or contain a 1. Missing leading dimensions behave as 1.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

from .._errors import ShapeMismatchError


def compute_broadcast_shape(
    shape_a: Sequence[int], shape_b: Sequence[int]
) -> Tuple[int, ...]:
    """
    Compute the broadcast shape of two operands.

    Parameters
    ----------
    shape_a, shape_b : Sequence[int]
        Operand shapes.

    Returns
    -------
    tuple[int, ...]
        Output shape, `max(dA, dB)` per aligned dimension.

    Raises
    ------
    ShapeMismatchError
        If an aligned pair satisfies neither `dA == dB` nor `dA == 1` nor
        `dB == 1`.
    """
    rank = max(len(shape_a), len(shape_b))
    result: List[int] = []
    for i in range(rank):
        a = shape_a[len(shape_a) - i - 1] if i < len(shape_a) else 1
        b = shape_b[len(shape_b) - i - 1] if i < len(shape_b) else 1
        if a != b and a != 1 and b != 1:
            raise ShapeMismatchError(
                f"Operands could not be broadcast together with shapes "
                f"{tuple(shape_a)} and {tuple(shape_b)}.",
                shape_a,
                shape_b,
            )
        result.insert(0, max(a, b))
    return tuple(result)


assert_and_get_broadcast_shape = compute_broadcast_shape


def get_broadcast_dims(
    in_shape: Sequence[int], out_shape: Sequence[int]
) -> List[int]:
    """
    Axes along which an input is virtually replicated to reach `out_shape`.

    Returned axes are expressed in the input's own coordinates, i.e. they
    index into the trailing `len(in_shape)` components of an output
    multi-index. Those components are zeroed when mapping an output position
    back to the input buffer.
    """
    in_rank = len(in_shape)
    dims: List[int] = []
    for i in range(in_rank):
        dim = in_rank - 1 - i
        a = in_shape[dim]
        b = out_shape[len(out_shape) - 1 - i] if i < len(out_shape) else 1
        if b > 1 and a == 1:
            dims.insert(0, dim)
    return dims
