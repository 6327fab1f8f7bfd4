"""
CPU reference kernel for 2D matrix multiplication.

A direct triple loop with per-operand orientation: a TRANSPOSED operand is read
at `(j, i)` instead of `(i, j)`, so no transposed copy is materialized.
Blocking or tiling is a performance concern for other backends only.
"""

from __future__ import annotations

from enum import Enum

import numpy as np

from ...domain._dtype import DType
from ...domain._errors import ShapeMismatchError
from ..tensor._tensor import Tensor


class MatrixOrientation(Enum):
    """How a matmul operand is read."""

    REGULAR = "regular"
    TRANSPOSED = "transposed"


def mat_mul_cpu(
    a: Tensor,
    b: Tensor,
    a_orientation: MatrixOrientation = MatrixOrientation.REGULAR,
    b_orientation: MatrixOrientation = MatrixOrientation.REGULAR,
) -> Tensor:
    """
    Compute `op(a) @ op(b)` for rank-2 operands.

    Parameters
    ----------
    a, b : Tensor
        Rank-2 operands.
    a_orientation, b_orientation : MatrixOrientation
        Whether each operand is read as-is or transposed.

    Returns
    -------
    Tensor
        float32 tensor of shape `(left_dim, right_dim)`.

    Raises
    ------
    ShapeMismatchError
        If an operand is not rank 2 or the shared dimensions disagree.
    """
    a.expect_rank(2, "a")
    b.expect_rank(2, "b")
    a_regular = MatrixOrientation(a_orientation) is MatrixOrientation.REGULAR
    b_regular = MatrixOrientation(b_orientation) is MatrixOrientation.REGULAR

    shared_dim = a.shape[1] if a_regular else a.shape[0]
    left_dim = a.shape[0] if a_regular else a.shape[1]
    b_shared = b.shape[0] if b_regular else b.shape[1]
    right_dim = b.shape[1] if b_regular else b.shape[0]
    if shared_dim != b_shared:
        raise ShapeMismatchError(
            f"Error in matMul: inner shapes ({shared_dim}) and ({b_shared}) of "
            f"tensors with shapes {a.shape} and {b.shape} and orientations "
            f"{a_orientation}, {b_orientation} must match.",
            a.shape,
            b.shape,
        )

    a_vals = a.values().tolist()
    b_vals = b.values().tolist()
    a_cols = a.shape[1]
    b_cols = b.shape[1]

    # flat offset of element (i, k) of op(a) and (k, j) of op(b)
    if a_regular:
        a_row_step, a_k_step = a_cols, 1
    else:
        a_row_step, a_k_step = 1, a_cols
    if b_regular:
        b_k_step, b_col_step = b_cols, 1
    else:
        b_k_step, b_col_step = 1, b_cols

    out = [0.0] * (left_dim * right_dim)
    index = 0
    for i in range(left_dim):
        for j in range(right_dim):
            total = 0.0
            for k in range(shared_dim):
                total += (
                    a_vals[i * a_row_step + k * a_k_step]
                    * b_vals[k * b_k_step + j * b_col_step]
                )
            out[index] = total
            index += 1
    return Tensor.make(
        (left_dim, right_dim), np.asarray(out, dtype=np.float32), DType.FLOAT32
    )
