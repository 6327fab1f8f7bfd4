"""
CPU reference kernel for batch-normalization inference.

`mean`, `variance`, `scale` and `offset` may be lower rank than `x`; they are
broadcast by modulo indexing over the flattened buffer, which lines up with
the trailing (channel) axis of `x`.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from ...domain._dtype import DType
from ..tensor._tensor import Tensor


def batch_normalization_cpu(
    x: Tensor,
    mean: Tensor,
    variance: Tensor,
    variance_epsilon: float,
    scale: Optional[Tensor] = None,
    offset: Optional[Tensor] = None,
    rank: Optional[int] = None,
) -> Tensor:
    """
    Compute `offset + (x - mean) * scale / sqrt(variance + epsilon)`.

    Parameters
    ----------
    x : Tensor
        Input tensor.
    mean, variance : Tensor
        Statistics, same rank as `x` or rank 1.
    variance_epsilon : float
        Small constant added to the variance.
    scale, offset : Optional[Tensor]
        Optional affine parameters; default to 1 and 0.
    rank : Optional[int]
        If given, `x` must have exactly this rank.

    Returns
    -------
    Tensor
        float32 tensor with the shape of `x`.
    """
    if rank is not None:
        x.expect_rank(rank, "x")

    def _broadcast(t: Optional[Tensor], default: float, index: np.ndarray) -> np.ndarray:
        if t is None:
            return np.full(index.shape, default, dtype=np.float64)
        vals = t.values().astype(np.float64)
        return vals[index % vals.size]

    index = np.arange(x.size)
    x_vals = x.values().astype(np.float64)
    mean_vals = _broadcast(mean, 0.0, index)
    var_vals = _broadcast(variance, 1.0, index)
    scale_vals = _broadcast(scale, 1.0, index)
    offset_vals = _broadcast(offset, 0.0, index)

    with np.errstate(all="ignore"):
        out = offset_vals + (x_vals - mean_vals) * scale_vals / np.sqrt(
            var_vals + variance_epsilon
        )
    return Tensor.make(x.shape, out.astype(np.float32), DType.FLOAT32)
