"""
CPU reference kernel for top-K selection over a flattened tensor.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np

from ...domain._dtype import DType
from ...domain._errors import InvalidArgumentError
from ..tensor._tensor import Tensor, storage_dtype


def top_k_cpu(x: Tensor, k: int) -> Tuple[Tensor, Tensor]:
    """
    Largest `k` elements of `x` and their linear indices.

    Every element is paired with its linear index and the pairs are stably
    sorted by value, descending, so equal values keep input order.

    Parameters
    ----------
    x : Tensor
        Input of any rank; it is treated as flat.
    k : int
        Number of elements to keep, `0 < k <= x.size`.

    Returns
    -------
    tuple[Tensor, Tensor]
        `(values, indices)`: rank-1 tensors of length `k`; values keep the
        input dtype, indices are int32.

    Raises
    ------
    InvalidArgumentError
        If `k` is out of range.
    """
    if isinstance(k, bool) or int(k) != k or not 0 < k <= x.size:
        raise InvalidArgumentError(
            f"k must satisfy 0 < k <= {x.size}, got k={k!r}"
        )
    k = int(k)
    pairs = list(enumerate(x.values().tolist()))
    pairs.sort(key=lambda p: p[1], reverse=True)
    top = pairs[:k]

    values = np.asarray([v for _, v in top], dtype=storage_dtype(x.dtype))
    indices = np.asarray([i for i, _ in top], dtype=np.int32)
    return (
        Tensor.make((k,), values, x.dtype),
        Tensor.make((k,), indices, DType.INT32),
    )
