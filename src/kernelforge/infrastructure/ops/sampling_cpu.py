"""
CPU reference kernels for sampling and one-hot encoding.

Randomness comes from an explicit `numpy.random.Generator` built from the
caller's seed inside the call; nothing is stored in module or process state,
so identical arguments always yield identical samples.
"""

from __future__ import annotations

import warnings
from typing import Optional

import numpy as np

from ...domain._dtype import DType
from ...domain._errors import InvalidArgumentError
from ..tensor._tensor import Tensor


def multinomial_cpu(
    probabilities: Tensor,
    num_samples: int,
    seed: int,
    probability_atol: Optional[float] = None,
) -> Tensor:
    """
    Draw event indices from per-row categorical distributions.

    For each batch row a cumulative distribution over all but the last event
    is built (the last event is implicit). A generator seeded with `seed` is
    created for the row and `num_samples` uniform values in `[0, 1)` are
    drawn; each sample is the first event whose cumulative probability
    exceeds the draw, or the last event if none does.

    Parameters
    ----------
    probabilities : Tensor
        Rank-2 `(batch, num_events)` probabilities. A single-event row
        always yields event 0.
    num_samples : int
        Samples per row, at least 1.
    seed : int
        Seed for the per-row generator.
    probability_atol : Optional[float]
        If given, rows whose probabilities do not sum to 1 within this
        tolerance trigger a `RuntimeWarning`.

    Returns
    -------
    Tensor
        int32 tensor of shape `(batch, num_samples)`.

    Raises
    ------
    InvalidArgumentError
        If `num_samples < 1` or `seed` is negative.

    Notes
    -----
    The generator is re-created from `seed` for every row, so rows with
    identical probabilities produce identical samples.
    """
    probabilities.expect_rank(2, "probabilities")
    batch_size, num_events = probabilities.shape
    if isinstance(num_samples, bool) or int(num_samples) != num_samples or num_samples < 1:
        raise InvalidArgumentError(f"num_samples must be >= 1, got {num_samples!r}")
    if int(seed) != seed or seed < 0:
        raise InvalidArgumentError(f"seed must be a non-negative integer, got {seed!r}")
    num_samples = int(num_samples)

    prob_vals = probabilities.values()
    if probability_atol is not None:
        row_sums = prob_vals.reshape(batch_size, num_events).astype(np.float64).sum(axis=1)
        bad = np.flatnonzero(np.abs(row_sums - 1.0) > probability_atol)
        if bad.size:
            warnings.warn(
                f"multinomial: probabilities of rows {bad.tolist()} do not sum "
                f"to 1 (sums {row_sums[bad].tolist()}); the last event absorbs "
                "the remainder.",
                RuntimeWarning,
                stacklevel=3,
            )

    res = np.zeros((batch_size, num_samples), dtype=np.int32)
    for b in range(batch_size):
        offset = b * num_events
        # the last event is implicit
        cdf = np.zeros(num_events - 1, dtype=np.float32)
        if num_events > 1:
            cdf[0] = prob_vals[offset]
        for event in range(1, num_events - 1):
            cdf[event] = cdf[event - 1] + prob_vals[offset + event]
        cdf_vals = cdf.tolist()

        rng = np.random.default_rng(int(seed))
        draws = rng.random(num_samples).tolist()
        for sample_id, r in enumerate(draws):
            res[b, sample_id] = len(cdf_vals)
            for event, c in enumerate(cdf_vals):
                if r < c:
                    res[b, sample_id] = event
                    break
    return Tensor.make((batch_size, num_samples), res, DType.INT32)


def one_hot_cpu(
    indices: Tensor, depth: int, on_value: float = 1.0, off_value: float = 0.0
) -> Tensor:
    """
    One-hot encode a rank-1 tensor of indices.

    Fills an `(n, depth)` float32 buffer with `off_value`, then writes
    `on_value` at `(i, indices[i])` for each row.

    Raises
    ------
    InvalidArgumentError
        If `depth < 1` or an index is not an integer in `[0, depth)`.
    """
    indices.expect_rank(1, "indices")
    if isinstance(depth, bool) or int(depth) != depth or depth < 1:
        raise InvalidArgumentError(f"depth must be a positive integer, got {depth!r}")
    depth = int(depth)
    idx = indices.values().tolist()
    for i, v in enumerate(idx):
        if v != v or not 0 <= v < depth or int(v) != v:
            raise InvalidArgumentError(
                f"one_hot index {v!r} at position {i} is outside [0, {depth})"
            )

    res = np.full(indices.size * depth, off_value, dtype=np.float32)
    for event, v in enumerate(idx):
        res[event * depth + int(v)] = on_value
    return Tensor.make((indices.size, depth), res, DType.FLOAT32)
