"""
CPU reference kernel for bilinear resizing of rank-3 `(height, width, depth)`
images.
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from ...domain._dtype import DType
from ...domain._errors import InvalidArgumentError
from ..tensor._tensor import Tensor


def resize_bilinear3d_cpu(
    x: Tensor, new_shape_2d: Sequence[int], align_corners: bool = False
) -> Tensor:
    """
    Bilinearly resize the two leading axes of a rank-3 tensor.

    Each output pixel `(r, c)` maps to the fractional source coordinate
    `(in_h * r / out_h, in_w * c / out_w)`. With `align_corners`, both sizes
    are replaced by `size - 1` so the corner pixels of input and output line
    up. The four neighbouring source pixels (the ceil side clamped to the last
    row/column) are interpolated along columns, then rows.

    Parameters
    ----------
    x : Tensor
        Rank-3 input `(height, width, depth)`.
    new_shape_2d : Sequence[int]
        Target `(new_height, new_width)`; both must be positive.
    align_corners : bool, optional
        Rescale by `dim - 1` instead of `dim`. Defaults to False.

    Returns
    -------
    Tensor
        float32 tensor of shape `(new_height, new_width, depth)`.
    """
    x.expect_rank(3, "x")
    if len(new_shape_2d) != 2 or any(int(s) <= 0 for s in new_shape_2d):
        raise InvalidArgumentError(
            f"new_shape_2d must be two positive sizes, got {tuple(new_shape_2d)}"
        )
    in_h, in_w, depth = x.shape
    new_h, new_w = (int(s) for s in new_shape_2d)

    eff_in_h, eff_in_w = (in_h - 1, in_w - 1) if align_corners else (in_h, in_w)
    eff_out_h, eff_out_w = (new_h - 1, new_w - 1) if align_corners else (new_h, new_w)

    x_vals = x.values().tolist()
    out = [0.0] * (new_h * new_w * depth)
    for r in range(new_h):
        src_r = eff_in_h * r / eff_out_h if eff_out_h > 0 else 0.0
        r_floor = math.floor(src_r)
        r_ceil = min(in_h - 1, math.ceil(src_r))
        row_frac = src_r - r_floor
        for c in range(new_w):
            src_c = eff_in_w * c / eff_out_w if eff_out_w > 0 else 0.0
            c_floor = math.floor(src_c)
            c_ceil = min(in_w - 1, math.ceil(src_c))
            col_frac = src_c - c_floor
            for d in range(depth):
                top_left = x_vals[(r_floor * in_w + c_floor) * depth + d]
                bottom_left = x_vals[(r_ceil * in_w + c_floor) * depth + d]
                top_right = x_vals[(r_floor * in_w + c_ceil) * depth + d]
                bottom_right = x_vals[(r_ceil * in_w + c_ceil) * depth + d]

                top = top_left + (top_right - top_left) * col_frac
                bottom = bottom_left + (bottom_right - bottom_left) * col_frac
                out[(r * new_w + c) * depth + d] = top + (bottom - top) * row_frac
    return Tensor.make(
        (new_h, new_w, depth), np.asarray(out, dtype=np.float32), DType.FLOAT32
    )
