"""
CPU reference implementations for 2D pooling operations.

This module provides **naive, readable, and correct** implementations of 2D
pooling for tensors in **NHWC** layout. These functions serve as:

- A correctness reference for other backends
- The numerical ground truth for unit tests

Implemented pooling variants
----------------------------
- MaxPool2D / MinPool2D / AvgPool2D (forward)
- MaxPool2D backward

Design notes
------------
- Windows share the clipped-interval geometry of the convolution kernels:
  no padded copy of the input is built.
- Max starts from -inf and min from +inf, so padded positions never win.
- Avg accumulates `pixel / (filter_height * filter_width)`; the divisor is
  the full window area, so padding counts as zeros.
- Any NaN in a window makes that output NaN and ends the scan (fail-fast,
  matching the reduction kernels).
"""

from __future__ import annotations

import math
from typing import List

import numpy as np

from ...domain._dtype import DType
from ...domain._errors import InvalidArgumentError, ShapeMismatchError
from ...domain.shape._conv_geometry import Conv2DInfo
from ..tensor._tensor import Tensor

POOL_TYPES = ("max", "min", "avg")


def _check_in_shape(name: str, t: Tensor, expected) -> None:
    if tuple(t.shape) != tuple(expected):
        raise ShapeMismatchError(
            f"{name} shape {t.shape} does not match the pooling geometry, "
            f"expected {tuple(expected)}.",
            t.shape,
            expected,
        )


def pool2d_cpu(x: Tensor, conv_info: Conv2DInfo, pool_type: str) -> Tensor:
    """
    Naive 2D pooling forward pass (CPU), NHWC.

    Parameters
    ----------
    x : Tensor
        Input of shape `conv_info.in_shape`.
    conv_info : Conv2DInfo
        Geometry from `compute_pool2d_info`.
    pool_type : str
        One of "max", "min" or "avg".

    Returns
    -------
    Tensor
        float32 output of shape `conv_info.out_shape`.

    Raises
    ------
    InvalidArgumentError
        If `pool_type` is unknown.
    ShapeMismatchError
        If `x` does not match the geometry.
    """
    if pool_type not in POOL_TYPES:
        raise InvalidArgumentError(
            f"Unknown pool type '{pool_type}'. Expected one of {POOL_TYPES}."
        )
    _check_in_shape("x", x, conv_info.in_shape)

    in_h, in_w, channels = conv_info.in_height, conv_info.in_width, conv_info.in_channels
    out_h, out_w = conv_info.out_height, conv_info.out_width
    f_h, f_w = conv_info.filter_height, conv_info.filter_width
    s_h, s_w = conv_info.stride_height, conv_info.stride_width
    pad_top, pad_left = conv_info.pad_top, conv_info.pad_left
    window_area = f_h * f_w
    is_max = pool_type == "max"
    is_min = pool_type == "min"

    x_vals = x.values().tolist()
    y = [0.0] * (conv_info.batch_size * out_h * out_w * channels)
    for b in range(conv_info.batch_size):
        for d in range(channels):
            for y_r in range(out_h):
                x_r_corner = y_r * s_h - pad_top
                x_r_min = max(0, x_r_corner)
                x_r_max = min(in_h, f_h + x_r_corner)
                for y_c in range(out_w):
                    x_c_corner = y_c * s_w - pad_left
                    x_c_min = max(0, x_c_corner)
                    x_c_max = min(in_w, f_w + x_c_corner)

                    min_max = -math.inf if is_max else math.inf
                    avg = 0.0
                    saw_nan = False
                    for x_r in range(x_r_min, x_r_max):
                        for x_c in range(x_c_min, x_c_max):
                            pixel = x_vals[((b * in_h + x_r) * in_w + x_c) * channels + d]
                            if math.isnan(pixel):
                                saw_nan = True
                                break
                            if (is_max and pixel > min_max) or (is_min and pixel < min_max):
                                min_max = pixel
                            elif pool_type == "avg":
                                avg += pixel / window_area
                        if saw_nan:
                            break
                    if saw_nan:
                        value = math.nan
                    else:
                        value = avg if pool_type == "avg" else min_max
                    y[((b * out_h + y_r) * out_w + y_c) * channels + d] = value
    return Tensor.make(conv_info.out_shape, np.asarray(y, dtype=np.float32), DType.FLOAT32)


def max_pool_cpu(x: Tensor, conv_info: Conv2DInfo) -> Tensor:
    return pool2d_cpu(x, conv_info, "max")


def min_pool_cpu(x: Tensor, conv_info: Conv2DInfo) -> Tensor:
    return pool2d_cpu(x, conv_info, "min")


def avg_pool_cpu(x: Tensor, conv_info: Conv2DInfo) -> Tensor:
    return pool2d_cpu(x, conv_info, "avg")


def max_pool_positions_cpu(x: Tensor, conv_info: Conv2DInfo) -> List[int]:
    """
    Flat intra-window offset of each window's maximum.

    For every forward output position, records `wR * filter_width + wC` of
    the first strictly greatest element of its clipped window, or -1 if no
    element beats -inf (empty or all -inf/NaN window).

    Returns
    -------
    list[int]
        Offsets laid out like the forward output (NHWC, flat).
    """
    in_h, in_w, channels = conv_info.in_height, conv_info.in_width, conv_info.in_channels
    out_h, out_w = conv_info.out_height, conv_info.out_width
    f_h, f_w = conv_info.filter_height, conv_info.filter_width
    s_h, s_w = conv_info.stride_height, conv_info.stride_width
    pad_top, pad_left = conv_info.pad_top, conv_info.pad_left

    x_vals = x.values().tolist()
    positions = [0] * (conv_info.batch_size * out_h * out_w * channels)
    for b in range(conv_info.batch_size):
        for d in range(channels):
            for y_r in range(out_h):
                x_r_corner = y_r * s_h - pad_top
                x_r_min = max(0, x_r_corner)
                x_r_max = min(in_h, f_h + x_r_corner)
                for y_c in range(out_w):
                    x_c_corner = y_c * s_w - pad_left
                    x_c_min = max(0, x_c_corner)
                    x_c_max = min(in_w, f_w + x_c_corner)

                    max_value = -math.inf
                    max_position = -1
                    for x_r in range(x_r_min, x_r_max):
                        w_r = x_r - x_r_corner
                        for x_c in range(x_c_min, x_c_max):
                            w_c = x_c - x_c_corner
                            pixel = x_vals[((b * in_h + x_r) * in_w + x_c) * channels + d]
                            if pixel > max_value:
                                max_value = pixel
                                max_position = w_r * f_w + w_c
                    positions[((b * out_h + y_r) * out_w + y_c) * channels + d] = max_position
    return positions


def max_pool_backprop_cpu(dy: Tensor, x: Tensor, conv_info: Conv2DInfo) -> Tensor:
    """
    Naive MaxPool2D backward pass (CPU), NHWC.

    The argmax of every forward window is recomputed with
    `max_pool_positions_cpu`. Then, for every input position, each filter
    tap that maps it onto an integral, in-range `dy` coordinate is visited,
    and `dy` is accumulated only where the recorded maximum sits at that tap.
    This gathers into `dx` instead of scattering from `dy`, so no
    output-to-input adjacency table is needed.

    Parameters
    ----------
    dy : Tensor
        Output gradient of shape `conv_info.out_shape`.
    x : Tensor
        Forward input of shape `conv_info.in_shape`.
    conv_info : Conv2DInfo
        Geometry used in the forward pass.

    Returns
    -------
    Tensor
        float32 gradient of shape `conv_info.in_shape`.
    """
    _check_in_shape("x", x, conv_info.in_shape)
    _check_in_shape("dy", dy, conv_info.out_shape)

    max_positions = max_pool_positions_cpu(x, conv_info)
    in_h, in_w, channels = conv_info.in_height, conv_info.in_width, conv_info.in_channels
    out_h, out_w = conv_info.out_height, conv_info.out_width
    f_h, f_w = conv_info.filter_height, conv_info.filter_width
    s_h, s_w = conv_info.stride_height, conv_info.stride_width
    pad_top = f_h - 1 - conv_info.pad_top
    pad_left = f_w - 1 - conv_info.pad_left
    last_position = f_h * f_w - 1

    dy_vals = dy.values().tolist()
    dx = [0.0] * (conv_info.batch_size * in_h * in_w * channels)
    for b in range(conv_info.batch_size):
        for d in range(channels):
            for dx_r in range(in_h):
                for dx_c in range(in_w):
                    dy_r_corner = dx_r - pad_top
                    dy_c_corner = dx_c - pad_left
                    dot = 0.0
                    for w_r in range(f_h):
                        dy_r, rem_r = divmod(dy_r_corner + w_r, s_h)
                        if rem_r != 0 or dy_r < 0 or dy_r >= out_h:
                            continue
                        for w_c in range(f_w):
                            dy_c, rem_c = divmod(dy_c_corner + w_c, s_w)
                            if rem_c != 0 or dy_c < 0 or dy_c >= out_w:
                                continue
                            out_index = ((b * out_h + dy_r) * out_w + dy_c) * channels + d
                            max_pos = last_position - max_positions[out_index]
                            if max_pos != w_r * f_w + w_c:
                                continue
                            dot += dy_vals[out_index]
                    dx[((b * in_h + dx_r) * in_w + dx_c) * channels + d] = dot
    return Tensor.make(conv_info.in_shape, np.asarray(dx, dtype=np.float32), DType.FLOAT32)
