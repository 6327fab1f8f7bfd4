"""
CPU-based naive Conv2D kernels for KernelForge.

This module provides reference implementations of 2D convolution forward,
input-gradient, filter-gradient and bias-gradient passes, plus depthwise
convolution. The kernels are written as explicit nested loops over index
ranges to keep the padding/stride arithmetic visible; they are the
correctness baseline every other backend must reproduce.

Design goals
------------
- Serve as the ground truth for convolution semantics
- Never materialize a zero-padded copy of the input: out-of-range reads are
  avoided by clipping each window to the valid interval, which is equivalent
  to zero padding
- Validate every shape against the `Conv2DInfo` before allocating output

Non-goals
---------
- High performance (no im2col, GEMM, or vectorization)
- Dilation or groups (other than depthwise)

Tensor layout
-------------
- x, dy, y: NHWC `(batch, height, width, channels)`
- filter: `(filter_height, filter_width, in_channels, out_channels)`
- depthwise filter: `(filter_height, filter_width, in_channels, multiplier)`
"""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

from ...domain._dtype import DType
from ...domain._errors import ShapeMismatchError
from ...domain.shape._conv_geometry import Conv2DInfo
from ..tensor._tensor import Tensor


def _ceil_div(a: int, b: int) -> int:
    """`ceil(a / b)` for integers, correct for negative `a`."""
    return -((-a) // b)


def _check_shape(name: str, actual: Sequence[int], expected: Sequence[int]) -> None:
    if tuple(actual) != tuple(expected):
        raise ShapeMismatchError(
            f"{name} shape {tuple(actual)} does not match the convolution "
            f"geometry, expected {tuple(expected)}.",
            actual,
            expected,
        )


def conv2d_cpu(
    x: Tensor, filter: Tensor, bias: Optional[Tensor], conv_info: Conv2DInfo
) -> Tensor:
    """
    Compute the forward pass of a 2D convolution (CPU).

    For every output location `(b, yR, yC, d2)` the nominal filter footprint
    starts at `(yR * stride_height - pad_top, yC * stride_width - pad_left)`
    and is clipped against the input bounds; the dot product runs over the
    clipped window and every input channel.

    Parameters
    ----------
    x : Tensor
        Input of shape `conv_info.in_shape`.
    filter : Tensor
        Filter of shape `conv_info.filter_shape`.
    bias : Optional[Tensor]
        Optional rank-1 bias of length `out_channels`.
    conv_info : Conv2DInfo
        Geometry from `compute_conv2d_info`.

    Returns
    -------
    Tensor
        float32 output of shape `conv_info.out_shape`.

    Raises
    ------
    ShapeMismatchError
        If an operand does not match the geometry.
    """
    _check_shape("x", x.shape, conv_info.in_shape)
    _check_shape("filter", filter.shape, conv_info.filter_shape)
    if bias is not None:
        _check_shape("bias", bias.shape, (conv_info.out_channels,))

    in_h, in_w, in_c = conv_info.in_height, conv_info.in_width, conv_info.in_channels
    out_h, out_w, out_c = (
        conv_info.out_height,
        conv_info.out_width,
        conv_info.out_channels,
    )
    f_h, f_w = conv_info.filter_height, conv_info.filter_width
    s_h, s_w = conv_info.stride_height, conv_info.stride_width
    pad_top, pad_left = conv_info.pad_top, conv_info.pad_left

    x_vals = x.values().tolist()
    w_vals = filter.values().tolist()
    b_vals = None if bias is None else bias.values().tolist()

    y = [0.0] * (conv_info.batch_size * out_h * out_w * out_c)
    for b in range(conv_info.batch_size):
        for d2 in range(out_c):
            for y_r in range(out_h):
                x_r_corner = y_r * s_h - pad_top
                x_r_min = max(0, x_r_corner)
                x_r_max = min(in_h, f_h + x_r_corner)
                for y_c in range(out_w):
                    x_c_corner = y_c * s_w - pad_left
                    x_c_min = max(0, x_c_corner)
                    x_c_max = min(in_w, f_w + x_c_corner)

                    dot = 0.0
                    for x_r in range(x_r_min, x_r_max):
                        w_r = x_r - x_r_corner
                        for x_c in range(x_c_min, x_c_max):
                            w_c = x_c - x_c_corner
                            x_base = ((b * in_h + x_r) * in_w + x_c) * in_c
                            w_base = (w_r * f_w + w_c) * in_c * out_c + d2
                            for d1 in range(in_c):
                                dot += x_vals[x_base + d1] * w_vals[w_base + d1 * out_c]
                    if b_vals is not None:
                        dot += b_vals[d2]
                    y[((b * out_h + y_r) * out_w + y_c) * out_c + d2] = dot
    return Tensor.make(conv_info.out_shape, np.asarray(y, dtype=np.float32), DType.FLOAT32)


def conv2d_der_input_cpu(dy: Tensor, filter: Tensor, conv_info: Conv2DInfo) -> Tensor:
    """
    Gradient of a 2D convolution with respect to its input (CPU).

    This is the transposed correlation of `dy` with the spatially reflected
    filter: effective padding becomes `filter - 1 - pad` and the filter is
    read at `(filter_height - 1 - wR, filter_width - 1 - wC)`. For each input
    position the range of contributing output rows/columns is derived by
    ceil-division so only valid `dy` elements are visited.

    Parameters
    ----------
    dy : Tensor
        Output gradient of shape `conv_info.out_shape`.
    filter : Tensor
        Filter of shape `conv_info.filter_shape`.
    conv_info : Conv2DInfo
        Geometry used in the forward pass.

    Returns
    -------
    Tensor
        float32 gradient of shape `conv_info.in_shape`.
    """
    _check_shape("dy", dy.shape, conv_info.out_shape)
    _check_shape("filter", filter.shape, conv_info.filter_shape)

    in_h, in_w, in_c = conv_info.in_height, conv_info.in_width, conv_info.in_channels
    out_h, out_w, out_c = (
        conv_info.out_height,
        conv_info.out_width,
        conv_info.out_channels,
    )
    f_h, f_w = conv_info.filter_height, conv_info.filter_width
    s_h, s_w = conv_info.stride_height, conv_info.stride_width
    top_pad = f_h - 1 - conv_info.pad_top
    left_pad = f_w - 1 - conv_info.pad_left

    dy_vals = dy.values().tolist()
    w_vals = filter.values().tolist()

    dx = [0.0] * (conv_info.batch_size * in_h * in_w * in_c)
    for b in range(conv_info.batch_size):
        for d1 in range(in_c):
            for x_r in range(in_h):
                x_r_corner = x_r - top_pad
                y_r_min = max(0, _ceil_div(x_r_corner, s_h))
                y_r_max = min(out_h, _ceil_div(f_h + x_r_corner, s_h))
                for x_c in range(in_w):
                    x_c_corner = x_c - left_pad
                    y_c_min = max(0, _ceil_div(x_c_corner, s_w))
                    y_c_max = min(out_w, _ceil_div(f_w + x_c_corner, s_w))

                    dot = 0.0
                    for y_r in range(y_r_min, y_r_max):
                        w_r = y_r * s_h - x_r_corner
                        for y_c in range(y_c_min, y_c_max):
                            w_c = y_c * s_w - x_c_corner
                            dy_base = ((b * out_h + y_r) * out_w + y_c) * out_c
                            w_base = (
                                ((f_h - 1 - w_r) * f_w + (f_w - 1 - w_c)) * in_c + d1
                            ) * out_c
                            for d2 in range(out_c):
                                dot += dy_vals[dy_base + d2] * w_vals[w_base + d2]
                    dx[((b * in_h + x_r) * in_w + x_c) * in_c + d1] = dot
    return Tensor.make(conv_info.in_shape, np.asarray(dx, dtype=np.float32), DType.FLOAT32)


def conv2d_der_filter_cpu(x: Tensor, dy: Tensor, conv_info: Conv2DInfo) -> Tensor:
    """
    Gradient of a 2D convolution with respect to its filter (CPU).

    For each filter tap `(wR, wC)` the output rows/columns whose footprint
    places that tap inside the input are
    `[ceil((pad - w) / stride), ceil((in + pad - w) / stride))`, clipped to
    the output extent. The product `x * dy` is reduced over the batch and
    that range.

    Returns
    -------
    Tensor
        float32 gradient of shape `conv_info.filter_shape`.
    """
    _check_shape("x", x.shape, conv_info.in_shape)
    _check_shape("dy", dy.shape, conv_info.out_shape)

    in_h, in_w, in_c = conv_info.in_height, conv_info.in_width, conv_info.in_channels
    out_h, out_w, out_c = (
        conv_info.out_height,
        conv_info.out_width,
        conv_info.out_channels,
    )
    f_h, f_w = conv_info.filter_height, conv_info.filter_width
    s_h, s_w = conv_info.stride_height, conv_info.stride_width
    pad_top, pad_left = conv_info.pad_top, conv_info.pad_left

    x_vals = x.values().tolist()
    dy_vals = dy.values().tolist()

    dw = [0.0] * (f_h * f_w * in_c * out_c)
    for w_r in range(f_h):
        y_r_min = max(0, _ceil_div(pad_top - w_r, s_h))
        y_r_max = min(out_h, _ceil_div(in_h + pad_top - w_r, s_h))
        for w_c in range(f_w):
            y_c_min = max(0, _ceil_div(pad_left - w_c, s_w))
            y_c_max = min(out_w, _ceil_div(in_w + pad_left - w_c, s_w))
            for d1 in range(in_c):
                for d2 in range(out_c):
                    dot = 0.0
                    for b in range(conv_info.batch_size):
                        for y_r in range(y_r_min, y_r_max):
                            x_r = w_r + y_r * s_h - pad_top
                            for y_c in range(y_c_min, y_c_max):
                                x_c = w_c + y_c * s_w - pad_left
                                dot += (
                                    x_vals[((b * in_h + x_r) * in_w + x_c) * in_c + d1]
                                    * dy_vals[((b * out_h + y_r) * out_w + y_c) * out_c + d2]
                                )
                    dw[((w_r * f_w + w_c) * in_c + d1) * out_c + d2] = dot
    return Tensor.make(
        conv_info.filter_shape, np.asarray(dw, dtype=np.float32), DType.FLOAT32
    )


def conv2d_der_bias_cpu(dy: Tensor) -> Tensor:
    """
    Gradient of a 2D convolution with respect to its bias (CPU).

    Sums `dy` over batch and spatial axes for each output channel.

    Returns
    -------
    Tensor
        float32 rank-1 tensor of length `out_channels`.
    """
    dy.expect_rank(4, "dy")
    batch_size, num_rows, num_cols, out_depth = dy.shape
    dy_vals = dy.values().tolist()

    values = [0.0] * out_depth
    for d2 in range(out_depth):
        total = 0.0
        for b in range(batch_size):
            for r in range(num_rows):
                for c in range(num_cols):
                    total += dy_vals[((b * num_rows + r) * num_cols + c) * out_depth + d2]
        values[d2] = total
    return Tensor.make((out_depth,), np.asarray(values, dtype=np.float32), DType.FLOAT32)


def depthwise_conv2d_cpu(x: Tensor, filter: Tensor, conv_info: Conv2DInfo) -> Tensor:
    """
    Depthwise 2D convolution (CPU).

    Identical window geometry to `conv2d_cpu`, but each input channel `d1` is
    convolved independently with `multiplier` filters; the result for filter
    `q` lands in output channel `d1 * multiplier + q`.

    Parameters
    ----------
    x : Tensor
        Input of shape `conv_info.in_shape`.
    filter : Tensor
        Filter of shape `(fH, fW, in_channels, multiplier)`.
    conv_info : Conv2DInfo
        Geometry from `compute_depthwise_conv2d_info`.

    Returns
    -------
    Tensor
        float32 output of shape `conv_info.out_shape`.
    """
    _check_shape("x", x.shape, conv_info.in_shape)
    _check_shape("filter", filter.shape, conv_info.filter_shape)

    in_h, in_w, in_c = conv_info.in_height, conv_info.in_width, conv_info.in_channels
    out_h, out_w, out_c = (
        conv_info.out_height,
        conv_info.out_width,
        conv_info.out_channels,
    )
    f_h, f_w = conv_info.filter_height, conv_info.filter_width
    s_h, s_w = conv_info.stride_height, conv_info.stride_width
    pad_top, pad_left = conv_info.pad_top, conv_info.pad_left
    ch_mul = out_c // in_c
    if ch_mul * in_c != out_c or filter.shape[3] != ch_mul:
        raise ShapeMismatchError(
            f"Depthwise output channels ({out_c}) must equal input channels "
            f"({in_c}) times the filter multiplier ({filter.shape[3]}).",
            filter.shape,
            conv_info.out_shape,
        )

    x_vals = x.values().tolist()
    w_vals = filter.values().tolist()

    y = [0.0] * (conv_info.batch_size * out_h * out_w * out_c)
    for b in range(conv_info.batch_size):
        for d1 in range(in_c):
            for y_r in range(out_h):
                x_r_corner = y_r * s_h - pad_top
                x_r_min = max(0, x_r_corner)
                x_r_max = min(in_h, f_h + x_r_corner)
                for y_c in range(out_w):
                    x_c_corner = y_c * s_w - pad_left
                    x_c_min = max(0, x_c_corner)
                    x_c_max = min(in_w, f_w + x_c_corner)
                    for q in range(ch_mul):
                        dot = 0.0
                        for x_r in range(x_r_min, x_r_max):
                            w_r = x_r - x_r_corner
                            for x_c in range(x_c_min, x_c_max):
                                w_c = x_c - x_c_corner
                                pixel = x_vals[((b * in_h + x_r) * in_w + x_c) * in_c + d1]
                                weight = w_vals[((w_r * f_w + w_c) * in_c + d1) * ch_mul + q]
                                dot += pixel * weight
                        y[((b * out_h + y_r) * out_w + y_c) * out_c + d1 * ch_mul + q] = dot
    return Tensor.make(conv_info.out_shape, np.asarray(y, dtype=np.float32), DType.FLOAT32)
