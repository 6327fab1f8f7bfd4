"""
Convolution and pooling geometry.

This module derives the read-only `Conv2DInfo` record consumed by every
convolution and pooling kernel from an input shape, a filter shape, strides
and a padding mode.

Tensor layout
-------------
- activations: NHWC `(batch, height, width, channels)`
- conv filters: `(filter_height, filter_width, in_channels, out_channels)`
- depthwise filters: `(filter_height, filter_width, in_channels, multiplier)`

Padding modes
-------------
- `"same"`: output is `ceil(in / stride)`; the total padding needed is split
  with the smaller half on top/left.
- `"valid"`: no padding; output is `ceil((in - filter + 1) / stride)`.
- `int p`: symmetric padding `p`; output is
  `(in - filter + 2p) / stride + 1` rounded by `dim_rounding_mode`.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union

from .._errors import InvalidArgumentError, ShapeMismatchError

PadType = Union[str, int]


def _pair(v: Union[int, Sequence[int]]) -> Tuple[int, int]:
    """Normalize an integer or pair into a `(height, width)` 2-tuple."""
    if isinstance(v, int):
        return (v, v)
    h, w = v
    return (int(h), int(w))


@dataclass(frozen=True)
class PadInfo:
    """Amount of implicit zero padding on each side of the spatial plane."""

    top: int
    bottom: int
    left: int
    right: int


@dataclass(frozen=True)
class Conv2DInfo:
    """
    Immutable geometry of one convolution or pooling call.

    Created once per call from the input shape, filter shape, strides and
    padding mode; kernels only read it.
    """

    batch_size: int
    in_height: int
    in_width: int
    in_channels: int
    out_height: int
    out_width: int
    out_channels: int
    filter_height: int
    filter_width: int
    stride_height: int
    stride_width: int
    pad_info: PadInfo
    in_shape: Tuple[int, int, int, int]
    out_shape: Tuple[int, int, int, int]
    filter_shape: Tuple[int, int, int, int]

    @property
    def pad_top(self) -> int:
        return self.pad_info.top

    @property
    def pad_left(self) -> int:
        return self.pad_info.left


def _round(value: float, mode: str) -> int:
    if mode == "floor":
        return math.floor(value)
    if mode == "ceil":
        return math.ceil(value)
    if mode == "round":
        return int(round(value))
    raise InvalidArgumentError(
        f"Unknown dim_rounding_mode '{mode}'. Expected 'floor', 'ceil' or 'round'."
    )


def _pad_and_out_info(
    pad: PadType,
    in_height: int,
    in_width: int,
    stride_height: int,
    stride_width: int,
    filter_height: int,
    filter_width: int,
    dim_rounding_mode: str,
) -> Tuple[PadInfo, int, int]:
    if isinstance(pad, bool):
        raise InvalidArgumentError(f"Unknown padding parameter: {pad!r}")
    if isinstance(pad, int):
        if pad < 0:
            raise InvalidArgumentError(f"padding must be non-negative, got {pad}")
        out_height = _round(
            (in_height - filter_height + 2 * pad) / stride_height + 1,
            dim_rounding_mode,
        )
        out_width = _round(
            (in_width - filter_width + 2 * pad) / stride_width + 1,
            dim_rounding_mode,
        )
        return PadInfo(pad, pad, pad, pad), out_height, out_width

    if pad == "same":
        out_height = math.ceil(in_height / stride_height)
        out_width = math.ceil(in_width / stride_width)
        pad_along_height = max(
            0, (out_height - 1) * stride_height + filter_height - in_height
        )
        pad_along_width = max(
            0, (out_width - 1) * stride_width + filter_width - in_width
        )
        top = pad_along_height // 2
        left = pad_along_width // 2
        info = PadInfo(top, pad_along_height - top, left, pad_along_width - left)
        return info, out_height, out_width

    if pad == "valid":
        out_height = math.ceil((in_height - filter_height + 1) / stride_height)
        out_width = math.ceil((in_width - filter_width + 1) / stride_width)
        return PadInfo(0, 0, 0, 0), out_height, out_width

    raise InvalidArgumentError(f"Unknown padding parameter: {pad!r}")


def compute_conv2d_info(
    in_shape: Sequence[int],
    filter_shape: Sequence[int],
    strides: Union[int, Sequence[int]],
    pad: PadType,
    dim_rounding_mode: str = "floor",
    depthwise: bool = False,
) -> Conv2DInfo:
    """
    Derive the geometry of a 2D convolution.

    Parameters
    ----------
    in_shape : Sequence[int]
        Input shape `(batch, height, width, in_channels)`.
    filter_shape : Sequence[int]
        Filter shape `(fH, fW, in_channels, out_channels)`, or
        `(fH, fW, in_channels, multiplier)` when `depthwise` is True.
    strides : int or Sequence[int]
        Stride, scalar or `(stride_height, stride_width)`.
    pad : "same", "valid" or int
        Padding mode.
    dim_rounding_mode : str, optional
        Rounding for the numeric padding mode ("floor", "ceil" or "round").
    depthwise : bool, optional
        If True, `out_channels = in_channels * multiplier`.

    Returns
    -------
    Conv2DInfo
        The derived geometry.

    Raises
    ------
    ShapeMismatchError
        If either shape is not rank 4 or the channel counts disagree.
    InvalidArgumentError
        If a filter size or stride is non-positive, the padding mode is
        unknown, or the derived output is empty.
    """
    if len(in_shape) != 4:
        raise ShapeMismatchError(
            f"Conv input must be rank 4 (NHWC), got shape {tuple(in_shape)}.",
            in_shape,
        )
    if len(filter_shape) != 4:
        raise ShapeMismatchError(
            f"Conv filter must be rank 4, got shape {tuple(filter_shape)}.",
            filter_shape,
        )
    batch_size, in_height, in_width, in_channels = (int(d) for d in in_shape)
    filter_height, filter_width, filter_in_channels, filter_out = (
        int(d) for d in filter_shape
    )
    if filter_in_channels != in_channels:
        raise ShapeMismatchError(
            f"Input channels ({in_channels}) must match the filter's input "
            f"channels ({filter_in_channels}).",
            in_shape,
            filter_shape,
        )
    stride_height, stride_width = _pair(strides)
    if filter_height <= 0 or filter_width <= 0 or filter_out <= 0:
        raise InvalidArgumentError(
            f"filter dimensions must be positive, got {tuple(filter_shape)}"
        )
    if stride_height <= 0 or stride_width <= 0:
        raise InvalidArgumentError(
            f"strides must be positive, got ({stride_height}, {stride_width})"
        )

    pad_info, out_height, out_width = _pad_and_out_info(
        pad,
        in_height,
        in_width,
        stride_height,
        stride_width,
        filter_height,
        filter_width,
        dim_rounding_mode,
    )
    if out_height <= 0 or out_width <= 0:
        raise InvalidArgumentError(
            f"Convolution output would be empty ({out_height}x{out_width}) for "
            f"input {tuple(in_shape)} and filter {tuple(filter_shape)}."
        )

    out_channels = in_channels * filter_out if depthwise else filter_out
    return Conv2DInfo(
        batch_size=batch_size,
        in_height=in_height,
        in_width=in_width,
        in_channels=in_channels,
        out_height=out_height,
        out_width=out_width,
        out_channels=out_channels,
        filter_height=filter_height,
        filter_width=filter_width,
        stride_height=stride_height,
        stride_width=stride_width,
        pad_info=pad_info,
        in_shape=(batch_size, in_height, in_width, in_channels),
        out_shape=(batch_size, out_height, out_width, out_channels),
        filter_shape=(filter_height, filter_width, filter_in_channels, filter_out),
    )


def compute_depthwise_conv2d_info(
    in_shape: Sequence[int],
    filter_shape: Sequence[int],
    strides: Union[int, Sequence[int]],
    pad: PadType,
    dim_rounding_mode: str = "floor",
) -> Conv2DInfo:
    """Geometry of a depthwise convolution; see `compute_conv2d_info`."""
    return compute_conv2d_info(
        in_shape, filter_shape, strides, pad, dim_rounding_mode, depthwise=True
    )


def compute_pool2d_info(
    in_shape: Sequence[int],
    filter_size: Union[int, Sequence[int]],
    strides: Optional[Union[int, Sequence[int]]],
    pad: PadType,
    dim_rounding_mode: str = "floor",
) -> Conv2DInfo:
    """
    Derive the geometry of a 2D pooling window.

    Pooling is modelled as a convolution with filter shape
    `(fH, fW, C, C)`, so `out_channels == in_channels`. If `strides` is None
    it defaults to the window size.
    """
    if len(in_shape) != 4:
        raise ShapeMismatchError(
            f"Pool input must be rank 4 (NHWC), got shape {tuple(in_shape)}.",
            in_shape,
        )
    filter_height, filter_width = _pair(filter_size)
    if filter_height <= 0 or filter_width <= 0:
        raise InvalidArgumentError(
            f"pool window must be positive, got ({filter_height}, {filter_width})"
        )
    in_channels = int(in_shape[3])
    filter_shape = (filter_height, filter_width, in_channels, in_channels)
    return compute_conv2d_info(
        in_shape,
        filter_shape,
        (filter_height, filter_width) if strides is None else strides,
        pad,
        dim_rounding_mode,
    )
