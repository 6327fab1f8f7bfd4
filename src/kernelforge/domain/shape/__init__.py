from ._indexing import compute_strides, index_to_loc, loc_to_index, size_from_shape
from ._broadcast import (
    assert_and_get_broadcast_shape,
    compute_broadcast_shape,
    get_broadcast_dims,
)
from ._axis import (
    assert_axes_are_inner_most_dims,
    axes_are_inner_most_dims,
    compute_out_and_reduce_shapes,
    parse_axis_param,
)
from ._concat import assert_valid_slice, compute_concat_out_shape
from ._conv_geometry import (
    Conv2DInfo,
    PadInfo,
    compute_conv2d_info,
    compute_depthwise_conv2d_info,
    compute_pool2d_info,
)

__all__ = [
    "compute_strides",
    "index_to_loc",
    "loc_to_index",
    "size_from_shape",
    "assert_and_get_broadcast_shape",
    "compute_broadcast_shape",
    "get_broadcast_dims",
    "assert_axes_are_inner_most_dims",
    "axes_are_inner_most_dims",
    "compute_out_and_reduce_shapes",
    "parse_axis_param",
    "assert_valid_slice",
    "compute_concat_out_shape",
    "Conv2DInfo",
    "PadInfo",
    "compute_conv2d_info",
    "compute_depthwise_conv2d_info",
    "compute_pool2d_info",
]
